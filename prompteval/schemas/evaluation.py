"""Evaluation, batch and comparison schemas."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from prompteval.schemas.test_cases import TestCaseResponse


class RunState(str, Enum):
    """Lifecycle of one (test case, version) pair."""

    NOT_RUN = "not_run"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunRequest(BaseModel):
    """POST /v1/evaluations/run request."""

    test_case_id: str
    prompt_version_id: str
    model: str | None = None
    force_rerun: bool = False


class EvaluationResponse(BaseModel):
    model_config = {"from_attributes": True}

    evaluation_id: str
    test_case_id: str
    prompt_version_id: str
    rendered_prompt: str | None = None
    output: str
    model: str | None = None
    request_hash: str | None = None
    created_at: datetime
    updated_at: datetime


class PairStateResponse(BaseModel):
    test_case_id: str
    prompt_version_id: str
    state: RunState
    last_error: str | None = None


class BatchRequest(BaseModel):
    """POST /v1/prompts/{id}/evaluations/batch request."""

    base_version_id: str
    compare_version_id: str
    model: str | None = None
    force_rerun: bool = False


class PairOutcome(BaseModel):
    """Outcome of one pair inside a batch."""

    test_case_id: str
    prompt_version_id: str
    status: Literal["skipped", "succeeded", "failed"]
    reason: str | None = None

    @property
    def label(self) -> str:
        """skipped | succeeded | failed:<reason>."""
        if self.status == "failed":
            return f"failed:{self.reason}"
        return self.status


class BatchReport(BaseModel):
    prompt_id: str
    outcomes: list[PairOutcome] = Field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def has_failures(self) -> bool:
        return any(o.status == "failed" for o in self.outcomes)

    def as_mapping(self) -> dict[tuple[str, str], str]:
        """(test_case_id, prompt_version_id) -> outcome label."""
        return {(o.test_case_id, o.prompt_version_id): o.label for o in self.outcomes}


class BatchResponse(BaseModel):
    """Batch report as returned over HTTP."""

    prompt_id: str
    succeeded: int
    skipped: int
    failed: int
    outcomes: list[PairOutcome]


class NotYetRun(BaseModel):
    """Marker for a pair with no stored evaluation."""

    status: Literal["not_run"] = "not_run"


class EvaluationCell(BaseModel):
    """Stored evaluation for one side of a comparison row."""

    status: Literal["completed"] = "completed"
    evaluation: EvaluationResponse
    # Rendering the test case's current input against the version no longer
    # reproduces the stored request.
    stale: bool = False


ComparisonCell = Annotated[Union[EvaluationCell, NotYetRun], Field(discriminator="status")]


class ComparisonRow(BaseModel):
    test_case: TestCaseResponse
    base: ComparisonCell
    compare: ComparisonCell

    @property
    def changed(self) -> bool:
        """Both sides ran and produced different output."""
        if isinstance(self.base, EvaluationCell) and isinstance(self.compare, EvaluationCell):
            return self.base.evaluation.output != self.compare.evaluation.output
        return False


class ComparisonSummary(BaseModel):
    rows: int
    base_completed: int
    compare_completed: int
    changed: int


class ComparisonResponse(BaseModel):
    """GET /v1/prompts/{id}/compare response."""

    prompt_id: str
    base_version_id: str
    compare_version_id: str
    summary: ComparisonSummary
    rows: list[ComparisonRow]
