"""Render, run, batch and compare endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from prompteval.api.deps import RunnerDep
from prompteval.database import get_db
from prompteval.engine.comparison import compare as assemble_comparison
from prompteval.engine.resolver import resolve
from prompteval.schemas.evaluation import (
    BatchRequest,
    BatchResponse,
    ComparisonResponse,
    EvaluationResponse,
    PairStateResponse,
    RunRequest,
)
from prompteval.schemas.resolution import RenderRequest, Resolution
from prompteval.storage.validation import validate_input_mapping

router = APIRouter()

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("/render", response_model=Resolution)
async def render(body: RenderRequest):
    """Preview a template against an input without calling any model."""
    return resolve(body.template, validate_input_mapping(body.input))


@router.post("/evaluations/run", response_model=EvaluationResponse)
async def run_evaluation(body: RunRequest, runner: RunnerDep):
    """
    Evaluate one test case against one version.
    Returns the stored evaluation unless force_rerun is set.
    """
    return await runner.run(
        body.test_case_id,
        body.prompt_version_id,
        model=body.model,
        force_rerun=body.force_rerun,
    )


@router.get("/evaluations/state", response_model=PairStateResponse)
async def get_pair_state(
    runner: RunnerDep,
    test_case_id: Annotated[str, Query()],
    prompt_version_id: Annotated[str, Query()],
):
    state, last_error = await runner.state(test_case_id, prompt_version_id)
    return PairStateResponse(
        test_case_id=test_case_id,
        prompt_version_id=prompt_version_id,
        state=state,
        last_error=last_error,
    )


@router.post("/prompts/{prompt_id}/evaluations/batch", response_model=BatchResponse)
async def run_batch(prompt_id: str, body: BatchRequest, runner: RunnerDep):
    """Run every test case against both versions; failures are reported per pair."""
    report = await runner.run_batch(
        prompt_id,
        body.base_version_id,
        body.compare_version_id,
        model=body.model,
        force_rerun=body.force_rerun,
    )
    return BatchResponse(
        prompt_id=prompt_id,
        succeeded=report.count("succeeded"),
        skipped=report.count("skipped"),
        failed=report.count("failed"),
        outcomes=report.outcomes,
    )


@router.get("/prompts/{prompt_id}/compare", response_model=ComparisonResponse)
async def compare(
    prompt_id: str,
    db: DbDep,
    base: Annotated[str, Query(description="Base version id")],
    compare: Annotated[str, Query(description="Compare version id")],
):
    return await assemble_comparison(db, prompt_id, base, compare)
