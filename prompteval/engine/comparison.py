"""Comparison assembler - side-by-side view of two versions over all test cases."""

from sqlalchemy.ext.asyncio import AsyncSession

from prompteval.engine.resolver import resolve
from prompteval.models import Evaluation, PromptVersion, TestCase
from prompteval.schemas.evaluation import (
    ComparisonResponse,
    ComparisonRow,
    ComparisonSummary,
    EvaluationCell,
    EvaluationResponse,
    NotYetRun,
)
from prompteval.schemas.test_cases import TestCaseResponse
from prompteval.storage import evaluations, prompts, test_cases
from prompteval.utils.canonical import request_hash


def _cell(
    evaluation: Evaluation | None, test_case: TestCase, version: PromptVersion | None
) -> EvaluationCell | NotYetRun:
    if evaluation is None:
        return NotYetRun()
    stale = False
    if version is not None and evaluation.request_hash:
        rendered = resolve(version.template, test_case.input_json).rendered
        stale = request_hash(rendered, evaluation.model) != evaluation.request_hash
    return EvaluationCell(evaluation=EvaluationResponse.model_validate(evaluation), stale=stale)


async def compare(
    db: AsyncSession, prompt_id: str, base_version_id: str, compare_version_id: str
) -> ComparisonResponse:
    """
    One row per test case of the prompt (creation order), each side holding the
    stored evaluation or a NotYetRun marker. Read-only; raises NotFound only
    for an unknown prompt.
    """
    cases = await test_cases.list_test_cases(db, prompt_id)
    version_ids = [base_version_id, compare_version_id]
    versions = {v.version_id: v for v in await prompts.get_versions(db, version_ids)}
    stored = await evaluations.list_evaluations(
        db, [tc.test_case_id for tc in cases], version_ids
    )
    by_pair = {(e.test_case_id, e.prompt_version_id): e for e in stored}

    rows = []
    for tc in cases:
        rows.append(
            ComparisonRow(
                test_case=TestCaseResponse.model_validate(tc),
                base=_cell(
                    by_pair.get((tc.test_case_id, base_version_id)),
                    tc,
                    versions.get(base_version_id),
                ),
                compare=_cell(
                    by_pair.get((tc.test_case_id, compare_version_id)),
                    tc,
                    versions.get(compare_version_id),
                ),
            )
        )

    summary = ComparisonSummary(
        rows=len(rows),
        base_completed=sum(1 for r in rows if isinstance(r.base, EvaluationCell)),
        compare_completed=sum(1 for r in rows if isinstance(r.compare, EvaluationCell)),
        changed=sum(1 for r in rows if r.changed),
    )
    return ComparisonResponse(
        prompt_id=prompt_id,
        base_version_id=base_version_id,
        compare_version_id=compare_version_id,
        summary=summary,
        rows=rows,
    )
