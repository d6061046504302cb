"""Repository functions for evaluations.

The (test_case_id, prompt_version_id) pair is unique in the schema; writes go
through a single INSERT ... ON CONFLICT DO UPDATE so a stored row is replaced
in place and never transiently missing.
"""

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from prompteval.errors import NotFound
from prompteval.models import Evaluation, PromptVersion, TestCase
from prompteval.models._types import new_id, utcnow

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _dialect_insert(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Evaluation upsert not supported on dialect '{dialect}'") from None


async def lock_pair(db: AsyncSession, test_case_id: str, prompt_version_id: str) -> None:
    """
    Share-lock the test case and version rows (FOR SHARE, a no-op on SQLite) so
    neither can be deleted before the caller commits. Raises NotFound if either
    is already gone.
    """
    for column, ident, kind in (
        (TestCase.test_case_id, test_case_id, "TestCase"),
        (PromptVersion.version_id, prompt_version_id, "PromptVersion"),
    ):
        found = await db.scalar(
            select(column).where(column == ident).with_for_update(read=True)
        )
        if found is None:
            raise NotFound(kind, ident)


async def get_evaluation(
    db: AsyncSession, test_case_id: str, prompt_version_id: str
) -> Evaluation | None:
    result = await db.execute(
        select(Evaluation).where(
            Evaluation.test_case_id == test_case_id,
            Evaluation.prompt_version_id == prompt_version_id,
        )
    )
    return result.scalar_one_or_none()


async def upsert_evaluation(
    db: AsyncSession,
    test_case_id: str,
    prompt_version_id: str,
    output: str,
    rendered_prompt: str | None = None,
    model: str | None = None,
    request_hash: str | None = None,
) -> Evaluation:
    """Insert the pair's evaluation or replace the stored one. Caller owns the transaction."""
    now = utcnow()
    insert = _dialect_insert(db)
    stmt = insert(Evaluation).values(
        evaluation_id=new_id(),
        test_case_id=test_case_id,
        prompt_version_id=prompt_version_id,
        rendered_prompt=rendered_prompt,
        output=output,
        model=model,
        request_hash=request_hash,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["test_case_id", "prompt_version_id"],
        set_={
            "rendered_prompt": stmt.excluded.rendered_prompt,
            "output": stmt.excluded.output,
            "model": stmt.excluded.model,
            "request_hash": stmt.excluded.request_hash,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    await db.execute(stmt)

    result = await db.execute(
        select(Evaluation)
        .where(
            Evaluation.test_case_id == test_case_id,
            Evaluation.prompt_version_id == prompt_version_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def list_evaluations(
    db: AsyncSession, test_case_ids: list[str], version_ids: list[str]
) -> list[Evaluation]:
    """Stored evaluations for any of the test cases against any of the versions."""
    if not test_case_ids or not version_ids:
        return []
    result = await db.execute(
        select(Evaluation).where(
            Evaluation.test_case_id.in_(test_case_ids),
            Evaluation.prompt_version_id.in_(version_ids),
        )
    )
    return list(result.scalars().all())
