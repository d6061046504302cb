"""Repository functions for projects, prompts and prompt versions."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prompteval.errors import NotFound, ValidationError
from prompteval.models import Evaluation, Project, Prompt, PromptVersion, TestCase
from prompteval.storage.validation import require_text

logger = logging.getLogger(__name__)


# --- Projects ---


async def create_project(db: AsyncSession, name: str) -> Project:
    project = Project(name=require_text(name, "name"))
    db.add(project)
    await db.flush()
    return project


async def get_project(db: AsyncSession, project_id: str) -> Project | None:
    return await db.get(Project, project_id)


async def delete_project(db: AsyncSession, project_id: str) -> None:
    """Delete a project with its prompts, versions, test cases and evaluations."""
    project = await get_project(db, project_id)
    if project is None:
        raise NotFound("Project", project_id)

    prompt_ids = select(Prompt.prompt_id).where(Prompt.project_id == project_id)
    version_ids = select(PromptVersion.version_id).where(PromptVersion.prompt_id.in_(prompt_ids))
    case_ids = select(TestCase.test_case_id).where(TestCase.prompt_id.in_(prompt_ids))

    for stmt in (
        delete(Evaluation).where(
            Evaluation.test_case_id.in_(case_ids) | Evaluation.prompt_version_id.in_(version_ids)
        ),
        delete(PromptVersion).where(PromptVersion.prompt_id.in_(prompt_ids)),
        delete(TestCase).where(TestCase.prompt_id.in_(prompt_ids)),
        delete(Prompt).where(Prompt.project_id == project_id),
    ):
        await db.execute(stmt.execution_options(synchronize_session=False))
    await db.delete(project)
    await db.flush()
    logger.info("Deleted project %s", project_id)


# --- Prompts ---


async def create_prompt(db: AsyncSession, project_id: str, title: str) -> Prompt:
    title = require_text(title, "title")
    if await get_project(db, project_id) is None:
        raise NotFound("Project", project_id)
    prompt = Prompt(project_id=project_id, title=title)
    db.add(prompt)
    await db.flush()
    return prompt


async def get_prompt(db: AsyncSession, prompt_id: str) -> Prompt | None:
    return await db.get(Prompt, prompt_id)


async def require_prompt(db: AsyncSession, prompt_id: str) -> Prompt:
    prompt = await get_prompt(db, prompt_id)
    if prompt is None:
        raise NotFound("Prompt", prompt_id)
    return prompt


async def update_prompt_title(db: AsyncSession, prompt_id: str, title: str) -> Prompt:
    title = require_text(title, "title")
    prompt = await require_prompt(db, prompt_id)
    prompt.title = title
    await db.flush()
    return prompt


# --- Versions ---


async def create_version(db: AsyncSession, prompt_id: str, template: str) -> PromptVersion:
    """
    Append a new immutable version with the next sequence number.
    The prompt row is locked (FOR UPDATE, a no-op on SQLite) so concurrent
    appends to one prompt get distinct sequence numbers.
    """
    if template is None or not template.strip():
        raise ValidationError("template must not be empty")

    result = await db.execute(
        select(Prompt).where(Prompt.prompt_id == prompt_id).with_for_update()
    )
    if result.scalar_one_or_none() is None:
        raise NotFound("Prompt", prompt_id)

    current = await db.scalar(
        select(func.max(PromptVersion.sequence)).where(PromptVersion.prompt_id == prompt_id)
    )
    version = PromptVersion(prompt_id=prompt_id, sequence=(current or 0) + 1, template=template)
    db.add(version)
    await db.flush()
    logger.info("Created version %s (#%d) of prompt %s", version.version_id, version.sequence, prompt_id)
    return version


async def get_version(db: AsyncSession, version_id: str) -> PromptVersion | None:
    return await db.get(PromptVersion, version_id)


async def require_version(db: AsyncSession, version_id: str) -> PromptVersion:
    version = await get_version(db, version_id)
    if version is None:
        raise NotFound("PromptVersion", version_id)
    return version


async def get_versions(db: AsyncSession, version_ids: list[str]) -> list[PromptVersion]:
    """Versions among the given ids that exist; unknown ids are skipped."""
    if not version_ids:
        return []
    result = await db.execute(
        select(PromptVersion).where(PromptVersion.version_id.in_(version_ids))
    )
    return list(result.scalars().all())


async def get_latest_version(db: AsyncSession, prompt_id: str) -> PromptVersion:
    """Version with the highest sequence number."""
    result = await db.execute(
        select(PromptVersion)
        .where(PromptVersion.prompt_id == prompt_id)
        .order_by(PromptVersion.sequence.desc())
        .limit(1)
    )
    version = result.scalar_one_or_none()
    if version is None:
        raise NotFound("PromptVersion", f"latest of prompt {prompt_id}")
    return version


async def list_versions(db: AsyncSession, prompt_id: str) -> list[PromptVersion]:
    """All versions of a prompt, oldest first."""
    await require_prompt(db, prompt_id)
    result = await db.execute(
        select(PromptVersion)
        .where(PromptVersion.prompt_id == prompt_id)
        .order_by(PromptVersion.sequence.asc())
    )
    return list(result.scalars().all())


async def delete_version(db: AsyncSession, version_id: str) -> None:
    """Delete a version and its evaluations. Test cases are untouched."""
    version = await require_version(db, version_id)
    await db.execute(
        delete(Evaluation)
        .where(Evaluation.prompt_version_id == version_id)
        .execution_options(synchronize_session=False)
    )
    await db.delete(version)
    await db.flush()
    logger.info("Deleted version %s of prompt %s", version_id, version.prompt_id)
