"""Project, prompt and version endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prompteval.api.deps import RunnerDep
from prompteval.database import get_db
from prompteval.schemas.prompts import (
    CreateProjectRequest,
    CreatePromptRequest,
    CreateVersionRequest,
    ProjectResponse,
    PromptResponse,
    UpdatePromptRequest,
    VersionResponse,
)
from prompteval.storage import prompts as repo

router = APIRouter()

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(body: CreateProjectRequest, db: DbDep):
    project = await repo.create_project(db, body.name)
    await db.commit()
    return project


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, db: DbDep):
    """Delete a project and everything under it."""
    await repo.delete_project(db, project_id)
    await db.commit()


@router.post(
    "/projects/{project_id}/prompts",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_prompt(project_id: str, body: CreatePromptRequest, db: DbDep):
    prompt = await repo.create_prompt(db, project_id, body.title)
    await db.commit()
    return prompt


@router.get("/prompts/{prompt_id}", response_model=PromptResponse)
async def get_prompt(prompt_id: str, db: DbDep):
    return await repo.require_prompt(db, prompt_id)


@router.patch("/prompts/{prompt_id}", response_model=PromptResponse)
async def update_prompt(prompt_id: str, body: UpdatePromptRequest, db: DbDep):
    """Retitle a prompt."""
    prompt = await repo.update_prompt_title(db, prompt_id, body.title)
    await db.commit()
    return prompt


@router.post(
    "/prompts/{prompt_id}/versions",
    response_model=VersionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_version(prompt_id: str, body: CreateVersionRequest, db: DbDep):
    """Save an edit as a new immutable version."""
    version = await repo.create_version(db, prompt_id, body.template)
    await db.commit()
    return version


@router.get("/prompts/{prompt_id}/versions", response_model=list[VersionResponse])
async def list_versions(prompt_id: str, db: DbDep):
    """Versions oldest first."""
    return await repo.list_versions(db, prompt_id)


@router.get("/prompts/{prompt_id}/versions/latest", response_model=VersionResponse)
async def get_latest_version(prompt_id: str, db: DbDep):
    await repo.require_prompt(db, prompt_id)
    return await repo.get_latest_version(db, prompt_id)


@router.get("/versions/{version_id}", response_model=VersionResponse)
async def get_version(version_id: str, db: DbDep):
    return await repo.require_version(db, version_id)


@router.delete("/versions/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_version(version_id: str, db: DbDep, runner: RunnerDep):
    """Delete a version and its evaluations."""
    await repo.delete_version(db, version_id)
    await db.commit()
    runner.forget(prompt_version_id=version_id)
