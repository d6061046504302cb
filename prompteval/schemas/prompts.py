"""Project, prompt and version schemas."""

from datetime import datetime

from pydantic import BaseModel, computed_field

from prompteval.engine.resolver import extract_variables


class CreateProjectRequest(BaseModel):
    """POST /v1/projects request."""

    name: str


class ProjectResponse(BaseModel):
    model_config = {"from_attributes": True}

    project_id: str
    name: str
    created_at: datetime


class CreatePromptRequest(BaseModel):
    """POST /v1/projects/{id}/prompts request."""

    title: str


class UpdatePromptRequest(BaseModel):
    """PATCH /v1/prompts/{id} request - title is the only mutable field."""

    title: str


class PromptResponse(BaseModel):
    model_config = {"from_attributes": True}

    prompt_id: str
    project_id: str
    title: str
    created_at: datetime


class CreateVersionRequest(BaseModel):
    """POST /v1/prompts/{id}/versions request."""

    template: str


class VersionResponse(BaseModel):
    model_config = {"from_attributes": True}

    version_id: str
    prompt_id: str
    sequence: int
    template: str
    created_at: datetime

    @computed_field
    @property
    def variables(self) -> list[str]:
        """Placeholder names the template expects."""
        return extract_variables(self.template)
