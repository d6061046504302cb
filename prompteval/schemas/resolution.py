"""Render preview schemas."""

from typing import Any

from pydantic import BaseModel, Field


class Resolution(BaseModel):
    """Rendered template plus variable diagnostics."""

    rendered: str
    variables: list[str] = Field(default_factory=list)
    missing_in_input: list[str] = Field(default_factory=list)
    missing_in_template: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every placeholder was substituted."""
        return not self.missing_in_input


class RenderRequest(BaseModel):
    """POST /v1/render request."""

    template: str
    input: dict[str, Any] = Field(default_factory=dict)
