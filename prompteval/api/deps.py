"""Shared API dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from prompteval.config import settings
from prompteval.database import async_session_maker
from prompteval.engine.runner import EvaluationRunner
from prompteval.generation import build_generator


@lru_cache
def get_runner() -> EvaluationRunner:
    """Process-wide runner; pair locks only work if every request shares it."""
    return EvaluationRunner(
        session_maker=async_session_maker,
        generator=build_generator(settings),
        default_model=settings.default_model,
        concurrency=settings.generation_concurrency,
    )


RunnerDep = Annotated[EvaluationRunner, Depends(get_runner)]
