"""Database models."""

from prompteval.models.project import Project, Prompt
from prompteval.models.prompt_version import PromptVersion
from prompteval.models.test_case import TestCase
from prompteval.models.evaluation import Evaluation

__all__ = ["Project", "Prompt", "PromptVersion", "TestCase", "Evaluation"]
