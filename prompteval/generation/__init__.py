"""Text-generation collaborators."""

from prompteval.generation.providers import (
    AnthropicGenerator,
    Generator,
    ModelRouter,
    OpenAIGenerator,
    build_generator,
)

__all__ = ["Generator", "OpenAIGenerator", "AnthropicGenerator", "ModelRouter", "build_generator"]
