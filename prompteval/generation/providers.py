"""Provider adapters implementing generate(prompt, model) -> text.

Every failure (missing key, provider error, timeout, empty response) is raised
as GenerationFailed. SDK-level retries are disabled; retry policy belongs to
the caller.
"""

import logging
from typing import Protocol

import anthropic
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from prompteval.config import Settings
from prompteval.errors import GenerationFailed

logger = logging.getLogger(__name__)


class Generator(Protocol):
    async def generate(self, prompt: str, model: str) -> str: ...


class OpenAIGenerator:
    """Chat completions with a single user message."""

    def __init__(self, api_key: str | None, timeout: float = 60.0):
        self._client = (
            AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0) if api_key else None
        )

    async def generate(self, prompt: str, model: str) -> str:
        if self._client is None:
            raise GenerationFailed("OpenAI key missing. Set OPENAI_API_KEY.")
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APITimeoutError as e:
            raise GenerationFailed(f"OpenAI timeout: {e}") from e
        except openai.OpenAIError as e:
            raise GenerationFailed(f"OpenAI error: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise GenerationFailed("OpenAI returned no content")
        if response.usage is not None:
            logger.debug(
                "OpenAI %s usage: input=%s output=%s",
                model,
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )
        return response.choices[0].message.content


class AnthropicGenerator:
    """Messages API with a single user turn; text blocks are concatenated."""

    def __init__(self, api_key: str | None, timeout: float = 60.0, max_tokens: int = 1024):
        self._client = (
            AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0) if api_key else None
        )
        self._max_tokens = max_tokens

    async def generate(self, prompt: str, model: str) -> str:
        if self._client is None:
            raise GenerationFailed("Anthropic key missing. Set ANTHROPIC_API_KEY.")
        try:
            message = await self._client.messages.create(
                model=model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError as e:
            raise GenerationFailed(f"Anthropic timeout: {e}") from e
        except anthropic.AnthropicError as e:
            raise GenerationFailed(f"Anthropic error: {e}") from e

        text = "".join(block.text for block in message.content if block.type == "text")
        if not text:
            raise GenerationFailed("Anthropic returned no text content")
        logger.debug(
            "Anthropic %s usage: input=%s output=%s",
            model,
            message.usage.input_tokens,
            message.usage.output_tokens,
        )
        return text


class ModelRouter:
    """Routes on the model name: claude* goes to Anthropic, everything else to OpenAI."""

    def __init__(self, openai_generator: Generator, anthropic_generator: Generator):
        self._openai = openai_generator
        self._anthropic = anthropic_generator

    def route(self, model: str) -> Generator:
        if "claude" in model.lower():
            return self._anthropic
        return self._openai

    async def generate(self, prompt: str, model: str) -> str:
        return await self.route(model).generate(prompt, model)


def build_generator(settings: Settings) -> ModelRouter:
    """Generator wired from settings."""
    return ModelRouter(
        OpenAIGenerator(settings.openai_api_key, timeout=settings.generation_timeout_s),
        AnthropicGenerator(
            settings.anthropic_api_key,
            timeout=settings.generation_timeout_s,
            max_tokens=settings.anthropic_max_tokens,
        ),
    )
