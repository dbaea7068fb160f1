"""LLM client wrapper using PydanticAI + Anthropic.

Uses streaming by default: a multi-page site is a long completion, and a
silent connection gets cut by idle timeouts on some proxies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic_ai.models.anthropic import AnthropicModelSettings

from sitesmith.config import Settings
from sitesmith.metrics import llm_tokens_total

if TYPE_CHECKING:
    from pydantic_ai import Agent
    from pydantic_ai.models import Model
    from pydantic_ai.usage import RunUsage

logger = structlog.get_logger()

_OutputT = TypeVar("_OutputT")


async def _run_streamed(
    agent: Agent[None, _OutputT],
    prompt: str,
    model_settings: AnthropicModelSettings,
) -> tuple[_OutputT, RunUsage]:
    """Run a PydanticAI agent in streaming mode and return the final output."""
    async with agent.run_stream(prompt, model_settings=model_settings) as stream:
        async for _chunk in stream.stream_output():
            pass
        output: _OutputT = await stream.get_output()
        return output, stream.usage()


class LLMClient:
    """Wrapper around the Anthropic API for HTML generation."""

    def __init__(self, settings: Settings | None = None, model: Model | None = None) -> None:
        self.settings = settings or Settings()
        self._model = model

    @property
    def model(self) -> Model:
        if self._model is None:
            from pydantic_ai.models.anthropic import AnthropicModel
            from pydantic_ai.providers.anthropic import AnthropicProvider

            provider = AnthropicProvider(api_key=self.settings.anthropic_api_key)
            self._model = AnthropicModel(
                self.settings.llm_model,
                provider=provider,
            )
        return self._model

    @property
    def is_available(self) -> bool:
        return self._model is not None or bool(self.settings.anthropic_api_key)

    def _build_model_settings(
        self,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AnthropicModelSettings:
        temp = temperature if temperature is not None else self.settings.llm_temperature
        tokens = max_tokens if max_tokens is not None else self.settings.llm_max_tokens
        return AnthropicModelSettings(
            temperature=temp,
            max_tokens=tokens,
            anthropic_cache_instructions=True,
        )

    def _log_and_record_usage(self, usage: RunUsage) -> None:
        logger.info(
            "LLM response",
            model=self.settings.llm_model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
        )
        model_label = self.settings.llm_model
        llm_tokens_total.labels(model=model_label, token_type="request").inc(
            usage.input_tokens or 0
        )
        llm_tokens_total.labels(model=model_label, token_type="response").inc(
            usage.output_tokens or 0
        )

    async def generate_text(
        self,
        prompt: str,
        system: str = "",
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a plain text response."""
        from pydantic_ai import Agent

        agent: Agent[None, str] = Agent(
            self.model,
            output_type=str,
            system_prompt=system or "You are a helpful assistant.",
        )
        model_settings = self._build_model_settings(temperature, max_tokens)

        logger.debug("LLM request", model=self.settings.llm_model, streaming=True)
        output, usage = await _run_streamed(agent, prompt, model_settings)
        self._log_and_record_usage(usage)
        return output
