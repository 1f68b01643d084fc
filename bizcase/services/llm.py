# =============================================================================
# Multi-Provider LLM Abstraction
# =============================================================================
#
# A common `complete()` interface over the vendor SDKs used to draft the
# narrative sections of a report:
#
#   LLMProvider (Protocol)
#   ├── AnthropicProvider        — Claude via the native Anthropic SDK
#   ├── OpenAICompatibleProvider — OpenAI itself and Deepseek (custom base_url)
#   └── get_llm_provider(name)   — cached factory keyed by the form's
#                                  provider choice ("gpt4", "deepseek", "claude")
#
# Calls are single-shot: no retries beyond what the SDKs do internally.
#
# KEY API DIFFERENCE: Anthropic takes the system prompt as a top-level
# `system=` kwarg; OpenAI-style APIs take it as the first message.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from bizcase.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """One completion, in the same shape whichever vendor produced it."""

    content: str
    model: str             # as reported by the API, e.g. "gpt-4-0613"
    input_tokens: int
    output_tokens: int


class LLMProvider(Protocol):
    """What the writer agent needs from a chat model."""

    provider_type: str

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Send one chat request.

        `messages` holds "user"/"assistant" turns only; the system prompt
        travels separately because vendors place it differently. None for
        temperature or max_tokens means the configured default.
        """
        ...


class _SamplingDefaults:
    """Configured sampling parameters shared by both implementations."""

    provider_type = "unknown"

    def __init__(self, model: str) -> None:
        self._model = model
        self._temperature = settings.llm_temperature
        self._max_tokens = settings.llm_max_tokens

    def _sampling(
        self, temperature: float | None, max_tokens: int | None,
    ) -> tuple[float, int]:
        return (
            self._temperature if temperature is None else temperature,
            max_tokens or self._max_tokens,
        )

    def _log_usage(self, result: LLMResponse) -> LLMResponse:
        logger.info(
            "%s completion: model=%s, tokens in=%d out=%d",
            self.provider_type, result.model,
            result.input_tokens, result.output_tokens,
        )
        return result


# ---------------------------------------------------------------------------
# Claude
# ---------------------------------------------------------------------------


class AnthropicProvider(_SamplingDefaults):
    """Claude through the Messages API (system prompt as a keyword)."""

    provider_type = "anthropic"

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        from anthropic import AsyncAnthropic

        key = settings.anthropic_api_key if api_key is None else api_key
        if not key:
            raise ValueError(
                "No Anthropic API key configured. Set ANTHROPIC_API_KEY in .env"
            )
        super().__init__(model or settings.anthropic_model)
        self._client = AsyncAnthropic(api_key=key)
        logger.info("Claude client ready (model=%s)", self._model)

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        temperature, max_tokens = self._sampling(temperature, max_tokens)
        request: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system:
            request["system"] = system

        reply = await self._client.messages.create(**request)
        text = next(
            (block.text for block in reply.content if block.type == "text"), "",
        )
        return self._log_usage(LLMResponse(
            content=text,
            model=reply.model,
            input_tokens=reply.usage.input_tokens,
            output_tokens=reply.usage.output_tokens,
        ))


# ---------------------------------------------------------------------------
# OpenAI and Deepseek
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider(_SamplingDefaults):
    """
    Chat Completions API client.

    Deepseek speaks the same protocol, so it is this class pointed at
    settings.deepseek_base_url with its own key and model.
    """

    provider_type = "openai_compatible"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        key_env_name: str = "OPENAI_API_KEY",
    ) -> None:
        from openai import AsyncOpenAI

        key = settings.openai_api_key if api_key is None else api_key
        if not key:
            raise ValueError(
                f"No API key configured for OpenAI-compatible provider. "
                f"Set {key_env_name} in .env"
            )
        super().__init__(model or settings.openai_model)
        self._client = (
            AsyncOpenAI(api_key=key, base_url=base_url) if base_url
            else AsyncOpenAI(api_key=key)
        )
        logger.info(
            "OpenAI-compatible client ready (model=%s, endpoint=%s)",
            self._model, base_url or "default",
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        temperature, max_tokens = self._sampling(temperature, max_tokens)
        chat = [{"role": "system", "content": system}] if system else []
        chat.extend(messages)

        reply = await self._client.chat.completions.create(
            model=self._model,
            messages=chat,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        usage = reply.usage
        return self._log_usage(LLMResponse(
            content=reply.choices[0].message.content or "",
            model=reply.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        ))


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

KNOWN_PROVIDERS = ("gpt4", "deepseek", "claude")

# One client per provider key, created on first use
_providers: dict[str, AnthropicProvider | OpenAICompatibleProvider] = {}


def _build_provider(name: str) -> AnthropicProvider | OpenAICompatibleProvider:
    if name == "gpt4":
        return OpenAICompatibleProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
        )
    if name == "deepseek":
        return OpenAICompatibleProvider(
            api_key=settings.deepseek_api_key,
            model=settings.deepseek_model,
            base_url=settings.deepseek_base_url,
            key_env_name="DEEPSEEK_API_KEY",
        )
    if name == "claude":
        return AnthropicProvider(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
        )
    raise ValueError(
        f"Unknown LLM provider '{name}'. Supported: {list(KNOWN_PROVIDERS)}"
    )


def get_llm_provider(
    name: str | None = None,
) -> AnthropicProvider | OpenAICompatibleProvider:
    """
    Return the provider for a form provider key, creating it on first use.

    Args:
        name: "gpt4", "deepseek" or "claude". Defaults to
            settings.default_llm_provider.

    Raises:
        ValueError: Unknown provider key, or its API key is not configured.
    """
    key = name or settings.default_llm_provider
    if key not in _providers:
        _providers[key] = _build_provider(key)
    return _providers[key]


def reset_providers() -> None:
    """Drop cached clients (used when settings change, e.g. in tests)."""
    _providers.clear()
