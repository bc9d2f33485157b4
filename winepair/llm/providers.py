"""
Reasoning providers and the reply parsing boundary.

A provider turns a prompt into raw text. Nothing outside this module sees the
raw text: ``parse_reply`` validates it into either a ``ProviderSuccess`` or a
``ProviderFailure`` with a kind the orchestrator can act on.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Union

import groq
import openai
from groq import AsyncGroq
from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ProviderError, ProviderTimeout
from .config import DEFAULT_LLM_CONFIG, LLMConfig, ProviderConfig

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    timeout = "timeout"
    error = "error"
    malformed = "malformed"


@dataclass(frozen=True)
class ProviderSuccess:
    provider: str
    reasoning: str
    adjustment: float | None = None


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    kind: FailureKind
    detail: str = ""


ProviderResult = Union[ProviderSuccess, ProviderFailure]


class ReasoningProvider(Protocol):
    name: str
    timeout: float

    async def complete(self, system_prompt: str, user_message: str) -> str:
        ...


def _messages(system_prompt: str, user_message: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_message},
    ]


class GroqProvider:
    """Primary provider. Retries are disabled; fallback is the orchestrator's job."""

    def __init__(self, config: ProviderConfig, client: Any | None = None) -> None:
        self.name = config.name
        self.timeout = config.timeout
        self.config = config
        self._client = client or AsyncGroq(api_key=config.api_key, timeout=config.timeout, max_retries=0)

    async def complete(self, system_prompt: str, user_message: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=_messages(system_prompt, user_message),
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                response_format={"type": "json_object"},
            )
        except groq.APITimeoutError as exc:
            raise ProviderTimeout(self.name, str(exc)) from exc
        except groq.APIError as exc:
            raise ProviderError(self.name, str(exc)) from exc
        return response.choices[0].message.content or ""


class OpenAIProvider:
    """Secondary provider. Any OpenAI-compatible endpoint via ``OPENAI_BASE_URL``."""

    def __init__(self, config: ProviderConfig, client: Any | None = None) -> None:
        self.name = config.name
        self.timeout = config.timeout
        self.config = config
        if client is None:
            client_kwargs: dict = {"api_key": config.api_key, "timeout": config.timeout, "max_retries": 0}
            if config.base_url:
                client_kwargs["base_url"] = config.base_url
            client = AsyncOpenAI(**client_kwargs)
        self._client = client

    async def complete(self, system_prompt: str, user_message: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=_messages(system_prompt, user_message),
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                response_format={"type": "json_object"},
            )
        except openai.APITimeoutError as exc:
            raise ProviderTimeout(self.name, str(exc)) from exc
        except openai.APIError as exc:
            raise ProviderError(self.name, str(exc)) from exc
        return response.choices[0].message.content or ""


def build_providers(config: LLMConfig = DEFAULT_LLM_CONFIG) -> list[ReasoningProvider]:
    """Configured providers in fallback order. Empty when no API keys are set."""
    providers: list[ReasoningProvider] = []
    if config.primary.configured:
        providers.append(GroqProvider(config.primary))
    if config.secondary.configured:
        providers.append(OpenAIProvider(config.secondary))
    if not providers:
        logger.info("No reasoning provider configured; pairings will use rule and ensemble scores only")
    return providers


class _Reply(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    reasoning: str = Field(..., min_length=1)
    adjustment: float | None = Field(default=None, ge=-1.0, le=1.0, strict=True)


def _strip_fences(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars].rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:") + "..."


def parse_reply(provider: str, content: str, max_chars: int = 600) -> ProviderResult:
    text = _strip_fences(content or "")
    if not text:
        return ProviderFailure(provider, FailureKind.malformed, "empty reply")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        return ProviderFailure(provider, FailureKind.malformed, f"invalid JSON: {exc.msg}")
    if not isinstance(payload, dict):
        return ProviderFailure(provider, FailureKind.malformed, "reply is not a JSON object")
    try:
        reply = _Reply.model_validate(payload)
    except PydanticValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        return ProviderFailure(provider, FailureKind.malformed, f"invalid fields: {fields}")
    return ProviderSuccess(provider, _truncate(reply.reasoning, max_chars), reply.adjustment)
