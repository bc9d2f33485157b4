from __future__ import annotations

from dataclasses import dataclass, field

from ..env import env_float, env_str


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    api_key: str = ""
    model: str = ""
    base_url: str | None = None
    timeout: float = 30.0
    max_tokens: int = 300
    temperature: float = 0.3
    enabled: bool = True

    @property
    def configured(self) -> bool:
        return self.enabled and bool(self.api_key)


def _groq_config() -> ProviderConfig:
    return ProviderConfig(
        name="groq",
        api_key=env_str("GROQ_API_KEY"),
        model=env_str("GROQ_MODEL", "llama-3.3-70b-versatile"),
        timeout=env_float("GROQ_TIMEOUT", 30.0),
    )


def _openai_config() -> ProviderConfig:
    return ProviderConfig(
        name="openai",
        api_key=env_str("OPENAI_API_KEY"),
        model=env_str("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=env_str("OPENAI_BASE_URL") or None,
        timeout=env_float("OPENAI_TIMEOUT", 30.0),
    )


@dataclass(frozen=True)
class LLMConfig:
    primary: ProviderConfig = field(default_factory=_groq_config)
    secondary: ProviderConfig = field(default_factory=_openai_config)
    max_reasoning_chars: int = 600


DEFAULT_LLM_CONFIG = LLMConfig()
