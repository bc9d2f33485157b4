from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

from ..env import env_float, env_floats, env_int, env_str, env_weights
from ..errors import ConfigurationError

SOURCES = ("rule", "ml", "ai")

DEFAULT_SOURCE_WEIGHTS: dict[str, float] = {"rule": 0.5, "ml": 0.3, "ai": 0.2}

# Confidence multiplier by which scoring sources contributed.
DEFAULT_COMPLETENESS: dict[frozenset[str], float] = {
    frozenset({"rule", "ml", "ai"}): 1.0,
    frozenset({"rule", "ml"}): 0.7,
    frozenset({"rule", "ai"}): 0.6,
    frozenset({"rule"}): 0.5,
}

DEFAULT_RANK_DECAY = (1.0, 0.95, 0.9, 0.85, 0.8)

_DEFAULT_INVENTORY = Path(__file__).resolve().parent.parent / "data" / "inventory.csv"


@dataclass(frozen=True)
class EngineConfig:
    source_weights: dict[str, float] = field(
        default_factory=lambda: env_weights("WINEPAIR_SOURCE_WEIGHTS", DEFAULT_SOURCE_WEIGHTS)
    )
    completeness: dict[frozenset[str], float] = field(default_factory=lambda: dict(DEFAULT_COMPLETENESS))
    rank_decay: tuple[float, ...] = field(
        default_factory=lambda: env_floats("WINEPAIR_RANK_DECAY", DEFAULT_RANK_DECAY)
    )
    ai_top_k: int = env_int("WINEPAIR_AI_TOP_K", 5)
    default_limit: int = 3

    def validate(self) -> None:
        if set(self.source_weights) != set(SOURCES):
            raise ConfigurationError(f"source weights must cover exactly {', '.join(SOURCES)}")
        if any(w <= 0 or not math.isfinite(w) for w in self.source_weights.values()):
            raise ConfigurationError("source weights must be finite and positive")

        decay = self.rank_decay
        if not decay:
            raise ConfigurationError("rank decay curve must not be empty")
        if decay[0] != 1.0:
            raise ConfigurationError("rank decay curve must start at 1.0")
        if any(not 0.0 < d <= 1.0 for d in decay):
            raise ConfigurationError("rank decay factors must be in (0, 1]")
        if any(b > a for a, b in zip(decay, decay[1:])):
            raise ConfigurationError("rank decay curve must be non-increasing")

        if self.ai_top_k < 1:
            raise ConfigurationError("ai_top_k must be at least 1")
        if not 1 <= self.default_limit <= self.ai_top_k:
            raise ConfigurationError(f"default_limit must be between 1 and ai_top_k ({self.ai_top_k})")
        if frozenset({"rule"}) not in self.completeness:
            raise ConfigurationError("completeness table needs an entry for rule-only scoring")


@dataclass(frozen=True)
class CacheConfig:
    ttl_seconds: float = env_float("WINEPAIR_CACHE_TTL", 600.0)
    max_entries: int = env_int("WINEPAIR_CACHE_MAX_ENTRIES", 512)


@dataclass(frozen=True)
class InventoryConfig:
    csv_path: Path = Path(env_str("WINEPAIR_INVENTORY_CSV", str(_DEFAULT_INVENTORY)))


DEFAULT_ENGINE_CONFIG = EngineConfig()
DEFAULT_CACHE_CONFIG = CacheConfig()
DEFAULT_INVENTORY_CONFIG = InventoryConfig()
