from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..env import env_weights
from ..errors import ConfigurationError

FACTORS = (
    "style_match",
    "flavor_harmony",
    "texture_balance",
    "regional_tradition",
    "seasonal_appropriateness",
)

DEFAULT_FACTOR_WEIGHTS: dict[str, float] = {
    "style_match": 0.25,
    "flavor_harmony": 0.30,
    "texture_balance": 0.20,
    "regional_tradition": 0.15,
    "seasonal_appropriateness": 0.10,
}


@dataclass(frozen=True)
class ScoringConfig:
    weights: dict[str, float] = field(
        default_factory=lambda: env_weights("WINEPAIR_SCORING_WEIGHTS", DEFAULT_FACTOR_WEIGHTS)
    )
    preference_cap: float = 1.5

    def validate(self) -> None:
        if set(self.weights) != set(FACTORS):
            raise ConfigurationError(
                f"scoring weights must cover exactly {', '.join(FACTORS)}; got {sorted(self.weights)}"
            )
        if any(w < 0 or not math.isfinite(w) for w in self.weights.values()):
            raise ConfigurationError("scoring weights must be finite and non-negative")
        total = sum(self.weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ConfigurationError(f"scoring weights must sum to 1.0, got {total:.6f}")
        if self.preference_cap < 1.0:
            raise ConfigurationError("preference_cap must be >= 1.0")


DEFAULT_SCORING_CONFIG = ScoringConfig()
