from __future__ import annotations

from dataclasses import dataclass

from ..env import env_int


@dataclass(frozen=True)
class FeatureConfig:
    guest_count_cap: int = env_int("WINEPAIR_GUEST_COUNT_CAP", 12)
    rank_scale: int = 5


DEFAULT_FEATURE_CONFIG = FeatureConfig()
