from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np

from ..errors import ConfigurationError, ValidationError
from ..recommendations.models import DishContext, WineCandidate
from .config import DEFAULT_FEATURE_CONFIG, FeatureConfig
from .vocab import BUILTIN_TABLES, FeatureTables

FEATURE_ORDER = (
    "cuisine",
    "protein",
    "intensity",
    "wine_type",
    "occasion",
    "season",
    "guest_count",
    "ranking",
)


@dataclass(frozen=True)
class FeatureVector:
    candidate_id: str
    cuisine: int
    protein: int
    intensity: int
    wine_type: int
    occasion: int
    season: int
    guest_count: float
    rank: int = 0
    rank_scale: int = 5

    def with_rank(self, rank: int) -> FeatureVector:
        return replace(self, rank=rank)

    def as_array(self) -> np.ndarray:
        return np.array(
            [
                self.cuisine,
                self.protein,
                self.intensity,
                self.wine_type,
                self.occasion,
                self.season,
                self.guest_count,
                self.rank / self.rank_scale,
            ],
            dtype=float,
        )


class FeatureExtractor:
    """Encodes (dish, candidate) pairs with the tables the model was trained on."""

    def __init__(
        self,
        tables: FeatureTables = BUILTIN_TABLES,
        config: FeatureConfig = DEFAULT_FEATURE_CONFIG,
    ) -> None:
        if config.guest_count_cap < 1:
            raise ConfigurationError("guest_count_cap must be at least 1")
        self.tables = tables
        self.config = config

    def validate_dish(self, dish: DishContext) -> None:
        if not dish.description or not dish.description.strip():
            raise ValidationError("dish description must not be empty")

    def validate(self, dish: DishContext, candidates: Sequence[WineCandidate]) -> None:
        self.validate_dish(dish)
        if not candidates:
            raise ValidationError("at least one candidate wine is required")

    def normalize_guest_count(self, guest_count: int | None) -> float:
        if guest_count is None:
            return 0.0
        cap = self.config.guest_count_cap
        return min(guest_count, cap) / cap

    def encode(self, dish: DishContext, candidate: WineCandidate) -> FeatureVector:
        t = self.tables
        return FeatureVector(
            candidate_id=candidate.candidate_id,
            cuisine=t.cuisine.index(dish.cuisine),
            protein=t.protein.index(dish.protein),
            intensity=t.intensity.index(dish.intensity),
            wine_type=t.wine_type.index(candidate.type),
            occasion=t.occasion.index(dish.occasion),
            season=t.season.index(dish.season),
            guest_count=self.normalize_guest_count(dish.guest_count),
            rank_scale=self.config.rank_scale,
        )

    def extract(self, dish: DishContext, candidates: Sequence[WineCandidate]) -> list[FeatureVector]:
        self.validate(dish, candidates)
        return [self.encode(dish, c) for c in candidates]
