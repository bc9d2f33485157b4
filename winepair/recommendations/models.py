from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WineType(str, Enum):
    red = "red"
    white = "white"
    rose = "rose"
    sparkling = "sparkling"
    dessert = "dessert"
    fortified = "fortified"


class Protein(str, Enum):
    beef = "beef"
    lamb = "lamb"
    pork = "pork"
    poultry = "poultry"
    fish = "fish"
    shellfish = "shellfish"
    game = "game"
    vegetarian = "vegetarian"


class Preparation(str, Enum):
    raw = "raw"
    steamed = "steamed"
    poached = "poached"
    grilled = "grilled"
    roasted = "roasted"
    braised = "braised"
    stewed = "stewed"
    fried = "fried"
    sauteed = "sauteed"
    seared = "seared"
    smoked = "smoked"
    baked = "baked"


class Occasion(str, Enum):
    casual = "casual"
    family = "family"
    dinner_party = "dinner_party"
    celebration = "celebration"
    romantic = "romantic"
    business = "business"
    tasting = "tasting"


class Intensity(str, Enum):
    light = "light"
    medium = "medium"
    rich = "rich"


class Season(str, Enum):
    spring = "spring"
    summer = "summer"
    autumn = "autumn"
    winter = "winter"


def _normalize_label(value):
    if isinstance(value, str):
        value = value.strip().lower().replace("é", "e").replace(" ", "_")
        return value or None
    return value


class GuestPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    preferred_types: tuple[WineType, ...] = ()
    avoided_types: tuple[WineType, ...] = ()
    preferred_regions: tuple[str, ...] = ()


class DishContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = Field(..., max_length=1000)
    protein: Protein | None = None
    cuisine: str | None = None
    preparation: Preparation | None = None
    occasion: Occasion | None = None
    intensity: Intensity | None = None
    season: Season | None = None
    guest_count: int | None = Field(default=None, gt=0)
    preferences: GuestPreferences | None = None

    @field_validator("protein", "preparation", "occasion", "intensity", "season", mode="before")
    @classmethod
    def _lower_enum(cls, value):
        return _normalize_label(value)

    @field_validator("cuisine", mode="before")
    @classmethod
    def _strip_cuisine(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    def normalized(self) -> dict:
        """Canonical dict used for fingerprinting: case and whitespace folded."""
        data = self.model_dump(mode="json")
        data["description"] = " ".join(self.description.lower().split())
        data["cuisine"] = self.cuisine.lower() if self.cuisine else None
        return data


class WineCandidate(BaseModel):
    """Read-only projection of an inventory row (wine + vintage + stock)."""

    model_config = ConfigDict(frozen=True)

    wine_id: str = Field(..., min_length=1)
    vintage_id: str = Field(..., min_length=1)
    name: str = ""
    producer: str | None = None
    year: int | None = None
    type: WineType
    region: str = ""
    country: str = ""
    grape_varieties: frozenset[str] = frozenset()
    style: str | None = None
    tasting_notes: str = ""
    food_pairings: tuple[str, ...] = ()
    available_quantity: int = Field(default=0, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, value):
        return _normalize_label(value)

    @property
    def candidate_id(self) -> str:
        return f"{self.wine_id}:{self.vintage_id}"


class CandidateFilter(BaseModel):
    wine_types: tuple[WineType, ...] | None = None
    min_quantity: int = Field(default=1, ge=0)


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    style_match: float = Field(..., ge=0.0, le=1.0)
    flavor_harmony: float = Field(..., ge=0.0, le=1.0)
    texture_balance: float = Field(..., ge=0.0, le=1.0)
    regional_tradition: float = Field(..., ge=0.0, le=1.0)
    seasonal_appropriateness: float = Field(..., ge=0.0, le=1.0)
    rule_total: float = Field(..., ge=0.0, le=1.0)
    ensemble_rating: float | None = Field(default=None, ge=1.0, le=5.0)
    ensemble_disagreement: float | None = Field(default=None, ge=0.0)
    ai_adjustment: float | None = Field(default=None, ge=-1.0, le=1.0)
    ai_score: float | None = None
    # Set once by the aggregator.
    total: float | None = None
    display_score: float | None = None
    confidence: float | None = None


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    wine: WineCandidate
    score: ScoreBreakdown
    reasoning: str | None = None
    ai_enhanced: bool = False
    provider: str | None = None
    rank: int = 0


class PairingOptions(BaseModel):
    limit: int | None = Field(default=None, ge=1)
    require_ai: bool = False
    wine_types: list[WineType] | None = None


class PairingRequest(BaseModel):
    dish: DishContext
    limit: int | None = Field(default=None, ge=1, le=50)
    require_ai: bool = False
    wine_types: list[WineType] | None = None

    def options(self) -> PairingOptions:
        return PairingOptions(limit=self.limit, require_ai=self.require_ai, wine_types=self.wine_types)


class PairingResponse(BaseModel):
    recommendations: list[Recommendation]
    total_candidates: int
    fingerprint: str | None = None
    cache_hit: bool = False
    ai_requested: bool = False
    reason: str | None = None
    detail: str | None = None
    session_id: str | None = None
