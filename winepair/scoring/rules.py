"""
Deterministic five-factor pairing heuristic.

Every factor returns a value in [0, 1]. The weighted sum is the baseline
score that is always available, even when the ensemble and every AI
provider are down.
"""
from __future__ import annotations

import statistics

from ..features.text import tokenize
from ..recommendations.models import (
    DishContext,
    GuestPreferences,
    Intensity,
    ScoreBreakdown,
    WineCandidate,
    WineType,
)
from .config import DEFAULT_SCORING_CONFIG, FACTORS, ScoringConfig
from .tables import (
    ADJACENT_TYPES,
    BODY_BY_TYPE,
    BODY_LEVEL,
    COMPLEMENTARY,
    CONFLICTING,
    CUISINE_TRADITIONS,
    DISH_FLAVOR_KEYWORDS,
    FULL_BODIED_GRAPES,
    INTENSITY_LEVEL,
    LIGHT_BODIED_GRAPES,
    PREFERRED_TYPE,
    PREPARATION_INTENSITY,
    PREPARATION_OVERRIDES,
    PROTEIN_INTENSITY,
    SEASONAL_PREFERENCES,
    WINE_FLAVOR_FAMILIES,
)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# ── Wine and dish descriptors ────────────────────────────────────────────


def preferred_type(dish: DishContext) -> WineType | None:
    if dish.protein is None:
        return None
    if dish.preparation is not None:
        override = PREPARATION_OVERRIDES.get((dish.protein, dish.preparation))
        if override is not None:
            return override
    return PREFERRED_TYPE.get(dish.protein)


def dish_intensity(dish: DishContext) -> Intensity:
    """Explicit intensity, else derived from preparation, then protein."""
    if dish.intensity is not None:
        return dish.intensity
    if dish.preparation is not None:
        return PREPARATION_INTENSITY[dish.preparation]
    if dish.protein is not None:
        return PROTEIN_INTENSITY[dish.protein]
    return Intensity.medium


def wine_body(wine: WineCandidate) -> str:
    style = (wine.style or "").lower()
    for body in ("light", "full", "medium"):
        if body in style:
            return body
    notes = wine.tasting_notes.lower()
    if "full-bodied" in notes or "full bodied" in notes:
        return "full"
    if "light-bodied" in notes or "light bodied" in notes:
        return "light"
    grapes = {g.strip().lower() for g in wine.grape_varieties}
    if grapes & FULL_BODIED_GRAPES:
        return "full"
    if grapes & LIGHT_BODIED_GRAPES:
        return "light"
    return BODY_BY_TYPE[wine.type]


def wine_texture(wine: WineCandidate) -> str:
    style = f"{wine.style or ''} {wine.tasting_notes}".lower()
    if wine.type == WineType.sparkling or "crisp" in style or "mineral" in style:
        return "crisp"
    if "smooth" in style or "silky" in style:
        return "smooth"
    if "tannic" in style or "tannin" in style or wine.type == WineType.red:
        return "tannic"
    return "smooth"


def wine_flavor_families(wine: WineCandidate) -> set[str]:
    notes = wine.tasting_notes.lower()
    return {
        family
        for family, keywords in WINE_FLAVOR_FAMILIES.items()
        if any(k in notes for k in keywords)
    }


def wine_style(wine: WineCandidate) -> str:
    """Seasonal style bucket, e.g. ``crisp_white`` or ``full_red``."""
    if wine.type in (WineType.sparkling, WineType.rose, WineType.dessert, WineType.fortified):
        return wine.type.value
    body = wine_body(wine)
    if wine.type == WineType.white:
        if body == "full":
            return "full_white"
        if wine_texture(wine) == "crisp":
            return "crisp_white"
        return "light_white"
    if body == "light":
        return "light_red"
    if body == "full":
        return "full_red"
    return "medium_red"


def dish_flavors(tokens: set[str]) -> set[str]:
    return {tag for tag, keywords in DISH_FLAVOR_KEYWORDS.items() if tokens & keywords}


# ── Factors ──────────────────────────────────────────────────────────────


def style_match(dish: DishContext, wine: WineCandidate) -> float:
    target = preferred_type(dish)
    if target is None:
        return 0.5
    if wine.type == target:
        return 1.0
    if wine.type in ADJACENT_TYPES[target]:
        return 0.6
    return 0.2


def flavor_harmony(dish: DishContext, wine: WineCandidate) -> float:
    dish_tokens = tokenize(dish.description, dish.cuisine, dish.protein.value if dish.protein else None)
    tags = dish_flavors(dish_tokens)
    dish_terms = dish_tokens | tags
    if not dish_terms:
        return 0.0

    body = wine_body(wine)
    descriptors = wine_flavor_families(wine) | {body, wine_texture(wine)}
    wine_terms = tokenize(wine.tasting_notes, wine.style, *wine.food_pairings, *wine.grape_varieties)
    wine_terms |= descriptors

    overlap = len(dish_terms & wine_terms) / len(dish_terms)

    complement = sum(0.3 for tag in tags if COMPLEMENTARY.get(tag, frozenset()) & descriptors)
    conflict = sum(0.3 for tag in tags if CONFLICTING.get(tag, frozenset()) & descriptors)

    intensity = dish_intensity(dish)
    if intensity in (Intensity.light, Intensity.medium) and wine.type == WineType.red and body == "full":
        conflict += 0.2
    if "citrus" in tags and wine.type == WineType.red:
        conflict += 0.1

    return _clamp(overlap + complement - conflict)


def texture_balance(dish: DishContext, wine: WineCandidate) -> float:
    distance = abs(BODY_LEVEL[wine_body(wine)] - INTENSITY_LEVEL[dish_intensity(dish)])
    return _clamp(1.0 - 0.4 * distance)


def regional_tradition(dish: DishContext, wine: WineCandidate) -> float:
    if not dish.cuisine:
        return 0.5
    cuisine = dish.cuisine.strip().lower().replace(" ", "_")
    tradition = CUISINE_TRADITIONS.get(cuisine)
    if tradition is None:
        return 0.4
    regions, countries = tradition
    region = wine.region.strip().lower()
    if region and any(r == region or r in region for r in regions):
        return 1.0
    if wine.country.strip().lower() in countries:
        return 0.8
    return 0.4


def seasonal_appropriateness(dish: DishContext, wine: WineCandidate) -> float:
    if dish.season is None:
        return 0.6
    return SEASONAL_PREFERENCES[dish.season].get(wine_style(wine), 0.6)


def preference_modifier(wine: WineCandidate, prefs: GuestPreferences | None, cap: float) -> float:
    if prefs is None:
        return 1.0
    modifier = 1.0
    if wine.type in prefs.preferred_types:
        modifier *= 1.2
    if wine.type in prefs.avoided_types:
        modifier *= 0.3
    regions = {r.strip().lower() for r in prefs.preferred_regions}
    if wine.region.strip().lower() in regions:
        modifier *= 1.1
    return min(cap, modifier)


def heuristic_confidence(scores: dict[str, float]) -> float:
    """Higher when the five factors agree and are high (mean minus spread)."""
    values = list(scores.values())
    spread = statistics.pstdev(values)
    return _clamp(statistics.fmean(values) - spread, 0.1, 1.0)


class RuleBasedScorer:
    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> None:
        config.validate()
        self.config = config

    def factor_scores(self, dish: DishContext, wine: WineCandidate) -> dict[str, float]:
        return {
            "style_match": style_match(dish, wine),
            "flavor_harmony": flavor_harmony(dish, wine),
            "texture_balance": texture_balance(dish, wine),
            "regional_tradition": regional_tradition(dish, wine),
            "seasonal_appropriateness": seasonal_appropriateness(dish, wine),
        }

    def score(self, dish: DishContext, wine: WineCandidate) -> ScoreBreakdown:
        scores = self.factor_scores(dish, wine)
        total = sum(scores[f] * self.config.weights[f] for f in FACTORS)
        total *= preference_modifier(wine, dish.preferences, self.config.preference_cap)
        return ScoreBreakdown(**scores, rule_total=_clamp(total))
