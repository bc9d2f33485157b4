import pytest

from winepair.errors import ConfigurationError
from winepair.recommendations.models import DishContext, GuestPreferences, Intensity, WineCandidate
from winepair.scoring.config import DEFAULT_FACTOR_WEIGHTS, ScoringConfig
from winepair.scoring.rules import (
    RuleBasedScorer,
    dish_intensity,
    heuristic_confidence,
    regional_tradition,
    seasonal_appropriateness,
    style_match,
    wine_body,
    wine_flavor_families,
)

SCORER = RuleBasedScorer(ScoringConfig(weights=dict(DEFAULT_FACTOR_WEIGHTS)))


# ── Scenarios ────────────────────────────────────────────────────────────


def test_seafood_prefers_crisp_white(seafood, wines):
    white = SCORER.score(seafood, wines["chablis"])
    red = SCORER.score(seafood, wines["cabernet"])
    assert white.style_match == 1.0
    assert red.style_match == 0.2
    assert white.flavor_harmony > red.flavor_harmony
    assert white.rule_total > red.rule_total


def test_seafood_rose_is_adjacent_style(seafood, wines):
    assert style_match(seafood, wines["rose"]) == 0.6


def test_red_meat_prefers_full_red(red_meat, wines):
    reds = [SCORER.score(red_meat, wines[k]) for k in ("barolo", "cabernet")]
    whites = [SCORER.score(red_meat, wines[k]) for k in ("chablis", "sancerre", "riesling")]
    for red in reds:
        assert red.style_match == 1.0
        assert red.texture_balance == 1.0
        for white in whites:
            assert red.rule_total > white.rule_total


def test_breakdown_stays_in_unit_range(seafood, red_meat, wines):
    for dish in (seafood, red_meat):
        for wine in wines.values():
            b = SCORER.score(dish, wine)
            for value in (b.style_match, b.flavor_harmony, b.texture_balance,
                          b.regional_tradition, b.seasonal_appropriateness, b.rule_total):
                assert 0.0 <= value <= 1.0


# ── Individual factors ───────────────────────────────────────────────────


def test_style_match_is_neutral_without_protein(wines):
    assert style_match(DishContext(description="Mixed platter"), wines["barolo"]) == 0.5


def test_missing_season_is_neutral(wines):
    assert seasonal_appropriateness(DishContext(description="Roast chicken"), wines["chablis"]) == 0.6


def test_regional_tradition_levels(wines):
    french = DishContext(description="Coq au vin", cuisine="French")
    assert regional_tradition(french, wines["chablis"]) == 1.0
    provencal = DishContext(description="Ratatouille", cuisine="mediterranean")
    assert regional_tradition(provencal, wines["sancerre"]) == 0.8
    assert regional_tradition(french, wines["cabernet"]) == 0.4
    assert regional_tradition(DishContext(description="Toast"), wines["cabernet"]) == 0.5


def test_dish_intensity_falls_back_through_preparation_and_protein():
    assert dish_intensity(DishContext(description="x", intensity="light", preparation="braised")) == Intensity.light
    assert dish_intensity(DishContext(description="x", preparation="braised", protein="fish")) == Intensity.rich
    assert dish_intensity(DishContext(description="x", protein="fish")) == Intensity.light
    assert dish_intensity(DishContext(description="x")) == Intensity.medium


def test_wine_body_from_style_grapes_then_type(wines):
    assert wine_body(wines["barolo"]) == "full"
    assert wine_body(wines["rose"]) == "light"
    unlabelled = WineCandidate(wine_id="x", vintage_id="1", type="red", grape_varieties={"Syrah"})
    assert wine_body(unlabelled) == "full"
    plain = WineCandidate(wine_id="y", vintage_id="1", type="red")
    assert wine_body(plain) == "medium"


def test_flavor_families_from_tasting_notes(wines):
    assert wine_flavor_families(wines["chablis"]) == {"fruit", "earth"}
    assert "sweet" in wine_flavor_families(wines["riesling"])


# ── Preferences and confidence ───────────────────────────────────────────


def test_avoided_type_is_penalised(seafood, wines):
    dish = seafood.model_copy(update={"preferences": GuestPreferences(avoided_types=("white",))})
    plain = SCORER.score(seafood, wines["chablis"]).rule_total
    avoided = SCORER.score(dish, wines["chablis"]).rule_total
    assert avoided == pytest.approx(plain * 0.3)


def test_preference_boost_is_capped(seafood, wines):
    prefs = GuestPreferences(preferred_types=("white",), preferred_regions=("Chablis",))
    dish = seafood.model_copy(update={"preferences": prefs})
    assert SCORER.score(dish, wines["chablis"]).rule_total == 1.0


def test_heuristic_confidence_rewards_agreement():
    agreeing = heuristic_confidence(dict.fromkeys("abcde", 0.8))
    spread = heuristic_confidence({"a": 1.0, "b": 0.6, "c": 1.0, "d": 0.6, "e": 0.8})
    assert agreeing == pytest.approx(0.8)
    assert spread < agreeing
    assert heuristic_confidence(dict.fromkeys("abcde", 0.0)) == 0.1


# ── Configuration ────────────────────────────────────────────────────────


def test_weights_must_sum_to_one():
    weights = dict(DEFAULT_FACTOR_WEIGHTS, style_match=0.5)
    with pytest.raises(ConfigurationError):
        RuleBasedScorer(ScoringConfig(weights=weights))


def test_weights_must_cover_every_factor():
    weights = dict(DEFAULT_FACTOR_WEIGHTS)
    weights.pop("seasonal_appropriateness")
    weights["style_match"] += 0.10
    with pytest.raises(ConfigurationError):
        RuleBasedScorer(ScoringConfig(weights=weights))


def test_negative_weight_is_rejected():
    weights = dict(DEFAULT_FACTOR_WEIGHTS, style_match=-0.25, flavor_harmony=0.80)
    with pytest.raises(ConfigurationError):
        RuleBasedScorer(ScoringConfig(weights=weights))
