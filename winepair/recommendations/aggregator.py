from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..llm.orchestrator import ReasoningOutcome
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .models import Recommendation, ScoreBreakdown, WineCandidate


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate after rule scoring and ensemble inference, before ranking."""

    wine: WineCandidate
    breakdown: ScoreBreakdown
    base_confidence: float

    @property
    def candidate_id(self) -> str:
        return self.wine.candidate_id


class Aggregator:
    """Combines rule, ensemble and AI scores into one ordered list."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        config.validate()
        self.config = config

    def combine(self, scores: dict[str, float]) -> float:
        weights = self.config.source_weights
        total_weight = sum(weights[source] for source in scores)
        return sum(weights[source] * value for source, value in scores.items()) / total_weight

    def base_scores(self, breakdown: ScoreBreakdown) -> dict[str, float]:
        scores = {"rule": breakdown.rule_total}
        if breakdown.ensemble_rating is not None:
            scores["ml"] = (breakdown.ensemble_rating - 1.0) / 4.0
        return scores

    def preliminary_order(self, entries: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
        """Order by the pre-AI combination. Decides which candidates get AI reasoning."""
        return sorted(entries, key=lambda e: (-self.combine(self.base_scores(e.breakdown)), e.candidate_id))

    def rank_decay(self, rank: int) -> float:
        curve = self.config.rank_decay
        return curve[min(rank, len(curve) - 1)]

    def confidence(self, entry: ScoredCandidate, sources: frozenset[str]) -> float:
        disagreement = entry.breakdown.ensemble_disagreement or 0.0
        agreement = _clamp(1.0 - disagreement / 2.0)
        completeness = self.config.completeness.get(sources)
        if completeness is None:
            completeness = self.config.completeness[frozenset({"rule"})]
        return _clamp(entry.base_confidence * agreement * completeness)

    def rank(
        self,
        entries: Sequence[ScoredCandidate],
        outcomes: dict[str, ReasoningOutcome] | None = None,
    ) -> tuple[Recommendation, ...]:
        outcomes = outcomes or {}
        scored: list[tuple[float, ScoredCandidate, ScoreBreakdown, ReasoningOutcome | None]] = []

        for entry in entries:
            scores = self.base_scores(entry.breakdown)
            update: dict = {}
            outcome = outcomes.get(entry.candidate_id)
            success = outcome.success if outcome is not None else None
            if success is not None:
                adjustment = success.adjustment or 0.0
                ai_score = _clamp(self.combine(scores) + adjustment)
                scores["ai"] = ai_score
                update.update(ai_adjustment=success.adjustment, ai_score=ai_score)

            total = self.combine(scores)
            update.update(total=total, confidence=self.confidence(entry, frozenset(scores)))
            scored.append((total, entry, entry.breakdown.model_copy(update=update), outcome))

        scored.sort(key=lambda item: (-item[0], item[1].candidate_id))

        recommendations = []
        for rank, (total, entry, breakdown, outcome) in enumerate(scored):
            success = outcome.success if outcome is not None else None
            breakdown = breakdown.model_copy(update={"display_score": total * self.rank_decay(rank)})
            recommendations.append(
                Recommendation(
                    wine=entry.wine,
                    score=breakdown,
                    reasoning=success.reasoning if success else None,
                    ai_enhanced=success is not None,
                    provider=success.provider if success else None,
                    rank=rank + 1,
                )
            )
        return tuple(recommendations)
