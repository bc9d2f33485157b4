from __future__ import annotations

import logging
import time
from typing import Any, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..ensemble.model import EnsembleModel
from ..errors import ConfigurationError, NoCandidatesError, ValidationError
from ..features.extractor import FeatureExtractor
from ..llm.orchestrator import ReasoningOrchestrator
from ..llm.providers import build_providers
from ..scoring.rules import RuleBasedScorer, heuristic_confidence
from .aggregator import Aggregator, ScoredCandidate
from .cache import PairingCache, fingerprint
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .inventory import CsvInventory, InventoryGateway
from .models import (
    CandidateFilter,
    DishContext,
    PairingOptions,
    PairingResponse,
    Recommendation,
    WineCandidate,
)
from .sessions import InMemorySessionLog, SessionLogger

logger = logging.getLogger(__name__)


def _coerce_dish(dish: DishContext | dict[str, Any]) -> DishContext:
    if isinstance(dish, DishContext):
        return dish
    try:
        return DishContext.model_validate(dish)
    except PydanticValidationError as exc:
        raise ValidationError(f"invalid dish context: {exc.error_count()} error(s)") from exc


class PairingEngine:
    """
    Wine pairing pipeline.

    ``recommend`` runs rule scoring and ensemble inference for every
    candidate, asks the reasoning providers about the top few, and caches the
    ranked list per dish and candidate set. ``quick_recommend`` skips both the
    providers and the cache.
    """

    def __init__(
        self,
        inventory: InventoryGateway,
        model: EnsembleModel,
        orchestrator: ReasoningOrchestrator | None = None,
        cache: PairingCache | None = None,
        session_logger: SessionLogger | None = None,
        scorer: RuleBasedScorer | None = None,
        extractor: FeatureExtractor | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.inventory = inventory
        self.model = model
        self.orchestrator = orchestrator or ReasoningOrchestrator()
        self.cache = cache or PairingCache()
        self.session_logger = session_logger
        self.scorer = scorer or RuleBasedScorer()
        self.extractor = extractor
        self.aggregator = Aggregator(config)
        self.config = config

    # ── Options ─────────────────────────────────────────────────────────

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.config.default_limit
        if not 1 <= limit <= self.config.ai_top_k:
            raise ValidationError(f"limit must be between 1 and {self.config.ai_top_k}, got {limit}")
        return limit

    def _feature_extractor(self) -> FeatureExtractor:
        if self.extractor is not None:
            return self.extractor
        return FeatureExtractor(tables=self.model.tables)

    def _candidates(self, wine_types) -> list[WineCandidate]:
        candidate_filter = CandidateFilter(wine_types=tuple(wine_types) if wine_types else None)
        return self.inventory.list_available_candidates(candidate_filter)

    # ── Pipeline stages ─────────────────────────────────────────────────

    def score_candidates(self, dish: DishContext, candidates: Sequence[WineCandidate]) -> list[ScoredCandidate]:
        """Rule scores plus ensemble prediction for every candidate."""
        extractor = self._feature_extractor()
        vectors = extractor.extract(dish, candidates)

        entries = []
        for wine in candidates:
            factors = self.scorer.factor_scores(dish, wine)
            entries.append(ScoredCandidate(wine, self.scorer.score(dish, wine), heuristic_confidence(factors)))

        # The ranking feature is the candidate's position in the rule order.
        by_id = {v.candidate_id: v for v in vectors}
        rule_order = sorted(entries, key=lambda e: (-e.breakdown.rule_total, e.candidate_id))
        rank_scale = extractor.config.rank_scale
        scored = {}
        for position, entry in enumerate(rule_order, start=1):
            vector = by_id[entry.candidate_id].with_rank(min(position, rank_scale))
            rating, spread = self.model.predict(vector)
            breakdown = entry.breakdown.model_copy(
                update={"ensemble_rating": rating, "ensemble_disagreement": spread}
            )
            scored[entry.candidate_id] = ScoredCandidate(entry.wine, breakdown, entry.base_confidence)
        return [scored[wine.candidate_id] for wine in candidates]

    async def _compute(self, dish: DishContext, candidates: Sequence[WineCandidate]) -> tuple[Recommendation, ...]:
        entries = self.score_candidates(dish, candidates)
        top = self.aggregator.preliminary_order(entries)[: self.config.ai_top_k]

        outcomes = {}
        if self.orchestrator.available:
            outcomes = await self.orchestrator.enrich(dish, [(e.wine, e.breakdown) for e in top])
            enhanced = sum(1 for o in outcomes.values() if o.succeeded)
            logger.info("AI reasoning succeeded for %d of %d candidates", enhanced, len(top))
        return self.aggregator.rank(top, outcomes)

    def _record_session(self, dish: DishContext, recommendations: Sequence[Recommendation]) -> str | None:
        if self.session_logger is None:
            return None
        try:
            return self.session_logger.record_pairing_session(dish, recommendations)
        except Exception:
            logger.warning("Failed to record pairing session", exc_info=True)
            return None

    def _no_candidates(self, started: float) -> PairingResponse:
        err = NoCandidatesError("no wines in stock match the request")
        logger.info("No candidates available (%.1f ms)", (time.time() - started) * 1000)
        return PairingResponse(recommendations=[], total_candidates=0, reason=err.code, detail=err.message)

    # ── Public API ──────────────────────────────────────────────────────

    async def recommend(
        self,
        dish: DishContext | dict[str, Any],
        options: PairingOptions | None = None,
    ) -> PairingResponse:
        started = time.time()
        dish = _coerce_dish(dish)
        options = options or PairingOptions()
        limit = self._resolve_limit(options.limit)
        if options.require_ai and not self.orchestrator.available:
            raise ConfigurationError("AI reasoning was required but no provider is configured")
        self._feature_extractor().validate_dish(dish)

        candidates = self._candidates(options.wine_types)
        if not candidates:
            return self._no_candidates(started)

        key = fingerprint(dish, candidates, self.model.version)
        ranked, cache_hit = await self.cache.get_or_compute(key, lambda: self._compute(dish, candidates))
        recommendations = list(ranked[:limit])

        session_id = self._record_session(dish, recommendations)
        logger.info(
            "Paired %d of %d candidates in %.1f ms (cache_hit=%s)",
            len(recommendations), len(candidates), (time.time() - started) * 1000, cache_hit,
        )
        return PairingResponse(
            recommendations=recommendations,
            total_candidates=len(candidates),
            fingerprint=key,
            cache_hit=cache_hit,
            ai_requested=self.orchestrator.available,
            session_id=session_id,
        )

    async def quick_recommend(
        self,
        dish: DishContext | dict[str, Any],
        limit: int | None = None,
        wine_types=None,
    ) -> PairingResponse:
        """Rule and ensemble scores only: no providers, no cache."""
        started = time.time()
        dish = _coerce_dish(dish)
        limit = self._resolve_limit(limit)
        self._feature_extractor().validate_dish(dish)

        candidates = self._candidates(wine_types)
        if not candidates:
            return self._no_candidates(started)

        entries = self.score_candidates(dish, candidates)
        top = self.aggregator.preliminary_order(entries)[: self.config.ai_top_k]
        recommendations = list(self.aggregator.rank(top)[:limit])

        session_id = self._record_session(dish, recommendations)
        return PairingResponse(
            recommendations=recommendations,
            total_candidates=len(candidates),
            session_id=session_id,
        )

    def status(self) -> dict[str, Any]:
        return {
            "model": self.model.status(),
            "providers": [p.name for p in self.orchestrator.providers],
            "cache": self.cache.stats(),
        }


def build_engine(
    inventory: InventoryGateway | None = None,
    session_logger: SessionLogger | None = None,
) -> PairingEngine:
    """Wire the engine from environment configuration."""
    return PairingEngine(
        inventory=inventory or CsvInventory(),
        model=EnsembleModel.load(),
        orchestrator=ReasoningOrchestrator(build_providers()),
        cache=PairingCache(),
        session_logger=session_logger or InMemorySessionLog(),
    )
