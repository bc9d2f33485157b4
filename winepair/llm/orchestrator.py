"""
Fan out reasoning requests for the top candidates and collect the outcomes.

Each candidate runs its own fallback flow over the providers in order, so a
slow or failing primary only affects the candidates it was serving. The
flows run concurrently; every provider call has its own deadline.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from ..errors import ConfigurationError, ProviderError, ProviderTimeout
from ..recommendations.models import DishContext, ScoreBreakdown, WineCandidate
from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .prompts import SYSTEM_PROMPT, build_user_message
from .providers import (
    FailureKind,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
    ReasoningProvider,
    parse_reply,
)

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    not_requested = "not_requested"
    requesting = "requesting"
    success = "success"
    exhausted = "exhausted"


@dataclass(frozen=True)
class ReasoningOutcome:
    candidate_id: str
    state: FlowState
    success: ProviderSuccess | None = None
    attempts: tuple[ProviderResult, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.state is FlowState.success


class ReasoningFlow:
    """
    Fallback state machine for one candidate.

    not_requested -> requesting(p1) -> success
                                    -> requesting(p2) -> success
                                                      -> exhausted
    """

    def __init__(self, candidate_id: str, providers: Sequence[str]) -> None:
        self.candidate_id = candidate_id
        self.providers = tuple(providers)
        self.state = FlowState.not_requested
        self.current: str | None = None
        self.attempts: list[ProviderResult] = []
        self._success: ProviderSuccess | None = None

    def start(self) -> str | None:
        """Begin the flow. Returns the first provider to ask, or None if there is none."""
        if self.state is not FlowState.not_requested:
            raise RuntimeError(f"flow for {self.candidate_id} already started")
        return self._advance(0)

    def record(self, result: ProviderResult) -> str | None:
        """Record the current provider's result. Returns the next provider to ask, if any."""
        if self.state is not FlowState.requesting:
            raise RuntimeError(f"flow for {self.candidate_id} is {self.state.value}, not requesting")
        if result.provider != self.current:
            raise RuntimeError(f"result from {result.provider}, expected {self.current}")
        self.attempts.append(result)
        if isinstance(result, ProviderSuccess):
            self.state = FlowState.success
            self.current = None
            self._success = result
            return None
        return self._advance(self.providers.index(result.provider) + 1)

    def _advance(self, index: int) -> str | None:
        if index >= len(self.providers):
            self.state = FlowState.exhausted
            self.current = None
            return None
        self.state = FlowState.requesting
        self.current = self.providers[index]
        return self.current

    def outcome(self) -> ReasoningOutcome:
        if self.state not in (FlowState.success, FlowState.exhausted):
            raise RuntimeError(f"flow for {self.candidate_id} has not finished")
        return ReasoningOutcome(self.candidate_id, self.state, self._success, tuple(self.attempts))


@dataclass
class ReasoningOrchestrator:
    providers: Sequence[ReasoningProvider] = ()
    config: LLMConfig = field(default_factory=lambda: DEFAULT_LLM_CONFIG)

    def __post_init__(self) -> None:
        names = [p.name for p in self.providers]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"duplicate provider names: {names}")
        self._by_name = {p.name: p for p in self.providers}

    @property
    def available(self) -> bool:
        return bool(self.providers)

    async def call_provider(
        self,
        provider: ReasoningProvider,
        dish: DishContext,
        wine: WineCandidate,
        score: ScoreBreakdown | None = None,
    ) -> ProviderResult:
        message = build_user_message(dish, wine, score)
        try:
            content = await asyncio.wait_for(provider.complete(SYSTEM_PROMPT, message), timeout=provider.timeout)
        except (asyncio.TimeoutError, ProviderTimeout):
            logger.warning("%s timed out after %.1fs for %s", provider.name, provider.timeout, wine.candidate_id)
            return ProviderFailure(provider.name, FailureKind.timeout, f"no reply within {provider.timeout}s")
        except ProviderError as exc:
            logger.warning("%s rejected the reasoning call for %s: %s", provider.name, wine.candidate_id, exc.message)
            return ProviderFailure(provider.name, FailureKind.error, exc.message)
        except Exception as exc:
            logger.warning("%s reasoning call failed for %s", provider.name, wine.candidate_id, exc_info=True)
            return ProviderFailure(provider.name, FailureKind.error, str(exc) or type(exc).__name__)

        result = parse_reply(provider.name, content, self.config.max_reasoning_chars)
        if isinstance(result, ProviderFailure):
            logger.warning("%s returned a malformed reply for %s: %s", provider.name, wine.candidate_id, result.detail)
        return result

    async def run_flow(
        self,
        dish: DishContext,
        wine: WineCandidate,
        score: ScoreBreakdown | None = None,
    ) -> ReasoningOutcome:
        flow = ReasoningFlow(wine.candidate_id, list(self._by_name))
        name = flow.start()
        while name is not None:
            result = await self.call_provider(self._by_name[name], dish, wine, score)
            name = flow.record(result)
        if flow.state is FlowState.exhausted and self.providers:
            logger.info("All providers failed for %s; keeping heuristic score", wine.candidate_id)
        return flow.outcome()

    async def enrich(
        self,
        dish: DishContext,
        scored: Sequence[tuple[WineCandidate, ScoreBreakdown]],
    ) -> dict[str, ReasoningOutcome]:
        """Run one flow per candidate concurrently. Never raises for provider failures."""
        if not scored:
            return {}
        outcomes = await asyncio.gather(*(self.run_flow(dish, wine, score) for wine, score in scored))
        return {outcome.candidate_id: outcome for outcome in outcomes}
