from __future__ import annotations

import time
import uuid
from typing import Any, Protocol, Sequence

from .models import DishContext, Recommendation


class SessionLogger(Protocol):
    def record_pairing_session(self, dish: DishContext, recommendations: Sequence[Recommendation]) -> str:
        ...


class InMemorySessionLog:
    """Keeps pairing sessions in process memory, newest last."""

    def __init__(self) -> None:
        self._sessions: list[dict[str, Any]] = []

    def record_pairing_session(self, dish: DishContext, recommendations: Sequence[Recommendation]) -> str:
        session_id = uuid.uuid4().hex
        self._sessions.append({
            "session_id": session_id,
            "timestamp": time.time(),
            "dish": dish.model_dump(mode="json"),
            "recommendations": [
                {
                    "candidate_id": r.wine.candidate_id,
                    "rank": r.rank,
                    "display_score": r.score.display_score,
                    "ai_enhanced": r.ai_enhanced,
                }
                for r in recommendations
            ],
        })
        return session_id

    def get_sessions(self) -> list[dict[str, Any]]:
        return self._sessions

    def clear(self) -> None:
        self._sessions.clear()
