from __future__ import annotations

import asyncio
import hashlib
import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from .config import DEFAULT_CACHE_CONFIG, CacheConfig
from .models import DishContext, WineCandidate


def fingerprint(
    dish: DishContext,
    candidates: Sequence[WineCandidate],
    model_version: str | None = None,
) -> str:
    """Stable key for a dish against a candidate set, independent of list order."""
    payload = {
        "dish": dish.normalized(),
        "candidates": sorted(c.candidate_id for c in candidates),
        "model": model_version,
    }
    normalized = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()


@dataclass
class _Entry:
    value: Any
    created_at: float


@dataclass
class _Flight:
    task: asyncio.Future
    waiters: int = 0


class PairingCache:
    """
    TTL cache with single-flight de-duplication.

    Concurrent misses for the same key share one computation. A caller that
    is cancelled only stops waiting; the computation itself is cancelled once
    no caller is left waiting on it.
    """

    def __init__(
        self,
        config: CacheConfig = DEFAULT_CACHE_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._inflight: dict[str, _Flight] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._joins = 0

    def _lookup(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.created_at < self.config.ttl_seconds:
            return entry
        if entry is not None:
            del self._entries[key]
        return None

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._lookup(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = _Entry(value, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.config.max_entries:
                self._entries.popitem(last=False)

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> tuple[Any, bool]:
        """Return ``(value, cache_hit)``. Joined callers get the same value object."""
        with self._lock:
            entry = self._lookup(key)
            if entry is not None:
                self._hits += 1
                return entry.value, True
            flight = self._inflight.get(key)
            if flight is None:
                self._misses += 1
                flight = _Flight(asyncio.ensure_future(self._run(key, compute)))
                self._inflight[key] = flight
                flight.task.add_done_callback(lambda _t, k=key, f=flight: self._forget(k, f))
            else:
                self._joins += 1
            flight.waiters += 1

        try:
            value = await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            with self._lock:
                flight.waiters -= 1
                abandon = flight.waiters == 0 and not flight.task.done()
                if abandon:
                    self._forget_locked(key, flight)
            if abandon:
                flight.task.cancel()
            raise
        except BaseException:
            with self._lock:
                flight.waiters -= 1
            raise

        with self._lock:
            flight.waiters -= 1
        return value, False

    async def _run(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        value = await compute()
        self.put(key, value)
        return value

    def _forget(self, key: str, flight: _Flight) -> None:
        with self._lock:
            self._forget_locked(key, flight)

    def _forget_locked(self, key: str, flight: _Flight) -> None:
        if self._inflight.get(key) is flight:
            del self._inflight[key]

    def in_flight(self) -> int:
        with self._lock:
            return len(self._inflight)

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "in_flight": len(self._inflight),
                "hits": self._hits,
                "misses": self._misses,
                "joins": self._joins,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._joins = 0
