from __future__ import annotations

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default)


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def env_floats(name: str, default: tuple[float, ...]) -> tuple[float, ...]:
    """Comma separated floats, e.g. ``WINEPAIR_RANK_DECAY=1,0.95,0.9``."""
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(float(part) for part in raw.split(",") if part.strip())


def env_weights(name: str, default: dict[str, float]) -> dict[str, float]:
    """JSON object of weights, e.g. ``{"rule": 0.5, "ml": 0.3, "ai": 0.2}``."""
    raw = os.getenv(name)
    if not raw:
        return dict(default)
    parsed = json.loads(raw)
    return {str(k): float(v) for k, v in parsed.items()}
