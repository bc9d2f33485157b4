from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..env import env_str

_DEFAULT_ARTIFACT = Path(__file__).resolve().parent.parent / "data" / "models" / "pairing_forest_v1.json"


@dataclass(frozen=True)
class EnsembleConfig:
    artifact_path: Path = Path(env_str("WINEPAIR_MODEL_PATH", str(_DEFAULT_ARTIFACT)))
    # Empty string accepts whatever version the artifact declares.
    expected_version: str = env_str("WINEPAIR_MODEL_VERSION", "")
    min_rating: float = 1.0
    max_rating: float = 5.0


DEFAULT_ENSEMBLE_CONFIG = EnsembleConfig()
