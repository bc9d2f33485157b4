from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from ..errors import ModelUnavailable
from ..features.extractor import FeatureVector
from ..features.vocab import BUILTIN_TABLES, FeatureTables
from .config import DEFAULT_ENSEMBLE_CONFIG, EnsembleConfig
from .forest import ForestArtifact

logger = logging.getLogger(__name__)


class EnsembleModel:
    """Read-only forest shared across requests.

    When no artifact could be loaded the model is *degraded*: ``predict``
    returns ``(None, None)`` and callers treat the ensemble as absent.
    """

    def __init__(
        self,
        artifact: ForestArtifact | None,
        config: EnsembleConfig = DEFAULT_ENSEMBLE_CONFIG,
        error: str | None = None,
    ) -> None:
        self._artifact = artifact
        self.config = config
        self.error = error

    @classmethod
    def load(
        cls,
        path: Path | str | None = None,
        config: EnsembleConfig = DEFAULT_ENSEMBLE_CONFIG,
    ) -> EnsembleModel:
        path = path or config.artifact_path
        try:
            artifact = ForestArtifact.load(path, config)
        except ModelUnavailable as exc:
            logger.error("Ensemble model unavailable, continuing without it: %s", exc)
            return cls(None, config, error=str(exc))
        logger.info("Loaded ensemble %s (%d trees) from %s", artifact.version, len(artifact.trees), path)
        return cls(artifact, config)

    def reload(self, path: Path | str | None = None) -> bool:
        """Swap in a new artifact. A failed reload keeps the current one."""
        path = path or self.config.artifact_path
        try:
            artifact = ForestArtifact.load(path, self.config)
        except ModelUnavailable as exc:
            logger.error("Ensemble reload failed, keeping %s: %s", self.version or "degraded state", exc)
            if self._artifact is None:
                self.error = str(exc)
            return False
        self._artifact = artifact
        self.error = None
        logger.info("Reloaded ensemble %s from %s", artifact.version, path)
        return True

    @property
    def degraded(self) -> bool:
        return self._artifact is None

    @property
    def version(self) -> str | None:
        artifact = self._artifact
        return artifact.version if artifact else None

    @property
    def tables(self) -> FeatureTables:
        artifact = self._artifact
        return artifact.tables if artifact else BUILTIN_TABLES

    def predict(self, vector: FeatureVector) -> tuple[float | None, float | None]:
        artifact = self._artifact
        if artifact is None:
            return None, None
        outputs = artifact.tree_outputs(vector.as_array())
        rating = float(np.clip(outputs.mean(), self.config.min_rating, self.config.max_rating))
        return rating, float(outputs.std())

    def status(self) -> dict[str, Any]:
        artifact = self._artifact
        return {
            "degraded": artifact is None,
            "version": artifact.version if artifact else None,
            "trees": len(artifact.trees) if artifact else 0,
            "error": self.error,
        }
