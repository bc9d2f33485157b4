"""
Decision-tree forest artifact.

JSON layout::

    {
      "algorithm": "random_forest",
      "version": "pairing-forest-v1",
      "feature_names": ["cuisine", ..., "ranking"],
      "mappings": {"cuisine": ["french", ...], ...},
      "trees": [<node>, ...]
    }

A node is either a leaf ``{"value": 3.8}`` or a split with ``feature``,
``left`` and ``right`` plus one of ``threshold`` (``x <= threshold`` goes
left) or ``categories`` (``x in categories`` goes left). Mapping lists are
1-based: the first entry of a list is category index 1, index 0 is unknown.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import numpy as np

from ..errors import ModelUnavailable
from ..features.extractor import FEATURE_ORDER
from ..features.vocab import FeatureTables
from .config import DEFAULT_ENSEMBLE_CONFIG, EnsembleConfig

MAX_DEPTH = 32


@dataclass(frozen=True)
class Leaf:
    value: float


@dataclass(frozen=True)
class Split:
    feature: int
    left: "Node"
    right: "Node"
    threshold: float | None = None
    categories: frozenset[int] | None = None

    def goes_left(self, x: np.ndarray) -> bool:
        if self.categories is not None:
            return int(x[self.feature]) in self.categories
        return bool(x[self.feature] <= self.threshold)


Node = Union[Leaf, Split]


def predict_tree(node: Node, x: np.ndarray) -> float:
    while isinstance(node, Split):
        node = node.left if node.goes_left(x) else node.right
    return node.value


def _parse_node(raw: Any, n_features: int, config: EnsembleConfig, depth: int = 0) -> Node:
    if depth > MAX_DEPTH:
        raise ValueError(f"tree deeper than {MAX_DEPTH}")
    if not isinstance(raw, dict):
        raise ValueError(f"node must be an object, got {type(raw).__name__}")
    if "value" in raw:
        value = float(raw["value"])
        if not config.min_rating <= value <= config.max_rating:
            raise ValueError(f"leaf value {value} outside [{config.min_rating}, {config.max_rating}]")
        return Leaf(value)

    feature = int(raw["feature"])
    if not 0 <= feature < n_features:
        raise ValueError(f"split feature {feature} out of range")
    left = _parse_node(raw["left"], n_features, config, depth + 1)
    right = _parse_node(raw["right"], n_features, config, depth + 1)
    if "categories" in raw:
        return Split(feature, left, right, categories=frozenset(int(c) for c in raw["categories"]))
    threshold = float(raw["threshold"])
    if not np.isfinite(threshold):
        raise ValueError("split threshold must be finite")
    return Split(feature, left, right, threshold=threshold)


def _dump_node(node: Node) -> dict[str, Any]:
    if isinstance(node, Leaf):
        return {"value": node.value}
    out: dict[str, Any] = {"feature": node.feature}
    if node.categories is not None:
        out["categories"] = sorted(node.categories)
    else:
        out["threshold"] = node.threshold
    out["left"] = _dump_node(node.left)
    out["right"] = _dump_node(node.right)
    return out


@dataclass(frozen=True)
class ForestArtifact:
    version: str
    feature_names: tuple[str, ...]
    tables: FeatureTables
    trees: tuple[Node, ...]
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], config: EnsembleConfig = DEFAULT_ENSEMBLE_CONFIG) -> ForestArtifact:
        try:
            version = str(data["version"])
            if config.expected_version and version != config.expected_version:
                raise ValueError(f"artifact version {version!r} != expected {config.expected_version!r}")
            feature_names = tuple(data["feature_names"])
            if feature_names != FEATURE_ORDER:
                raise ValueError(f"feature order {feature_names} does not match extractor {FEATURE_ORDER}")
            tables = FeatureTables.from_mapping(data["mappings"], version=version)
            raw_trees = data["trees"]
            if not raw_trees:
                raise ValueError("artifact contains no trees")
            trees = tuple(_parse_node(t, len(feature_names), config) for t in raw_trees)
        except (KeyError, TypeError, ValueError) as exc:
            raise ModelUnavailable(f"invalid forest artifact: {exc}") from exc
        metadata = {k: v for k, v in data.items() if k not in ("version", "feature_names", "mappings", "trees")}
        return cls(version=version, feature_names=feature_names, tables=tables, trees=trees, metadata=metadata)

    @classmethod
    def load(cls, path: Path | str, config: EnsembleConfig = DEFAULT_ENSEMBLE_CONFIG) -> ForestArtifact:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise ModelUnavailable(f"cannot read forest artifact {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ModelUnavailable(f"forest artifact {path} is not a JSON object")
        return cls.from_dict(data, config)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.metadata,
            "version": self.version,
            "feature_names": list(self.feature_names),
            "mappings": self.tables.to_mapping(),
            "trees": [_dump_node(t) for t in self.trees],
        }

    def tree_outputs(self, x: np.ndarray) -> np.ndarray:
        return np.array([predict_tree(t, x) for t in self.trees], dtype=float)
