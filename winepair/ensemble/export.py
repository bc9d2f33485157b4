"""
Convert a fitted scikit-learn forest into the pairing artifact format.

Usage::

    forest = RandomForestRegressor(n_estimators=30, max_depth=8).fit(X, y)
    artifact = export_forest(forest, tables, version="pairing-forest-v2")
    save_artifact(artifact, "pairing_forest_v2.json")

Fitting stays in the offline training pipeline; this module only reads the
fitted trees.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sklearn.ensemble import RandomForestRegressor
from sklearn.tree._tree import TREE_LEAF
from sklearn.utils.validation import check_is_fitted

from ..features.extractor import FEATURE_ORDER
from ..features.vocab import FeatureTables


def _export_node(tree, node: int, low: float, high: float) -> dict[str, Any]:
    left = tree.children_left[node]
    right = tree.children_right[node]
    if left == TREE_LEAF:
        value = float(tree.value[node][0][0])
        return {"value": max(low, min(high, value))}
    return {
        "feature": int(tree.feature[node]),
        "threshold": float(tree.threshold[node]),
        "left": _export_node(tree, left, low, high),
        "right": _export_node(tree, right, low, high),
    }


def export_forest(
    forest: RandomForestRegressor,
    tables: FeatureTables,
    version: str,
    min_rating: float = 1.0,
    max_rating: float = 5.0,
) -> dict[str, Any]:
    if not isinstance(forest, RandomForestRegressor):
        raise TypeError(f"expected RandomForestRegressor, got {type(forest).__name__}")
    check_is_fitted(forest)
    if forest.n_features_in_ != len(FEATURE_ORDER):
        raise ValueError(f"forest was fitted on {forest.n_features_in_} features, expected {len(FEATURE_ORDER)}")

    return {
        "algorithm": "random_forest",
        "version": version,
        "n_trees": len(forest.estimators_),
        "max_depth": forest.max_depth,
        "feature_names": list(FEATURE_ORDER),
        "mappings": tables.to_mapping(),
        "trees": [_export_node(est.tree_, 0, min_rating, max_rating) for est in forest.estimators_],
    }


def save_artifact(artifact: dict[str, Any], path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(artifact, fh, indent=2)
    return path
