import json

import numpy as np
import pytest
from sklearn.ensemble import RandomForestRegressor
from sklearn.exceptions import NotFittedError

from winepair.ensemble.config import DEFAULT_ENSEMBLE_CONFIG, EnsembleConfig
from winepair.ensemble.export import export_forest, save_artifact
from winepair.ensemble.forest import ForestArtifact, Leaf, Split, predict_tree
from winepair.ensemble.model import EnsembleModel
from winepair.errors import ModelUnavailable
from winepair.features.config import FeatureConfig
from winepair.features.extractor import FeatureExtractor
from winepair.features.vocab import BUILTIN_TABLES

SAMPLE_ARTIFACT = DEFAULT_ENSEMBLE_CONFIG.artifact_path
CONFIG = EnsembleConfig(artifact_path=SAMPLE_ARTIFACT, expected_version="")
EXTRACTOR = FeatureExtractor(config=FeatureConfig(guest_count_cap=12))


def _artifact_dict():
    with open(SAMPLE_ARTIFACT, encoding="utf-8") as fh:
        return json.load(fh)


def test_predict_tree_threshold_and_categories():
    tree = Split(
        feature=0,
        categories=frozenset({1, 2}),
        left=Split(feature=1, threshold=0.5, left=Leaf(4.0), right=Leaf(3.0)),
        right=Leaf(2.0),
    )
    assert predict_tree(tree, np.array([1, 0.5])) == 4.0
    assert predict_tree(tree, np.array([2, 0.9])) == 3.0
    assert predict_tree(tree, np.array([0, 0.0])) == 2.0


def test_sample_artifact_loads():
    model = EnsembleModel.load(config=CONFIG)
    assert not model.degraded
    assert model.version == "pairing-forest-v1"
    assert model.status()["trees"] == 6
    assert model.tables.protein.index("fish") == BUILTIN_TABLES.protein.index("fish")


def test_prediction_is_bounded_and_favours_classic_pairings(seafood, red_meat, wines):
    model = EnsembleModel.load(config=CONFIG)
    fish_white, spread = model.predict(EXTRACTOR.encode(seafood, wines["chablis"]).with_rank(1))
    fish_red, _ = model.predict(EXTRACTOR.encode(seafood, wines["cabernet"]).with_rank(2))
    beef_red, _ = model.predict(EXTRACTOR.encode(red_meat, wines["barolo"]).with_rank(1))
    beef_white, _ = model.predict(EXTRACTOR.encode(red_meat, wines["chablis"]).with_rank(4))
    for rating in (fish_white, fish_red, beef_red, beef_white):
        assert 1.0 <= rating <= 5.0
    assert spread >= 0.0
    assert fish_white > fish_red
    assert beef_red > beef_white


def test_missing_artifact_degrades(tmp_path, seafood, wines):
    model = EnsembleModel.load(tmp_path / "missing.json", config=CONFIG)
    assert model.degraded
    assert model.status()["error"]
    assert model.predict(EXTRACTOR.encode(seafood, wines["chablis"])) == (None, None)
    assert model.tables is BUILTIN_TABLES


def test_corrupt_artifact_is_unavailable(tmp_path):
    path = tmp_path / "corrupt.json"
    path.write_text("{not json")
    with pytest.raises(ModelUnavailable):
        ForestArtifact.load(path, CONFIG)


def test_undecodable_artifact_degrades(tmp_path):
    path = tmp_path / "forest.json"
    path.write_bytes(b"\xff\xfe\x00garbage\x80\x81")
    model = EnsembleModel.load(path, config=EnsembleConfig(artifact_path=path))
    assert model.degraded
    assert model.status()["error"]


def test_version_mismatch_is_unavailable():
    config = EnsembleConfig(artifact_path=SAMPLE_ARTIFACT, expected_version="pairing-forest-v9")
    with pytest.raises(ModelUnavailable):
        ForestArtifact.from_dict(_artifact_dict(), config)


def test_wrong_feature_order_is_unavailable():
    data = _artifact_dict()
    data["feature_names"] = list(reversed(data["feature_names"]))
    with pytest.raises(ModelUnavailable):
        ForestArtifact.from_dict(data, CONFIG)


def test_leaf_outside_rating_range_is_unavailable():
    data = _artifact_dict()
    data["trees"] = [{"value": 7.5}]
    with pytest.raises(ModelUnavailable):
        ForestArtifact.from_dict(data, CONFIG)


def test_failed_reload_keeps_previous_artifact(tmp_path):
    model = EnsembleModel.load(config=CONFIG)
    assert model.reload(tmp_path / "missing.json") is False
    assert not model.degraded
    assert model.version == "pairing-forest-v1"


def test_reload_recovers_degraded_model(tmp_path):
    model = EnsembleModel.load(tmp_path / "missing.json", config=CONFIG)
    assert model.reload(SAMPLE_ARTIFACT) is True
    assert not model.degraded
    assert model.status()["error"] is None


def test_artifact_dict_round_trip():
    artifact = ForestArtifact.from_dict(_artifact_dict(), CONFIG)
    again = ForestArtifact.from_dict(artifact.to_dict(), CONFIG)
    x = np.array([1, 1, 3, 1, 0, 4, 0.5, 0.2])
    assert np.allclose(artifact.tree_outputs(x), again.tree_outputs(x))


def test_export_matches_sklearn_predictions(tmp_path):
    rng = np.random.default_rng(7)
    X = rng.integers(0, 6, size=(200, 8)).astype(float)
    y = np.clip(1.0 + X[:, 1] * 0.5 + X[:, 3] * 0.2 + rng.normal(0, 0.1, 200), 1.0, 5.0)
    forest = RandomForestRegressor(n_estimators=5, max_depth=4, random_state=0).fit(X, y)

    path = save_artifact(export_forest(forest, BUILTIN_TABLES, version="pairing-forest-test"), tmp_path / "forest.json")
    artifact = ForestArtifact.load(path, CONFIG)

    expected = forest.predict(X[:20])
    actual = [artifact.tree_outputs(row).mean() for row in X[:20]]
    assert np.allclose(actual, expected)


def test_export_rejects_unfitted_forest():
    with pytest.raises(NotFittedError):
        export_forest(RandomForestRegressor(), BUILTIN_TABLES, version="v")
