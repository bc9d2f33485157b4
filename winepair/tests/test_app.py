import pytest
from fastapi.testclient import TestClient

from winepair.app import app, get_engine
from winepair.ensemble.config import DEFAULT_ENSEMBLE_CONFIG, EnsembleConfig
from winepair.ensemble.model import EnsembleModel
from winepair.features.config import FeatureConfig
from winepair.features.extractor import FeatureExtractor
from winepair.llm.orchestrator import ReasoningOrchestrator
from winepair.recommendations.cache import PairingCache
from winepair.recommendations.config import DEFAULT_COMPLETENESS, CacheConfig, EngineConfig
from winepair.recommendations.engine import PairingEngine
from winepair.recommendations.inventory import StaticInventory
from winepair.recommendations.sessions import InMemorySessionLog
from winepair.scoring.config import DEFAULT_FACTOR_WEIGHTS, ScoringConfig
from winepair.scoring.rules import RuleBasedScorer

client = TestClient(app)

SEAFOOD = {
    "description": "Grilled sea bass with lemon and herbs",
    "protein": "fish",
    "preparation": "grilled",
    "cuisine": "Mediterranean",
    "season": "summer",
}


@pytest.fixture
def engine(wines):
    engine = PairingEngine(
        inventory=StaticInventory(wines.values()),
        model=EnsembleModel.load(config=EnsembleConfig(artifact_path=DEFAULT_ENSEMBLE_CONFIG.artifact_path)),
        orchestrator=ReasoningOrchestrator([]),
        cache=PairingCache(CacheConfig(ttl_seconds=600, max_entries=64)),
        session_logger=InMemorySessionLog(),
        scorer=RuleBasedScorer(ScoringConfig(weights=dict(DEFAULT_FACTOR_WEIGHTS))),
        extractor=FeatureExtractor(config=FeatureConfig(guest_count_cap=12)),
        config=EngineConfig(
            source_weights={"rule": 0.5, "ml": 0.3, "ai": 0.2},
            completeness=dict(DEFAULT_COMPLETENESS),
            rank_decay=(1.0, 0.95, 0.9, 0.85, 0.8),
            ai_top_k=5,
            default_limit=3,
        ),
    )
    app.dependency_overrides[get_engine] = lambda: engine
    yield engine
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_pairings_returns_ranked_wines(engine):
    resp = client.post("/pairings", json={"dish": SEAFOOD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_candidates"] == 6
    assert len(body["recommendations"]) == 3
    assert body["recommendations"][0]["wine"]["type"] == "white"
    assert body["recommendations"][0]["rank"] == 1
    assert body["session_id"]


def test_pairings_respects_limit(engine):
    resp = client.post("/pairings", json={"dish": SEAFOOD, "limit": 1})
    assert len(resp.json()["recommendations"]) == 1


def test_pairings_limit_above_top_k_is_422(engine):
    resp = client.post("/pairings", json={"dish": SEAFOOD, "limit": 9})
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_pairings_blank_description_is_422(engine):
    resp = client.post("/pairings", json={"dish": {"description": "  "}})
    assert resp.status_code == 422


def test_pairings_require_ai_without_provider_is_500(engine):
    resp = client.post("/pairings", json={"dish": SEAFOOD, "require_ai": True})
    assert resp.status_code == 500
    assert resp.json()["error"] == "configuration_error"


def test_pairings_no_candidates(engine):
    resp = client.post("/pairings", json={"dish": SEAFOOD, "wine_types": ["fortified"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["recommendations"] == []
    assert body["reason"] == "no_candidates"


def test_quick_pairings(engine):
    resp = client.post("/pairings/quick", json={"dish": SEAFOOD, "limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["recommendations"]) == 2
    assert body["fingerprint"] is None


def test_cache_stats_endpoint(engine):
    client.post("/pairings", json={"dish": SEAFOOD})
    client.post("/pairings", json={"dish": SEAFOOD})
    resp = client.get("/cache/stats")
    assert resp.status_code == 200
    body = resp.json()
    assert body["hits"] == 1
    assert body["misses"] == 1
    assert "hit_rate" in body

    client.post("/cache/clear")
    assert client.get("/cache/stats").json()["size"] == 0


def test_model_status_endpoint(engine):
    resp = client.get("/model/status")
    assert resp.status_code == 200
    body = resp.json()
    assert body["degraded"] is False
    assert body["version"] == "pairing-forest-v1"


def test_model_reload_endpoint(engine):
    resp = client.post("/model/reload")
    assert resp.status_code == 200
    assert resp.json()["reloaded"] is True
