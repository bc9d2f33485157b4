from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import PairingError
from .recommendations.engine import PairingEngine, build_engine
from .recommendations.models import PairingRequest, PairingResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="Wine Pairing API", version="1.0.0")

_engine: PairingEngine | None = None


def get_engine() -> PairingEngine:
    """Return the process-wide engine, building it on first call."""
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


@app.exception_handler(PairingError)
async def pairing_error_handler(request: Request, exc: PairingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.message})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/pairings", response_model=PairingResponse)
async def pairings(body: PairingRequest, engine: PairingEngine = Depends(get_engine)) -> PairingResponse:
    return await engine.recommend(body.dish, body.options())


@app.post("/pairings/quick", response_model=PairingResponse)
async def quick_pairings(body: PairingRequest, engine: PairingEngine = Depends(get_engine)) -> PairingResponse:
    return await engine.quick_recommend(body.dish, limit=body.limit, wine_types=body.wine_types)


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats(engine: PairingEngine = Depends(get_engine)) -> dict:
    return engine.cache.stats()


@app.post("/cache/clear")
def cache_clear(engine: PairingEngine = Depends(get_engine)) -> dict:
    engine.cache.clear()
    return {"status": "cleared"}


@app.get("/model/status")
def model_status(engine: PairingEngine = Depends(get_engine)) -> dict:
    return engine.model.status()


@app.post("/model/reload")
def model_reload(engine: PairingEngine = Depends(get_engine)) -> dict:
    reloaded = engine.model.reload()
    return {"reloaded": reloaded, **engine.model.status()}
