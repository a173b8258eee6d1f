"""
Cultural Profile Engine: HTTP API Server
========================================

Thin HTTP surface over CulturalIntelligenceEngine.

Endpoints:
- GET  /health                          -> Engine status
- GET  /api/search                      -> Ranked graph entities for a query
- POST /api/analysis/cultural-profile   -> Aggregated CulturalProfile
- POST /api/narrative                   -> CulturalNarrative
- POST /api/discoveries                 -> Discovery recommendations
- POST /api/challenges                  -> Growth challenges
- POST /api/evolution                   -> Evolution predictions

Usage:
    uvicorn profile_engine.api.server:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from narrative.contracts import CulturalNarrative

from ..config import EngineConfig
from ..contracts.entities import Category
from ..contracts.errors import (
    ConfigurationError,
    NarrativeFormatError,
    NarrativeProviderError,
    ProviderError,
)
from ..contracts.profile import PreferenceSet
from ..engine import CulturalIntelligenceEngine
from ..observability import configure_logging

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class PreferencesRequest(BaseModel):
    preferences: Dict[str, List[str]]


class NarrativeFollowUpRequest(BaseModel):
    preferences: Dict[str, List[str]]
    narrative: Dict[str, Any]


def _preferences(raw: Dict[str, List[str]]) -> PreferenceSet:
    try:
        return PreferenceSet.from_dict(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _narrative(raw: Dict[str, Any]) -> CulturalNarrative:
    try:
        return CulturalNarrative.model_validate(raw)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid narrative: {e.error_count()} error(s)")


def _require_content(preferences: PreferenceSet) -> None:
    if preferences.total_items == 0:
        raise HTTPException(status_code=400, detail="At least one preference is required")


# =============================================================================
# APPLICATION
# =============================================================================

def create_app(engine: Optional[CulturalIntelligenceEngine] = None) -> FastAPI:
    """
    Build the API application.

    When no engine is injected, the lifespan builds one from the
    environment and closes it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = engine is None
        if owned:
            config = EngineConfig.from_env()
            configure_logging(config.log_level)
            app.state.engine = CulturalIntelligenceEngine.from_config(config)
            logger.info("Engine initialized from environment")
        else:
            app.state.engine = engine
        yield
        if owned:
            await app.state.engine.aclose()
            logger.info("Engine closed")
        app.state.engine = None

    app = FastAPI(
        title="Cultural Profile Engine API",
        version="1.0.0",
        description="Cultural preference aggregation and narrative generation",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _engine(request: Request) -> CulturalIntelligenceEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(NarrativeProviderError)
    async def narrative_provider_error(request: Request, exc: NarrativeProviderError):
        return JSONResponse(
            status_code=502,
            content={"error": "narrative_provider_error", "code": exc.error_code, "detail": str(exc)},
        )

    @app.exception_handler(NarrativeFormatError)
    async def narrative_format_error(request: Request, exc: NarrativeFormatError):
        return JSONResponse(
            status_code=502,
            content={"error": "narrative_format_error", "detail": str(exc)},
        )

    @app.exception_handler(ProviderError)
    async def graph_provider_error(request: Request, exc: ProviderError):
        return JSONResponse(
            status_code=502,
            content={"error": "graph_provider_error", "detail": str(exc)},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        logger.error("Configuration error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "configuration_error", "detail": str(exc)},
        )


def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health_check(request: Request):
        """Engine status."""
        engine = _engine(request)
        return {"status": "online", "cache": engine.cache.get_stats().to_dict()}

    @app.get("/api/search")
    async def search(
        request: Request,
        q: str = Query(..., min_length=1),
        category: str = Query(...),
        limit: int = Query(8, ge=1, le=50),
    ):
        try:
            parsed = Category.parse(category)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not q.strip():
            raise HTTPException(status_code=400, detail="Query must not be blank")

        results = await _engine(request).search(q, parsed, limit)
        return {
            "query": q,
            "category": parsed.value,
            "results": [
                {**entity.to_dict(), "relevance": round(score, 4)}
                for entity, score in results
            ],
        }

    @app.post("/api/analysis/cultural-profile")
    async def cultural_profile(request: Request, body: PreferencesRequest):
        preferences = _preferences(body.preferences)
        _require_content(preferences)
        profile = await _engine(request).analyze(preferences)
        return {"profile": profile.to_dict()}

    @app.post("/api/narrative")
    async def narrative(request: Request, body: PreferencesRequest):
        preferences = _preferences(body.preferences)
        _require_content(preferences)
        engine = _engine(request)
        profile = await engine.analyze(preferences)
        result = await engine.narrate(preferences, profile)
        return {"narrative": result.to_dict(), "profile": profile.to_dict()}

    @app.post("/api/discoveries")
    async def discoveries(request: Request, body: NarrativeFollowUpRequest):
        preferences = _preferences(body.preferences)
        narrative = _narrative(body.narrative)
        items = await _engine(request).discoveries(narrative, preferences)
        return {"recommendations": items}

    @app.post("/api/challenges")
    async def challenges(request: Request, body: NarrativeFollowUpRequest):
        preferences = _preferences(body.preferences)
        narrative = _narrative(body.narrative)
        items = await _engine(request).growth_challenges(preferences, narrative)
        return {"challenges": items}

    @app.post("/api/evolution")
    async def evolution(request: Request, body: PreferencesRequest):
        preferences = _preferences(body.preferences)
        _require_content(preferences)
        items = await _engine(request).evolution(preferences)
        return {"predictions": items}


app = create_app()
