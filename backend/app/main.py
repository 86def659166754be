"""FastAPI application factory wiring routes, services, and shared state."""
from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import routes_assessment, routes_health
from app.core.config import Settings, get_settings
from app.schemas.common import failure
from app.services.he_service import HEAssessmentEngine
from fhe_core.errors import CLIENT_ERRORS, AssessmentError
from fhe_core.model import LinearModel

LOGGER = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
        return JSONResponse(status_code=400, content=failure("Invalid request body", 400, errors))

    @app.exception_handler(AssessmentError)
    async def assessment_error(request: Request, exc: AssessmentError) -> JSONResponse:
        if isinstance(exc, CLIENT_ERRORS):
            LOGGER.warning("⚠️ %s %s rejected: %s", request.method, request.url.path, exc)
            return JSONResponse(status_code=400, content=failure(str(exc), 400))
        LOGGER.error("❌ %s %s failed: %s", request.method, request.url.path, type(exc).__name__)
        return JSONResponse(status_code=500, content=failure("Failed to process encrypted assessment", 500))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("❌ %s %s crashed", request.method, request.url.path)
        return JSONResponse(status_code=500, content=failure("Internal Server Error", 500))


def create_app(settings: Optional[Settings] = None, model: Optional[LinearModel] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION)

    # Initialized lazily on first use or via POST /initialize
    app.state.settings = settings
    app.state.he_engine = HEAssessmentEngine(settings, model=model)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    prefix = settings.ASSESSMENT_API_PREFIX.rstrip("/")
    app.include_router(routes_assessment.router, prefix=prefix)
    app.include_router(routes_health.router, prefix=prefix)
    _register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        logging.info("📥 %s %s START", request.method, request.url.path)
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logging.info("🚀 %s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed)
        return response

    return app


app = create_app()
