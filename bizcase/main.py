# =============================================================================
# Application Entry Point — FastAPI App Factory
# =============================================================================
#
# Run locally:
#   uvicorn bizcase.main:app --reload
#
# Wiring:
#   - logging.basicConfig at the configured level
#   - CORS for the browser front end
#   - request logging middleware
#   - JSON error envelope handlers
#   - report and form routers, GET /health
# =============================================================================

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bizcase.api import form, report
from bizcase.api.errors import register_exception_handlers
from bizcase.api.logging_middleware import RequestLoggingMiddleware
from bizcase.config import settings
from bizcase.models.responses import HealthResponse

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configured = [
        name for name, key in (
            ("openai", settings.openai_api_key),
            ("anthropic", settings.anthropic_api_key),
            ("deepseek", settings.deepseek_api_key),
        )
        if key
    ]
    logger.info(
        "%s v%s started; API keys configured for: %s",
        settings.app_name, settings.app_version, ", ".join(configured) or "none",
    )
    yield
    logger.info("%s shutting down", settings.app_name)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Turns a business case form into an LLM-drafted report with "
            "computed financial projections, exportable as DOCX or PDF."
        ),
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(report.router)
    app.include_router(form.router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            version=settings.app_version,
            service=settings.app_name,
        )

    return app


app = create_app()
