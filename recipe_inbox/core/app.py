"""
FastAPI application factory
"""
from contextlib import asynccontextmanager
from typing import Dict
import logging

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from recipe_inbox.core.config import Settings, get_settings
from recipe_inbox.core.logging_config import setup_logging
from recipe_inbox.api.v1.router import api_router

logger = logging.getLogger(__name__)


def configured_integrations(settings: Settings) -> Dict[str, bool]:
    """Which external services have credentials; video needs both RapidAPI and OpenAI"""
    return {
        "gemini": bool(settings.GOOGLE_API_KEY),
        "paprika": bool(settings.PAPRIKA_EMAIL and settings.PAPRIKA_PASSWORD),
        "video": bool(settings.RAPIDAPI_KEY and settings.OPENAI_API_KEY),
        "openai_fallback": bool(settings.OPENAI_API_KEY),
    }


def init_sentry(settings: Settings) -> bool:
    """Start Sentry error reporting when a DSN is configured"""
    if not settings.SENTRY_DSN:
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        release=f"recipe-inbox@{settings.APP_VERSION}",
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report missing credentials at startup"""
    setup_logging()

    missing = [name for name, ready in configured_integrations(get_settings()).items() if not ready]
    if missing:
        logger.warning(f"Integrations without credentials: {', '.join(missing)}")
    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()
    init_sentry(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Extract recipes from emails, webpages, photos, PDFs and cooking videos into Paprika",
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Liveness plus which integrations are configured"""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
            "integrations": configured_integrations(settings),
        }

    return app
