"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classifieds.api.error_handlers import register_error_handlers
from classifieds.api.routes import health, listings
from classifieds.config import settings
from classifieds.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(settings.log_level, json_logs=settings.log_json)
    logger.info("classifieds_api_starting")
    yield
    logger.info("classifieds_api_stopping")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Classifieds Listings",
        description="Listing lifecycle, idempotent publishing and photo ingestion.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(listings.router)

    return app


app = create_app()
