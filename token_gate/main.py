"""
FastAPI application entrypoint for the token gate.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from token_gate.api.routes import router as api_router
from token_gate.core.config import get_settings
from token_gate.core.logging import configure_logging
from token_gate.dependencies import get_cleanup_sweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    if not get_cleanup_sweeper.cache_info().currsize:
        return
    sweeper = get_cleanup_sweeper()
    if sweeper.pending:
        logger.info("Waiting for %d pending token cleanups", sweeper.pending)
    await sweeper.wait_idle()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Token Gate",
        version="0.1.0",
        description="Verification and revocation gate for short-lived access tokens.",
        lifespan=_lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
