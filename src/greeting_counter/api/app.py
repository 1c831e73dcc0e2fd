"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from greeting_counter.api.routes import router as api_router
from greeting_counter.api.ui import router as ui_router
from greeting_counter.app_logging import configure_logging
from greeting_counter.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.open_resources()
        except Exception:
            logger.exception("Failed to initialize the database")
        yield
        await app.state.container.close_resources()

    app = FastAPI(title=container.settings.app_title, lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[container.settings.cors_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(ui_router)

    return app
