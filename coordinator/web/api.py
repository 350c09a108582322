"""FastAPI application for the debate coordinator."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coordinator import __version__
from coordinator.config.settings import AppConfig, get_default_config
from coordinator.services import CoordinatorServices, build_services
from coordinator.web.endpoints.agents import router as agents_router
from coordinator.web.endpoints.chat import router as chat_router
from coordinator.web.endpoints.chat import ws_router as chat_ws_router
from coordinator.web.endpoints.events import router as events_router
from coordinator.web.endpoints.markets import router as markets_router
from coordinator.web.endpoints.system import router as system_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    services: CoordinatorServices = app.state.services
    await services.start()

    yield

    await services.stop()


def create_app(
    config: AppConfig | None = None, services: CoordinatorServices | None = None
) -> FastAPI:
    """Build the application around one service registry."""
    if services is None:
        services = build_services(config or get_default_config())
    config = services.config

    app = FastAPI(
        title="Debate Coordinator",
        description="Coordinates gladiator discussions and judge verdicts for debate markets",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    allowed_origins = config.system.allowed_origins
    if allowed_origins:
        logger.info(f"Setting CORS allowed origins: {allowed_origins}")

        # Production: Use specific origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        logger.info("No ALLOWED_ORIGINS set, using development CORS settings")

        # Development: Allow any localhost/127.0.0.1
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(system_router, prefix="/v1")
    app.include_router(chat_router, prefix="/v1")
    app.include_router(chat_ws_router, prefix="/v1")
    app.include_router(markets_router, prefix="/v1")
    app.include_router(agents_router, prefix="/v1")
    app.include_router(events_router, prefix="/v1")

    return app
