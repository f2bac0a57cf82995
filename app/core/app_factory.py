"""Application factory for FastAPI app.

Centralizes app construction (settings, limiter, job queue, middleware,
handlers, routers) so each call yields an independent application with its
own rate limiter state.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters.job_queue.in_memory import InMemoryJobQueue
from app.api.routes import email_router, health_router, throttle_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import ClientKeyExtractor, build_rate_limiter, get_client_key


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    app.state.email_queue.close()


def create_app(
    app_settings: Settings | None = None,
    *,
    client_key_extractor: ClientKeyExtractor = get_client_key,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to build the app with; defaults to the
            environment-derived global settings.
        client_key_extractor: Maps a request to the identity it is
            throttled under; defaults to the remote IP address.

    Returns:
        Configured FastAPI app with limiter, job queue, middleware, handlers
        and routers.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Request Throttle API",
        description=(
            "Per-client fixed-window request throttling (by remote IP) with a "
            "background email job queue."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.rate_limiter = build_rate_limiter(cfg.app)
    app.state.client_key_extractor = client_key_extractor
    app.state.email_queue = InMemoryJobQueue(
        cfg.app.email_queue_name,
        max_size=cfg.app.email_queue_max_size,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(throttle_router)
    app.include_router(email_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
