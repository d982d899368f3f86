"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bbm_indonesia.api.deps import AppState
from bbm_indonesia.api.routes import router
from bbm_indonesia.core.cache import SnapshotCache
from bbm_indonesia.core.config import BbmConfig, load_config
from bbm_indonesia.core.exceptions import (
    BbmIndonesiaError,
    ConfigError,
    ProviderNotFoundError,
)
from bbm_indonesia.core.models import ProviderKey
from bbm_indonesia.prices.aggregator import ProviderAggregator
from bbm_indonesia.prices.service import PriceService
from bbm_indonesia.providers import ProviderAdapter, default_registry
from bbm_indonesia.regions.client import RegionDirectory
from bbm_indonesia.regions.matcher import RegionMatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config: BbmConfig = app.state._pending_config
    cache = SnapshotCache(default_ttl=config.cache.snapshot_ttl_seconds)
    directory = RegionDirectory(config.regions, cache, transport=app.state._pending_transport)

    adapters = app.state._pending_adapters
    if adapters is None:
        adapters = default_registry().create_enabled(config.providers)

    aggregator = ProviderAggregator(
        RegionMatcher(directory),
        timeout_seconds=config.providers.timeout_seconds,
    )
    prices = PriceService(
        cache,
        aggregator,
        adapters,
        snapshot_ttl=config.cache.snapshot_ttl_seconds,
    )
    app.state.app_state = AppState(
        config=config,
        cache=cache,
        directory=directory,
        prices=prices,
    )

    yield

    await directory.close()


def create_app(
    config: BbmConfig | None = None,
    adapters: Mapping[ProviderKey, ProviderAdapter] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``adapters`` replaces the registry-built provider set and ``transport``
    is handed to the region directory's HTTP client; both exist for tests
    and embedding.
    """
    import bbm_indonesia

    app = FastAPI(
        title="BBM Indonesia Price API",
        description="Indonesian retail fuel prices by provider and province",
        version=bbm_indonesia.__version__,
        lifespan=lifespan,
    )

    if config is None:
        config = load_config()

    # Stash constructor arguments so lifespan can retrieve them
    app.state._pending_config = config
    app.state._pending_adapters = dict(adapters) if adapters is not None else None
    app.state._pending_transport = transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    app.include_router(router, prefix=config.api.prefix)

    # Exception handlers
    @app.exception_handler(BbmIndonesiaError)
    async def bbm_exception_handler(request: Request, exc: BbmIndonesiaError):
        status_map = {
            ProviderNotFoundError: 404,
            ConfigError: 400,
        }
        status = status_map.get(type(exc), 500)
        if status >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(status_code=status, content={"success": False, "error": str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc) or type(exc).__name__},
        )

    return app
