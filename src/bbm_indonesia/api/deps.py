"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from bbm_indonesia.core.cache import SnapshotCache
from bbm_indonesia.core.config import BbmConfig
from bbm_indonesia.prices.service import PriceService
from bbm_indonesia.regions.client import RegionDirectory


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: BbmConfig
    cache: SnapshotCache
    directory: RegionDirectory
    prices: PriceService


def get_app_state(request: Request) -> AppState:
    """Dependency: retrieve AppState from the request."""
    return request.app.state.app_state


def get_cache(request: Request) -> SnapshotCache:
    """Dependency: retrieve the process cache."""
    return request.app.state.app_state.cache


def get_directory(request: Request) -> RegionDirectory:
    """Dependency: retrieve the region directory client."""
    return request.app.state.app_state.directory


def get_price_service(request: Request) -> PriceService:
    """Dependency: retrieve the price service."""
    return request.app.state.app_state.prices
