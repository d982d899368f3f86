"""FastAPI route definitions for the BBM Indonesia API."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query

from bbm_indonesia.api.deps import get_cache, get_directory, get_price_service
from bbm_indonesia.api.schemas import (
    ErrorResponse,
    HealthResponse,
    PricesResponse,
    ProviderPricesResponse,
    RefreshResponse,
    RegionListResponse,
)
from bbm_indonesia.core.cache import SnapshotCache
from bbm_indonesia.core.models import PriceFilters
from bbm_indonesia.prices.query import resolve_provider
from bbm_indonesia.prices.service import PriceService
from bbm_indonesia.regions.client import RegionDirectory

router = APIRouter()

_ERRORS = {
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# -- Regions --


@router.get("/regions/provinces", response_model=RegionListResponse, responses=_ERRORS)
async def list_provinces(directory: RegionDirectory = Depends(get_directory)):
    """All provinces from the region directory."""
    return RegionListResponse(data=await directory.list_provinces())


@router.get(
    "/regions/regencies/{province_id}",
    response_model=RegionListResponse,
    responses=_ERRORS,
)
async def list_regencies(province_id: str, directory: RegionDirectory = Depends(get_directory)):
    """Regencies and cities of one province."""
    return RegionListResponse(data=await directory.list_regencies(province_id))


@router.get(
    "/regions/districts/{regency_id}",
    response_model=RegionListResponse,
    responses=_ERRORS,
)
async def list_districts(regency_id: str, directory: RegionDirectory = Depends(get_directory)):
    """Districts of one regency."""
    return RegionListResponse(data=await directory.list_districts(regency_id))


# -- Prices --


@router.get("/prices", response_model=PricesResponse, responses=_ERRORS)
async def list_prices(
    province: str | None = Query(None, description="Province name, case-insensitive substring"),
    province_id: str | None = Query(None, alias="provinceId", description="Canonical province id"),
    provider: str | None = Query(None, description="Provider key, e.g. 'shell'"),
    prices: PriceService = Depends(get_price_service),
):
    """All providers' prices, optionally filtered. Filters combine with AND."""
    filters = PriceFilters(provider=provider, province_id=province_id, province=province)
    return PricesResponse(data=await prices.query(filters))


@router.get("/prices/{provider}", response_model=ProviderPricesResponse, responses=_ERRORS)
async def get_provider_prices(
    provider: str,
    prices: PriceService = Depends(get_price_service),
):
    """One provider's records, or its failure entry."""
    snapshot = await prices.get_snapshot()
    key = resolve_provider(snapshot, provider)
    return ProviderPricesResponse(
        last_updated=snapshot.last_updated,
        data=snapshot.providers[key],
    )


@router.post("/refresh", response_model=RefreshResponse, responses=_ERRORS)
async def refresh_prices(prices: PriceService = Depends(get_price_service)):
    """Drop the cached snapshot and aggregate again. Blocks until done."""
    snapshot = await prices.refresh()
    return RefreshResponse(message="Cache refreshed", data=snapshot)


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: SnapshotCache = Depends(get_cache)):
    """Liveness plus cache counters."""
    return HealthResponse(cache_stats=cache.stats(), timestamp=datetime.now(UTC))
