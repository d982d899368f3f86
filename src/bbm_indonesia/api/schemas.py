"""API-specific response schemas (Pydantic v2).

Every response carries ``success``. Field names on the wire are camelCase
where the dashboard expects them (``lastUpdated``, ``cacheStats``).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bbm_indonesia.core.models import CacheStats, ProviderEntry, Region, Snapshot


# -- Error --


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    success: bool = False
    error: str


# -- Regions --


class RegionListResponse(BaseModel):
    """Provinces, regencies, or districts."""

    success: bool = True
    data: list[Region]


# -- Prices --


class PricesResponse(BaseModel):
    """Response for GET /prices."""

    success: bool = True
    data: Snapshot


class ProviderPricesResponse(BaseModel):
    """Response for GET /prices/{provider}."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    last_updated: datetime = Field(alias="lastUpdated")
    data: ProviderEntry


class RefreshResponse(BaseModel):
    """Response for POST /refresh."""

    success: bool = True
    message: str
    data: Snapshot


# -- Health --


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    status: str = "healthy"
    cache_stats: CacheStats = Field(alias="cacheStats")
    timestamp: datetime
