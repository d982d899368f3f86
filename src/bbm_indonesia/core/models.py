"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Type Aliases ---

ProviderKey = str
FuelName = str
RegionId = str

# --- Region Models ---


class Region(BaseModel):
    """An administrative region, canonical or unmatched.

    ``id`` is the identifier from the region directory; ``None`` means the
    name could not be matched to a canonical region.
    """

    model_config = ConfigDict(frozen=True)

    id: RegionId | None = None
    name: str

    @property
    def is_matched(self) -> bool:
        return self.id is not None


# --- Price Models ---


class RawPriceRecord(BaseModel):
    """One provider's prices for one free-text region label."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    province: str
    products: dict[FuelName, int] = {}
    provider: ProviderKey | None = None
    note: str | None = None
    error: str | None = None

    @field_validator("province")
    @classmethod
    def province_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("province must not be blank")
        return v

    @field_validator("products")
    @classmethod
    def prices_positive(cls, v: dict[str, int]) -> dict[str, int]:
        for fuel, price in v.items():
            if not fuel.strip():
                raise ValueError("fuel name must not be blank")
            if price <= 0:
                raise ValueError(f"price for {fuel!r} must be > 0, got {price}")
        return v

    @property
    def is_failure(self) -> bool:
        """True for the placeholder record an adapter emits when it failed."""
        return self.error is not None and not self.products


class EnrichedPriceRecord(RawPriceRecord):
    """A raw record with its resolved canonical region attached."""

    province_info: Region = Field(alias="provinceInfo")

    @classmethod
    def from_raw(cls, raw: RawPriceRecord, region: Region) -> EnrichedPriceRecord:
        fields = raw.model_dump(include=set(RawPriceRecord.model_fields))
        return cls(**fields, province_info=region)


class ProviderFailure(BaseModel):
    """Snapshot entry for a provider whose adapter failed outright."""

    model_config = ConfigDict(frozen=True)

    error: str
    data: list[EnrichedPriceRecord] = []


ProviderEntry = tuple[EnrichedPriceRecord, ...] | ProviderFailure


class Snapshot(BaseModel):
    """One fully assembled aggregation across all providers.

    Never mutated after construction; a refresh replaces it wholesale.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    last_updated: datetime = Field(alias="lastUpdated")
    providers: dict[ProviderKey, ProviderEntry]

    def provider_keys(self) -> list[ProviderKey]:
        return list(self.providers.keys())

    def records(self, provider: ProviderKey) -> tuple[EnrichedPriceRecord, ...]:
        """Records for a provider; empty for failed or unknown providers."""
        entry = self.providers.get(provider)
        if entry is None or isinstance(entry, ProviderFailure):
            return ()
        return entry

    def failed_providers(self) -> list[ProviderKey]:
        return [k for k, v in self.providers.items() if isinstance(v, ProviderFailure)]


class PriceFilters(BaseModel):
    """Filters accepted by the query engine. Absent filters are ``None``."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderKey | None = None
    province_id: RegionId | None = None
    province: str | None = None

    @field_validator("provider", "province_id", "province")
    @classmethod
    def blank_is_absent(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def is_empty(self) -> bool:
        return self.provider is None and self.province_id is None and self.province is None


class CacheStats(BaseModel):
    """Counters reported by the snapshot cache."""

    model_config = ConfigDict(frozen=True)

    hits: int = 0
    misses: int = 0
    keys: int = 0
