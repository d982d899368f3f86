"""Provider adapter protocol, adapter results, and the adapter registry.

Architecture
------------
Every fuel retailer is wrapped by an adapter that turns whatever the
retailer publishes into canonical ``RawPriceRecord`` values:

    Retailer page / static table → ProviderAdapter → list[RawPriceRecord]

The aggregator only ever sees the ``ProviderAdapter`` protocol and wraps each
call in an ``AdapterResult`` (``AdapterOk | AdapterErr``), so tolerating a
failed provider is a type check rather than a guess about return shapes.
Adding a retailer means writing one adapter and registering a factory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from bbm_indonesia.core.config import ProvidersConfig
from bbm_indonesia.core.models import ProviderKey, RawPriceRecord

logger = logging.getLogger("bbm_indonesia.providers")

UNAVAILABLE_PROVINCE = "Data tidak tersedia"


@runtime_checkable
class ProviderAdapter(Protocol):
    """Produces the current price records of one provider."""

    @property
    def key(self) -> ProviderKey: ...

    async def fetch_prices(self) -> list[RawPriceRecord]: ...


@dataclass(frozen=True)
class AdapterOk:
    """An adapter call that returned records (possibly none)."""

    records: tuple[RawPriceRecord, ...]


@dataclass(frozen=True)
class AdapterErr:
    """An adapter call that raised, timed out, or returned malformed data."""

    reason: str


AdapterResult = AdapterOk | AdapterErr

AdapterFactory = Callable[[ProvidersConfig], ProviderAdapter]


class ProviderRegistry:
    """Registry of available provider adapters."""

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def register(self, name: str, factory: AdapterFactory) -> None:
        name = name.lower()
        if name in self._factories:
            raise ValueError(
                f"Provider '{name}' is already registered. Use replace() to override."
            )
        self._factories[name] = factory

    def replace(self, name: str, factory: AdapterFactory) -> None:
        name = name.lower()
        if name not in self._factories:
            raise KeyError(f"Provider '{name}' is not registered.")
        self._factories[name] = factory

    def get(self, name: str) -> AdapterFactory:
        return self._factories[name.lower()]

    def list_names(self) -> list[str]:
        return list(self._factories.keys())

    def create_enabled(self, config: ProvidersConfig) -> dict[ProviderKey, ProviderAdapter]:
        """Instantiate the enabled adapters, in the configured order."""
        adapters: dict[ProviderKey, ProviderAdapter] = {}
        for name in config.enabled:
            if name not in self._factories:
                logger.warning("Provider '%s' is enabled but not registered, skipping", name)
                continue
            adapters[name] = self._factories[name](config)
        return adapters


def group_by_province(
    provider: ProviderKey,
    rows: Iterable[tuple[str, str, int]],
    note: str | None = None,
) -> list[RawPriceRecord]:
    """Fold flat ``(province, fuel, price)`` rows into one record per province.

    Province order follows first appearance; a later price for the same
    province and fuel overrides an earlier one.
    """
    grouped: dict[str, dict[str, int]] = {}
    for province, fuel, price in rows:
        grouped.setdefault(province, {})[fuel] = price
    return [
        RawPriceRecord(province=province, products=products, provider=provider, note=note)
        for province, products in grouped.items()
    ]


def unavailable_record(
    provider: ProviderKey,
    error: str | None = None,
    note: str | None = None,
) -> RawPriceRecord:
    """Placeholder emitted when a provider has nothing to show."""
    return RawPriceRecord(
        province=UNAVAILABLE_PROVINCE,
        products={},
        provider=provider,
        error=error,
        note=note,
    )
