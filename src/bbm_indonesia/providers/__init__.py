"""Fuel provider adapters.

Built-in adapters:

- ``PertaminaAdapter``: per-province table on mypertamina.id.
- ``ShellAdapter``: fuel/location/price table on shell.co.id, with fallback.
- ``BPAdapter``: region-by-product table on bp.com.
- ``StaticPriceAdapter``: fixed tables for Vivo and Mobil.

Adding a provider:
1. Write a class with a ``key`` and ``async fetch_prices() -> list[RawPriceRecord]``.
2. Register a factory on the registry passed to the application.
"""

from bbm_indonesia.providers.base import (
    AdapterErr,
    AdapterOk,
    AdapterResult,
    ProviderAdapter,
    ProviderRegistry,
    group_by_province,
    unavailable_record,
)
from bbm_indonesia.providers.bp import BPAdapter
from bbm_indonesia.providers.pertamina import PertaminaAdapter
from bbm_indonesia.providers.shell import ShellAdapter
from bbm_indonesia.providers.static import StaticPriceAdapter, mobil_adapter, vivo_adapter


def default_registry() -> ProviderRegistry:
    """Registry holding the five built-in providers."""
    registry = ProviderRegistry()
    registry.register("pertamina", PertaminaAdapter)
    registry.register("shell", ShellAdapter)
    registry.register("bp", BPAdapter)
    registry.register("vivo", vivo_adapter)
    registry.register("mobil", mobil_adapter)
    return registry


__all__ = [
    # Protocol and results
    "ProviderAdapter",
    "AdapterOk",
    "AdapterErr",
    "AdapterResult",
    "ProviderRegistry",
    "default_registry",
    # Helpers
    "group_by_province",
    "unavailable_record",
    # Adapters
    "PertaminaAdapter",
    "ShellAdapter",
    "BPAdapter",
    "StaticPriceAdapter",
    "vivo_adapter",
    "mobil_adapter",
]
