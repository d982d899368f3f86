"""Static price tables for providers that publish no machine-readable prices.

Vivo and Mobil (ExxonMobil) do not list prices on their websites. Their
adapters serve a reference table, marked with an estimate note.
"""

from __future__ import annotations

from collections.abc import Mapping

from bbm_indonesia.core.config import ProvidersConfig
from bbm_indonesia.core.models import ProviderKey, RawPriceRecord

ESTIMATE_NOTE = "Harga estimasi (Static Data)"

VIVO_PRICES: dict[str, dict[str, int]] = {
    region: {"Revvo 90": 12090, "Revvo 92": 12700, "Revvo 95": 13500}
    for region in ("DKI Jakarta", "Banten", "Jawa Barat")
}

MOBIL_PRICES: dict[str, dict[str, int]] = {
    region: {"Gasoline 92": 12700}
    for region in ("DKI Jakarta", "Banten", "Jawa Barat", "Jawa Timur")
}


class StaticPriceAdapter:
    """Serves a fixed ``{province: {fuel: price}}`` table."""

    def __init__(
        self,
        key: ProviderKey,
        prices: Mapping[str, Mapping[str, int]],
        note: str | None = ESTIMATE_NOTE,
    ) -> None:
        self._key = key
        self._records = [
            RawPriceRecord(province=province, products=dict(products), provider=key, note=note)
            for province, products in prices.items()
        ]

    @property
    def key(self) -> ProviderKey:
        return self._key

    async def fetch_prices(self) -> list[RawPriceRecord]:
        return list(self._records)


def vivo_adapter(config: ProvidersConfig) -> StaticPriceAdapter:
    return StaticPriceAdapter("vivo", VIVO_PRICES)


def mobil_adapter(config: ProvidersConfig) -> StaticPriceAdapter:
    return StaticPriceAdapter("mobil", MOBIL_PRICES)
