"""Shell adapter: "Jenis BBM | Lokasi | Harga per Liter" table on shell.co.id.

A single location cell may name several provinces ("Jakarta, Banten, Jawa
Barat"); each gets its own record. When the page yields nothing the adapter
falls back to a reference price list so Shell still appears in the snapshot.
"""

from __future__ import annotations

import logging
import re

from bbm_indonesia.core.config import ProvidersConfig
from bbm_indonesia.core.exceptions import ProviderError
from bbm_indonesia.core.models import RawPriceRecord
from bbm_indonesia.providers.base import group_by_province
from bbm_indonesia.providers.html import cell_text, fetch_page, parse_price, table_rows

logger = logging.getLogger(__name__)

SHELL_URL = (
    "https://www.shell.co.id/in_id/pengendara-bermotor/bahan-bakar-shell/"
    "harga-bahan-bakar-shell.html"
)

FALLBACK_PRICES = {
    "Shell Super": 12700,
    "Shell V-Power": 13190,
    "Shell V-Power Diesel": 13860,
    "Shell V-Power Nitro+": 13480,
}
FALLBACK_REGIONS = ("DKI Jakarta", "Banten", "Jawa Barat")
FALLBACK_NOTE = "Harga acuan (fallback data)"

_LOCATION_SPLIT_RE = re.compile(r"[,/]")


class ShellAdapter:
    """Scrapes Shell's fuel/location/price table, with a static fallback."""

    key = "shell"

    def __init__(self, config: ProvidersConfig, url: str = SHELL_URL) -> None:
        self._config = config
        self._url = url

    async def fetch_prices(self) -> list[RawPriceRecord]:
        try:
            html = await fetch_page(self._url, self._config, self.key)
        except ProviderError as e:
            logger.error("Shell scrape failed, using fallback data: %s", e)
            return self.fallback()

        records = self.parse(html)
        if not records:
            logger.warning("Shell: no rows extracted, using fallback data")
            return self.fallback()
        logger.info("Shell: %d provinces", len(records))
        return records

    def parse(self, html: str) -> list[RawPriceRecord]:
        rows: list[tuple[str, str, int]] = []
        for cells in table_rows(html):
            if len(cells) < 3:
                continue
            fuel, locations, price_text = (cell_text(c) for c in cells[:3])
            if not fuel or not locations or "Jenis BBM" in fuel:
                continue
            price = parse_price(price_text)
            if price is None:
                continue
            for location in split_locations(locations):
                rows.append((canonical_label(location), fuel, price))
        return group_by_province(self.key, rows)

    def fallback(self) -> list[RawPriceRecord]:
        rows = [
            (region, fuel, price)
            for region in FALLBACK_REGIONS
            for fuel, price in FALLBACK_PRICES.items()
        ]
        return group_by_province(self.key, rows, note=FALLBACK_NOTE)


def split_locations(text: str) -> list[str]:
    """``"Jakarta, Banten / Jawa Barat"`` -> ``["Jakarta", "Banten", "Jawa Barat"]``."""
    return [part.strip() for part in _LOCATION_SPLIT_RE.split(text) if part.strip()]


def canonical_label(location: str) -> str:
    """Shell's own spelling fixes, applied before grouping."""
    lowered = location.lower()
    if "jakarta" in lowered:
        return "DKI Jakarta"
    if "sumut" in lowered or "sumatera utara" in lowered:
        return "Sumatera Utara"
    return location
