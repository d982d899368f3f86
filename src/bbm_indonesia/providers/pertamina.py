"""Pertamina adapter: province price table on mypertamina.id.

The page lists one row per province followed by one price cell per product,
in a fixed product order. Some page versions render the same data as a grid
of cards instead of a table; those are read by ``parse_grid``.
"""

from __future__ import annotations

import logging

from bbm_indonesia.core.config import ProvidersConfig
from bbm_indonesia.core.exceptions import ProviderError
from bbm_indonesia.core.models import RawPriceRecord
from bbm_indonesia.providers.base import unavailable_record
from bbm_indonesia.providers.html import (
    cell_text,
    fetch_page,
    parse_price,
    rupiah_amounts,
    select,
    table_rows,
)

logger = logging.getLogger(__name__)

PERTAMINA_URL = "https://mypertamina.id/about/product-price"

# Column order of the price table, after the province column.
FUEL_TYPES = (
    "Pertalite",
    "Pertamax",
    "Pertamax Green",
    "Pertamax Turbo",
    "Pertamina Dex",
    "Dexlite",
    "Solar",
)

GRID_ITEM_SELECTOR = '[class*="grid"] > div, [class*="row"]'
GRID_PROVINCE_SELECTOR = '[class*="province"], [class*="wilayah"], h3, h4, strong'


class PertaminaAdapter:
    """Scrapes Pertamina's per-province price table."""

    key = "pertamina"

    def __init__(self, config: ProvidersConfig, url: str = PERTAMINA_URL) -> None:
        self._config = config
        self._url = url

    async def fetch_prices(self) -> list[RawPriceRecord]:
        try:
            html = await fetch_page(self._url, self._config, self.key)
        except ProviderError as e:
            logger.error("Pertamina scrape failed: %s", e)
            return [unavailable_record(self.key, error=str(e))]
        records = self.parse(html)
        logger.info("Pertamina: %d province rows", len(records))
        return records

    def parse(self, html: str) -> list[RawPriceRecord]:
        """Extract one record per province, from the table or else the grid."""
        return self.parse_table(html) or self.parse_grid(html)

    def parse_table(self, html: str) -> list[RawPriceRecord]:
        """One record per province row of the price table."""
        records: list[RawPriceRecord] = []
        for cells in table_rows(html):
            if len(cells) < 2:
                continue
            province = cell_text(cells[0])
            if not province or _is_fuel_label(province):
                continue

            products: dict[str, int] = {}
            for fuel, cell in zip(FUEL_TYPES, cells[1:]):
                price = parse_price(cell_text(cell))
                if price is not None:
                    products[fuel] = price

            if products:
                records.append(
                    RawPriceRecord(province=province, products=products, provider=self.key)
                )
        return records

    def parse_grid(self, html: str) -> list[RawPriceRecord]:
        """One record per grid item holding rupiah amounts.

        The province comes from a heading inside the item, or carries over
        from the previous item. Amounts map onto ``FUEL_TYPES`` by position.
        """
        grouped: dict[str, dict[str, int]] = {}
        province: str | None = None
        for item in select(html, GRID_ITEM_SELECTOR):
            amounts = rupiah_amounts(item.get_text(" "))
            if not amounts:
                continue
            label = item.select_one(GRID_PROVINCE_SELECTOR)
            if label is not None and cell_text(label):
                province = cell_text(label)
            if province is None:
                continue

            products = {
                fuel: price
                for fuel, price in zip(FUEL_TYPES, amounts)
                if price is not None
            }
            if products:
                grouped.setdefault(province, {}).update(products)

        return [
            RawPriceRecord(province=province, products=products, provider=self.key)
            for province, products in grouped.items()
        ]


def _is_fuel_label(text: str) -> bool:
    lowered = text.lower()
    return any(fuel.lower() in lowered for fuel in FUEL_TYPES)
