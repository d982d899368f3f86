"""BP adapter: price table on bp.com/id_id.

BP publishes one column per sales region ("JABODETABEK", "JAWA TIMUR") and
one row per product. Regions are expanded to the provinces they cover. When
the page carries no such table, product cards are scanned for a product name
and an Rp amount instead.
"""

from __future__ import annotations

import logging
import re

from bbm_indonesia.core.config import ProvidersConfig
from bbm_indonesia.core.exceptions import ProviderError
from bbm_indonesia.core.models import RawPriceRecord
from bbm_indonesia.providers.base import group_by_province, unavailable_record
from bbm_indonesia.providers.html import (
    RUPIAH_RE,
    cell_text,
    fetch_page,
    parse_price,
    select,
    tables,
)

logger = logging.getLogger(__name__)

BP_URL = "https://www.bp.com/id_id/indonesia/home/produk-dan-layanan/spbu/harga.html"

REGION_MAP: dict[str, tuple[str, ...]] = {
    "JABODETABEK": ("DKI Jakarta", "Banten", "Jawa Barat"),
    "JAWA TIMUR": ("Jawa Timur",),
    "JATIM": ("Jawa Timur",),
    "JAKARTA": ("DKI Jakarta",),
    "BANTEN": ("Banten",),
    "JAWA BARAT": ("Jawa Barat",),
    "JABAR": ("Jawa Barat",),
}

_HEADER_WORDS = ("jenis", "produk", "harga")

BP_PRODUCTS = ("BP 92", "BP Ultimate", "BP Ultimate Diesel")

CONTAINER_SELECTOR = '[class*="price"], [class*="fuel"], [class*="product"]'

DEFAULT_REGION = "JABODETABEK"

_REGION_RE = re.compile(r"(JABODETABEK|JAWA TIMUR|JATIM|JAKARTA)", re.IGNORECASE)

# Product names as they appear on cards, without the "BP" prefix.
_PRODUCT_RES = {
    product: re.compile(r"\b" + re.escape(product.lower().removeprefix("bp ")) + r"\b")
    for product in BP_PRODUCTS
}

NO_DATA_NOTE = "Silakan cek website BP langsung"


class BPAdapter:
    """Scrapes BP's region-by-product price table."""

    key = "bp"

    def __init__(self, config: ProvidersConfig, url: str = BP_URL) -> None:
        self._config = config
        self._url = url

    async def fetch_prices(self) -> list[RawPriceRecord]:
        try:
            html = await fetch_page(self._url, self._config, self.key)
        except ProviderError as e:
            logger.error("BP scrape failed: %s", e)
            return [unavailable_record(self.key, error=str(e))]

        records = self.parse(html)
        if not records:
            logger.warning("BP: no prices found on %s", self._url)
            return [unavailable_record(self.key, note=NO_DATA_NOTE)]
        logger.info("BP: %d provinces", len(records))
        return records

    def parse(self, html: str) -> list[RawPriceRecord]:
        rows = self.table_rows(html) or self.container_rows(html)
        return group_by_province(self.key, rows)

    def table_rows(self, html: str) -> list[tuple[str, str, int]]:
        """(province, fuel, price) triples from region-by-product tables."""
        rows: list[tuple[str, str, int]] = []
        for table in tables(html):
            trs = table.find_all("tr")
            if not trs:
                continue
            headers = [cell_text(c).upper() for c in trs[0].find_all(["th", "td"])]

            for tr in trs[1:]:
                cells = tr.find_all("td")
                if len(cells) < 2:
                    continue
                fuel = cell_text(cells[0])
                if not fuel or any(w in fuel.lower() for w in _HEADER_WORDS):
                    continue

                for i, cell in enumerate(cells[1:], start=1):
                    price = parse_price(cell_text(cell))
                    if price is None:
                        continue
                    region = headers[i] if i < len(headers) and headers[i] else f"Region {i}"
                    for province in REGION_MAP.get(region, (region,)):
                        rows.append((province, fuel, price))
        return rows

    def container_rows(self, html: str) -> list[tuple[str, str, int]]:
        """(province, fuel, price) triples from price, fuel or product cards.

        A card counts for a product when its text names the product (without
        the "BP" prefix) and carries an Rp amount. The sales region is read
        from the card text and defaults to JABODETABEK.
        """
        rows: list[tuple[str, str, int]] = []
        for container in select(html, CONTAINER_SELECTOR):
            text = container.get_text(" ")
            amount = RUPIAH_RE.search(text)
            if amount is None:
                continue
            price = parse_price(amount.group(1))
            if price is None:
                continue

            region_match = _REGION_RE.search(text)
            region = region_match.group(1).upper() if region_match else DEFAULT_REGION
            for product in _named_products(text):
                for province in REGION_MAP.get(region, ("DKI Jakarta",)):
                    rows.append((province, product, price))
        return rows


def _named_products(text: str) -> list[str]:
    """BP products named in ``text``, keeping only the most specific names.

    "Ultimate Diesel" also contains "Ultimate"; a card naming the diesel
    product is not read as a second product.
    """
    lowered = text.lower()
    named = [p for p, pattern in _PRODUCT_RES.items() if pattern.search(lowered)]
    return [p for p in named if not any(p != other and p in other for other in named)]
