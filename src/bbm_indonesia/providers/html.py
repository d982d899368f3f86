"""Shared HTTP and HTML-table helpers for the scraping adapters."""

from __future__ import annotations

import logging
import re

import httpx
from bs4 import BeautifulSoup, Tag

from bbm_indonesia.core.config import ProvidersConfig
from bbm_indonesia.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

# Prices at or below this are footnote numbers, years, etc.
MIN_PRICE = 1000

_NON_DIGIT_RE = re.compile(r"[^0-9]")

# "Rp 10.000", "Rp12,700", "Rp. 6800"
RUPIAH_RE = re.compile(r"Rp[\s.]*(\d+[.,]\d+|\d+)", re.IGNORECASE)


async def fetch_page(url: str, config: ProvidersConfig, provider: str) -> str:
    """GET ``url`` and return its body text.

    Raises:
        ProviderError: On transport errors or a non-2xx status.
    """
    try:
        async with httpx.AsyncClient(
            timeout=config.request_timeout,
            follow_redirects=True,
        ) as client:
            resp = await client.get(url, headers={"User-Agent": config.user_agent})
            resp.raise_for_status()
            return resp.text
    except httpx.HTTPStatusError as e:
        raise ProviderError(
            f"{provider}: HTTP {e.response.status_code} from {url}",
            context={"provider": provider, "url": url, "status_code": e.response.status_code},
        ) from e
    except httpx.RequestError as e:
        raise ProviderError(
            f"{provider}: request to {url} failed: {e}",
            context={"provider": provider, "url": url},
        ) from e


def parse_price(text: str | None) -> int | None:
    """Parse a rupiah amount such as ``"Rp12,700"`` or ``"Rp 13.190"``.

    Returns None when the text holds no digits or the amount is not above
    ``MIN_PRICE``.
    """
    if not text:
        return None
    digits = _NON_DIGIT_RE.sub("", text)
    if not digits:
        return None
    price = int(digits)
    return price if price > MIN_PRICE else None


def cell_text(cell: Tag) -> str:
    """Cell text with non-breaking spaces folded and whitespace collapsed."""
    return " ".join(cell.get_text(" ").split())


def table_rows(html: str) -> list[list[Tag]]:
    """Return the ``<td>`` cells of every row in ``html``, in document order."""
    soup = BeautifulSoup(html, "lxml")
    rows: list[list[Tag]] = []
    for tr in soup.find_all("tr"):
        cells = tr.find_all("td")
        if cells:
            rows.append(cells)
    return rows


def tables(html: str) -> list[Tag]:
    """Return every ``<table>`` element in ``html``."""
    return BeautifulSoup(html, "lxml").find_all("table")


def rupiah_amounts(text: str) -> list[int | None]:
    """Every ``Rp`` amount in ``text``, in order.

    Amounts that ``parse_price`` rejects stay in the list as None so callers
    can align positions with a fixed column order.
    """
    return [parse_price(m) for m in RUPIAH_RE.findall(text)]


def select(html: str, selector: str) -> list[Tag]:
    """Elements of ``html`` matching a CSS ``selector``, in document order."""
    return BeautifulSoup(html, "lxml").select(selector)
