"""Shared pytest fixtures for bbm-indonesia."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from bbm_indonesia.core.exceptions import RegionDirectoryError
from bbm_indonesia.core.models import RawPriceRecord, Region

PROVINCES_PAYLOAD = [
    {"id": "11", "name": "ACEH"},
    {"id": "12", "name": "SUMATERA UTARA"},
    {"id": "13", "name": "SUMATERA BARAT"},
    {"id": "14", "name": "RIAU"},
    {"id": "15", "name": "JAMBI"},
    {"id": "16", "name": "SUMATERA SELATAN"},
    {"id": "17", "name": "BENGKULU"},
    {"id": "18", "name": "LAMPUNG"},
    {"id": "19", "name": "KEPULAUAN BANGKA BELITUNG"},
    {"id": "21", "name": "KEPULAUAN RIAU"},
    {"id": "31", "name": "DKI JAKARTA"},
    {"id": "32", "name": "JAWA BARAT"},
    {"id": "33", "name": "JAWA TENGAH"},
    {"id": "34", "name": "DI YOGYAKARTA"},
    {"id": "35", "name": "JAWA TIMUR"},
    {"id": "36", "name": "BANTEN"},
    {"id": "51", "name": "BALI"},
    {"id": "52", "name": "NUSA TENGGARA BARAT"},
    {"id": "53", "name": "NUSA TENGGARA TIMUR"},
    {"id": "61", "name": "KALIMANTAN BARAT"},
    {"id": "62", "name": "KALIMANTAN TENGAH"},
    {"id": "63", "name": "KALIMANTAN SELATAN"},
    {"id": "64", "name": "KALIMANTAN TIMUR"},
    {"id": "65", "name": "KALIMANTAN UTARA"},
    {"id": "71", "name": "SULAWESI UTARA"},
    {"id": "72", "name": "SULAWESI TENGAH"},
    {"id": "73", "name": "SULAWESI SELATAN"},
    {"id": "74", "name": "SULAWESI TENGGARA"},
    {"id": "75", "name": "GORONTALO"},
    {"id": "76", "name": "SULAWESI BARAT"},
    {"id": "81", "name": "MALUKU"},
    {"id": "82", "name": "MALUKU UTARA"},
    {"id": "91", "name": "PAPUA BARAT"},
    {"id": "94", "name": "PAPUA"},
]

REGENCIES_PAYLOAD = {
    "31": [
        {"id": "3171", "province_id": "31", "name": "KOTA JAKARTA SELATAN"},
        {"id": "3173", "province_id": "31", "name": "KOTA JAKARTA PUSAT"},
    ],
}

DISTRICTS_PAYLOAD = {
    "3171": [
        {"id": "3171010", "regency_id": "3171", "name": "JAGAKARSA"},
        {"id": "3171020", "regency_id": "3171", "name": "PASAR MINGGU"},
    ],
}


class FakeAdapter:
    """Adapter returning a fixed payload, or raising a fixed exception."""

    def __init__(self, key: str, payload=None, exc: Exception | None = None, delay: float = 0.0):
        self.key = key
        self._payload = payload
        self._exc = exc
        self._delay = delay
        self.calls = 0

    async def fetch_prices(self):
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._exc is not None:
            raise self._exc
        return self._payload


class StubDirectory:
    """In-memory RegionDirectory replacement."""

    def __init__(self, provinces: list[Region] | None = None, fail: bool = False):
        self._provinces = provinces or []
        self._fail = fail
        self.calls = 0

    async def list_provinces(self) -> list[Region]:
        self.calls += 1
        if self._fail:
            raise RegionDirectoryError("directory down", context={"url": "stub"})
        return list(self._provinces)


def directory_handler(request: httpx.Request) -> httpx.Response:
    """httpx.MockTransport handler serving the fixture region payloads."""
    path = request.url.path
    if path.endswith("/provinces.json"):
        return httpx.Response(200, json=PROVINCES_PAYLOAD)
    if "/regencies/" in path:
        key = path.rsplit("/", 1)[-1].removesuffix(".json")
        if key in REGENCIES_PAYLOAD:
            return httpx.Response(200, json=REGENCIES_PAYLOAD[key])
    if "/districts/" in path:
        key = path.rsplit("/", 1)[-1].removesuffix(".json")
        if key in DISTRICTS_PAYLOAD:
            return httpx.Response(200, json=DISTRICTS_PAYLOAD[key])
    return httpx.Response(404, text="Not Found")


@pytest.fixture
def provinces_payload() -> list[dict[str, str]]:
    return [dict(p) for p in PROVINCES_PAYLOAD]


@pytest.fixture
def canonical_provinces() -> list[Region]:
    return [Region(id=p["id"], name=p["name"]) for p in PROVINCES_PAYLOAD]


@pytest.fixture
def stub_directory(canonical_provinces) -> StubDirectory:
    return StubDirectory(canonical_provinces)


@pytest.fixture
def directory_transport() -> httpx.MockTransport:
    return httpx.MockTransport(directory_handler)


@pytest.fixture
def shell_records() -> list[RawPriceRecord]:
    return [
        RawPriceRecord(
            province="DKI Jakarta",
            products={"Shell Super": 12700, "Shell V-Power": 13190},
            provider="shell",
        ),
        RawPriceRecord(
            province="Jawa Barat",
            products={"Shell Super": 12700},
            provider="shell",
        ),
    ]


@pytest.fixture
def vivo_records() -> list[RawPriceRecord]:
    return [
        RawPriceRecord(
            province="DKI Jakarta",
            products={"Revvo 92": 12700},
            provider="vivo",
            note="Harga estimasi (Static Data)",
        ),
        RawPriceRecord(
            province="Banten",
            products={"Revvo 92": 12700},
            provider="vivo",
            note="Harga estimasi (Static Data)",
        ),
    ]


@pytest.fixture
def make_adapter():
    """Factory fixture: make_adapter(key, payload=..., exc=..., delay=...)."""
    return FakeAdapter


@pytest.fixture
def failing_directory() -> StubDirectory:
    return StubDirectory(fail=True)
