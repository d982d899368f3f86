"""Tests for bbm_indonesia.regions.client (RegionDirectory)."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from bbm_indonesia.core.cache import PROVINCES_KEY, SnapshotCache, regencies_key
from bbm_indonesia.core.config import RegionsConfig
from bbm_indonesia.core.exceptions import RegionDirectoryError
from bbm_indonesia.core.models import Region
from bbm_indonesia.regions.client import RegionDirectory

BASE = "https://emsifa.github.io/api-wilayah-indonesia/api"


# --- Fixtures ---


@pytest.fixture
def regions_config() -> RegionsConfig:
    return RegionsConfig(rate_limit=100, request_timeout=5)


@pytest.fixture
def cache() -> SnapshotCache:
    return SnapshotCache()


@pytest.fixture
async def directory(regions_config, cache) -> RegionDirectory:
    async with RegionDirectory(regions_config, cache) as d:
        yield d


@pytest.fixture
def no_sleep():
    with patch("bbm_indonesia.regions.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


# --- Listings ---


@pytest.mark.unit
class TestListProvinces:
    @respx.mock
    async def test_fetches_and_parses(self, directory):
        respx.get(f"{BASE}/provinces.json").mock(
            return_value=httpx.Response(
                200, json=[{"id": "11", "name": "ACEH"}, {"id": "31", "name": "DKI JAKARTA "}]
            )
        )
        provinces = await directory.list_provinces()
        assert provinces == [Region(id="11", name="ACEH"), Region(id="31", name="DKI JAKARTA")]

    @respx.mock
    async def test_cached(self, directory, cache):
        route = respx.get(f"{BASE}/provinces.json").mock(
            return_value=httpx.Response(200, json=[{"id": "11", "name": "ACEH"}])
        )
        await directory.list_provinces()
        await directory.list_provinces()
        assert route.call_count == 1
        assert cache.has(PROVINCES_KEY)

    @respx.mock
    async def test_cached_with_directory_ttl(self, regions_config):
        clock_now = [0.0]
        cache = SnapshotCache(clock=lambda: clock_now[0])
        route = respx.get(f"{BASE}/provinces.json").mock(
            return_value=httpx.Response(200, json=[{"id": "11", "name": "ACEH"}])
        )
        async with RegionDirectory(regions_config, cache) as directory:
            await directory.list_provinces()
            clock_now[0] += regions_config.ttl_seconds
            await directory.list_provinces()
        assert route.call_count == 2

    @respx.mock
    async def test_returns_copy(self, directory):
        respx.get(f"{BASE}/provinces.json").mock(
            return_value=httpx.Response(200, json=[{"id": "11", "name": "ACEH"}])
        )
        first = await directory.list_provinces()
        first.clear()
        assert len(await directory.list_provinces()) == 1

    @respx.mock
    async def test_invalid_json(self, directory):
        respx.get(f"{BASE}/provinces.json").mock(return_value=httpx.Response(200, text="<html>"))
        with pytest.raises(RegionDirectoryError, match="invalid JSON"):
            await directory.list_provinces()

    @respx.mock
    async def test_non_list_payload(self, directory):
        respx.get(f"{BASE}/provinces.json").mock(
            return_value=httpx.Response(200, json={"data": []})
        )
        with pytest.raises(RegionDirectoryError, match="expected a list"):
            await directory.list_provinces()

    @respx.mock
    async def test_malformed_entry(self, directory):
        respx.get(f"{BASE}/provinces.json").mock(
            return_value=httpx.Response(200, json=[{"id": "11"}])
        )
        with pytest.raises(RegionDirectoryError, match="Malformed region entry"):
            await directory.list_provinces()

    @respx.mock
    async def test_failure_is_not_cached(self, directory, cache):
        respx.get(f"{BASE}/provinces.json").mock(return_value=httpx.Response(404))
        with pytest.raises(RegionDirectoryError):
            await directory.list_provinces()
        assert not cache.has(PROVINCES_KEY)


@pytest.mark.unit
class TestListRegencies:
    @respx.mock
    async def test_fetches(self, directory, cache):
        respx.get(f"{BASE}/regencies/31.json").mock(
            return_value=httpx.Response(
                200,
                json=[{"id": "3171", "province_id": "31", "name": "KOTA JAKARTA SELATAN"}],
            )
        )
        regencies = await directory.list_regencies("31")
        assert regencies == [Region(id="3171", name="KOTA JAKARTA SELATAN")]
        assert cache.has(regencies_key("31"))

    async def test_non_numeric_id_rejected(self, directory):
        with pytest.raises(RegionDirectoryError, match="must be numeric"):
            await directory.list_regencies("../provinces")


@pytest.mark.unit
class TestListDistricts:
    @respx.mock
    async def test_fetches(self, directory):
        respx.get(f"{BASE}/districts/3171.json").mock(
            return_value=httpx.Response(
                200, json=[{"id": "3171010", "regency_id": "3171", "name": "JAGAKARSA"}]
            )
        )
        districts = await directory.list_districts("3171")
        assert districts == [Region(id="3171010", name="JAGAKARSA")]

    async def test_blank_id_rejected(self, directory):
        with pytest.raises(RegionDirectoryError):
            await directory.list_districts(" ")


# --- Retry policy ---


@pytest.mark.unit
class TestRetry:
    @respx.mock
    async def test_429_then_success(self, directory, no_sleep):
        respx.get(f"{BASE}/provinces.json").mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "1"}),
                httpx.Response(200, json=[{"id": "11", "name": "ACEH"}]),
            ]
        )
        provinces = await directory.list_provinces()
        assert len(provinces) == 1
        no_sleep.assert_awaited_once_with(1)

    @respx.mock
    async def test_429_exhausted(self, directory, no_sleep):
        respx.get(f"{BASE}/provinces.json").mock(return_value=httpx.Response(429))
        with pytest.raises(RegionDirectoryError, match="Rate limit exceeded"):
            await directory.list_provinces()
        assert no_sleep.await_count == 3

    @respx.mock
    async def test_server_error_backoff(self, directory, no_sleep):
        respx.get(f"{BASE}/provinces.json").mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(502),
                httpx.Response(200, json=[]),
            ]
        )
        assert await directory.list_provinces() == []
        assert [c.args[0] for c in no_sleep.await_args_list] == [1, 2]

    @respx.mock
    async def test_server_error_exhausted(self, directory, no_sleep):
        respx.get(f"{BASE}/provinces.json").mock(return_value=httpx.Response(500))
        with pytest.raises(RegionDirectoryError) as exc_info:
            await directory.list_provinces()
        assert exc_info.value.context["status_code"] == 500

    @respx.mock
    async def test_connection_error_retried(self, directory, no_sleep):
        respx.get(f"{BASE}/provinces.json").mock(
            side_effect=[
                httpx.ConnectError("refused"),
                httpx.Response(200, json=[{"id": "11", "name": "ACEH"}]),
            ]
        )
        assert len(await directory.list_provinces()) == 1
        assert no_sleep.await_count == 1

    @respx.mock
    async def test_connection_error_exhausted(self, directory, no_sleep):
        respx.get(f"{BASE}/provinces.json").mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(RegionDirectoryError, match="Connection failed"):
            await directory.list_provinces()
        assert no_sleep.await_count == 2

    @respx.mock
    async def test_client_error_not_retried(self, directory, no_sleep):
        route = respx.get(f"{BASE}/regencies/99.json").mock(return_value=httpx.Response(404))
        with pytest.raises(RegionDirectoryError, match="HTTP 404"):
            await directory.list_regencies("99")
        assert route.call_count == 1
        no_sleep.assert_not_awaited()


@pytest.mark.unit
class TestTransportOverride:
    async def test_mock_transport(self, regions_config, cache, directory_transport):
        async with RegionDirectory(regions_config, cache, transport=directory_transport) as d:
            provinces = await d.list_provinces()
            districts = await d.list_districts("3171")
        assert len(provinces) == 34
        assert districts[0].name == "JAGAKARSA"
