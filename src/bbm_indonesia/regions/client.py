"""Rate-limited async client for the Indonesian administrative region directory.

The directory is the static emsifa ``api-wilayah-indonesia`` dataset:

    {base}/provinces.json             -> [{"id": "11", "name": "ACEH"}, ...]
    {base}/regencies/{province}.json  -> [{"id": "1101", "province_id": "11", "name": ...}]
    {base}/districts/{regency}.json   -> [{"id": "1101010", "regency_id": "1101", "name": ...}]

Every listing is cached in the shared ``SnapshotCache`` with a long TTL. A
failed fetch raises ``RegionDirectoryError``; it is never turned into an
empty list here.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from aiolimiter import AsyncLimiter

from bbm_indonesia.core.cache import (
    PROVINCES_KEY,
    SnapshotCache,
    districts_key,
    regencies_key,
)
from bbm_indonesia.core.config import RegionsConfig
from bbm_indonesia.core.exceptions import RegionDirectoryError
from bbm_indonesia.core.models import Region

logger = logging.getLogger(__name__)

# Retry configuration
_MAX_RETRIES_429 = 3
_DEFAULT_RETRY_AFTER = 5
_MAX_RETRIES_SERVER = 3
_MAX_RETRIES_CONNECTION = 2
_CONNECTION_RETRY_DELAY = 2.0


class RegionDirectory:
    """Async client for provinces, regencies and districts.

    Use via ``async with RegionDirectory(config, cache) as directory:`` or
    call ``close()`` explicitly.

    Parameters
    ----------
    config : RegionsConfig
        Base URL, rate limit, request timeout and cache TTL.
    cache : SnapshotCache
        Shared process cache. Listings are stored under ``provinces``,
        ``regencies_<id>`` and ``districts_<id>``.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: RegionsConfig,
        cache: SnapshotCache,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._cache = cache
        self._limiter = AsyncLimiter(max_rate=config.rate_limit, time_period=1.0)
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.request_timeout),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> RegionDirectory:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    # --- Listings ---

    async def list_provinces(self) -> list[Region]:
        """Return every province, in directory order.

        Raises:
            RegionDirectoryError: If the directory cannot be fetched or parsed.
        """
        return await self._cached_listing(PROVINCES_KEY, "/provinces.json")

    async def list_regencies(self, province_id: str) -> list[Region]:
        """Return the regencies/cities of one province."""
        province_id = _validate_id(province_id, "province_id")
        return await self._cached_listing(
            regencies_key(province_id), f"/regencies/{province_id}.json"
        )

    async def list_districts(self, regency_id: str) -> list[Region]:
        """Return the districts (kecamatan) of one regency."""
        regency_id = _validate_id(regency_id, "regency_id")
        return await self._cached_listing(
            districts_key(regency_id), f"/districts/{regency_id}.json"
        )

    async def _cached_listing(self, key: str, path: str) -> list[Region]:
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        response = await self._rate_limited_request("GET", path)
        regions = _parse_regions(response, path)

        # Concurrent misses may both land here; the later write simply wins.
        self._cache.set(key, tuple(regions), ttl=self._config.ttl_seconds)
        logger.debug("Cached %d regions under %s", len(regions), key)
        return regions

    # --- Rate Limiting & Retry ---

    async def _rate_limited_request(self, method: str, path: str) -> httpx.Response:
        """Execute an HTTP request with rate limiting and retry logic.

        Retry policy:
            - HTTP 429: Wait for Retry-After (or 5s default), retry up to 3 times.
            - HTTP 500/502/503/504: Retry up to 3 times with exponential backoff.
            - Other HTTP errors: Raise immediately (no retry).
            - Connection errors and timeouts: Retry up to 2 times with 2s delay.

        Raises:
            RegionDirectoryError: If retries are exhausted or the status is
                non-retryable.
        """
        url = f"{self._config.base_url}{path}"

        for attempt in range(_MAX_RETRIES_429 + 1):
            try:
                await self._limiter.acquire()
                response = await self._client.request(method, path)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                if attempt < _MAX_RETRIES_CONNECTION:
                    logger.warning(
                        "Connection error on %s, retrying in %ds (attempt %d/%d)",
                        url, _CONNECTION_RETRY_DELAY,
                        attempt + 1, _MAX_RETRIES_CONNECTION,
                    )
                    await asyncio.sleep(_CONNECTION_RETRY_DELAY)
                    continue
                raise RegionDirectoryError(
                    f"Connection failed after retries: {url}",
                    context={"url": url, "error": str(e)},
                ) from e
            except httpx.HTTPError as e:
                raise RegionDirectoryError(
                    f"Request to region directory failed: {e}",
                    context={"url": url, "error": str(e)},
                ) from e

            if response.status_code == 200:
                return response

            if response.status_code == 429:
                retry_after = _retry_after(response)
                if attempt < _MAX_RETRIES_429:
                    logger.warning(
                        "Rate limited (429) on %s, waiting %ds (attempt %d/%d)",
                        url, retry_after, attempt + 1, _MAX_RETRIES_429,
                    )
                    await asyncio.sleep(retry_after)
                    continue
                raise RegionDirectoryError(
                    f"Rate limit exceeded after {_MAX_RETRIES_429} retries: {url}",
                    context={"url": url, "status_code": 429},
                )

            if response.status_code in (500, 502, 503, 504):
                if attempt < _MAX_RETRIES_SERVER:
                    delay = 2**attempt
                    logger.warning(
                        "Server error %d on %s, retrying in %ds (attempt %d/%d)",
                        response.status_code, url, delay,
                        attempt + 1, _MAX_RETRIES_SERVER,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise RegionDirectoryError(
                    f"Server error {response.status_code} after retries: {url}",
                    context={"url": url, "status_code": response.status_code},
                )

            raise RegionDirectoryError(
                f"HTTP {response.status_code} from {url}",
                context={"url": url, "status_code": response.status_code},
            )

        raise RegionDirectoryError(
            f"Request failed after all retries: {url}",
            context={"url": url},
        )


def _parse_regions(response: httpx.Response, path: str) -> list[Region]:
    """Map a directory JSON array to Region models."""
    try:
        payload = response.json()
    except ValueError as e:
        raise RegionDirectoryError(
            f"Region directory returned invalid JSON for {path}",
            context={"url": str(response.url), "error": str(e)},
        ) from e

    if not isinstance(payload, list):
        raise RegionDirectoryError(
            f"Region directory returned {type(payload).__name__}, expected a list",
            context={"url": str(response.url)},
        )

    regions: list[Region] = []
    for entry in payload:
        try:
            regions.append(Region(id=str(entry["id"]), name=str(entry["name"]).strip()))
        except (KeyError, TypeError) as e:
            raise RegionDirectoryError(
                f"Malformed region entry in {path}: {entry!r}",
                context={"url": str(response.url), "error": str(e)},
            ) from e
    return regions


def _retry_after(response: httpx.Response) -> int:
    try:
        return int(response.headers.get("Retry-After", _DEFAULT_RETRY_AFTER))
    except ValueError:
        return _DEFAULT_RETRY_AFTER


def _validate_id(value: str, field: str) -> str:
    value = str(value).strip()
    if not value.isdigit():
        raise RegionDirectoryError(
            f"{field} must be numeric, got: {value!r}",
            context={"field": field, "value": value},
        )
    return value
