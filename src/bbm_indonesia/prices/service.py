"""Cache-backed access to the current price Snapshot."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from bbm_indonesia.core.cache import SNAPSHOT_KEY, SnapshotCache
from bbm_indonesia.core.exceptions import CacheError
from bbm_indonesia.core.models import PriceFilters, ProviderKey, Snapshot
from bbm_indonesia.prices.aggregator import ProviderAggregator
from bbm_indonesia.prices.query import query_snapshot
from bbm_indonesia.providers.base import ProviderAdapter

logger = logging.getLogger("bbm_indonesia.prices")


class PriceService:
    """Owns the cached Snapshot and recomputes it on a miss.

    A miss or a refresh aggregates synchronously: the caller waits for the
    new Snapshot. Concurrent misses each aggregate and the last write wins;
    there is no request coalescing.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        aggregator: ProviderAggregator,
        adapters: Mapping[ProviderKey, ProviderAdapter],
        snapshot_ttl: int = 3600,
    ) -> None:
        self._cache = cache
        self._aggregator = aggregator
        self._adapters = dict(adapters)
        self._ttl = snapshot_ttl

    @property
    def provider_keys(self) -> list[ProviderKey]:
        return list(self._adapters.keys())

    async def get_snapshot(self) -> Snapshot:
        """Return the cached Snapshot, aggregating first if there is none."""
        cached = self._cache.get(SNAPSHOT_KEY)
        if cached is not None:
            if not isinstance(cached, Snapshot):
                raise CacheError(
                    f"Cache key '{SNAPSHOT_KEY}' holds {type(cached).__name__}, expected Snapshot",
                    context={"key": SNAPSHOT_KEY},
                )
            return cached

        snapshot = await self._aggregator.aggregate(self._adapters)
        self._cache.set(SNAPSHOT_KEY, snapshot, ttl=self._ttl)
        logger.info("Snapshot cached (lastUpdated=%s)", snapshot.last_updated.isoformat())
        return snapshot

    async def refresh(self) -> Snapshot:
        """Invalidate the cached Snapshot and build a new one."""
        self._cache.delete(SNAPSHOT_KEY)
        logger.info("Snapshot invalidated, refreshing")
        return await self.get_snapshot()

    async def query(self, filters: PriceFilters | None = None) -> Snapshot:
        """Filtered view of the current Snapshot."""
        return query_snapshot(await self.get_snapshot(), filters)
