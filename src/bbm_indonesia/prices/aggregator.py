"""Concurrent provider aggregation into a Snapshot."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

from pydantic import ValidationError

from bbm_indonesia.core.exceptions import ProviderTimeoutError
from bbm_indonesia.core.models import (
    EnrichedPriceRecord,
    ProviderEntry,
    ProviderFailure,
    ProviderKey,
    RawPriceRecord,
    Region,
    Snapshot,
)
from bbm_indonesia.providers.base import AdapterErr, AdapterOk, AdapterResult, ProviderAdapter
from bbm_indonesia.regions.matcher import RegionMatcher

logger = logging.getLogger("bbm_indonesia.prices")


class ProviderAggregator:
    """Runs every adapter concurrently and assembles one Snapshot.

    Each adapter call is isolated: an exception, a timeout, or output that
    does not validate becomes an ``AdapterErr`` for that provider only.
    The join waits for every adapter to settle; it never fails fast.

    Parameters
    ----------
    matcher : RegionMatcher
        Resolves each record's free-text province.
    timeout_seconds : float
        Budget for a single adapter call.
    """

    def __init__(self, matcher: RegionMatcher, timeout_seconds: float = 90.0) -> None:
        self._matcher = matcher
        self._timeout = timeout_seconds

    async def aggregate(self, adapters: Mapping[ProviderKey, ProviderAdapter]) -> Snapshot:
        """Fetch, enrich and merge all providers. Every key appears in the result."""
        keys = list(adapters.keys())
        logger.info("Fetching prices from %d providers: %s", len(keys), ", ".join(keys))

        results = await asyncio.gather(*(self.run_adapter(k, adapters[k]) for k in keys))

        # One read of the province list serves every provider.
        canonical: list[Region] = []
        if any(isinstance(r, AdapterOk) and r.records for r in results):
            canonical = await self._matcher.canonical_regions()
        entries: list[ProviderEntry] = []
        for result in results:
            if isinstance(result, AdapterErr):
                entries.append(ProviderFailure(error=result.reason))
            else:
                entries.append(await self.enrich(result.records, canonical))

        snapshot = Snapshot(
            last_updated=datetime.now(UTC),
            providers=dict(zip(keys, entries)),
        )
        failed = snapshot.failed_providers()
        logger.info(
            "Aggregated %d providers (%d failed%s)",
            len(keys),
            len(failed),
            f": {', '.join(failed)}" if failed else "",
        )
        return snapshot

    async def run_adapter(self, key: ProviderKey, adapter: ProviderAdapter) -> AdapterResult:
        """Call one adapter and classify the outcome."""
        try:
            payload = await asyncio.wait_for(adapter.fetch_prices(), timeout=self._timeout)
        except TimeoutError:
            err = ProviderTimeoutError(
                f"{key} timed out after {self._timeout:g}s",
                context={"provider": key, "timeout_seconds": self._timeout},
            )
            logger.error("Provider %s failed: %s", key, err)
            return AdapterErr(reason=str(err))
        except Exception as e:
            logger.error("Provider %s failed: %s", key, e, exc_info=True)
            return AdapterErr(reason=str(e) or type(e).__name__)

        try:
            return AdapterOk(records=_coerce_records(key, payload))
        except ValidationError as e:
            logger.error("Provider %s returned malformed records: %s", key, e)
            return AdapterErr(reason=f"malformed output from {key}: {e.error_count()} invalid field(s)")

    async def enrich(
        self,
        records: Sequence[RawPriceRecord],
        canonical: Sequence[Region] | None = None,
    ) -> tuple[EnrichedPriceRecord, ...]:
        """Attach ``provinceInfo`` to every record.

        The province list is read once for the whole batch, or taken from
        ``canonical`` when the caller already holds it.
        """
        if not records:
            return ()
        regions = await self._matcher.match_many([r.province for r in records], canonical)
        return tuple(
            EnrichedPriceRecord.from_raw(record, region)
            for record, region in zip(records, regions)
        )


def _coerce_records(key: ProviderKey, payload: object) -> tuple[RawPriceRecord, ...]:
    """Accept a sequence of records (or record-shaped dicts).

    ``None`` and non-sequence payloads count as "no records". Items that are
    neither records nor valid record dicts raise ``ValidationError``.
    """
    if payload is None or not isinstance(payload, (list, tuple)):
        if payload is not None:
            logger.warning(
                "Provider %s returned %s instead of a list, treating as empty",
                key, type(payload).__name__,
            )
        return ()
    return tuple(
        item if isinstance(item, RawPriceRecord) else RawPriceRecord.model_validate(item)
        for item in payload
    )
