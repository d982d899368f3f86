"""Read-side filtering of a Snapshot.

Filters are independent and combine with AND. The input snapshot is never
modified; a filtered query returns a new Snapshot with the same
``lastUpdated``.
"""

from __future__ import annotations

from bbm_indonesia.core.exceptions import ProviderNotFoundError
from bbm_indonesia.core.models import (
    EnrichedPriceRecord,
    PriceFilters,
    ProviderEntry,
    ProviderFailure,
    ProviderKey,
    Snapshot,
)


def query_snapshot(snapshot: Snapshot, filters: PriceFilters | None = None) -> Snapshot:
    """Apply ``filters`` to ``snapshot``.

    Raises:
        ProviderNotFoundError: ``filters.provider`` is not a key of the snapshot.
    """
    if filters is None or filters.is_empty:
        return snapshot

    providers: dict[ProviderKey, ProviderEntry] = dict(snapshot.providers)

    if filters.provider is not None:
        key = resolve_provider(snapshot, filters.provider)
        providers = {key: providers[key]}

    if filters.province_id is not None or filters.province is not None:
        providers = {
            key: _filter_entry(entry, filters) for key, entry in providers.items()
        }

    return Snapshot(last_updated=snapshot.last_updated, providers=providers)


def resolve_provider(snapshot: Snapshot, provider: str) -> ProviderKey:
    """Case-insensitive provider lookup.

    Raises:
        ProviderNotFoundError: If no snapshot key matches.
    """
    key = provider.strip().lower()
    if key not in snapshot.providers:
        available = snapshot.provider_keys()
        raise ProviderNotFoundError(
            f"provider not found, available: {', '.join(available)}",
            context={"provider": provider, "available": available},
        )
    return key


def record_matches(record: EnrichedPriceRecord, filters: PriceFilters) -> bool:
    """True if ``record`` satisfies every record-level filter present."""
    if filters.province_id is not None and record.province_info.id != filters.province_id:
        return False
    if filters.province is not None and not _name_overlaps(record, filters.province):
        return False
    return True


def _filter_entry(entry: ProviderEntry, filters: PriceFilters) -> ProviderEntry:
    if isinstance(entry, ProviderFailure):
        return entry
    return tuple(record for record in entry if record_matches(record, filters))


def _name_overlaps(record: EnrichedPriceRecord, term: str) -> bool:
    """Bidirectional, case-insensitive containment against raw and canonical names."""
    needle = term.casefold()
    for name in (record.province, record.province_info.name):
        haystack = name.casefold()
        if needle in haystack or haystack in needle:
            return True
    return False
