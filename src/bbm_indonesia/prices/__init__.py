"""Price aggregation, querying, and the cached snapshot service.

    ProviderAdapter(s) → ProviderAggregator → Snapshot → SnapshotCache
                                                   ↓
                              PriceService.query → query_snapshot → API
"""

from bbm_indonesia.prices.aggregator import ProviderAggregator
from bbm_indonesia.prices.query import query_snapshot, record_matches, resolve_provider
from bbm_indonesia.prices.service import PriceService

__all__ = [
    "ProviderAggregator",
    "PriceService",
    "query_snapshot",
    "record_matches",
    "resolve_provider",
]
