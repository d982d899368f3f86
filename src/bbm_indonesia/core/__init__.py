"""bbm_indonesia.core: Foundation types, config, and exceptions."""

from bbm_indonesia.core.cache import SnapshotCache
from bbm_indonesia.core.config import (
    DEFAULT_PROVIDERS,
    APIConfig,
    BbmConfig,
    CacheConfig,
    ProvidersConfig,
    RegionsConfig,
    load_config,
)
from bbm_indonesia.core.exceptions import (
    BbmIndonesiaError,
    CacheError,
    ConfigError,
    ProviderError,
    ProviderNotFoundError,
    ProviderTimeoutError,
    RegionDirectoryError,
)
from bbm_indonesia.core.models import (
    CacheStats,
    EnrichedPriceRecord,
    FuelName,
    PriceFilters,
    ProviderEntry,
    ProviderFailure,
    ProviderKey,
    RawPriceRecord,
    Region,
    RegionId,
    Snapshot,
)

__all__ = [
    # Type aliases
    "ProviderKey",
    "FuelName",
    "RegionId",
    "ProviderEntry",
    # Models
    "Region",
    "RawPriceRecord",
    "EnrichedPriceRecord",
    "ProviderFailure",
    "Snapshot",
    "PriceFilters",
    "CacheStats",
    # Cache
    "SnapshotCache",
    # Config
    "DEFAULT_PROVIDERS",
    "BbmConfig",
    "RegionsConfig",
    "ProvidersConfig",
    "CacheConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "BbmIndonesiaError",
    "ConfigError",
    "RegionDirectoryError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderNotFoundError",
    "CacheError",
]
