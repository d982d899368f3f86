"""Administrative region directory and free-text region matching."""

from bbm_indonesia.regions.client import RegionDirectory
from bbm_indonesia.regions.matcher import (
    ALIASES,
    QUALIFIER_TOKENS,
    RegionMatcher,
    match_region,
    normalize_region_name,
)

__all__ = [
    "RegionDirectory",
    "RegionMatcher",
    "match_region",
    "normalize_region_name",
    "ALIASES",
    "QUALIFIER_TOKENS",
]
