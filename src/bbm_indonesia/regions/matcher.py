"""Free-text region name normalization and matching.

Providers label their prices with whatever region text their page shows:
"DKI Jakarta", "Prov. Jawa Barat", "JATIM", "Kep. Riau". The matcher maps
such labels onto the canonical province list from the region directory.

``match_region`` is a pure function of the raw label and the canonical list,
tried in this order:

1. exact equality of normalized names;
2. containment in either direction (first canonical region in list order);
3. the alias table, for colloquial names containment cannot reach;
4. otherwise the label is returned unmatched (``Region(id=None, name=raw)``).

Containment may yield false positives when a short canonical name is
embedded in an unrelated label. The behaviour is kept as is.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from bbm_indonesia.core.exceptions import RegionDirectoryError
from bbm_indonesia.core.models import Region
from bbm_indonesia.regions.client import RegionDirectory

logger = logging.getLogger(__name__)

# Administrative qualifiers dropped before comparison. "kepulauan" is not one
# of them: "Kepulauan Riau" and "Riau" are different provinces.
QUALIFIER_TOKENS = (
    "provinsi",
    "province",
    "prov",
    "daerah",
    "khusus",
    "ibukota",
    "istimewa",
    "dki",
    "di",
    "special",
    "capital",
    "region",
    "district",
)

# Abbreviations expanded before qualifiers are stripped.
ABBREVIATIONS = {
    "kep": "kepulauan",
    "kepri": "kepulauan riau",
    "yogya": "yogyakarta",
    "jogja": "yogyakarta",
    "jogjakarta": "yogyakarta",
    "sumatra": "sumatera",
}

# Normalized substring of a raw label -> normalized fragment of the
# canonical name it stands for.
ALIASES: dict[str, str] = {
    "jakarta": "jakarta",
    "jkt": "jakarta",
    "jabodetabek": "jakarta",
    "yogyakarta": "yogyakarta",
    "diy": "yogyakarta",
    "jabar": "jawabarat",
    "jateng": "jawatengah",
    "jatim": "jawatimur",
    "sumut": "sumaterautara",
    "sumbar": "sumaterabarat",
    "sumsel": "sumateraselatan",
    "babel": "bangkabelitung",
    "kalbar": "kalimantanbarat",
    "kalteng": "kalimantantengah",
    "kalsel": "kalimantanselatan",
    "kaltim": "kalimantantimur",
    "kaltara": "kalimantanutara",
    "sulut": "sulawesiutara",
    "sulteng": "sulawesitengah",
    "sulsel": "sulawesiselatan",
    "sultra": "sulawesitenggara",
    "sulbar": "sulawesibarat",
    "malut": "malukuutara",
    "ntb": "nusatenggarabarat",
    "ntt": "nusatenggaratimur",
}

_ABBREVIATION_RE = re.compile(
    r"\b(" + "|".join(sorted(ABBREVIATIONS, key=len, reverse=True)) + r")\b\.?"
)
# "Province of", "Special Region of": the "of" goes with its qualifier.
_QUALIFIER_RE = re.compile(
    r"\b(" + "|".join(QUALIFIER_TOKENS) + r")\b\.?(?:\s+of\b)?"
)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_region_name(name: str | None) -> str:
    """Reduce a region label to a comparable key.

    >>> normalize_region_name("Prov. Jawa Barat")
    'jawabarat'
    >>> normalize_region_name("DKI JAKARTA")
    'jakarta'
    >>> normalize_region_name("Kep. Riau")
    'kepulauanriau'
    >>> normalize_region_name("Special Region of Maluku Utara")
    'malukuutara'
    """
    if not name:
        return ""
    text = name.casefold()
    text = _ABBREVIATION_RE.sub(lambda m: f" {ABBREVIATIONS[m.group(1)]} ", text)
    text = _QUALIFIER_RE.sub(" ", text)
    return _NON_ALNUM_RE.sub("", text).strip()


def match_region(raw_name: str, canonical: Sequence[Region]) -> Region:
    """Resolve ``raw_name`` against ``canonical``. Never raises."""
    unmatched = Region(id=None, name=raw_name)
    normalized = normalize_region_name(raw_name)
    if not normalized:
        return unmatched

    keyed = [(normalize_region_name(r.name), r) for r in canonical]
    keyed = [(key, r) for key, r in keyed if key]

    for key, region in keyed:
        if key == normalized:
            return region

    for key, region in keyed:
        if key in normalized or normalized in key:
            return region

    for alias, fragment in ALIASES.items():
        if alias not in normalized:
            continue
        for key, region in keyed:
            if fragment in key:
                return region

    return unmatched


class RegionMatcher:
    """Binds ``match_region`` to the province list of a RegionDirectory.

    The province list is read through the directory's cache, so it is
    fetched at most once per expiry window. If the directory cannot be
    reached every label degrades to unmatched instead of failing.
    """

    def __init__(self, directory: RegionDirectory) -> None:
        self._directory = directory

    async def canonical_regions(self) -> list[Region]:
        try:
            return await self._directory.list_provinces()
        except RegionDirectoryError as e:
            logger.warning("Province list unavailable, leaving regions unmatched: %s", e)
            return []

    async def match(self, raw_name: str) -> Region:
        return match_region(raw_name, await self.canonical_regions())

    async def match_many(
        self,
        raw_names: Sequence[str],
        canonical: Sequence[Region] | None = None,
    ) -> list[Region]:
        """Match several labels against a single read of the province list.

        Pass ``canonical`` to reuse a list already read by the caller.
        """
        if canonical is None:
            canonical = await self.canonical_regions()
        return [match_region(name, canonical) for name in raw_names]
