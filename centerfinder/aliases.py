import json
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from centerfinder.catalog import CatalogError
from centerfinder.normalizer import normalize

log = logging.getLogger("centerfinder.aliases")

# Alternate phrasings per region, including misspellings seen in the wild
REGION_ALIASES: Dict[str, Tuple[str, ...]] = {
    "región metropolitana de santiago": (
        "region metropolitana de santiago",
        "rm",
        "metropolitana",
        "santiago",
        "region metropolita na de santiago",
        "region metropolotana de santiago",
        "region metropolitana",
        "metropolitana de santiago",
    ),
}


class AliasTable:
    def __init__(self, aliases: Optional[Mapping[str, Iterable[str]]] = None):
        self._aliases: Dict[str, Tuple[str, ...]] = {}
        self._canonical: Dict[str, Tuple[str, ...]] = {}
        for region, items in (aliases or {}).items():
            self.add(region, items)

    def add(self, region: str, items: Iterable[str]) -> None:
        """
        Register alternates for a region. The key is normalized here so
        lookups with a canonical key always hit, whatever spelling the
        source used. Order is kept, duplicates dropped.
        """
        key = normalize(region)
        merged = list(self._aliases.get(key, ()))
        for a in items:
            if a not in merged:
                merged.append(a)
        self._aliases[key] = tuple(merged)
        canon = []
        for a in merged:
            n = normalize(a)
            if n and n not in canon:
                canon.append(n)
        self._canonical[key] = tuple(canon)

    def aliases_for(self, key: str) -> Tuple[str, ...]:
        return self._aliases.get(key, ())

    def canonical_aliases_for(self, key: str) -> Tuple[str, ...]:
        return self._canonical.get(key, ())

    def keys(self):
        return list(self._aliases.keys())

    def __len__(self):
        return len(self._aliases)


_ALIAS_FILE = TypeAdapter(Dict[str, List[str]])


def load_aliases(path: str = "") -> AliasTable:
    """Built-in aliases, or a JSON object {region: [alias, ...]} stored at path."""
    if not path:
        return AliasTable(REGION_ALIASES)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read aliases {path}: {e}") from e
    try:
        aliases = _ALIAS_FILE.validate_python(raw)
    except ValidationError as e:
        raise CatalogError(f"Aliases {path} must map regions to lists of strings: {e}") from e
    log.info("loaded aliases for %d regions from %s", len(aliases), path)
    return AliasTable(aliases)
