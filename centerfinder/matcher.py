from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

from centerfinder import config
from centerfinder.aliases import AliasTable, load_aliases
from centerfinder.catalog import CatalogEntry, check_catalog, load_catalog
from centerfinder.distance import distance
from centerfinder.normalizer import normalize

# (normalized input, entry key) -> bool
Strategy = Callable[[str, str], bool]


class Match(NamedTuple):
    entry: CatalogEntry
    strategy: str


class RegionMatcher:
    """
    Resolves free text to a catalog entry.

    An exact key match over the whole catalog is tried first. After that
    each entry, in catalog order, is checked against the alias strategies
    and the first entry any of them accepts wins. There is no ranking
    across entries.

    Note that the distance threshold is the same for every key, so a very
    short alias ("rm") is within reach of any other input of two letters
    or fewer, including punctuation-only input that normalizes to "".
    """

    def __init__(
        self,
        entries: Sequence[CatalogEntry],
        aliases: Optional[AliasTable] = None,
        min_substring_length: int = config.MIN_SUBSTRING_LENGTH,
        max_distance: int = config.MAX_EDIT_DISTANCE,
    ):
        self._entries = check_catalog(entries)
        self._keys = [normalize(e.region) for e in self._entries]
        self._by_key = dict(zip(self._keys, self._entries))
        self.aliases = aliases if aliases is not None else AliasTable()
        self.min_substring_length = min_substring_length
        self.max_distance = max_distance
        self.strategies: List[Tuple[str, Strategy]] = [
            ("key", self._same_key),
            ("alias", self._same_alias),
            ("substring", self._substring),
            ("fuzzy", self._near_key),
            ("fuzzy_alias", self._near_alias),
        ]

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return self._entries

    def region_names(self) -> List[str]:
        return [e.region for e in self._entries]

    # --- strategies ---

    def _same_key(self, q: str, key: str) -> bool:
        return q == key

    def _same_alias(self, q: str, key: str) -> bool:
        return q in self.aliases.canonical_aliases_for(key)

    def _substring(self, q: str, key: str) -> bool:
        if len(q) < self.min_substring_length:
            return False
        return q in key or key in q

    def _near_key(self, q: str, key: str) -> bool:
        return distance(q, key) <= self.max_distance

    def _near_alias(self, q: str, key: str) -> bool:
        return any(distance(q, a) <= self.max_distance for a in self.aliases.canonical_aliases_for(key))

    # --- lookup ---

    def _first_strategy(self, q: str, key: str) -> Optional[str]:
        for name, strategy in self.strategies:
            if strategy(q, key):
                return name
        return None

    def is_alias_match(self, raw: str, region: str) -> bool:
        return self._first_strategy(normalize(raw), normalize(region)) is not None

    def match(self, raw: str) -> Optional[Match]:
        q = normalize(raw)
        entry = self._by_key.get(q)
        if entry is not None:
            return Match(entry, "exact")
        for key, entry in zip(self._keys, self._entries):
            name = self._first_strategy(q, key)
            if name:
                return Match(entry, name)
        return None

    def resolve(self, raw: str) -> Optional[CatalogEntry]:
        m = self.match(raw)
        return m.entry if m else None

    def suggest(self, raw: str, threshold: float = config.SUGGEST_THRESHOLD) -> Optional[str]:
        """Closest region name by token-set similarity, for not-found hints."""
        q = normalize(raw)
        if not q or not self._keys:
            return None
        best = process.extractOne(q, self._keys, scorer=fuzz.token_set_ratio)
        if best:
            _, score, idx = best
            if score >= threshold:
                return self._entries[idx].region
        return None


def build_matcher() -> RegionMatcher:
    """Matcher over the configured catalog and aliases."""
    return RegionMatcher(load_catalog(config.CATALOG_PATH), load_aliases(config.ALIASES_PATH))
