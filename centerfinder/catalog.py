import json
import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from centerfinder.normalizer import normalize

log = logging.getLogger("centerfinder.catalog")


class CatalogError(ValueError):
    pass


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    region: str
    name: str
    address: str
    products: str = ""
    image_file: Optional[str] = Field(default=None, alias="image")


SERVICE_CENTERS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(
        region="Región Metropolitana de Santiago",
        name="SAMTEK",
        address="Nueva Tajamar 481, Torre Sur, Oficina 1601. Las Condes",
        products="Notebook, Desktop PC, All-in-one PCs, Eee Pad, Eee",
        image_file="samtek.png",
    ),
)


def check_catalog(entries: Sequence[CatalogEntry]) -> Tuple[CatalogEntry, ...]:
    """
    Every region must normalize to a non-empty key and no two regions
    may share a key.
    """
    seen = {}
    for e in entries:
        key = normalize(e.region)
        if not key:
            raise CatalogError(f"Region {e.region!r} has an empty canonical key")
        if key in seen:
            raise CatalogError(f"Regions {seen[key]!r} and {e.region!r} collide on key {key!r}")
        seen[key] = e.region
    return tuple(entries)


def load_catalog(path: str = "") -> Tuple[CatalogEntry, ...]:
    """Built-in catalog, or the JSON list of entries stored at path."""
    if not path:
        return check_catalog(SERVICE_CENTERS)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e
    if not isinstance(raw, list):
        raise CatalogError(f"Catalog {path} must hold a JSON list")
    entries: List[CatalogEntry] = []
    for i, item in enumerate(raw):
        try:
            entries.append(CatalogEntry.model_validate(item))
        except ValidationError as e:
            raise CatalogError(f"Catalog {path} entry {i} is invalid: {e}") from e
    log.info("loaded %d catalog entries from %s", len(entries), path)
    return check_catalog(entries)


def region_names(entries: Sequence[CatalogEntry]) -> List[str]:
    return [e.region for e in entries]
