import re
from typing import Mapping, NamedTuple, Optional

from mididb.registry.aliases import AliasTable

_WHITESPACE = re.compile(r"\s+")


class NormalizedKey(NamedTuple):
    normalized_id: str
    canonical_name: str
    canonical_key: Optional[str]


def slugify_key(key: str) -> str:
    """Internal grouping id: lowercase, whitespace runs collapsed to '_'."""
    return _WHITESPACE.sub("_", str(key).lower())


def normalize_key(
    raw_key: str,
    alias_map: Mapping[str, str],
    display_names: Optional[Mapping[str, str]] = None,
) -> NormalizedKey:
    """
    Resolve a raw brand/device key against an alias map.
    Lookup order: exact key, then lowercased key. An unmapped key is its own
    canonical form. The id of a mapped key is derived from the canonical value,
    the display name from display_names (falling back to the value).
    """
    canonical = alias_map.get(raw_key)
    if canonical is None:
        canonical = alias_map.get(raw_key.lower())
    if canonical is None:
        return NormalizedKey(slugify_key(raw_key), raw_key, None)
    display = canonical
    if display_names and canonical in display_names:
        display = display_names[canonical]
    return NormalizedKey(slugify_key(canonical), display, canonical)


def normalize_brand(raw_key: str, table: AliasTable) -> NormalizedKey:
    return normalize_key(raw_key, table.manufacturer_aliases, table.brand_display_names)


def normalize_device(
    raw_key: str, table: AliasTable, brand_key: Optional[str] = None
) -> NormalizedKey:
    return normalize_key(
        raw_key, table.device_aliases, table.model_display_names_for(brand_key)
    )
