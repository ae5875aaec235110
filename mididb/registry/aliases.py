"""
Alias table for manufacturer and device names.

Every configured brand/model entry expands into a finite list of
(raw spelling, canonical value) pairs. The pairs are registered into an
AliasTable once per run; the table is read-only afterwards and is passed
explicitly to every normalizer call.
"""

import logging
import re
from collections import ChainMap
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from mididb.registry.errors import ConfigurationError

logger = logging.getLogger("midi_registry")

BRAND_SUFFIXES = ["_music", "_audio", "_pedals", "_effects", "_engineering"]

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# "mk2" <-> "mark2" and "mkii" <-> "mk2"
MK_REWRITES = [
    (re.compile(r"mk(\d)", re.IGNORECASE), r"mark\1"),
    (re.compile(r"mark(\d)", re.IGNORECASE), r"mk\1"),
    (re.compile(r"mkii", re.IGNORECASE), "mk2"),
    (re.compile(r"mk2", re.IGNORECASE), "mkii"),
]

Variant = Tuple[str, str]


class AliasTable(NamedTuple):
    manufacturer_aliases: Mapping[str, str]
    device_aliases: Mapping[str, str]
    brand_display_names: Mapping[str, str]
    model_display_names: Mapping[str, Mapping[str, str]]
    device_display_names: Mapping[str, str]

    def model_display_names_for(self, brand_key: Optional[str]) -> Mapping[str, str]:
        """Model display names for a brand, layered over the global model index."""
        scoped = self.model_display_names.get(brand_key, {}) if brand_key else {}
        return ChainMap(dict(scoped), dict(self.device_display_names))


def _unique(items):
    seen = set()
    out = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _name_forms(name: str) -> List[str]:
    lowered = name.strip().lower()
    return [
        lowered,
        _WHITESPACE.sub("", lowered),
        _WHITESPACE.sub("_", lowered),
        _WHITESPACE.sub("-", lowered),
    ]


def _explicit_aliases(entry: Mapping) -> List[str]:
    aliases = entry.get("aliases") or []
    if isinstance(aliases, str):
        aliases = [aliases]
    forms = []
    for alias in aliases:
        alias = str(alias)
        forms.extend([alias, alias.lower()])
    return forms


def _swap_separators(value: str) -> List[str]:
    return [value.replace("-", "_"), value.replace("_", "-")]


def brand_variants(entry: Mapping) -> List[Variant]:
    """
    Enumerate raw brand spellings for one configuration entry.
    Args:
        entry (dict): {"name": ..., "value": ..., "aliases": [...]}
    Returns:
        list of (variant, canonical value) pairs; empty when the entry has no value.
    """
    value = entry.get("value")
    if not value:
        return []
    value = str(value)
    name = str(entry.get("name") or value)
    forms = [value]
    forms.extend(_name_forms(name))
    for suffix in BRAND_SUFFIXES:
        forms.append(value + suffix)
        forms.append(value + suffix.lstrip("_"))
    forms.extend(_swap_separators(value))
    forms.extend(_explicit_aliases(entry))
    return [(form, value) for form in _unique(forms)]


def model_variants(entry: Mapping) -> List[Variant]:
    """
    Enumerate raw device spellings for one model entry, including the
    mk/mark and mkii/mk2 spellings of every generated form.
    """
    value = entry.get("value")
    if not value:
        return []
    value = str(value)
    name = str(entry.get("name") or value)
    forms = [value]
    forms.extend(_name_forms(name))
    forms.extend(_swap_separators(value))
    forms.append(_NON_ALNUM.sub("", value.lower()))
    forms.extend(_explicit_aliases(entry))
    for form in list(forms):
        for pattern, replacement in MK_REWRITES:
            rewritten = pattern.sub(replacement, form)
            if rewritten != form:
                forms.append(rewritten)
    return [(form, value) for form in _unique(forms)]


def _freeze(table: Dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(table))


def empty_alias_table() -> AliasTable:
    """Table with no aliases: every key resolves to itself."""
    return AliasTable(
        manufacturer_aliases=_freeze({}),
        device_aliases=_freeze({}),
        brand_display_names=_freeze({}),
        model_display_names=_freeze({}),
        device_display_names=_freeze({}),
    )


def build_alias_table(config: Optional[Mapping]) -> AliasTable:
    """
    Build the alias table from a configuration mapping of shape
    {"brands": [{"name", "value", "aliases"?, "models"?: [{"name", "value", "aliases"?}]}]}.

    Raises ConfigurationError when the top-level shape is wrong. Individual
    malformed entries are skipped with a warning.
    """
    if config is None:
        return empty_alias_table()
    if not isinstance(config, Mapping):
        raise ConfigurationError(
            f"Alias configuration must be a mapping, got {type(config).__name__}"
        )
    brands = config.get("brands") or []
    if not isinstance(brands, list):
        raise ConfigurationError("Alias configuration 'brands' must be a list")

    manufacturer_aliases: Dict[str, str] = {}
    device_aliases: Dict[str, str] = {}
    brand_names: Dict[str, str] = {}
    model_names: Dict[str, Dict[str, str]] = {}
    device_names: Dict[str, str] = {}

    for idx, brand in enumerate(brands):
        if not isinstance(brand, Mapping):
            logger.warning(f"Skipping non-mapping brand entry at index {idx}")
            continue
        variants = brand_variants(brand)
        if not variants:
            logger.debug(f"Skipping brand entry without value: {brand.get('name')}")
            continue
        brand_value = variants[0][1]
        for raw, canonical in variants:
            manufacturer_aliases[raw] = canonical
        brand_names[brand_value] = str(brand.get("name") or brand_value)

        models = brand.get("models") or []
        if not isinstance(models, list):
            logger.warning(f"Brand '{brand_value}' has non-list models; ignoring them")
            continue
        for model in models:
            if not isinstance(model, Mapping):
                logger.warning(f"Skipping non-mapping model under brand '{brand_value}'")
                continue
            pairs = model_variants(model)
            if not pairs:
                continue
            model_value = pairs[0][1]
            for raw, canonical in pairs:
                device_aliases[raw] = canonical
            display = str(model.get("name") or model_value)
            model_names.setdefault(brand_value, {})[model_value] = display
            device_names[model_value] = display

    logger.info(
        f"Alias table built: {len(brand_names)} brands, {len(manufacturer_aliases)} brand spellings, "
        f"{len(device_names)} models, {len(device_aliases)} device spellings"
    )
    return AliasTable(
        manufacturer_aliases=_freeze(manufacturer_aliases),
        device_aliases=_freeze(device_aliases),
        brand_display_names=_freeze(brand_names),
        model_display_names=MappingProxyType(
            {k: _freeze(v) for k, v in model_names.items()}
        ),
        device_display_names=_freeze(device_names),
    )
