"""
Unmapped brand/device diagnostics.

Lists the raw brand and device keys of both source databases that the alias
table does not know, so the alias configuration can be curated. Read-only:
nothing here feeds back into resolution.
"""

import re
from typing import Dict, Mapping, Optional, Set, Tuple

from mididb.registry.aliases import AliasTable
from mididb.registry.resolver import iter_brands

_WHITESPACE = re.compile(r"\s+")


def _lookup_forms(key: str):
    lowered = key.lower()
    return [key, lowered, _WHITESPACE.sub("", lowered)]


def _known_brand(brand_key: str, table: AliasTable) -> Optional[str]:
    for form in _lookup_forms(brand_key):
        if form in table.manufacturer_aliases:
            return table.manufacturer_aliases[form]
    return None


def _known_device(device_key: str, brand_value: str, table: AliasTable) -> bool:
    models = table.model_display_names.get(brand_value, {})
    for form in _lookup_forms(device_key):
        if form in models:
            return True
        if table.device_aliases.get(form) in models:
            return True
    return False


def find_unmapped(
    target_db: Mapping, source_db: Mapping, table: AliasTable
) -> Tuple[Set[str], Dict[str, Set[str]]]:
    """
    Returns (missing_brands, missing_devices). Missing brands are raw keys;
    missing devices are raw keys grouped by the canonical brand value.
    """
    missing_brands: Set[str] = set()
    missing_devices: Dict[str, Set[str]] = {}
    for db in (target_db, source_db):
        for brand_key, brand_data in iter_brands(db):
            brand_value = _known_brand(brand_key, table)
            if brand_value is None:
                missing_brands.add(brand_key)
                continue
            for device_key in brand_data or {}:
                if not _known_device(device_key, brand_value, table):
                    missing_devices.setdefault(brand_value, set()).add(device_key)
    return missing_brands, missing_devices


def _suggested_value(raw: str) -> str:
    return _WHITESPACE.sub("", raw.lower())


def format_missing_report(
    missing_brands: Set[str],
    missing_devices: Dict[str, Set[str]],
    table: AliasTable,
) -> str:
    """Human-readable report with suggested alias configuration entries."""
    lines = ["===== Missing Brands ====="]
    if not missing_brands:
        lines.append("No missing brands found!")
    for brand in sorted(missing_brands):
        lines.append(f"  - name: {brand!r}")
        lines.append(f"    value: {_suggested_value(brand)!r}")
        lines.append("    models: []")

    lines.append("")
    lines.append("===== Missing Devices =====")
    if not missing_devices:
        lines.append("No missing devices found!")
    for brand_value in sorted(missing_devices):
        brand_name = table.brand_display_names.get(brand_value, brand_value)
        lines.append("")
        lines.append(f"For {brand_name} ({brand_value}):")
        for device in sorted(missing_devices[brand_value]):
            lines.append(f"  - name: {device!r}")
            lines.append(f"    value: {_suggested_value(device)!r}")
    return "\n".join(lines)
