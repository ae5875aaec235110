"""
Resolution engine: groups device records from the target and source
databases into identity buckets, splits each bucket into model groups by
canonical display name, and folds every model group into one record.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from mididb.registry.aliases import AliasTable
from mididb.registry.errors import InputParseError
from mididb.registry.keys import normalize_brand, normalize_device
from mididb.registry.merger import merge_devices
from mididb.registry.standardizer import (
    normalize_program_change,
    parameter_count,
    standardize_device,
)

logger = logging.getLogger("midi_registry")

RESERVED_KEYS = ("version", "generatedAt")


def iter_brands(db: Mapping) -> Iterable[Tuple[str, Any]]:
    """Brand entries of a database, reserved metadata keys skipped."""
    for brand_key, brand_data in db.items():
        if brand_key in RESERVED_KEYS:
            continue
        yield brand_key, brand_data


def collect_buckets(
    databases: List[Tuple[str, Mapping]], table: AliasTable
) -> Tuple[Dict[str, List[dict]], Dict[str, dict]]:
    """
    Normalize every (brand, device) pair of the given databases, in order.
    Args:
        databases: [(source label, database), ...]; earlier databases are seen first
        table: alias table used for brand and device normalization
    Returns:
        (buckets, brands) where buckets maps device_id -> entries in encounter
        order and brands maps normalized brand id -> {canonical_name,
        canonical_key, variants, device_ids}.
    """
    buckets: Dict[str, List[dict]] = {}
    brands: Dict[str, dict] = {}
    order = 0
    for label, db in databases:
        if not isinstance(db, Mapping):
            raise InputParseError(f"{label} database must be an object")
        for brand_key, brand_data in iter_brands(db):
            if not isinstance(brand_data, Mapping):
                raise InputParseError(
                    f"{label} brand '{brand_key}' must map device names to objects"
                )
            brand = normalize_brand(brand_key, table)
            info = brands.get(brand.normalized_id)
            if info is None:
                info = {
                    "canonical_name": brand.canonical_name,
                    "canonical_key": brand.canonical_key,
                    "variants": [],
                    "device_ids": [],
                }
                brands[brand.normalized_id] = info
            if brand_key not in info["variants"]:
                info["variants"].append(brand_key)

            for device_key, device_data in brand_data.items():
                if not isinstance(device_data, Mapping):
                    raise InputParseError(
                        f"{label} device '{brand_key}/{device_key}' must be an object"
                    )
                device = normalize_device(device_key, table, info["canonical_key"])
                device_id = f"{brand.normalized_id}_{device.normalized_id}"
                raw = normalize_program_change(device_data)
                record = standardize_device(
                    raw,
                    raw.get("brand") or brand.canonical_name,
                    raw.get("device_name") or device.canonical_name,
                )
                buckets.setdefault(device_id, []).append(
                    {
                        "source": label,
                        "brand_key": brand_key,
                        "device_key": device_key,
                        "device_id": device_id,
                        "canonical_brand_name": info["canonical_name"],
                        "canonical_device_name": device.canonical_name,
                        "order": order,
                        "data": record,
                    }
                )
                order += 1
                if device_id not in info["device_ids"]:
                    info["device_ids"].append(device_id)
    return buckets, brands


def group_models(entries: List[dict]) -> Dict[str, List[dict]]:
    """Split one bucket by canonical device display name. Groups are never merged together."""
    groups: Dict[str, List[dict]] = {}
    for entry in entries:
        model_name = entry["canonical_device_name"] or entry["device_key"]
        groups.setdefault(model_name, []).append(entry)
    return groups


def resolve_model_group(entries: List[dict]) -> Dict[str, Any]:
    """
    Fold a model group into one record. Entries are ordered by parameter count
    (descending) then first-seen index; the first one seeds the merge and each
    following entry is merged in as the secondary side.
    """
    ranked = sorted(
        entries, key=lambda e: (-parameter_count(e["data"]), e["order"])
    )
    merged = dict(ranked[0]["data"])
    for entry in ranked[1:]:
        merged = merge_devices(merged, entry["data"])
    return merged


def _output_brand_name(brand_id: str, info: Mapping) -> str:
    """Brand display name, moved off the reserved metadata keys."""
    name = info["canonical_name"]
    if name not in RESERVED_KEYS:
        return name
    for candidate in (info["canonical_key"], brand_id):
        if candidate and candidate not in RESERVED_KEYS:
            break
    else:
        candidate = f"{name}_brand"
    logger.warning(
        f"Brand display name '{name}' collides with a metadata key; writing it as '{candidate}'"
    )
    return candidate


def resolve_databases(
    target_db: Mapping, source_db: Mapping, table: AliasTable
) -> Dict[str, Any]:
    """
    Merge the target and source databases into one FinalDatabase:
    {brand display name: {model display name: DeviceRecord}} plus the reserved
    metadata keys copied from the target.
    """
    if not isinstance(target_db, Mapping):
        raise InputParseError("target database must be an object")
    final: Dict[str, Any] = {
        key: target_db[key] for key in RESERVED_KEYS if key in target_db
    }
    buckets, brands = collect_buckets(
        [("target", target_db), ("source", source_db)], table
    )
    logger.info(
        f"Collected {sum(len(v) for v in buckets.values())} device records into "
        f"{len(buckets)} buckets across {len(brands)} brands"
    )

    for brand_id, info in brands.items():
        brand_name = _output_brand_name(brand_id, info)
        if len(info["variants"]) > 1:
            logger.debug(f"Brand {brand_id} seen as {info['variants']}")
        devices = final.setdefault(brand_name, {})
        for device_id in info["device_ids"]:
            for model_name, group in group_models(buckets[device_id]).items():
                record = resolve_model_group(group)
                if len(group) > 1:
                    logger.debug(
                        f"Merged {len(group)} records for {brand_name}/{model_name} "
                        f"from {[e['source'] + ':' + e['device_key'] for e in group]}"
                    )
                if model_name in devices:
                    logger.warning(
                        f"Model '{model_name}' already present under '{brand_name}'; merging into existing entry"
                    )
                    record = merge_devices(devices[model_name], record)
                record["brand"] = brand_name
                record["device_name"] = model_name
                devices[model_name] = record
    return final
