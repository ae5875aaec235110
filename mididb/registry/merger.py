from typing import Any, Dict, List, Mapping

from mididb.registry.standardizer import PARAMETER_LISTS


def _longer_list(primary: List, secondary: List) -> List:
    primary = primary or []
    secondary = secondary or []
    if primary and secondary:
        return primary if len(primary) >= len(secondary) else secondary
    return primary or secondary or []


def _channel_instructions(record: Mapping) -> str:
    channel = record.get("midi_channel")
    if isinstance(channel, Mapping):
        text = channel.get("instructions")
        if isinstance(text, str):
            return text
    return ""


def apply_device_defaults(record: Dict[str, Any]) -> Dict[str, Any]:
    """Re-apply DeviceRecord defaults so no field is missing after a merge."""
    record["midi_thru"] = record.get("midi_thru") or False
    record["midi_in"] = record.get("midi_in") or ""
    record["midi_clock"] = record.get("midi_clock") or False
    record["phantom_power"] = record.get("phantom_power") or "None"
    record["midi_channel"] = record.get("midi_channel") or {"instructions": ""}
    record["instructions"] = record.get("instructions") or ""
    for field in PARAMETER_LISTS:
        record[field] = record.get(field) or []
    return record


def merge_devices(primary: Mapping, secondary: Mapping) -> Dict[str, Any]:
    """
    Merge two standardized records for the same device.

    Scalars come from primary wherever primary has the key. cc/nrpn/pc and
    midi_channel.instructions are taken whole from whichever side is longer
    (ties keep primary). Lists are never concatenated.
    """
    merged = {**secondary, **primary}
    for field in PARAMETER_LISTS:
        merged[field] = _longer_list(primary.get(field), secondary.get(field))

    primary_text = _channel_instructions(primary)
    secondary_text = _channel_instructions(secondary)
    channel = merged.get("midi_channel")
    channel = dict(channel) if isinstance(channel, Mapping) else {}
    channel["instructions"] = (
        primary_text if len(primary_text) >= len(secondary_text) else secondary_text
    )
    merged["midi_channel"] = channel

    return apply_device_defaults(merged)
