"""
Device record standardizer.

Maps a heterogeneous source device object onto the fixed DeviceRecord shape:
brand, device_name, midi_thru, midi_in, midi_clock, phantom_power,
midi_channel.instructions, instructions, cc, nrpn, pc.

Defaulting follows "falsy means absent": a legitimate False/0/"" on the
source is replaced by the default exactly like a missing field. Existing
outputs depend on this, so it is kept as is.
"""

import logging
import re
from typing import Any, Dict, List, Mapping

from mididb.registry.errors import InputParseError

logger = logging.getLogger("midi_registry")

PARAMETER_LISTS = ("cc", "nrpn", "pc")

CC_MAX = 127
NRPN_MAX = 16383

_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")


def parse_int(text: str):
    """Base-10 integer prefix of text, or NaN when there is none."""
    match = _INT_PREFIX.match(text)
    if not match:
        return float("nan")
    return int(match.group(1))


def _coerce(value):
    if isinstance(value, str):
        return parse_int(value)
    return value


def _bound(param: Mapping, key: str, default: int):
    # an explicit null passes through; only a missing key gets the default
    if key not in param:
        return default
    return _coerce(param[key])


def standardize_parameter(param: Mapping, kind: str = "cc") -> Dict[str, Any]:
    """
    Default and coerce one parameter.
    Args:
        param (dict): raw parameter from a source database
        kind (str): "cc", "pc" (value/min/max) or "nrpn" (msb/lsb/min/max)
    Returns:
        dict: standardized parameter
    """
    if not isinstance(param, Mapping):
        raise InputParseError(
            f"{kind} parameter must be an object, got {type(param).__name__}"
        )
    out: Dict[str, Any] = {
        "name": param.get("name") or "",
        "description": param.get("description") or "",
        "usage": param.get("usage") or "",
        "curve": param.get("curve") or "0-based",
    }
    # address keys the source lacks are left out of the record, not nulled
    if kind == "nrpn":
        for key in ("msb", "lsb"):
            if key in param:
                out[key] = _coerce(param[key])
        out["min"] = _bound(param, "min", 0)
        out["max"] = _bound(param, "max", NRPN_MAX)
    else:
        if "value" in param:
            out["value"] = _coerce(param["value"])
        out["min"] = _bound(param, "min", 0)
        out["max"] = _bound(param, "max", CC_MAX)
    out["type"] = param.get("type") or "Parameter"
    return out


def _parameter_list(raw: Mapping, field: str) -> List[Dict[str, Any]]:
    items = raw.get(field) or []
    if field == "pc" and isinstance(items, Mapping):
        logger.debug("Dropping pc object that was not pre-normalized")
        return []
    if not isinstance(items, list):
        raise InputParseError(
            f"'{field}' must be a list, got {type(items).__name__}"
        )
    kind = "nrpn" if field == "nrpn" else "cc"
    return [standardize_parameter(p, kind) for p in items]


def normalize_program_change(raw: Mapping) -> Dict[str, Any]:
    """
    Return a copy of raw whose single-object `pc` is turned into a one-element
    Program Change list. Records whose pc is already a list are returned as a
    shallow copy unchanged.
    """
    device = dict(raw)
    pc = device.get("pc")
    if pc and not isinstance(pc, list):
        description = pc.get("description") if isinstance(pc, Mapping) else None
        device["pc"] = [
            {
                "name": "Program Change",
                "description": description or "",
                "usage": "",
                "curve": "0-based",
                "value": 0,
                "min": 0,
                "max": CC_MAX,
                "type": "Parameter",
            }
        ]
    return device


def standardize_device(raw: Mapping, brand: str, device_name: str) -> Dict[str, Any]:
    """Build a complete DeviceRecord from a raw source device. Does not mutate raw."""
    if not isinstance(raw, Mapping):
        raise InputParseError(
            f"Device '{device_name}' must be an object, got {type(raw).__name__}"
        )
    midi_channel = raw.get("midi_channel")
    channel_instructions = (
        midi_channel.get("instructions") if isinstance(midi_channel, Mapping) else None
    )
    if channel_instructions and not isinstance(channel_instructions, str):
        logger.debug(f"Coercing non-text channel instructions on '{device_name}'")
        channel_instructions = str(channel_instructions)
    return {
        "brand": brand,
        "device_name": device_name,
        "midi_thru": raw.get("midi_thru") or False,
        "midi_in": raw.get("midi_in") or "",
        "midi_clock": raw.get("midi_clock") or False,
        "phantom_power": raw.get("phantom_power") or "None",
        "midi_channel": {"instructions": channel_instructions or ""},
        "instructions": raw.get("instructions") or "",
        "cc": _parameter_list(raw, "cc"),
        "nrpn": _parameter_list(raw, "nrpn"),
        "pc": _parameter_list(raw, "pc"),
    }


def parameter_count(record: Mapping) -> int:
    return sum(len(record.get(field) or []) for field in PARAMETER_LISTS)
