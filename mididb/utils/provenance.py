"""Provenance helper utilities.

Centralizes SHA256, timezone-aware timestamps, and provenance manifest I/O so
the generator can tell whether its inputs changed since the last run.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

DEFAULT_MANIFEST = "canonical/outputs/midi.provenance.json"


def compute_sha256_bytes(data: bytes) -> str:
    h = hashlib.sha256()
    h.update(data)
    return h.hexdigest()


def file_sha256(path: str | Path) -> str:
    p = Path(path)
    h = hashlib.sha256()
    with p.open("rb") as f:
        while True:
            chunk = f.read(8192)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def tz_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def manifest_path(manifest_env: Optional[str] = None) -> Path:
    return Path(
        manifest_env or os.getenv("MIDIDB_PROVENANCE_MANIFEST") or DEFAULT_MANIFEST
    )


def read_manifest(manifest_env: Optional[str] = None) -> Dict[str, Any]:
    p = manifest_path(manifest_env)
    if not p.exists():
        return {}
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logging.warning("Ignoring unreadable provenance manifest %s: %s", p, exc)
        return {}


def write_manifest(
    manifest: Dict[str, Any], manifest_env: Optional[str] = None
) -> None:
    p = manifest_path(manifest_env)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(
        json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8"
    )


def hash_inputs(paths: Mapping[str, Optional[str | Path]]) -> Dict[str, Optional[str]]:
    """SHA256 per named input; None for inputs that are not present."""
    digests = {}
    for name, path in paths.items():
        if path and Path(path).exists():
            digests[name] = file_sha256(path)
        else:
            digests[name] = None
    return digests


def inputs_unchanged(
    manifest: Mapping[str, Any],
    input_digests: Mapping[str, Optional[str]],
    output_paths: Iterable[str | Path],
) -> bool:
    """True when the last recorded run used identical inputs and its outputs still exist."""
    recorded = manifest.get("inputs")
    if not recorded or dict(recorded) != dict(input_digests):
        return False
    return all(Path(p).exists() for p in output_paths)
