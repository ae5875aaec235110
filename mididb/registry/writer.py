"""
Writer for the merged database artifacts: pretty JSON, minified JSON and the
gzip of the minified bytes. All artifacts are rendered in memory from the
same snapshot, staged as *.tmp files and only then moved into place.
"""

import gzip
import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, Mapping

from mididb.utils import provenance

logger = logging.getLogger("midi_registry")

OUTPUT_KINDS = ("pretty", "minified", "gzip")


def sanitize_for_json(obj: Any) -> Any:
    """Replace NaN/Infinity with None so the output stays strict JSON."""
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None
    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [sanitize_for_json(v) for v in obj]
    return obj


def render_outputs(final_db: Mapping[str, Any]) -> Dict[str, bytes]:
    clean = sanitize_for_json(final_db)
    pretty = json.dumps(clean, indent=2, ensure_ascii=False, allow_nan=False)
    minified = json.dumps(
        clean, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")
    return {
        "pretty": pretty.encode("utf-8"),
        "minified": minified,
        # mtime=0 keeps the archive byte-identical across runs
        "gzip": gzip.compress(minified, mtime=0),
    }


def write_outputs(
    rendered: Mapping[str, bytes], paths: Mapping[str, Path]
) -> Dict[str, Dict[str, Any]]:
    """
    Write every rendered artifact to its path, all or nothing.
    Args:
        rendered: bytes keyed by output kind
        paths: destination path keyed by the same kinds
    Returns:
        {kind: {"path", "sha256", "bytes"}}
    """
    staged = []
    try:
        for kind, data in rendered.items():
            dest = Path(paths[kind])
            dest.parent.mkdir(parents=True, exist_ok=True)
            tmp = dest.with_name(dest.name + ".tmp")
            tmp.write_bytes(data)
            staged.append((tmp, dest))
    except Exception:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise

    result = {}
    for kind, (tmp, dest) in zip(rendered.keys(), staged):
        os.replace(tmp, dest)
        data = rendered[kind]
        result[kind] = {
            "path": str(dest),
            "sha256": provenance.compute_sha256_bytes(data),
            "bytes": len(data),
        }
        logger.info(f"Wrote {kind} output {dest} ({len(data)} bytes)")
    return result
