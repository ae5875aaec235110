"""
Main generator orchestration for the merged MIDI database.
Coordinates loading, resolution, diagnostics, statistics, writing and provenance.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from mididb.registry.diagnostics import find_unmapped, format_missing_report
from mididb.registry.loaders import find_latest_database, load_alias_table, load_database
from mididb.registry.resolver import resolve_databases
from mididb.registry.stats import compute_statistics, format_statistics
from mididb.registry.writer import render_outputs, write_outputs
from mididb.utils import pipeline_config as cfg
from mididb.utils import provenance
from mididb.utils.logging import attach_meta

logger = logging.getLogger("midi_registry")


def output_paths(output_dir, names=None) -> Dict[str, Path]:
    names = names or cfg.output_names()
    return {kind: Path(output_dir) / name for kind, name in names.items()}


def generate(
    target_path: Optional[str] = None,
    source_path: Optional[str] = None,
    alias_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    input_dir: Optional[str] = None,
    manifest_path: Optional[str] = None,
    force: bool = False,
    dry_run: bool = False,
    report_unmapped: bool = False,
) -> Dict[str, Any]:
    """
    Run one merge. InputParseError from the loaders propagates before anything
    is written; a bad alias configuration only degrades to an empty alias table.

    Returns:
        dict with "skipped", "statistics", "outputs", "missing_brands", "missing_devices".
    """
    print("[INFO] Starting merged database generation")
    input_dir = Path(input_dir) if input_dir else cfg.input_dir()
    target = Path(target_path) if target_path else find_latest_database(
        input_dir, cfg.target_prefix()
    )
    source = Path(source_path) if source_path else input_dir / cfg.source_file()
    aliases = str(alias_path) if alias_path else str(cfg.alias_config_path())
    out_dir = Path(output_dir) if output_dir else cfg.output_dir()
    paths = output_paths(out_dir)
    manifest_file = str(manifest_path or out_dir / cfg.PROVENANCE_MANIFEST.name)

    digests = provenance.hash_inputs(
        {"target": target, "source": source, "aliases": aliases}
    )
    digests["target_file"] = target.name
    manifest = provenance.read_manifest(manifest_file)
    if not force and not dry_run and provenance.inputs_unchanged(
        manifest, digests, paths.values()
    ):
        print("[INFO] Inputs unchanged since last run; nothing to do (use --force to rebuild)")
        logger.info(f"Skipping merge, inputs unchanged: {digests}")
        return {"skipped": True, "statistics": manifest.get("statistics"), "outputs": {}}

    print("[INFO] Reading source files...")
    target_db = load_database(target)
    source_db = load_database(source)
    table = load_alias_table(aliases)

    print("[INFO] Combining and normalizing devices...")
    final_db = resolve_databases(target_db, source_db, table)

    missing_brands, missing_devices = find_unmapped(target_db, source_db, table)
    missing_device_count = sum(len(v) for v in missing_devices.values())
    logger.info(
        f"Unmapped keys: {len(missing_brands)} brands, {missing_device_count} devices"
    )
    report = format_missing_report(missing_brands, missing_devices, table)
    logger.debug(report)
    if report_unmapped:
        print(report)

    rendered = render_outputs(final_db)
    sizes = {kind: len(data) for kind, data in rendered.items()}
    stats = compute_statistics(final_db, target_db, source_db, sizes)
    summary = format_statistics(stats)

    result: Dict[str, Any] = {
        "skipped": False,
        "statistics": stats,
        "outputs": {},
        "missing_brands": missing_brands,
        "missing_devices": missing_devices,
    }
    if dry_run:
        print("[INFO] Dry run: no files written")
        print(summary)
        return result

    print("[INFO] Writing final database...")
    result["outputs"] = write_outputs(rendered, paths)
    provenance.write_manifest(
        {
            **attach_meta(__file__, "midi_database_merge", "generator"),
            "generated_at": provenance.tz_now_iso(),
            "inputs": digests,
            "outputs": result["outputs"],
            "statistics": stats,
        },
        manifest_file,
    )
    print(summary)
    logger.info(summary)
    return result
