#!/usr/bin/env python3
"""
Canonical entrypoint for the merged MIDI device database.
Run as module: python -m mididb.merge_pipeline_main
"""

import argparse
import logging
import sys

from mididb.registry.errors import InputParseError
from mididb.registry.generator import generate
from mididb.utils import pipeline_config as cfg
from mididb.utils.logging import setup_logging

logger = logging.getLogger("midi_registry")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Merge the target and source MIDI device databases into midi.json"
    )
    parser.add_argument(
        "--input-dir",
        default=None,
        help=f"Directory holding {cfg.TARGET_PREFIX}*.json and {cfg.SOURCE_FILE} (default: {cfg.INPUTS_DIR})",
    )
    parser.add_argument(
        "--target",
        default=None,
        help="Target database path (default: newest versioned database in --input-dir)",
    )
    parser.add_argument(
        "--source",
        default=None,
        help=f"Source database path (default: <input-dir>/{cfg.SOURCE_FILE})",
    )
    parser.add_argument(
        "--aliases",
        default=None,
        help=f"Alias configuration YAML/JSON (default: {cfg.ALIAS_CONFIG})",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help=f"Directory for midi.json, midi.min.json and midi.min.json.gz (default: {cfg.OUTPUTS_DIR})",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Rebuild even if the inputs are unchanged since the last run",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and print statistics without writing any file",
    )
    parser.add_argument(
        "--report-unmapped",
        action="store_true",
        help="Print brands and devices missing from the alias configuration",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(cfg.PIPELINE_LOG, level=getattr(logging, args.log_level))
    logger.info("Starting merge_pipeline_main.py run.")
    try:
        generate(
            target_path=args.target,
            source_path=args.source,
            alias_path=args.aliases,
            output_dir=args.output_dir,
            input_dir=args.input_dir,
            force=args.force,
            dry_run=args.dry_run,
            report_unmapped=args.report_unmapped,
        )
    except InputParseError as exc:
        logger.error(f"Aborting merge, no output written: {exc}")
        print(f"[ERROR] Error processing database: {exc}", file=sys.stderr)
        return 1
    logger.info("merge_pipeline_main.py run complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
