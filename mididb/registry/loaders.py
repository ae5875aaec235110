"""
Loaders for the merge pipeline inputs: the two source databases and the
alias configuration.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from mididb.registry.aliases import AliasTable, build_alias_table, empty_alias_table
from mididb.registry.errors import ConfigurationError, InputParseError

logger = logging.getLogger("midi_registry")

DATABASE_PREFIX = "midi-database-v"

_DIGITS = re.compile(r"(\d+)")


def _natural_key(name: str):
    return [int(part) if part.isdigit() else part for part in _DIGITS.split(name)]


def find_latest_database(directory, prefix: str = DATABASE_PREFIX) -> Path:
    """
    Newest versioned target database in directory, e.g. midi-database-v1.10.json.
    Minified and gzipped siblings are ignored; versions compare numerically.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise InputParseError("Input directory does not exist", path=str(directory))
    candidates = [
        name
        for name in os.listdir(directory)
        if name.startswith(prefix)
        and name.endswith(".json")
        and not name.endswith(".min.json")
    ]
    if not candidates:
        raise InputParseError(
            f"No {prefix}*.json database found", path=str(directory)
        )
    latest = max(candidates, key=_natural_key)
    print(f"[INFO] Found latest database: {latest}")
    logger.info(f"Latest target database: {latest} (of {len(candidates)})")
    return directory / latest


def load_database(path) -> Dict[str, Any]:
    """Parse a source database. Any structural problem is an InputParseError."""
    path = Path(path)
    if not path.exists():
        raise InputParseError("Database file not found", path=str(path))
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InputParseError(f"Database is not valid JSON: {exc}", path=str(path)) from exc
    if not isinstance(content, dict):
        raise InputParseError(
            f"Database must be a JSON object, got {type(content).__name__}",
            path=str(path),
        )
    logger.info(f"Loaded database {path} with {len(content)} top-level keys")
    return content


def load_yaml(path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_alias_config(path) -> Dict[str, Any]:
    """Read the alias configuration (YAML or JSON). Raises ConfigurationError."""
    if not path or not os.path.exists(path):
        raise ConfigurationError(f"Alias configuration not found: {path}")
    try:
        config = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Alias configuration {path} is not parseable: {exc}") from exc
    if not isinstance(config, dict) or not isinstance(config.get("brands", []), list):
        raise ConfigurationError(
            f"Alias configuration {path} must be a mapping with a 'brands' list"
        )
    return config


def load_alias_table(path: Optional[str]) -> AliasTable:
    """
    Alias table for path. A missing or malformed configuration degrades to an
    empty table so the run still completes, with lower merge quality.
    """
    try:
        return build_alias_table(load_alias_config(path))
    except ConfigurationError as exc:
        logger.warning(f"{exc}; continuing without aliases")
        print(f"[WARN] {exc}; continuing without aliases")
        return empty_alias_table()
