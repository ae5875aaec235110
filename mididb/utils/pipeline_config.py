import logging
import os
from pathlib import Path

import yaml

# === BASE DIRECTORIES ===
CANONICAL_DIR = Path("canonical")
SUPPORT_DIR = CANONICAL_DIR / "support"
INPUTS_DIR = CANONICAL_DIR / "registry_inputs"
OUTPUTS_DIR = CANONICAL_DIR / "outputs"
LOGS_DIR = CANONICAL_DIR / "logs"

# === INPUTS ===
TARGET_PREFIX = "midi-database-v"
SOURCE_FILE = "all.json"
ALIAS_CONFIG = SUPPORT_DIR / "alias_mapping.yaml"

# === OUTPUT ARTIFACTS ===
OUTPUT_NAMES = {
    "pretty": "midi.json",
    "minified": "midi.min.json",
    "gzip": "midi.min.json.gz",
}
PROVENANCE_MANIFEST = OUTPUTS_DIR / "midi.provenance.json"

# === LOGGING ===
PIPELINE_LOG = LOGS_DIR / "merge.log"

CENTRAL_CONFIG_CANDIDATES = ["settings.conf", "config.yaml"]


def load_central_config(candidates=None):
    """Load central configuration from settings.conf (preferred) or config.yaml.

    Returns a dict with settings or empty dict on failure.
    """
    for p in candidates or CENTRAL_CONFIG_CANDIDATES:
        if os.path.exists(p):
            try:
                with open(p, "r") as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logging.warning("Failed to load central config %s: %s", p, e)
                continue
            if isinstance(loaded, dict):
                return loaded
            logging.warning("Central config %s is not a mapping; ignoring", p)
    return {}


_CENTRAL = load_central_config()


def get_setting(key, default=None, settings=None):
    settings = _CENTRAL if settings is None else settings
    value = settings.get(key)
    return default if value is None else value


def input_dir(settings=None) -> Path:
    return Path(get_setting("input_dir", INPUTS_DIR, settings))


def output_dir(settings=None) -> Path:
    return Path(get_setting("output_dir", OUTPUTS_DIR, settings))


def alias_config_path(settings=None) -> Path:
    return Path(get_setting("alias_config", ALIAS_CONFIG, settings))


def source_file(settings=None) -> str:
    return str(get_setting("source_file", SOURCE_FILE, settings))


def target_prefix(settings=None) -> str:
    return str(get_setting("target_prefix", TARGET_PREFIX, settings))


def output_names(settings=None) -> dict:
    overrides = get_setting("output_names", {}, settings)
    names = dict(OUTPUT_NAMES)
    if isinstance(overrides, dict):
        names.update({k: v for k, v in overrides.items() if k in OUTPUT_NAMES})
    return names
