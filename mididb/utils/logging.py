import inspect
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from mididb.utils import pipeline_config as cfg

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def attach_meta(
    source_script: str, contract_tag: str, pipeline_stage: Optional[str] = None
) -> dict:
    """`_meta` block stamped into the provenance manifest."""
    meta = {
        "source": Path(source_script).name,
        "contract": contract_tag,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if pipeline_stage:
        meta["pipeline_stage"] = pipeline_stage
    return {"_meta": meta}


def _calling_script(depth: int = 2) -> str:
    frame = inspect.stack()[depth]
    return Path(frame.filename).stem


def tool_log_path(log_path, script_name: str) -> Path:
    """canonical/logs/tools/<script>_<log name>, without doubling the script prefix."""
    name = Path(log_path).name
    if not name.startswith(script_name + "_"):
        name = f"{script_name}_{name}"
    return Path(cfg.LOGS_DIR) / "tools" / name


def setup_logging(log_path, level: Union[int, str] = logging.INFO, fmt=None) -> Path:
    """
    Route the run's logging into an append-only file named after the calling
    script and echo where it lives.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    target = tool_log_path(log_path, _calling_script())
    target.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(target),
        level=level,
        format=fmt or DEFAULT_FORMAT,
        filemode="a",
    )
    logging.getLogger("midi_registry").setLevel(level)
    print(f"[LOGGING] Log file: {target.resolve()}")
    logging.info("Logging started for %s", target.name)
    return target
