import json
import logging
import os
import tempfile
from datetime import datetime, date, time as dt_time
from pathlib import Path
from typing import Any, Dict, Optional

from showfeed.config import settings

# --- Logger Setup ---
_loggers: Dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"


def setup_logger(
    logger_name: str,
    log_file_prefix: str,
    level: int = logging.INFO,
    log_dir: Optional[Path] = None
) -> logging.Logger:
    """Configures and returns a logger that outputs to console and a timestamped file."""
    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False # Module loggers under this name log once, not again via root

    # Re-calls replace handlers instead of stacking them
    if logger.hasHandlers():
        logger.handlers.clear()

    # Formatter
    formatter = logging.Formatter(LOG_FORMAT)

    # Console Handler
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    # File Handler (always DEBUG; the console follows `level`)
    log_dir = log_dir or settings.file_outputs.log_output_directory
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file_path = log_dir / f"{log_file_prefix}_{timestamp}.log"
        fh = logging.FileHandler(log_file_path)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
    except OSError as e:
        logger.error(f"Failed to create file handler for logger {logger_name} at {log_dir}: {e}", exc_info=True)

    _loggers[logger_name] = logger
    logger.info(f"Logger '{logger_name}' initialized. Logging to console and file (if path valid).")
    return logger


# --- File Output Utilities ---

def _serialize_item(item: Any) -> Any:
    """json.dump default hook for types the feed and the debug dumps may carry."""
    if isinstance(item, (datetime, date, dt_time)):
        return item.isoformat()
    if isinstance(item, Path):
        return str(item)
    if hasattr(item, "model_dump"):
        return item.model_dump(exclude_none=True)
    raise TypeError(f"Object of type {type(item).__name__} is not JSON serializable")


def ensure_output_dir_exists(target_dir: Path) -> Path:
    target_dir.mkdir(parents=True, exist_ok=True)
    return target_dir


def write_text_atomic(filepath: Path, content: str) -> Path:
    """
    Writes content to a sibling temp file and renames it over the target,
    so readers only ever see the previous file or the complete new one.
    """
    ensure_output_dir_exists(filepath.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent) # os.replace needs the temp file on the target's filesystem
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        os.replace(tmp_name, filepath)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return filepath


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=_serialize_item)
