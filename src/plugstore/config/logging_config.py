from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

STORE_LOGGER_NAME = "plugstore.store"


def parse_level(level: object, default: int = logging.WARNING) -> int:
    """Brief: Map a level name (or numeric level) to a logging constant.

    Inputs:
      - level: "debug", "info", "warn"/"warning", "error", "crit"/"critical",
        or an int logging level.
      - default: Level returned for None.

    Outputs:
      - int: logging level constant.

    Raises:
      - ValueError for unknown level names.
    """

    if level is None:
        return default
    if isinstance(level, bool):
        raise ValueError(f"Invalid log level {level!r}")
    if isinstance(level, int):
        return level
    key = str(level).strip().lower()
    try:
        return _LEVELS[key]
    except KeyError:
        raise ValueError(
            f"Invalid log level {level!r}; expected one of {', '.join(sorted(_LEVELS))}"
        )


class BracketLevelFormatter(logging.Formatter):
    """Custom formatter that adds bracketed lowercase level tags and UTC timestamps."""

    _TAGS = {
        logging.DEBUG: "[debug]",
        logging.INFO: "[info]",
        logging.WARNING: "[warn]",
        logging.ERROR: "[error]",
        logging.CRITICAL: "[crit]",
    }

    def formatTime(self, record, datefmt=None):
        """Format time as UTC ISO-8601 with Z suffix."""
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )

    def format(self, record):
        """Add level_tag attribute and format the record."""
        record.level_tag = self._TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return super().format(record)


class StorePrefixAdapter(logging.LoggerAdapter):
    """Brief: LoggerAdapter prefixing every message with the store name.

    Inputs (constructor):
      - logger: Underlying logging.Logger.
      - prefix: Text placed before each message, e.g. "[c1]".

    Outputs:
      - StorePrefixAdapter instance exposing debug/info/warning/error.
    """

    def __init__(self, logger: logging.Logger, prefix: str) -> None:
        super().__init__(logger, {"prefix": prefix})
        self.prefix = prefix

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"{self.prefix} {msg}", kwargs


def get_store_logger(name: str, level: object = "warn") -> StorePrefixAdapter:
    """Brief: Build the prefixed logger used by one SimpleStore instance.

    Inputs:
      - name: Store name; becomes both the logger suffix and the "[name]" prefix.
      - level: Verbosity accepted by parse_level().

    Outputs:
      - StorePrefixAdapter wrapping logging.getLogger("plugstore.store.<name>").

    Example:
      >>> log = get_store_logger("c1", "debug")
      >>> log.logger.name
      'plugstore.store.c1'
    """

    base = logging.getLogger(f"{STORE_LOGGER_NAME}.{name}")
    base.setLevel(parse_level(level))
    return StorePrefixAdapter(base, f"[{name}]")


def init_logging(cfg: Optional[Dict[str, Any]]) -> None:
    """
    Initialize logging configuration based on the provided config.

    Args:
        cfg: Logging configuration dictionary with optional keys:
            - level: debug, info, warn, error, crit (default: info)
            - stderr: boolean to log to stderr (default: True)
            - file: string path to log file (optional)

    Example config:
        {
            "level": "info",
            "stderr": True,
            "file": "./var/plugstore.log",
        }
    """
    cfg = cfg or {}

    level = _LEVELS.get(str(cfg.get("level", "info")).lower(), logging.INFO)

    fmt = "%(asctime)s %(level_tag)s %(name)s: %(message)s"
    formatter = BracketLevelFormatter(fmt=fmt)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        path = os.path.abspath(os.path.expanduser(file_path.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.captureWarnings(True)
