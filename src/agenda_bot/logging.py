from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import DATA_DIR, ensure_data_dir

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Client libraries that log every request at INFO or every cache miss at WARNING
QUIET_LOGGERS = {
    "googleapiclient.discovery_cache": logging.ERROR,
    "httpx": logging.WARNING,
    "telegram": logging.WARNING,
    "hypercorn.access": logging.WARNING,
}

_INITIALIZED = False


def configure_logging(level: str = "INFO", *, log_path: Optional[Path] = None) -> Path:
    """Send webhook, dialogue and Google adapter logs to ``agenda_bot.log`` and stderr.

    Only the first call installs handlers; later calls return the active log file.
    """

    global _INITIALIZED
    log_file = log_path or DATA_DIR / "agenda_bot.log"
    if _INITIALIZED:
        return log_file

    if log_path is None:
        ensure_data_dir()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in (
        RotatingFileHandler(str(log_file), maxBytes=1_000_000, backupCount=5, encoding="utf-8"),
        logging.StreamHandler(),
    ):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    _INITIALIZED = True
    logging.getLogger(__name__).info("agenda-bot logging at %s into %s", level.upper(), log_file)
    return log_file


__all__ = ["configure_logging"]
