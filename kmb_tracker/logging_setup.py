"""Root logger setup driven by the logging config section."""

from __future__ import annotations

import logging
from pathlib import Path

from kmb_tracker.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_FILENAME = "kmb_tracker.log"


def setup_logging(config: LoggingConfig) -> None:
    """Send log records to the console and to a file under ``log_dir``."""
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {config.level}")

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # requests/urllib3 are chatty at DEBUG.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))


__all__ = ["setup_logging"]
