# chain_tracker/config/logging_config.py

"""Logging for the chain_tracker service.

Every launch writes one file under ``logs/`` named after the command
that started it, e.g. ``logs/server_20260214_153045.log`` for the
long-running service or ``logs/record_20260214_153045.log`` for a
one-shot ``--record-once``.

The recorder ticks on an APScheduler worker thread while Flask answers
on request threads, so every line carries its thread name.  The
scheduler's job events (missed runs, skipped overlapping ticks) and
werkzeug's request lines go to the same file as the service's own
``chain_tracker.*`` loggers, giving one timeline per run.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from chain_tracker.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(threadName)-12s | %(name)s | "
    "%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library loggers whose records belong in the run file
_LIBRARY_LEVELS = {
    "apscheduler": logging.INFO,
    "werkzeug": logging.INFO,
}


def _run_file(handlers: list[logging.Handler]) -> Path | None:
    for handler in handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(mode: str = "server") -> Path:
    """Configure ``chain_tracker`` logging for this launch.

    Args:
        mode: Name of the command being run; prefixes the log file.

    Returns:
        Path of the run's log file.  A second call in the same process
        keeps the existing handlers and returns the file already open.
    """
    service_logger = logging.getLogger("chain_tracker")
    existing = _run_file(service_logger.handlers)
    if existing is not None:
        return existing

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{mode}_{timestamp}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(Settings.LOG_LEVEL)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    service_logger.setLevel(logging.DEBUG)
    service_logger.addHandler(file_handler)
    service_logger.addHandler(console_handler)

    for name, level in _LIBRARY_LEVELS.items():
        library_logger = logging.getLogger(name)
        library_logger.setLevel(level)
        library_logger.addHandler(file_handler)

    service_logger.info(
        "Logging initialised for %s, log file: %s", mode, log_file,
    )
    return log_file
