"""
Logging for the diagnostics package.

Library modules only ask for a logger:

    from ssdiag.logging_config import get_logger
    log = get_logger(__name__)

Importing ssdiag never touches the host application's logging. The package
logger ``ssdiag`` carries a NullHandler, and handlers are attached only by
the ``ssdiag`` command (see cli.main), which calls setup_logging():

    stderr      human-readable lines, level from $LOG_LEVEL (default INFO)
    --log-dir   diagnostics.jsonl, one JSON object per record at DEBUG,
                including the structured fields of log_step_summary()
"""

import json
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler

PACKAGE_LOGGER = "ssdiag"
LOG_FILENAME = "diagnostics.jsonl"

# Attributes set through ``extra=`` by log_step_summary().
_SUMMARY_FIELDS = ("step_name", "input_summary", "output_summary",
                   "timing_seconds", "warnings")


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per record, for the --log-dir run log."""

    def format(self, record):
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _SUMMARY_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _level_from_env():
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(log_dir=None, console_level=None):
    """Attach command-line handlers to the ``ssdiag`` logger.

    Replaces any handlers a previous call attached, so calling it twice
    leaves one console handler.

    Parameters
    ----------
    log_dir : str, optional
        Directory for ``diagnostics.jsonl``. No file is written without it.
    console_level : int, optional
        Level for the stderr handler. Default: $LOG_LEVEL or INFO.

    Returns
    -------
    logging.Logger
        The package logger.
    """
    reset_logging()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level if console_level is not None
                     else _level_from_env())
    console.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILENAME),
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(JsonLinesFormatter())
        logger.addHandler(fh)

    return logger


def reset_logging():
    """Remove the handlers setup_logging() attached; keep the NullHandler."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        if isinstance(handler, logging.NullHandler):
            continue
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def get_logger(name):
    """Return the logger for a module of this package."""
    return logging.getLogger(name)


def log_step_summary(logger, step_name, input_summary=None, output_summary=None,
                     timing_seconds=None, warnings_list=None):
    """Log one INFO line summarising a finished step.

    The summaries travel as record attributes so the JSON Lines file keeps
    them as structured fields; the console shows a condensed message.

    Parameters
    ----------
    logger : logging.Logger
    step_name : str
        "diagnostics" or "init_search".
    input_summary, output_summary : dict, optional
    timing_seconds : float, optional
    warnings_list : list[str], optional
        Shown as a count on the console, in full in the JSON record.
    """
    parts = [f"[{step_name}] finished"]
    if timing_seconds is not None:
        parts.append(f"({timing_seconds:.2f}s)")
    if output_summary:
        parts.append(f"output={output_summary}")
    if warnings_list:
        parts.append(f"warnings={len(warnings_list)}")

    extra = {"step_name": step_name}
    if input_summary:
        extra["input_summary"] = input_summary
    if output_summary:
        extra["output_summary"] = output_summary
    if timing_seconds is not None:
        extra["timing_seconds"] = timing_seconds
    if warnings_list:
        extra["warnings"] = warnings_list

    logger.info(" ".join(parts), extra=extra)


class StepTimer:
    """Wall-clock timer for a block; ``elapsed`` is set on exit."""

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start
