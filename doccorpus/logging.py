"""Logger setup shared by the corpus build and validation commands.

Every module logs below the ``doccorpus`` logger, so one call to
:func:`configure_logging` from the CLI controls discovery, generation and
validation output alike.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "doccorpus"
_CONSOLE_FORMAT = "[doccorpus] %(levelname)s %(message)s"
# Projects are processed on worker threads; verbose output names the worker.
_VERBOSE_CONSOLE_FORMAT = "[doccorpus] %(levelname)s %(threadName)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``doccorpus.<name>``, e.g. ``doccorpus.generator``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console output, plus a build log file when ``log_file`` is set.

    Handlers from an earlier call are replaced, so ``build`` and
    ``validate`` can run back to back in one process.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Log a failed project; the traceback only shows with ``--verbose``."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.exception("%s: %s", message, exc)
    else:
        logger.error("%s: %s", message, exc)


__all__ = ["configure_logging", "get_logger", "log_exception"]
