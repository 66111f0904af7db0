"""File logging for blindspot.

The terminal is owned by the output actor while a command runs, so
diagnostics go to a log file instead of stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "blindspot"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_HANDLER_TAG = "_blindspot_log_handler"


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]


def setup_logging(log_path: Path | None, verbose: bool = False) -> Path | None:
    """Attach a single file handler to the ``blindspot`` logger.

    Calling this again replaces the handler installed by a previous call,
    so repeated CLI invocations in one process (tests) do not stack handlers.
    Returns the path being written, or ``None`` when logging is disabled.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    handler: logging.Handler = logging.NullHandler()
    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError:
            # An unwritable log location must not stop the package manager.
            log_path = None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_TAG, True)
    logger.addHandler(handler)
    return log_path
