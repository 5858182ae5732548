"""Logging for statement imports.

Library modules (ingestor, schema detector, normalizer, store) only ever call
``get_logger("statement_ingest.<module>")``. Until an entrypoint configures
output, the ``statement_ingest`` logger carries a ``NullHandler`` so an
embedding service sees nothing it did not ask for.

The CLI configures output from its root callback, picking the level from
``--verbose`` / ``--log-level`` and falling back to
``STATEMENT_INGEST_LOG_LEVEL``. Per-row outcomes are logged at DEBUG, file
and batch summaries at INFO, skipped files at WARNING.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "STATEMENT_INGEST_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_PKG_LOGGER_NAME = "statement_ingest"
_handler: logging.Handler | None = None


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time.

    Test runners and the Typer runner swap ``sys.stderr`` per invocation, so
    binding the stream once would keep writing to a closed buffer.
    """

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def resolve_level(level: str | None = None, *, verbose: bool = False) -> int:
    """Turn CLI input into a numeric level.

    ``verbose`` wins over ``level``; with neither, the environment variable
    is consulted, then INFO. Unknown names raise ``ValueError``.
    """

    if verbose:
        return logging.DEBUG
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or "INFO"
    name = level.strip().upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"unknown log level {level!r}; expected one of {', '.join(LEVEL_NAMES)}")
    return getattr(logging, name)


def configure_logging(level: int) -> None:
    """Send package logs to stderr at ``level``.

    Safe to call again: the handler installed by an earlier call is reused
    and only its level changes.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    if _handler is None:
        _handler = _StderrHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in logger.handlers:
        logger.addHandler(_handler)

    _handler.setLevel(level)
    logger.setLevel(level)
    # Records stop here; the root logger belongs to the host application.
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
