"""Pytest configuration for test isolation.

Import settings and the database URL are read from the environment (and from
a ``.env`` in the working directory when the CLI runs). A developer's local
values must not leak into tests, so an autouse fixture clears every
``STATEMENT_INGEST_*`` variable plus ``DATABASE_URL`` and moves the working
directory to the test's own temporary directory.

The package logger is reset around every test because the CLI configures it.

Database-backed tests get a fresh file-backed SQLite database per test.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import Database

from statement_ingest import logging_setup
from statement_ingest.ingestor import BatchIngestor
from statement_ingest.persistence import SqlTransactionStore
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ambient configuration so each test starts from defaults."""

    for name in list(os.environ):
        if name.startswith("STATEMENT_INGEST_") or name == "DATABASE_URL":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def package_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[logging.Logger]:
    """Give each test an unconfigured ``statement_ingest`` logger."""

    logger = logging.getLogger("statement_ingest")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    monkeypatch.setattr(logging_setup, "_handler", None)
    logger.handlers.clear()
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def database(tmp_path: Path) -> Iterator[Database]:
    database = bootstrap_sqlite_db(tmp_path / "db" / "statements.sqlite3")
    yield database
    database.dispose()


@pytest.fixture
def store(database: Database) -> SqlTransactionStore:
    return SqlTransactionStore(database)


@pytest.fixture
def ingestor(store: SqlTransactionStore) -> BatchIngestor:
    return BatchIngestor(store)
