"""DB helpers for tests: bootstrap a temporary SQLite DB and inspect it."""

from __future__ import annotations

from pathlib import Path

from db.client import Database
from db.models.finance import BankTransaction
from sqlalchemy import text as sql_text


def sqlite_url(db_file: Path) -> str:
    return f"sqlite+pysqlite:///{db_file}"


def bootstrap_sqlite_db(db_file: Path) -> Database:
    """Create a SQLite database file, initialize schema, and return a handle.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = sqlite_url(db_file)
    # Ensure parent exists before engine creation attempts any writes
    db_file.parent.mkdir(parents=True, exist_ok=True)
    database = Database(url)
    database.create_all()
    assert_transactions_schema_in_sync(database)
    return database


def stored_rows(database: Database) -> list[dict]:
    """Return every stored transaction as a plain dict, oldest id first."""

    with database.session_scope() as session:
        result = session.execute(sql_text("SELECT * FROM bank_transactions ORDER BY id"))
        return [dict(row._mapping) for row in result]


def assert_transactions_schema_in_sync(database: Database) -> None:
    """Quick sanity check: ORM column set matches SQLite table column set.

    This catches accidental divergence if the model changes and the helper is
    not updated accordingly.
    """
    expected = {c.name for c in BankTransaction.__table__.columns}
    with database.session_scope() as session:
        rows = session.execute(sql_text("PRAGMA table_info('bank_transactions')")).fetchall()
        got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
    missing = expected - got
    extra = got - expected
    assert not missing and not extra, (
        f"bank_transactions schema drift: missing={missing or '∅'}, extra={extra or '∅'}"
    )
