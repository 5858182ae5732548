# ruff: noqa: I001
"""SQLAlchemy-backed transaction store.

Writes go to ``bank_transactions`` owned by ``libs/db``. The handle
(:class:`db.client.Database`) is created by the process entrypoint and passed
in; this module keeps no connection state of its own.

Upsert semantics
----------------
One statement per transaction::

    INSERT ... ON CONFLICT (owner_id, description, occurred_on, amount)
    DO UPDATE SET category, direction, source, revision = revision + 1
    WHERE <any of those differ>
    RETURNING revision

- a returned ``revision`` of 0 means the row was inserted;
- a returned value > 0 means an existing row was updated;
- no returned row means the stored copy was already identical.

Both PostgreSQL and SQLite (3.35+) support this form, so the outcome is
decided atomically by the database and concurrent imports converge.
Each upsert commits on its own; a batch is best-effort per row.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from db.client import Database
from db.models.finance import BankTransaction

from .errors import StoreWriteFailed
from .logging_setup import get_logger
from .models import CanonicalTransaction, Direction
from .store import TransactionFilters, UpsertOutcome

_log = get_logger("statement_ingest.persistence")

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

# Fields overwritten when a record with the same natural key already exists.
_MUTABLE_FIELDS: tuple[str, ...] = ("category", "direction", "source")


def _to_canonical(row: BankTransaction) -> CanonicalTransaction:
    return CanonicalTransaction(
        owner_id=row.owner_id,
        occurred_on=row.occurred_on,
        description=row.description,
        category=row.category,
        amount=Decimal(row.amount).quantize(Decimal("0.01")),
        direction=Direction(row.direction),
        source=row.source,
    )


class SqlTransactionStore:
    """:class:`~statement_ingest.store.TransactionStore` over SQLAlchemy."""

    def __init__(self, database: Database) -> None:
        dialect = database.dialect_name
        if dialect not in _INSERTS:
            raise ValueError(
                f"Unsupported database dialect for upserts: {dialect!r}. "
                f"Supported: {sorted(_INSERTS)}"
            )
        self._database = database
        self._insert = _INSERTS[dialect]

    def upsert_by_natural_key(self, tx: CanonicalTransaction) -> UpsertOutcome:
        table = BankTransaction.__table__
        now = func.current_timestamp()

        stmt = self._insert(table).values(
            owner_id=tx.owner_id,
            occurred_on=tx.occurred_on,
            description=tx.description,
            category=tx.category,
            amount=tx.amount,
            direction=tx.direction.value,
            source=tx.source,
            revision=0,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                table.c.owner_id,
                table.c.description,
                table.c.occurred_on,
                table.c.amount,
            ],
            set_={
                **{name: stmt.excluded[name] for name in _MUTABLE_FIELDS},
                "revision": table.c.revision + 1,
                "updated_at": now,
            },
            where=or_(*(table.c[name] != stmt.excluded[name] for name in _MUTABLE_FIELDS)),
        ).returning(table.c.revision)

        try:
            with self._database.session_scope() as session:
                revision = session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            _log.warning("upsert failed for %s: %s", tx.natural_key, exc)
            # DBAPI errors carry the driver message on ``orig``; str(exc) embeds the SQL.
            raise StoreWriteFailed(str(getattr(exc, "orig", None) or exc)) from exc

        if revision is None:
            return UpsertOutcome.UNCHANGED
        if revision == 0:
            return UpsertOutcome.INSERTED
        return UpsertOutcome.UPDATED

    def find_by_natural_key(
        self,
        owner_id: str,
        description: str,
        occurred_on: date,
        amount: Decimal,
    ) -> CanonicalTransaction | None:
        stmt = select(BankTransaction).where(
            BankTransaction.owner_id == owner_id,
            BankTransaction.description == description,
            BankTransaction.occurred_on == occurred_on,
            BankTransaction.amount == amount,
        )
        with self._database.session_scope() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return _to_canonical(row) if row is not None else None

    def find_by_owner(
        self, owner_id: str, filters: TransactionFilters | None = None
    ) -> list[CanonicalTransaction]:
        f = filters or TransactionFilters()
        stmt = select(BankTransaction).where(BankTransaction.owner_id == owner_id)
        if f.start is not None:
            stmt = stmt.where(BankTransaction.occurred_on >= f.start)
        if f.end is not None:
            stmt = stmt.where(BankTransaction.occurred_on <= f.end)
        if f.sources:
            stmt = stmt.where(BankTransaction.source.in_(list(f.sources)))
        stmt = stmt.order_by(BankTransaction.occurred_on.desc(), BankTransaction.id.desc())
        if f.offset:
            stmt = stmt.offset(f.offset)
        if f.limit is not None:
            stmt = stmt.limit(f.limit)

        with self._database.session_scope() as session:
            return [_to_canonical(row) for row in session.execute(stmt).scalars()]

    def count(self, owner_id: str | None = None) -> int:
        stmt = select(func.count()).select_from(BankTransaction)
        if owner_id is not None:
            stmt = stmt.where(BankTransaction.owner_id == owner_id)
        with self._database.session_scope() as session:
            return session.execute(stmt).scalar_one()


__all__ = ["SqlTransactionStore"]
