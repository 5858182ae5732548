"""Transaction store contract consumed by the batch ingestor.

The ingestor never talks to a database directly. It receives an object that
satisfies :class:`TransactionStore` at construction time; the SQLAlchemy
implementation lives in :mod:`statement_ingest.persistence`.

Implementations must make ``upsert_by_natural_key`` atomic so concurrent
imports of overlapping files converge without duplicates or lost updates.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Protocol, runtime_checkable

from .models import CanonicalTransaction


class UpsertOutcome(StrEnum):
    INSERTED = "inserted"
    UPDATED = "updated"
    # A record with the same natural key already held identical values.
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class TransactionFilters:
    """Optional filters for owner listings.

    ``start``/``end`` are inclusive. ``sources`` restricts to the given
    statement tags. Results are ordered by date, newest first.
    """

    start: date | None = None
    end: date | None = None
    sources: Collection[str] | None = None
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.start and self.end and self.start > self.end:
            raise ValueError("start must not be after end")
        if self.limit is not None and self.limit <= 0:
            raise ValueError("limit must be positive when set")
        if self.offset < 0:
            raise ValueError("offset must be >= 0")


@runtime_checkable
class TransactionStore(Protocol):
    def upsert_by_natural_key(self, tx: CanonicalTransaction) -> UpsertOutcome:
        """Insert ``tx`` or overwrite the mutable fields of its existing record.

        Raises :class:`~statement_ingest.errors.StoreWriteFailed` on failure.
        """
        ...

    def find_by_natural_key(
        self,
        owner_id: str,
        description: str,
        occurred_on: date,
        amount: Decimal,
    ) -> CanonicalTransaction | None: ...

    def find_by_owner(
        self, owner_id: str, filters: TransactionFilters | None = None
    ) -> list[CanonicalTransaction]: ...


__all__ = [
    "UpsertOutcome",
    "TransactionFilters",
    "TransactionStore",
]
