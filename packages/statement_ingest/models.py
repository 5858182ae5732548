"""Data models for ``statement_ingest``.

- ``CanonicalTransaction``: the normalized, store-ready record produced per
  row. It only lives for the duration of one import call.
- ``SchemaMapping``: per-file association of logical roles to column indexes.
- ``ImportSummary``: the partial-success report returned to callers. It is a
  pydantic model so the HTTP layer can serialize it with camelCase keys
  (``processedCount``, ``totalRowCount``, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_CATEGORY = "Uncategorized"

# ---------------------------------------------------------------------------
# Canonical record
# ---------------------------------------------------------------------------


class Direction(StrEnum):
    CREDIT = "credit"
    DEBIT = "debit"


type NaturalKey = tuple[str, str, date, Decimal]
"""``(owner_id, description, occurred_on, amount)``.

Two rows with the same key are the same transaction as far as deduplication
is concerned, even when they came from different sources.
"""


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """A single normalized bank transaction.

    ``amount`` is always the non-negative magnitude; the sign of the value
    read from the file is captured by ``direction``.
    """

    owner_id: str
    occurred_on: date
    description: str
    category: str
    amount: Decimal
    direction: Direction
    source: str

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"amount must be non-negative, got {self.amount}")

    @property
    def natural_key(self) -> NaturalKey:
        return (self.owner_id, self.description, self.occurred_on, self.amount)

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.direction is Direction.CREDIT else -self.amount


# ---------------------------------------------------------------------------
# Schema mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SchemaMapping:
    """Column positions for each role, resolved from a header row."""

    date: int
    amount: int
    description: int
    identifier: int | None = None

    @property
    def required_width(self) -> int:
        """Minimum cell count for a row to hold every mandatory column."""

        return max(self.date, self.amount, self.description) + 1


# ---------------------------------------------------------------------------
# Import summary
# ---------------------------------------------------------------------------


class ImportSummary(BaseModel):
    """Aggregate outcome of one import call (a file or a directory scan).

    ``processed_count`` counts rows that were inserted or changed an existing
    record. Rows whose stored copy was already identical count as
    ``unchanged_count`` only. ``errors`` holds at most the configured number
    of messages; ``errors_omitted`` counts the ones that did not fit.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    processed_count: int = 0
    total_row_count: int = 0
    errors: tuple[str, ...] = ()
    files_processed: int | None = None

    inserted_count: int = 0
    updated_count: int = 0
    unchanged_count: int = 0
    rejected_count: int = 0
    errors_omitted: int = 0
    skipped_files: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("processed_count", "total_row_count", "rejected_count", "errors_omitted")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("counts must be non-negative")
        return v

    @property
    def message(self) -> str:
        if self.files_processed is not None:
            msg = (
                f"Successfully processed {self.files_processed} files and imported "
                f"{self.processed_count} transactions"
            )
        else:
            msg = (
                f"Successfully imported {self.processed_count} of "
                f"{self.total_row_count} transactions"
            )
        if self.errors_omitted:
            msg += f" and {self.errors_omitted} more errors"
        return msg


__all__ = [
    "DEFAULT_CATEGORY",
    "Direction",
    "NaturalKey",
    "CanonicalTransaction",
    "SchemaMapping",
    "ImportSummary",
]
