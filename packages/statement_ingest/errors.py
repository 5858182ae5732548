"""Exception taxonomy for statement ingestion.

File-level
----------
- ``SchemaIncomplete``: the header lacks a mandatory role. Fatal for the file.
- ``NoStatementFiles``: a directory import found nothing to read.

Row-level (subclasses of ``RowRejected``)
-----------------------------------------
The row is skipped and the batch continues. Each carries the 1-based data
row number so the ingestor can report it.

Duplicates are not errors: they are reconciled by the store's upsert.
"""

from __future__ import annotations

from collections.abc import Iterable


class IngestError(Exception):
    """Base class for every error raised by this package."""


class SchemaIncomplete(IngestError):
    """Raised when date, amount or description cannot be located in a header."""

    def __init__(self, missing: Iterable[str], header: Iterable[str] = ()) -> None:
        self.missing: tuple[str, ...] = tuple(missing)
        self.header: tuple[str, ...] = tuple(header)
        super().__init__(
            "CSV format not recognized; missing columns for: "
            + ", ".join(self.missing)
            + f" (header: {list(self.header)})"
        )


class NoStatementFiles(IngestError):
    """Raised when a directory scan matches no statement files."""

    def __init__(self, directory: str, pattern: str) -> None:
        self.directory = directory
        self.pattern = pattern
        super().__init__(f"No files matching {pattern!r} found in {directory}")


class RowRejected(IngestError):
    """A single row could not be turned into a stored transaction."""

    reason = "rejected"

    def __init__(self, detail: str, *, row_number: int | None = None) -> None:
        self.row_number = row_number
        self.detail = detail
        prefix = f"Row {row_number}: " if row_number is not None else ""
        super().__init__(f"{prefix}{self.reason}: {detail}")

    def at_row(self, row_number: int) -> RowRejected:
        """Return a copy of this error attributed to ``row_number``."""

        return type(self)(self.detail, row_number=row_number)


class RowTooShort(RowRejected):
    reason = "insufficient columns"


class InvalidDate(RowRejected):
    reason = "invalid date format"


class InvalidAmount(RowRejected):
    reason = "invalid amount format"


class EmptyDescription(RowRejected):
    reason = "empty description"


class StoreWriteFailed(RowRejected):
    """The store refused or failed the upsert for this row."""

    reason = "store write failed"


__all__ = [
    "IngestError",
    "SchemaIncomplete",
    "NoStatementFiles",
    "RowRejected",
    "RowTooShort",
    "InvalidDate",
    "InvalidAmount",
    "EmptyDescription",
    "StoreWriteFailed",
]
