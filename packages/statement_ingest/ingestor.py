"""Batch ingestor: files or directories → store upserts → :class:`ImportSummary`.

Contract
--------
- The header row is detected once per file. ``SchemaIncomplete`` aborts that
  file only: :meth:`BatchIngestor.import_file` raises it, while
  :meth:`BatchIngestor.import_directory` logs it and moves to the next file.
- Rows are processed strictly in file order. Row errors never abort a file;
  they are recorded in a bounded error log (first N messages kept, the rest
  counted).
- Every normalized row is upserted by natural key as soon as it is read.
  Inserted and updated rows count as processed; rows whose stored copy was
  already identical do not.
- Nothing is transactional across rows. Whatever was upserted before a
  failure stays persisted.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from .config import ImportSettings
from .errors import (
    NoStatementFiles,
    RowRejected,
    SchemaIncomplete,
    StoreWriteFailed,
)
from .logging_setup import get_logger
from .models import ImportSummary
from .normalizer import normalize_row
from .schema import MANDATORY_ROLES, detect_schema
from .store import TransactionStore, UpsertOutcome

_log = get_logger("statement_ingest.ingestor")

# Tried in order before the latin-1 fallback, which accepts any byte sequence.
ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp1252")

# Ties go to the earlier candidate.
DELIMITERS: tuple[str, ...] = (",", ";", "\t", "|")


# ---------------------------------------------------------------------------
# Small helpers
# ---------------------------------------------------------------------------


class BoundedErrorLog:
    """Keeps the first ``capacity`` messages and counts the ones dropped."""

    __slots__ = ("capacity", "_messages", "_omitted")

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self.capacity = capacity
        self._messages: list[str] = []
        self._omitted = 0

    def add(self, message: str) -> None:
        if len(self._messages) < self.capacity:
            self._messages.append(message)
        else:
            self._omitted += 1

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(self._messages)

    @property
    def omitted(self) -> int:
        return self._omitted

    def __len__(self) -> int:
        return len(self._messages) + self._omitted


def decode_statement(data: bytes) -> str:
    for encoding in ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("latin-1")


def detect_delimiter(text: str) -> str:
    """Pick the delimiter that occurs most often on the first non-blank line."""

    header_line = next((line for line in text.splitlines() if line.strip()), "")
    best, best_count = DELIMITERS[0], 0
    for candidate in DELIMITERS:
        n = header_line.count(candidate)
        if n > best_count:
            best, best_count = candidate, n
    return best


@dataclass(slots=True)
class _Tally:
    total_rows: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    rejected: int = 0
    files_processed: int = 0
    skipped_files: list[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.inserted + self.updated

    def record(self, outcome: UpsertOutcome) -> None:
        if outcome is UpsertOutcome.INSERTED:
            self.inserted += 1
        elif outcome is UpsertOutcome.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1

    def summary(self, errors: BoundedErrorLog, *, directory_mode: bool) -> ImportSummary:
        return ImportSummary(
            processed_count=self.processed,
            total_row_count=self.total_rows,
            errors=errors.messages,
            files_processed=self.files_processed if directory_mode else None,
            inserted_count=self.inserted,
            updated_count=self.updated,
            unchanged_count=self.unchanged,
            rejected_count=self.rejected,
            errors_omitted=errors.omitted,
            skipped_files=tuple(self.skipped_files),
        )


# ---------------------------------------------------------------------------
# Ingestor
# ---------------------------------------------------------------------------


class BatchIngestor:
    """Drives statement files through detection, normalization and upsert.

    The store handle is injected; its lifecycle belongs to the caller.
    """

    def __init__(self, store: TransactionStore, settings: ImportSettings | None = None) -> None:
        self._store = store
        self._settings = settings or ImportSettings()

    @property
    def settings(self) -> ImportSettings:
        return self._settings

    def import_file(
        self,
        owner_id: str,
        data: bytes,
        source: str,
        *,
        filename: str | None = None,
    ) -> ImportSummary:
        """Import one uploaded file.

        Raises :class:`SchemaIncomplete` when the header lacks a mandatory
        role; no row is touched in that case.
        """

        _require_owner(owner_id)
        tally = _Tally()
        errors = BoundedErrorLog(self._settings.error_limit)
        label = filename or "<upload>"
        _log.info("importing %s for owner %s (source=%s, %d bytes)", label, owner_id, source, len(data))

        self._ingest_text(
            decode_statement(data),
            owner_id=owner_id,
            source=source,
            tally=tally,
            errors=errors,
            prefix="",
        )
        summary = tally.summary(errors, directory_mode=False)
        _log.info("%s: %s", label, summary.message)
        return summary

    def import_directory(
        self,
        owner_id: str,
        directory: str | PathLike[str],
        source: str,
    ) -> ImportSummary:
        """Import every file in ``directory`` matching the configured glob.

        Files are read in sorted path order. A file that cannot be read or
        whose header is incomplete is skipped without failing the batch.
        """

        _require_owner(owner_id)
        root = Path(directory)
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        pattern = self._settings.glob_pattern
        paths = sorted(p for p in root.glob(pattern) if p.is_file())
        if not paths:
            raise NoStatementFiles(str(root), pattern)

        tally = _Tally()
        errors = BoundedErrorLog(self._settings.error_limit)
        _log.info("scanning %s: %d file(s) matching %r", root, len(paths), pattern)

        for path in paths:
            try:
                data = path.read_bytes()
            except OSError as exc:
                _log.warning("skipping %s: cannot read file: %s", path.name, exc)
                tally.skipped_files.append(path.name)
                continue

            try:
                normalized = self._ingest_text(
                    decode_statement(data),
                    owner_id=owner_id,
                    source=source,
                    tally=tally,
                    errors=errors,
                    prefix=f"{path.name}: ",
                )
            except SchemaIncomplete as exc:
                _log.warning("skipping %s: %s", path.name, exc)
                tally.skipped_files.append(path.name)
                continue
            # Files that yield no transaction are not counted as processed.
            if normalized:
                tally.files_processed += 1

        summary = tally.summary(errors, directory_mode=True)
        _log.info("%s: %s", root, summary.message)
        return summary

    # ------------------------------------------------------------------

    def _ingest_text(
        self,
        text: str,
        *,
        owner_id: str,
        source: str,
        tally: _Tally,
        errors: BoundedErrorLog,
        prefix: str,
    ) -> int:
        """Read one decoded file into ``tally``; return how many rows normalized."""

        settings = self._settings
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=detect_delimiter(text))

        try:
            header = next((row for row in reader if any(cell.strip() for cell in row)), None)
        except csv.Error as exc:
            raise SchemaIncomplete(MANDATORY_ROLES) from exc
        if header is None:
            raise SchemaIncomplete(MANDATORY_ROLES)
        mapping = detect_schema(header)

        row_number = 0
        normalized = 0
        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as exc:
                # The reader cannot resync after a malformed record.
                tally.total_rows += 1
                tally.rejected += 1
                errors.add(f"{prefix}Row {row_number + 1}: unreadable CSV record: {exc}")
                _log.warning("%sstopped at row %d: %s", prefix, row_number + 1, exc)
                break

            if not any(cell.strip() for cell in row):
                continue
            row_number += 1
            tally.total_rows += 1

            try:
                tx = normalize_row(
                    row,
                    mapping,
                    owner_id=owner_id,
                    source=source,
                    row_number=row_number,
                    amount_format=settings.amount_format,
                    reject_empty_description=settings.reject_empty_description,
                )
            except RowRejected as exc:
                tally.rejected += 1
                errors.add(f"{prefix}{exc}")
                _log.debug("%s%s", prefix, exc)
                continue
            normalized += 1

            try:
                outcome = self._store.upsert_by_natural_key(tx)
            except StoreWriteFailed as exc:
                tally.rejected += 1
                errors.add(f"{prefix}{exc.at_row(row_number)}")
                continue

            tally.record(outcome)
            _log.debug("%srow %d %s", prefix, row_number, outcome.value)

        return normalized


def _require_owner(owner_id: str) -> None:
    if not owner_id or not owner_id.strip():
        raise ValueError("owner_id is required")


__all__ = [
    "BoundedErrorLog",
    "BatchIngestor",
    "decode_statement",
    "detect_delimiter",
]
