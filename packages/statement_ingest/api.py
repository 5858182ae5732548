"""Public API for the ``statement_ingest`` package.

Thin functional wrappers around :class:`~statement_ingest.ingestor.BatchIngestor`
for callers that hold a store and want a single call per import. The store is
always passed in explicitly; nothing here opens a database connection.
"""

from __future__ import annotations

from os import PathLike

from .config import ImportSettings
from .ingestor import BatchIngestor
from .models import ImportSummary
from .store import TransactionStore


def import_file(
    store: TransactionStore,
    owner_id: str,
    file_bytes: bytes,
    source: str,
    *,
    settings: ImportSettings | None = None,
    filename: str | None = None,
) -> ImportSummary:
    """Import one statement file given as raw bytes.

    Raises :class:`~statement_ingest.errors.SchemaIncomplete` when the header
    cannot be mapped. Row-level problems are reported in the summary.
    """

    ingestor = BatchIngestor(store, settings)
    return ingestor.import_file(owner_id, file_bytes, source, filename=filename)


def import_directory(
    store: TransactionStore,
    owner_id: str,
    directory: str | PathLike[str],
    source: str,
    *,
    settings: ImportSettings | None = None,
) -> ImportSummary:
    """Import every matching statement file under ``directory``.

    Raises :class:`NotADirectoryError` for a bad path and
    :class:`~statement_ingest.errors.NoStatementFiles` when nothing matches.
    """

    ingestor = BatchIngestor(store, settings)
    return ingestor.import_directory(owner_id, directory, source)


__all__ = ["import_file", "import_directory"]
