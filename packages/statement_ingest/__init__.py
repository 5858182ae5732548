"""Bank-statement CSV ingestion.

Detects the column layout of a statement export, normalizes each row into a
canonical transaction, and upserts it into a store keyed by
``(owner_id, description, occurred_on, amount)``.
"""

from .api import import_directory, import_file
from .config import ImportSettings
from .errors import (
    EmptyDescription,
    IngestError,
    InvalidAmount,
    InvalidDate,
    NoStatementFiles,
    RowRejected,
    RowTooShort,
    SchemaIncomplete,
    StoreWriteFailed,
)
from .ingestor import BatchIngestor
from .models import CanonicalTransaction, Direction, ImportSummary, SchemaMapping
from .parsers import AmountFormat, parse_amount, parse_date
from .schema import detect_schema
from .store import TransactionFilters, TransactionStore, UpsertOutcome

__all__ = [
    "import_file",
    "import_directory",
    "ImportSettings",
    "BatchIngestor",
    "CanonicalTransaction",
    "Direction",
    "ImportSummary",
    "SchemaMapping",
    "AmountFormat",
    "parse_amount",
    "parse_date",
    "detect_schema",
    "TransactionFilters",
    "TransactionStore",
    "UpsertOutcome",
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
