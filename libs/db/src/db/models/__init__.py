"""Shared SQLAlchemy models registry for the statement database.

Currently includes the ``bank_transactions`` table written by
``statement_ingest``.
"""

from .finance import BankTransaction, Base

__all__ = [
    "Base",
    "BankTransaction",
]
