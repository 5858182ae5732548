"""db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.finance`` (re-exported for convenience)
- The ``Database`` handle and URL helper in ``db.client``
"""

from __future__ import annotations

from .client import Database, database_url
from .models.finance import BankTransaction, Base

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "BankTransaction",
    "Database",
    "database_url",
]
