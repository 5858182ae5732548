from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: bank_transactions
# ---------------------------


class BankTransaction(Base):
    __tablename__ = "bank_transactions"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    # Opaque account-holder id supplied by the caller; never read from file content.
    owner_id: Mapped[str] = mapped_column(String, nullable=False)
    occurred_on: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'Uncategorized'")
    )
    # Magnitude only; the sign lives in ``direction``.
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    direction: Mapped[str] = mapped_column(String, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    # 0 when the row was inserted; bumped by every upsert that changed a field.
    # The upsert statement returns it so callers can tell the outcomes apart.
    revision: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        # Natural key: the conflict target for upserts.
        UniqueConstraint(
            "owner_id",
            "description",
            "occurred_on",
            "amount",
            name="uq_bank_tx_natural_key",
        ),
        Index("ix_bank_tx_owner_occurred_on", "owner_id", "occurred_on"),
        CheckConstraint("amount >= 0", name="ck_bank_tx_amount_non_negative"),
        CheckConstraint(
            "direction in ('credit','debit')",
            name="ck_bank_tx_direction",
        ),
    )


__all__ = [
    "Base",
    "BankTransaction",
]
