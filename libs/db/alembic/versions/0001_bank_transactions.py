# ruff: noqa: I001
"""Bank transactions table with natural-key uniqueness.

Revision ID: 0001_bank_transactions
Revises: None
Create Date: 2026-09-14
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_bank_transactions"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "bank_transactions",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("occurred_on", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "category",
            sa.String(),
            nullable=False,
            server_default=sa.text("'Uncategorized'"),
        ),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("direction", sa.String(), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        # Bumped by every upsert that changes a stored row; 0 means never updated.
        sa.Column("revision", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint(
            "owner_id",
            "description",
            "occurred_on",
            "amount",
            name="uq_bank_tx_natural_key",
        ),
        sa.CheckConstraint("amount >= 0", name="ck_bank_tx_amount_non_negative"),
        sa.CheckConstraint(
            "direction in ('credit','debit')",
            name="ck_bank_tx_direction",
        ),
    )

    # Owner listings are always filtered by owner and sorted by date.
    op.create_index(
        "ix_bank_tx_owner_occurred_on",
        "bank_transactions",
        ["owner_id", "occurred_on"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_bank_tx_owner_occurred_on", table_name="bank_transactions")
    op.drop_table("bank_transactions")
