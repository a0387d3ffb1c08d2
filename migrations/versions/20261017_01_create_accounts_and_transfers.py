"""create accounts and transfers tables

Revision ID: 5c2f9a71d0e4
Revises: 
Create Date: 2026-10-17 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c2f9a71d0e4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("owner_id", sa.String(length=64)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_accounts_owner_id", "accounts", ["owner_id"])

    op.create_table(
        "transfers",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("from_account_id", sa.String(length=64), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("to_account_id", sa.String(length=64), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2)),
        sa.Column("type", sa.String(length=30), server_default="payment"),
        sa.Column("status", sa.String(length=20), server_default="draft"),
        sa.Column("label", sa.String(length=100)),
        sa.Column("description", sa.Text()),
        sa.Column("created_by", sa.String(length=64)),
        sa.Column("tb_transfer_id", sa.String(length=100)),
        sa.Column("external_transaction_id", sa.String(length=100)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_transfers_from_account_id", "transfers", ["from_account_id"])
    op.create_index("ix_transfers_to_account_id", "transfers", ["to_account_id"])
    op.create_index("ix_transfers_created_at", "transfers", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_transfers_created_at", table_name="transfers")
    op.drop_index("ix_transfers_to_account_id", table_name="transfers")
    op.drop_index("ix_transfers_from_account_id", table_name="transfers")
    op.drop_table("transfers")
    op.drop_index("ix_accounts_owner_id", table_name="accounts")
    op.drop_table("accounts")
