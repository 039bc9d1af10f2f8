"""create metapay tables

Revision ID: 3b9e2a7c41d0
Revises:
Create Date: 2026-10-12 10:14:38.201457

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9e2a7c41d0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "sellers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("business_name", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=True),
        sa.Column("volume_estimate", sa.Float(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("api_key", sa.String(length=128), nullable=False),
        sa.Column("coupon_code", sa.String(length=64), nullable=False),
        sa.Column("custom_customer_fee", sa.Float(), nullable=True),
        sa.Column("custom_seller_fee", sa.Float(), nullable=True),
        sa.Column("usdc_sol_wallet", sa.String(length=64), nullable=True),
        sa.Column("usdc_bsc_wallet", sa.String(length=64), nullable=True),
        sa.Column("ltc_wallet", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("balance >= 0", name="ck_sellers_balance_non_negative"),
    )
    op.create_index("ix_sellers_email", "sellers", ["email"], unique=True)
    op.create_index("ix_sellers_api_key", "sellers", ["api_key"], unique=True)
    op.create_index("ix_sellers_coupon_code", "sellers", ["coupon_code"], unique=True)
    op.create_index("ix_sellers_status", "sellers", ["status"])

    op.create_table(
        "config",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_fee", sa.Float(), nullable=False),
        sa.Column("seller_fee", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), sa.ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("invoice_id", sa.String(length=128), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("customer_fee", sa.BigInteger(), nullable=False),
        sa.Column("net_to_seller", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_transactions_seller_id", "transactions", ["seller_id"])
    op.create_index("ix_transactions_invoice_id", "transactions", ["invoice_id"], unique=True)
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])

    op.create_table(
        "payouts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), sa.ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount_usd", sa.BigInteger(), nullable=False),
        sa.Column("seller_fee", sa.BigInteger(), nullable=False),
        sa.Column("net_usd", sa.BigInteger(), nullable=False),
        sa.Column("crypto", sa.String(length=16), nullable=False),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("admin_note", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_payouts_seller_id", "payouts", ["seller_id"])
    op.create_index("ix_payouts_status", "payouts", ["status"])
    op.create_index("ix_payouts_created_at", "payouts", ["created_at"])

    op.create_table(
        "webhookevent",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider", sa.String(length=64), nullable=False),
        sa.Column("event", sa.String(length=64), nullable=True),
        sa.Column("invoice_id", sa.String(length=128), nullable=True),
        sa.Column("coupon_code", sa.String(length=64), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_webhookevent_invoice_id", "webhookevent", ["invoice_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_webhookevent_invoice_id", table_name="webhookevent")
    op.drop_table("webhookevent")
    op.drop_index("ix_payouts_created_at", table_name="payouts")
    op.drop_index("ix_payouts_status", table_name="payouts")
    op.drop_index("ix_payouts_seller_id", table_name="payouts")
    op.drop_table("payouts")
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_status", table_name="transactions")
    op.drop_index("ix_transactions_invoice_id", table_name="transactions")
    op.drop_index("ix_transactions_seller_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("config")
    op.drop_index("ix_sellers_status", table_name="sellers")
    op.drop_index("ix_sellers_coupon_code", table_name="sellers")
    op.drop_index("ix_sellers_api_key", table_name="sellers")
    op.drop_index("ix_sellers_email", table_name="sellers")
    op.drop_table("sellers")
