"""Initial schema for orders, customers and expenses."""

from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from alembic import op

revision = "20250101_0001"
down_revision = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    order_status_enum = sa.Enum(
        "pending",
        "paid",
        "in_production",
        "shipped",
        "completed",
        "cancelled",
        "refunded",
        name="order_status_enum",
    )

    op.create_table(
        "customers",
        sa.Column("customer_id", sa.String(length=36), primary_key=True),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("customers_phone_idx", "customers", ["phone"])

    op.create_table(
        "orders",
        sa.Column("order_id", sa.String(length=36), primary_key=True),
        sa.Column("order_number", sa.String(length=50), nullable=True, unique=True),
        sa.Column(
            "customer_id",
            sa.String(length=36),
            sa.ForeignKey("customers.customer_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", order_status_enum, nullable=False, server_default="pending"),
        sa.Column("source", sa.String(length=30), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="QAR"),
        sa.Column("total_amount_minor", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_shipping_minor", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("total_tax_minor", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("total_amount_minor >= 0", name="ck_orders_amount_non_negative"),
        sa.CheckConstraint("total_shipping_minor >= 0", name="ck_orders_shipping_non_negative"),
    )
    op.create_index("orders_status_created_idx", "orders", ["status", "created_at"])
    op.create_index("orders_customer_idx", "orders", ["customer_id"])

    op.create_table(
        "order_items",
        sa.Column("order_item_id", sa.String(length=36), primary_key=True),
        sa.Column(
            "order_id",
            sa.String(length=36),
            sa.ForeignKey("orders.order_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_name", sa.String(length=255), nullable=True),
        sa.Column("variant_title", sa.String(length=255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price_minor", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("unit_cost_minor", sa.BigInteger(), nullable=True),
        sa.Column("size", sa.String(length=50), nullable=True),
        sa.Column("color", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("quantity >= 0", name="ck_order_items_quantity_non_negative"),
    )
    op.create_index("order_items_order_idx", "order_items", ["order_id"])

    op.create_table(
        "expenses",
        sa.Column("expense_id", sa.String(length=36), primary_key=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount_minor", sa.BigInteger(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="QAR"),
        sa.Column("incurred_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_by", sa.String(length=100), nullable=True),
        sa.CheckConstraint("amount_minor > 0", name="ck_expenses_amount_positive"),
    )
    op.create_index("expenses_incurred_at_idx", "expenses", ["incurred_at"])
    op.create_index("expenses_category_idx", "expenses", ["category"])


def downgrade() -> None:
    op.drop_index("expenses_category_idx", table_name="expenses")
    op.drop_index("expenses_incurred_at_idx", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("order_items_order_idx", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("orders_customer_idx", table_name="orders")
    op.drop_index("orders_status_created_idx", table_name="orders")
    op.drop_table("orders")
    op.drop_index("customers_phone_idx", table_name="customers")
    op.drop_table("customers")
    sa.Enum(name="order_status_enum").drop(op.get_bind(), checkfirst=True)
