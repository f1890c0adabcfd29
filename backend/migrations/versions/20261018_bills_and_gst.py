"""Bills, bill items and product GST fields

Revision ID: 20261018_bills
Revises: 20261018_initial
Create Date: 2026-10-18 15:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_bills"
down_revision = "20261018_initial"
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("products") as batch_op:
        batch_op.add_column(
            sa.Column("gst_rate_bps", sa.Integer(), server_default="1800", nullable=False)
        )
        batch_op.add_column(
            sa.Column("is_gst_exempt", sa.Boolean(), server_default=sa.false(), nullable=False)
        )

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("payment_method", sa.String(length=16), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("total_cents >= 0", name="ck_bills_total_non_negative"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_bills_customer_phone", "bills", ["customer_phone"], unique=False)
    op.create_index("ix_bills_created_at", "bills", ["created_at"], unique=False)

    op.create_table(
        "bill_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("bill_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("subtotal_cents", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_bill_items_quantity_positive"),
        sa.ForeignKeyConstraint(["bill_id"], ["bills.id"]),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_bill_items_bill_id", "bill_items", ["bill_id"], unique=False)
    op.create_index("ix_bill_items_product_id", "bill_items", ["product_id"], unique=False)


def downgrade():
    op.drop_table("bill_items")
    op.drop_table("bills")
    with op.batch_alter_table("products") as batch_op:
        batch_op.drop_column("is_gst_exempt")
        batch_op.drop_column("gst_rate_bps")
