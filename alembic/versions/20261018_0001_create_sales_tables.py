"""create customers, broodstock_batches and orders tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("primary_contact_name", sa.String(length=255), nullable=False),
        sa.Column("primary_contact_phone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address_text", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("province", sa.String(length=100), nullable=True),
        sa.Column("district", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, comment="active, paused, blacklisted"),
        sa.Column("credentials", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customers_status", "customers", ["status"], unique=False)
    op.create_index("ix_customers_email_lower", "customers", [sa.text("lower(email)")], unique=False)

    op.create_table(
        "broodstock_batches",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_code", sa.String(length=100), nullable=False),
        sa.Column("hatchery_origin", sa.String(length=255), nullable=False),
        sa.Column("grade", sa.String(length=100), nullable=True),
        sa.Column("arrival_date", sa.Date(), nullable=False),
        sa.Column("available_quantity", sa.Integer(), nullable=False),
        sa.Column("initial_quantity", sa.Integer(), nullable=True),
        sa.Column("species", sa.String(length=255), nullable=True),
        sa.Column("strain", sa.String(length=255), nullable=True),
        sa.Column("age_weeks", sa.Float(), nullable=True),
        sa.Column("weight_grams", sa.Float(), nullable=True),
        sa.Column("health_status", sa.String(length=32), nullable=False, comment="excellent, good, fair, poor"),
        sa.Column(
            "quarantine_status",
            sa.String(length=32),
            nullable=False,
            comment="pending, in_progress, completed, failed",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("batch_code"),
    )
    op.create_index("ix_broodstock_batches_arrival_date", "broodstock_batches", ["arrival_date"], unique=False)
    op.create_index("ix_broodstock_batches_species", "broodstock_batches", ["species"], unique=False)

    op.execute(sa.schema.CreateSequence(sa.Sequence("order_number_seq", start=1)))

    op.create_table(
        "orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("order_number", sa.String(length=32), nullable=False),
        sa.Column("customer_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("broodstock_batch_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("species", sa.String(length=255), nullable=False),
        sa.Column("strain", sa.String(length=255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column("unit_price_currency", sa.String(length=3), nullable=False),
        sa.Column("total_value", sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column("total_value_currency", sa.String(length=3), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column("packaging_type", sa.String(length=100), nullable=True),
        sa.Column("shipment_date", sa.Date(), nullable=True),
        sa.Column("shipment_status", sa.String(length=32), nullable=False),
        sa.Column("quality_flag", sa.String(length=32), nullable=False),
        sa.Column("mortality_reported", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["broodstock_batch_id"], ["broodstock_batches.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_number"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"], unique=False)
    op.create_index("ix_orders_order_date", "orders", ["order_date"], unique=False)
    op.create_index(
        "ix_orders_natural_key",
        "orders",
        ["customer_id", "order_date", "species", "quantity", "unit_price"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_orders_natural_key", table_name="orders")
    op.drop_index("ix_orders_order_date", table_name="orders")
    op.drop_index("ix_orders_customer_id", table_name="orders")
    op.drop_table("orders")
    op.execute(sa.schema.DropSequence(sa.Sequence("order_number_seq")))

    op.drop_index("ix_broodstock_batches_species", table_name="broodstock_batches")
    op.drop_index("ix_broodstock_batches_arrival_date", table_name="broodstock_batches")
    op.drop_table("broodstock_batches")

    op.drop_index("ix_customers_email_lower", table_name="customers")
    op.drop_index("ix_customers_status", table_name="customers")
    op.drop_table("customers")
