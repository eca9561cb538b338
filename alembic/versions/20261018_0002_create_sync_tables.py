"""create sync_jobs, sync_errors, sync_audit_log and sync_config tables

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 09:30:00
"""

from __future__ import annotations

import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None

_SEED_CONFIG: tuple[tuple[str, str, str, bool], ...] = (
    ("google_sheets_enabled", "false", "Enable the Google Sheets import", False),
    ("google_sheets_master_sheet_id", "", "Default spreadsheet id when the trigger omits one", False),
    ("google_sheets_credentials_path", "", "Service account key file path", True),
    ("google_sheets_customer_range", "Customers!A:Z", "A1 range of the customer sheet", False),
    ("google_sheets_order_range", "Orders!A:Z", "A1 range of the order sheet", False),
    ("google_sheets_batch_range", "Batches!A:Z", "A1 range of the broodstock batch sheet", False),
)


def upgrade() -> None:
    op.create_table(
        "sync_jobs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False, comment="google_sheets, csv_upload, manual_entry"),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("records_processed", sa.Integer(), nullable=False),
        sa.Column("records_inserted", sa.Integer(), nullable=False),
        sa.Column("records_skipped", sa.Integer(), nullable=False),
        sa.Column("records_failed", sa.Integer(), nullable=False),
        sa.Column("customers_inserted", sa.Integer(), nullable=False),
        sa.Column("orders_inserted", sa.Integer(), nullable=False),
        sa.Column("batches_inserted", sa.Integer(), nullable=False),
        sa.Column(
            "error_summary",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="Error counts keyed customer_errors, order_errors, batch_errors",
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("triggered_by", sa.String(length=64), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="sheet_id, sheets_to_sync, sheet_ranges, mode",
        ),
        sa.Column("lock_key", sa.String(length=255), nullable=True, comment="Sheet id held while the job is running"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sync_jobs_status", "sync_jobs", ["status"], unique=False)
    op.create_index("ix_sync_jobs_source", "sync_jobs", ["source"], unique=False)
    op.create_index("ix_sync_jobs_triggered_by", "sync_jobs", ["triggered_by"], unique=False)
    op.create_index("ix_sync_jobs_started_at", "sync_jobs", ["started_at"], unique=False)
    op.create_index(
        "uq_sync_jobs_running_lock_key",
        "sync_jobs",
        ["lock_key"],
        unique=True,
        postgresql_where=sa.text("status = 'running'"),
    )

    op.create_table(
        "sync_errors",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sync_job_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("sheet_name", sa.String(length=100), nullable=True),
        sa.Column("entity_type", sa.String(length=32), nullable=False, comment="customer, order, broodstock_batch"),
        sa.Column("error_type", sa.String(length=32), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=False),
        sa.Column("field_name", sa.String(length=100), nullable=True),
        sa.Column("invalid_value", sa.Text(), nullable=True),
        sa.Column(
            "data_snapshot",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Raw spreadsheet row as parsed",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["sync_job_id"], ["sync_jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sync_errors_sync_job_id", "sync_errors", ["sync_job_id"], unique=False)
    op.create_index("ix_sync_errors_job_entity_type", "sync_errors", ["sync_job_id", "entity_type"], unique=False)
    op.create_index("ix_sync_errors_job_error_type", "sync_errors", ["sync_job_id", "error_type"], unique=False)

    op.create_table(
        "sync_audit_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sync_job_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("data_snapshot", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["sync_job_id"], ["sync_jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sync_audit_log_sync_job_id", "sync_audit_log", ["sync_job_id"], unique=False)
    op.create_index("ix_sync_audit_log_entity", "sync_audit_log", ["entity_type", "entity_id"], unique=False)

    sync_config = op.create_table(
        "sync_config",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("config_key", sa.String(length=100), nullable=False),
        sa.Column("config_value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_sensitive", sa.Boolean(), nullable=False, comment="Masked on read"),
        sa.Column("updated_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("config_key"),
    )

    op.bulk_insert(
        sync_config,
        [
            {
                "id": uuid.uuid4(),
                "config_key": key,
                "config_value": value,
                "description": description,
                "is_sensitive": is_sensitive,
            }
            for key, value, description, is_sensitive in _SEED_CONFIG
        ],
    )


def downgrade() -> None:
    op.drop_table("sync_config")

    op.drop_index("ix_sync_audit_log_entity", table_name="sync_audit_log")
    op.drop_index("ix_sync_audit_log_sync_job_id", table_name="sync_audit_log")
    op.drop_table("sync_audit_log")

    op.drop_index("ix_sync_errors_job_error_type", table_name="sync_errors")
    op.drop_index("ix_sync_errors_job_entity_type", table_name="sync_errors")
    op.drop_index("ix_sync_errors_sync_job_id", table_name="sync_errors")
    op.drop_table("sync_errors")

    op.drop_index("uq_sync_jobs_running_lock_key", table_name="sync_jobs")
    op.drop_index("ix_sync_jobs_started_at", table_name="sync_jobs")
    op.drop_index("ix_sync_jobs_triggered_by", table_name="sync_jobs")
    op.drop_index("ix_sync_jobs_source", table_name="sync_jobs")
    op.drop_index("ix_sync_jobs_status", table_name="sync_jobs")
    op.drop_table("sync_jobs")
