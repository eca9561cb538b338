"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.broodstock_batch import BroodstockBatch
from db.models.customer import Customer
from db.models.order import Order
from db.models.sync_audit_log import SyncAuditLog
from db.models.sync_config import SyncConfigEntry
from db.models.sync_error import SyncError
from db.models.sync_job import SyncJob

__all__ = [
    "BroodstockBatch",
    "Customer",
    "Order",
    "SyncAuditLog",
    "SyncConfigEntry",
    "SyncError",
    "SyncJob",
]
