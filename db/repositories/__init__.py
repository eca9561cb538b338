"""
Repository layer exports.
"""

from db.repositories.errors import (
    InvalidSyncJobTransitionError,
    SyncConfigKeyNotFoundError,
    SyncJobLockError,
    SyncJobNotFoundError,
    SyncRepositoryError,
)
from db.repositories.sync_audit_repository import SyncAuditRepository
from db.repositories.sync_config_repository import SyncConfigRepository
from db.repositories.sync_error_repository import SyncErrorRepository
from db.repositories.sync_job_repository import SyncJobRepository, ensure_transition
from db.repositories.types import RowErrorRecord, SyncErrorQuery, SyncJobQuery, SyncJobTotals

__all__ = [
    "SyncJobRepository",
    "SyncErrorRepository",
    "SyncAuditRepository",
    "SyncConfigRepository",
    "ensure_transition",
    "RowErrorRecord",
    "SyncJobQuery",
    "SyncErrorQuery",
    "SyncJobTotals",
    "SyncRepositoryError",
    "SyncJobNotFoundError",
    "SyncJobLockError",
    "InvalidSyncJobTransitionError",
    "SyncConfigKeyNotFoundError",
]
