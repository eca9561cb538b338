"""
Repository-layer exceptions for the sync job ledger.
"""

from __future__ import annotations


class SyncRepositoryError(Exception):
    """Base exception for sync ledger repository failures."""


class SyncJobNotFoundError(SyncRepositoryError, LookupError):
    """Raised when a sync job id does not exist."""


class SyncJobLockError(SyncRepositoryError, RuntimeError):
    """Raised when another running job already holds the sheet lock."""


class InvalidSyncJobTransitionError(SyncRepositoryError, ValueError):
    """Raised when a job status change would leave a terminal state."""


class SyncConfigKeyNotFoundError(SyncRepositoryError, LookupError):
    """Raised when a sync config key is not registered."""
