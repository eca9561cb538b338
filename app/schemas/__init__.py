"""
app/schemas package marker.
"""

from app.schemas.sheet_sync import (
    SheetSyncTriggerRequest,
    SyncErrorListResponse,
    SyncJobAcceptedResponse,
    SyncJobHistoryResponse,
    SyncJobResponse,
)

__all__ = [
    "SheetSyncTriggerRequest",
    "SyncErrorListResponse",
    "SyncJobAcceptedResponse",
    "SyncJobHistoryResponse",
    "SyncJobResponse",
]
