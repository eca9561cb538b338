"""
app/domain package marker.
"""

from app.domain.sheet_sync import (
    BatchDraft,
    CustomerDraft,
    EntitySyncResult,
    OrderDraft,
    ParsedRow,
    RowValidationError,
    SheetKey,
    SyncRunSummary,
)

__all__ = [
    "BatchDraft",
    "CustomerDraft",
    "EntitySyncResult",
    "OrderDraft",
    "ParsedRow",
    "RowValidationError",
    "SheetKey",
    "SyncRunSummary",
]
