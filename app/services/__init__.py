"""
app/services package marker.
"""

from app.services.sheet_sync_service import (
    SheetSyncConfigurationError,
    SheetSyncDisabledError,
    SheetSyncService,
    get_sheet_sync_service,
)
from app.services.sync_config_service import SyncConfigService, get_sync_config_service
from app.services.sync_error_export_service import (
    SyncErrorExportService,
    get_sync_error_export_service,
)

__all__ = [
    "SheetSyncConfigurationError",
    "SheetSyncDisabledError",
    "SheetSyncService",
    "get_sheet_sync_service",
    "SyncConfigService",
    "get_sync_config_service",
    "SyncErrorExportService",
    "get_sync_error_export_service",
]
