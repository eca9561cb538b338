"""
app/api/routers package marker.
"""

from app.api.routers.sheet_sync import router as sheet_sync_router

__all__ = ["sheet_sync_router"]
