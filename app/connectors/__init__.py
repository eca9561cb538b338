"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.google_sheets_connector import (
    GoogleSheetsConnector,
    SheetTransport,
    SheetTransportError,
    SheetTransportFactory,
    build_google_sheets_connector,
)

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "GoogleSheetsConnector",
    "SheetTransport",
    "SheetTransportError",
    "SheetTransportFactory",
    "build_google_sheets_connector",
]
