"""
app/connectors/google_sheets_connector.py

Google Sheets v4 values connector authenticated with a service account.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any, Protocol
from urllib.parse import quote

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from app.config import SheetsHTTPSettings, get_sheets_http_settings
from app.connectors.base import BaseConnector, ConnectorRequestError

logger = logging.getLogger(__name__)

SHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"


class SheetTransportError(RuntimeError):
    """
    Raised when a spreadsheet range cannot be read. Aborts the whole run.
    """


class SheetTransport(Protocol):
    def read_range(self, sheet_id: str, cell_range: str) -> list[list[Any]]:
        ...


SheetTransportFactory = Callable[[str | None], SheetTransport]


class GoogleSheetsConnector(BaseConnector):
    """
    Reads raw cell grids from Google Sheets.

    Values come back unformatted and dates as serial numbers so the
    normalizer sees the sheet's native representation.
    """

    def __init__(
        self,
        *,
        session: AuthorizedSession,
        http_settings: SheetsHTTPSettings,
    ) -> None:
        super().__init__(source="google_sheets", http_settings=http_settings, session=session)
        self._base_url = http_settings.base_url.rstrip("/")

    def read_range(self, sheet_id: str, cell_range: str) -> list[list[Any]]:
        url = f"{self._base_url}/{quote(sheet_id, safe='')}/values/{quote(cell_range, safe='')}"
        try:
            payload = self._request_json(
                method="GET",
                url=url,
                params={
                    "valueRenderOption": "UNFORMATTED_VALUE",
                    "dateTimeRenderOption": "SERIAL_NUMBER",
                },
            )
        except ConnectorRequestError as exc:
            raise _translate_request_error(exc, sheet_id=sheet_id, cell_range=cell_range) from exc
        except GoogleAuthError as exc:
            raise SheetTransportError(f"Google Sheets authentication failed: {exc}") from exc

        rows = payload.get("values", []) if isinstance(payload, dict) else []
        if not rows:
            logger.info("No data found in sheet range sheet_id=%s range=%s", sheet_id, cell_range)
            return []
        logger.info("Read sheet range sheet_id=%s range=%s rows=%s", sheet_id, cell_range, len(rows))
        return rows


def _translate_request_error(
    exc: ConnectorRequestError,
    *,
    sheet_id: str,
    cell_range: str,
) -> SheetTransportError:
    detail = exc.detail or str(exc)
    if exc.status_code == 404:
        return SheetTransportError(f"Google Sheet not found or not accessible: {sheet_id}")
    if exc.status_code == 403:
        return SheetTransportError(
            "Access denied to Google Sheet. Ensure the service account has access."
        )
    if "Unable to parse range" in detail:
        return SheetTransportError(f"Invalid range format: {cell_range}")
    return SheetTransportError(f"Failed to read Google Sheet: {detail}")


def build_google_sheets_connector(credentials_path: str | None) -> GoogleSheetsConnector:
    """
    Build a connector for one sync run from a service account key file.
    """

    if not credentials_path:
        raise SheetTransportError("Google Sheets credentials path is not configured.")
    if not os.path.exists(credentials_path):
        raise SheetTransportError(f"Google Sheets credentials file not found at: {credentials_path}")

    try:
        credentials = service_account.Credentials.from_service_account_file(
            credentials_path,
            scopes=[SHEETS_READONLY_SCOPE],
        )
    except (ValueError, OSError) as exc:
        raise SheetTransportError(f"Google Sheets initialization failed: {exc}") from exc

    return GoogleSheetsConnector(
        session=AuthorizedSession(credentials),
        http_settings=get_sheets_http_settings(),
    )
