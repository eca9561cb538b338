"""
tests/test_google_sheets_connector.py

Pytest unit tests for the Google Sheets connector's request handling and
error translation. Responses come from an in-memory session; no network.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from app.config import SheetsHTTPSettings
from app.connectors.google_sheets_connector import (
    GoogleSheetsConnector,
    SheetTransportError,
    build_google_sheets_connector,
)


def _response(status_code: int, payload: Any) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode("utf-8")
    response.url = "https://sheets.test"
    return response


class ScriptedSession:
    def __init__(self, *responses: requests.Response) -> None:
        self._responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> requests.Response:
        self.requests.append(kwargs)
        return self._responses.pop(0)


def _connector(session: ScriptedSession, *, max_retries: int = 2) -> GoogleSheetsConnector:
    return GoogleSheetsConnector(
        session=session,  # type: ignore[arg-type]
        http_settings=SheetsHTTPSettings(
            base_url="https://sheets.test/v4/spreadsheets/",
            max_retries=max_retries,
            backoff_initial_seconds=0.0,
            rate_limit_per_second=0.0,
        ),
    )


class TestReadRange:
    def test_returns_unformatted_values(self) -> None:
        session = ScriptedSession(_response(200, {"values": [["Name", "Email"], ["Acme", "a@acme.com"]]}))

        rows = _connector(session).read_range("sheet-abc", "Customers!A:Z")

        assert rows == [["Name", "Email"], ["Acme", "a@acme.com"]]
        sent = session.requests[0]
        assert sent["url"] == "https://sheets.test/v4/spreadsheets/sheet-abc/values/Customers%21A%3AZ"
        assert sent["params"] == {
            "valueRenderOption": "UNFORMATTED_VALUE",
            "dateTimeRenderOption": "SERIAL_NUMBER",
        }

    def test_empty_range_is_empty_grid(self) -> None:
        session = ScriptedSession(_response(200, {"range": "Orders!A1:Z1000"}))

        assert _connector(session).read_range("sheet-abc", "Orders!A:Z") == []

    def test_retryable_status_is_retried(self) -> None:
        session = ScriptedSession(
            _response(503, {"error": {"message": "backend error"}}),
            _response(200, {"values": [["Batch Code"]]}),
        )

        assert _connector(session).read_range("sheet-abc", "Batches!A:Z") == [["Batch Code"]]
        assert len(session.requests) == 2

    def test_retries_exhausted(self) -> None:
        session = ScriptedSession(
            _response(429, {}),
            _response(429, {}),
        )

        with pytest.raises(SheetTransportError, match="Failed to read Google Sheet"):
            _connector(session, max_retries=1).read_range("sheet-abc", "Batches!A:Z")


class TestErrorTranslation:
    def test_missing_sheet(self) -> None:
        session = ScriptedSession(_response(404, {"error": {"message": "Requested entity was not found."}}))

        with pytest.raises(SheetTransportError, match="not found or not accessible: sheet-abc"):
            _connector(session).read_range("sheet-abc", "Customers!A:Z")
        assert len(session.requests) == 1

    def test_access_denied(self) -> None:
        session = ScriptedSession(_response(403, {"error": {"message": "The caller does not have permission"}}))

        with pytest.raises(SheetTransportError, match="Access denied"):
            _connector(session).read_range("sheet-abc", "Customers!A:Z")

    def test_bad_range(self) -> None:
        session = ScriptedSession(_response(400, {"error": {"message": "Unable to parse range: Nope!A:Z"}}))

        with pytest.raises(SheetTransportError, match="Invalid range format: Nope!A:Z"):
            _connector(session).read_range("sheet-abc", "Nope!A:Z")


class TestBuild:
    def test_requires_credentials_path(self) -> None:
        with pytest.raises(SheetTransportError, match="not configured"):
            build_google_sheets_connector(None)

    def test_missing_credentials_file(self, tmp_path: Any) -> None:
        missing = tmp_path / "sa.json"

        with pytest.raises(SheetTransportError, match="credentials file not found"):
            build_google_sheets_connector(str(missing))
