"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


DEFAULT_CUSTOMER_RANGE = "Customers!A:Z"
DEFAULT_ORDER_RANGE = "Orders!A:Z"
DEFAULT_BATCH_RANGE = "Batches!A:Z"


@dataclass(frozen=True)
class SheetSyncSettings:
    """
    Environment defaults for the spreadsheet sync. Database config rows
    override these at run time.
    """

    enabled: bool = False
    master_sheet_id: str | None = None
    credentials_path: str | None = None
    customer_range: str = DEFAULT_CUSTOMER_RANGE
    order_range: str = DEFAULT_ORDER_RANGE
    batch_range: str = DEFAULT_BATCH_RANGE


@dataclass(frozen=True)
class SyncRunSettings:
    """
    Runtime limits for one sync run.
    """

    run_timeout_seconds: float = 1800.0
    row_timeout_ms: int = 15000
    log_validation_errors: bool = True


@dataclass(frozen=True)
class SheetsHTTPSettings:
    """
    HTTP behavior settings for the Google Sheets connector.
    """

    base_url: str = "https://sheets.googleapis.com/v4/spreadsheets"
    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@lru_cache(maxsize=1)
def get_sheet_sync_settings() -> SheetSyncSettings:
    """
    Return cached sheet sync defaults from environment variables.
    """

    return SheetSyncSettings(
        enabled=_get_bool_env("GOOGLE_SHEETS_ENABLED", False),
        master_sheet_id=_get_optional_str_env("GOOGLE_SHEETS_MASTER_SHEET_ID"),
        credentials_path=_get_optional_str_env("GOOGLE_SHEETS_CREDENTIALS_PATH"),
        customer_range=_get_str_env("GOOGLE_SHEETS_CUSTOMER_RANGE", DEFAULT_CUSTOMER_RANGE),
        order_range=_get_str_env("GOOGLE_SHEETS_ORDER_RANGE", DEFAULT_ORDER_RANGE),
        batch_range=_get_str_env("GOOGLE_SHEETS_BATCH_RANGE", DEFAULT_BATCH_RANGE),
    )


@lru_cache(maxsize=1)
def get_sync_run_settings() -> SyncRunSettings:
    """
    Return cached run limits from environment variables.
    """

    return SyncRunSettings(
        run_timeout_seconds=max(1.0, _get_float_env("SHEET_SYNC_RUN_TIMEOUT_SECONDS", 1800.0)),
        row_timeout_ms=max(0, _get_int_env("SHEET_SYNC_ROW_TIMEOUT_MS", 15000)),
        log_validation_errors=_get_bool_env("SHEET_SYNC_LOG_VALIDATION_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_sheets_http_settings() -> SheetsHTTPSettings:
    """
    Return Google Sheets connector HTTP settings from environment variables.
    """

    return SheetsHTTPSettings(
        base_url=_get_str_env(
            "SHEETS_API_BASE_URL",
            "https://sheets.googleapis.com/v4/spreadsheets",
        ),
        timeout_seconds=max(1.0, _get_float_env("SHEETS_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("SHEETS_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("SHEETS_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("SHEETS_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("SHEETS_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )
