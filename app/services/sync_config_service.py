"""
Resolves the effective sheet sync configuration and manages its runtime overrides.

Environment variables supply defaults; non-empty rows in ``sync_config``
win over them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import SheetSyncSettings, get_sheet_sync_settings
from app.domain.sheet_sync import SheetKey
from db.models.sync_config import SyncConfigEntry
from db.repositories.sync_config_repository import SyncConfigRepository

logger = logging.getLogger(__name__)

SENSITIVE_MASK = "***"


class SyncConfigKey:
    ENABLED = "google_sheets_enabled"
    MASTER_SHEET_ID = "google_sheets_master_sheet_id"
    CREDENTIALS_PATH = "google_sheets_credentials_path"
    CUSTOMER_RANGE = "google_sheets_customer_range"
    ORDER_RANGE = "google_sheets_order_range"
    BATCH_RANGE = "google_sheets_batch_range"

    ALL: tuple[str, ...] = (
        ENABLED,
        MASTER_SHEET_ID,
        CREDENTIALS_PATH,
        CUSTOMER_RANGE,
        ORDER_RANGE,
        BATCH_RANGE,
    )


@dataclass(frozen=True)
class SheetSyncConfig:
    """
    Effective configuration for one trigger or run.
    """

    enabled: bool
    master_sheet_id: str | None
    credentials_path: str | None
    customer_range: str
    order_range: str
    batch_range: str

    def range_for(self, sheet_key: str) -> str:
        return {
            SheetKey.CUSTOMERS: self.customer_range,
            SheetKey.ORDERS: self.order_range,
            SheetKey.BATCHES: self.batch_range,
        }[sheet_key]


@dataclass(frozen=True)
class SyncConfigEntryView:
    """
    A config row as shown to operators, with sensitive values masked.
    """

    config_key: str
    config_value: str
    description: str | None
    is_sensitive: bool
    updated_by: str | None
    updated_at: datetime | None


class SyncConfigService:
    def __init__(
        self,
        *,
        settings: SheetSyncSettings | None = None,
        repository_factory: Callable[[Session], SyncConfigRepository] = SyncConfigRepository,
    ) -> None:
        self._settings = settings or get_sheet_sync_settings()
        self._repository_factory = repository_factory

    def resolve(self, db: Session) -> SheetSyncConfig:
        overrides = {
            key: value.strip()
            for key, value in self._repository_factory(db).get_values(SyncConfigKey.ALL).items()
            if value is not None and value.strip()
        }
        return merge_config(self._settings, overrides)

    def list_entries(self, db: Session) -> list[SyncConfigEntryView]:
        return [_to_view(entry) for entry in self._repository_factory(db).list_entries()]

    def update_value(
        self,
        *,
        db: Session,
        config_key: str,
        config_value: str,
        updated_by: str | None = None,
    ) -> SyncConfigEntryView:
        repository = self._repository_factory(db)
        with db.begin():
            entry = repository.update_value(
                config_key=config_key,
                config_value=config_value,
                updated_by=updated_by,
            )
        logger.info("Sync config updated key=%s updated_by=%s", config_key, updated_by)
        return _to_view(entry)


def merge_config(settings: SheetSyncSettings, overrides: dict[str, str]) -> SheetSyncConfig:
    """
    Apply non-empty database values over environment defaults.
    """

    enabled = settings.enabled
    if SyncConfigKey.ENABLED in overrides:
        enabled = overrides[SyncConfigKey.ENABLED].lower() in {"1", "true", "yes", "on"}

    return SheetSyncConfig(
        enabled=enabled,
        master_sheet_id=overrides.get(SyncConfigKey.MASTER_SHEET_ID, settings.master_sheet_id),
        credentials_path=overrides.get(SyncConfigKey.CREDENTIALS_PATH, settings.credentials_path),
        customer_range=overrides.get(SyncConfigKey.CUSTOMER_RANGE, settings.customer_range),
        order_range=overrides.get(SyncConfigKey.ORDER_RANGE, settings.order_range),
        batch_range=overrides.get(SyncConfigKey.BATCH_RANGE, settings.batch_range),
    )


def mask_value(value: str, *, is_sensitive: bool) -> str:
    if is_sensitive and value:
        return SENSITIVE_MASK
    return value


def _to_view(entry: SyncConfigEntry) -> SyncConfigEntryView:
    return SyncConfigEntryView(
        config_key=entry.config_key,
        config_value=mask_value(entry.config_value or "", is_sensitive=bool(entry.is_sensitive)),
        description=entry.description,
        is_sensitive=bool(entry.is_sensitive),
        updated_by=entry.updated_by,
        updated_at=entry.updated_at,
    )


@lru_cache(maxsize=1)
def get_sync_config_service() -> SyncConfigService:
    return SyncConfigService()
