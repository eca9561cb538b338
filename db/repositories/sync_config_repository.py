"""
Repository for mutable sync configuration rows.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.sync_config import SyncConfigEntry
from db.repositories.errors import SyncConfigKeyNotFoundError


class SyncConfigRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_values(self, keys: Iterable[str]) -> dict[str, str]:
        key_list = list(keys)
        if not key_list:
            return {}
        stmt = select(SyncConfigEntry.config_key, SyncConfigEntry.config_value).where(
            SyncConfigEntry.config_key.in_(key_list)
        )
        return {key: value for key, value in self._session.execute(stmt).all()}

    def list_entries(self) -> list[SyncConfigEntry]:
        stmt: Select[tuple[SyncConfigEntry]] = select(SyncConfigEntry).order_by(
            SyncConfigEntry.config_key.asc()
        )
        return list(self._session.scalars(stmt).all())

    def get_entry(self, config_key: str) -> SyncConfigEntry | None:
        stmt = select(SyncConfigEntry).where(SyncConfigEntry.config_key == config_key)
        return self._session.scalars(stmt).first()

    def update_value(
        self,
        *,
        config_key: str,
        config_value: str,
        updated_by: str | None = None,
    ) -> SyncConfigEntry:
        entry = self.get_entry(config_key)
        if entry is None:
            raise SyncConfigKeyNotFoundError(f"Sync config key not found: {config_key}")
        entry.config_value = config_value
        entry.updated_by = updated_by
        self._session.flush()
        return entry
