"""
tests/conftest.py

Shared fixtures wiring SheetSyncService to the in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from app.config import SheetSyncSettings, SyncRunSettings
from app.services.sheet_sync_service import SheetSyncService
from app.services.sync_config_service import SyncConfigService
from app.validators.entity_validator import EntityRowValidator
from db.models.sync_config import SyncConfigEntry
from tests.fakes import (
    SHEET_ID,
    TODAY,
    FakeSheetTransport,
    FakeSyncConfigRepository,
    FakeSyncStore,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> FakeSyncStore:
    return FakeSyncStore()


@pytest.fixture()
def validator() -> EntityRowValidator:
    return EntityRowValidator(today=lambda: TODAY)


@pytest.fixture()
def config_entries() -> dict[str, SyncConfigEntry]:
    return {}


@pytest.fixture()
def make_service(
    store: FakeSyncStore,
    validator: EntityRowValidator,
    config_entries: dict[str, SyncConfigEntry],
) -> Callable[..., SheetSyncService]:
    def _make(
        transport: FakeSheetTransport,
        *,
        enabled: bool = True,
        master_sheet_id: str | None = SHEET_ID,
        run_timeout_seconds: float = 1800.0,
        clock: Callable[[], float] | None = None,
    ) -> SheetSyncService:
        config_service = SyncConfigService(
            settings=SheetSyncSettings(enabled=enabled, master_sheet_id=master_sheet_id),
            repository_factory=lambda _db: FakeSyncConfigRepository(config_entries),  # type: ignore[arg-type,return-value]
        )
        return SheetSyncService(
            session_factory=store.session_factory,
            repositories_factory=store.repositories,  # type: ignore[arg-type]
            transport_factory=lambda _credentials_path: transport,
            validator=validator,
            config_service=config_service,
            run_settings=SyncRunSettings(
                run_timeout_seconds=run_timeout_seconds,
                row_timeout_ms=0,
                log_validation_errors=True,
            ),
            clock=clock or (lambda: 0.0),
        )

    return _make
