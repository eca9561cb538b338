"""
tests/test_sync_job_lifecycle.py

Pytest unit tests for job status rules and run tallies.

All tests are pure Python, no database.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from app.domain.sheet_sync import (
    EntitySyncResult,
    RowOutcome,
    RowOutcomeStatus,
    RowValidationError,
    SheetKey,
    compute_order_total,
)
from app.services.sheet_sync_service import (
    build_run_summary,
    ordered_sheet_keys,
    resolve_terminal_status,
)
from db.models.sync_error import SyncEntityType, SyncErrorType
from db.models.sync_job import SyncJobStatus
from db.repositories.errors import InvalidSyncJobTransitionError
from db.repositories.sync_job_repository import ensure_transition


def _error(row_number: int, entity_type: str = SyncEntityType.CUSTOMER, error_type: str = SyncErrorType.TYPE_ERROR) -> RowValidationError:
    return RowValidationError(
        row_number=row_number,
        sheet_name="Customers",
        entity_type=entity_type,
        error_type=error_type,
        message="bad",
    )


class TestTerminalStatus:
    @pytest.mark.parametrize(
        ("error_count", "inserted", "timed_out", "expected"),
        [
            (0, 0, False, SyncJobStatus.COMPLETED),
            (0, 5, False, SyncJobStatus.COMPLETED),
            (2, 5, False, SyncJobStatus.PARTIAL),
            (2, 0, False, SyncJobStatus.FAILED),
            (0, 3, True, SyncJobStatus.PARTIAL),
            (0, 0, True, SyncJobStatus.FAILED),
        ],
    )
    def test_table(self, error_count: int, inserted: int, timed_out: bool, expected: str) -> None:
        assert resolve_terminal_status(error_count=error_count, inserted=inserted, timed_out=timed_out) == expected


class TestTransitions:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (SyncJobStatus.PENDING, SyncJobStatus.RUNNING),
            (SyncJobStatus.PENDING, SyncJobStatus.FAILED),
            (SyncJobStatus.RUNNING, SyncJobStatus.COMPLETED),
            (SyncJobStatus.RUNNING, SyncJobStatus.PARTIAL),
            (SyncJobStatus.RUNNING, SyncJobStatus.FAILED),
        ],
    )
    def test_allowed(self, current: str, target: str) -> None:
        ensure_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (SyncJobStatus.PENDING, SyncJobStatus.COMPLETED),
            (SyncJobStatus.COMPLETED, SyncJobStatus.RUNNING),
            (SyncJobStatus.FAILED, SyncJobStatus.FAILED),
            (SyncJobStatus.PARTIAL, SyncJobStatus.COMPLETED),
        ],
    )
    def test_rejected(self, current: str, target: str) -> None:
        with pytest.raises(InvalidSyncJobTransitionError):
            ensure_transition(current, target)


class TestEntitySyncResult:
    def test_validation_errors_count_unique_rows(self) -> None:
        result = EntitySyncResult(sheet_key=SheetKey.CUSTOMERS, processed=3)
        result.add_validation_errors([_error(2), _error(2), _error(4)])

        assert result.failed == 2
        assert len(result.errors) == 3

    def test_outcomes_are_tallied(self) -> None:
        result = EntitySyncResult(sheet_key=SheetKey.BATCHES, processed=3)
        result.apply(RowOutcome(status=RowOutcomeStatus.INSERTED))
        result.apply(RowOutcome(status=RowOutcomeStatus.SKIPPED, error=_error(3, error_type=SyncErrorType.DUPLICATE)))
        result.apply(RowOutcome(status=RowOutcomeStatus.SKIPPED))

        assert (result.inserted, result.skipped, result.failed) == (1, 2, 0)
        assert len(result.errors) == 1


class TestRunSummary:
    def test_totals_and_error_summary(self) -> None:
        customers = EntitySyncResult(sheet_key=SheetKey.CUSTOMERS, processed=2, inserted=2)
        orders = EntitySyncResult(sheet_key=SheetKey.ORDERS, processed=3, inserted=1, failed=2)
        orders.errors.extend(
            [
                _error(2, SyncEntityType.ORDER, SyncErrorType.MISSING_REFERENCE),
                _error(3, SyncEntityType.ORDER, SyncErrorType.MISSING_REFERENCE),
            ]
        )

        summary = build_run_summary([customers, orders], timed_out=False, run_timeout_seconds=1800)

        assert summary.status == SyncJobStatus.PARTIAL
        assert (summary.processed, summary.inserted, summary.failed) == (5, 3, 2)
        assert (summary.customers_inserted, summary.orders_inserted, summary.batches_inserted) == (2, 1, 0)
        assert summary.error_summary == {"customer_errors": 0, "order_errors": 2, "batch_errors": 0}
        assert summary.error_message is None

    def test_timeout_sets_message(self) -> None:
        summary = build_run_summary(
            [EntitySyncResult(sheet_key=SheetKey.CUSTOMERS, processed=1, inserted=1, timed_out=True)],
            timed_out=True,
            run_timeout_seconds=30,
        )

        assert summary.status == SyncJobStatus.PARTIAL
        assert summary.error_message.startswith("Sync run exceeded the run timeout of 30s")


class TestSheetOrder:
    def test_default_is_dependency_order(self) -> None:
        assert ordered_sheet_keys(None) == ["customers", "batches", "orders"]

    def test_subset_keeps_dependency_order(self) -> None:
        assert ordered_sheet_keys(["orders", "batches"]) == ["batches", "orders"]


class TestOrderTotal:
    def test_exact_decimal_product(self) -> None:
        assert compute_order_total(3, 0.1) == Decimal("0.3")
        assert compute_order_total(500, 2.5) == Decimal("1250.0")
