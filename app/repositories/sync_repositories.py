"""
app/repositories/sync_repositories.py

Repository bundle handed to the sheet sync run for one session.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.repositories.batch_repository import BatchRepository
from app.repositories.customer_repository import CustomerRepository
from app.repositories.order_repository import OrderRepository
from db.repositories.sync_audit_repository import SyncAuditRepository
from db.repositories.sync_error_repository import SyncErrorRepository
from db.repositories.sync_job_repository import SyncJobRepository


@dataclass(frozen=True)
class SyncRepositories:
    jobs: SyncJobRepository
    errors: SyncErrorRepository
    audit: SyncAuditRepository
    customers: CustomerRepository
    batches: BatchRepository
    orders: OrderRepository


def build_sync_repositories(session: Session) -> SyncRepositories:
    return SyncRepositories(
        jobs=SyncJobRepository(session),
        errors=SyncErrorRepository(session),
        audit=SyncAuditRepository(session),
        customers=CustomerRepository(session),
        batches=BatchRepository(session),
        orders=OrderRepository(session),
    )
