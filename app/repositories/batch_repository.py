"""
app/repositories/batch_repository.py

Natural-key lookups and inserts against broodstock batches.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.sheet_sync import BatchDraft
from db.models.broodstock_batch import BroodstockBatch


class BatchRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_id_by_code(self, batch_code: str) -> uuid.UUID | None:
        stmt = select(BroodstockBatch.id).where(BroodstockBatch.batch_code == batch_code).limit(1)
        return self._session.scalar(stmt)

    def insert(self, draft: BatchDraft) -> uuid.UUID:
        initial_quantity = (
            draft.initial_quantity if draft.initial_quantity is not None else draft.available_quantity
        )
        batch = BroodstockBatch(
            batch_code=draft.batch_code,
            hatchery_origin=draft.hatchery_origin,
            grade=draft.grade,
            arrival_date=draft.arrival_date,
            available_quantity=draft.available_quantity,
            initial_quantity=initial_quantity,
            species=draft.species,
            strain=draft.strain,
            age_weeks=draft.age_weeks,
            weight_grams=draft.weight_grams,
            health_status=draft.health_status,
            quarantine_status=draft.quarantine_status,
            notes=draft.notes,
        )
        self._session.add(batch)
        self._session.flush()
        return batch.id
