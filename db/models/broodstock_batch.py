"""
db/models/broodstock_batch.py

Broodstock inventory batch, keyed by its human batch code.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class BroodstockBatch(Base, TimestampMixin):
    __tablename__ = "broodstock_batches"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    batch_code: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    hatchery_origin: Mapped[str] = mapped_column(String(255), nullable=False)
    grade: Mapped[str | None] = mapped_column(String(100), nullable=True)
    arrival_date: Mapped[date] = mapped_column(Date, nullable=False)
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    initial_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    species: Mapped[str | None] = mapped_column(String(255), nullable=True)
    strain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    age_weeks: Mapped[float | None] = mapped_column(Float, nullable=True)
    weight_grams: Mapped[float | None] = mapped_column(Float, nullable=True)
    health_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="good",
        comment="excellent, good, fair, poor",
    )
    quarantine_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="pending",
        comment="pending, in_progress, completed, failed",
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_broodstock_batches_arrival_date", "arrival_date"),
        Index("ix_broodstock_batches_species", "species"),
    )

    def __repr__(self) -> str:
        return f"<BroodstockBatch id={self.id} batch_code={self.batch_code!r}>"
