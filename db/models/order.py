"""
db/models/order.py

Sales order. ``order_number`` is drawn from ``order_number_seq`` so that
concurrent writers never compute the same number.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, Sequence, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

ORDER_NUMBER_SEQUENCE = Sequence("order_number_seq", start=1, metadata=Base.metadata)


class ShipmentStatus:
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    PROBLEM = "problem"


class QualityFlag:
    OK = "ok"
    MINOR_ISSUE = "minor_issue"
    CRITICAL_ISSUE = "critical_issue"


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
    )
    broodstock_batch_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("broodstock_batches.id", ondelete="SET NULL"),
        nullable=True,
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    species: Mapped[str] = mapped_column(String(255), nullable=False)
    strain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    unit_price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    total_value: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    total_value_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    unit: Mapped[str] = mapped_column(String(50), nullable=False, default="piece")
    packaging_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    shipment_status: Mapped[str] = mapped_column(String(32), nullable=False, default=ShipmentStatus.PENDING)
    quality_flag: Mapped[str] = mapped_column(String(32), nullable=False, default=QualityFlag.OK)
    mortality_reported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_orders_customer_id", "customer_id"),
        Index("ix_orders_order_date", "order_date"),
        Index(
            "ix_orders_natural_key",
            "customer_id",
            "order_date",
            "species",
            "quantity",
            "unit_price",
        ),
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} order_number={self.order_number!r}>"
