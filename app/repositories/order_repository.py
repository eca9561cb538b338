"""
app/repositories/order_repository.py

Duplicate detection, order numbering and inserts against orders.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.sheet_sync import OrderDraft, compute_order_total
from db.models.order import ORDER_NUMBER_SEQUENCE, Order

ORDER_NUMBER_PREFIX = "ORD"


def format_order_number(year: int, sequence_value: int) -> str:
    """
    ``ORD-YYYY-NNNNNN`` from the order year and a sequence value.
    """

    return f"{ORDER_NUMBER_PREFIX}-{year}-{sequence_value:06d}"


class OrderRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_duplicate(
        self,
        *,
        customer_id: uuid.UUID,
        order_date: date,
        species: str,
        quantity: int,
        unit_price: Decimal,
    ) -> uuid.UUID | None:
        """
        Look up an existing order by its composite natural key.
        """

        stmt = (
            select(Order.id)
            .where(
                Order.customer_id == customer_id,
                Order.order_date == order_date,
                Order.species == species,
                Order.quantity == quantity,
                Order.unit_price == unit_price,
            )
            .limit(1)
        )
        return self._session.scalar(stmt)

    def next_order_number(self, order_date: date) -> str:
        sequence_value = self._session.scalar(ORDER_NUMBER_SEQUENCE.next_value())
        return format_order_number(order_date.year, int(sequence_value))

    def insert(
        self,
        draft: OrderDraft,
        *,
        customer_id: uuid.UUID,
        broodstock_batch_id: uuid.UUID | None,
    ) -> uuid.UUID:
        order = Order(
            order_number=self.next_order_number(draft.order_date),
            customer_id=customer_id,
            broodstock_batch_id=broodstock_batch_id,
            order_date=draft.order_date,
            species=draft.species,
            strain=draft.strain,
            quantity=draft.quantity,
            unit_price=draft.unit_price,
            unit_price_currency=draft.unit_price_currency,
            total_value=compute_order_total(draft.quantity, draft.unit_price),
            total_value_currency=draft.total_value_currency,
            unit=draft.unit,
            packaging_type=draft.packaging_type,
            shipment_date=draft.shipment_date,
            shipment_status=draft.shipment_status,
            quality_flag=draft.quality_flag,
            mortality_reported=draft.mortality_reported,
            notes=draft.notes,
        )
        self._session.add(order)
        self._session.flush()
        return order.id
