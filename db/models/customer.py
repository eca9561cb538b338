"""
db/models/customer.py

Customer table as owned by the CRUD service. The sync pipeline only inserts.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Float, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class CustomerStatus:
    ACTIVE = "active"
    PAUSED = "paused"
    BLACKLISTED = "blacklisted"


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    primary_contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    primary_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=CustomerStatus.ACTIVE,
        comment="active, paused, blacklisted",
    )
    credentials: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        Index("ix_customers_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r} email={self.email!r}>"


Index("ix_customers_email_lower", func.lower(Customer.email))
