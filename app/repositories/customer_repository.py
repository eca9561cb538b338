"""
app/repositories/customer_repository.py

Natural-key lookups and inserts against the customers table.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.domain.sheet_sync import CustomerDraft
from db.models.customer import Customer


class CustomerRepository:
    """
    Insert-only access to customers used by the sheet sync.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_id_by_email(self, email: str) -> uuid.UUID | None:
        """
        Case-insensitive email lookup.
        """

        stmt = (
            select(Customer.id)
            .where(func.lower(Customer.email) == email.strip().lower())
            .limit(1)
        )
        return self._session.scalar(stmt)

    def insert(self, draft: CustomerDraft, *, created_by: str | None = None) -> uuid.UUID:
        credentials = [
            {
                "type": credential.type,
                "number": credential.number,
                "issued_date": credential.issued_date.isoformat(),
                "expiry_date": credential.expiry_date.isoformat(),
                "file_url": credential.file_url,
            }
            for credential in draft.credentials
        ]
        customer = Customer(
            name=draft.name,
            primary_contact_name=draft.primary_contact_name,
            primary_contact_phone=draft.primary_contact_phone,
            email=draft.email,
            address_text=draft.address_text,
            latitude=draft.latitude,
            longitude=draft.longitude,
            country=draft.country,
            province=draft.province,
            district=draft.district,
            status=draft.status,
            credentials=credentials or None,
            created_by=created_by,
        )
        self._session.add(customer)
        self._session.flush()
        return customer.id
