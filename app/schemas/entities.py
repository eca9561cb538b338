"""
Create-time validation rules for customers, orders and broodstock batches.

These are the same constraints the interactive create endpoints enforce,
so spreadsheet rows cannot hold values manual entry would reject.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from app.schemas.sheet_rows import (
    CustomerStatusValue,
    HealthStatusValue,
    QualityFlagValue,
    QuarantineStatusValue,
    ShipmentStatusValue,
)

CredentialTypeValue = Literal["license", "permit", "certificate", "registration"]

_URL_ADAPTER = TypeAdapter(AnyUrl)


class EntityCreateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CredentialCreate(EntityCreateModel):
    type: CredentialTypeValue
    number: str = Field(min_length=1, max_length=100)
    issued_date: date
    expiry_date: date
    file_url: str

    @field_validator("file_url")
    @classmethod
    def _must_be_url(cls, value: str) -> str:
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError as exc:
            raise ValueError("file_url must be a valid URL") from exc
        return value


class CustomerCreate(EntityCreateModel):
    name: str = Field(min_length=2, max_length=255)
    primary_contact_name: str = Field(min_length=2, max_length=255)
    primary_contact_phone: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    address_text: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    country: str | None = Field(default=None, max_length=100)
    province: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    status: CustomerStatusValue = "active"
    credentials: list[CredentialCreate] = Field(default_factory=list)


class OrderCreate(EntityCreateModel):
    customer_email: EmailStr
    broodstock_batch_code: str | None = Field(default=None, max_length=100)
    order_date: date
    species: str = Field(min_length=1, max_length=255)
    strain: str | None = Field(default=None, max_length=255)
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    unit_price_currency: str = Field(default="USD", min_length=3, max_length=3)
    total_value_currency: str = Field(default="USD", min_length=3, max_length=3)
    unit: str = Field(default="piece", max_length=50)
    packaging_type: str | None = Field(default=None, max_length=100)
    shipment_date: date | None = None
    shipment_status: ShipmentStatusValue = "pending"
    quality_flag: QualityFlagValue = "ok"
    mortality_reported: int = Field(default=0, ge=0)
    notes: str | None = None


class BatchCreate(EntityCreateModel):
    batch_code: str = Field(min_length=1, max_length=100)
    hatchery_origin: str = Field(min_length=1, max_length=255)
    grade: str | None = Field(default=None, max_length=100)
    arrival_date: date
    available_quantity: int = Field(ge=0)
    initial_quantity: int | None = Field(default=None, ge=0)
    species: str | None = Field(default=None, min_length=1, max_length=255)
    strain: str | None = Field(default=None, max_length=255)
    age_weeks: float | None = Field(default=None, ge=0)
    weight_grams: float | None = Field(default=None, ge=0)
    health_status: HealthStatusValue = "good"
    quarantine_status: QuarantineStatusValue = "pending"
    notes: str | None = None
