"""
Spreadsheet-shape schemas: what a row must look like before transforming.

Blank cells count as absent. Numbers typed into text columns (phone
numbers, batch codes) are coerced to text.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

CellNumber = str | int | float
CellDate = str | int | float

CustomerStatusValue = Literal["active", "paused", "blacklisted"]
ShipmentStatusValue = Literal["pending", "shipped", "delivered", "problem"]
QualityFlagValue = Literal["ok", "minor_issue", "critical_issue"]
HealthStatusValue = Literal["excellent", "good", "fair", "poor"]
QuarantineStatusValue = Literal["pending", "in_progress", "completed", "failed"]


class SheetRowModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_cells(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            key: value
            for key, value in data.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }


class CustomerSheetRow(SheetRowModel):
    name: str = Field(min_length=2, max_length=255)
    primary_contact_name: str = Field(min_length=2, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    country: str | None = Field(default=None, max_length=100)
    province: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    latitude: CellNumber | None = None
    longitude: CellNumber | None = None
    status: CustomerStatusValue | None = None

    credential_type_1: str | None = None
    credential_number_1: str | None = None
    credential_issued_1: CellDate | None = None
    credential_expiry_1: CellDate | None = None
    credential_file_url_1: str | None = None

    credential_type_2: str | None = None
    credential_number_2: str | None = None
    credential_issued_2: CellDate | None = None
    credential_expiry_2: CellDate | None = None
    credential_file_url_2: str | None = None

    credential_type_3: str | None = None
    credential_number_3: str | None = None
    credential_issued_3: CellDate | None = None
    credential_expiry_3: CellDate | None = None
    credential_file_url_3: str | None = None


class OrderSheetRow(SheetRowModel):
    customer_email: EmailStr
    order_date: CellDate
    species: str = Field(min_length=1, max_length=255)
    quantity: CellNumber
    unit_price: CellNumber
    broodstock_batch_code: str | None = Field(default=None, max_length=100)
    strain: str | None = Field(default=None, max_length=255)
    unit: str | None = Field(default=None, max_length=50)
    unit_price_currency: str | None = Field(default=None, min_length=3, max_length=3)
    total_value_currency: str | None = Field(default=None, min_length=3, max_length=3)
    packaging_type: str | None = Field(default=None, max_length=100)
    shipment_date: CellDate | None = None
    shipment_status: ShipmentStatusValue | None = None
    quality_flag: QualityFlagValue | None = None
    mortality_reported: CellNumber | None = None
    notes: str | None = None


class BatchSheetRow(SheetRowModel):
    batch_code: str = Field(min_length=1, max_length=100)
    hatchery_origin: str = Field(min_length=1, max_length=255)
    arrival_date: CellDate
    available_quantity: CellNumber
    grade: str | None = Field(default=None, max_length=100)
    initial_quantity: CellNumber | None = None
    species: str | None = Field(default=None, max_length=255)
    strain: str | None = Field(default=None, max_length=255)
    age_weeks: CellNumber | None = None
    weight_grams: CellNumber | None = None
    health_status: HealthStatusValue | None = None
    quarantine_status: QuarantineStatusValue | None = None
    notes: str | None = None
