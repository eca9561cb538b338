"""
app/sheets/normalizer.py

Pure conversions from raw spreadsheet cell values to typed values.

Cells arrive unformatted: numbers as numbers, dates as day serials counted
from the spreadsheet epoch, and everything else as text.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

SPREADSHEET_EPOCH = date(1899, 12, 30)

_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)


class NormalizationError(ValueError):
    """
    A cell value could not be converted. Carries the field and raw value.
    """

    def __init__(self, message: str, *, field_name: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.value = value


class InvalidDateError(NormalizationError):
    pass


class MissingRequiredFieldError(NormalizationError):
    pass


class InvalidNumberError(NormalizationError):
    pass


class NotAnIntegerError(NormalizationError):
    pass


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def serial_to_date(serial: float) -> date:
    """
    Convert a spreadsheet day serial to a date. The time-of-day fraction is dropped.
    """

    return SPREADSHEET_EPOCH + timedelta(days=math.floor(serial))


def normalize_date(value: Any, field_name: str | None = None) -> str:
    """
    Normalize a date cell to ISO ``YYYY-MM-DD``.

    ISO strings pass through unchanged (after trimming) once they are
    confirmed to be real calendar dates. Numbers are day serials. Other
    common textual layouts are reformatted.
    """

    if is_blank(value):
        raise _date_error("Date is required", field_name=field_name, value=value)
    if isinstance(value, bool):
        raise _date_error(f"Invalid date: {value}", field_name=field_name, value=value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return _serial_to_iso(value, field_name=field_name, raw=value)

    text = str(value).strip()
    if _ISO_DATE_PATTERN.match(text):
        try:
            date.fromisoformat(text)
        except ValueError as exc:
            raise _date_error(f"Invalid date: {text}", field_name=field_name, value=value) from exc
        return text
    if _NUMERIC_PATTERN.match(text):
        return _serial_to_iso(float(text), field_name=field_name, raw=value)

    iso_candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso_candidate).date().isoformat()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    raise _date_error(f"Invalid date format: {text}", field_name=field_name, value=value)


def _serial_to_iso(serial: float, *, field_name: str | None, raw: Any) -> str:
    if not math.isfinite(serial) or serial <= 0:
        raise _date_error(f"Invalid date serial: {raw}", field_name=field_name, value=raw)
    try:
        return serial_to_date(serial).isoformat()
    except OverflowError as exc:
        raise _date_error(f"Invalid date serial: {raw}", field_name=field_name, value=raw) from exc


def normalize_number(value: Any, field_name: str) -> float:
    if is_blank(value):
        raise MissingRequiredFieldError(f"{field_name} is required", field_name=field_name, value=value)
    if isinstance(value, bool):
        raise InvalidNumberError(f"{field_name} must be a valid number", field_name=field_name, value=value)

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not _NUMERIC_PATTERN.match(text):
            raise InvalidNumberError(
                f"{field_name} must be a valid number",
                field_name=field_name,
                value=value,
            )
        number = float(text)

    if not math.isfinite(number):
        raise InvalidNumberError(f"{field_name} must be a valid number", field_name=field_name, value=value)
    return number


def normalize_integer(value: Any, field_name: str) -> int:
    number = normalize_number(value, field_name)
    if not number.is_integer():
        raise NotAnIntegerError(f"{field_name} must be a whole number", field_name=field_name, value=value)
    return int(number)


def normalize_decimal(value: Any, field_name: str, *, places: int = 4) -> Decimal:
    """
    Number rounded half away from zero to ``places`` decimals, matching a
    ``Numeric(p, places)`` column so lookups compare against the stored value.
    """

    number = normalize_number(value, field_name)
    return Decimal(str(number)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _date_error(message: str, *, field_name: str | None, value: Any) -> InvalidDateError:
    text = f"{field_name}: {message}" if field_name else message
    return InvalidDateError(text, field_name=field_name, value=value)
