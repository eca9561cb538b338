"""
app/sheets/row_parser.py

Turns a raw cell grid into ParsedRow records keyed by normalized header.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from app.domain.sheet_sync import ParsedRow
from app.sheets.normalizer import is_blank

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_header(value: Any) -> str:
    """
    ``" Primary  Contact Name "`` -> ``"primary_contact_name"``.
    """

    if value is None:
        return ""
    return _WHITESPACE_RUN.sub("_", str(value).strip().lower())


def parse_rows(raw_grid: Sequence[Sequence[Any]], header_row_index: int = 0) -> list[ParsedRow]:
    """
    Parse rows below the header into ``ParsedRow`` records.

    Row numbers are physical sheet rows (1-based), so dropped blank rows
    leave gaps rather than shifting later rows.
    """

    if len(raw_grid) <= header_row_index + 1:
        return []

    columns: list[tuple[int, str]] = []
    seen: set[str] = set()
    for column_index, header_cell in enumerate(raw_grid[header_row_index]):
        key = normalize_header(header_cell)
        if not key or key in seen:
            continue
        seen.add(key)
        columns.append((column_index, key))

    parsed: list[ParsedRow] = []
    for index, row in enumerate(raw_grid[header_row_index + 1 :]):
        data: dict[str, Any] = {}
        for column_index, key in columns:
            value = row[column_index] if column_index < len(row) else None
            data[key] = "" if value is None else value

        if all(is_blank(value) for value in data.values()):
            continue
        parsed.append(ParsedRow(row_number=header_row_index + index + 2, data=data))
    return parsed
