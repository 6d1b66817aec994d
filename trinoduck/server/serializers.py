"""JSON encoding of result values.

Values are encoded the way Trino's JSON protocol encodes them: numbers and
booleans as JSON scalars, decimals and temporal values as strings, binary as
base64, arrays as JSON arrays, maps as JSON objects and rows as positional
JSON arrays.
"""

from __future__ import annotations

import math
from base64 import b64encode
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID

from ..protocol import types
from .types import TrinoType


def _format_interval(value: timedelta) -> str:
    sign = "-" if value < timedelta(0) else ""
    value = abs(value)
    hours, remainder = divmod(value.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    millis = value.microseconds // 1000
    return f"{sign}{value.days} {hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def _format_offset(offset: timedelta | None) -> str:
    total_minutes = int((offset or timedelta(0)).total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _format_zone(value: datetime) -> str:
    if value.tzname() == "UTC":
        return "UTC"
    return _format_offset(value.utcoffset())


def _format_fraction(microseconds: int, precision: int) -> str:
    if precision == 0:
        return ""
    digits = f"{microseconds:06d}"
    return "." + digits[:precision].ljust(precision, "0")


def _precision(trino_type: TrinoType, default: int = 6) -> int:
    if trino_type.arguments and isinstance(trino_type.arguments[0], int):
        return trino_type.arguments[0]
    return default


def serialize_item(item: Any, trino_type: TrinoType | None = None) -> Any:
    """Serialize a single cell value to its Trino JSON representation.

    Args:
        item: Value as returned by DuckDB
        trino_type: Column type; structural values (rows, maps) need it

    Returns:
        A JSON-compatible value
    """
    if item is None:
        return None

    raw_type = trino_type.raw_type if trino_type else None

    if raw_type == types.VARCHAR and not isinstance(item, str):
        return str(item)
    if raw_type == types.ROW and isinstance(item, dict):
        fields = trino_type.arguments
        return [serialize_item(item.get(name), field_type) for name, field_type in fields]
    if raw_type == types.ROW and isinstance(item, (list, tuple)):
        return [
            serialize_item(value, field_type)
            for value, (_, field_type) in zip(item, trino_type.arguments)
        ]
    if raw_type == types.MAP:
        key_type, value_type = trino_type.arguments
        if isinstance(item, dict) and set(item) == {"key", "value"}:
            # older DuckDB releases return maps as {"key": [...], "value": [...]}
            item = dict(zip(item["key"], item["value"]))
        return {
            str(serialize_item(key, key_type)): serialize_item(value, value_type)
            for key, value in item.items()
        }
    if isinstance(item, (list, tuple)):
        element_type = trino_type.arguments[0] if raw_type == types.ARRAY else None
        return [serialize_item(value, element_type) for value in item]

    if isinstance(item, bool):
        return item
    if isinstance(item, int):
        return str(item) if raw_type == types.DECIMAL else item
    if isinstance(item, float):
        if math.isnan(item):
            return "NaN"
        if math.isinf(item):
            return "Infinity" if item > 0 else "-Infinity"
        return item
    if isinstance(item, Decimal):
        # str() keeps the scale
        return str(item)
    if isinstance(item, datetime):
        precision = _precision(trino_type) if trino_type else 6
        text = item.strftime("%Y-%m-%d %H:%M:%S") + _format_fraction(item.microsecond, precision)
        if item.tzinfo is not None:
            text += " " + _format_zone(item)
        return text
    if isinstance(item, date):
        return item.isoformat()
    if isinstance(item, time):
        precision = _precision(trino_type) if trino_type else 6
        text = item.strftime("%H:%M:%S") + _format_fraction(item.microsecond, precision)
        if item.tzinfo is not None:
            text += _format_offset(item.utcoffset())
        return text
    if isinstance(item, timedelta):
        return _format_interval(item)
    if isinstance(item, (bytes, bytearray, memoryview)):
        return b64encode(bytes(item)).decode("ascii")
    if isinstance(item, UUID):
        return str(item)
    if isinstance(item, dict):
        return {str(key): serialize_item(value) for key, value in item.items()}
    if isinstance(item, str):
        return item
    return str(item)


def serialize_rowset(rows: Sequence[Sequence[Any]], column_types: Sequence[TrinoType]) -> list[list[Any]]:
    """Convert DuckDB row tuples into Trino JSON rows."""
    return [
        [serialize_item(cell, column_type) for cell, column_type in zip(row, column_types)]
        for row in rows
    ]
