"""Tests for JSON encoding of result values."""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from trinoduck.server.serializers import serialize_item, serialize_rowset
from trinoduck.server.types import parse_duckdb_type


class TestSerializeItem:
    """Tests for serialize_item function."""

    def test_scalars(self) -> None:
        assert serialize_item(None) is None
        assert serialize_item(True) is True
        assert serialize_item(42) == 42
        assert serialize_item(1.5) == 1.5
        assert serialize_item("text") == "text"

    def test_special_floats(self) -> None:
        assert serialize_item(float("nan")) == "NaN"
        assert serialize_item(float("inf")) == "Infinity"
        assert serialize_item(float("-inf")) == "-Infinity"

    def test_decimal_keeps_scale(self) -> None:
        assert serialize_item(Decimal("12.50"), parse_duckdb_type("DECIMAL(10,2)")) == "12.50"

    def test_hugeint_as_decimal_string(self) -> None:
        assert serialize_item(10**30, parse_duckdb_type("HUGEINT")) == str(10**30)

    def test_timestamp(self) -> None:
        value = datetime(2024, 1, 2, 3, 4, 5, 123456)

        assert serialize_item(value, parse_duckdb_type("TIMESTAMP")) == "2024-01-02 03:04:05.123456"
        assert serialize_item(value, parse_duckdb_type("TIMESTAMP_MS")) == "2024-01-02 03:04:05.123"
        assert serialize_item(value, parse_duckdb_type("TIMESTAMP_S")) == "2024-01-02 03:04:05"
        assert serialize_item(value, parse_duckdb_type("TIMESTAMP_NS")) == "2024-01-02 03:04:05.123456000"

    def test_timestamp_with_time_zone(self) -> None:
        value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        offset = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=-5, minutes=-30)))
        column_type = parse_duckdb_type("TIMESTAMP WITH TIME ZONE")

        assert serialize_item(value, column_type) == "2024-01-02 03:04:05.000000 UTC"
        assert serialize_item(offset, column_type) == "2024-01-02 03:04:05.000000 -05:30"

    def test_date_and_time(self) -> None:
        assert serialize_item(date(2024, 2, 29)) == "2024-02-29"
        assert serialize_item(time(13, 30, 0, 500), parse_duckdb_type("TIME")) == "13:30:00.000500"

    def test_interval(self) -> None:
        assert serialize_item(timedelta(days=1, hours=2, milliseconds=3)) == "1 02:00:00.003"
        assert serialize_item(timedelta(minutes=-90)) == "-0 01:30:00.000"

    def test_binary_and_uuid(self) -> None:
        assert serialize_item(b"\x00\xff") == "AP8="
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert serialize_item(value) == "12345678-1234-5678-1234-567812345678"

    def test_array(self) -> None:
        column_type = parse_duckdb_type("DECIMAL(4,1)[]")

        assert serialize_item([Decimal("1.0"), None], column_type) == ["1.0", None]

    def test_row_from_dict(self) -> None:
        column_type = parse_duckdb_type("STRUCT(a INTEGER, b DATE)")

        assert serialize_item({"a": 1, "b": date(2024, 1, 1)}, column_type) == [1, "2024-01-01"]

    def test_map(self) -> None:
        column_type = parse_duckdb_type("MAP(INTEGER, VARCHAR)")

        assert serialize_item({1: "one", 2: None}, column_type) == {"1": "one", "2": None}

    def test_map_in_key_value_form(self) -> None:
        column_type = parse_duckdb_type("MAP(VARCHAR, BIGINT)")

        assert serialize_item({"key": ["a", "b"], "value": [1, 2]}, column_type) == {"a": 1, "b": 2}

    @pytest.mark.parametrize("value", [1, 2.5, True])
    def test_varchar_column_stringifies(self, value) -> None:
        assert serialize_item(value, parse_duckdb_type("VARCHAR")) == str(value)


def test_serialize_rowset():
    column_types = [parse_duckdb_type("INTEGER"), parse_duckdb_type("DECIMAL(5,2)")]

    assert serialize_rowset([(1, Decimal("1.50")), (2, None)], column_types) == [[1, "1.50"], [2, None]]
