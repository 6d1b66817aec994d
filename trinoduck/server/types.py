"""Type conversion utilities for the emulator.

Maps DuckDB column types (as printed by ``DESCRIBE``) to Trino types, and
renders them the way a coordinator does: a display name (``type``) and a
structured ``typeSignature``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from ..protocol import types

logger = logging.getLogger(__name__)

# Bound reported for unbounded varchar
VARCHAR_MAX_LENGTH = 2147483647

TypeArgument = Union[int, "TrinoType", tuple[str, "TrinoType"]]


@dataclass(frozen=True)
class TrinoType:
    """A Trino type: raw type name plus LONG, TYPE or NAMED_TYPE arguments."""

    raw_type: str
    arguments: tuple[TypeArgument, ...] = ()

    @property
    def display(self) -> str:
        """Type name as shown in the ``type`` field of a column."""
        if self.raw_type == types.VARCHAR and self.arguments == (VARCHAR_MAX_LENGTH,):
            return types.VARCHAR
        if self.raw_type in (types.TIMESTAMP_WITH_TIME_ZONE, types.TIME_WITH_TIME_ZONE):
            base = self.raw_type.split(" ")[0]
            return f"{base}({self.arguments[0]}) with time zone"
        if not self.arguments:
            return self.raw_type

        rendered = []
        for argument in self.arguments:
            if isinstance(argument, TrinoType):
                rendered.append(argument.display)
            elif isinstance(argument, tuple):
                name, field_type = argument
                rendered.append(f"{name} {field_type.display}")
            else:
                rendered.append(str(argument))
        separator = ", " if self.raw_type in (types.ROW, types.MAP) else ","
        return f"{self.raw_type}({separator.join(rendered)})"

    def signature(self) -> dict[str, Any]:
        """Structured ``typeSignature`` of a column."""
        arguments = []
        for argument in self.arguments:
            if isinstance(argument, TrinoType):
                arguments.append({"kind": types.PARAMETER_TYPE, "value": argument.signature()})
            elif isinstance(argument, tuple):
                name, field_type = argument
                arguments.append(
                    {
                        "kind": types.PARAMETER_NAMED_TYPE,
                        "value": {
                            "fieldName": {"name": name},
                            "typeSignature": field_type.signature(),
                        },
                    }
                )
            else:
                arguments.append({"kind": types.PARAMETER_LONG, "value": argument})
        return {"rawType": self.raw_type, "arguments": arguments}


@dataclass(frozen=True)
class ResultColumn:
    name: str
    type: TrinoType

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.display,
            "typeSignature": self.type.signature(),
        }


BIGINT = TrinoType(types.BIGINT)
BOOLEAN = TrinoType(types.BOOLEAN)
VARCHAR = TrinoType(types.VARCHAR, (VARCHAR_MAX_LENGTH,))
UNKNOWN = TrinoType("unknown")


def _decimal(precision: int, scale: int) -> TrinoType:
    return TrinoType(types.DECIMAL, (precision, scale))


# DuckDB name -> Trino type, for types without parameters
SIMPLE_TYPES: dict[str, TrinoType] = {
    "BOOLEAN": BOOLEAN,
    "BOOL": BOOLEAN,
    "TINYINT": TrinoType(types.TINYINT),
    "SMALLINT": TrinoType(types.SMALLINT),
    "INTEGER": TrinoType(types.INTEGER),
    "BIGINT": BIGINT,
    "HUGEINT": _decimal(38, 0),
    "UTINYINT": TrinoType(types.SMALLINT),
    "USMALLINT": TrinoType(types.INTEGER),
    "UINTEGER": BIGINT,
    "UBIGINT": _decimal(20, 0),
    "UHUGEINT": _decimal(38, 0),
    "FLOAT": TrinoType(types.REAL),
    "DOUBLE": TrinoType(types.DOUBLE),
    "VARCHAR": VARCHAR,
    "BLOB": TrinoType(types.VARBINARY),
    "DATE": TrinoType(types.DATE),
    "TIME": TrinoType(types.TIME, (6,)),
    "TIME WITH TIME ZONE": TrinoType(types.TIME_WITH_TIME_ZONE, (6,)),
    "TIMESTAMP": TrinoType(types.TIMESTAMP, (6,)),
    "TIMESTAMP_S": TrinoType(types.TIMESTAMP, (0,)),
    "TIMESTAMP_MS": TrinoType(types.TIMESTAMP, (3,)),
    "TIMESTAMP_NS": TrinoType(types.TIMESTAMP, (9,)),
    "TIMESTAMP WITH TIME ZONE": TrinoType(types.TIMESTAMP_WITH_TIME_ZONE, (6,)),
    "INTERVAL": TrinoType(types.INTERVAL_DAY_TO_SECOND),
    "UUID": TrinoType(types.UUID),
    "JSON": TrinoType(types.JSON),
    '"NULL"': UNKNOWN,
    "NULL": UNKNOWN,
}


def split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested in parentheses or double quotes."""
    parts = []
    depth = 0
    quoted = False
    current = []
    for char in text:
        if char == '"':
            quoted = not quoted
        elif not quoted and char == "(":
            depth += 1
        elif not quoted and char == ")":
            depth -= 1
        elif not quoted and depth == 0 and char == ",":
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if current:
        parts.append("".join(current).strip())
    return parts


def _split_field(field: str) -> tuple[str, str]:
    if field.startswith('"'):
        end = 1
        while end < len(field):
            if field[end] == '"':
                if field[end + 1 : end + 2] == '"':
                    end += 2
                    continue
                break
            end += 1
        return field[1:end].replace('""', '"'), field[end + 1 :].strip()
    name, _, type_name = field.partition(" ")
    return name, type_name.strip()


def parse_duckdb_type(type_name: str) -> TrinoType:
    """Convert a DuckDB type name to the closest Trino type.

    Args:
        type_name: DuckDB type as printed by ``DESCRIBE``, e.g.
            ``DECIMAL(18,3)``, ``INTEGER[]`` or ``STRUCT(a INTEGER, b VARCHAR)``

    Returns:
        The Trino type. Types without a Trino counterpart are reported as
        ``varchar`` and their values are sent as strings.
    """
    type_name = type_name.strip()
    upper = type_name.upper()

    if type_name.endswith("]"):
        return TrinoType(types.ARRAY, (parse_duckdb_type(type_name[: type_name.rindex("[")]),))

    if upper.startswith("STRUCT(") and type_name.endswith(")"):
        fields = []
        for field in split_top_level(type_name[len("STRUCT(") : -1]):
            name, field_type = _split_field(field)
            fields.append((name, parse_duckdb_type(field_type)))
        return TrinoType(types.ROW, tuple(fields))

    if upper.startswith("MAP(") and type_name.endswith(")"):
        key_type, value_type = split_top_level(type_name[len("MAP(") : -1])
        return TrinoType(types.MAP, (parse_duckdb_type(key_type), parse_duckdb_type(value_type)))

    if upper.startswith(("DECIMAL(", "NUMERIC(")):
        precision, _, scale = upper[upper.index("(") + 1 : -1].partition(",")
        return _decimal(int(precision), int(scale or 0))

    if upper in SIMPLE_TYPES:
        return SIMPLE_TYPES[upper]

    logger.debug("No Trino type for DuckDB type %s, reporting varchar", type_name)
    return VARCHAR
