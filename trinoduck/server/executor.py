"""Statement execution on DuckDB.

Trino SQL is parsed and transpiled to DuckDB with sqlglot, run on a DuckDB
cursor, and DuckDB failures are mapped to Trino error names.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

import duckdb
import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from .errors import StatementError
from .types import BIGINT, BOOLEAN, VARCHAR, ResultColumn, parse_duckdb_type

logger = logging.getLogger(__name__)

# Statements whose result set is described before it is fetched
QUERY_EXPRESSIONS = (exp.Query, exp.Values)
# Statements with a result set of their own (SHOW, DESCRIBE...)
INTROSPECTION_EXPRESSIONS = (exp.Show, exp.Describe, exp.Pragma, exp.Command)
# Statements reporting an affected row count
DML_EXPRESSIONS = (exp.Insert, exp.Update, exp.Delete, exp.Merge)

# Digits of a DECIMAL literal: sign, integer part, fraction
DECIMAL_LITERAL = re.compile(r"^\s*[+-]?(\d*)(?:\.(\d*))?\s*$")
MAX_DECIMAL_PRECISION = 38

UPDATE_TYPES: dict[type[exp.Expression], str] = {
    exp.Insert: "INSERT",
    exp.Update: "UPDATE",
    exp.Delete: "DELETE",
    exp.Merge: "MERGE",
    exp.TruncateTable: "TRUNCATE TABLE",
}


@dataclass
class ResultSet:
    """Outcome of a statement: result columns and rows plus update info.

    ``rows`` hold DuckDB values; they are JSON-encoded when the statement
    is stored. ``headers`` are session directives for the client.
    """

    columns: list[ResultColumn]
    rows: list[list[Any]]
    update_type: str | None = None
    update_count: int | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def acknowledged(cls, update_type: str, headers: dict[str, str] | None = None) -> ResultSet:
        """Result of a statement without output: a single ``true``."""
        return cls(
            columns=[ResultColumn("result", BOOLEAN)],
            rows=[[True]],
            update_type=update_type,
            headers=headers or {},
        )


# =============================================================================
# Transpilation
# =============================================================================


def _syntax_error(error: ParseError | TokenError) -> StatementError:
    details = getattr(error, "errors", None) or [{}]
    detail = details[0]
    message = detail.get("description") or str(error).split("\n")[0]
    return StatementError(
        "SYNTAX_ERROR",
        message,
        line=detail.get("line") or 1,
        column=detail.get("col") or 1,
    )


def parse_statement(sql: str) -> exp.Expression:
    """Parse a single Trino statement.

    Raises:
        StatementError: SYNTAX_ERROR when the text does not parse or holds
            more than one statement.
    """
    try:
        expressions = [e for e in sqlglot.parse(sql, read="trino") if e is not None]
    except (ParseError, TokenError) as e:
        raise _syntax_error(e) from e

    if not expressions:
        raise StatementError("SYNTAX_ERROR", "Statement is empty", line=1, column=1)
    if len(expressions) > 1:
        raise StatementError("SYNTAX_ERROR", "Only one statement may be executed at a time", line=1, column=1)
    return expressions[0]


def _name_anonymous_columns(expression: exp.Expression) -> exp.Expression:
    # Trino names unaliased expressions _col0, _col1...
    if isinstance(expression, exp.Values):
        first = expression.expressions[0] if expression.expressions else None
        width = len(first.expressions) if isinstance(first, exp.Tuple) else 1
        values = expression.copy()
        values.set(
            "alias",
            exp.TableAlias(
                this=exp.to_identifier("_values"),
                columns=[exp.to_identifier(f"_col{index}") for index in range(width)],
            ),
        )
        return exp.select("*").from_(values)
    if isinstance(expression, exp.Select):
        for index, projection in enumerate(expression.expressions):
            if not isinstance(projection, (exp.Alias, exp.Column, exp.Star)):
                projection.replace(exp.alias_(projection.copy(), f"_col{index}"))
    return expression


def _guard_division(expression: exp.Expression) -> None:
    # DuckDB yields NULL or Infinity for x / 0 where Trino fails the query
    for division in reversed(list(expression.find_all(exp.Div))):
        divisor = division.expression
        if isinstance(divisor, exp.Literal) and divisor.is_number and float(divisor.this) != 0:
            continue
        division.set(
            "expression",
            exp.Case(
                ifs=[
                    exp.If(
                        this=exp.EQ(this=divisor.copy(), expression=exp.Literal.number(0)),
                        true=exp.Anonymous(this="error", expressions=[exp.Literal.string("Division by zero")]),
                    )
                ],
                default=divisor.copy(),
            ),
        )


def _decimal_literal_type(text: str) -> exp.DataType | None:
    match = DECIMAL_LITERAL.match(text)
    if not match:
        return None
    integer, fraction = match.group(1), match.group(2) or ""
    if not integer and not fraction:
        return None
    scale = len(fraction)
    precision = max(len(integer.lstrip("0")) + scale, 1)
    if precision > MAX_DECIMAL_PRECISION:
        return None
    return exp.DataType.build(f"DECIMAL({precision}, {scale})")


def _type_decimal_literals(expression: exp.Expression) -> None:
    # DECIMAL '1.50' is decimal(3,2), not DuckDB's default decimal(18,3)
    for cast in expression.find_all(exp.Cast):
        to = cast.args.get("to")
        if not isinstance(to, exp.DataType) or not to.is_type(exp.DataType.Type.DECIMAL) or to.expressions:
            continue
        if not (isinstance(cast.this, exp.Literal) and cast.this.is_string):
            continue
        decimal_type = _decimal_literal_type(cast.this.this)
        if decimal_type is not None:
            cast.set("to", decimal_type)


def transpile(sql: str) -> tuple[exp.Expression, str]:
    """Parse Trino SQL and render it for DuckDB.

    Unaliased columns get Trino's ``_colN`` names, divisors are checked
    for zero, and decimal literals keep the precision and scale they are
    written with.

    Returns:
        The parsed expression and the DuckDB SQL text.
    """
    expression = _name_anonymous_columns(parse_statement(sql))
    _guard_division(expression)
    _type_decimal_literals(expression)
    duck_sql = expression.sql(dialect="duckdb")
    logger.debug("Transpiled %r to %r", sql, duck_sql)
    return expression, duck_sql


def bind_parameters(statement: str, parameters_sql: str | None) -> str:
    """Substitute the ``?`` placeholders of a prepared statement.

    Args:
        statement: Prepared statement text
        parameters_sql: The comma separated ``USING`` expressions, if any

    Returns:
        Statement text with the values in place of the placeholders
    """
    values = []
    if parameters_sql:
        try:
            values = sqlglot.parse_one(f"SELECT {parameters_sql}", read="trino").expressions
        except (ParseError, TokenError) as e:
            raise _syntax_error(e) from e

    tree = parse_statement(statement)
    placeholders = list(tree.find_all(exp.Placeholder, bfs=False))
    if len(placeholders) != len(values):
        raise StatementError(
            "INVALID_PARAMETER_USAGE",
            f"Incorrect number of parameters: expected {len(placeholders)} but found {len(values)}",
        )
    if not placeholders:
        return statement
    for placeholder, value in zip(placeholders, values):
        placeholder.replace(value.copy())
    return tree.sql(dialect="trino")


# =============================================================================
# Execution
# =============================================================================


def update_type_of(expression: exp.Expression) -> str:
    if isinstance(expression, (exp.Create, exp.Drop)):
        verb = "CREATE" if isinstance(expression, exp.Create) else "DROP"
        kind = expression.args.get("kind") or ""
        return f"{verb} {kind}".strip()
    return UPDATE_TYPES.get(type(expression), expression.key.upper())


def _fetch_count(cursor: duckdb.DuckDBPyConnection) -> int | None:
    if cursor.description is None:
        return None
    rows = cursor.fetchall()
    if rows and len(rows[0]) == 1 and isinstance(rows[0][0], int):
        return rows[0][0]
    return None


def run_statement(
    cursor: duckdb.DuckDBPyConnection,
    expression: exp.Expression,
    duck_sql: str,
) -> ResultSet:
    """Execute a transpiled statement and collect its result.

    Raises:
        duckdb.Error: Execution failed; see :func:`map_duckdb_error`.
    """
    if isinstance(expression, QUERY_EXPRESSIONS):
        described = cursor.execute(f"DESCRIBE {duck_sql}").fetchall()
        columns = [ResultColumn(row[0], parse_duckdb_type(row[1])) for row in described]
        rows = [list(row) for row in cursor.execute(duck_sql).fetchall()]
        return ResultSet(columns=columns, rows=rows)

    cursor.execute(duck_sql)

    if isinstance(expression, INTROSPECTION_EXPRESSIONS) and cursor.description:
        columns = [ResultColumn(column[0], VARCHAR) for column in cursor.description]
        return ResultSet(columns=columns, rows=[list(row) for row in cursor.fetchall()])

    update_type = update_type_of(expression)
    is_ctas = isinstance(expression, exp.Create) and isinstance(expression.expression, exp.Query)
    if isinstance(expression, DML_EXPRESSIONS) or is_ctas:
        count = _fetch_count(cursor)
        if count is None and is_ctas:
            table = expression.this.find(exp.Table)
            count = cursor.execute(f"SELECT count(*) FROM {table.sql(dialect='duckdb')}").fetchone()[0]
        return ResultSet(
            columns=[ResultColumn("rows", BIGINT)],
            rows=[[count or 0]],
            update_type=update_type,
            update_count=count or 0,
        )

    return ResultSet.acknowledged(update_type)


# =============================================================================
# Error mapping
# =============================================================================

# DuckDB exception -> Trino error name, first match wins
DUCKDB_ERRORS: tuple[tuple[type[duckdb.Error], str], ...] = (
    (duckdb.ParserException, "SYNTAX_ERROR"),
    (duckdb.ConversionException, "INVALID_CAST_ARGUMENT"),
    (duckdb.OutOfRangeException, "NUMERIC_VALUE_OUT_OF_RANGE"),
    (duckdb.TypeMismatchException, "TYPE_MISMATCH"),
    (duckdb.ConstraintException, "CONSTRAINT_VIOLATION"),
    (duckdb.NotImplementedException, "NOT_SUPPORTED"),
    (duckdb.PermissionException, "PERMISSION_DENIED"),
    (duckdb.TransactionException, "TRANSACTION_CONFLICT"),
    (duckdb.InterruptException, "USER_CANCELED"),
    (duckdb.OutOfMemoryException, "EXCEEDED_GLOBAL_MEMORY_LIMIT"),
    (duckdb.IOException, "DUCKDB_IO_ERROR"),
    (duckdb.InternalException, "GENERIC_INTERNAL_ERROR"),
    (duckdb.FatalException, "GENERIC_INTERNAL_ERROR"),
)


def _catalog_error_name(message: str) -> str:
    lower = message.lower()
    if "already exists" in lower:
        return "SCHEMA_ALREADY_EXISTS" if "schema" in lower else "TABLE_ALREADY_EXISTS"
    if "function" in lower:
        return "FUNCTION_NOT_FOUND"
    if "schema" in lower:
        return "SCHEMA_NOT_FOUND"
    return "TABLE_NOT_FOUND"


def _binder_error_name(message: str) -> str:
    lower = message.lower()
    if "column" in lower:
        return "COLUMN_NOT_FOUND"
    if "function" in lower:
        return "FUNCTION_NOT_FOUND"
    return "TYPE_MISMATCH"


def map_duckdb_error(error: duckdb.Error) -> StatementError:
    """Translate a DuckDB failure into the Trino error it corresponds to."""
    message = str(error).split("\n")[0]

    if isinstance(error, duckdb.CatalogException):
        name = _catalog_error_name(message)
    elif isinstance(error, duckdb.BinderException):
        name = _binder_error_name(message)
    elif "division by zero" in message.lower():
        name = "DIVISION_BY_ZERO"
    else:
        name = next(
            (error_name for error_type, error_name in DUCKDB_ERRORS if isinstance(error, error_type)),
            "GENERIC_USER_ERROR",
        )

    return StatementError(
        name,
        message,
        exception_type=f"duckdb.{type(error).__name__}",
    )
