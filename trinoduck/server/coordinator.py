"""DuckDB-backed coordinator state.

The coordinator owns the shared DuckDB database, the statement store and the
open transactions, and runs statements on behalf of the HTTP handlers.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Iterator, Mapping

import duckdb

from ..protocol import headers as h
from .errors import StatementError
from .executor import ResultSet, map_duckdb_error, run_statement, transpile
from .serializers import serialize_rowset
from .session_commands import resolve_prepared, run_session_command, transaction_id
from .statement_manager import FAILED, FINISHED, QUEUED, RUNNING, Statement, StatementManager

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


@dataclass
class Transaction:
    """An explicit transaction, pinned to its own DuckDB cursor."""

    id: str
    cursor: duckdb.DuckDBPyConnection
    lock: Lock = field(default_factory=Lock, repr=False)


class Coordinator:
    def __init__(
        self,
        db_file: str = ":memory:",
        page_size: int = DEFAULT_PAGE_SIZE,
        timezone: str = "UTC",
        max_statements: int = 1000,
    ):
        """
        Initializes the coordinator.

        Args:
            db_file: The DuckDB database file to use. Defaults to ':memory:' (transient).
                     Set to a file path to enable persistence across restarts.
            page_size: Rows per result page.
            timezone: The default timezone of the database.
            max_statements: Statements retained before the oldest are evicted.
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self._db_file = db_file
        self.page_size = page_size

        # One DuckDB instance shared by all statements; each statement runs
        # on its own cursor
        self._duck_conn = duckdb.connect(database=self._db_file)
        self._duck_conn.execute(f"SET GLOBAL TimeZone = '{timezone}'")

        self.statements = StatementManager(max_statements=max_statements)
        self._transactions: dict[str, Transaction] = {}
        self._lock = Lock()

    @property
    def duck_conn(self) -> duckdb.DuckDBPyConnection:
        return self._duck_conn

    def submit(self, sql: str, context: Mapping[str, str]) -> Statement:
        stmt = self.statements.create_statement(sql, dict(context), page_size=self.page_size)
        logger.info("Query %s queued for user %s", stmt.id, context.get(h.USER))
        return stmt

    # =========================================================================
    # Execution
    # =========================================================================

    def execute(self, stmt: Statement) -> None:
        """Run a queued statement and store its outcome on it.

        Safe to call concurrently for the same statement: only the first
        call executes it.
        """
        with stmt.lock:
            if stmt.state != QUEUED:
                return
            stmt.state = RUNNING
            started = time.monotonic()

            try:
                result = self._run(stmt.sql, stmt.context)
            except StatementError as e:
                logger.info("Query %s failed: %s: %s", stmt.id, e.error_name, e.message)
                stmt.error = e
                stmt.state = FAILED
            except Exception as e:
                logger.exception("Unhandled error during query %s", stmt.id)
                stmt.error = StatementError("GENERIC_INTERNAL_ERROR", repr(e), exception_type=type(e).__qualname__)
                stmt.state = FAILED
            else:
                stmt.columns = result.columns
                stmt.rows = serialize_rowset(result.rows, [column.type for column in result.columns])
                stmt.update_type = result.update_type
                stmt.update_count = result.update_count
                stmt.response_headers = result.headers
                stmt.state = FINISHED
                logger.info("Query %s finished with %d rows", stmt.id, len(stmt.rows))
            finally:
                stmt.elapsed_millis = int((time.monotonic() - started) * 1000)

    def advance(self, stmt: Statement) -> None:
        """Bring a statement up to date before one of its pages is served.

        A pending cancellation turns it into a USER_CANCELED failure; a
        queued statement is executed.
        """
        if not stmt.cancelled:
            self.execute(stmt)
            return

        with stmt.lock:
            if stmt.state != FAILED:
                logger.info("Query %s was canceled", stmt.id)
                stmt.error = StatementError("USER_CANCELED", "Query was canceled")
                stmt.rows = []
                stmt.state = FAILED

    def _run(self, sql: str, context: Mapping[str, str]) -> ResultSet:
        command = run_session_command(sql, context, self)
        if command is not None:
            return command

        expression, duck_sql = transpile(resolve_prepared(sql, context))
        with self._cursor(context) as cursor:
            try:
                cursor.execute("SET integer_division = true")
                self._use_schema(cursor, context)
                return run_statement(cursor, expression, duck_sql)
            except duckdb.Error as e:
                raise map_duckdb_error(e) from e

    @contextmanager
    def _cursor(self, context: Mapping[str, str]) -> Iterator[duckdb.DuckDBPyConnection]:
        current = transaction_id(context)
        if current is None:
            cursor = self._duck_conn.cursor()
            try:
                yield cursor
            finally:
                cursor.close()
            return

        transaction = self._get_transaction(current)
        with transaction.lock:
            yield transaction.cursor

    def _use_schema(self, cursor: duckdb.DuckDBPyConnection, context: Mapping[str, str]) -> None:
        schema = context.get(h.SCHEMA)
        if not schema:
            return
        if not self.schema_exists(schema, cursor):
            logger.debug("Schema %s does not exist, keeping the default search path", schema)
            return

        catalog = context.get(h.CATALOG)
        path = f"{catalog}.{schema}" if catalog and self.catalog_exists(catalog, cursor) else schema
        cursor.execute("SET search_path = '{}'".format(path.replace("'", "''")))

    def _exists(self, query: str, value: str, cursor: duckdb.DuckDBPyConnection | None) -> bool:
        if cursor is not None:
            return cursor.execute(query, [value]).fetchone() is not None
        with self._duck_conn.cursor() as own_cursor:
            return own_cursor.execute(query, [value]).fetchone() is not None

    def schema_exists(self, schema: str, cursor: duckdb.DuckDBPyConnection | None = None) -> bool:
        return self._exists(
            "SELECT 1 FROM information_schema.schemata WHERE schema_name = ?", schema, cursor
        )

    def catalog_exists(self, catalog: str, cursor: duckdb.DuckDBPyConnection | None = None) -> bool:
        return self._exists(
            "SELECT 1 FROM duckdb_databases() WHERE database_name = ?", catalog, cursor
        )

    # =========================================================================
    # Transactions
    # =========================================================================

    def begin_transaction(self) -> str:
        cursor = self._duck_conn.cursor()
        cursor.execute("BEGIN TRANSACTION")
        transaction = Transaction(id=str(uuid.uuid4()), cursor=cursor)
        with self._lock:
            self._transactions[transaction.id] = transaction
        logger.info("Transaction %s started", transaction.id)
        return transaction.id

    def _get_transaction(self, transaction_id: str) -> Transaction:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise StatementError("UNKNOWN_TRANSACTION", f"Unknown transaction ID: {transaction_id}")
        return transaction

    def end_transaction(self, transaction_id: str, commit: bool) -> None:
        """Commit or roll back a transaction and release its cursor."""
        with self._lock:
            transaction = self._transactions.pop(transaction_id, None)
        if transaction is None:
            raise StatementError("UNKNOWN_TRANSACTION", f"Unknown transaction ID: {transaction_id}")

        with transaction.lock:
            try:
                transaction.cursor.execute("COMMIT" if commit else "ROLLBACK")
            except duckdb.Error as e:
                raise map_duckdb_error(e) from e
            finally:
                transaction.cursor.close()
        logger.info("Transaction %s %s", transaction_id, "committed" if commit else "rolled back")

    def close(self) -> None:
        """
        Roll back open transactions and close the DuckDB database.
        """
        with self._lock:
            transactions = list(self._transactions.values())
            self._transactions.clear()
        for transaction in transactions:
            transaction.cursor.close()
        if self._duck_conn:
            self._duck_conn.close()
            self._duck_conn = None
