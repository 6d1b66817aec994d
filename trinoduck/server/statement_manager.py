"""Statement management for the statement protocol.

This module provides storage and lifecycle management for submitted
statements and their results, with LRU eviction for memory management.
"""

from __future__ import annotations

import itertools
import secrets
import string
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from .errors import StatementError
from .types import ResultColumn

QUEUED = "QUEUED"
RUNNING = "RUNNING"
FINISHED = "FINISHED"
FAILED = "FAILED"


@dataclass
class Statement:
    """A submitted statement and, once executed, its result.

    Attributes:
        id: Query id, e.g. ``20240101_120000_00001_abcde``
        sql: The statement text
        context: Lower-cased ``X-Trino-*`` request headers of the submission
        page_size: Rows per result page
        state: QUEUED, RUNNING, FINISHED or FAILED
        cancelled: Set by DELETE; the next fetch reports USER_CANCELED
        delivered: The final page was served
        created_on: Timestamp when the statement was submitted (ms since epoch)
        columns: Result columns (populated on success)
        rows: JSON-encoded result rows (populated on success)
        update_type: Statement kind for DDL/DML, e.g. ``INSERT``
        update_count: Affected rows for DML
        response_headers: Session directives sent with the final page
        error: Failure (populated on failure)
        elapsed_millis: Execution time
    """

    id: str
    sql: str
    context: dict[str, str] = field(default_factory=dict)
    page_size: int = 1000
    state: str = QUEUED
    cancelled: bool = False
    delivered: bool = False
    created_on: int = field(default_factory=lambda: int(time.time() * 1000))

    columns: list[ResultColumn] | None = None
    rows: list[list[Any]] = field(default_factory=list)
    update_type: str | None = None
    update_count: int | None = None
    response_headers: dict[str, str] = field(default_factory=dict)

    error: StatementError | None = None
    elapsed_millis: int = 0

    lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def get_page_count(self) -> int:
        """Get the number of result pages; a finished statement has at least one."""
        if not self.rows:
            return 1
        return (len(self.rows) + self.page_size - 1) // self.page_size

    def get_page(self, page: int) -> list[list[Any]]:
        """Get the rows of a result page.

        Args:
            page: Zero-indexed page number

        Returns:
            List of rows in the page
        """
        start = page * self.page_size
        return self.rows[start : start + self.page_size]


def _query_id_suffix() -> str:
    return "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(5))


class StatementManager:
    """Manages submitted statements and their results.

    Provides thread-safe storage with LRU eviction to prevent unbounded
    memory growth.
    """

    def __init__(self, max_statements: int = 1000) -> None:
        """Initialize the statement manager.

        Args:
            max_statements: Maximum number of statements to store before eviction
        """
        self._statements: dict[str, Statement] = {}
        self._order: list[str] = []
        self._max_statements = max_statements
        self._counter = itertools.count(1)
        self._lock = Lock()

    def _next_query_id(self) -> str:
        stamp = time.strftime("%Y%m%d_%H%M%S", time.gmtime())
        return f"{stamp}_{next(self._counter):05d}_{_query_id_suffix()}"

    def create_statement(
        self,
        sql: str,
        context: dict[str, str] | None = None,
        page_size: int = 1000,
    ) -> Statement:
        """Register a new queued statement.

        Args:
            sql: The statement text
            context: Session request headers the statement runs with
            page_size: Rows per result page

        Returns:
            New Statement in QUEUED state
        """
        with self._lock:
            stmt = Statement(
                id=self._next_query_id(),
                sql=sql,
                context=dict(context or {}),
                page_size=page_size,
            )

            # Evict oldest if at capacity
            while len(self._statements) >= self._max_statements and self._order:
                oldest = self._order.pop(0)
                self._statements.pop(oldest, None)

            self._statements[stmt.id] = stmt
            self._order.append(stmt.id)

        return stmt

    def get_statement(self, query_id: str) -> Statement | None:
        with self._lock:
            stmt = self._statements.get(query_id)
            if stmt is not None:
                self._order.remove(query_id)
                self._order.append(query_id)
            return stmt

    def cancel_statement(self, query_id: str) -> bool:
        """Cancel a statement.

        A statement still queued, running, or with result pages left to
        fetch is marked cancelled; a statement whose result was fully
        delivered is left alone.

        Args:
            query_id: Query id

        Returns:
            True if found, False otherwise
        """
        with self._lock:
            stmt = self._statements.get(query_id)
            if stmt is None:
                return False
            if stmt.state != FAILED and not stmt.delivered:
                stmt.cancelled = True
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._statements)
