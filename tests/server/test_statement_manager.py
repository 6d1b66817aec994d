"""Tests for statement storage and lifecycle."""

import re
import threading

from trinoduck.server.statement_manager import FAILED, FINISHED, QUEUED, Statement, StatementManager


class TestStatement:
    def test_pages(self) -> None:
        stmt = Statement(id="q", sql="SELECT 1", page_size=2, rows=[[1], [2], [3]])

        assert stmt.get_page_count() == 2
        assert stmt.get_page(0) == [[1], [2]]
        assert stmt.get_page(1) == [[3]]

    def test_empty_result_has_one_page(self) -> None:
        stmt = Statement(id="q", sql="SELECT 1 WHERE false")

        assert stmt.get_page_count() == 1
        assert stmt.get_page(0) == []


class TestStatementManager:
    def test_create_and_get(self) -> None:
        manager = StatementManager()

        stmt = manager.create_statement("SELECT 1", {"x-trino-user": "alice"}, page_size=10)

        assert stmt.state == QUEUED
        assert stmt.page_size == 10
        assert re.fullmatch(r"\d{8}_\d{6}_\d{5}_[a-z0-9]{5}", stmt.id)
        assert manager.get_statement(stmt.id) is stmt
        assert manager.get_statement("unknown") is None

    def test_ids_are_unique(self) -> None:
        manager = StatementManager()

        ids = {manager.create_statement("SELECT 1").id for _ in range(50)}

        assert len(ids) == 50

    def test_lru_eviction(self) -> None:
        manager = StatementManager(max_statements=2)
        first = manager.create_statement("SELECT 1")
        second = manager.create_statement("SELECT 2")

        # touching the first makes the second the oldest
        manager.get_statement(first.id)
        third = manager.create_statement("SELECT 3")

        assert len(manager) == 2
        assert manager.get_statement(second.id) is None
        assert manager.get_statement(first.id) is first
        assert manager.get_statement(third.id) is third

    def test_cancel(self) -> None:
        manager = StatementManager()
        stmt = manager.create_statement("SELECT 1")

        assert manager.cancel_statement(stmt.id) is True
        assert stmt.cancelled
        assert manager.cancel_statement("unknown") is False

    def test_cancel_after_delivery_is_noop(self) -> None:
        manager = StatementManager()
        delivered = manager.create_statement("SELECT 1")
        delivered.state = FINISHED
        delivered.delivered = True
        failed = manager.create_statement("SELECT 1")
        failed.state = FAILED

        assert manager.cancel_statement(delivered.id) is True
        assert manager.cancel_statement(failed.id) is True
        assert not delivered.cancelled
        assert not failed.cancelled

    def test_concurrent_creation(self) -> None:
        manager = StatementManager(max_statements=1000)

        def create() -> None:
            for _ in range(50):
                manager.create_statement("SELECT 1")

        threads = [threading.Thread(target=create) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(manager) == 400
