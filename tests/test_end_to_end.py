"""End-to-end tests: the client engine against the in-process emulator."""

from __future__ import annotations

import pytest

from trinoduck import local_trino, mock_trino, unwrap
from trinoduck.client import Err, Ok, UserError


class TestQueries:
    @pytest.mark.asyncio
    async def test_select_one(self, trino) -> None:
        results = [result async for result in trino.execute_query("SELECT 1")]

        assert all(isinstance(result, Ok) for result in results)
        assert all(result.value.stats.state for result in results)
        final = results[-1].value
        assert final.next_uri is None
        assert [column.name for column in final.columns] == ["_col0"]
        assert final.columns[0].type == "integer"
        assert final.data == [[1]]

    @pytest.mark.asyncio
    async def test_envelope_per_round_trip(self) -> None:
        async with local_trino(page_size=2) as trino:
            unwrap(await trino.query("CREATE TABLE nums AS SELECT 1 AS n UNION ALL SELECT 2 UNION ALL SELECT 3"))

            results = [result async for result in trino.execute_query("SELECT n FROM nums ORDER BY n")]

        # queued + two pages
        assert len(results) == 3
        assert [r.value.data for r in results] == [None, [[1], [2]], [[3]]]

    @pytest.mark.asyncio
    async def test_query_collects_rows(self, trino) -> None:
        unwrap(await trino.query("CREATE TABLE people (id INTEGER, name VARCHAR)"))
        inserted = unwrap(await trino.query("INSERT INTO people VALUES (1, 'Ada'), (2, 'Grace')"))

        rows = unwrap(await trino.query("SELECT name FROM people ORDER BY id"))

        assert inserted.update_type == "INSERT"
        assert inserted.update_count == 2
        assert rows.column_names == ["name"]
        assert rows.rows == [["Ada"], ["Grace"]]

    @pytest.mark.asyncio
    async def test_missing_table(self, trino) -> None:
        results = [result async for result in trino.execute_query("SELECT * FROM nonexistent_table")]

        assert isinstance(results[-1], Err)
        error = results[-1].error
        assert isinstance(error, UserError)
        assert error.error_name == "TABLE_NOT_FOUND"
        assert error.error_code == 46
        assert all(isinstance(result, Ok) for result in results[:-1])


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_reports_user_canceled(self, trino) -> None:
        results = trino.execute_query("SELECT 1")
        queued = await results.__anext__()

        cancelled = await trino.cancel_query(queued.value.partial_cancel_uri)
        assert cancelled == Ok(None)

        final = await results.__anext__()
        assert isinstance(final, Err)
        assert final.error.error_name == "USER_CANCELED"
        assert final.error.error_type == "USER_ERROR"

        with pytest.raises(StopAsyncIteration):
            await results.__anext__()


class TestSession:
    @pytest.mark.asyncio
    async def test_use(self, trino, coordinator) -> None:
        coordinator.duck_conn.execute("CREATE SCHEMA sales")
        coordinator.duck_conn.execute("CREATE TABLE sales.orders AS SELECT 7 AS id")

        unwrap(await trino.query("USE memory.sales"))

        assert trino.session.catalog == "memory"
        assert trino.session.schema == "sales"
        assert unwrap(await trino.query("SELECT id FROM orders")).rows == [[7]]

    @pytest.mark.asyncio
    async def test_set_and_reset_session(self, trino) -> None:
        unwrap(await trino.query("SET SESSION query_max_run_time = '2h'"))
        unwrap(await trino.query("SET SESSION join_distribution_type = 'BROADCAST'"))
        assert trino.session.session_properties == {
            "query_max_run_time": "2h",
            "join_distribution_type": "BROADCAST",
        }

        unwrap(await trino.query("RESET SESSION query_max_run_time"))
        assert trino.session.session_properties == {"join_distribution_type": "BROADCAST"}

    @pytest.mark.asyncio
    async def test_prepared_statements(self, trino) -> None:
        unwrap(await trino.query("PREPARE add_one FROM SELECT ? + 1"))
        assert trino.session.prepared_statements == {"add_one": "SELECT ? + 1"}

        rows = unwrap(await trino.query("EXECUTE add_one USING 41"))
        assert rows.rows == [[42]]

        unwrap(await trino.query("DEALLOCATE PREPARE add_one"))
        assert trino.session.prepared_statements == {}

        result = await trino.query("EXECUTE add_one USING 1")
        assert result.error.error_name == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_transaction_commit(self, trino) -> None:
        unwrap(await trino.query("START TRANSACTION"))
        transaction = trino.session.transaction_id
        assert transaction

        unwrap(await trino.query("CREATE TABLE audit (id INTEGER)"))
        unwrap(await trino.query("INSERT INTO audit VALUES (1)"))
        unwrap(await trino.query("COMMIT"))

        assert trino.session.transaction_id is None
        assert unwrap(await trino.query("SELECT id FROM audit")).rows == [[1]]

    @pytest.mark.asyncio
    async def test_transaction_rollback(self, trino) -> None:
        unwrap(await trino.query("CREATE TABLE ledger (id INTEGER)"))
        unwrap(await trino.query("START TRANSACTION"))
        unwrap(await trino.query("INSERT INTO ledger VALUES (1)"))
        unwrap(await trino.query("ROLLBACK"))

        assert unwrap(await trino.query("SELECT count(*) FROM ledger")).rows == [[0]]

    @pytest.mark.asyncio
    async def test_session_authorization(self, trino) -> None:
        unwrap(await trino.query("SET SESSION AUTHORIZATION bob"))
        assert trino.session.user == "bob"
        assert trino.session.original_user == "trinoduck"
        assert trino.build_headers()["x-trino-user"] == "bob"

        unwrap(await trino.query("RESET SESSION AUTHORIZATION"))
        assert trino.session.user == "trinoduck"
        assert trino.session.original_user is None


class TestLocalTrino:
    @pytest.mark.asyncio
    async def test_page_size_requires_own_coordinator(self, coordinator) -> None:
        with pytest.raises(ValueError):
            async with local_trino(coordinator=coordinator, page_size=10):
                pass

    @pytest.mark.asyncio
    @mock_trino
    async def test_mock_trino_decorator(self, trino) -> None:
        assert unwrap(await trino.query("SELECT 'duck' AS animal")).rows == [["duck"]]
