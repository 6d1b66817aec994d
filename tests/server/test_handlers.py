"""Tests for the statement protocol endpoints."""

from __future__ import annotations

import base64

import pytest

try:
    from starlette.testclient import TestClient as _TestClient

    from trinoduck.server import Coordinator, create_app

    HAS_SERVER_DEPS = True
except ImportError:
    HAS_SERVER_DEPS = False
    _TestClient = None


pytestmark = pytest.mark.skipif(
    not HAS_SERVER_DEPS, reason="Server dependencies not installed"
)

HEADERS = {"X-Trino-User": "alice"}


@pytest.fixture
def server_coordinator():
    coordinator = Coordinator(page_size=2)
    yield coordinator
    coordinator.close()


@pytest.fixture
def test_client(server_coordinator):
    """Create a test client for the statement protocol."""
    return _TestClient(create_app(server_coordinator))


def submit(test_client, sql: str, headers=None) -> dict:
    response = test_client.post("/v1/statement", content=sql, headers=headers or HEADERS)
    assert response.status_code == 200
    return response.json()


def follow(test_client, payload: dict, headers=None) -> list:
    """Fetch every page after a submission; returns the responses."""
    responses = []
    while "nextUri" in payload:
        response = test_client.get(payload["nextUri"], headers=headers or HEADERS)
        assert response.status_code == 200
        responses.append(response)
        payload = response.json()
    return responses


class TestSubmitStatement:
    """Tests for POST /v1/statement."""

    def test_queued_response(self, test_client) -> None:
        payload = submit(test_client, "SELECT 1")

        assert payload["stats"]["state"] == "QUEUED"
        assert payload["nextUri"] == f"http://testserver/v1/statement/queued/{payload['id']}/1"
        assert "/executing/" in payload["partialCancelUri"]
        assert payload["infoUri"].endswith(payload["id"])
        assert "columns" not in payload
        assert "error" not in payload

    def test_user_is_required(self, test_client) -> None:
        response = test_client.post("/v1/statement", content="SELECT 1")

        assert response.status_code == 400
        assert response.text == "User must be set"

    def test_user_from_basic_auth(self, test_client) -> None:
        credentials = base64.b64encode(b"bob:secret").decode()

        response = test_client.post(
            "/v1/statement", content="SELECT 1", headers={"Authorization": f"Basic {credentials}"}
        )

        assert response.status_code == 200

    def test_empty_statement(self, test_client) -> None:
        response = test_client.post("/v1/statement", content="   ", headers=HEADERS)

        assert response.status_code == 400

    def test_get_not_allowed_on_submission_path(self, test_client) -> None:
        assert test_client.get("/v1/statement", headers=HEADERS).status_code == 404


class TestGetStatement:
    """Tests for GET on nextUri."""

    def test_single_page(self, test_client) -> None:
        [response] = follow(test_client, submit(test_client, "SELECT 1 AS n, 'x' AS s"))
        payload = response.json()

        assert payload["stats"]["state"] == "FINISHED"
        assert "nextUri" not in payload
        assert payload["columns"] == [
            {
                "name": "n",
                "type": "integer",
                "typeSignature": {"rawType": "integer", "arguments": []},
            },
            {
                "name": "s",
                "type": "varchar",
                "typeSignature": {
                    "rawType": "varchar",
                    "arguments": [{"kind": "LONG", "value": 2147483647}],
                },
            },
        ]
        assert payload["data"] == [[1, "x"]]

    def test_paging(self, test_client, server_coordinator) -> None:
        server_coordinator.duck_conn.execute("CREATE TABLE nums AS SELECT * FROM range(5) t(n)")

        responses = follow(test_client, submit(test_client, "SELECT n FROM nums ORDER BY n"))
        payloads = [response.json() for response in responses]

        assert [p.get("data") for p in payloads] == [[[0], [1]], [[2], [3]], [[4]]]
        assert [p["stats"]["state"] for p in payloads] == ["RUNNING", "RUNNING", "FINISHED"]
        assert payloads[0]["nextUri"].endswith("/2")
        assert "/executing/" in payloads[0]["nextUri"]
        assert all(p["columns"][0]["type"] == "bigint" for p in payloads)

    def test_empty_result(self, test_client) -> None:
        [response] = follow(test_client, submit(test_client, "SELECT 1 AS n WHERE 1 = 0"))
        payload = response.json()

        assert payload["stats"]["state"] == "FINISHED"
        assert payload["columns"][0]["name"] == "n"
        assert "data" not in payload

    def test_failure_is_reported_in_payload(self, test_client) -> None:
        [response] = follow(test_client, submit(test_client, "SELECT * FROM missing_table"))
        payload = response.json()

        assert payload["stats"]["state"] == "FAILED"
        assert payload["error"]["errorName"] == "TABLE_NOT_FOUND"
        assert payload["error"]["errorType"] == "USER_ERROR"
        assert payload["error"]["errorCode"] == 46
        assert "nextUri" not in payload

    def test_syntax_error_location(self, test_client) -> None:
        [response] = follow(test_client, submit(test_client, "SELECT (1"))
        error = response.json()["error"]

        assert error["errorName"] == "SYNTAX_ERROR"
        assert error["errorLocation"]["lineNumber"] == 1

    def test_invalid_token(self, test_client) -> None:
        payload = submit(test_client, "SELECT 1")
        uri = payload["nextUri"].rsplit("/", 1)[0] + "/7"

        response = test_client.get(uri, headers=HEADERS)

        assert response.status_code == 410

    def test_unknown_query(self, test_client) -> None:
        response = test_client.get("/v1/statement/executing/20240101_000000_00001_zzzzz/1")

        assert response.status_code == 404

    def test_unknown_statement_kind(self, test_client) -> None:
        payload = submit(test_client, "SELECT 1")

        response = test_client.get(f"/v1/statement/finished/{payload['id']}/1")

        assert response.status_code == 404

    def test_directives_on_last_page(self, test_client) -> None:
        [response] = follow(test_client, submit(test_client, "USE memory.main"))

        assert response.headers["x-trino-set-catalog"] == "memory"
        assert response.headers["x-trino-set-schema"] == "main"
        assert response.json()["updateType"] == "USE"


class TestCancelStatement:
    """Tests for DELETE on nextUri."""

    def test_cancel_before_execution(self, test_client) -> None:
        payload = submit(test_client, "SELECT 1")

        response = test_client.delete(payload["nextUri"], headers=HEADERS)
        assert response.status_code == 204

        error = test_client.get(payload["nextUri"], headers=HEADERS).json()["error"]
        assert error["errorName"] == "USER_CANCELED"
        assert error["errorCode"] == 3

    def test_cancel_between_pages(self, test_client, server_coordinator) -> None:
        server_coordinator.duck_conn.execute("CREATE TABLE nums AS SELECT * FROM range(5) t(n)")
        payload = submit(test_client, "SELECT n FROM nums")
        first = test_client.get(payload["nextUri"], headers=HEADERS).json()

        test_client.delete(first["partialCancelUri"], headers=HEADERS)
        second = test_client.get(first["nextUri"], headers=HEADERS).json()

        assert second["stats"]["state"] == "FAILED"
        assert second["error"]["errorName"] == "USER_CANCELED"
        assert "data" not in second

    def test_cancel_unknown_query(self, test_client) -> None:
        response = test_client.delete("/v1/statement/queued/20240101_000000_00001_zzzzz/1")

        assert response.status_code == 404


def test_fallback_route(test_client) -> None:
    response = test_client.get("/v1/info")

    assert response.status_code == 404
    assert response.text == "Not Found"
