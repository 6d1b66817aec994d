from typing import Any, Callable

import httpx
import pytest

from trinoduck.client import ClientConfig, Trino

BASE_URL = "http://coordinator.test"


def stats(state: str = "FINISHED") -> dict[str, Any]:
    return {"state": state, "queued": False, "scheduled": True, "nodes": 1}


def page(
    query_id: str = "q1",
    *,
    next_uri: str | None = None,
    state: str = "RUNNING",
    columns: list[dict[str, Any]] | None = None,
    data: list[list[Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a successful statement payload."""
    payload: dict[str, Any] = {
        "id": query_id,
        "infoUri": f"{BASE_URL}/ui/query.html?{query_id}",
        "stats": stats(state),
    }
    if next_uri:
        payload["nextUri"] = next_uri
        payload["partialCancelUri"] = next_uri
    if columns is not None:
        payload["columns"] = columns
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return payload


def failure(error_type: str, error_name: str = "GENERIC_USER_ERROR", code: int = 0) -> dict[str, Any]:
    """Build a failed statement payload."""
    payload = page(state="FAILED")
    payload["error"] = {
        "message": f"{error_name} happened",
        "errorCode": code,
        "errorName": error_name,
        "errorType": error_type,
        "failureInfo": {"type": "io.trino.spi.TrinoException", "suppressed": [], "stack": []},
    }
    return payload


class ScriptedCoordinator:
    """Answers statement requests from a list of canned responses.

    Each entry is an ``httpx.Response``, a JSON-able payload (served with
    status 200), or an exception instance to raise. Every request is recorded.
    """

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def methods(self) -> list[str]:
        return [request.method for request in self.requests]


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(BASE_URL, headers={"X-Trino-User": "alice", "X-Trino-Source": "tests"})


@pytest.fixture
def make_client(config: ClientConfig) -> Callable[..., tuple[Trino, ScriptedCoordinator]]:
    """Factory for a client talking to a ScriptedCoordinator."""

    def factory(responses: list[Any], client_config: ClientConfig | None = None):
        coordinator = ScriptedCoordinator(responses)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(coordinator))
        return Trino(client_config or config, http_client=http_client), coordinator

    return factory


@pytest.fixture
def coordinator():
    """A fresh in-memory emulator coordinator."""
    from trinoduck.server import Coordinator

    coordinator = Coordinator()
    yield coordinator
    coordinator.close()


@pytest.fixture
async def trino(coordinator):
    """A client connected in-process to the ``coordinator`` fixture."""
    from trinoduck import local_trino

    async with local_trino(coordinator=coordinator) as client:
        yield client
