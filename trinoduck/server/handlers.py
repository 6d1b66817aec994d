"""HTTP request handlers for the statement protocol.

Implements the coordinator side of the Trino client protocol:
https://trino.io/docs/current/develop/client-protocol.html

Handlers:
    submit_statement: POST /v1/statement
    get_statement: GET /v1/statement/{queued|executing}/{queryId}/{token}
    cancel_statement: DELETE /v1/statement/{queued|executing}/{queryId}/{token}
    fallback_route: anything else
"""

from __future__ import annotations

import logging
from base64 import b64decode
from typing import TYPE_CHECKING, Any, Mapping

from starlette.concurrency import run_in_threadpool

from ..protocol import URL_STATEMENT_PATH
from ..protocol import headers as h
from .errors import ServerError
from .shared import get_coordinator
from .statement_manager import FAILED, FINISHED, QUEUED, RUNNING, Statement

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

STATEMENT_KINDS = ("queued", "executing")


def _session_context(headers: Mapping[str, str]) -> dict[str, str]:
    """Collect the ``X-Trino-*`` request headers a statement runs with."""
    context = {name.lower(): value for name, value in headers.items() if name.lower().startswith(h.PREFIX)}
    if not context.get(h.USER):
        # fall back to the basic auth principal, as an authenticating coordinator does
        authorization = headers.get(h.AUTHORIZATION, "")
        if authorization.startswith("Basic "):
            try:
                user = b64decode(authorization[len("Basic ") :]).decode("utf-8").partition(":")[0]
            except ValueError:
                raise ServerError(status_code=401, message="Malformed Authorization header") from None
            if user:
                context[h.USER] = user
    return context


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _statement_uri(base_url: str, kind: str, stmt: Statement, token: int) -> str:
    return f"{base_url}{URL_STATEMENT_PATH}/{kind}/{stmt.id}/{token}"


def _stats(stmt: Statement, state: str, page: int = 0) -> dict[str, Any]:
    pages = stmt.get_page_count() if stmt.state == FINISHED else 0
    completed = min(page + 1, pages)
    stats: dict[str, Any] = {
        "state": state,
        "queued": state == QUEUED,
        "scheduled": state != QUEUED,
        "nodes": 1,
        "totalSplits": pages,
        "queuedSplits": 0,
        "runningSplits": pages - completed,
        "completedSplits": completed,
        "cpuTimeMillis": stmt.elapsed_millis,
        "wallTimeMillis": stmt.elapsed_millis,
        "queuedTimeMillis": 0,
        "elapsedTimeMillis": stmt.elapsed_millis,
        "processedRows": len(stmt.rows),
        "processedBytes": 0,
        "physicalInputBytes": 0,
        "peakMemoryBytes": 0,
        "spilledBytes": 0,
    }
    if pages:
        stats["progressPercentage"] = 100.0 * completed / pages
    return stats


def _query_results(
    stmt: Statement,
    base_url: str,
    state: str,
    *,
    page: int = 0,
    next_uri: str | None = None,
    data: list[list[Any]] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": stmt.id,
        "infoUri": f"{base_url}/ui/query.html?{stmt.id}",
        "stats": _stats(stmt, state, page),
        "warnings": [],
    }
    if next_uri:
        payload["nextUri"] = next_uri
        payload["partialCancelUri"] = next_uri.replace("/queued/", "/executing/")

    if stmt.state == FINISHED:
        payload["columns"] = [column.to_json() for column in stmt.columns or []]
        if data:
            payload["data"] = data
        if stmt.update_type:
            payload["updateType"] = stmt.update_type
        if stmt.update_count is not None:
            payload["updateCount"] = stmt.update_count

    if stmt.state == FAILED and stmt.error is not None:
        payload["error"] = stmt.error.to_json()
        if stmt.update_type:
            payload["updateType"] = stmt.update_type
    return payload


async def submit_statement(request: Request) -> JSONResponse:
    """Submit a statement for execution.

    POST /v1/statement

    The body is the SQL text. The statement is queued; it runs when the
    client follows the returned ``nextUri``.
    """
    from starlette.responses import JSONResponse

    coordinator = get_coordinator(request)
    context = _session_context(request.headers)
    if not context.get(h.USER):
        raise ServerError(status_code=400, message="User must be set")

    body = await request.body()
    try:
        sql = body.decode("utf-8")
    except UnicodeDecodeError:
        raise ServerError(status_code=400, message="SQL statement must be UTF-8") from None
    if not sql.strip():
        raise ServerError(status_code=400, message="SQL statement is empty")

    stmt = coordinator.submit(sql, context)
    base_url = _base_url(request)
    return JSONResponse(
        _query_results(stmt, base_url, QUEUED, next_uri=_statement_uri(base_url, "queued", stmt, 1))
    )


async def get_statement(request: Request) -> JSONResponse:
    """Fetch the next result page of a statement.

    GET /v1/statement/{queued|executing}/{queryId}/{token}

    The first fetch executes the statement. Token ``n`` serves result page
    ``n - 1``; the last page has no ``nextUri`` and carries the session
    directives of the statement.
    """
    from starlette.responses import JSONResponse

    coordinator = get_coordinator(request)
    stmt = _lookup(request)
    token = request.path_params["token"]
    base_url = _base_url(request)

    await run_in_threadpool(coordinator.advance, stmt)

    if stmt.state == FAILED:
        stmt.delivered = True
        return JSONResponse(_query_results(stmt, base_url, FAILED))

    page = token - 1
    page_count = stmt.get_page_count()
    if page < 0 or page >= page_count:
        raise ServerError(status_code=410, message=f"Invalid token {token} for query {stmt.id}")

    data = stmt.get_page(page)
    if page + 1 < page_count:
        next_uri = _statement_uri(base_url, "executing", stmt, token + 1)
        return JSONResponse(
            _query_results(stmt, base_url, RUNNING, page=page, next_uri=next_uri, data=data)
        )

    stmt.delivered = True
    return JSONResponse(
        _query_results(stmt, base_url, FINISHED, page=page, data=data),
        headers=stmt.response_headers,
    )


async def cancel_statement(request: Request) -> Response:
    """Cancel a statement.

    DELETE /v1/statement/{queued|executing}/{queryId}/{token}

    The next fetch of the statement reports ``USER_CANCELED``.
    """
    from starlette.responses import Response

    stmt = _lookup(request)
    get_coordinator(request).statements.cancel_statement(stmt.id)
    logger.info("Cancel requested for query %s", stmt.id)
    return Response(status_code=204)


def _lookup(request: Request) -> Statement:
    kind = request.path_params["kind"]
    query_id = request.path_params["query_id"]
    if kind not in STATEMENT_KINDS:
        raise ServerError(status_code=404, message=f"Unknown statement path: {kind}")

    stmt = get_coordinator(request).statements.get_statement(query_id)
    if stmt is None:
        raise ServerError(status_code=404, message=f"Query not found: {query_id}")
    return stmt


async def fallback_route(request: Request) -> Response:
    """Fallback route to log unmatched requests."""
    from starlette.responses import PlainTextResponse

    logger.warning("Received unmatched request: %s %s", request.method, request.url)
    return PlainTextResponse("Not Found", status_code=404)
