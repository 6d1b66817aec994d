"""Statement protocol engine.

Implements the Trino client REST protocol:
https://trino.io/docs/current/develop/client-protocol.html

A statement is submitted with ``POST /v1/statement``; the coordinator answers
with the first chunk of results and a ``nextUri``. The client keeps fetching
``nextUri`` until it disappears, echoing the session headers it was told to
set along the way.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, AsyncIterator, Mapping, Self

import httpx

from ..protocol import URL_STATEMENT_PATH
from ..protocol import headers as h
from .config import ClientConfig, normalize_headers
from .errors import QueryErrorResult, fetch_error, http_error
from .results import (
    CancelResult,
    Column,
    Err,
    Ok,
    QueryResult,
    QueryResults,
    QueryRows,
    QueryWarning,
    parse_statement_payload,
)
from .session import SessionState

logger = logging.getLogger(__name__)

# Failures of the request itself (connection refused, DNS, malformed URL...)
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class Trino:
    """Async client for the Trino statement protocol.

    Session state (catalog, schema, session properties, prepared statements,
    transaction, role, impersonated user) is scoped to the client: every
    query issued through one instance reads and updates the same
    :class:`SessionState`. Queries running concurrently on one client
    therefore see each other's directives as responses arrive. Use one
    client per logical session when that matters; clients may share an
    ``httpx.AsyncClient``.

    Example::

        config = ClientConfig("http://localhost:8080", headers={"X-Trino-User": "me"})
        async with Trino(config) as trino:
            async for result in trino.execute_query("SELECT 1"):
                ...
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        session: SessionState | None = None,
    ) -> None:
        """Create a client.

        Args:
            config: Immutable client configuration.
            http_client: Transport to use. When omitted the client creates
                one and closes it in :meth:`aclose`.
            session: Session state to start from. Defaults to an empty one.
        """
        self._config = config
        self._http = http_client if http_client is not None else httpx.AsyncClient()
        self._owns_http = http_client is None
        self._session = session if session is not None else SessionState(default_user=config.user)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def statement_url(self) -> str:
        return f"{self._config.base_url}{URL_STATEMENT_PATH}"

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def build_headers(self, overrides: Mapping[str, str | None] | None = None) -> dict[str, str]:
        """Compute request headers.

        Precedence, lowest first: configured defaults, session state,
        ``overrides``, authorization. Headers whose value is ``None`` are
        not sent.
        """
        headers: dict[str, str | None] = {
            **self._config.headers,
            **self._session.snapshot(),
            **normalize_headers(overrides),
        }
        authorization = self._config.authorization_header()
        if authorization is not None:
            headers[h.AUTHORIZATION] = authorization
        return {name: value for name, value in headers.items() if value is not None}

    async def execute_query(
        self,
        sql: str,
        headers: Mapping[str, str | None] | None = None,
    ) -> AsyncIterator[QueryResult]:
        """Execute a statement and yield one result per protocol round trip.

        Nothing is sent until the first item is requested, and each further
        item costs exactly one request. The iterator yields zero or more
        ``Ok`` results followed by at most one ``Err``, after which it stops.

        Args:
            sql: Statement text, sent verbatim.
            headers: Extra headers for the submission request only; they are
                not repeated when following ``nextUri``.

        Yields:
            ``Ok(QueryResults)`` or ``Err(FetchError | HttpError | UserError
            | InternalError | ExternalError | InsufficientResourcesError)``.
        """
        request_headers = self.build_headers(headers)
        request_headers[h.CONTENT_TYPE] = "text/plain"
        result = await self._request("POST", self.statement_url, request_headers, content=sql)
        yield result

        while isinstance(result, Ok) and result.value.next_uri:
            result = await self._request("GET", result.value.next_uri, self.build_headers())
            yield result

    async def cancel_query(self, cancel_uri: str) -> CancelResult:
        """Ask the coordinator to stop a statement.

        ``cancel_uri`` is a ``partialCancelUri`` or ``nextUri`` from a
        previous result. Iteration of the statement is not interrupted: the
        consumer sees the cancellation as a later ``USER_CANCELED`` error.
        """
        logger.debug("DELETE %s", cancel_uri)
        try:
            response = await self._http.request("DELETE", cancel_uri, headers=self.build_headers())
        except TRANSPORT_ERRORS as e:
            logger.debug("Cancel request failed: %r", e)
            return Err(fetch_error(e))

        if not response.is_success:
            return Err(http_error(response))
        return Ok(None)

    async def query(
        self,
        sql: str,
        headers: Mapping[str, str | None] | None = None,
    ) -> Ok[QueryRows] | Err[QueryErrorResult]:
        """Execute a statement and collect every page.

        Returns the first error met, or all rows with the last column list,
        statistics and update information reported by the coordinator.
        Warnings of every page are kept, each once.
        """
        columns: list[Column] = []
        rows: list[list[Any]] = []
        warnings: list[QueryWarning] = []
        last: QueryResults | None = None

        async for result in self.execute_query(sql, headers):
            if isinstance(result, Err):
                return result
            last = result.value
            if last.columns:
                columns = last.columns
            if last.data:
                rows.extend(last.data)
            warnings.extend(warning for warning in last.warnings if warning not in warnings)

        if last is None:
            raise RuntimeError(f"No response for statement: {sql!r}")
        return Ok(
            QueryRows(
                id=last.id,
                columns=columns,
                rows=rows,
                stats=last.stats,
                warnings=warnings,
                update_type=last.update_type,
                update_count=last.update_count,
            )
        )

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: str | None = None,
    ) -> QueryResult:
        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, headers=headers, content=content)
        except TRANSPORT_ERRORS as e:
            logger.debug("%s %s failed: %r", method, url, e)
            return Err(fetch_error(e))

        if not response.is_success:
            logger.debug("%s %s returned HTTP %s", method, url, response.status_code)
            return Err(http_error(response))

        self._session.merge(response.headers)

        try:
            parsed = parse_statement_payload(response.json())
        except ValueError as e:
            # JSONDecodeError and ProtocolParseError
            logger.debug("Unparseable statement payload from %s: %r", url, e)
            return Err(fetch_error(e))

        if isinstance(parsed, QueryResults):
            return Ok(parsed)
        logger.debug("Statement failed: %s %s", parsed.error_type, parsed.error_name)
        return Err(parsed)

    def __repr__(self) -> str:
        return f"Trino(base_url={self._config.base_url!r})"
