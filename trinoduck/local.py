"""In-process emulator for tests.

``local_trino`` wires a :class:`~trinoduck.client.Trino` client straight to
an emulator application through ``httpx.ASGITransport``: no port, no thread,
no network.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

import httpx

from .client import ClientConfig, Trino
from .protocol import headers as h

if TYPE_CHECKING:
    from .server import Coordinator

LOCAL_URL = "http://trinoduck"
LOCAL_USER = "trinoduck"


@asynccontextmanager
async def local_trino(
    config: ClientConfig | None = None,
    *,
    coordinator: Coordinator | None = None,
    page_size: int | None = None,
) -> AsyncIterator[Trino]:
    """Yield a client connected to an in-process emulator.

    Args:
        config: Client configuration. Defaults to user ``trinoduck``.
        coordinator: Coordinator to serve from, shared with the caller so it
            can be seeded. Defaults to a new in-memory one, closed on exit.
        page_size: Rows per result page of the new coordinator. Only valid
            when ``coordinator`` is not given.

    Example:
        >>> async with local_trino() as trino:
        ...     rows = unwrap(await trino.query("SELECT 1"))
    """
    from .server import Coordinator, create_app

    if coordinator is not None and page_size is not None:
        raise ValueError("page_size only applies to a new coordinator")

    owns_coordinator = coordinator is None
    if coordinator is None:
        coordinator = Coordinator() if page_size is None else Coordinator(page_size=page_size)
    if config is None:
        config = ClientConfig(LOCAL_URL, headers={h.USER: LOCAL_USER, h.SOURCE: "trinoduck-local"})

    try:
        transport = httpx.ASGITransport(app=create_app(coordinator))
        async with httpx.AsyncClient(transport=transport) as http_client:
            async with Trino(config, http_client=http_client) as trino:
                yield trino
    finally:
        if owns_coordinator:
            coordinator.close()
