"""Route definitions for the statement protocol.

Implements the coordinator endpoints used by clients:
    /v1/statement - Statement submission
    /v1/statement/{queued|executing}/{queryId}/{token} - Result pages and cancellation
"""

from starlette.routing import Route

from ..protocol import URL_STATEMENT_PATH
from . import handlers

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_statement_routes() -> list[Route]:
    """Get all statement protocol routes.

    Returns:
        List of Starlette Route objects
    """
    statement_path = URL_STATEMENT_PATH + "/{kind}/{query_id}/{token:int}"
    return [
        Route(URL_STATEMENT_PATH, handlers.submit_statement, methods=["POST"]),
        Route(statement_path, handlers.get_statement, methods=["GET"]),
        Route(statement_path, handlers.cancel_statement, methods=["DELETE"]),
        Route("/{path:path}", handlers.fallback_route, methods=ALL_METHODS),
    ]
