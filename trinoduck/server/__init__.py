"""trinoduck server - Trino coordinator emulator backed by DuckDB.

Modules:
    server: Application factory and CLI entry point
    handlers: Statement protocol request handlers
    routes: Route definitions
    coordinator: Shared DuckDB database, statements and transactions
    statement_manager: Statement storage and lifecycle
    session_commands: USE, SET SESSION, PREPARE, transactions...
    executor: Transpilation, execution and error mapping
    types: DuckDB to Trino type mapping
    serializers: JSON encoding of result values
    middleware: HTTP middleware (error handling)
    shared: Shared state (coordinator)
"""

from .coordinator import Coordinator
from .errors import ServerError, StatementError
from .middleware import ErrorHandlingMiddleware
from .routes import get_statement_routes
from .server import app, create_app
from .shared import shared_coordinator
from .statement_manager import Statement, StatementManager

__all__ = [
    # Application
    "app",
    "create_app",
    # Routes
    "get_statement_routes",
    # Middleware
    "ErrorHandlingMiddleware",
    # Coordinator
    "Coordinator",
    "Statement",
    "StatementManager",
    "shared_coordinator",
    # Errors
    "ServerError",
    "StatementError",
]
