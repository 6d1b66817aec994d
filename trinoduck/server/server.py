"""Application factory and CLI entry point."""

from __future__ import annotations

import argparse
import logging

from .coordinator import Coordinator
from .shared import db_path_from_env, page_size_from_env, shared_coordinator

try:
    from starlette.applications import Starlette
    from uvicorn import run
except ImportError as e:
    raise ImportError(
        "Optional dependencies for the server are not installed. "
        "Install them using one of the following commands:\n"
        "  - With uv: 'uv sync --extra server'\n"
        "  - With pip: 'pip install trinoduck[server]'"
    ) from e

from .middleware import ErrorHandlingMiddleware
from .routes import get_statement_routes


def create_app(coordinator: Coordinator | None = None, debug: bool = False) -> Starlette:
    """Create the emulator application.

    Args:
        coordinator: Coordinator serving the statements. Defaults to the
            shared one configured from the environment.
        debug: Starlette debug mode
    """
    app = Starlette(debug=debug, routes=get_statement_routes())
    app.state.coordinator = coordinator or shared_coordinator
    app.add_middleware(ErrorHandlingMiddleware)
    return app


app = create_app()


# CLI Entry Point
def main() -> None:
    parser = argparse.ArgumentParser(description="Run the trinoduck coordinator emulator.")

    parser.add_argument(
        "--host", type=str, default="127.0.0.1", help="Host to run the server on (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", type=int, default=8080, help="Port to run the server on (default: 8080)"
    )

    parser.add_argument(
        "--db-file",
        type=str,
        default=db_path_from_env(),
        help="DuckDB database file (default: $TRINODUCK_DB_PATH or in-memory)",
    )

    parser.add_argument(
        "--page-size",
        type=int,
        default=page_size_from_env(),
        help="Rows per result page (default: $TRINODUCK_PAGE_SIZE or 1000)",
    )

    parser.add_argument(
        "--debug", action="store_true", help="Enable debug mode (default: False)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    coordinator = Coordinator(db_file=args.db_file, page_size=args.page_size)
    application = create_app(coordinator, debug=args.debug)

    # Run the server with the provided arguments
    run(application, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
