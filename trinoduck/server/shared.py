"""Shared state and utilities for the trinoduck server.

This module contains:
- The shared coordinator instance used by the module-level app
- Common utilities used across routes
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .coordinator import DEFAULT_PAGE_SIZE, Coordinator

if TYPE_CHECKING:
    from starlette.requests import Request


def page_size_from_env() -> int:
    return int(os.getenv("TRINODUCK_PAGE_SIZE", str(DEFAULT_PAGE_SIZE)))


def db_path_from_env() -> str:
    return os.getenv("TRINODUCK_DB_PATH", ":memory:")


# Shared coordinator instance
# Use TRINODUCK_DB_PATH for persistence, or in-memory by default
shared_coordinator = Coordinator(db_file=db_path_from_env(), page_size=page_size_from_env())


def get_coordinator(request: Request) -> Coordinator:
    """Coordinator of the application serving ``request``."""
    return request.app.state.coordinator
