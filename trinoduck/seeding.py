"""Data seeding utilities for trinoduck - making test data easy!"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pandas as pd

if TYPE_CHECKING:
    from .server import Coordinator


def seed_table(
    coordinator: Coordinator,
    table_name: str,
    data: pd.DataFrame | dict[str, list] | list[dict[str, Any]],
    drop_if_exists: bool = True,
) -> int:
    """
    Seed an emulator table with data from a pandas DataFrame or dict.

    Args:
        coordinator: Emulator coordinator to seed
        table_name: Name of the table to create/populate, optionally
            schema-qualified (``sales.orders``)
        data: Data as pandas DataFrame, dict of lists, or list of dicts
        drop_if_exists: If True, drops existing table first (default: True)

    Returns:
        Number of rows inserted

    Example:
        >>> from trinoduck import local_trino, seed_table
        >>> from trinoduck.server import Coordinator
        >>>
        >>> coordinator = Coordinator()
        >>> seed_table(coordinator, 'employees', {
        ...     'id': [1, 2, 3],
        ...     'name': ['Alice', 'Bob', 'Carol'],
        ...     'salary': [95000, 75000, 105000]
        ... })
        3
        >>> async with local_trino(coordinator=coordinator) as trino:
        ...     await trino.query("SELECT name FROM employees")
    """
    # Convert to DataFrame if needed
    if isinstance(data, (dict, list)):
        df = pd.DataFrame(data)
    else:
        df = data

    if len(df) == 0:
        raise ValueError("Cannot seed table with empty data")

    view_name = f"seed_{uuid.uuid4().hex}"
    with coordinator.duck_conn.cursor() as cursor:
        if drop_if_exists:
            cursor.execute(f"DROP TABLE IF EXISTS {table_name}")

        # Let DuckDB infer column types from the DataFrame
        cursor.register(view_name, df)
        try:
            cursor.execute(f"CREATE TABLE {table_name} AS SELECT * FROM {view_name}")
        finally:
            cursor.unregister(view_name)

    return len(df)
