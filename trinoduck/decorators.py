import inspect
from functools import wraps

from .local import local_trino


def mock_trino(func):
    """
    Decorator to run an async function against an in-process emulator.

    The function receives the connected client as the ``trino`` keyword
    argument; the parameter is hidden from the visible signature so pytest
    does not look for a fixture of that name.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        async with local_trino() as trino:
            return await func(*args, trino=trino, **kwargs)

    signature = inspect.signature(func)
    wrapper.__signature__ = signature.replace(
        parameters=[p for p in signature.parameters.values() if p.name != "trino"]
    )
    return wrapper
