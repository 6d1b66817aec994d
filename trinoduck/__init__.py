from .client import (
    BasicAuth,
    BearerAuth,
    ClientConfig,
    Err,
    Ok,
    SessionState,
    Trino,
    unwrap,
)
from .decorators import mock_trino
from .local import local_trino


# Lazy import for seeding (requires pandas)
def __getattr__(name: str):
    if name == "seed_table":
        from .seeding import seed_table
        return seed_table
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "BasicAuth",
    "BearerAuth",
    "ClientConfig",
    "Err",
    "Ok",
    "SessionState",
    "Trino",
    "local_trino",
    "mock_trino",
    "seed_table",
    "unwrap",
]
