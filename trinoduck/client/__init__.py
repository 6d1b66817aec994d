"""Async client for the Trino statement protocol.

Example:
    from trinoduck.client import ClientConfig, Trino, unwrap

    async with Trino(ClientConfig("http://localhost:8080", headers={"X-Trino-User": "me"})) as trino:
        rows = unwrap(await trino.query("SELECT 1"))
"""

from .config import AuthConfig, BasicAuth, BearerAuth, ClientConfig
from .errors import (
    ErrorLocation,
    ExternalError,
    FailureInfo,
    FetchError,
    HttpError,
    InsufficientResourcesError,
    InternalError,
    ProtocolParseError,
    QueryError,
    QueryErrorResult,
    TrinoQueryError,
    TrinoResultError,
    UnknownErrorTypeError,
    UserError,
    classify_query_error,
    describe_error,
)
from .results import (
    CancelResult,
    ClientTypeSignature,
    Column,
    Err,
    Ok,
    QueryResult,
    QueryResults,
    QueryRows,
    QueryWarning,
    StageStats,
    StatementStats,
    TypeSignatureParameter,
    WarningCode,
    parse_statement_payload,
    unwrap,
)
from .session import SessionState, merge_session_headers
from .trino import Trino

__all__ = [
    "AuthConfig",
    "BasicAuth",
    "BearerAuth",
    "CancelResult",
    "ClientConfig",
    "ClientTypeSignature",
    "Column",
    "Err",
    "ErrorLocation",
    "ExternalError",
    "FailureInfo",
    "FetchError",
    "HttpError",
    "InsufficientResourcesError",
    "InternalError",
    "Ok",
    "ProtocolParseError",
    "QueryError",
    "QueryErrorResult",
    "QueryResult",
    "QueryResults",
    "QueryRows",
    "QueryWarning",
    "SessionState",
    "StageStats",
    "StatementStats",
    "Trino",
    "TrinoQueryError",
    "TrinoResultError",
    "TypeSignatureParameter",
    "UnknownErrorTypeError",
    "UserError",
    "WarningCode",
    "classify_query_error",
    "describe_error",
    "merge_session_headers",
    "parse_statement_payload",
    "unwrap",
]
