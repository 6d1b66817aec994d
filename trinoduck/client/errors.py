"""Error classification.

Failures of a query are values, not exceptions. Every failure is one of six
kinds, told apart by the ``tag`` attribute (or by ``isinstance``):

* :class:`FetchError`: the request could not be sent, the connection failed,
  or a successful response body could not be parsed.
* :class:`HttpError`: the coordinator answered with a non-2xx status.
* :class:`UserError`, :class:`InternalError`, :class:`ExternalError`,
  :class:`InsufficientResourcesError`: the statement failed and the
  coordinator reported why (``error`` field of the payload).

The exceptions at the bottom of this module are reserved for contract
violations and caller-side conveniences.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Mapping, Union

import httpx

from ..protocol import error_codes


class ProtocolParseError(ValueError):
    """A 2xx response body did not have the shape of a statement payload."""


class UnknownErrorTypeError(RuntimeError):
    """The coordinator reported an ``errorType`` outside the protocol."""

    def __init__(self, error_type: Any, payload: Mapping[str, Any]) -> None:
        super().__init__(f"Unknown Trino errorType: {error_type!r}")
        self.error_type = error_type
        self.payload = payload


@dataclass(frozen=True)
class ErrorLocation:
    line_number: int
    column_number: int

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> ErrorLocation:
        return cls(
            line_number=int(payload["lineNumber"]),
            column_number=int(payload["columnNumber"]),
        )


@dataclass(frozen=True)
class FailureInfo:
    """Server-side failure chain, including the Java stack trace."""

    type: str
    message: str | None = None
    cause: FailureInfo | None = None
    suppressed: list[FailureInfo] = field(default_factory=list)
    stack: list[str] = field(default_factory=list)
    error_location: ErrorLocation | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> FailureInfo:
        cause = payload.get("cause")
        location = payload.get("errorLocation")
        return cls(
            type=payload["type"],
            message=payload.get("message"),
            cause=cls.from_json(cause) if cause else None,
            suppressed=[cls.from_json(item) for item in payload.get("suppressed") or []],
            stack=list(payload.get("stack") or []),
            error_location=ErrorLocation.from_json(location) if location else None,
        )


@dataclass(frozen=True)
class FetchError:
    """The request failed before a usable response was obtained."""

    error: BaseException
    tag: ClassVar[Literal["FetchError"]] = "FetchError"


@dataclass(frozen=True)
class HttpError:
    """The coordinator answered with a non-2xx status.

    The body is left untouched; inspect ``response`` for details.
    """

    response: httpx.Response
    tag: ClassVar[Literal["HttpError"]] = "HttpError"

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def reason_phrase(self) -> str:
        return self.response.reason_phrase


@dataclass(frozen=True)
class QueryError:
    """Failure reported by the coordinator in the ``error`` field."""

    message: str
    error_code: int
    error_name: str
    error_type: str
    sql_state: str | None = None
    error_location: ErrorLocation | None = None
    failure_info: FailureInfo | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> QueryError:
        location = payload.get("errorLocation")
        failure = payload.get("failureInfo")
        return cls(
            message=payload.get("message", ""),
            error_code=int(payload.get("errorCode", 0)),
            error_name=payload.get("errorName", ""),
            error_type=payload["errorType"],
            sql_state=payload.get("sqlState"),
            error_location=ErrorLocation.from_json(location) if location else None,
            failure_info=FailureInfo.from_json(failure) if failure else None,
        )


@dataclass(frozen=True)
class UserError(QueryError):
    """Invalid SQL or incorrect usage (TABLE_NOT_FOUND, USER_CANCELED...)."""

    tag: ClassVar[Literal["UserError"]] = "UserError"


@dataclass(frozen=True)
class InternalError(QueryError):
    tag: ClassVar[Literal["InternalError"]] = "InternalError"


@dataclass(frozen=True)
class ExternalError(QueryError):
    """Failure in a system outside the engine, usually a connector."""

    tag: ClassVar[Literal["ExternalError"]] = "ExternalError"


@dataclass(frozen=True)
class InsufficientResourcesError(QueryError):
    tag: ClassVar[Literal["InsufficientResourcesError"]] = "InsufficientResourcesError"


TrinoQueryError = Union[UserError, InternalError, ExternalError, InsufficientResourcesError]
QueryErrorResult = Union[FetchError, HttpError, TrinoQueryError]


def fetch_error(error: BaseException) -> FetchError:
    return FetchError(error)


def http_error(response: httpx.Response) -> HttpError:
    return HttpError(response)


def classify_query_error(payload: Mapping[str, Any]) -> TrinoQueryError:
    """Turn the ``error`` object of a statement payload into its error kind.

    Raises:
        UnknownErrorTypeError: ``errorType`` is not one of the four protocol
            values. This is a coordinator contract breach and is never
            mapped onto a known kind.
    """
    match payload.get("errorType"):
        case error_codes.USER_ERROR:
            return UserError.from_json(payload)
        case error_codes.INTERNAL_ERROR:
            return InternalError.from_json(payload)
        case error_codes.EXTERNAL:
            return ExternalError.from_json(payload)
        case error_codes.INSUFFICIENT_RESOURCES:
            return InsufficientResourcesError.from_json(payload)
        case other:
            raise UnknownErrorTypeError(other, payload)


class TrinoResultError(Exception):
    """Raised by :func:`~trinoduck.client.unwrap` for an ``Err`` result."""

    def __init__(self, error: QueryErrorResult) -> None:
        super().__init__(describe_error(error))
        self.error = error


def describe_error(error: QueryErrorResult) -> str:
    """One-line human readable description of an error variant."""
    if isinstance(error, FetchError):
        return f"Fetch error: {error.error!r}"
    if isinstance(error, HttpError):
        return f"HTTP error: {error.status_code} {error.reason_phrase}"
    return f"Query error ({error.error_type}/{error.error_name}): {error.message}"
