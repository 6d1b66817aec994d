"""Server-side exceptions.

ServerError is a request-level failure (bad request, unknown query) answered
with a non-2xx status. StatementError is a statement failure reported inside
the protocol payload, with HTTP 200 and state ``FAILED``, as Trino does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..protocol.error_codes import ERROR_CODES


@dataclass
class ServerError(Exception):
    """Exception raised for request errors with an HTTP status code."""

    status_code: int
    message: str


class StatementError(Exception):
    """A statement failed; carries the Trino error name and location."""

    def __init__(
        self,
        error_name: str,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        exception_type: str = "io.trino.spi.TrinoException",
    ) -> None:
        super().__init__(message)
        if error_name not in ERROR_CODES:
            raise KeyError(f"Unknown error name: {error_name}")
        self.error_name = error_name
        self.message = message
        self.line = line
        self.column = column
        self.exception_type = exception_type

    @property
    def error_code(self) -> int:
        return ERROR_CODES[self.error_name][0]

    @property
    def error_type(self) -> str:
        return ERROR_CODES[self.error_name][1]

    def to_json(self) -> dict[str, Any]:
        """Render the ``error`` object of a statement payload."""
        location = None
        if self.line is not None:
            location = {"lineNumber": self.line, "columnNumber": self.column or 1}

        failure_info: dict[str, Any] = {
            "type": self.exception_type,
            "message": self.message,
            "suppressed": [],
            "stack": [],
        }
        error: dict[str, Any] = {
            "message": self.message,
            "errorCode": self.error_code,
            "errorName": self.error_name,
            "errorType": self.error_type,
            "failureInfo": failure_info,
        }
        if location:
            error["errorLocation"] = location
            failure_info["errorLocation"] = location
        return error
