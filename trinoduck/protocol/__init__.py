"""Trino client protocol vocabulary.

Modules:
    headers: Request and response header names
    error_codes: Standard error names and codes
    types: Standard column type names
"""

from . import error_codes, headers, types

URL_STATEMENT_PATH = "/v1/statement"

__all__ = [
    "URL_STATEMENT_PATH",
    "error_codes",
    "headers",
    "types",
]
