"""Session state reconciliation.

The coordinator keeps no per-connection state. Instead, statements such as
``USE``, ``SET SESSION``, ``PREPARE`` or ``START TRANSACTION`` answer with
directive headers (``X-Trino-Set-Catalog``, ``X-Trino-Added-Prepare``...) and
the client must echo the resulting values as request headers on every later
request. :func:`merge_session_headers` folds one response's directives into
the current request-header mapping; :class:`SessionState` holds that mapping
for a client.
"""

from __future__ import annotations

import threading
from typing import Iterable, Mapping, Tuple, Union
from urllib.parse import unquote_plus

from ..protocol import headers as h

ResponseHeaders = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

# directive -> request header it replaces
_REPLACE_DIRECTIVES = {
    h.SET_CATALOG: h.CATALOG,
    h.SET_SCHEMA: h.SCHEMA,
    h.SET_PATH: h.PATH,
    h.SET_ROLE: h.ROLE,
    h.STARTED_TRANSACTION_ID: h.TRANSACTION_ID,
}


def collect_directives(response_headers: ResponseHeaders) -> dict[str, list[str]]:
    """Group response header values by lower-cased name, keeping repeats."""
    if hasattr(response_headers, "multi_items"):
        # httpx.Headers: keep repeated headers apart instead of comma-joined
        items = response_headers.multi_items()
    elif isinstance(response_headers, Mapping):
        items = response_headers.items()
    else:
        items = response_headers

    directives: dict[str, list[str]] = {}
    for name, value in items:
        if value:
            directives.setdefault(name.lower(), []).append(value)
    return directives


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def _append_entries(current: str | None, values: list[str]) -> str:
    entries = _split(current)
    for value in values:
        entries.extend(_split(value))
    return ",".join(entries)


def _remove_entries(current: str | None, values: list[str]) -> str | None:
    keys = [key for value in values for key in _split(value)]
    entries = [
        entry
        for entry in _split(current)
        if not any(entry.startswith(f"{key}=") for key in keys)
    ]
    return ",".join(entries) or None


def _set_or_delete(headers: dict[str, str], name: str, value: str | None) -> None:
    if value is None:
        headers.pop(name, None)
    else:
        headers[name] = value


def merge_session_headers(
    current: Mapping[str, str],
    response_headers: ResponseHeaders,
    default_user: str | None = None,
) -> dict[str, str]:
    """Apply the session directives of one response to ``current``.

    Args:
        current: Current session request headers (lower-case names).
        response_headers: Headers of a coordinator response. Names are
            matched case-insensitively; unrecognized headers are ignored.
        default_user: The client's configured user, recorded as the original
            user the first time the coordinator switches the acting user.

    Returns:
        A new mapping. ``current`` is never modified.
    """
    directives = collect_directives(response_headers)
    merged = {name.lower(): value for name, value in current.items()}

    for directive, target in _REPLACE_DIRECTIVES.items():
        if directive in directives:
            merged[target] = directives[directive][-1]

    if h.SET_SESSION in directives:
        merged[h.SESSION] = _append_entries(merged.get(h.SESSION), directives[h.SET_SESSION])
    if h.CLEAR_SESSION in directives:
        _set_or_delete(
            merged, h.SESSION, _remove_entries(merged.get(h.SESSION), directives[h.CLEAR_SESSION])
        )

    if h.ADDED_PREPARE in directives:
        merged[h.PREPARED_STATEMENT] = _append_entries(
            merged.get(h.PREPARED_STATEMENT), directives[h.ADDED_PREPARE]
        )
    if h.DEALLOCATED_PREPARE in directives:
        _set_or_delete(
            merged,
            h.PREPARED_STATEMENT,
            _remove_entries(merged.get(h.PREPARED_STATEMENT), directives[h.DEALLOCATED_PREPARE]),
        )

    if h.CLEAR_TRANSACTION_ID in directives:
        merged.pop(h.TRANSACTION_ID, None)

    if h.SET_AUTHORIZATION_USER in directives:
        merged[h.USER] = directives[h.SET_AUTHORIZATION_USER][-1]
        if h.ORIGINAL_USER not in merged and default_user:
            merged[h.ORIGINAL_USER] = default_user
    if h.RESET_AUTHORIZATION_USER in directives and h.ORIGINAL_USER in merged:
        merged[h.USER] = merged.pop(h.ORIGINAL_USER)

    return merged


def _parse_assignments(value: str | None) -> dict[str, str]:
    assignments = {}
    for entry in _split(value):
        key, _, raw = entry.partition("=")
        assignments[key.strip()] = unquote_plus(raw.strip())
    return assignments


class SessionState:
    """Session request headers of one client.

    Every merge and every read goes through a lock, so one state may be
    shared by queries running on different threads. Queries that run
    concurrently still observe each other's directives in arrival order.
    """

    def __init__(
        self,
        headers: Mapping[str, str] | None = None,
        default_user: str | None = None,
    ) -> None:
        self._headers: dict[str, str] = {
            name.lower(): value for name, value in (headers or {}).items()
        }
        self._default_user = default_user
        self._lock = threading.Lock()

    def merge(self, response_headers: ResponseHeaders) -> None:
        """Fold the directives of a response into this state."""
        with self._lock:
            self._headers = merge_session_headers(
                self._headers, response_headers, self._default_user
            )

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the current session request headers."""
        with self._lock:
            return dict(self._headers)

    def reset(self) -> None:
        """Forget every session directive received so far."""
        with self._lock:
            self._headers = {}

    def get(self, name: str) -> str | None:
        with self._lock:
            return self._headers.get(name.lower())

    @property
    def catalog(self) -> str | None:
        return self.get(h.CATALOG)

    @property
    def schema(self) -> str | None:
        return self.get(h.SCHEMA)

    @property
    def path(self) -> str | None:
        return self.get(h.PATH)

    @property
    def role(self) -> str | None:
        return self.get(h.ROLE)

    @property
    def transaction_id(self) -> str | None:
        return self.get(h.TRANSACTION_ID)

    @property
    def user(self) -> str | None:
        return self.get(h.USER)

    @property
    def original_user(self) -> str | None:
        return self.get(h.ORIGINAL_USER)

    @property
    def session_properties(self) -> dict[str, str]:
        return _parse_assignments(self.get(h.SESSION))

    @property
    def prepared_statements(self) -> dict[str, str]:
        return _parse_assignments(self.get(h.PREPARED_STATEMENT))

    def __repr__(self) -> str:
        return f"SessionState({self.snapshot()!r})"
