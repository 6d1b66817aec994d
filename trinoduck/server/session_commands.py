"""Session statements.

The coordinator keeps no session: statements that change it (``USE``,
``SET SESSION``, ``PREPARE``, ``START TRANSACTION``...) are answered with
directive headers and the client sends the resulting values back on later
requests. These statements are recognised here, before SQL reaches DuckDB.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable, Mapping
from urllib.parse import quote_plus, unquote_plus

from ..protocol import headers as h
from .errors import StatementError
from .executor import ResultSet, bind_parameters

if TYPE_CHECKING:
    from .coordinator import Coordinator

IDENTIFIER = r'"(?:[^"]|"")+"|[A-Za-z_][\w$@]*'
STRING = r"'(?:[^']|'')*'"
_END = r"\s*;?\s*$"

CommandHandler = Callable[["re.Match[str]", Mapping[str, str], "Coordinator"], ResultSet]


def normalize_identifier(identifier: str) -> str:
    """Unquote a delimited identifier; lower-case a plain one."""
    if identifier.startswith('"'):
        return identifier[1:-1].replace('""', '"')
    return identifier.lower()


def _literal(value: str) -> str:
    value = value.strip()
    if value.startswith("'") and value.endswith("'"):
        return value[1:-1].replace("''", "'")
    return value


def parse_encoded_pairs(value: str | None) -> dict[str, str]:
    """Parse a ``name=url-encoded value,...`` request header."""
    pairs = {}
    for entry in (value or "").split(","):
        name, sep, encoded = entry.strip().partition("=")
        if sep:
            pairs[name.strip()] = unquote_plus(encoded.strip())
    return pairs


def transaction_id(context: Mapping[str, str]) -> str | None:
    value = context.get(h.TRANSACTION_ID)
    if not value or value.upper() == "NONE":
        return None
    return value


# =============================================================================
# Handlers
# =============================================================================


def _use(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    schema = normalize_identifier(match["schema"])
    if not coordinator.schema_exists(schema):
        raise StatementError("SCHEMA_NOT_FOUND", f"Schema does not exist: {schema}")
    headers = {h.SET_SCHEMA: schema}
    if match["catalog"]:
        headers[h.SET_CATALOG] = normalize_identifier(match["catalog"])
    return ResultSet.acknowledged("USE", headers)


def _set_session(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    name = match["name"].lower()
    value = _literal(match["value"])
    return ResultSet.acknowledged("SET SESSION", {h.SET_SESSION: f"{name}={quote_plus(value)}"})


def _reset_session(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    return ResultSet.acknowledged("RESET SESSION", {h.CLEAR_SESSION: match["name"].lower()})


def _set_path(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    return ResultSet.acknowledged("SET PATH", {h.SET_PATH: match["path"].strip()})


def _set_role(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    role = match["role"]
    catalog = normalize_identifier(match["catalog"]) if match["catalog"] else "system"
    if role.upper() in ("ALL", "NONE"):
        selected = role.upper()
    else:
        selected = f"ROLE{{{normalize_identifier(role)}}}"
    return ResultSet.acknowledged("SET ROLE", {h.SET_ROLE: f"{catalog}={quote_plus(selected)}"})


def _set_authorization(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    user = match["user"]
    user = _literal(user) if user.startswith("'") else normalize_identifier(user)
    return ResultSet.acknowledged("SET SESSION AUTHORIZATION", {h.SET_AUTHORIZATION_USER: user})


def _reset_authorization(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    return ResultSet.acknowledged("RESET SESSION AUTHORIZATION", {h.RESET_AUTHORIZATION_USER: "true"})


def _start_transaction(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    if transaction_id(context):
        raise StatementError("NOT_SUPPORTED", "Nested transactions not supported")
    started = coordinator.begin_transaction()
    return ResultSet.acknowledged("START TRANSACTION", {h.STARTED_TRANSACTION_ID: started})


def _end_transaction(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    current = transaction_id(context)
    if current is None:
        raise StatementError("NOT_IN_TRANSACTION", "No transaction in progress")
    verb = match["verb"].upper()
    coordinator.end_transaction(current, commit=verb == "COMMIT")
    return ResultSet.acknowledged(verb, {h.CLEAR_TRANSACTION_ID: "true"})


def _prepare(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    name = normalize_identifier(match["name"])
    statement = match["statement"].strip()
    return ResultSet.acknowledged("PREPARE", {h.ADDED_PREPARE: f"{name}={quote_plus(statement)}"})


def _deallocate(match: re.Match[str], context: Mapping[str, str], coordinator: Coordinator) -> ResultSet:
    name = normalize_identifier(match["name"])
    if name not in parse_encoded_pairs(context.get(h.PREPARED_STATEMENT)):
        raise StatementError("NOT_FOUND", f"Prepared statement not found: {name}")
    return ResultSet.acknowledged("DEALLOCATE", {h.DEALLOCATED_PREPARE: name})


def _command(pattern: str) -> re.Pattern[str]:
    return re.compile(r"^\s*" + pattern + _END, re.IGNORECASE | re.DOTALL)


# Order matters: SET SESSION AUTHORIZATION before SET SESSION
SESSION_COMMANDS: list[tuple[re.Pattern[str], CommandHandler]] = [
    (_command(rf"USE\s+(?:(?P<catalog>{IDENTIFIER})\.)?(?P<schema>{IDENTIFIER})"), _use),
    (_command(rf"SET\s+SESSION\s+AUTHORIZATION\s+(?P<user>{IDENTIFIER}|{STRING})"), _set_authorization),
    (_command(r"RESET\s+SESSION\s+AUTHORIZATION"), _reset_authorization),
    (_command(r"SET\s+SESSION\s+(?P<name>[\w.]+)\s*=\s*(?P<value>.+?)"), _set_session),
    (_command(r"RESET\s+SESSION\s+(?P<name>[\w.]+)"), _reset_session),
    (_command(r"SET\s+PATH\s+(?P<path>.+?)"), _set_path),
    (_command(rf"SET\s+ROLE\s+(?P<role>{IDENTIFIER})(?:\s+IN\s+(?P<catalog>{IDENTIFIER}))?"), _set_role),
    (_command(r"START\s+TRANSACTION(?:\s+.*?)?"), _start_transaction),
    (_command(r"(?P<verb>COMMIT|ROLLBACK)(?:\s+WORK)?"), _end_transaction),
    (_command(rf"PREPARE\s+(?P<name>{IDENTIFIER})\s+FROM\s+(?P<statement>.+?)"), _prepare),
    (_command(rf"DEALLOCATE\s+PREPARE\s+(?P<name>{IDENTIFIER})"), _deallocate),
]

EXECUTE = _command(rf"EXECUTE\s+(?P<name>{IDENTIFIER})(?:\s+USING\s+(?P<parameters>.+?))?")


def run_session_command(
    sql: str,
    context: Mapping[str, str],
    coordinator: Coordinator,
) -> ResultSet | None:
    """Run ``sql`` if it is a session statement.

    Returns:
        The statement result carrying the directive headers, or None when
        ``sql`` is not a session statement.
    """
    for pattern, handler in SESSION_COMMANDS:
        match = pattern.match(sql)
        if match:
            return handler(match, context, coordinator)
    return None


def resolve_prepared(sql: str, context: Mapping[str, str]) -> str:
    """Replace ``EXECUTE name [USING ...]`` by the prepared statement text.

    The statement is looked up in the request's prepared statement header;
    any other SQL is returned unchanged.
    """
    match = EXECUTE.match(sql)
    if not match:
        return sql

    name = normalize_identifier(match["name"])
    prepared = parse_encoded_pairs(context.get(h.PREPARED_STATEMENT))
    if name not in prepared:
        raise StatementError("NOT_FOUND", f"Prepared statement not found: {name}")

    return bind_parameters(prepared[name], match["parameters"])
