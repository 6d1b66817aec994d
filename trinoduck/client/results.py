"""Statement payload model and the Ok/Err result envelope.

The coordinator answers every statement request with a ``QueryResults`` JSON
object. On success the client hands it to the caller as
``Ok(QueryResults)``; the ``error`` field, when present, becomes
``Err(<error kind>)`` instead (see :mod:`trinoduck.client.errors`).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, Mapping, TypeVar, Union

from ..protocol import types
from .errors import (
    FetchError,
    HttpError,
    ProtocolParseError,
    QueryErrorResult,
    TrinoQueryError,
    TrinoResultError,
    classify_query_error,
)

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: Literal[True] = True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E
    ok: Literal[False] = False


Result = Union[Ok[T], Err[E]]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _from_camel(cls: type, payload: Mapping[str, Any], **overrides: Any) -> Any:
    """Build a flat dataclass from a camelCase JSON object.

    Missing keys fall back to the field default; unknown keys are ignored.
    """
    values = {}
    for f in dataclasses.fields(cls):
        if f.name in overrides:
            values[f.name] = overrides[f.name]
            continue
        key = _camel(f.name)
        if key in payload:
            values[f.name] = payload[key]
    return cls(**values)


# =============================================================================
# Columns
# =============================================================================


@dataclass(frozen=True)
class TypeSignatureParameter:
    """Argument of a type signature.

    ``value`` is a :class:`ClientTypeSignature` for ``TYPE`` arguments, an
    ``int`` for ``LONG`` arguments and a ``(name, ClientTypeSignature)``
    pair for named row fields.
    """

    kind: str
    value: Any

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> TypeSignatureParameter:
        kind = payload["kind"]
        value = payload.get("value")
        if "typeSignature" in payload:
            value = payload["typeSignature"]
        elif "longLiteral" in payload:
            value = payload["longLiteral"]
        elif "namedTypeSignature" in payload:
            value = payload["namedTypeSignature"]

        if kind == types.PARAMETER_LONG:
            return cls(kind=kind, value=int(value))
        if isinstance(value, Mapping) and "rawType" in value:
            return cls(kind=kind, value=ClientTypeSignature.from_json(value))
        if isinstance(value, Mapping) and "typeSignature" in value:
            field_name = value.get("fieldName") or value.get("name")
            if isinstance(field_name, Mapping):
                field_name = field_name.get("name")
            return cls(
                kind=kind,
                value=(field_name, ClientTypeSignature.from_json(value["typeSignature"])),
            )
        return cls(kind=kind, value=value)


@dataclass(frozen=True)
class ClientTypeSignature:
    raw_type: str
    arguments: list[TypeSignatureParameter] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> ClientTypeSignature:
        return cls(
            raw_type=payload["rawType"],
            arguments=[
                TypeSignatureParameter.from_json(argument)
                for argument in payload.get("arguments") or []
            ],
        )


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    type_signature: ClientTypeSignature | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> Column:
        signature = payload.get("typeSignature")
        return cls(
            name=payload["name"],
            type=payload["type"],
            type_signature=ClientTypeSignature.from_json(signature) if signature else None,
        )


# =============================================================================
# Statistics and warnings
# =============================================================================


@dataclass(frozen=True)
class StageStats:
    stage_id: str = ""
    state: str = ""
    done: bool = False
    nodes: int = 0
    total_splits: int = 0
    queued_splits: int = 0
    running_splits: int = 0
    completed_splits: int = 0
    cpu_time_millis: int = 0
    wall_time_millis: int = 0
    processed_rows: int = 0
    processed_bytes: int = 0
    physical_input_bytes: int = 0
    failed_tasks: int = 0
    coordinator_only: bool = False
    sub_stages: list[StageStats] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> StageStats:
        return _from_camel(
            cls,
            payload,
            sub_stages=[cls.from_json(stage) for stage in payload.get("subStages") or []],
        )


@dataclass(frozen=True)
class StatementStats:
    """Progress and resource counters of a statement."""

    state: str
    queued: bool = False
    scheduled: bool = False
    progress_percentage: float | None = None
    running_percentage: float | None = None
    nodes: int = 0
    total_splits: int = 0
    queued_splits: int = 0
    running_splits: int = 0
    completed_splits: int = 0
    planning_time_millis: int = 0
    analysis_time_millis: int = 0
    cpu_time_millis: int = 0
    wall_time_millis: int = 0
    queued_time_millis: int = 0
    elapsed_time_millis: int = 0
    finishing_time_millis: int = 0
    physical_input_time_millis: int = 0
    processed_rows: int = 0
    processed_bytes: int = 0
    physical_input_bytes: int = 0
    physical_written_bytes: int = 0
    internal_network_input_bytes: int = 0
    peak_memory_bytes: int = 0
    spilled_bytes: int = 0
    root_stage: StageStats | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> StatementStats:
        if not payload.get("state"):
            raise ProtocolParseError("stats.state is missing")
        root_stage = payload.get("rootStage")
        return _from_camel(
            cls,
            payload,
            root_stage=StageStats.from_json(root_stage) if root_stage else None,
        )


@dataclass(frozen=True)
class WarningCode:
    code: int
    name: str


@dataclass(frozen=True)
class QueryWarning:
    warning_code: WarningCode
    message: str

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> QueryWarning:
        code = payload["warningCode"]
        return cls(
            warning_code=WarningCode(code=int(code["code"]), name=code["name"]),
            message=payload.get("message", ""),
        )


# =============================================================================
# Statement payload
# =============================================================================


@dataclass(frozen=True)
class QueryResults:
    """One successful statement response (the payload minus ``error``).

    ``data`` rows are left exactly as decoded from JSON.
    """

    id: str
    info_uri: str
    stats: StatementStats
    partial_cancel_uri: str | None = None
    next_uri: str | None = None
    columns: list[Column] | None = None
    data: list[list[Any]] | None = None
    warnings: list[QueryWarning] = field(default_factory=list)
    update_type: str | None = None
    update_count: int | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> QueryResults:
        columns = payload.get("columns")
        data = payload.get("data")
        if data is not None and not isinstance(data, list):
            raise ProtocolParseError(f"data must be a list, got {type(data).__name__}")
        return cls(
            id=payload["id"],
            info_uri=payload["infoUri"],
            stats=StatementStats.from_json(payload["stats"]),
            partial_cancel_uri=payload.get("partialCancelUri"),
            next_uri=payload.get("nextUri"),
            columns=[Column.from_json(column) for column in columns] if columns is not None else None,
            data=data,
            warnings=[QueryWarning.from_json(warning) for warning in payload.get("warnings") or []],
            update_type=payload.get("updateType"),
            update_count=payload.get("updateCount"),
        )


def parse_statement_payload(payload: Any) -> QueryResults | TrinoQueryError:
    """Parse a decoded statement response.

    Returns the classified error when the payload carries one, the success
    payload otherwise.

    Raises:
        ProtocolParseError: The payload does not have the expected shape.
        UnknownErrorTypeError: The error carries an unknown ``errorType``.
    """
    if not isinstance(payload, Mapping):
        raise ProtocolParseError(f"Expected a JSON object, got {type(payload).__name__}")
    try:
        error = payload.get("error")
        if error:
            return classify_query_error(error)
        return QueryResults.from_json(payload)
    except ProtocolParseError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ProtocolParseError(f"Invalid statement payload: {e!r}") from e


# =============================================================================
# Drained query
# =============================================================================


@dataclass(frozen=True)
class QueryRows:
    """All pages of a finished statement, concatenated."""

    id: str
    columns: list[Column]
    rows: list[list[Any]]
    stats: StatementStats
    warnings: list[QueryWarning] = field(default_factory=list)
    update_type: str | None = None
    update_count: int | None = None

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]


QueryResult = Union[Ok[QueryResults], Err[QueryErrorResult]]
CancelResult = Union[Ok[None], Err[Union[FetchError, HttpError]]]


def unwrap(result: Ok[T] | Err[Any]) -> T:
    """Return the value of an ``Ok`` result or raise ``TrinoResultError``."""
    if isinstance(result, Err):
        raise TrinoResultError(result.error)
    return result.value
