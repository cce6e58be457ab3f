"""
Typed results returned by the command executor.

Every Result knows the JSON payload it is sent as:

    Rows              -> [{"id": 1, "name": ..., "description": ...}, ...]
    Inserted          -> {"success": true, "newData": {...}}
    NotFound          -> {"error": "Data not found"}
    ParseFailure      -> {"error": "<message>"}
    ExecutionFailure  -> {"error": "<message>"}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union

from ..storage import Record

NOT_FOUND_MESSAGE = "Data not found"


@dataclass(frozen=True)
class Rows:
    """Successful select. May be empty."""

    records: Tuple[Record, ...]

    def to_payload(self) -> Any:
        return [r.to_dict() for r in self.records]


@dataclass(frozen=True)
class Inserted:
    """Successful insert, carrying the stored record."""

    record: Record

    def to_payload(self) -> Any:
        return {"success": True, "newData": self.record.to_dict()}


@dataclass(frozen=True)
class NotFound:
    """Select by id matched nothing."""

    def to_payload(self) -> Any:
        return {"error": NOT_FOUND_MESSAGE}


@dataclass(frozen=True)
class ParseFailure:
    """Statement could not be parsed."""

    message: str

    def to_payload(self) -> Any:
        return {"error": self.message}


@dataclass(frozen=True)
class ExecutionFailure:
    """Statement parsed but could not be executed."""

    message: str

    def to_payload(self) -> Any:
        return {"error": self.message}


Result = Union[Rows, Inserted, NotFound, ParseFailure, ExecutionFailure]


def is_error(result: Result) -> bool:
    """Whether a result is reported to the client as an error object."""
    return isinstance(result, (NotFound, ParseFailure, ExecutionFailure))
