"""
Typed commands produced by the statement parser.

Each supported statement shape has one immutable Command variant. The
executor dispatches on the variant type, so adding a statement shape means
adding a class here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple, Union


@dataclass(frozen=True)
class SelectAll:
    """SELECT * FROM <table>"""

    table: str


@dataclass(frozen=True)
class SelectById:
    """SELECT * FROM <table> WHERE id = <integer>"""

    table: str
    id: int


@dataclass(frozen=True)
class Insert:
    """INSERT INTO <table> (<cols>) VALUES (<vals>)

    Columns and values are kept positionally exactly as written so that
    the executor can tell a repeated column apart from a single one.

    Attributes:
        table: Target table name
        columns: Column names, trimmed
        values: Values, trimmed and unquoted, same length as columns
    """

    table: str
    columns: Tuple[str, ...]
    values: Tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.values):
            raise ValueError("columns and values must have the same length")

    @property
    def fields(self) -> Dict[str, str]:
        """Column to value mapping. A repeated column keeps its last value."""
        return dict(zip(self.columns, self.values))


Command = Union[SelectAll, SelectById, Insert]
