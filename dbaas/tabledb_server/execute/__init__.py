"""
Execute module for TableDB - running commands against the table store.

This module handles:
- Dispatch of SelectAll, SelectById and Insert commands
- Per-table write locking around the insert read-modify-write cycle
- Mapping every failure to a typed Result

Invariants:
    - The executor never raises to its caller
    - Inserts into one table are serialized
"""

from .executor import Executor, build_record, next_record_id
from .results import (
    NOT_FOUND_MESSAGE,
    ExecutionFailure,
    Inserted,
    NotFound,
    ParseFailure,
    Result,
    Rows,
    is_error,
)

__all__ = [
    "Executor",
    "build_record",
    "next_record_id",
    "Result",
    "Rows",
    "Inserted",
    "NotFound",
    "ParseFailure",
    "ExecutionFailure",
    "is_error",
    "NOT_FOUND_MESSAGE",
]
