"""
Error types for TableDB Server.

This module defines the exceptions raised inside the server:
- TableDbError: Base exception
- ParseError: Statement does not match a supported shape
- StorageError: Table state could not be read or written
- ExecutionError: Statement parsed but cannot be applied

None of these are fatal. The executor turns each of them into a Result
that is reported to the client on the same connection.

Invariants:
    - All errors inherit from TableDbError
    - `message` is safe to send to clients as-is
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TableDbError(Exception):
    """Base exception for all TableDB errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "TABLEDB_ERROR"
        self.details = details or {}


class ParseError(TableDbError):
    """Statement could not be parsed.

    Raised when:
    - The text matches none of the supported statement shapes
    - INSERT column and value lists differ in length
    - A quoted value is never closed
    """

    def __init__(self, message: str, statement: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="PARSE_ERROR",
            details={"statement": statement},
        )
        self.statement = statement


class StorageError(TableDbError):
    """Durable table state could not be read or written.

    Raised when:
    - A table file is not valid JSON or not a list of records
    - The file system refuses a read, write or rename

    `message` names only the table. The underlying OS or validation error,
    which can hold server paths, goes in `reason` for the logs.
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        path: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="STORAGE_ERROR",
            details={"table": table, "path": path, "reason": reason},
        )
        self.table = table
        self.path = path
        self.reason = reason


class ExecutionError(TableDbError):
    """A parsed command cannot be applied.

    Raised when an INSERT names a column that is not part of the record
    shape, or names the same column twice.
    """

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="EXECUTION_ERROR",
            details={"table": table},
        )
        self.table = table
