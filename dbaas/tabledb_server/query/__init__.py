"""
Query module for TableDB - statement tokenizing and parsing.

This module turns raw statement text into typed Command values:
- SelectAll: every record of a table
- SelectById: the record with one id
- Insert: a new record built from column/value pairs

Invariants:
    - Commands are immutable
    - Parsing is deterministic and raises only ParseError
"""

from ..errors import ParseError
from .commands import Command, Insert, SelectAll, SelectById
from .parser import COUNT_MISMATCH, UNSUPPORTED_COMMAND, clean_statement, parse

__all__ = [
    "Command",
    "SelectAll",
    "SelectById",
    "Insert",
    "ParseError",
    "parse",
    "clean_statement",
    "UNSUPPORTED_COMMAND",
    "COUNT_MISMATCH",
]
