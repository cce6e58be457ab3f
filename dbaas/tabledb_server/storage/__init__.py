"""
Table store abstraction for TableDB.

This module provides a pluggable storage backend interface supporting:
- JSON files, one per table (default)
- In-memory (for testing)

Invariants:
    - save() replaces a table's records atomically
    - load() of a never-saved table returns an empty list
    - Corrupt or unreadable state raises StorageError, never a partial list

How to change safely:
    - New backends must implement the TableStore protocol
    - Keep the on-disk format readable by older releases
"""

from ..errors import StorageError
from .base import Record, RecordList, TableStore, create_table_store
from .json_file import JsonFileTableStore
from .memory import InMemoryTableStore

__all__ = [
    # Protocol and types
    "TableStore",
    "Record",
    "RecordList",
    "StorageError",
    # Factory
    "create_table_store",
    # Implementations
    "JsonFileTableStore",
    "InMemoryTableStore",
]
