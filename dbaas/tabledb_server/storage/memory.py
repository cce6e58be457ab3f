"""
In-memory table store implementation for testing.

This module provides a simple in-memory backend for:
- Unit tests
- Integration tests
- Local development without a data directory

Invariants:
    - All data is lost on process exit
    - Same atomic-replace semantics as the file backend
    - Callers never share list objects with the store

How to change safely:
    - This is test-oriented code, keep it compatible with TableStore
    - Add features to help with testing scenarios
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import StorageError
from .base import Record

logger = logging.getLogger(__name__)


class InMemoryTableStore:
    """In-memory implementation of TableStore.

    Tables are stored as tuples and swapped whole on save(), so a reader
    always gets a complete snapshot.

    Example:
        >>> store = InMemoryTableStore()
        >>> await store.save("spells", [Record(id=1, name="Fireball")])
        >>> len(await store.load("spells"))
        1
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Tuple[Record, ...]] = {}
        self._fail_next_load: Optional[StorageError] = None
        self._fail_next_save: Optional[StorageError] = None
        self.load_count = 0
        self.save_count = 0

    async def load(self, table: str) -> List[Record]:
        self.load_count += 1
        # Yield so concurrent callers interleave like they would on real I/O
        await asyncio.sleep(0)
        if self._fail_next_load is not None:
            error, self._fail_next_load = self._fail_next_load, None
            raise error
        return list(self._tables.get(table, ()))

    async def save(self, table: str, records: Sequence[Record]) -> None:
        self.save_count += 1
        await asyncio.sleep(0)
        if self._fail_next_save is not None:
            error, self._fail_next_save = self._fail_next_save, None
            raise error
        self._tables[table] = tuple(records)
        logger.debug(
            "Table saved to memory", extra={"table": table, "records": len(records)}
        )

    # Testing helpers

    def get_table_names(self) -> List[str]:
        """Names of all tables saved at least once (testing helper)."""
        return sorted(self._tables)

    def fail_next_load(self, message: str = "simulated read failure") -> None:
        """Make the next load() raise StorageError (testing helper)."""
        self._fail_next_load = StorageError(message)

    def fail_next_save(self, message: str = "simulated write failure") -> None:
        """Make the next save() raise StorageError (testing helper)."""
        self._fail_next_save = StorageError(message)

    def clear(self) -> None:
        """Drop all tables (testing helper)."""
        self._tables.clear()
