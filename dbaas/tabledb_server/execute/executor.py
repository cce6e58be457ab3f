"""
Command executor for TableDB.

Runs typed Commands against a TableStore and returns typed Results:

    SelectAll   -> load, Rows(all records)
    SelectById  -> load, Rows([match]) or NotFound
    Insert      -> lock table, load, id = max + 1, append, save, Inserted

An INSERT is a read-modify-write cycle. Two unguarded cycles on the same
table can hand out the same id or drop each other's record, so the whole
cycle runs under an asyncio.Lock owned by that table's name. Selects take
no lock; the store's atomic save() keeps them from seeing half a write.

Invariants:
    - Inserted ids per table are 1, 2, 3, ... with no gaps or repeats
    - At most one insert per table is between load() and save()
    - A started save() finishes before the table lock is released, even
      when the inserting task is cancelled
    - execute() never raises, every failure becomes a Result

How to change safely:
    - Anything that writes a table must hold table_lock(table)
    - Keep lock scope to one command, a held lock blocks every writer
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List

from ..errors import ExecutionError, ParseError, StorageError
from ..query import Command, Insert, SelectAll, SelectById, parse
from ..storage import Record, TableStore
from .results import (
    ExecutionFailure,
    Inserted,
    NotFound,
    ParseFailure,
    Result,
    Rows,
)

logger = logging.getLogger(__name__)

# Columns an INSERT may set. "id" is accepted and ignored, ids are always
# assigned here.
RECORD_FIELDS = ("name", "description")
IGNORED_FIELDS = ("id",)


def build_record(record_id: int, command: Insert) -> Record:
    """Build the record an INSERT stores.

    Missing known columns default to an empty string.

    Raises:
        ExecutionError: On an unknown or repeated column
    """
    seen = set()
    for column in command.columns:
        if column in seen:
            raise ExecutionError(f"duplicate column '{column}'", table=command.table)
        seen.add(column)

    unknown = [c for c in command.columns if c not in RECORD_FIELDS + IGNORED_FIELDS]
    if unknown:
        raise ExecutionError(
            f"unknown column(s): {', '.join(repr(c) for c in unknown)}",
            table=command.table,
        )

    fields = command.fields
    return Record(
        id=record_id,
        name=fields.get("name", ""),
        description=fields.get("description", ""),
    )


def next_record_id(records: List[Record]) -> int:
    """Next id for a table: current maximum + 1, or 1 when empty."""
    return max((r.id for r in records), default=0) + 1


class Executor:
    """Executes commands against a table store.

    Attributes:
        store: Backing table store

    Example:
        >>> executor = Executor(InMemoryTableStore())
        >>> await executor.execute_statement(
        ...     "INSERT INTO spells (name, description) VALUES (Fireball, Deals damage)"
        ... )
        Inserted(record=Record(id=1, name='Fireball', description='Deals damage'))
    """

    def __init__(self, store: TableStore) -> None:
        self.store = store
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def table_lock(self, table: str) -> asyncio.Lock:
        """Get the write lock for a table."""
        return self._locks[table]

    async def execute_statement(self, text: str) -> Result:
        """Parse and execute one statement.

        Args:
            text: Raw statement text

        Returns:
            Result of the statement, ParseFailure if it does not parse
        """
        try:
            command = parse(text)
        except ParseError as e:
            logger.info("Rejected statement", extra={"error": e.message, "statement": text})
            return ParseFailure(e.message)
        except Exception as e:
            logger.error(f"Unexpected error parsing statement: {e}", exc_info=True)
            return ExecutionFailure("internal error")
        return await self.execute(command)

    async def execute(self, command: Command) -> Result:
        """Execute a parsed command.

        Args:
            command: Command to execute

        Returns:
            Result of the command. Never raises.
        """
        try:
            if isinstance(command, SelectAll):
                return await self._select_all(command)
            elif isinstance(command, SelectById):
                return await self._select_by_id(command)
            elif isinstance(command, Insert):
                return await self._insert(command)
            else:
                raise ExecutionError(f"unsupported command type: {type(command).__name__}")
        except StorageError as e:
            logger.error(
                f"Storage failure: {e.message}",
                extra={"table": e.table, "path": e.path, "reason": e.reason},
            )
            return ExecutionFailure(e.message)
        except ExecutionError as e:
            logger.info("Rejected command", extra={"error": e.message, "table": e.table})
            return ExecutionFailure(e.message)
        except Exception as e:
            logger.error(f"Unexpected error executing {command!r}: {e}", exc_info=True)
            return ExecutionFailure("internal error")

    async def _select_all(self, command: SelectAll) -> Result:
        records = await self.store.load(command.table)
        return Rows(tuple(records))

    async def _select_by_id(self, command: SelectById) -> Result:
        records = await self.store.load(command.table)
        for record in records:
            if record.id == command.id:
                return Rows((record,))
        return NotFound()

    async def _insert(self, command: Insert) -> Result:
        async with self.table_lock(command.table):
            records = await self.store.load(command.table)
            record = build_record(next_record_id(records), command)
            records.append(record)
            await self._save_uninterrupted(command.table, records)

        logger.debug(
            "Record inserted", extra={"table": command.table, "record_id": record.id}
        )
        return Inserted(record)

    async def _save_uninterrupted(self, table: str, records: List[Record]) -> None:
        """Save a table, holding the caller's lock until the write lands.

        A file write in the executor thread cannot be stopped. If the caller
        is cancelled mid-save, wait for the write anyway so the next insert
        never loads the table before it.
        """
        save = asyncio.ensure_future(self.store.save(table, records))
        try:
            await asyncio.shield(save)
        except asyncio.CancelledError:
            await asyncio.wait({save})
            if not save.cancelled() and save.exception() is not None:
                logger.error(
                    f"Save of cancelled insert failed: {save.exception()}",
                    extra={"table": table},
                )
            raise
