"""
JSON file table store for TableDB.

Each table lives in one human-readable file under the data directory:

    data/spells.json
    [
      {
        "id": 1,
        "name": "Fireball",
        "description": "Deals damage"
      }
    ]

Writes never touch the live file. The new content goes to a temp file in
the same directory, is flushed (and fsynced when enabled), and is then
moved over the live file with os.replace(), which is atomic on POSIX and
Windows when source and target share a file system.

Invariants:
    - One file per table, named from the configured pattern
    - A table file is always a complete JSON array of records
    - Temp files are removed when a write fails

How to change safely:
    - Keep the array-of-objects format, operators read these files
    - Test with a read-only data directory before changing write paths
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence

from pydantic import ValidationError

from ..errors import StorageError
from .base import Record, RecordList

logger = logging.getLogger(__name__)


class JsonFileTableStore:
    """File-per-table store using pretty-printed JSON.

    Blocking file I/O runs in the default executor so a slow disk does
    not stall other connections.

    Thread safety:
        load() and save() are safe to call concurrently. Writers to the same
        table must be serialized by the caller, the executor does this with
        its per-table locks.

    Example:
        >>> store = JsonFileTableStore("/var/lib/tabledb")
        >>> await store.save("spells", [Record(id=1, name="Fireball")])
        >>> await store.load("spells")
        [Record(id=1, name='Fireball', description='')]
    """

    def __init__(
        self,
        data_dir: str,
        file_pattern: str = "{table}.json",
        fsync: bool = True,
    ) -> None:
        """Initialize the store.

        Args:
            data_dir: Directory for table files, created on first write
            file_pattern: File name pattern containing {table}
            fsync: fsync temp files before renaming them into place
        """
        self.data_dir = Path(data_dir)
        self.file_pattern = file_pattern
        self.fsync = fsync

    def get_table_path(self, table: str) -> Path:
        """Get the file path for a table."""
        # Sanitize table name to prevent path traversal
        safe_name = "".join(c for c in table if c.isalnum() or c == "_")
        if not safe_name:
            raise StorageError(f"Invalid table name: {table!r}", table=table)
        return self.data_dir / self.file_pattern.format(table=safe_name)

    async def load(self, table: str) -> List[Record]:
        path = self.get_table_path(table)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_table, table, path)

    async def save(self, table: str, records: Sequence[Record]) -> None:
        path = self.get_table_path(table)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_table, table, path, list(records))
        logger.debug(
            "Table saved",
            extra={"table": table, "path": str(path), "records": len(records)},
        )

    async def table_exists(self, table: str) -> bool:
        """Check if a table has been saved at least once."""
        return self.get_table_path(table).exists()

    def _read_table(self, table: str, path: Path) -> List[Record]:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(
                f"Failed to read table '{table}'",
                table=table,
                path=str(path),
                reason=str(e),
            )

        try:
            return RecordList.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(
                f"Corrupt table file for '{table}'",
                table=table,
                path=str(path),
                reason=str(e),
            )

    def _write_table(self, table: str, path: Path, records: List[Record]) -> None:
        content = json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False)

        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(content)
                tmp_file.flush()
                if self.fsync:
                    os.fsync(tmp_file.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to write table '{table}'",
                table=table,
                path=str(path),
                reason=str(e),
            )
