"""
Base protocol and types for the table store abstraction.

This module defines the TableStore protocol that all backends implement,
the Record model persisted in every table, and the backend factory.

Invariants:
    - load() returns the full record sequence of a table, or [] if the
      table has never been saved
    - save() replaces the full sequence atomically: a concurrent or later
      load() sees either the old sequence or the new one, never a mix
    - Table identity is the table name and nothing else

How to change safely:
    - Protocol changes require updating all implementations
    - Record field changes must keep old table files loadable
"""

from __future__ import annotations

from abc import abstractmethod
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Protocol,
    Sequence,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

if TYPE_CHECKING:
    from ..config import ServerConfig


class Record(BaseModel):
    """One stored entity.

    Attributes:
        id: Server-assigned id, unique within its table
        name: Free text
        description: Free text
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int = Field(ge=0)
    name: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


RecordList = TypeAdapter(List[Record])


@runtime_checkable
class TableStore(Protocol):
    """Protocol for table store backends.

    Durability contract:
        - save() returns only after the new state is in place
        - A failed save() leaves the previous state untouched

    Example:
        >>> store = JsonFileTableStore("/var/lib/tabledb")
        >>> records = await store.load("spells")
        >>> await store.save("spells", records + [new_record])
    """

    @abstractmethod
    async def load(self, table: str) -> List[Record]:
        """Load every record of a table.

        Args:
            table: Table name

        Returns:
            Records in insertion order, empty if the table has no state yet

        Raises:
            StorageError: If the stored state cannot be read or is corrupt
        """
        ...

    @abstractmethod
    async def save(self, table: str, records: Sequence[Record]) -> None:
        """Atomically replace every record of a table.

        Args:
            table: Table name
            records: Complete new record sequence

        Raises:
            StorageError: If the write cannot be completed
        """
        ...


def create_table_store(config: "ServerConfig") -> TableStore:
    """Factory function to create a table store from configuration.

    Args:
        config: Server configuration

    Returns:
        Appropriate TableStore implementation

    Raises:
        ValueError: If backend is not supported
    """
    from ..config import StorageBackend
    from .json_file import JsonFileTableStore
    from .memory import InMemoryTableStore

    if config.storage_backend == StorageBackend.JSON:
        return JsonFileTableStore(
            data_dir=config.data_dir,
            file_pattern=config.table_file_pattern,
            fsync=config.fsync,
        )
    elif config.storage_backend == StorageBackend.MEMORY:
        return InMemoryTableStore()
    else:
        raise ValueError(f"Unsupported storage backend: {config.storage_backend}")
