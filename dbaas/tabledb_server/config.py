"""
Configuration management for TableDB Server.

All configuration is done via environment variables prefixed with
TABLEDB_ - no config files. Values are loaded and validated by
pydantic-settings.

Invariants:
    - All settings have sensible defaults for local development
    - The table file pattern always contains the {table} placeholder

How to change safely:
    - Add new settings with defaults that keep existing deployments working
    - Add a validator for anything that would otherwise fail at first use
"""

from __future__ import annotations

import logging
import os
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class StorageBackend(Enum):
    """Supported table store backends."""

    JSON = "json"
    MEMORY = "memory"


class ServerConfig(BaseSettings):
    """Complete server configuration loaded from environment.

    Attributes:
        host: Address the TCP listener binds to
        port: Port the TCP listener binds to (0 picks a free port)
        read_chunk_size: Maximum bytes read per statement
        storage_backend: Which table store to use
        data_dir: Directory holding one file per table
        table_file_pattern: File name pattern, must contain {table}
        fsync: Whether table writes are fsynced before the atomic rename
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log format (json, text)
    """

    host: str = Field(default="0.0.0.0", description="TCP bind host")
    port: int = Field(default=8004, description="TCP bind port")
    read_chunk_size: int = Field(default=64 * 1024, description="Max bytes per statement")

    storage_backend: StorageBackend = Field(default=StorageBackend.JSON)
    data_dir: str = Field(default="data", description="Directory for table files")
    table_file_pattern: str = Field(default="{table}.json")
    fsync: bool = Field(default=True, description="fsync table files before rename")

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    model_config = {"env_prefix": "TABLEDB_"}

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 <= value <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {value}")
        return value

    @field_validator("read_chunk_size")
    @classmethod
    def _check_chunk_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("read_chunk_size must be positive")
        return value

    @field_validator("table_file_pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        if "{table}" not in value:
            raise ValueError("table_file_pattern must contain '{table}'")
        if os.sep in value or (os.altsep and os.altsep in value):
            raise ValueError("table_file_pattern must be a bare file name")
        return value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError(f"Invalid log_format '{value}'. Must be one of: json, text")
        return value

    @property
    def bind_address(self) -> str:
        """Listener address as host:port."""
        return f"{self.host}:{self.port}"

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Server configuration loaded",
            extra={
                "bind": self.bind_address,
                "storage_backend": self.storage_backend.value,
                "data_dir": self.data_dir
                if self.storage_backend == StorageBackend.JSON
                else None,
                "table_file_pattern": self.table_file_pattern,
                "fsync": self.fsync,
                "read_chunk_size": self.read_chunk_size,
                "log_level": self.log_level,
            },
        )
