"""
TableDB Server - Main entry point.

This module starts the TableDB server:
- Table store (JSON files or in-memory)
- Command executor with per-table write locks
- TCP listener

Usage:
    python -m dbaas.tabledb_server.main

Configuration is entirely via environment variables.
See config.py for all available settings.

Invariants:
    - The data directory exists before the listener accepts connections
    - Graceful shutdown closes the listener and all open connections

How to change safely:
    - Add new components with enable/disable flags
    - Test shutdown sequence thoroughly
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path

import json_log_formatter
from pydantic import ValidationError

from .api import TableDbServer
from .config import ServerConfig, StorageBackend
from .errors import StorageError
from .execute import Executor
from .storage import TableStore, create_table_store

logger = logging.getLogger(__name__)


def setup_logging(config: ServerConfig) -> None:
    """Configure logging based on configuration.

    Args:
        config: Server configuration
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    if config.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def ensure_data_dir(data_dir: str) -> None:
    """Create the data directory if needed.

    Raises:
        StorageError: If the directory cannot be created
    """
    try:
        Path(data_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(
            "Could not create data directory", path=data_dir, reason=str(e)
        ) from e


class Server:
    """TableDB Server orchestrator.

    Manages the lifecycle of the server components:
    - Table store
    - Executor
    - TCP listener

    Attributes:
        config: Server configuration
        store: Table store instance
        executor: Command executor
        tcp_server: TCP front-end

    Example:
        >>> server = Server()
        >>> await server.start()
        >>> # Server is running until request_shutdown()
        >>> await server.stop()
    """

    def __init__(self, config: ServerConfig | None = None) -> None:
        """Initialize the server.

        Args:
            config: Optional server configuration (loaded from env if not provided)
        """
        self.config = config or ServerConfig()
        self._running = False
        self._shutdown_event = asyncio.Event()

        # Components (initialized in start())
        self.store: TableStore | None = None
        self.executor: Executor | None = None
        self.tcp_server: TableDbServer | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the server and wait for a shutdown request."""
        if self._running:
            logger.warning("Server already running")
            return

        logger.info("Starting TableDB server")
        self.config.log_config()

        try:
            if self.config.storage_backend == StorageBackend.JSON:
                ensure_data_dir(self.config.data_dir)

            self.store = create_table_store(self.config)
            self.executor = Executor(self.store)

            self.tcp_server = TableDbServer(
                executor=self.executor,
                host=self.config.host,
                port=self.config.port,
                read_chunk_size=self.config.read_chunk_size,
            )
            await self.tcp_server.start()

            self._running = True
            logger.info("TableDB server started successfully")

            # Wait for shutdown signal
            await self._shutdown_event.wait()

        except Exception as e:
            logger.error(f"Server startup failed: {e}", exc_info=True)
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the server gracefully."""
        if self.tcp_server:
            await self.tcp_server.stop()

        if not self._running:
            return

        self._running = False
        logger.info("TableDB server stopped")

    def request_shutdown(self) -> None:
        """Request graceful shutdown."""
        self._shutdown_event.set()


def main() -> None:
    """Main entry point."""
    # Load configuration
    try:
        config = ServerConfig()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config)

    # Setup signal handlers
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    # Create server
    server = Server(config)

    def handle_signal(sig: int) -> None:
        logger.info(f"Received signal {sig}, initiating shutdown")
        server.request_shutdown()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal, sig)

    # Run server
    exit_code = 0
    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        pass
    except StorageError as e:
        logger.error(f"{e.message} {e.path}: {e.reason}")
        exit_code = 1
    except OSError as e:
        logger.error(f"Could not bind {config.bind_address}: {e}")
        exit_code = 1
    finally:
        loop.run_until_complete(server.stop())
        loop.close()

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
