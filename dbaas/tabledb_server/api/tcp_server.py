"""
TCP server implementation for TableDB.

This module accepts stream connections and runs one request loop per
connection:

    read chunk -> decode -> parse + execute -> encode -> write

Each received chunk is one statement. There is no batching and no
delimiter beyond the read boundary; trailing whitespace and NUL bytes are
ignored by the parser.

Invariants:
    - Every received statement gets exactly one response line
    - A failing connection is closed without affecting any other
    - A connection that drops mid-insert releases the table lock

How to change safely:
    - Keep the request loop free of blocking calls
    - Test peer resets as well as clean disconnects
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional, Set

from ..execute import Executor, Result
from .protocol import decode_statement, encode_result

logger = logging.getLogger(__name__)


class TableDbServer:
    """Asyncio TCP front-end for an Executor.

    Attributes:
        executor: Executor statements are sent to
        host: Bind address
        port: Requested bind port (0 picks a free one)
        read_chunk_size: Maximum bytes read per statement

    Example:
        >>> server = TableDbServer(executor, host="127.0.0.1", port=8004)
        >>> await server.start()
        >>> # Server is accepting connections
        >>> await server.stop()
    """

    def __init__(
        self,
        executor: Executor,
        host: str = "0.0.0.0",
        port: int = 8004,
        read_chunk_size: int = 64 * 1024,
    ) -> None:
        self.executor = executor
        self.host = host
        self.port = port
        self.read_chunk_size = read_chunk_size
        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: Set[asyncio.StreamWriter] = set()

    @property
    def is_running(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def bound_port(self) -> int:
        """Port actually bound, useful when started with port 0."""
        if self._server is None or not self._server.sockets:
            raise RuntimeError("Server is not started")
        return self._server.sockets[0].getsockname()[1]

    @property
    def connection_count(self) -> int:
        return len(self._writers)

    async def start(self) -> None:
        """Bind the listener and start accepting connections."""
        if self._server is not None:
            logger.warning("TCP server already started")
            return

        self._server = await asyncio.start_server(
            self._handle_connection, self.host, self.port
        )
        logger.info(f"TCP server listening on {self.host}:{self.bound_port}")

    async def stop(self) -> None:
        """Stop accepting connections and close the open ones."""
        if self._server is None:
            return

        self._server.close()
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("TCP server stopped")

    async def handle_chunk(self, chunk: bytes) -> Result:
        """Turn one received chunk into a Result."""
        statement = decode_statement(chunk)
        if not isinstance(statement, str):
            return statement
        logger.debug("Received command", extra={"statement": statement})
        return await self.executor.execute_statement(statement)

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        peer = str(writer.get_extra_info("peername"))
        self._writers.add(writer)
        logger.info("Client connected", extra={"peer": peer})

        try:
            while True:
                chunk = await reader.read(self.read_chunk_size)
                if not chunk:
                    break
                result = await self.handle_chunk(chunk)
                writer.write(encode_result(result))
                await writer.drain()
        except (ConnectionError, OSError) as e:
            logger.warning(f"Connection error: {e}", extra={"peer": peer})
        finally:
            self._writers.discard(writer)
            writer.close()
            with contextlib.suppress(ConnectionError, OSError):
                await writer.wait_closed()
            logger.info("Client disconnected", extra={"peer": peer})
