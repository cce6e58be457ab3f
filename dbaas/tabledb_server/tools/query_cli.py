"""
Query CLI tool for TableDB.

Sends statements to a running server and prints the JSON responses.

Usage:
    tabledb-query "SELECT * FROM spells"
    tabledb-query --port 8004 "SELECT * FROM spells WHERE id = 1"
    echo "INSERT INTO spells (name) VALUES (Fireball)" | tabledb-query

Exit codes:
    0: every statement succeeded
    1: at least one response was an error object
    2: the server could not be reached
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
from typing import Any, Iterable, List, Optional, TextIO

logger = logging.getLogger(__name__)


class QueryClient:
    """Async client for the TableDB stream protocol.

    Sends one statement per write and reads one JSON line per response.
    Statements are sent one at a time; the server treats each read as one
    statement, so pipelining is not supported.

    Example:
        >>> async with QueryClient("127.0.0.1", 8004) as client:
        ...     rows = await client.execute("SELECT * FROM spells")
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8004, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    @property
    def is_connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        """Open the connection.

        Raises:
            ConnectionError: If the server cannot be reached
        """
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise ConnectionError(f"Cannot connect to {self.host}:{self.port}: {e}") from e
        logger.debug(f"Connected to {self.host}:{self.port}")

    async def close(self) -> None:
        if self._writer is None:
            return
        self._writer.close()
        with contextlib.suppress(ConnectionError, OSError):
            await self._writer.wait_closed()
        self._reader = self._writer = None

    async def execute(self, statement: str) -> Any:
        """Send one statement and return the decoded response.

        Args:
            statement: Statement text

        Returns:
            Decoded JSON response (list of records or an object)

        Raises:
            ConnectionError: If not connected or the server hangs up
        """
        if self._reader is None or self._writer is None:
            raise ConnectionError("Not connected")

        self._writer.write(statement.encode("utf-8"))
        await self._writer.drain()

        line = await asyncio.wait_for(self._reader.readline(), timeout=self.timeout)
        if not line:
            raise ConnectionError("Server closed the connection")
        return json.loads(line)

    async def __aenter__(self) -> QueryClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def is_error_response(response: Any) -> bool:
    """Whether a decoded response is an error object."""
    return isinstance(response, dict) and "error" in response


async def run_statements(
    client: QueryClient,
    statements: Iterable[str],
    out: TextIO,
) -> int:
    """Execute statements in order, printing each response.

    Returns:
        Number of error responses
    """
    errors = 0
    for statement in statements:
        response = await client.execute(statement)
        if is_error_response(response):
            errors += 1
        print(json.dumps(response), file=out)
    return errors


def _read_statements(stream: TextIO) -> List[str]:
    return [line.strip() for line in stream if line.strip()]


async def _run(args: argparse.Namespace, statements: List[str]) -> int:
    try:
        async with QueryClient(args.host, args.port, timeout=args.timeout) as client:
            errors = await run_statements(client, statements, sys.stdout)
    except ConnectionError as e:
        print(f"Connection error: {e}", file=sys.stderr)
        return 2
    return 1 if errors else 0


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send statements to a TableDB server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("statements", nargs="*", help="Statements to run (default: stdin lines)")
    parser.add_argument("--host", default="127.0.0.1", help="Server host")
    parser.add_argument("--port", type=int, default=8004, help="Server port")
    parser.add_argument("--timeout", type=float, default=10.0, help="Seconds to wait per response")

    args = parser.parse_args(argv)
    statements = args.statements or _read_statements(sys.stdin)
    if not statements:
        parser.error("no statements given")

    sys.exit(asyncio.run(_run(args, statements)))


if __name__ == "__main__":
    main()
