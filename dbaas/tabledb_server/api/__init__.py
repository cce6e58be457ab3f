"""
API module for TableDB server.

This module provides the external interface: a raw TCP listener that
speaks one statement per read and one JSON line per response.

Invariants:
    - Every request gets a response, failures included
    - Connections are isolated from each other

How to change safely:
    - Keep response payloads backward compatible
    - Framing changes need matching client changes (tools/query_cli.py)
"""

from .protocol import decode_statement, encode_result
from .tcp_server import TableDbServer

__all__ = [
    "TableDbServer",
    "decode_statement",
    "encode_result",
]
