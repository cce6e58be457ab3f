"""
CLI tools for TableDB.

This module provides command-line tools for:
- query: Send statements to a running server and print the responses

Invariants:
    - Tools talk to the server only over the network
"""

from .query_cli import QueryClient

__all__ = ["QueryClient"]
