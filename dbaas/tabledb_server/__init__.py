"""
TableDB Server - a minimal record store spoken to over raw TCP.

Clients send one SQL-like statement per read and receive one JSON value
per response line. Three statement shapes are supported:

    SELECT * FROM <table>
    SELECT * FROM <table> WHERE id = <integer>
    INSERT INTO <table> (<col>, ...) VALUES (<val>, ...)

Architecture:
    ┌─────────────┐     ┌─────────────┐     ┌─────────────┐     ┌─────────────┐
    │   Client    │────▶│ TCP Server  │────▶│   Parser    │────▶│  Executor   │
    │ (any peer)  │◀────│ (api)       │     │  (query)    │     │  (execute)  │
    └─────────────┘     └─────────────┘     └─────────────┘     └──────┬──────┘
                                                                       │
                                                                       ▼
                                                               ┌─────────────┐
                                                               │ Table Store │
                                                               │ (storage)   │
                                                               └─────────────┘

Invariants:
    - Record ids are unique per table and assigned as max(id) + 1
    - Inserts into one table are serialized by a per-table lock
    - Table files are replaced atomically, never written in place
    - Every request gets exactly one response line

How to change safely:
    - New statement shapes need a Command variant, a parser branch and
      an executor branch
    - Keep the wire payloads stable, front-ends parse them directly

Version: see _version.py.
"""

from ._version import __version__

__all__ = ["__version__"]
