"""
TableDB Test Suite.

This package contains:
- unit/: Unit tests (no network)
- integration/: Integration tests (real TCP server on a free port)
"""
