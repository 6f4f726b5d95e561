"""
polycache — Cache Backends

Exports available cache backend implementations.

Shared-memory and remote backends are lazy-loaded via factory.py so their
third-party clients are only imported when selected.
"""

from .memory import InMemoryBackend

__all__ = [
    "InMemoryBackend",
]
