"""
polycache — Cache Session

An explicit handle for per-session storage. The owner of a CacheSession
(typically the request/session layer of the host application) creates it at
session start and ends it at session end; caches constructed with the
session keep their data in one of its slots, so every cache built on the
same session sees the same entries.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CacheSession:
    """Mutable per-session storage shared by reference."""

    session_id: str
    data: dict[str, Any] = field(default_factory=dict)

    def slot(self, name: str) -> dict[str, Any]:
        """Return the dict stored under ``name``, creating it on first use."""
        storage = self.data.get(name)
        if storage is None:
            storage = {}
            self.data[name] = storage
        return storage

    def end(self) -> None:
        """Discard everything stored in the session."""
        self.data.clear()
