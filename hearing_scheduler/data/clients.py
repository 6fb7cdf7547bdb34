"""Client registry collaborator.

Resolves the client name typed on a hearing form to the name the practice
has on record, so "sharma textiles " and "Sharma Textiles" are the same
client everywhere detection runs. Lookups never write; new clients are
registered by the gateway only once their hearing has been committed.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Protocol

from hearing_scheduler.core.classifier import normalize_name


class ClientRegistry(Protocol):
    def lookup(self, client_name: str) -> Optional[str]:
        """Canonical name for `client_name`, or None if unknown."""
        ...

    def register(self, client_name: str) -> str:
        """Record a client (no-op if known) and return its canonical name."""
        ...


class InMemoryClientRegistry:
    """Registry keyed by normalised name.

    The first spelling registered for a client becomes its canonical name.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._by_key: Dict[str, str] = {}
        for name in names:
            self.register(name)

    def register(self, client_name: str) -> str:
        key = normalize_name(client_name)
        if not key:
            raise ValueError("Client name is required")
        with self._lock:
            return self._by_key.setdefault(key, client_name.strip())

    def lookup(self, client_name: str) -> Optional[str]:
        key = normalize_name(client_name)
        if not key:
            return None
        with self._lock:
            return self._by_key.get(key)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._by_key.values())
