"""Per-scope gates that serialize check-then-seed sequences."""

import asyncio
import weakref
from dataclasses import dataclass
from typing import Protocol


class ScopeGate(Protocol):
    """Hands out one lock per store collection."""

    def lock_for(self, key: str) -> asyncio.Lock:
        """Return the lock guarding a collection path."""


@dataclass
class InMemoryScopeGate(ScopeGate):
    """Process-local gate; other devices can still race.

    Locks are held weakly, so a key's entry disappears once no caller is
    holding or waiting on its lock.
    """

    _locks: "weakref.WeakValueDictionary[str, asyncio.Lock]"

    def __init__(self) -> None:
        self._locks = weakref.WeakValueDictionary()

    def lock_for(self, key: str) -> asyncio.Lock:
        """Return the lock for a key, creating it on first use."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock
