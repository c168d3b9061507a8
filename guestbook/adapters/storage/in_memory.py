"""In-memory guest repository.

Notes:
- Per-process only: entries vanish on restart and are not shared between
  workers.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import threading

from guestbook.adapters.storage.base import AbstractGuestRepository
from guestbook.schemas.guest import ClientIdentity, GuestEntry


class InMemoryGuestRepository(AbstractGuestRepository):
    """Guest repository keeping entries in a list, oldest first."""

    def __init__(self, entries: list[GuestEntry] | None = None) -> None:
        self._lock = threading.RLock()
        self._entries: list[GuestEntry] = sorted(
            entries or [], key=lambda e: e.created_at
        )

    def _newest_first(self) -> list[GuestEntry]:
        return sorted(self._entries, key=lambda e: e.created_at, reverse=True)

    def find_all(self, limit: int) -> list[GuestEntry]:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        with self._lock:
            return self._newest_first()[:limit]

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def last_message(self, ip: ClientIdentity) -> GuestEntry | None:
        with self._lock:
            for entry in self._newest_first():
                if entry.ip == ip:
                    return entry
        return None

    def insert(self, entry: GuestEntry) -> None:
        with self._lock:
            self._entries.append(entry)
