"""Guest repository interface.

Routes and services depend on this abstraction (not a concrete backend) so the
storage engine can be swapped without touching the submission pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from guestbook.schemas.guest import ClientIdentity, GuestEntry


class AbstractGuestRepository(ABC):
    """Interface for guest entry storage.

    Implementations must raise StorageAppError for any backend failure and
    must make insert atomic: an entry is either fully stored or not at all.
    """

    @abstractmethod
    def find_all(self, limit: int) -> list[GuestEntry]:
        """Return up to ``limit`` entries, newest first."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the total number of stored entries."""
        raise NotImplementedError

    @abstractmethod
    def last_message(self, ip: ClientIdentity) -> GuestEntry | None:
        """Return the most recent entry submitted from ``ip``.

        Args:
            ip: Client address to look up.

        Returns:
            The newest matching entry, or None when the address never posted.
        """
        raise NotImplementedError

    @abstractmethod
    def insert(self, entry: GuestEntry) -> None:
        """Persist a new entry."""
        raise NotImplementedError
