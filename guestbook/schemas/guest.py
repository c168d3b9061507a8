"""Pydantic schemas for guestbook entries."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from ipaddress import IPv4Address, IPv6Address
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

ClientIdentity = IPv4Address | IPv6Address


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class GuestEntry(BaseModel):
    """One accepted guestbook message.

    Entries are immutable once built; storage adapters own them after insert.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        description="Unique entry identifier.",
    )
    message: str = Field(
        ...,
        description="Normalized, single-line message text.",
    )
    ip: ClientIdentity | None = Field(
        default=None,
        description="Client address the message was submitted from (None when unknown).",
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        description="UTC creation timestamp.",
    )

    @classmethod
    def create(
        cls,
        message: str,
        ip: ClientIdentity | None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> "GuestEntry":
        """Build a new entry stamped with the current time."""
        return cls(message=message, ip=ip, created_at=clock())
