"""SQLAlchemy guest repository.

Portable: works on SQLite (default) and PostgreSQL. Every backend failure is
re-raised as StorageAppError so callers never see driver exceptions.
"""

from __future__ import annotations

import ipaddress
import logging
import uuid
from contextlib import contextmanager
from datetime import timezone
from typing import Generator

from sqlalchemy import Column, DateTime, Index, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from guestbook.adapters.storage.base import AbstractGuestRepository
from guestbook.core.errors import StorageAppError
from guestbook.schemas.guest import ClientIdentity, GuestEntry

logger = logging.getLogger(__name__)

Base = declarative_base()


class GuestRow(Base):
    __tablename__ = "guest"

    id = Column(String(36), primary_key=True)
    message = Column(Text, nullable=False)
    ip = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_guest_ip_created_at", "ip", "created_at"),)


def create_engine_for_url(url: str, *, echo: bool = False) -> Engine:
    """Create an engine suited to the database behind ``url``."""
    if url.startswith("sqlite"):
        # In-memory SQLite needs a single shared connection across threads.
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    return create_engine(url, pool_size=5, max_overflow=10, pool_pre_ping=True, echo=echo)


def _to_row(entry: GuestEntry) -> GuestRow:
    return GuestRow(
        id=str(entry.id),
        message=entry.message,
        ip=str(entry.ip) if entry.ip is not None else None,
        created_at=entry.created_at,
    )


def _to_entry(row: GuestRow) -> GuestEntry:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite drops the offset; everything is stored in UTC.
        created_at = created_at.replace(tzinfo=timezone.utc)
    return GuestEntry(
        id=uuid.UUID(row.id),
        message=row.message,
        ip=ipaddress.ip_address(row.ip) if row.ip else None,
        created_at=created_at,
    )


class SQLGuestRepository(AbstractGuestRepository):
    """Guest repository backed by a relational database."""

    def __init__(self, engine: Engine, *, create_schema: bool = True) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False)
        if create_schema:
            try:
                Base.metadata.create_all(engine)
            except SQLAlchemyError as exc:
                raise self._storage_error("create_schema", exc) from exc

    @classmethod
    def from_url(cls, url: str, *, echo: bool = False) -> "SQLGuestRepository":
        return cls(create_engine_for_url(url, echo=echo))

    def _storage_error(self, operation: str, exc: Exception) -> StorageAppError:
        logger.error(
            "storage.operation_failed",
            extra={
                "operation": operation,
                "backend": self._engine.dialect.name,
                "error_type": type(exc).__name__,
            },
        )
        return StorageAppError(
            code=f"storage_{operation}_failed",
            message=f"Guest storage failed during {operation}",
            details={
                "operation": operation,
                "backend": self._engine.dialect.name,
                "error_type": type(exc).__name__,
            },
        )

    @contextmanager
    def _session_scope(self, operation: str) -> Generator[Session, None, None]:
        """Transactional scope; commits on success and rolls back on failure."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise self._storage_error(operation, exc) from exc
        finally:
            session.close()

    def find_all(self, limit: int) -> list[GuestEntry]:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        with self._session_scope("find_all") as session:
            rows = session.scalars(
                select(GuestRow).order_by(GuestRow.created_at.desc()).limit(limit)
            ).all()
            return [_to_entry(row) for row in rows]

    def count(self) -> int:
        with self._session_scope("count") as session:
            return int(session.scalar(select(func.count()).select_from(GuestRow)) or 0)

    def last_message(self, ip: ClientIdentity) -> GuestEntry | None:
        with self._session_scope("last_message") as session:
            row = session.scalars(
                select(GuestRow)
                .where(GuestRow.ip == str(ip))
                .order_by(GuestRow.created_at.desc())
                .limit(1)
            ).first()
            return _to_entry(row) if row is not None else None

    def insert(self, entry: GuestEntry) -> None:
        with self._session_scope("insert") as session:
            session.add(_to_row(entry))
