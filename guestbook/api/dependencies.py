"""FastAPI dependencies wiring storage and the submission pipeline.

The repository is cached in-module so every request shares one connection
pool. Tests replace it through ``app.dependency_overrides[get_repository]``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from guestbook.adapters.storage.base import AbstractGuestRepository
from guestbook.adapters.storage.in_memory import InMemoryGuestRepository
from guestbook.adapters.storage.sql import SQLGuestRepository
from guestbook.core.config import settings
from guestbook.core.errors import ValidationAppError
from guestbook.core.rate_limit import SubmissionThrottle
from guestbook.services.moderation import ContentModerator
from guestbook.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

_repository: AbstractGuestRepository | None = None
_moderator = ContentModerator()


def build_repository() -> AbstractGuestRepository:
    """Create the repository selected by DB_BACKEND.

    Raises:
        ValidationAppError: If the configured backend is unknown.
    """
    backend = settings.db.backend.lower()
    if backend == "memory":
        return InMemoryGuestRepository()
    if backend == "sql":
        return SQLGuestRepository.from_url(settings.db.url, echo=settings.db.echo)

    raise ValidationAppError(
        code="unknown_storage_backend",
        message=f"Unsupported storage backend: {settings.db.backend}",
        details={"backend": settings.db.backend},
    )


def get_repository() -> AbstractGuestRepository:
    """Return the process-wide repository, creating it on first use."""
    global _repository

    if _repository is None:
        _repository = build_repository()
        logger.info("storage.ready", extra={"backend": settings.db.backend})
    return _repository


def get_submission_service(
    repository: Annotated[AbstractGuestRepository, Depends(get_repository)],
) -> SubmissionService:
    throttle = None
    if settings.app.rate_limit_enabled:
        throttle = SubmissionThrottle(
            repository,
            min_interval_seconds=settings.app.rate_limit_interval_seconds,
            fail_closed=settings.app.rate_limit_fail_closed,
        )
    return SubmissionService(repository, moderator=_moderator, throttle=throttle)
