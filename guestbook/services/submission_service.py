"""Guestbook submission pipeline.

This service is the core business logic that turns a raw form submission into
a stored guest entry or a rejection. Per submission it:
- rejects a missing ``message`` field and blank text
- resolves the client address from proxy headers
- throttles clients that posted within the last interval
- collapses line breaks, then runs profanity and link moderation
- builds the entry and hands it to the repository

Every decision is returned as a SubmissionResult; only storage failures are
logged as errors.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Sequence

from pydantic import ValidationError

from guestbook.adapters.storage.base import AbstractGuestRepository
from guestbook.core.errors import StorageAppError
from guestbook.core.identity import resolve_identity
from guestbook.core.logging import hash_identity
from guestbook.core.rate_limit import SubmissionThrottle
from guestbook.schemas.guest import GuestEntry, utcnow
from guestbook.schemas.submission import SubmissionKind, SubmissionResult
from guestbook.services.moderation import BLANK_MESSAGE, ContentModerator
from guestbook.utils.text_normalizer import collapse_newlines, is_blank, join_form_values

logger = logging.getLogger(__name__)


class SubmissionService:
    """Run submissions through validation, throttling and moderation."""

    def __init__(
        self,
        repository: AbstractGuestRepository,
        *,
        moderator: ContentModerator | None = None,
        throttle: SubmissionThrottle | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Storage for accepted entries.
            moderator: Content checks; a default ContentModerator if omitted.
            throttle: Per-IP throttle; None disables rate limiting.
            clock: Source of entry timestamps.
        """
        self._repository = repository
        self._moderator = moderator or ContentModerator()
        self._throttle = throttle
        self._clock = clock

    def submit(
        self,
        values: Sequence[str] | None,
        *,
        forwarded_for: str | None = None,
        remote_addr: str | None = None,
    ) -> SubmissionResult:
        """Handle one guestbook submission end to end.

        Args:
            values: All submitted ``message`` form values, or None when the
                field was absent.
            forwarded_for: X-Forwarded-For header value.
            remote_addr: Connection address as ``host:port``.

        Returns:
            SubmissionResult describing the terminal outcome.
        """
        if values is None:
            return SubmissionResult(SubmissionKind.MISSING_FIELD)

        message = join_form_values(values)
        if is_blank(message):
            return SubmissionResult(SubmissionKind.REJECTED_BLANK, BLANK_MESSAGE)

        identity = resolve_identity(forwarded_for, remote_addr)
        ip_hash = hash_identity(identity)

        if self._throttle is not None and self._throttle.is_throttled(identity):
            return SubmissionResult(SubmissionKind.RATE_LIMITED)

        message = collapse_newlines(message)

        verdict = self._moderator.review(message, identity)
        if not verdict.accepted:
            return SubmissionResult(verdict.kind, verdict.message)

        try:
            entry = GuestEntry.create(message, identity, clock=self._clock)
        except ValidationError as exc:
            logger.error(
                "submission.entry_invalid",
                extra={"ip_hash": ip_hash, "error_count": exc.error_count()},
            )
            return SubmissionResult(SubmissionKind.INTERNAL_ERROR)

        try:
            self._repository.insert(entry)
        except StorageAppError as exc:
            logger.error(
                "submission.insert_failed",
                extra={"ip_hash": ip_hash, "error_code": exc.code, "details": exc.details},
            )
            return SubmissionResult(SubmissionKind.INTERNAL_ERROR)

        logger.info(
            "submission.accepted",
            extra={"ip_hash": ip_hash, "entry_id": str(entry.id), "char_count": len(message)},
        )
        return SubmissionResult(SubmissionKind.ACCEPTED, entry=entry)

    def list_entries(self, limit: int) -> tuple[list[GuestEntry], int]:
        """Fetch the newest entries and the total count for the listing page.

        Raises:
            StorageAppError: If the repository cannot be read.
        """
        return self._repository.find_all(limit), self._repository.count()
