"""Outcome types for the submission pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from guestbook.schemas.guest import GuestEntry


class SubmissionKind(str, Enum):
    """Terminal outcome of one submission."""

    ACCEPTED = "accepted"
    MISSING_FIELD = "missing_field"
    REJECTED_BLANK = "rejected_blank"
    RATE_LIMITED = "rate_limited"
    REJECTED_PROFANE = "rejected_profane"
    REJECTED_LINK = "rejected_link"
    INTERNAL_ERROR = "internal_error"


# Rejections that are shown to the user with a rendered message.
MODERATION_REJECTIONS = frozenset(
    {
        SubmissionKind.REJECTED_BLANK,
        SubmissionKind.REJECTED_PROFANE,
        SubmissionKind.REJECTED_LINK,
    }
)


@dataclass(frozen=True)
class ModerationVerdict:
    """Result of reviewing message content.

    Attributes:
        kind: ACCEPTED or one of the moderation rejection kinds.
        message: User-facing explanation when rejected.
    """

    kind: SubmissionKind
    message: str | None = None

    @property
    def accepted(self) -> bool:
        return self.kind is SubmissionKind.ACCEPTED


@dataclass(frozen=True)
class SubmissionResult:
    """Result of running one submission through the pipeline.

    Attributes:
        kind: Terminal outcome.
        message: User-facing error string for moderation rejections.
        entry: The persisted entry when accepted.
    """

    kind: SubmissionKind
    message: str | None = None
    entry: GuestEntry | None = None
