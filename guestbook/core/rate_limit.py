"""Per-IP submission throttling.

Rate limiting strategy:
- One accepted message per client address per interval (default 60s).
- The limiter keeps no state of its own: the newest stored entry for the
  address is the source of truth, so it works unchanged across workers that
  share a database.
- A throttled request gets no error response. It is held open for a fixed
  delay and then closed with an empty body, which makes flooding expensive
  for the sender.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Awaitable, Callable

from guestbook.adapters.storage.base import AbstractGuestRepository
from guestbook.core.errors import StorageAppError
from guestbook.core.logging import hash_identity
from guestbook.schemas.guest import ClientIdentity, utcnow

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class SubmissionThrottle:
    """Decide whether a client posted too recently to post again."""

    def __init__(
        self,
        repository: AbstractGuestRepository,
        *,
        min_interval_seconds: float = 60.0,
        fail_closed: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the throttle.

        Args:
            repository: Storage used to look up the client's last message.
            min_interval_seconds: Minimum gap between accepted messages.
            fail_closed: Throttle when the lookup itself fails instead of
                letting the submission through.
            clock: Source of timezone-aware "now".

        Raises:
            ValueError: If min_interval_seconds is negative.
        """
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must be >= 0")

        self._repository = repository
        self._min_interval = min_interval_seconds
        self._fail_closed = fail_closed
        self._clock = clock

    def is_throttled(self, identity: ClientIdentity | None) -> bool:
        """Check the client's last stored message against the interval.

        Args:
            identity: Resolved client address; None skips the check since
                there is nothing to look up.

        Returns:
            True if the submission must be rejected.
        """
        if identity is None:
            return False

        try:
            last = self._repository.last_message(identity)
        except StorageAppError as exc:
            logger.warning(
                "rate_limit.lookup_failed",
                extra={
                    "ip_hash": hash_identity(identity),
                    "error_code": exc.code,
                    "fail_closed": self._fail_closed,
                },
            )
            return self._fail_closed

        if last is None:
            return False

        elapsed = (self._clock() - last.created_at).total_seconds()
        if elapsed < self._min_interval:
            logger.info(
                "rate_limit.throttled",
                extra={
                    "ip_hash": hash_identity(identity),
                    "elapsed_s": round(elapsed, 3),
                    "interval_s": self._min_interval,
                },
            )
            return True

        return False


async def hold_connection(
    delay_seconds: float,
    is_disconnected: DisconnectCheck | None = None,
    *,
    poll_interval: float = 1.0,
) -> bool:
    """Keep the current request waiting for ``delay_seconds``.

    Only the calling task sleeps. The wait ends early when the client goes
    away; task cancellation propagates to the caller unchanged.

    Args:
        delay_seconds: Total time to hold the request.
        is_disconnected: Optional async callback (e.g. ``Request.is_disconnected``).
        poll_interval: How often to poll ``is_disconnected``, in seconds.

    Returns:
        True if the full delay elapsed, False if the client disconnected.
    """
    deadline = time.monotonic() + delay_seconds
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return True
        await asyncio.sleep(min(poll_interval, remaining))
        if is_disconnected is not None and await is_disconnected():
            logger.debug("rate_limit.hold_abandoned", extra={"remaining_s": round(remaining, 3)})
            return False
