"""Unit tests for the per-IP submission throttle."""

import asyncio
from datetime import timedelta
from ipaddress import IPv4Address
from unittest.mock import AsyncMock, Mock

import pytest

from guestbook.adapters.storage.in_memory import InMemoryGuestRepository
from guestbook.core.errors import StorageAppError
from guestbook.core.rate_limit import SubmissionThrottle, hold_connection
from guestbook.schemas.guest import GuestEntry

from conftest import FIXED_NOW

IDENTITY = IPv4Address("203.0.113.5")


def _repo_with_entry(age_seconds: float, ip=IDENTITY) -> InMemoryGuestRepository:
    entry = GuestEntry(message="hi", ip=ip, created_at=FIXED_NOW - timedelta(seconds=age_seconds))
    return InMemoryGuestRepository([entry])


def _throttle(repo, **kwargs) -> SubmissionThrottle:
    return SubmissionThrottle(repo, clock=Mock(return_value=FIXED_NOW), **kwargs)


def test_allows_first_submission() -> None:
    assert _throttle(InMemoryGuestRepository()).is_throttled(IDENTITY) is False


@pytest.mark.parametrize("age", [0, 1, 30, 59.9])
def test_throttles_recent_submission(age: float) -> None:
    assert _throttle(_repo_with_entry(age)).is_throttled(IDENTITY) is True


@pytest.mark.parametrize("age", [60, 61, 3600])
def test_allows_after_interval(age: float) -> None:
    assert _throttle(_repo_with_entry(age)).is_throttled(IDENTITY) is False


def test_isolated_by_identity() -> None:
    throttle = _throttle(_repo_with_entry(5))

    assert throttle.is_throttled(IPv4Address("203.0.113.6")) is False


def test_absent_identity_skips_lookup() -> None:
    repo = Mock()
    throttle = _throttle(repo)

    assert throttle.is_throttled(None) is False
    repo.last_message.assert_not_called()


def _failing_repo() -> Mock:
    repo = Mock()
    repo.last_message.side_effect = StorageAppError(
        code="storage_last_message_failed", message="boom"
    )
    return repo


def test_lookup_failure_fails_open_by_default() -> None:
    assert _throttle(_failing_repo()).is_throttled(IDENTITY) is False


def test_lookup_failure_can_fail_closed() -> None:
    assert _throttle(_failing_repo(), fail_closed=True).is_throttled(IDENTITY) is True


def test_custom_interval() -> None:
    throttle = _throttle(_repo_with_entry(10), min_interval_seconds=5)

    assert throttle.is_throttled(IDENTITY) is False


def test_invalid_interval() -> None:
    with pytest.raises(ValueError):
        SubmissionThrottle(InMemoryGuestRepository(), min_interval_seconds=-1)


@pytest.mark.asyncio
async def test_hold_connection_waits_full_delay() -> None:
    is_disconnected = AsyncMock(return_value=False)

    assert await hold_connection(0.05, is_disconnected, poll_interval=0.01) is True
    assert is_disconnected.await_count >= 1


@pytest.mark.asyncio
async def test_hold_connection_stops_on_disconnect() -> None:
    is_disconnected = AsyncMock(return_value=True)

    assert await hold_connection(30, is_disconnected, poll_interval=0.01) is False
    is_disconnected.assert_awaited_once()


@pytest.mark.asyncio
async def test_hold_connection_zero_delay_returns_immediately() -> None:
    assert await hold_connection(0) is True


@pytest.mark.asyncio
async def test_hold_connection_propagates_cancellation() -> None:
    task = asyncio.create_task(hold_connection(30, poll_interval=0.01))
    await asyncio.sleep(0.02)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
