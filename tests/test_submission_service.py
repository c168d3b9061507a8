"""Tests for the submission pipeline orchestration."""

from datetime import timedelta
from ipaddress import IPv4Address
from unittest.mock import MagicMock, Mock

import pytest

from guestbook.adapters.storage.in_memory import InMemoryGuestRepository
from guestbook.core.errors import StorageAppError
from guestbook.core.rate_limit import SubmissionThrottle
from guestbook.schemas.guest import GuestEntry
from guestbook.schemas.submission import SubmissionKind
from guestbook.services.submission_service import SubmissionService

from conftest import FIXED_NOW

CLIENT_IP = "192.0.2.44"


def _service(repo, *, throttled: bool = True) -> SubmissionService:
    clock = Mock(return_value=FIXED_NOW)
    throttle = SubmissionThrottle(repo, clock=clock) if throttled else None
    return SubmissionService(repo, throttle=throttle, clock=clock)


@pytest.fixture
def repo() -> InMemoryGuestRepository:
    return InMemoryGuestRepository()


def test_accepts_and_persists(repo: InMemoryGuestRepository) -> None:
    result = _service(repo).submit(["Hello world"], forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.ACCEPTED
    assert repo.count() == 1
    stored = repo.find_all(10)[0]
    assert stored == result.entry
    assert stored.message == "Hello world"
    assert stored.ip == IPv4Address(CLIENT_IP)
    assert stored.created_at == FIXED_NOW


def test_joins_repeated_values(repo: InMemoryGuestRepository) -> None:
    result = _service(repo).submit(["Hello", "again"], forwarded_for=CLIENT_IP)

    assert result.entry.message == "Hello again"


def test_collapses_newlines_before_storing(repo: InMemoryGuestRepository) -> None:
    result = _service(repo).submit(["first\r\nsecond\nthird"], forwarded_for=CLIENT_IP)

    assert result.entry.message == "first second third"


def test_missing_field(repo: InMemoryGuestRepository) -> None:
    result = _service(repo).submit(None, forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.MISSING_FIELD
    assert result.message is None
    assert repo.count() == 0


@pytest.mark.parametrize("values", [[""], ["   "], ["\r\n", " "]])
def test_blank_rejected_even_when_rate_limited(values) -> None:
    recent = GuestEntry(message="hi", ip=IPv4Address(CLIENT_IP), created_at=FIXED_NOW)
    repo = InMemoryGuestRepository([recent])

    result = _service(repo).submit(values, forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.REJECTED_BLANK
    assert result.message == "Blank messages don't count"


def test_rate_limited_regardless_of_content() -> None:
    recent = GuestEntry(
        message="hi",
        ip=IPv4Address(CLIENT_IP),
        created_at=FIXED_NOW - timedelta(seconds=10),
    )
    repo = InMemoryGuestRepository([recent])
    service = _service(repo)

    for text in ["Hello world", "shit", "see example.com"]:
        result = service.submit([text], forwarded_for=CLIENT_IP)
        assert result.kind is SubmissionKind.RATE_LIMITED
        assert result.message is None

    assert repo.count() == 1


def test_throttle_disabled() -> None:
    recent = GuestEntry(message="hi", ip=IPv4Address(CLIENT_IP), created_at=FIXED_NOW)
    repo = InMemoryGuestRepository([recent])

    result = _service(repo, throttled=False).submit(["again"], forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.ACCEPTED


def test_unknown_identity_is_not_throttled_and_is_stored_without_ip(
    repo: InMemoryGuestRepository,
) -> None:
    service = _service(repo)

    first = service.submit(["one"], remote_addr="not-an-address:1")
    second = service.submit(["two"], remote_addr="not-an-address:1")

    assert first.kind is SubmissionKind.ACCEPTED
    assert second.kind is SubmissionKind.ACCEPTED
    assert first.entry.ip is None


def test_profanity_rejection_mentions_ip(repo: InMemoryGuestRepository) -> None:
    result = _service(repo).submit(["what the shit"], forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.REJECTED_PROFANE
    assert CLIENT_IP in result.message
    assert repo.count() == 0


def test_link_split_across_lines_is_rejected(repo: InMemoryGuestRepository) -> None:
    result = _service(repo).submit(["visit\nhttp://evil.example now"], forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.REJECTED_LINK
    assert result.message == "No links allowed"
    assert repo.count() == 0


def test_insert_failure_is_internal_error() -> None:
    repo = MagicMock()
    repo.last_message.return_value = None
    repo.insert.side_effect = StorageAppError(code="storage_insert_failed", message="down")

    result = _service(repo).submit(["Hello world"], forwarded_for=CLIENT_IP)

    assert result.kind is SubmissionKind.INTERNAL_ERROR
    assert result.message is None


def test_list_entries_newest_first(repo: InMemoryGuestRepository) -> None:
    for offset, text in enumerate(["oldest", "middle", "newest"]):
        repo.insert(
            GuestEntry(message=text, created_at=FIXED_NOW + timedelta(minutes=offset))
        )

    entries, total = _service(repo).list_entries(2)

    assert [e.message for e in entries] == ["newest", "middle"]
    assert total == 3
