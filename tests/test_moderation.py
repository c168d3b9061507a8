"""Unit tests for content moderation."""

from ipaddress import IPv4Address

import pytest

from guestbook.schemas.submission import SubmissionKind
from guestbook.services.moderation import (
    BLANK_MESSAGE,
    LINK_MESSAGE,
    ContentModerator,
    contains_link,
    contains_profanity,
)

IDENTITY = IPv4Address("198.51.100.23")


@pytest.fixture
def moderator() -> ContentModerator:
    return ContentModerator()


def test_clean_message_is_accepted(moderator: ContentModerator) -> None:
    verdict = moderator.review("Hello world, lovely site!", IDENTITY)

    assert verdict.accepted is True
    assert verdict.message is None


@pytest.mark.parametrize("text", ["", "   ", "\t  "])
def test_blank_message_is_rejected(moderator: ContentModerator, text: str) -> None:
    verdict = moderator.review(text, IDENTITY)

    assert verdict.kind is SubmissionKind.REJECTED_BLANK
    assert verdict.message == BLANK_MESSAGE


def test_profanity_message_echoes_identity(moderator: ContentModerator) -> None:
    verdict = moderator.review("this is shit", IDENTITY)

    assert verdict.kind is SubmissionKind.REJECTED_PROFANE
    assert verdict.message == (
        "Please don't use profanity. Your IP has been tracked 198.51.100.23"
    )


def test_profanity_message_without_identity_uses_placeholder(
    moderator: ContentModerator,
) -> None:
    verdict = moderator.review("this is shit", None)

    assert verdict.kind is SubmissionKind.REJECTED_PROFANE
    assert verdict.message.endswith("tracked unknown")


def test_profanity_checked_before_links(moderator: ContentModerator) -> None:
    verdict = moderator.review("shit, see example.com", IDENTITY)

    assert verdict.kind is SubmissionKind.REJECTED_PROFANE


@pytest.mark.parametrize(
    "text",
    [
        "visit http://evil.example now",
        "https://example.org/path?q=1",
        "ftp://files.example.net",
        "go to www.example.org",
        "bare example.com domain",
        "check out shop.co.uk today",
        "mid-sentence,example.io/promo",
        "EXAMPLE.COM shouting",
        "host with port localhost.dev:8080/x",
        "mail me mailto:someone@example.com",
        "cheap pills at pharma.ninja",
        "lucky.casino pays out",
        "fast cash from quick.loans",
        "invest via crypto.finance",
        "login at 203.0.113.9/admin",
        "dev box on 10.0.0.1:8080",
        "сайт пример.рф тут",
        "see пример.рф",
    ],
)
def test_links_are_rejected(moderator: ContentModerator, text: str) -> None:
    verdict = moderator.review(text, IDENTITY)

    assert verdict.kind is SubmissionKind.REJECTED_LINK
    assert verdict.message == LINK_MESSAGE


@pytest.mark.parametrize(
    "text",
    [
        "Hello world",
        "Great party. See you next year",
        "e.g. this is fine",
        "Version 3.14 is out",
        "a company party",
    ],
)
def test_plain_text_is_not_a_link(text: str) -> None:
    assert contains_link(text) is False


@pytest.mark.parametrize(
    "text",
    [
        "this is shit",
        "shitstorm incoming",
        "youarebullshit",
        "fuuuuck",
        "f.u.c.k you",
        "sh1t",
        "what a fuckface",
        "f u c k off",
        "B1TCH",
    ],
)
def test_obfuscated_and_joined_profanity_is_caught(text: str) -> None:
    assert contains_profanity(text) is True


@pytest.mark.parametrize(
    "text",
    [
        "Hello world",
        "this hit song",
        "Scunthorpe United away day",
        "shiitake mushrooms on toast",
        "classic grass",
        "cocktail hour",
        "a b c",
    ],
)
def test_innocent_words_are_not_profanity(text: str) -> None:
    assert contains_profanity(text) is False


def test_joined_profanity_is_rejected(moderator: ContentModerator) -> None:
    verdict = moderator.review("shitstorm incoming", IDENTITY)

    assert verdict.kind is SubmissionKind.REJECTED_PROFANE
