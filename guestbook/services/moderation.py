"""Content moderation for guestbook messages.

Checks run in a fixed order and the first failing check decides the verdict:

1. blank text
2. profanity: better-profanity's whole-word list (with character swaps),
   then a fragment pass that catches profane roots glued into longer tokens
   (``shitstorm``), stretched (``fuuuuck``) or spelled out (``f u c k``)
3. links: scheme URLs, ``www.`` hosts, IPv4 hosts, and bare domains under
   any IANA TLD (urlextract), including internationalized ones

Moderation rejections are ordinary traffic, so they are logged at info level
with a hashed client identity only.
"""

from __future__ import annotations

import logging
import re

from better_profanity import profanity
from urlextract import URLExtract

from guestbook.core.identity import describe_identity
from guestbook.core.logging import hash_identity
from guestbook.schemas.guest import ClientIdentity
from guestbook.schemas.submission import ModerationVerdict, SubmissionKind
from guestbook.utils.text_normalizer import is_blank

logger = logging.getLogger(__name__)

BLANK_MESSAGE = "Blank messages don't count"
PROFANITY_MESSAGE = "Please don't use profanity. Your IP has been tracked {identity}"
LINK_MESSAGE = "No links allowed"

# Roots searched inside tokens. Short or ambiguous words (ass, tit, cock)
# stay whole-word only, since as fragments they hit "class" or "cocktail".
PROFANE_ROOTS = ("fuck", "shit", "cunt", "bitch", "whore", "asshole", "dickhead")

# Innocent words containing a root; removed before the fragment pass.
FRAGMENT_FALSE_POSITIVES = ("scunthorpe", "shitake", "shiitake")

_LEET = str.maketrans(
    {"0": "o", "1": "i", "3": "e", "4": "a", "5": "s", "7": "t", "@": "a", "$": "s", "!": "i"}
)
_NON_LETTERS = re.compile(r"[^a-z]+")
_REPEATS = re.compile(r"(.)\1+")

_IPV4_OCTET = r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"

# Compiled once at import and never mutated.
LINK_PATTERN = re.compile(
    r"""
    (?:
        \b[a-z][a-z0-9+.\-]*://[^\s<>"]+              # scheme://anything
      | \bmailto:[^\s<>"]+                            # mailto:user@host
      | \bwww\d{0,3}\.[a-z0-9\-]+[^\s<>"]*            # www.host
      | (?<![\d.])(?:%(octet)s\.){3}%(octet)s(?![\d]|\.\d)  # IPv4 host
      | (?:[^\W_](?:[\w\-]{0,61}[^\W_])?\.)+          # IDN labels
        [^\W\d_a-zA-Z]{2,}(?![\w\-])                  # non-ASCII tld
    )
    """
    % {"octet": _IPV4_OCTET},
    re.IGNORECASE | re.VERBOSE,
)

# Punctuation urlextract does not treat as a boundary; only used for detection.
_URL_SEPARATORS = re.compile(r"[,;!?()\[\]{}]")

profanity.load_censor_words()

# Loads the IANA TLD list bundled with urlextract; no network access.
_url_extractor = URLExtract(extract_localhost=False)


def _squash(token: str) -> str:
    """Lowercase, undo digit/symbol swaps, drop non-letters, collapse runs."""
    token = _NON_LETTERS.sub("", token.lower().translate(_LEET))
    for word in FRAGMENT_FALSE_POSITIVES:
        token = token.replace(word, "")
    return _REPEATS.sub(r"\1", token)


_SQUASHED_ROOTS = tuple(_REPEATS.sub(r"\1", root) for root in PROFANE_ROOTS)


def _fragments(text: str) -> list[str]:
    """Squashed tokens, with runs of single letters (``f u c k``) joined."""
    fragments: list[str] = []
    spelled: list[str] = []
    for token in text.split():
        squashed = _squash(token)
        if len(squashed) == 1:
            spelled.append(squashed)
            continue
        if spelled:
            fragments.append("".join(spelled))
            spelled = []
        fragments.append(squashed)
    if spelled:
        fragments.append("".join(spelled))
    return fragments


def contains_profanity(text: str) -> bool:
    """Return True if ``text`` contains a profane word or profane fragment."""
    if profanity.contains_profanity(text):
        return True
    return any(
        root in fragment for fragment in _fragments(text) for root in _SQUASHED_ROOTS
    )


def contains_link(text: str) -> bool:
    """Return True if anything in ``text`` looks like a URL, host or domain."""
    if LINK_PATTERN.search(text) is not None:
        return True
    return _url_extractor.has_urls(_URL_SEPARATORS.sub(" ", text).lower())


class ContentModerator:
    """Decide whether a normalized message may be published."""

    def review(self, text: str, identity: ClientIdentity | None) -> ModerationVerdict:
        """Run the blank, profanity and link checks in order.

        Args:
            text: Message text with line breaks already collapsed.
            identity: Resolved client address, echoed in the profanity
                message (a placeholder is used when it is unknown).

        Returns:
            ModerationVerdict: ACCEPTED, or the first rejection that applies.
        """
        if is_blank(text):
            return ModerationVerdict(SubmissionKind.REJECTED_BLANK, BLANK_MESSAGE)

        if contains_profanity(text):
            logger.info(
                "moderation.rejected",
                extra={"reason": "profanity", "ip_hash": hash_identity(identity)},
            )
            return ModerationVerdict(
                SubmissionKind.REJECTED_PROFANE,
                PROFANITY_MESSAGE.format(identity=describe_identity(identity)),
            )

        if contains_link(text):
            logger.info(
                "moderation.rejected",
                extra={"reason": "link", "ip_hash": hash_identity(identity)},
            )
            return ModerationVerdict(SubmissionKind.REJECTED_LINK, LINK_MESSAGE)

        return ModerationVerdict(SubmissionKind.ACCEPTED)
