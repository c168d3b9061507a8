import re
from typing import Iterable

# Compiled once at import and never mutated.
NEWLINE_PATTERN = re.compile(r"\r?\n")


def join_form_values(values: Iterable[str]) -> str:
    """Join repeated form values for one field with a single space."""
    return " ".join(values)


def collapse_newlines(text: str) -> str:
    """Collapse line breaks so a message always renders on one line.

    Each ``\\r\\n`` or ``\\n`` becomes one space. Surrounding whitespace is
    left untouched; applying this twice gives the same result as once.

    Args:
        text: Raw message text.

    Returns:
        str: Single-line text.
    """
    return NEWLINE_PATTERN.sub(" ", text)


def is_blank(text: str) -> bool:
    return not text.strip()
