"""Plausibility check for player names recovered from OCR lines."""

import re

_NAME_CHARS_RE = re.compile(r"^[A-Za-z\s.\-']+$")
_LETTER_RE = re.compile(r"[A-Za-z]")

EXCLUDED_WORDS: frozenset[str] = frozenset(
    {"BATTING", "BOWLING", "FIELDING", "EXTRAS", "TOTAL", "RUNS", "WICKETS", "OVERS"}
)


def is_valid_name(text: str, min_length: int = 2, max_length: int = 30) -> bool:
    """Decide whether ``text`` looks like a human player name.

    Short all-uppercase tokens (three characters or fewer) are rejected
    because they are almost always team codes. Single-token names must
    be at least three characters long.

    Args:
        text: Candidate name, already stripped of leadership markers.
        min_length: Minimum accepted length.
        max_length: Maximum accepted length.

    Returns:
        ``True`` if the text passes every check.
    """
    if not min_length <= len(text) <= max_length:
        return False
    if not _NAME_CHARS_RE.match(text) or not _LETTER_RE.search(text):
        return False
    if len(text) <= 3 and text == text.upper():
        return False
    if text.upper() in EXCLUDED_WORDS:
        return False
    return " " in text or len(text) >= 3
