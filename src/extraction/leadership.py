"""Captain and vice-captain marker detection.

Fantasy apps annotate leadership in several ways that survive OCR
differently: bracket badges such as ``(c)`` or ``[vc]``, colon labels
such as ``Captain:``, stray ``c``/``vc`` tokens at either end of a row,
or the bare words "captain" and "vice". Each signal is checked
independently, so a single line may set both flags; callers apply the
precedence policy (see ``pipeline._ExtractionState.record_leadership``).
"""

import re
from dataclasses import dataclass

_FLAGS = re.IGNORECASE

_VICE_CAPTAIN_PHRASE_RE = re.compile(r"\bvice[ \t-]*captain\b", _FLAGS)

# (signal name, pattern) pairs, in precedence order.
_CAPTAIN_SIGNALS: list[tuple[str, re.Pattern[str]]] = [
    ("bracket", re.compile(r"[\(\[]\s*c\s*[\)\]]", _FLAGS)),
    ("label", re.compile(r"\bcaptain\s*:|^\s*c\s*:", _FLAGS)),
    ("token", re.compile(r"\sc$|^c\s|^c$", _FLAGS)),
    ("keyword", re.compile(r"\bcaptain\b", _FLAGS)),
]

_VICE_CAPTAIN_SIGNALS: list[tuple[str, re.Pattern[str]]] = [
    ("bracket", re.compile(r"[\(\[]\s*vc\s*[\)\]]", _FLAGS)),
    ("label", re.compile(r"\bvice[ \t-]*captain\s*:|^\s*vc\s*:", _FLAGS)),
    ("token", re.compile(r"\svc$|^vc\s|^vc$", _FLAGS)),
    ("keyword", re.compile(r"\bvice\b", _FLAGS)),
]

# Markers strong enough to keep a line the skip rules would drop.
_OVERRIDE_MARKER_RE = re.compile(
    r"[\(\[]\s*v?c\s*[\)\]]|captain:|^\s*v?c:|vice", _FLAGS
)

_STRIP_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"[\(\[]\s*v?c\s*[\)\]]", _FLAGS),
    re.compile(r"(?:\bvice[ \t-]*captain|\bcaptain|\bvc|\bc)\s*:", _FLAGS),
    re.compile(r"^\s*v?c\s+", _FLAGS),
    re.compile(r"\s+v?c\s*$", _FLAGS),
    re.compile(r"\bvice[ \t-]*captain\b|\bcaptain\b|\bvice\b", _FLAGS),
]


@dataclass(frozen=True)
class LeadershipFlags:
    """Leadership signals found on a single line."""

    is_captain: bool = False
    is_vice_captain: bool = False

    @property
    def any(self) -> bool:
        return self.is_captain or self.is_vice_captain


def detect_leadership(line: str) -> LeadershipFlags:
    """Detect captain and vice-captain markers on an original OCR line.

    The word "captain" only counts towards the captain flag when it is
    not part of "vice captain".

    Args:
        line: Trimmed line text, before any cleaning.

    Returns:
        Independent captain and vice-captain flags.
    """
    text = line.strip()
    captain_text = _VICE_CAPTAIN_PHRASE_RE.sub(" ", text).strip()

    is_captain = any(p.search(captain_text) for _, p in _CAPTAIN_SIGNALS)
    is_vice_captain = any(p.search(text) for _, p in _VICE_CAPTAIN_SIGNALS)
    return LeadershipFlags(is_captain=is_captain, is_vice_captain=is_vice_captain)


def matched_signals(line: str) -> list[str]:
    """Name every signal that fired on ``line``, e.g. ``captain:bracket``."""
    text = line.strip()
    captain_text = _VICE_CAPTAIN_PHRASE_RE.sub(" ", text).strip()
    signals = [f"captain:{n}" for n, p in _CAPTAIN_SIGNALS if p.search(captain_text)]
    signals += [f"vice_captain:{n}" for n, p in _VICE_CAPTAIN_SIGNALS if p.search(text)]
    return signals


def has_override_marker(line: str) -> bool:
    """Whether ``line`` carries a marker that overrides the skip rules."""
    return bool(_OVERRIDE_MARKER_RE.search(line.strip()))


def clean_name(line: str) -> str:
    """Strip leadership markers from a line and normalise whitespace.

    Example:
        >>> clean_name("Captain: Virat  Kohli")
        'Virat Kohli'
        >>> clean_name("Rohit Sharma (vc)")
        'Rohit Sharma'
    """
    text = line
    for pattern in _STRIP_PATTERNS:
        text = pattern.sub(" ", text)
    return " ".join(text.split())
