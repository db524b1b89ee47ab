"""Declarative noise rules for fantasy-team OCR text.

Holds the role header patterns, the ordered skip-rule table used by the
structured pass, and the broader token denylist used by the relaxed
passes. Adding support for a new app layout should only require editing
the tables in this module.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from .models import Role

TEAM_CODES: frozenset[str] = frozenset(
    {
        "CSK", "MI", "RCB", "KKR", "DC", "PBKS", "RR", "SRH", "GT", "LSG",
        "DT", "RC", "KK", "PB", "SR", "GU", "LS",
    }
)

UI_CHROME_WORDS: tuple[str, ...] = (
    "dream11",
    "pts",
    "team",
    "match",
    "save",
    "selected",
    "edit",
    "confirm",
    "submit",
    "preview",
    "credits",
    "remaining",
    "balance",
)

ROLE_WORDS: tuple[str, ...] = (
    "wicket",
    "keeper",
    "batter",
    "batsman",
    "rounder",
    "bowler",
)

ACTION_WORDS: frozenset[str] = frozenset(
    {"tap", "click", "select", "choose", "add", "remove", "delete", "cancel",
     "ok", "yes", "no"}
)

SCOREBOARD_WORDS: frozenset[str] = frozenset(
    {"total", "runs", "wickets", "overs", "extras", "batting", "bowling",
     "fielding"}
)

MARKER_TOKENS: frozenset[str] = frozenset(
    {"c", "vc", "captain", "vice", "ot", "o", "t"}
)

# Tokens that can never be part of a player name in the relaxed passes.
BROAD_DENYLIST: frozenset[str] = (
    frozenset(code.lower() for code in TEAM_CODES)
    | SCOREBOARD_WORDS
    | {
        "batter", "bowler", "wicket", "keeper", "all", "rounder", "dream11",
        "team", "match", "save", "edit", "confirm", "submit", "preview",
        "credits", "remaining", "balance", "captain", "vice", "vc",
    }
)

_DENYLIST_SUBSTRINGS: tuple[str, ...] = ("dream11", "team", "match")

# Checked in order; the first match wins.
_ROLE_HEADER_PATTERNS: list[tuple[Role, re.Pattern[str]]] = [
    (Role.WICKET_KEEPER, re.compile(r"wicket[\s-]*keeper|\bwk\b", re.IGNORECASE)),
    (Role.BATTER, re.compile(r"batter|batsm[ae]n", re.IGNORECASE)),
    (Role.ALL_ROUNDER, re.compile(r"all[\s-]*rounder", re.IGNORECASE)),
    (Role.BOWLER, re.compile(r"bowler", re.IGNORECASE)),
]

_NUMERIC_RE = re.compile(r"^(?:\d+|\d+\.\d+|\d+\s*pts?)$", re.IGNORECASE)
_PUNCTUATION_RE = re.compile(r"""^[.,;:!@#$%^&*()_+\-=\[\]{}|\\"'<>?/]$""")
_BRACKET_MARKER_RE = re.compile(r"[\(\[]\s*v?c\s*[\)\]]", re.IGNORECASE)


@dataclass(frozen=True)
class SkipRule:
    """A named predicate that marks a line as structural noise.

    Attributes:
        name: Stable identifier, reported on classified lines.
        predicate: Returns ``True`` when the line is noise.
        overridable: Whether a leadership marker on the same line
            lifts the skip.
    """

    name: str
    predicate: Callable[[str], bool]
    overridable: bool = True

    def matches(self, text: str) -> bool:
        return self.predicate(text)


def _contains_any(words: tuple[str, ...]) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        lowered = text.lower()
        return any(word in lowered for word in words)

    return predicate


def _is_one_of(words: frozenset[str]) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        return text.strip().lower() in words

    return predicate


def _is_team_code(text: str) -> bool:
    return text.strip().upper() in TEAM_CODES


def _is_unbracketed_captain_label(text: str) -> bool:
    return "captain" in text.lower() and not _BRACKET_MARKER_RE.search(text)


def build_skip_rules(max_line_length: int = 30) -> tuple[SkipRule, ...]:
    """Build the ordered skip-rule table.

    Args:
        max_line_length: Lines longer than this are treated as noise.

    Returns:
        Rules in evaluation order.
    """
    return (
        SkipRule("ui_chrome", _contains_any(UI_CHROME_WORDS)),
        SkipRule("team_code", _is_team_code),
        SkipRule("role_word", _contains_any(ROLE_WORDS)),
        SkipRule("captain_label", _is_unbracketed_captain_label),
        SkipRule("numeric", lambda text: bool(_NUMERIC_RE.match(text.strip())), False),
        SkipRule("marker_token", _is_one_of(MARKER_TOKENS)),
        SkipRule(
            "punctuation",
            lambda text: bool(_PUNCTUATION_RE.match(text.strip())),
            False,
        ),
        SkipRule(
            "length",
            lambda text: len(text) < 2 or len(text) > max_line_length,
        ),
        SkipRule("action_word", _is_one_of(ACTION_WORDS)),
        SkipRule("scoreboard_word", _is_one_of(SCOREBOARD_WORDS)),
    )


SKIP_RULES: tuple[SkipRule, ...] = build_skip_rules()


def match_skip_rule(
    text: str, rules: tuple[SkipRule, ...] = SKIP_RULES
) -> SkipRule | None:
    """Return the first rule that marks ``text`` as noise, if any."""
    for rule in rules:
        if rule.matches(text):
            return rule
    return None


def detect_role_header(text: str) -> Role | None:
    """Return the role announced by a header line, or ``None``."""
    for role, pattern in _ROLE_HEADER_PATTERNS:
        if pattern.search(text):
            return role
    return None


def is_denylisted(text: str) -> bool:
    """Check a line against the broad denylist used by the relaxed passes.

    A line is rejected when it is a role header, contains one of the
    branding substrings, or has any whitespace-separated token in
    ``BROAD_DENYLIST``.
    """
    lowered = text.lower()
    if detect_role_header(text) is not None:
        return True
    if any(word in lowered for word in _DENYLIST_SUBSTRINGS):
        return True
    return any(token in BROAD_DENYLIST for token in lowered.split())
