"""Roster assembly: deduplication, truncation and leadership back-fill.

Turns the candidates gathered by the extraction passes into the final
``ExtractionResult``. When the line-level markers did not settle the
captain or vice-captain, three fallbacks are tried in order: flagged
candidates, markers on lines adjacent to a player's row, and fixed
regex templates over the raw text.
"""

import re

from src.utils.logger import get_logger

from .leadership import detect_leadership
from .models import ExtractionResult, PlayerCandidate

logger = get_logger(__name__)

_NAME = r"([A-Za-z .'\-]+)"
_LAZY_NAME = r"([A-Za-z .'\-]+?)"
# "vice" ending the text before a captain match, on the same line
_VICE_BEFORE = re.compile(r"\bvice[ \t-]*\Z", re.IGNORECASE)

_CAPTAIN_TEMPLATES: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        rf"\bcaptain\s*(?:selected|choice)?\s*:\s*{_NAME}",
        rf"(?<![A-Za-z])c\s*:\s*{_NAME}",
        rf"{_LAZY_NAME}\s*[\(\[]\s*c\s*[\)\]]",
        rf"[\(\[]\s*c\s*[\)\]]\s*{_NAME}",
        rf"{_LAZY_NAME}(?<!vice)(?<!\s)\s+captain\b",
        rf"\bcaptain\s+{_NAME}",
    )
]

_VICE_CAPTAIN_TEMPLATES: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        rf"\bvice[ \t-]*captain\s*(?:selected|choice)?\s*:\s*{_NAME}",
        rf"\bvc\s*:\s*{_NAME}",
        rf"{_LAZY_NAME}\s*[\(\[]\s*vc\s*[\)\]]",
        rf"[\(\[]\s*vc\s*[\)\]]\s*{_NAME}",
        rf"{_LAZY_NAME}\s+vice[ \t-]*captain\b",
        rf"\bvice[ \t-]*captain\s+{_NAME}",
    )
]


def dedupe_candidates(candidates: list[PlayerCandidate]) -> list[PlayerCandidate]:
    """Drop candidates whose name repeats an earlier one, ignoring case."""
    seen: set[str] = set()
    unique: list[PlayerCandidate] = []
    for candidate in candidates:
        key = candidate.cleaned_name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def _find_player(name: str, players: list[str]) -> str:
    """Return the entry of ``players`` equal to ``name`` ignoring case."""
    lowered = name.lower()
    return next((p for p in players if p.lower() == lowered), "")


def _overlapping_player(fragment: str, players: list[str]) -> str:
    """Return the first player whose name overlaps ``fragment`` either way."""
    fragment = " ".join(fragment.split()).lower()
    if len(fragment) < 3:
        return ""
    for player in players:
        lowered = player.lower()
        if lowered in fragment or fragment in lowered:
            return player
    return ""


class ResultAssembler:
    """Builds the final roster from the accumulated pass candidates.

    Args:
        expected_players: Size of a full team; the roster is cut to this.
        min_players: Count at which a roster is considered complete.
    """

    def __init__(self, expected_players: int = 11, min_players: int = 8) -> None:
        self.expected_players = expected_players
        self.min_players = min_players

    def assemble(
        self,
        candidates: list[PlayerCandidate],
        captain: str,
        vice_captain: str,
        raw_text: str,
    ) -> ExtractionResult:
        """Assemble the immutable extraction result.

        Args:
            candidates: Accepted candidates in pass order.
            captain: Captain resolved from line markers, or ``""``.
            vice_captain: Vice-captain resolved from line markers, or ``""``.
            raw_text: Unfiltered OCR text.

        Returns:
            The extraction result.
        """
        retained = dedupe_candidates(candidates)[: self.expected_players]
        players = [c.cleaned_name for c in retained]

        captain = _find_player(captain, players) if captain else ""
        if not captain:
            captain = self._resolve(retained, players, raw_text, is_vice=False)

        vice_captain = _find_player(vice_captain, players) if vice_captain else ""
        if vice_captain.lower() == captain.lower():
            vice_captain = ""
        if not vice_captain:
            vice_captain = self._resolve(
                retained, players, raw_text, is_vice=True, exclude=captain
            )

        logger.info(
            "Assembled %d/%d players (captain=%s, vice_captain=%s)",
            len(players),
            self.expected_players,
            captain or "-",
            vice_captain or "-",
        )
        return ExtractionResult(
            players=tuple(players),
            captain=captain,
            vice_captain=vice_captain,
            player_details=tuple(retained),
            extracted_count=len(players),
            expected_count=self.expected_players,
            raw_text=raw_text,
            min_players=self.min_players,
        )

    def _resolve(
        self,
        retained: list[PlayerCandidate],
        players: list[str],
        raw_text: str,
        is_vice: bool,
        exclude: str = "",
    ) -> str:
        """Run the leadership fallbacks in order until one yields a name."""
        if not players:
            return ""
        kind = "vice-captain" if is_vice else "captain"
        eligible = [p for p in players if p.lower() != exclude.lower()]

        for candidate in retained:
            flagged = candidate.is_vice_captain if is_vice else candidate.is_captain
            if flagged and candidate.cleaned_name in eligible:
                logger.debug("Found %s from flagged candidate", kind)
                return candidate.cleaned_name

        name = self.find_by_proximity(raw_text, eligible, is_vice)
        if name:
            logger.info("Found %s from neighbouring line: %s", kind, name)
            return name

        name = self.find_by_template(raw_text, eligible, is_vice)
        if name:
            logger.info("Found %s via pattern matching: %s", kind, name)
        return name

    def find_by_proximity(
        self, raw_text: str, players: list[str], is_vice: bool
    ) -> str:
        """Attribute a marker line to a player named on an adjacent line.

        The previous line is checked before the next one.

        Args:
            raw_text: Unfiltered OCR text.
            players: Names eligible for promotion.
            is_vice: Look for vice-captain markers instead of captain ones.

        Returns:
            The promoted player, or ``""``.
        """
        raw_lines = raw_text.split("\n")
        for i, line in enumerate(raw_lines):
            flags = detect_leadership(line)
            if not (flags.is_vice_captain if is_vice else flags.is_captain):
                continue
            neighbours = [
                raw_lines[j] for j in (i - 1, i + 1) if 0 <= j < len(raw_lines)
            ]
            for neighbour in neighbours:
                lowered = neighbour.lower()
                for player in players:
                    if player.lower() in lowered:
                        return player
        return ""

    def find_by_template(
        self, raw_text: str, players: list[str], is_vice: bool
    ) -> str:
        """Match fixed leadership templates and map the capture to a player."""
        templates = _VICE_CAPTAIN_TEMPLATES if is_vice else _CAPTAIN_TEMPLATES
        for pattern in templates:
            for match in pattern.finditer(raw_text):
                if not is_vice and _VICE_BEFORE.search(raw_text, 0, match.start()):
                    continue
                player = _overlapping_player(match.group(1), players)
                if player:
                    return player
        return ""
