"""Data types shared by the extraction passes and the result assembler."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Role(StrEnum):
    """Player category announced by a role header line."""

    UNKNOWN = "Unknown"
    WICKET_KEEPER = "Wicket-Keeper"
    BATTER = "Batter"
    BOWLER = "Bowler"
    ALL_ROUNDER = "All-Rounder"


class ExtractionStatus(StrEnum):
    """How complete an extracted roster is."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    EMPTY = "empty"


@dataclass(frozen=True)
class Line:
    """A trimmed, non-empty line of OCR text and its position."""

    text: str
    index: int


@dataclass(frozen=True)
class PlayerCandidate:
    """A player name accepted by one of the extraction passes."""

    raw_line: str
    cleaned_name: str
    role: Role = Role.UNKNOWN
    is_captain: bool = False
    is_vice_captain: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the public ``playerDetails`` field names."""
        return {
            "name": self.cleaned_name,
            "role": self.role.value,
            "isCaptain": self.is_captain,
            "isViceCaptain": self.is_vice_captain,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Final roster recovered from one screenshot.

    Attributes:
        players: Up to ``expected_count`` unique player names, in
            the order the passes found them.
        captain: Captain's name (an entry of ``players``) or ``""``.
        vice_captain: Vice-captain's name (an entry of ``players``) or ``""``.
        player_details: Candidates behind ``players``, same order.
        extracted_count: Always ``len(players)``.
        expected_count: Size of a full team.
        raw_text: OCR text the roster was parsed from.
        min_players: Count at which the roster is considered complete.
    """

    players: tuple[str, ...]
    captain: str
    vice_captain: str
    player_details: tuple[PlayerCandidate, ...]
    extracted_count: int
    expected_count: int
    raw_text: str
    min_players: int = 8

    @property
    def status(self) -> ExtractionStatus:
        if self.extracted_count == 0:
            return ExtractionStatus.EMPTY
        if self.extracted_count < self.min_players:
            return ExtractionStatus.PARTIAL
        return ExtractionStatus.COMPLETE

    @property
    def confidence(self) -> float:
        """Fraction of the expected team that was recovered."""
        if self.expected_count <= 0:
            return 0.0
        return min(1.0, self.extracted_count / self.expected_count)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON shape consumed by the API and the CLI."""
        return {
            "players": list(self.players),
            "captain": self.captain,
            "vice_captain": self.vice_captain,
            "playerDetails": [c.to_dict() for c in self.player_details],
            "extractedCount": self.extracted_count,
            "expectedCount": self.expected_count,
            "rawText": self.raw_text,
        }
