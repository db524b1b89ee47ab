"""Tests for the multi-pass roster extraction pipeline."""

from unittest.mock import patch

import pytest

from src.exceptions import NoTextDetectedError
from src.extraction.models import ExtractionResult, ExtractionStatus, Role
from src.extraction.pipeline import PassKind, TeamExtractor, default_passes
from src.utils.config import ExtractionConfig

# Six clean names, one blocked by the "edit" chrome rule and one longer than
# the structured length limit. The aggressive pass recovers the last two.
SHORT_STRUCTURED_TEXT = """\
BATTER
Virat Kohli
Rohit Sharma
Shubman Gill
BOWLER
Jasprit Bumrah
Mohammed Shami
Kuldeep Yadav
Riley Meredith
Venkatesh Iyer Ramachandran
CSK
"""

# Five full names plus one single token; the surname pass must supply
# "ALI" (known surname) and "Meredith" (long enough) but not "ZED".
SURNAME_TEXT = """\
Virat Kohli
Rohit Sharma
Shubman Gill
Jasprit Bumrah
Kuldeep Yadav
Klaasen
ALI
Meredith
ZED
Kohli
"""

NOISE_TEXT = "CSK\nMI\n123\nDream11\n45 pts\n-"


def _assert_invariants(result: ExtractionResult) -> None:
    lowered = [p.lower() for p in result.players]
    assert len(result.players) <= result.expected_count
    assert len(set(lowered)) == len(lowered)
    assert result.extracted_count == len(result.players)
    assert len(result.player_details) == len(result.players)
    if result.captain:
        assert result.captain.lower() in lowered
    if result.vice_captain:
        assert result.vice_captain.lower() in lowered
        assert result.vice_captain.lower() != result.captain.lower()


class TestDefaultPasses:
    """Tests for the pass settings."""

    def test_three_passes_in_order(self) -> None:
        passes = default_passes(ExtractionConfig())
        assert [p.kind for p in passes] == [
            PassKind.STRUCTURED,
            PassKind.AGGRESSIVE,
            PassKind.SURNAME,
        ]

    def test_length_bounds(self) -> None:
        structured, aggressive, surname = default_passes(ExtractionConfig())
        assert (structured.min_length, structured.max_length) == (2, 25)
        assert (aggressive.min_length, aggressive.max_length) == (3, 30)
        assert (surname.min_length, surname.max_length) == (3, 15)
        assert structured.always_run is True
        assert aggressive.require_space is True
        assert surname.single_token is True


class TestTeamExtractor:
    """Tests for TeamExtractor.extract."""

    def setup_method(self) -> None:
        self.extractor = TeamExtractor()

    def test_full_roster_with_badges(self, full_roster_text: str) -> None:
        result = self.extractor.extract(full_roster_text)
        assert result.extracted_count == 11
        assert result.players[:3] == ("MS Dhoni", "Rishabh Pant", "Virat Kohli")
        assert result.captain == "Virat Kohli"
        assert result.vice_captain == "Rohit Sharma"
        assert result.status is ExtractionStatus.COMPLETE
        assert result.confidence == 1.0
        _assert_invariants(result)

    def test_team_codes_are_never_players(self, full_roster_text: str) -> None:
        result = self.extractor.extract(full_roster_text)
        assert "CSK" not in result.players
        assert "MI" not in result.players

    def test_roles_follow_headers(self, full_roster_text: str) -> None:
        result = self.extractor.extract(full_roster_text)
        roles = {d.cleaned_name: d.role for d in result.player_details}
        assert roles["MS Dhoni"] is Role.WICKET_KEEPER
        assert roles["Virat Kohli"] is Role.BATTER
        assert roles["Hardik Pandya"] is Role.ALL_ROUNDER
        assert roles["Kuldeep Yadav"] is Role.BOWLER

    def test_colon_labels(self, labelled_roster_text: str) -> None:
        result = self.extractor.extract(labelled_roster_text)
        assert result.extracted_count == 11
        assert result.captain == "Virat Kohli"
        assert result.vice_captain == "Rohit Sharma"
        assert "Captain: Virat Kohli" not in result.players
        _assert_invariants(result)

    def test_bracket_marked_roster(self) -> None:
        text = (
            "Virat Kohli (c)\nRohit Sharma (vc)\nMS Dhoni\nJasprit Bumrah\n"
            "Ravindra Jadeja\nKL Rahul\nHardik Pandya\nR Ashwin\n"
            "Yuzvendra Chahal\nBhuvneshwar Kumar\nMohammed Shami"
        )
        result = self.extractor.extract(text)
        assert len(result.players) == 11
        assert result.captain == "Virat Kohli"
        assert result.vice_captain == "Rohit Sharma"
        assert result.status is ExtractionStatus.COMPLETE
        _assert_invariants(result)

    def test_colon_labelled_roster_matches_bracket_markers(self) -> None:
        text = (
            "Captain: Virat Kohli\nVice Captain: Rohit Sharma\nMS Dhoni\n"
            "Jasprit Bumrah\nRavindra Jadeja\nKL Rahul\nHardik Pandya\n"
            "R Ashwin\nYuzvendra Chahal\nBhuvneshwar Kumar\nMohammed Shami"
        )
        result = self.extractor.extract(text)
        assert len(result.players) == 11
        assert result.captain == "Virat Kohli"
        assert result.vice_captain == "Rohit Sharma"
        _assert_invariants(result)

    @pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
    def test_empty_text_raises(self, text: str) -> None:
        with pytest.raises(NoTextDetectedError):
            self.extractor.extract(text)

    def test_extraction_is_repeatable(self, full_roster_text: str) -> None:
        first = self.extractor.extract(full_roster_text)
        second = self.extractor.extract(full_roster_text)
        assert first == second

    def test_structured_pass_alone_when_enough_players(
        self, full_roster_text: str
    ) -> None:
        with patch.object(
            self.extractor, "_run_pass", wraps=self.extractor._run_pass
        ) as spy:
            self.extractor.extract(full_roster_text)
        assert spy.call_count == 1
        assert spy.call_args_list[0].args[1].kind is PassKind.STRUCTURED

    def test_aggressive_pass_fills_shortfall(self) -> None:
        with patch.object(
            self.extractor, "_run_pass", wraps=self.extractor._run_pass
        ) as spy:
            result = self.extractor.extract(SHORT_STRUCTURED_TEXT)
        assert spy.call_count == 2
        assert result.extracted_count == 8
        assert result.players[-2:] == ("Riley Meredith", "Venkatesh Iyer Ramachandran")
        assert "CSK" not in result.players
        assert "BATTER" not in result.players
        _assert_invariants(result)

    def test_surname_pass_fills_shortfall(self) -> None:
        with patch.object(
            self.extractor, "_run_pass", wraps=self.extractor._run_pass
        ) as spy:
            result = self.extractor.extract(SURNAME_TEXT)
        assert spy.call_count == 3
        assert "ALI" in result.players
        assert "Meredith" in result.players
        assert "ZED" not in result.players
        assert "Kohli" not in result.players
        assert result.extracted_count == 8
        _assert_invariants(result)

    def test_noise_only_is_empty(self) -> None:
        result = self.extractor.extract(NOISE_TEXT)
        assert result.players == ()
        assert result.captain == ""
        assert result.vice_captain == ""
        assert result.status is ExtractionStatus.EMPTY
        assert result.confidence == 0.0

    def test_partial_roster(self) -> None:
        result = self.extractor.extract("Virat Kohli (c)\nRohit Sharma\nShubman Gill")
        assert result.extracted_count == 3
        assert result.status is ExtractionStatus.PARTIAL
        assert result.confidence == pytest.approx(3 / 11)
        assert result.captain == "Virat Kohli"

    def test_roster_truncated_to_expected(self) -> None:
        names = [
            "Virat Kohli", "Rohit Sharma", "Shubman Gill", "Hardik Pandya",
            "Ravindra Jadeja", "Jasprit Bumrah", "Mohammed Shami", "Kuldeep Yadav",
            "Rishabh Pant", "Yuzvendra Chahal", "Axar Patel", "Ishan Kishan",
            "Shreyas Iyer",
        ]
        result = self.extractor.extract("\n".join(names))
        assert result.players == tuple(names[:11])
        _assert_invariants(result)

    def test_duplicate_line_credits_existing_player(self) -> None:
        result = self.extractor.extract("Virat Kohli\nRohit Sharma\nKohli (c)")
        assert result.players == ("Virat Kohli", "Rohit Sharma")
        assert result.captain == "Virat Kohli"

    def test_later_captain_wins(self) -> None:
        result = self.extractor.extract("Virat Kohli (c)\nRohit Sharma (c)")
        assert result.captain == "Rohit Sharma"

    def test_vice_captain_never_equals_captain(self) -> None:
        result = self.extractor.extract("Virat Kohli (c) (vc)\nRohit Sharma")
        assert result.captain == "Virat Kohli"
        assert result.vice_captain != "Virat Kohli"
        _assert_invariants(result)

    def test_to_dict_shape(self, full_roster_text: str) -> None:
        data = self.extractor.extract(full_roster_text).to_dict()
        assert set(data) == {
            "players",
            "captain",
            "vice_captain",
            "playerDetails",
            "extractedCount",
            "expectedCount",
            "rawText",
        }
        assert data["playerDetails"][2] == {
            "name": "Virat Kohli",
            "role": "Batter",
            "isCaptain": True,
            "isViceCaptain": False,
        }
        assert data["expectedCount"] == 11

    def test_custom_min_players(self) -> None:
        extractor = TeamExtractor(ExtractionConfig(min_players=3))
        with patch.object(extractor, "_run_pass", wraps=extractor._run_pass) as spy:
            result = extractor.extract("Virat Kohli\nRohit Sharma\nShubman Gill")
        assert spy.call_count == 1
        assert result.status is ExtractionStatus.COMPLETE
