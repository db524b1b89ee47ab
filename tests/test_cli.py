"""Tests for the command-line interface and CSV export."""

import csv
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.cli import (
    _find_screenshots,
    _write_csv,
    main,
    parse_text_file,
    process_folder,
    run_benchmark,
)
from src.exceptions import NoTextDetectedError
from src.extraction.pipeline import TeamExtractor
from src.ocr.ocr_space_client import RawOCRResult
from src.ocr.screenshot_processor import ScreenshotResult


def _screenshot_result(name: str, text: str) -> ScreenshotResult:
    return ScreenshotResult(
        source_file=name,
        ocr_result=RawOCRResult(text=text, engine_id=1, line_count=11),
        extraction=TeamExtractor().extract(text),
    )


class TestFindScreenshots:
    """Tests for screenshot discovery."""

    def test_finds_images_only(self, tmp_path: Path) -> None:
        (tmp_path / "a.png").write_bytes(b"")
        (tmp_path / "b.JPG").write_bytes(b"")
        (tmp_path / "notes.txt").write_text("")
        names = [p.name for p in _find_screenshots(tmp_path)]
        assert names == ["a.png", "b.JPG"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert _find_screenshots(tmp_path) == []


class TestWriteCsv:
    """Tests for CSV export."""

    def test_columns_and_rows(self, tmp_path: Path) -> None:
        output = tmp_path / "out" / "results.csv"
        _write_csv(
            [
                {"filename": "a.png", "status": "complete", "players": "A; B"},
                {"filename": "b.png", "status": "failed", "error": "No text"},
            ],
            output,
        )
        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["filename"] == "a.png"
        assert rows[0]["players"] == "A; B"
        assert rows[1]["error"] == "No text"
        assert list(rows[0].keys())[0] == "filename"

    def test_no_results_writes_nothing(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        _write_csv([], output)
        assert not output.exists()


class TestProcessFolder:
    """Tests for batch processing."""

    @patch("src.cli.ScreenshotProcessor")
    def test_counts_successes_and_failures(
        self, mock_processor_cls: MagicMock, tmp_path: Path, full_roster_text: str
    ) -> None:
        (tmp_path / "a.png").write_bytes(b"")
        (tmp_path / "b.png").write_bytes(b"")
        mock_processor_cls.return_value.process.side_effect = [
            _screenshot_result("a.png", full_roster_text),
            NoTextDetectedError("No text detected in the uploaded image"),
        ]
        output = tmp_path / "results.csv"

        summary = process_folder(tmp_path, output)
        assert summary == {"total": 2, "successful": 1, "failed": 1}

        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["status"] == "complete"
        assert rows[0]["captain"] == "Virat Kohli"
        assert rows[0]["extracted_count"] == "11"
        assert rows[1]["status"] == "failed"

    @patch("src.cli.ScreenshotProcessor")
    def test_unreadable_file_does_not_abort_batch(
        self, mock_processor_cls: MagicMock, tmp_path: Path, full_roster_text: str
    ) -> None:
        (tmp_path / "a.png").write_bytes(b"")
        (tmp_path / "b.png").write_bytes(b"")
        mock_processor_cls.return_value.process.side_effect = [
            PermissionError("Permission denied: 'a.png'"),
            _screenshot_result("b.png", full_roster_text),
        ]
        output = tmp_path / "results.csv"

        summary = process_folder(tmp_path, output)
        assert summary == {"total": 2, "successful": 1, "failed": 1}

        with open(output, newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["filename"] == "a.png"
        assert rows[0]["status"] == "failed"
        assert rows[0]["error"] == "Permission denied: 'a.png'"
        assert rows[1]["status"] == "complete"

    def test_no_screenshots(self, tmp_path: Path) -> None:
        summary = process_folder(tmp_path, tmp_path / "results.csv")
        assert summary == {"total": 0, "successful": 0, "failed": 0}


class TestParseTextFile:
    """Tests for parsing saved OCR text."""

    def test_parse(self, tmp_path: Path, labelled_roster_text: str) -> None:
        path = tmp_path / "team.txt"
        path.write_text(labelled_roster_text)
        result = parse_text_file(path)
        assert result["status"] == "complete"
        assert result["data"]["captain"] == "Virat Kohli"


class TestRunBenchmark:
    """Tests for the benchmark command."""

    def test_report(self, tmp_path: Path, full_roster_text: str) -> None:
        texts = tmp_path / "texts"
        texts.mkdir()
        (texts / "team1.txt").write_text(full_roster_text)
        players = TeamExtractor().extract(full_roster_text).players
        gt = tmp_path / "gt.json"
        gt.write_text(
            json.dumps(
                {
                    "team1.png": {
                        "players": list(players),
                        "captain": "Virat Kohli",
                        "vice_captain": "Rohit Sharma",
                    },
                    "team2.png": {"players": ["Virat Kohli"]},
                }
            )
        )

        report = run_benchmark(gt, texts)
        assert "BENCHMARK REPORT" in report
        assert "Missing prediction for team2.png" in report


class TestMain:
    """Tests for argument parsing and dispatch."""

    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0

    def test_parse_writes_output(
        self, tmp_path: Path, full_roster_text: str
    ) -> None:
        source = tmp_path / "team.txt"
        source.write_text(full_roster_text)
        output = tmp_path / "out" / "team.json"

        main(["parse", str(source), "-o", str(output)])
        data = json.loads(output.read_text())
        assert data["data"]["extractedCount"] == 11

    def test_parse_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["parse", str(tmp_path / "missing.txt")])
        assert exc_info.value.code == 1

    def test_parse_blank_file_exits_with_error(self, tmp_path: Path) -> None:
        source = tmp_path / "blank.txt"
        source.write_text("   \n")
        with pytest.raises(SystemExit) as exc_info:
            main(["parse", str(source)])
        assert exc_info.value.code == 2

    def test_batch_requires_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["batch", str(tmp_path / "missing")])
        assert exc_info.value.code == 1

    @patch("src.cli.ScreenshotProcessor")
    def test_extract_prints_json(
        self,
        mock_processor_cls: MagicMock,
        tmp_path: Path,
        full_roster_text: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        image = tmp_path / "team.png"
        image.write_bytes(b"")
        mock_processor_cls.return_value.process.return_value = _screenshot_result(
            "team.png", full_roster_text
        )

        main(["extract", str(image)])
        data = json.loads(capsys.readouterr().out)
        assert data["engine"] == 1
        assert data["data"]["captain"] == "Virat Kohli"
