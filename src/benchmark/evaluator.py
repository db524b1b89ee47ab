"""Accuracy benchmarking for roster extraction.

Compares extracted rosters against labeled ground truth and computes
player-level precision, recall and F1 together with captain and
vice-captain accuracy.
"""

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.utils.logger import get_logger

logger = get_logger(__name__)

_PLAYER_SEPARATOR = ";"


def _normalize(name: str) -> str:
    return " ".join(str(name).split()).lower()


@dataclass
class DocumentScore:
    """Player and leadership matches for a single screenshot.

    Args:
        filename: Ground truth key of the screenshot.
    """

    filename: str
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    captain_correct: bool = False
    vice_captain_correct: bool = False

    @property
    def precision(self) -> float:
        """Fraction of predicted players that are in the real roster."""
        denom = self.true_positives + self.false_positives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def recall(self) -> float:
        """Fraction of the real roster that was predicted."""
        denom = self.true_positives + self.false_negatives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def f1(self) -> float:
        """Harmonic mean of precision and recall."""
        if self.precision + self.recall == 0:
            return 0.0
        return 2 * (self.precision * self.recall) / (self.precision + self.recall)


@dataclass
class BenchmarkResult:
    """Aggregated benchmark results across all screenshots.

    Args:
        total_documents: Number of screenshots in ground truth.
        successful_documents: Number of screenshots with predictions.
        player_precision: Micro-averaged player precision.
        player_recall: Micro-averaged player recall.
        player_f1: Harmonic mean of the micro-averaged precision and recall.
        captain_accuracy: Fraction of screenshots with the right captain.
        vice_captain_accuracy: Fraction with the right vice-captain.
        document_scores: Per-screenshot details.
        avg_processing_time_ms: Average processing time in milliseconds.
        errors: List of error messages encountered.
    """

    total_documents: int
    successful_documents: int
    player_precision: float
    player_recall: float
    player_f1: float
    captain_accuracy: float
    vice_captain_accuracy: float
    document_scores: dict[str, DocumentScore]
    avg_processing_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)


class Evaluator:
    """Evaluates extracted rosters against ground truth labels.

    Player names are compared case-insensitively with whitespace
    collapsed; order does not matter.

    Args:
        target_f1: Player F1 required for the report to pass.
    """

    def __init__(self, target_f1: float = 0.9) -> None:
        self.target_f1 = target_f1

    def score_document(
        self,
        filename: str,
        predicted: dict[str, Any],
        expected: dict[str, Any],
    ) -> DocumentScore:
        """Score one predicted roster against its label."""
        predicted_players = {_normalize(p) for p in predicted.get("players", [])}
        expected_players = {_normalize(p) for p in expected.get("players", [])}

        score = DocumentScore(filename)
        score.true_positives = len(predicted_players & expected_players)
        score.false_positives = len(predicted_players - expected_players)
        score.false_negatives = len(expected_players - predicted_players)
        score.captain_correct = _normalize(predicted.get("captain", "")) == (
            _normalize(expected.get("captain", ""))
        )
        score.vice_captain_correct = _normalize(
            predicted.get("vice_captain", "")
        ) == _normalize(expected.get("vice_captain", ""))
        return score

    def evaluate(
        self,
        predictions: dict[str, dict[str, Any]],
        ground_truth: dict[str, dict[str, Any]],
    ) -> BenchmarkResult:
        """Compare predictions against ground truth and compute metrics.

        Args:
            predictions: Mapping of filename to extracted roster
                (``players``, ``captain``, ``vice_captain``).
            ground_truth: Mapping of filename to the expected roster.

        Returns:
            Aggregated benchmark results with per-screenshot scores.
        """
        scores: dict[str, DocumentScore] = {}
        errors: list[str] = []
        missing_count = 0

        for filename, expected in ground_truth.items():
            if filename not in predictions:
                errors.append(f"Missing prediction for {filename}")
                missing_count += 1
                scores[filename] = DocumentScore(
                    filename, false_negatives=len(expected.get("players", []))
                )
                continue
            scores[filename] = self.score_document(
                filename, predictions[filename], expected
            )

        tp = sum(s.true_positives for s in scores.values())
        fp = sum(s.false_positives for s in scores.values())
        fn = sum(s.false_negatives for s in scores.values())
        precision = tp / (tp + fp) if tp + fp else 0.0
        recall = tp / (tp + fn) if tp + fn else 0.0
        f1 = (
            2 * precision * recall / (precision + recall)
            if precision + recall
            else 0.0
        )

        total = len(ground_truth)
        return BenchmarkResult(
            total_documents=total,
            successful_documents=total - missing_count,
            player_precision=precision,
            player_recall=recall,
            player_f1=f1,
            captain_accuracy=(
                sum(s.captain_correct for s in scores.values()) / total
                if total
                else 0.0
            ),
            vice_captain_accuracy=(
                sum(s.vice_captain_correct for s in scores.values()) / total
                if total
                else 0.0
            ),
            document_scores=scores,
            errors=errors,
        )

    def generate_report(
        self, result: BenchmarkResult, output_path: Path | None = None
    ) -> str:
        """Generate a human-readable benchmark report.

        Args:
            result: Benchmark results to format.
            output_path: Optional path to write the report file.

        Returns:
            Formatted report string.
        """
        lines = [
            "=" * 60,
            "BENCHMARK REPORT",
            "=" * 60,
            f"Total Screenshots:     {result.total_documents}",
            f"Successful:            {result.successful_documents}",
            f"Player Precision:      {result.player_precision:.2%}",
            f"Player Recall:         {result.player_recall:.2%}",
            f"Player F1 Score:       {result.player_f1:.3f}",
            f"Captain Accuracy:      {result.captain_accuracy:.2%}",
            f"Vice-Captain Accuracy: {result.vice_captain_accuracy:.2%}",
            f"Avg Processing Time:   {result.avg_processing_time_ms:.0f}ms",
            "",
            "Per-Screenshot Metrics:",
            "-" * 60,
            f"{'Screenshot':<24} {'Precision':>9} {'Recall':>9} {'F1':>7} {'C':>3} {'VC':>3}",
            "-" * 60,
        ]

        for name, score in sorted(result.document_scores.items()):
            lines.append(
                f"{name[:24]:<24} {score.precision:>9.2%} {score.recall:>9.2%} "
                f"{score.f1:>7.3f} {'Y' if score.captain_correct else 'N':>3} "
                f"{'Y' if score.vice_captain_correct else 'N':>3}"
            )

        target_met = result.player_f1 >= self.target_f1
        lines.extend(
            [
                "-" * 60,
                "",
                f"Target: player F1 >= {self.target_f1:.2f} - "
                f"{'PASSED' if target_met else 'FAILED'}",
                "=" * 60,
            ]
        )

        if result.errors:
            lines.append("")
            lines.append("Errors:")
            for error in result.errors:
                lines.append(f"  - {error}")

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                f.write(report)
            logger.info("Report written to %s", output_path)

        return report


def load_ground_truth(path: Path) -> dict[str, dict[str, Any]]:
    """Load ground truth rosters from a JSON or CSV file.

    JSON format: ``{"filename": {"players": [...], "captain": "...",
    "vice_captain": "..."}, ...}``
    CSV format: ``filename,players,captain,vice_captain`` rows where
    ``players`` is a semicolon-separated list.

    Args:
        path: Path to the ground truth file.

    Returns:
        Mapping of filename to expected roster.

    Raises:
        ValueError: If the file format is not supported.
    """
    if path.suffix == ".json":
        with open(path) as f:
            return json.load(f)

    if path.suffix == ".csv":
        gt: dict[str, dict[str, Any]] = {}
        with open(path, newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                players = [
                    p.strip()
                    for p in (row.get("players") or "").split(_PLAYER_SEPARATOR)
                    if p.strip()
                ]
                gt[row["filename"]] = {
                    "players": players,
                    "captain": (row.get("captain") or "").strip(),
                    "vice_captain": (row.get("vice_captain") or "").strip(),
                }
        return gt

    raise ValueError(f"Unsupported ground truth format: {path.suffix}")
