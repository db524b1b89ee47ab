"""Command-line interface for screenshot extraction, batch export and benchmarks.

Provides subcommands for extracting a roster from one screenshot or from
saved OCR text, processing folders of screenshots into a CSV, and
scoring the parser against labelled rosters.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from src.benchmark.evaluator import Evaluator, load_ground_truth
from src.exceptions import TeamExtractionError
from src.extraction.models import ExtractionResult
from src.extraction.pipeline import TeamExtractor
from src.ocr.screenshot_processor import ScreenshotProcessor
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.webp", "*.bmp")
_CSV_COLUMNS = [
    "filename",
    "status",
    "extracted_count",
    "captain",
    "vice_captain",
    "players",
    "processing_time_s",
    "error",
]


def _find_screenshots(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan for screenshots.

    Returns:
        Sorted list of image file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _roster_row(filename: str, extraction: ExtractionResult) -> dict[str, object]:
    return {
        "filename": filename,
        "status": extraction.status.value,
        "extracted_count": extraction.extracted_count,
        "captain": extraction.captain,
        "vice_captain": extraction.vice_captain,
        "players": "; ".join(extraction.players),
        "error": None,
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
) -> dict[str, int]:
    """Process all screenshots in a folder and export rosters to CSV.

    Args:
        input_dir: Directory containing screenshots.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = load_config()
    processor = ScreenshotProcessor(config)

    files = _find_screenshots(input_dir)
    if not files:
        logger.warning("No screenshots found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d screenshots to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            screenshot = processor.process(file_path, file_path.name)
        except (TeamExtractionError, OSError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            error = exc.message if isinstance(exc, TeamExtractionError) else str(exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": error}
            )
            failed += 1
            continue

        row = _roster_row(file_path.name, screenshot.extraction)
        row["processing_time_s"] = round(time.time() - start_time, 2)
        results.append(row)
        successful += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write roster rows to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(file_path: Path) -> dict[str, object]:
    """Run OCR and extraction on one screenshot.

    Args:
        file_path: Path to the screenshot.

    Returns:
        Dictionary with filename, engine id, status and the roster.
    """
    config = load_config()
    processor = ScreenshotProcessor(config)
    screenshot = processor.process(file_path, file_path.name)
    return {
        "filename": file_path.name,
        "engine": screenshot.ocr_result.engine_id,
        "status": screenshot.extraction.status.value,
        "data": screenshot.extraction.to_dict(),
    }


def parse_text_file(file_path: Path) -> dict[str, object]:
    """Run extraction on saved OCR text, without calling the provider."""
    config = load_config()
    extraction = TeamExtractor(config.extraction).extract(
        file_path.read_text(encoding="utf-8")
    )
    return {
        "filename": file_path.name,
        "status": extraction.status.value,
        "data": extraction.to_dict(),
    }


def run_benchmark(
    ground_truth_path: Path,
    text_dir: Path,
    report_path: Path | None = None,
) -> str:
    """Score the parser on saved OCR text against labelled rosters.

    Each ground truth key is matched to ``<text_dir>/<stem>.txt``.

    Args:
        ground_truth_path: JSON or CSV file of expected rosters.
        text_dir: Directory holding one OCR text file per screenshot.
        report_path: Optional path to write the report.

    Returns:
        The formatted report.
    """
    config = load_config()
    extractor = TeamExtractor(config.extraction)
    ground_truth = load_ground_truth(ground_truth_path)

    predictions: dict[str, dict[str, object]] = {}
    timings: list[float] = []
    for filename in ground_truth:
        text_path = text_dir / f"{Path(filename).stem}.txt"
        if not text_path.exists():
            logger.warning("No OCR text for %s at %s", filename, text_path)
            continue

        start_time = time.time()
        try:
            extraction = extractor.extract(text_path.read_text(encoding="utf-8"))
        except TeamExtractionError as exc:
            logger.warning("Extraction failed for %s: %s", filename, exc)
            continue
        timings.append((time.time() - start_time) * 1000)
        predictions[filename] = {
            "players": list(extraction.players),
            "captain": extraction.captain,
            "vice_captain": extraction.vice_captain,
        }

    evaluator = Evaluator()
    result = evaluator.evaluate(predictions, ground_truth)
    result.avg_processing_time_ms = sum(timings) / len(timings) if timings else 0.0
    return evaluator.generate_report(result, report_path)


def _emit_json(result: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(result, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Fantasy Team Screenshot Extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser(
        "extract", help="Extract the roster from one screenshot"
    )
    single_parser.add_argument("file", type=Path, help="Screenshot to process")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    parse_parser = subparsers.add_parser(
        "parse", help="Extract the roster from a saved OCR text file"
    )
    parse_parser.add_argument("file", type=Path, help="Text file to parse")
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser(
        "batch", help="Process a folder of screenshots"
    )
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with screenshots"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    bench_parser = subparsers.add_parser(
        "benchmark", help="Score the parser against labelled rosters"
    )
    bench_parser.add_argument(
        "ground_truth", type=Path, help="Ground truth JSON or CSV file"
    )
    bench_parser.add_argument(
        "text_dir", type=Path, help="Directory of OCR text files (<stem>.txt)"
    )
    bench_parser.add_argument("-o", "--output", type=Path, help="Report file")

    args = parser.parse_args(argv)

    setup_logging()

    try:
        if args.command == "batch":
            if not args.input_dir.is_dir():
                print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
                sys.exit(1)
            process_folder(args.input_dir, args.output, args.verbose)
        elif args.command in ("extract", "parse"):
            if not args.file.exists():
                print(f"Error: {args.file} does not exist", file=sys.stderr)
                sys.exit(1)
            if args.command == "extract":
                result = extract_single(args.file)
            else:
                result = parse_text_file(args.file)
            _emit_json(result, args.output)
        elif args.command == "benchmark":
            if not args.ground_truth.exists():
                print(f"Error: {args.ground_truth} does not exist", file=sys.stderr)
                sys.exit(1)
            print(run_benchmark(args.ground_truth, args.text_dir, args.output))
        else:
            parser.print_help()
            sys.exit(0)
    except TeamExtractionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
