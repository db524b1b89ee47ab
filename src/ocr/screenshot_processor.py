"""End-to-end processing of a team selection screenshot.

Combines image intake, OCR engine orchestration and multi-pass roster
extraction behind a single ``process`` call.
"""

import threading
from dataclasses import dataclass
from pathlib import Path

import httpx

from src.extraction.models import ExtractionResult
from src.extraction.pipeline import TeamExtractor
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .engine_orchestrator import EngineOrchestrator
from .image_loader import load_image_bytes, prepare_image
from .ocr_space_client import RawOCRResult

logger = get_logger(__name__)


@dataclass
class ScreenshotResult:
    """OCR output and extracted roster for one screenshot."""

    source_file: str
    ocr_result: RawOCRResult
    extraction: ExtractionResult


class ScreenshotProcessor:
    """Screenshot-to-roster pipeline.

    Args:
        config: Application configuration object.
        transport: Optional httpx transport for the OCR client.
    """

    def __init__(
        self,
        config: AppConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.orchestrator = EngineOrchestrator(config.ocr, transport=transport)
        self.extractor = TeamExtractor(config.extraction)

    def process(
        self,
        source: Path | bytes,
        filename: str = "screenshot",
        cancel_event: threading.Event | None = None,
    ) -> ScreenshotResult:
        """Process a screenshot from a file path or bytes.

        Args:
            source: Path to an image file, or raw image bytes.
            filename: Display name for the source image.
            cancel_event: Caller-owned flag that stops further OCR engines.

        Returns:
            OCR text and extracted roster.
        """
        logger.info("Processing screenshot: %s", filename)
        image = prepare_image(load_image_bytes(source))
        ocr_result = self.orchestrator.run(image, cancel_event=cancel_event)
        extraction = self.extractor.extract(ocr_result.text)

        logger.info(
            "Extracted %d players from %s (%s)",
            extraction.extracted_count,
            filename,
            extraction.status.value,
        )
        return ScreenshotResult(
            source_file=filename,
            ocr_result=ocr_result,
            extraction=extraction,
        )
