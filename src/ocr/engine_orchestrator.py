"""Runs an image through several OCR engines and keeps the best text.

Engines are tried one at a time in the configured priority order. A
failing engine is logged and skipped; only the aggregate outcome, no
usable text from any engine, is raised to the caller.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, wait

import httpx

from src.exceptions import (
    ExtractionCancelledError,
    NetworkUnavailableError,
    NoTextDetectedError,
    NotConfiguredError,
    ProviderError,
)
from src.utils.config import API_KEY_ENV_VAR, OCRConfig
from src.utils.logger import get_logger

from .ocr_space_client import OCRSpaceClient, RawOCRResult

logger = get_logger(__name__)

_CANCEL_POLL_S = 0.05


def _is_better(result: RawOCRResult, best: RawOCRResult | None) -> bool:
    """More text wins; equal length is decided by the line count.

    Surrounding whitespace does not count towards the length.
    """
    if best is None:
        return True
    length, best_length = len(result.text.strip()), len(best.text.strip())
    if length != best_length:
        return length > best_length
    return result.line_count > best.line_count


def _cancelled(engine_id: int, stage: str) -> ExtractionCancelledError:
    return ExtractionCancelledError(
        "OCR request cancelled", {"engine": engine_id, "stage": stage}
    )


class EngineOrchestrator:
    """Selects the best OCR text across the provider's engines.

    Args:
        config: Provider settings including the engine priority list.
        transport: Optional httpx transport passed to the client.
    """

    def __init__(
        self,
        config: OCRConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _recognize(
        self,
        client: OCRSpaceClient,
        image: bytes,
        engine_id: int,
        cancel_event: threading.Event | None,
        executor: ThreadPoolExecutor | None,
    ) -> RawOCRResult:
        """Call one engine, abandoning the call if ``cancel_event`` fires.

        On cancellation the client is closed so the in-flight request
        loses its connection instead of running to completion.
        """
        if cancel_event is None or executor is None:
            return client.recognize(image, engine_id)

        future = executor.submit(client.recognize, image, engine_id)
        while True:
            done, _ = wait([future], timeout=_CANCEL_POLL_S)
            if cancel_event.is_set():
                future.cancel()
                client.close()
                raise _cancelled(engine_id, "in_flight")
            if done:
                return future.result()

    def run(
        self, image: bytes, cancel_event: threading.Event | None = None
    ) -> RawOCRResult:
        """Recognise text in ``image``, stopping early on a good result.

        Args:
            image: JPEG-encoded image bytes.
            cancel_event: When set, the in-flight engine call is abandoned
                and no further engines are attempted.

        Returns:
            The best non-empty result.

        Raises:
            NotConfiguredError: If no usable API key is configured.
            ExtractionCancelledError: If ``cancel_event`` was set.
            NetworkUnavailableError: If every engine failed to connect.
            ProviderError: If engines only answered with errors.
            NoTextDetectedError: If no engine recognised any text.
        """
        if not self.config.is_configured:
            raise NotConfiguredError(
                f"OCR API key not configured. Set {API_KEY_ENV_VAR} or ocr.api_key."
            )

        best: RawOCRResult | None = None
        network_failures = 0
        provider_errors: list[ProviderError] = []
        answered = 0

        executor = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="ocr-engine")
            if cancel_event is not None
            else None
        )
        try:
            with OCRSpaceClient(self.config, transport=self._transport) as client:
                for engine_id in self.config.engines:
                    if cancel_event is not None and cancel_event.is_set():
                        raise _cancelled(engine_id, "before_call")

                    logger.info("Trying OCR engine %d", engine_id)
                    try:
                        result = self._recognize(
                            client, image, engine_id, cancel_event, executor
                        )
                    except httpx.TransportError as exc:
                        network_failures += 1
                        logger.warning("Engine %d unreachable: %s", engine_id, exc)
                        continue
                    except httpx.RequestError as exc:
                        provider_errors.append(ProviderError(str(exc), engine_id))
                        logger.warning("Engine %d request failed: %s", engine_id, exc)
                        continue
                    except ProviderError as exc:
                        provider_errors.append(exc)
                        logger.warning("Engine %d failed: %s", engine_id, exc)
                        continue

                    if cancel_event is not None and cancel_event.is_set():
                        raise _cancelled(engine_id, "after_call")

                    answered += 1
                    if not result.text.strip():
                        logger.info("Engine %d returned no text", engine_id)
                        continue

                    logger.info(
                        "Engine %d extracted %d characters with %d lines",
                        engine_id,
                        len(result.text),
                        result.line_count,
                    )
                    if _is_better(result, best):
                        best = result

                    if len(best.text.strip()) > self.config.early_exit_chars:
                        logger.info("Good result from engine %d, stopping", engine_id)
                        break
        finally:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

        if best is not None:
            logger.info(
                "Best OCR result: %d characters from engine %d",
                len(best.text),
                best.engine_id,
            )
            return best

        attempted = network_failures + len(provider_errors) + answered
        if attempted and network_failures == attempted:
            raise NetworkUnavailableError(
                "Unable to connect to OCR service",
                {"engines": list(self.config.engines)},
            )
        if provider_errors and answered == 0:
            raise provider_errors[-1]
        raise NoTextDetectedError(
            "No text detected in the uploaded image",
            {"engines_answered": answered},
        )
