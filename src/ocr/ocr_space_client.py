"""HTTP client for the OCR.space text recognition API.

Submits one image to one OCR engine and returns the parsed text and
its line count.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from src.exceptions import ProviderError
from src.utils.config import OCRConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RawOCRResult:
    """Text recognised by a single engine call.

    Attributes:
        text: Recognised text, lines separated by newlines.
        engine_id: Provider engine that produced the text.
        line_count: Number of recognised lines, used to break ties.
    """

    text: str
    engine_id: int
    line_count: int


def _error_message(payload: dict[str, Any]) -> str:
    message = payload.get("ErrorMessage") or payload.get("ErrorDetails") or ""
    if isinstance(message, list):
        return "; ".join(str(m) for m in message if m)
    return str(message)


class OCRSpaceClient:
    """Synchronous client for the OCR.space ``parse/image`` endpoint.

    Args:
        config: Provider settings (endpoint, key, timeout, redirects).
        transport: Optional httpx transport, used by tests to stub
            the provider.
    """

    def __init__(
        self,
        config: OCRConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = httpx.Client(
            timeout=config.timeout_s,
            follow_redirects=True,
            max_redirects=config.max_redirects,
            transport=transport,
        )

    def __enter__(self) -> "OCRSpaceClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _form_fields(self, engine_id: int) -> dict[str, str]:
        return {
            "apikey": self.config.api_key or "",
            "language": self.config.language,
            "OCREngine": str(engine_id),
            "detectOrientation": "true",
            "isTable": "false",
            "scale": "true",
            "filetype": self.config.file_type,
            "isOverlayRequired": "false",
        }

    def recognize(self, image: bytes, engine_id: int) -> RawOCRResult:
        """Run OCR on an image with the given engine.

        Args:
            image: JPEG-encoded image bytes.
            engine_id: Provider engine identifier.

        Returns:
            The recognised text for this engine.

        Raises:
            httpx.RequestError: On timeouts and connection failures.
            ProviderError: If the provider answers with an error or an
                unreadable body.
        """
        response = self._client.post(
            self.config.endpoint,
            data=self._form_fields(engine_id),
            files={"file": ("image.jpg", image, "image/jpeg")},
        )
        if response.status_code >= 500:
            raise ProviderError(f"HTTP {response.status_code}", engine_id)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError("Malformed response body", engine_id) from exc

        return self.parse_payload(payload, engine_id)

    @staticmethod
    def parse_payload(payload: Any, engine_id: int) -> RawOCRResult:
        """Extract text and line count from a provider response body.

        Args:
            payload: Decoded JSON body.
            engine_id: Engine that produced the body.

        Returns:
            The parsed result; text is empty if nothing was recognised.

        Raises:
            ProviderError: If the body reports an error or is malformed.
        """
        if not isinstance(payload, dict):
            raise ProviderError("Malformed response body", engine_id)

        results = payload.get("ParsedResults") or []
        if payload.get("IsErroredOnProcessing") or (
            not results and _error_message(payload)
        ):
            raise ProviderError(
                _error_message(payload) or "Processing failed", engine_id
            )
        if not results:
            return RawOCRResult(text="", engine_id=engine_id, line_count=0)

        first = results[0] if isinstance(results[0], dict) else {}
        text = first.get("ParsedText") or ""
        overlay = first.get("TextOverlay") or {}
        overlay_lines = overlay.get("Lines") or []
        line_count = len(overlay_lines) or sum(
            1 for line in text.splitlines() if line.strip()
        )
        return RawOCRResult(text=text, engine_id=engine_id, line_count=line_count)
