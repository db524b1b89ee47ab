"""FastAPI application for the team screenshot extractor.

Provides REST endpoints for extracting a fantasy-cricket roster from an
uploaded screenshot, parsing raw OCR text, and health checks.
"""

import asyncio
import threading
import time
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from src.exceptions import (
    ExtractionCancelledError,
    InvalidImageError,
    NetworkUnavailableError,
    NoTextDetectedError,
    NotConfiguredError,
    ProviderError,
    TeamExtractionError,
)
from src.extraction.models import ExtractionResult, ExtractionStatus
from src.extraction.pipeline import TeamExtractor
from src.ocr.screenshot_processor import ScreenshotProcessor
from src.utils.config import API_KEY_ENV_VAR, ApiConfig, load_config
from src.utils.logger import get_logger

from .schemas import (
    ErrorResponse,
    ExtractionResponse,
    HealthResponse,
    ParseRequest,
    TeamDataResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

_settings = load_config()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.api.rate_limit],
    enabled=_settings.api.rate_limit_enabled,
)

app = FastAPI(
    title="Fantasy Team Screenshot API",
    description="Extract a fantasy-cricket roster, captain and vice-captain "
    "from a team screenshot",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/bmp",
    "image/gif",
    "image/tiff",
}

_CANCEL_POLL_S = 0.5

# status code, message, suggestion
_ERROR_GUIDANCE: dict[type[TeamExtractionError], tuple[int, str, str]] = {
    NotConfiguredError: (
        500,
        "OCR API key not configured",
        f"Please set {API_KEY_ENV_VAR}. Get a free key from https://ocr.space/ocrapi",
    ),
    NoTextDetectedError: (
        422,
        "No text could be detected in the image",
        "Please ensure the image is clear, contains visible player names, "
        "and is not too blurry or dark.",
    ),
    NetworkUnavailableError: (
        503,
        "Unable to connect to OCR service",
        "Please check your internet connection and try again.",
    ),
    ProviderError: (
        502,
        "OCR service error",
        "The OCR service is temporarily unavailable. "
        "Please try again in a few minutes.",
    ),
    InvalidImageError: (
        400,
        "Uploaded file is not a valid image",
        "Please upload a PNG or JPEG screenshot of your team.",
    ),
    ExtractionCancelledError: (
        499,
        "Request cancelled",
        "The request was cancelled before OCR completed.",
    ),
}


def _get_components() -> tuple[ScreenshotProcessor, TeamExtractor]:
    """Initialize and return the processing components for one request.

    Returns:
        Tuple of (screenshot_processor, team_extractor).
    """
    config = load_config()
    return ScreenshotProcessor(config), TeamExtractor(config.extraction)


def _error_response(exc: TeamExtractionError) -> JSONResponse:
    status_code, message, suggestion = 500, "Failed to process image", (
        "Please try again with a clear, well-lit screenshot of your team."
    )
    for cls in type(exc).__mro__:
        if cls in _ERROR_GUIDANCE:
            status_code, message, suggestion = _ERROR_GUIDANCE[cls]
            break

    body = ErrorResponse(message=message, suggestion=suggestion, error=exc.message)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def _too_large_response(limits: ApiConfig) -> JSONResponse:
    body = ErrorResponse(
        message="Image exceeds the upload size limit",
        suggestion="Please upload a screenshot smaller than "
        f"{limits.max_upload_mb:g} MB.",
        error="FILE_TOO_LARGE",
    )
    return JSONResponse(status_code=413, content=body.model_dump(by_alias=True))


def _rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 in the shared error shape.

    Called synchronously by ``SlowAPIMiddleware``.
    """
    logger.warning("Rate limit exceeded for %s: %s", get_remote_address(request), exc)
    body = ErrorResponse(
        message="Too many requests from this IP, please try again later.",
        suggestion="Please wait a few minutes before trying again.",
        error=f"Rate limit exceeded: {exc.detail}",
    )
    return JSONResponse(status_code=429, content=body.model_dump(by_alias=True))


app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded)


def _extraction_response(result: ExtractionResult, start_time: float) -> JSONResponse:
    """Map an extraction result onto the success, partial or failure response."""
    count = result.extracted_count
    expected = result.expected_count
    processing_time = (time.time() - start_time) * 1000

    if result.status is ExtractionStatus.EMPTY:
        body = ExtractionResponse(
            success=False,
            message="No player data could be extracted from the image",
            suggestion="Please ensure the image is clear, well-lit, and shows all "
            "player names clearly.",
            status=result.status.value,
            extracted_count=0,
            expected_count=expected,
            processing_time_ms=processing_time,
        )
        return JSONResponse(status_code=400, content=body.model_dump(by_alias=True))

    data = TeamDataResponse.from_result(result)
    if result.status is ExtractionStatus.PARTIAL:
        body = ExtractionResponse(
            success=False,
            message=f"Only {count} players were extracted from the image",
            suggestion=f"Expected {expected} players but found only {count}. "
            "You can manually add the missing players after extraction.",
            data=data,
            status=result.status.value,
            confidence=result.confidence,
            extracted_count=count,
            expected_count=expected,
            partial_success=True,
            processing_time_ms=processing_time,
        )
        return JSONResponse(status_code=400, content=body.model_dump(by_alias=True))

    body = ExtractionResponse(
        success=True,
        message=f"Successfully extracted {count} players from your uploaded image",
        data=data,
        status=result.status.value,
        confidence=result.confidence,
        extracted_count=count,
        expected_count=expected,
        processing_time_ms=processing_time,
    )
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))


async def _run_cancellable(
    request: Request,
    func: Callable[..., Any],
    *args: Any,
) -> Any:
    """Run blocking ``func`` in a worker thread, cancelling on disconnect.

    ``func`` receives a ``cancel_event`` keyword argument which is set
    once the client goes away.
    """
    cancel_event = threading.Event()
    task = asyncio.ensure_future(
        run_in_threadpool(func, *args, cancel_event=cancel_event)
    )
    while not task.done():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling OCR")
            cancel_event.set()
            break
        await asyncio.wait({task}, timeout=_CANCEL_POLL_S)
    return await task


@app.get("/health", response_model=HealthResponse)
@limiter.exempt
async def health_check() -> HealthResponse:
    """Return system health status."""
    config = load_config()
    return HealthResponse(
        status="healthy",
        version=VERSION,
        ocr_configured=config.ocr.is_configured,
    )


@app.post("/ocr/process", response_model=ExtractionResponse)
async def process_screenshot(
    request: Request,
    file: Annotated[UploadFile, File(...)],
) -> JSONResponse:
    """Extract the roster from an uploaded team screenshot.

    Args:
        request: Incoming request, watched for client disconnects.
        file: Uploaded screenshot (PNG, JPEG, WebP, ...).

    Returns:
        Roster with captain and vice-captain, or a partial/failed result.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    limits = load_config().api
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > limits.max_upload_bytes:
        logger.warning("Rejected upload of %s bytes", content_length)
        return _too_large_response(limits)

    try:
        content = await file.read(limits.max_upload_bytes + 1)
        if len(content) > limits.max_upload_bytes:
            logger.warning(
                "Rejected upload larger than %d bytes", limits.max_upload_bytes
            )
            return _too_large_response(limits)

        processor, _ = _get_components()
        result = await _run_cancellable(
            request, processor.process, content, file.filename or "screenshot"
        )
    except TeamExtractionError as exc:
        logger.error("Screenshot processing failed: %s", exc)
        return _error_response(exc)
    except Exception as exc:
        logger.error("Screenshot processing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return _extraction_response(result.extraction, start_time)


@app.post("/ocr/parse", response_model=ExtractionResponse)
async def parse_text(payload: ParseRequest) -> JSONResponse:
    """Extract the roster from raw OCR text, skipping the OCR call."""
    start_time = time.time()
    _, extractor = _get_components()
    try:
        result = extractor.extract(payload.text)
    except TeamExtractionError as exc:
        return _error_response(exc)
    return _extraction_response(result, start_time)
