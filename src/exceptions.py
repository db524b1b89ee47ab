"""Exceptions raised by the team screenshot extractor.

All application-specific errors inherit from ``TeamExtractionError`` so
the API and CLI can catch them in one place and map each kind to its
own user-facing message.
"""

from typing import Any


class TeamExtractionError(Exception):
    """Base exception for all extractor errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context for logs and diagnostics.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NotConfiguredError(TeamExtractionError):
    """The OCR API key is missing or still set to the placeholder."""


class NetworkUnavailableError(TeamExtractionError):
    """Every attempted engine failed with a timeout or connection error."""


class ProviderError(TeamExtractionError):
    """The OCR provider answered with an error payload."""

    def __init__(
        self,
        provider_message: str,
        engine_id: int | None = None,
    ) -> None:
        details = {"engine_id": engine_id} if engine_id is not None else None
        super().__init__(f"OCR service error: {provider_message}", details)
        self.provider_message = provider_message
        self.engine_id = engine_id


class NoTextDetectedError(TeamExtractionError):
    """No engine produced any non-empty text for the image."""


class InvalidImageError(TeamExtractionError):
    """The uploaded payload could not be decoded as an image."""


class ExtractionCancelledError(TeamExtractionError):
    """The caller cancelled the request before an engine succeeded."""
