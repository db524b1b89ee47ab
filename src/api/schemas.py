"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.extraction.models import ExtractionResult


class _CamelModel(BaseModel):
    """Base for envelope schemas serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerDetailResponse(_CamelModel):
    """Response schema for one extracted player."""

    name: str
    role: str
    is_captain: bool = False
    is_vice_captain: bool = False


class TeamDataResponse(BaseModel):
    """Response schema for an extracted roster."""

    model_config = ConfigDict(populate_by_name=True)

    players: list[str]
    captain: str = ""
    vice_captain: str = ""
    player_details: list[PlayerDetailResponse] = Field(
        default_factory=list, alias="playerDetails"
    )
    extracted_count: int = Field(alias="extractedCount")
    expected_count: int = Field(alias="expectedCount")
    raw_text: str = Field(alias="rawText")

    @classmethod
    def from_result(cls, result: ExtractionResult) -> "TeamDataResponse":
        return cls.model_validate(result.to_dict())


class ExtractionResponse(_CamelModel):
    """Response schema for a screenshot or text extraction request."""

    success: bool
    message: str
    suggestion: str | None = None
    data: TeamDataResponse | None = None
    status: str
    confidence: float = 0.0
    extracted_count: int
    expected_count: int
    partial_success: bool = False
    processing_time_ms: float = 0.0


class ErrorResponse(_CamelModel):
    """Response schema for a failed request."""

    success: bool = False
    message: str
    suggestion: str
    error: str | None = None


class ParseRequest(BaseModel):
    """Request schema for parsing raw OCR text without an image."""

    text: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    ocr_configured: bool
