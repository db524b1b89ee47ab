"""Configuration management for the team screenshot extractor.

Loads and validates YAML configuration with sensible defaults for the
OCR provider and the extraction heuristics. The provider API key can
also be supplied through the ``OCR_API_KEY`` environment variable.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "OCR_API_KEY"
PLACEHOLDER_API_KEY = "your_ocr_space_api_key_here"

DEFAULT_KNOWN_SURNAMES: list[str] = [
    "kohli", "sharma", "dhoni", "bumrah", "jadeja", "rahul", "pandya",
    "ashwin", "chahal", "kumar", "singh", "patel", "khan", "ahmed", "ali",
    "malik", "yadav", "verma", "reddy", "naik", "gill", "iyer", "pant",
    "kishan", "gaikwad", "jaiswal", "tripathi", "samson", "buttler",
    "warner", "smith", "maxwell", "starc", "cummins", "hazlewood", "lyon",
    "carey", "marsh", "livingstone", "curran", "rabada",
    "chahar", "brar", "ellis", "joseph", "dayal", "lomror", "prabhudessai",
    "rawat", "vyshak", "deep", "bhandage", "ferguson", "dhawan", "bairstow",
    "rajapaksa", "taide", "conway", "stokes",
]


class OCRConfig(BaseModel):
    """Configuration for the hosted OCR provider."""

    api_key: str | None = None
    endpoint: str = "https://api.ocr.space/parse/image"
    engines: list[int] = Field(default_factory=lambda: [1, 2, 3])
    language: str = "eng"
    file_type: str = "jpg"
    timeout_s: float = 20.0
    max_redirects: int = 3
    early_exit_chars: int = 100

    @property
    def is_configured(self) -> bool:
        """Whether a usable (non-placeholder) API key is present."""
        key = (self.api_key or "").strip()
        return bool(key) and key != PLACEHOLDER_API_KEY


class ExtractionConfig(BaseModel):
    """Configuration for the multi-pass player extraction."""

    expected_players: int = 11
    min_players: int = 8
    max_line_length: int = 30
    max_name_length: int = 25
    max_surname_length: int = 15
    known_surnames: list[str] = Field(
        default_factory=lambda: list(DEFAULT_KNOWN_SURNAMES)
    )


class ApiConfig(BaseModel):
    """Limits applied by the HTTP service.

    ``rate_limit`` uses the limits notation, e.g. ``"300 per 15 minutes"``,
    and applies per client address.
    """

    max_upload_mb: float = Field(default=10.0, gt=0)
    rate_limit: str = "300 per 15 minutes"
    rate_limit_enabled: bool = True

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        config = AppConfig(**raw)
    else:
        logger.info("No config file found at %s, using defaults", path)
        config = AppConfig()

    env_key = os.environ.get(API_KEY_ENV_VAR)
    if env_key:
        config.ocr.api_key = env_key
    return config
