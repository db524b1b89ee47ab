"""Application entry point for the team screenshot API server."""

import uvicorn

from src.api.app import app
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    if not config.ocr.is_configured:
        logger.warning("OCR API key not configured, /ocr/process requests will fail")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
