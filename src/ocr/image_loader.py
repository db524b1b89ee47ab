"""Image intake for screenshot uploads.

Verifies that a payload decodes as an image and hands the provider a
JPEG, which is the file type declared on every OCR request.
"""

import io
from pathlib import Path

from PIL import Image

from src.exceptions import InvalidImageError
from src.utils.logger import get_logger

logger = get_logger(__name__)


def load_image_bytes(source: Path | bytes) -> bytes:
    """Read raw image bytes from a path, or pass bytes through."""
    if isinstance(source, bytes):
        return source
    return Path(source).read_bytes()


def prepare_image(data: bytes, quality: int = 95) -> bytes:
    """Validate an image payload and re-encode it as JPEG if needed.

    Args:
        data: Raw uploaded bytes (PNG, JPEG, WebP, ...).
        quality: JPEG quality for re-encoded images.

    Returns:
        JPEG-encoded bytes; JPEG input is returned unchanged.

    Raises:
        InvalidImageError: If the payload is empty or not an image.
    """
    if not data:
        raise InvalidImageError("Empty image payload")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.format == "JPEG":
                return data
            source_format = img.format
            rgb = img.convert("RGB")
    except (OSError, Image.DecompressionBombError) as exc:
        raise InvalidImageError("Uploaded file is not a readable image") from exc

    buf = io.BytesIO()
    rgb.save(buf, format="JPEG", quality=quality)
    logger.debug("Re-encoded %s image as JPEG", source_format)
    return buf.getvalue()
