"""Shared test fixtures for the team screenshot test suite."""

import io
from pathlib import Path

import pytest
from PIL import Image

FULL_ROSTER_TEXT = """\
Dream11 Team Preview
WICKET-KEEPER
MS Dhoni
Rishabh Pant
BATTER
Virat Kohli (c)
Rohit Sharma (vc)
Shubman Gill
ALL-ROUNDER
Hardik Pandya
Ravindra Jadeja
BOWLER
Jasprit Bumrah
Mohammed Shami
Yuzvendra Chahal
Kuldeep Yadav
CSK
MI
100 Credits Remaining
"""

LABELLED_ROSTER_TEXT = """\
Captain: Virat Kohli
Vice Captain: Rohit Sharma
Shubman Gill
Hardik Pandya
Ravindra Jadeja
Jasprit Bumrah
Mohammed Shami
Yuzvendra Chahal
Kuldeep Yadav
Rishabh Pant
MS Dhoni
"""


@pytest.fixture
def full_roster_text() -> str:
    """OCR text of a complete team with bracket leadership badges."""
    return FULL_ROSTER_TEXT


@pytest.fixture
def labelled_roster_text() -> str:
    """OCR text of a complete team with colon leadership labels."""
    return LABELLED_ROSTER_TEXT


def _encode(fmt: str) -> bytes:
    img = Image.new("RGB", (200, 100), color=(255, 255, 255))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """A small white PNG image."""
    return _encode("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small white JPEG image."""
    return _encode("JPEG")


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
