"""Line splitting and noise classification for OCR team text.

The classifier is a left fold over the ordered lines: the running
``Role`` is the accumulator, updated by role header lines and stamped
onto every following candidate until the next header.
"""

from dataclasses import dataclass
from enum import StrEnum

from src.utils.logger import get_logger

from .leadership import has_override_marker
from .models import Line, Role
from .rules import (
    SKIP_RULES,
    SkipRule,
    build_skip_rules,
    detect_role_header,
    match_skip_rule,
)

logger = get_logger(__name__)


class LineKind(StrEnum):
    """Classification outcome for a single line."""

    ROLE_HEADER = "role_header"
    SKIP = "skip"
    CANDIDATE = "candidate"


@dataclass(frozen=True)
class ClassifiedLine:
    """A line together with its classification and role context.

    Attributes:
        line: The source line.
        kind: Header, skipped noise, or player candidate.
        role: Role context in effect after this line.
        rule: Name of the skip rule that matched, if any. Candidates
            kept by a leadership override still report the rule.
    """

    line: Line
    kind: LineKind
    role: Role
    rule: str | None = None


def split_lines(text: str) -> list[Line]:
    """Split OCR text into trimmed, non-empty, indexed lines."""
    stripped = (raw.strip() for raw in text.splitlines())
    return [Line(text=t, index=i) for i, t in enumerate(s for s in stripped if s)]


def classify_line(
    line: Line,
    role: Role,
    rules: tuple[SkipRule, ...] = SKIP_RULES,
) -> ClassifiedLine:
    """Classify one line given the role context carried so far.

    Args:
        line: Line to classify.
        role: Role context from the previous lines.
        rules: Ordered skip-rule table.

    Returns:
        The classification, whose ``role`` is the context for the next line.
    """
    header = detect_role_header(line.text)
    if header is not None:
        return ClassifiedLine(line=line, kind=LineKind.ROLE_HEADER, role=header)

    rule = match_skip_rule(line.text, rules)
    if rule is None:
        return ClassifiedLine(line=line, kind=LineKind.CANDIDATE, role=role)

    if rule.overridable and has_override_marker(line.text):
        logger.debug("Keeping '%s' despite rule %s", line.text, rule.name)
        return ClassifiedLine(
            line=line, kind=LineKind.CANDIDATE, role=role, rule=rule.name
        )

    logger.debug("Skipping '%s' (%s)", line.text, rule.name)
    return ClassifiedLine(line=line, kind=LineKind.SKIP, role=role, rule=rule.name)


def classify_lines(
    lines: list[Line], max_line_length: int = 30
) -> list[ClassifiedLine]:
    """Classify every line, threading the role context through the scan.

    Args:
        lines: Lines in reading order.
        max_line_length: Upper length bound for the ``length`` skip rule.

    Returns:
        One classification per input line, in the same order.
    """
    rules = build_skip_rules(max_line_length)
    role = Role.UNKNOWN
    classified: list[ClassifiedLine] = []
    for line in lines:
        result = classify_line(line, role, rules)
        role = result.role
        classified.append(result)
    return classified
