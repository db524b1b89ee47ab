"""Multi-pass player extraction from raw OCR text.

A single parameterised pass runs under three strictness settings:

* ``structured``: role headers, skip rules, leadership markers and the
  name validator. Always runs.
* ``aggressive``: any full-name-looking line (must contain a space)
  that avoids the denylist. Runs only while fewer than ``min_players``
  names are known.
* ``surname``: single alphabetic tokens that are known cricket surnames
  or at least four letters long. Runs only if still short.

Every pass skips names already represented by an accepted player, using
case-insensitive substring overlap in either direction so ``Kohli`` is
not added next to ``Virat Kohli``.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from src.exceptions import NoTextDetectedError
from src.utils.config import ExtractionConfig
from src.utils.logger import get_logger

from .assembler import ResultAssembler
from .leadership import clean_name, detect_leadership, matched_signals
from .line_classifier import LineKind, classify_lines, split_lines
from .models import ExtractionResult, Line, PlayerCandidate, Role
from .name_validator import is_valid_name
from .rules import is_denylisted

logger = get_logger(__name__)

_MULTI_TOKEN_RE = re.compile(r"^[A-Za-z\s.\-']+$")
_SINGLE_TOKEN_RE = re.compile(r"^[A-Za-z]+$")


class PassKind(StrEnum):
    """The three escalating extraction passes."""

    STRUCTURED = "structured"
    AGGRESSIVE = "aggressive"
    SURNAME = "surname"


@dataclass(frozen=True)
class PassConfig:
    """Strictness settings for one extraction pass.

    Attributes:
        kind: Which pass this is.
        min_length: Minimum accepted name length.
        max_length: Maximum accepted name length.
        always_run: Run even when ``min_players`` names are already known.
        require_space: Only accept multi-word names.
        single_token: Only accept a single alphabetic token.
        use_surname_dictionary: Accept short tokens found in the
            known-surname list.
        stop_at_expected: Stop once a full team has been found.
    """

    kind: PassKind
    min_length: int
    max_length: int
    always_run: bool = False
    require_space: bool = False
    single_token: bool = False
    use_surname_dictionary: bool = False
    stop_at_expected: bool = True


def default_passes(config: ExtractionConfig) -> tuple[PassConfig, ...]:
    """Build the structured, aggressive and surname pass settings."""
    return (
        PassConfig(
            kind=PassKind.STRUCTURED,
            min_length=2,
            max_length=config.max_name_length,
            always_run=True,
            stop_at_expected=False,
        ),
        PassConfig(
            kind=PassKind.AGGRESSIVE,
            min_length=3,
            max_length=config.max_line_length,
            require_space=True,
        ),
        PassConfig(
            kind=PassKind.SURNAME,
            min_length=3,
            max_length=config.max_surname_length,
            single_token=True,
            use_surname_dictionary=True,
        ),
    )


@dataclass
class _ExtractionState:
    """Mutable per-request accumulator shared by the passes."""

    candidates: list[PlayerCandidate] = field(default_factory=list)
    captain: str = ""
    vice_captain: str = ""

    def find_overlap(self, name: str) -> str | None:
        """Return an accepted name overlapping ``name``, if any."""
        lowered = name.lower()
        for candidate in self.candidates:
            existing = candidate.cleaned_name.lower()
            if lowered in existing or existing in lowered:
                return candidate.cleaned_name
        return None

    def record_leadership(
        self, name: str, is_captain: bool, is_vice_captain: bool
    ) -> None:
        """Apply line-level leadership flags.

        A captain flag always wins and replaces any earlier captain.
        A vice-captain flag is ignored when the same line also set the
        captain, and never demotes the current captain.
        """
        if is_captain:
            self.captain = name
            if self.vice_captain.lower() == name.lower():
                self.vice_captain = ""
        elif is_vice_captain and name.lower() != self.captain.lower():
            self.vice_captain = name


class TeamExtractor:
    """Recovers a fantasy-cricket roster from raw OCR text.

    Each call to :meth:`extract` builds its own state, so one instance
    can serve concurrent requests.

    Args:
        config: Extraction thresholds and the known-surname list.
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self.passes = default_passes(self.config)
        self.assembler = ResultAssembler(
            expected_players=self.config.expected_players,
            min_players=self.config.min_players,
        )
        self._surnames = frozenset(s.lower() for s in self.config.known_surnames)

    def extract(self, raw_text: str) -> ExtractionResult:
        """Extract players, captain and vice-captain from OCR text.

        Args:
            raw_text: Text returned by the OCR engine.

        Returns:
            The assembled extraction result.

        Raises:
            NoTextDetectedError: If the text is empty or whitespace only.
        """
        if not raw_text or not raw_text.strip():
            raise NoTextDetectedError("No text detected in the uploaded image")

        lines = split_lines(raw_text)
        state = _ExtractionState()

        for pass_config in self.passes:
            if not pass_config.always_run and (
                len(state.candidates) >= self.config.min_players
            ):
                break
            added = self._run_pass(lines, pass_config, state)
            logger.info(
                "%s pass added %d players (total %d)",
                pass_config.kind.value,
                added,
                len(state.candidates),
            )

        return self.assembler.assemble(
            state.candidates, state.captain, state.vice_captain, raw_text
        )

    def _run_pass(
        self, lines: list[Line], pass_config: PassConfig, state: _ExtractionState
    ) -> int:
        """Run one pass over ``lines``, appending new candidates to ``state``.

        Returns:
            Number of candidates the pass added.
        """
        if pass_config.kind is PassKind.STRUCTURED:
            candidates = self._structured_candidates(lines, pass_config)
        else:
            candidates = self._relaxed_candidates(lines, pass_config)

        added = 0
        for candidate in candidates:
            if (
                pass_config.stop_at_expected
                and len(state.candidates) >= self.config.expected_players
            ):
                break

            existing = state.find_overlap(candidate.cleaned_name)
            if existing is not None:
                logger.debug(
                    "'%s' already represented by '%s'",
                    candidate.cleaned_name,
                    existing,
                )
                state.record_leadership(
                    existing, candidate.is_captain, candidate.is_vice_captain
                )
                continue

            state.candidates.append(candidate)
            state.record_leadership(
                candidate.cleaned_name, candidate.is_captain, candidate.is_vice_captain
            )
            added += 1
        return added

    def _structured_candidates(
        self, lines: list[Line], pass_config: PassConfig
    ) -> Iterator[PlayerCandidate]:
        for item in classify_lines(lines, self.config.max_line_length):
            if item.kind is not LineKind.CANDIDATE:
                continue

            text = item.line.text
            flags = detect_leadership(text)
            if flags.any:
                logger.debug("Leadership on '%s': %s", text, matched_signals(text))
            name = clean_name(text)
            if not is_valid_name(name, pass_config.min_length, pass_config.max_length):
                logger.debug("Rejected '%s' (cleaned '%s')", text, name)
                continue

            yield PlayerCandidate(
                raw_line=text,
                cleaned_name=name,
                role=item.role,
                is_captain=flags.is_captain,
                is_vice_captain=flags.is_vice_captain,
            )

    def _relaxed_candidates(
        self, lines: list[Line], pass_config: PassConfig
    ) -> Iterator[PlayerCandidate]:
        for line in lines:
            name = " ".join(line.text.split())
            if self._accepts_relaxed(name, pass_config):
                yield PlayerCandidate(
                    raw_line=line.text, cleaned_name=name, role=Role.UNKNOWN
                )

    def _accepts_relaxed(self, name: str, pass_config: PassConfig) -> bool:
        if not pass_config.min_length <= len(name) <= pass_config.max_length:
            return False
        pattern = _SINGLE_TOKEN_RE if pass_config.single_token else _MULTI_TOKEN_RE
        if not pattern.match(name):
            return False
        if pass_config.require_space and " " not in name:
            return False
        if is_denylisted(name):
            return False
        if pass_config.use_surname_dictionary:
            return name.lower() in self._surnames or len(name) >= 4
        return True
