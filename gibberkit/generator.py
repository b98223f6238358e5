#!/usr/bin/env python3
"""
Gibberish Word Generator
========================
Walks the bigram usage rules with the deterministic generator to build
candidate words, then keeps the ones that pass the filters.

Candidate state machine:

    AT_BOUNDARY  window = (' ', ' ')
        |  draw a follower for the current window
        v
    EMITTING     letter appended, window slides
        |  non-letter drawn (boundary, or '*' for an unknown window)
        v
    TERMINATED

A candidate is accepted when its length is within [min_length, max_length],
it is neither a training word nor an excluded word, and it is new to the
output dictionary. Rejected candidates just start over at AT_BOUNDARY.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from gibberkit.bigram import BOUNDARY_KEY, BigramModel, roll_key
from gibberkit.dictionary import Dictionary
from gibberkit.errors import DegenerateGenerationError
from gibberkit.rng import PseudoRandomGenerator
from gibberkit.settings import get_setting
from gibberkit.tokenizer import is_letter

logger = logging.getLogger(__name__)

# Drawn when the current window has no rules; not a letter, so it ends the word.
SENTINEL = 42

# Hard stop for a single candidate that never draws a terminator.
MAX_CANDIDATE_LENGTH = 1024


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class GenerationConfig:
    """Target and bounds for a generation run."""
    count: Optional[int] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    max_attempts: Optional[int] = None    # Consecutive rejections before giving up

    def __post_init__(self):
        cfg = get_setting("generation", {}) or {}
        if self.count is None:
            self.count = cfg.get("count")
        if self.min_length is None:
            self.min_length = cfg.get("min_length")
        if self.max_length is None:
            self.max_length = cfg.get("max_length")
        if self.max_attempts is None:
            self.max_attempts = cfg.get("max_attempts")

        missing = [
            name for name, value in (
                ("count", self.count),
                ("min_length", self.min_length),
                ("max_length", self.max_length),
                ("max_attempts", self.max_attempts),
            )
            if value is None
        ]
        if missing:
            raise ValueError(f"generation settings missing in app.yaml: {', '.join(missing)}")

    def validate(self):
        """
        Reject bounds that can never produce a word.

        Raises:
            DegenerateGenerationError: non-positive limits or min_length > max_length
        """
        if self.min_length < 1:
            raise DegenerateGenerationError(f"Minimum length must be positive, got {self.min_length}")
        if self.min_length > self.max_length:
            raise DegenerateGenerationError(
                f"Minimum length {self.min_length} exceeds maximum length {self.max_length}"
            )
        if self.max_length < 1:
            raise DegenerateGenerationError(f"Maximum length must be positive, got {self.max_length}")
        if self.max_attempts < 1:
            raise DegenerateGenerationError(f"max_attempts must be positive, got {self.max_attempts}")


class CandidateState(Enum):
    AT_BOUNDARY = "at_boundary"
    EMITTING = "emitting"
    TERMINATED = "terminated"


@dataclass
class GenerationStats:
    """Counters for one call to WordGenerator.generate()."""
    candidates: int = 0
    accepted: int = 0
    too_short: int = 0
    too_long: int = 0
    in_training: int = 0
    excluded: int = 0
    duplicate: int = 0
    draws: int = 0
    accepted_words: list = field(default_factory=list)

    @property
    def rejected(self) -> int:
        return self.candidates - self.accepted

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.candidates if self.candidates else 0.0

    def to_dict(self) -> dict:
        return {
            'candidates': self.candidates,
            'accepted': self.accepted,
            'rejected': self.rejected,
            'too_short': self.too_short,
            'too_long': self.too_long,
            'in_training': self.in_training,
            'excluded': self.excluded,
            'duplicate': self.duplicate,
            'draws': self.draws,
            'acceptance_rate': self.acceptance_rate,
        }


# =============================================================================
# Generator
# =============================================================================

class WordGenerator:
    """
    Produces unique gibberish words into an output dictionary.

    Args:
        model: Trained usage rules
        rng: Generator state; advanced once per character drawn
        training: Words the output must not contain (training corpus)
        exclusions: Additional words the output must not contain
        output: Dictionary receiving accepted words
    """

    def __init__(self,
                 model: BigramModel,
                 rng: PseudoRandomGenerator,
                 training: Dictionary,
                 exclusions: Dictionary,
                 output: Dictionary):
        self.model = model
        self.rng = rng
        self.training = training
        self.exclusions = exclusions
        self.output = output
        self.state = CandidateState.AT_BOUNDARY
        self.truncated = False
        self._key = BOUNDARY_KEY

    def next_char(self) -> int:
        """Draw the follower of the current window and slide the window."""
        bucket = self.model.bucket(self._key)
        if bucket:
            code = bucket[self.rng.pick(len(bucket))]
        else:
            code = SENTINEL
        self._key = roll_key(self._key, code)
        self.rng.advance()
        return code

    def next_candidate(self) -> str:
        """
        Walk the rules from the word boundary until a non-letter is drawn.

        May return an empty string (boundary drawn first). A walk that hits
        MAX_CANDIDATE_LENGTH without drawing a terminator is cut short and
        flagged as truncated.
        """
        self.state = CandidateState.AT_BOUNDARY
        self.truncated = False
        self._key = BOUNDARY_KEY
        letters = bytearray()

        while True:
            code = self.next_char()
            if not is_letter(code):
                break
            if len(letters) >= MAX_CANDIDATE_LENGTH:
                self.truncated = True
                break
            letters.append(code)
            self.state = CandidateState.EMITTING

        self.state = CandidateState.TERMINATED
        return letters.decode('ascii')

    def _reject_reason(self, word: str, config: GenerationConfig) -> Optional[str]:
        if self.truncated:
            return 'too_long'
        if len(word) < config.min_length:
            return 'too_short'
        if len(word) > config.max_length:
            return 'too_long'
        in_training = word in self.training
        in_exclusions = word in self.exclusions
        if in_training or in_exclusions:
            logger.debug(f"excluding {word}")
            return 'in_training' if in_training else 'excluded'
        return None

    def generate(self, config: GenerationConfig = None) -> GenerationStats:
        """
        Fill the output dictionary up to config.count words.

        Words already in the output count towards the target, so calling
        again with a larger count continues where the last run stopped.

        Raises:
            DegenerateGenerationError: impossible bounds, empty model, or
                config.max_attempts consecutive rejections
        """
        config = config or GenerationConfig()
        config.validate()
        stats = GenerationStats()

        if len(self.output) >= config.count:
            return stats

        if self.model.is_empty:
            raise DegenerateGenerationError(
                "No character usage rules; train on words at least as long "
                "as the minimum source word length first"
            )

        logger.info(
            f"Generating up to {config.count} words of {config.min_length}-"
            f"{config.max_length} characters ({len(self.output)} already present)"
        )

        failures = 0
        start_steps = self.rng.steps
        while len(self.output) < config.count:
            word = self.next_candidate()
            stats.candidates += 1

            reason = self._reject_reason(word, config)
            if reason is None:
                before = len(self.output)
                self.output.insert(word)
                if len(self.output) == before:
                    reason = 'duplicate'

            if reason is None:
                stats.accepted += 1
                stats.accepted_words.append(word)
                failures = 0
                continue

            setattr(stats, reason, getattr(stats, reason) + 1)
            failures += 1
            if failures >= config.max_attempts:
                stats.draws = self.rng.steps - start_steps
                raise DegenerateGenerationError(
                    f"Gave up after {failures} consecutive rejected candidates "
                    f"with {len(self.output)}/{config.count} words generated"
                )

        stats.draws = self.rng.steps - start_steps
        logger.info(
            f"Generated {stats.accepted} words from {stats.candidates} candidates "
            f"(short {stats.too_short}, long {stats.too_long}, training {stats.in_training}, "
            f"excluded {stats.excluded}, duplicate {stats.duplicate})"
        )
        return stats


__all__ = [
    "WordGenerator",
    "GenerationConfig",
    "GenerationStats",
    "CandidateState",
    "SENTINEL",
]
