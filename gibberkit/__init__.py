#!/usr/bin/env python3
"""
gibberkit - Pronounceable Non-Dictionary Word Generator
=======================================================

Builds character usage rules from a template text, then generates new
words that follow those rules. A French template gives French-sounding
words. Words from the template itself, and from an optional exclusion
list, are never generated.

Quick Start
-----------
    from gibberkit import GibberKit

    kit = GibberKit()
    kit.train("french.txt")
    kit.exclude("dictionary.txt")
    kit.generate(count=100, min_length=6, max_length=8)

    for word in kit.words:
        print(word)

Modules
-------
    gibberkit.tokenizer  - Byte stream to folded lowercase words
    gibberkit.dictionary - StringPool + fixed-bucket hash Dictionary
    gibberkit.bigram     - Second-order character usage rules
    gibberkit.rng        - Deterministic 15-bit LCG
    gibberkit.generator  - Candidate walk and acceptance filters
    gibberkit.settings   - YAML settings (configs/app.yaml)

CLI Usage
---------
    python -m gibberkit -t french.txt -x words.txt -n 6 -m 8 -c 100 -f out.txt
"""

__version__ = "2.1.0"

import logging
import sys
from typing import BinaryIO, Iterable, TextIO

from gibberkit.bigram import BigramModel, save_model, load_model, load_rules
from gibberkit.dictionary import Dictionary, DictionaryStats, StringPool, word_hash
from gibberkit.errors import (
    GibberkitError,
    FileOpenError,
    MissingArgumentError,
    OutOfMemoryError,
    WordTooLongError,
    RulesFormatError,
    DegenerateGenerationError,
)
from gibberkit.generator import (
    WordGenerator,
    GenerationConfig,
    GenerationStats,
    CandidateState,
)
from gibberkit.rng import PseudoRandomGenerator, DEFAULT_SEED
from gibberkit.settings import get_setting
from gibberkit.tokenizer import Tokenizer, iter_tokens

logger = logging.getLogger(__name__)

DEFAULT_MIN_SOURCE_LENGTH = get_setting("training.min_source_word_length", 5)


def _open_source(path) -> BinaryIO:
    try:
        return open(path, 'rb')
    except OSError as e:
        raise FileOpenError(path, e.strerror) from e


# =============================================================================
# Main Interface
# =============================================================================

class GibberKit:
    """
    One generation context: three dictionaries, the usage rules and the
    random stream. Independent instances never share state.

    Args:
        min_source_length: Training and exclusion words shorter than this
            are ignored
        seed: Initial random value
        bucket_count: Hash buckets per dictionary (None = settings value)
    """

    def __init__(self,
                 min_source_length: int = None,
                 seed: int = DEFAULT_SEED,
                 bucket_count: int = None):
        self.min_source_length = (
            DEFAULT_MIN_SOURCE_LENGTH if min_source_length is None else min_source_length
        )
        dict_kwargs = {} if bucket_count is None else {'bucket_count': bucket_count}

        self.training = Dictionary("training dictionary", **dict_kwargs)
        self.exclusions = Dictionary("exclusion dictionary", **dict_kwargs)
        self.output = Dictionary("gibberish dictionary", **dict_kwargs)
        self.model = BigramModel()
        self.rng = PseudoRandomGenerator(seed)
        self._generator = WordGenerator(
            self.model, self.rng, self.training, self.exclusions, self.output
        )

    @property
    def words(self) -> list[str]:
        """Generated words in generation order."""
        return list(self.output)

    def _qualifying(self, tokens: Iterable[str], source: str) -> Iterable[str]:
        limit = self.training.max_word_length
        for word in tokens:
            if len(word) < self.min_source_length:
                continue
            if len(word) > limit:
                logger.warning(f"Skipping {len(word)}-character word in {source} (limit {limit})")
                continue
            yield word

    # -------------------------------------------------------------------------
    # Training
    # -------------------------------------------------------------------------

    def train_words(self, words: Iterable[str], source: str = "words") -> int:
        """
        Learn usage rules from words that are new to the training dictionary.

        Returns:
            Number of words learned
        """
        learned = 0
        for word in self._qualifying(words, source):
            if word in self.training:
                logger.debug(f"Word {word} is duplicated in {source}")
                continue
            self.training.insert(word)
            self.model.learn(word)
            learned += 1
        logger.info(
            f"Learned {learned} words from {source} "
            f"({len(self.model)} char chains, {len(self.training)} training words)"
        )
        return learned

    def train_stream(self, stream: BinaryIO, source: str = "stream") -> int:
        return self.train_words(Tokenizer(stream), source)

    def train(self, path) -> int:
        """
        Learn usage rules from a text file.

        Raises:
            FileOpenError: file cannot be opened
        """
        with _open_source(path) as fp:
            return self.train_stream(fp, str(path))

    # -------------------------------------------------------------------------
    # Exclusions
    # -------------------------------------------------------------------------

    def exclude_words(self, words: Iterable[str], source: str = "words") -> int:
        """Add words to the exclusion dictionary. Returns dictionary size."""
        for word in self._qualifying(words, source):
            self.exclusions.insert(word)
        logger.info(f"Exclusion dictionary holds {len(self.exclusions)} words after {source}")
        return len(self.exclusions)

    def exclude_stream(self, stream: BinaryIO, source: str = "stream") -> int:
        return self.exclude_words(Tokenizer(stream), source)

    def exclude(self, path) -> int:
        """
        Add every qualifying word in a text file to the exclusions.

        Raises:
            FileOpenError: file cannot be opened
        """
        with _open_source(path) as fp:
            return self.exclude_stream(fp, str(path))

    # -------------------------------------------------------------------------
    # Rules persistence
    # -------------------------------------------------------------------------

    def save_rules(self, path):
        save_model(self.model, path, training=self.training)

    def load_rules(self, path):
        """
        Merge rules from a JSON file into the current model.

        The training words saved with the rules join the training
        dictionary, so they are still never generated.

        Raises:
            FileOpenError: file cannot be read
            RulesFormatError: file is not a rules JSON document
        """
        loaded, training = load_rules(path)
        limit = self.training.max_word_length
        for word in training:
            if len(word) > limit:
                logger.warning(f"Skipping {len(word)}-character word in {path} (limit {limit})")
                continue
            self.training.insert(word)
        for key, bucket in loaded.buckets.items():
            self.model.buckets.setdefault(key, bytearray()).extend(bucket)
        self.model.words_learned += loaded.words_learned

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate(self,
                 count: int = None,
                 min_length: int = None,
                 max_length: int = None,
                 max_attempts: int = None) -> GenerationStats:
        """
        Generate words until the output dictionary holds count words.

        Raises:
            DegenerateGenerationError: settings or model can never reach count
        """
        config = GenerationConfig(
            count=count,
            min_length=min_length,
            max_length=max_length,
            max_attempts=max_attempts,
        )
        return self._generator.generate(config)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def save_training(self, path) -> int:
        return self.training.save(path)

    def save_exclusions(self, path) -> int:
        return self.exclusions.save(path)

    def save_output(self, path) -> int:
        return self.output.save(path)

    def write_output(self, fp: TextIO = None) -> int:
        """Print generated words, one per line (stdout by default)."""
        return self.output.dump(fp or sys.stdout)


__all__ = [
    "__version__",
    "GibberKit",
    # Components
    "Tokenizer",
    "iter_tokens",
    "StringPool",
    "Dictionary",
    "DictionaryStats",
    "word_hash",
    "BigramModel",
    "save_model",
    "load_model",
    "load_rules",
    "PseudoRandomGenerator",
    "WordGenerator",
    "GenerationConfig",
    "GenerationStats",
    "CandidateState",
    # Errors
    "GibberkitError",
    "FileOpenError",
    "MissingArgumentError",
    "OutOfMemoryError",
    "WordTooLongError",
    "RulesFormatError",
    "DegenerateGenerationError",
]
