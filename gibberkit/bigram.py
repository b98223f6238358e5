#!/usr/bin/env python3
"""
Bigram Usage Rules
==================
Second-order character transition table learned from training words.

Each word is padded with two leading and one trailing boundary (space)
characters. For every pair of consecutive characters the character that
follows is appended to that pair's bucket:

    "cat" -> "  cat "
    (' ', ' ') -> 'c'
    (' ', 'c') -> 'a'
    ('c', 'a') -> 't'
    ('a', 't') -> ' '

Buckets keep repeats, so a character that follows a pair twice as often
is twice as likely to be drawn. Buckets are keyed by a 16-bit rolling key
(prev2 << 8 | prev1), the same key the generator rolls forward as it
emits characters.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from gibberkit.errors import FileOpenError, OutOfMemoryError, RulesFormatError

logger = logging.getLogger(__name__)

BOUNDARY = 32
BOUNDARY_KEY = (BOUNDARY << 8) | BOUNDARY
KEY_MASK = 0xFFFF


def pair_key(prev2: int, prev1: int) -> int:
    """Rolling key for the character pair (prev2, prev1)."""
    return ((prev2 << 8) | prev1) & KEY_MASK


def roll_key(key: int, code: int) -> int:
    """Slide the pair window forward by one character."""
    return ((key << 8) | code) & KEY_MASK


class BigramModel:
    """Character usage rules: pair key -> bytearray of following characters."""

    def __init__(self):
        self.buckets: dict[int, bytearray] = {}
        self.words_learned = 0

    def __len__(self) -> int:
        return len(self.buckets)

    def __contains__(self, key: int) -> bool:
        return key in self.buckets

    @property
    def is_empty(self) -> bool:
        return not self.buckets

    @property
    def transitions(self) -> int:
        """Total number of recorded transitions (sum of bucket sizes)."""
        return sum(len(bucket) for bucket in self.buckets.values())

    def bucket(self, key: int) -> Optional[bytearray]:
        return self.buckets.get(key)

    def followers(self, pair: str) -> str:
        """Following characters recorded for a two-character string."""
        raw = pair.encode('latin-1')
        if len(raw) != 2:
            raise ValueError(f"pair must be two characters, got {pair!r}")
        bucket = self.buckets.get(pair_key(raw[0], raw[1]))
        return bucket.decode('latin-1') if bucket else ''

    def learn(self, word: str):
        """Fold one training word into the rules."""
        padded = b'  ' + word.encode('latin-1') + b' '
        key = BOUNDARY_KEY
        try:
            for code in padded[2:]:
                bucket = self.buckets.get(key)
                if bucket is None:
                    logger.debug(f"Creating char chain {key} ({chr(key >> 8)!r} {chr(key & 0xFF)!r})")
                    bucket = self.buckets[key] = bytearray()
                bucket.append(code)
                key = roll_key(key, code)
        except MemoryError as e:
            raise OutOfMemoryError("Cannot grow character usage rules") from e
        self.words_learned += 1

    def learn_all(self, words: Iterable[str]) -> int:
        count = 0
        for word in words:
            self.learn(word)
            count += 1
        return count

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize rules to a JSON-friendly dictionary."""
        return {
            'words_learned': self.words_learned,
            'buckets': {
                str(key): bucket.decode('latin-1')
                for key, bucket in self.buckets.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BigramModel':
        """Deserialize rules; bucket order is preserved."""
        model = cls()
        model.words_learned = int(data.get('words_learned', 0))
        for key, chars in data['buckets'].items():
            model.buckets[int(key)] = bytearray(chars.encode('latin-1'))
        return model


def save_model(model: BigramModel, filepath, training: Iterable[str] = ()):
    """
    Save usage rules to a JSON file.

    The training words are stored alongside the rules so that a loaded
    model still refuses to generate them.
    """
    data = model.to_dict()
    data['training'] = list(training)
    try:
        Path(filepath).write_text(json.dumps(data, indent=2))
    except OSError as e:
        raise FileOpenError(filepath, e.strerror) from e
    logger.info(f"Saved {len(model)} char chains and {len(data['training'])} training words to {filepath}")


def _training_words(data: dict) -> list[str]:
    words = data.get('training', [])
    if not isinstance(words, list):
        raise TypeError("'training' must be a list of words")
    for word in words:
        if not (isinstance(word, str) and word.isascii() and word.isalpha() and word.islower()):
            raise ValueError(f"invalid training word {word!r}")
    return words


def load_rules(filepath) -> tuple[BigramModel, list[str]]:
    """
    Load usage rules and the training words saved with them.

    Raises:
        FileOpenError: file cannot be read
        RulesFormatError: file is not a rules JSON document
    """
    try:
        raw = Path(filepath).read_bytes()
    except OSError as e:
        raise FileOpenError(filepath, e.strerror) from e
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise TypeError("top level must be an object")
        model = BigramModel.from_dict(data)
        training = _training_words(data)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise RulesFormatError(filepath, str(e)) from e
    logger.info(f"Loaded {len(model)} char chains and {len(training)} training words from {filepath}")
    return model, training


def load_model(filepath) -> BigramModel:
    """Load usage rules from a JSON file."""
    return load_rules(filepath)[0]


__all__ = [
    "BigramModel",
    "save_model",
    "load_model",
    "load_rules",
    "pair_key",
    "roll_key",
    "BOUNDARY",
    "BOUNDARY_KEY",
]
