#!/usr/bin/env python3
"""
Word Dictionary
===============
Deduplicating, insertion-ordered word set built from two parts:

- StringPool: append-only byte arena holding NUL-terminated words.
  Words are referenced by integer offset, never by object identity,
  so growing the arena never invalidates a reference.
- Dictionary: ordered entry list (entry id -> pool offset) plus a fixed
  number of hash buckets, each a chain of entry ids.

The bucket count never changes. With large corpora the chains simply get
longer; lookups stay correct but slow down linearly in chain length.
Iteration always follows the entry list, so output order does not depend
on the bucket layout.

Usage:
    words = Dictionary()
    words.insert("cat")        # -> 0
    words.insert("dog")        # -> 1
    words.insert("cat")        # -> 0 (already present)
    "dog" in words             # -> True
    list(words)                # -> ['cat', 'dog']
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, TextIO

from gibberkit.errors import FileOpenError, OutOfMemoryError, WordTooLongError
from gibberkit.settings import get_setting

logger = logging.getLogger(__name__)

HASH_INCREMENT = 1
HASH_MULTIPLIER = 857

DEFAULT_BUCKET_COUNT = get_setting("dictionary.bucket_count", 2048)
DEFAULT_MAX_WORD_LENGTH = get_setting("dictionary.max_word_length", 1024)
DEFAULT_MAX_POOL_BYTES = get_setting("dictionary.max_pool_bytes")

TERMINATOR = 0


def word_hash(word: bytes, bucket_count: int = DEFAULT_BUCKET_COUNT) -> int:
    """Polynomial hash of a word's bytes, reduced to a bucket index."""
    h = 0
    for code in word:
        h = ((h + HASH_INCREMENT) * HASH_MULTIPLIER + code) % bucket_count
    return h


def _encode(word) -> bytes:
    if isinstance(word, (bytes, bytearray)):
        return bytes(word)
    return word.encode('latin-1')


# =============================================================================
# String Pool
# =============================================================================

class StringPool:
    """
    Append-only byte arena.

    Args:
        max_bytes: Optional hard cap on arena size; exceeding it raises
            OutOfMemoryError (None = limited only by available memory)
    """

    def __init__(self, max_bytes: Optional[int] = DEFAULT_MAX_POOL_BYTES):
        self._buffer = bytearray()
        self.max_bytes = max_bytes

    def __len__(self) -> int:
        return len(self._buffer)

    def append(self, word: bytes) -> int:
        """Store word plus terminator; return its starting offset."""
        offset = len(self._buffer)
        needed = offset + len(word) + 1
        if self.max_bytes is not None and needed > self.max_bytes:
            raise OutOfMemoryError(
                f"String pool limit of {self.max_bytes} bytes reached "
                f"(needed {needed})"
            )
        try:
            self._buffer += word
            self._buffer.append(TERMINATOR)
        except MemoryError as e:
            # Leave the arena as it was before this append.
            del self._buffer[offset:]
            raise OutOfMemoryError(f"Cannot grow string pool past {offset} bytes") from e
        return offset

    def get(self, offset: int) -> bytes:
        """Return the word starting at offset (without terminator)."""
        if offset < 0 or offset >= len(self._buffer):
            raise IndexError(f"Offset {offset} outside pool of {len(self._buffer)} bytes")
        end = self._buffer.index(TERMINATOR, offset)
        return bytes(self._buffer[offset:end])

    def equals(self, offset: int, word: bytes) -> bool:
        """Compare stored word at offset against word without copying the tail."""
        end = offset + len(word)
        return (
            end < len(self._buffer)
            and self._buffer[end] == TERMINATOR
            and self._buffer[offset:end] == word
        )


# =============================================================================
# Dictionary
# =============================================================================

@dataclass
class DictionaryStats:
    """Size and hash distribution snapshot for a Dictionary."""
    words: int
    pool_bytes: int
    buckets: int
    used_buckets: int
    longest_chain: int

    @property
    def mean_chain(self) -> float:
        return self.words / self.used_buckets if self.used_buckets else 0.0

    def to_dict(self) -> dict:
        return {
            'words': self.words,
            'pool_bytes': self.pool_bytes,
            'buckets': self.buckets,
            'used_buckets': self.used_buckets,
            'longest_chain': self.longest_chain,
            'mean_chain': self.mean_chain,
        }


class Dictionary:
    """
    Set of words with stable entry ids and insertion-order iteration.

    Args:
        name: Label used in log messages
        bucket_count: Number of hash buckets (fixed for the dictionary's life)
        max_word_length: Longest word accepted, in bytes
        pool: StringPool to store words in (a fresh one by default)
    """

    def __init__(self,
                 name: str = "dictionary",
                 bucket_count: int = DEFAULT_BUCKET_COUNT,
                 max_word_length: int = DEFAULT_MAX_WORD_LENGTH,
                 pool: StringPool = None):
        if bucket_count < 1:
            raise ValueError(f"bucket_count must be positive, got {bucket_count}")
        self.name = name
        self.bucket_count = bucket_count
        self.max_word_length = max_word_length
        self.pool = pool if pool is not None else StringPool()
        self._entries: list[int] = []
        # Chains are created on first use, like the buckets they index.
        self._buckets: list[Optional[list[int]]] = [None] * bucket_count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word) -> bool:
        return self.lookup(word) is not None

    def __iter__(self) -> Iterator[str]:
        for offset in self._entries:
            yield self.pool.get(offset).decode('latin-1')

    def __repr__(self) -> str:
        return f"Dictionary(name={self.name!r}, words={len(self)})"

    def lookup(self, word) -> Optional[int]:
        """Return the entry id of word, or None if absent."""
        data = _encode(word)
        chain = self._buckets[word_hash(data, self.bucket_count)]
        if chain is None:
            return None
        for entry_id in chain:
            if self.pool.equals(self._entries[entry_id], data):
                logger.debug(f"Found {word} in {self.name} at position {entry_id}")
                return entry_id
        return None

    def insert(self, word) -> int:
        """
        Add word unless already present.

        Returns:
            Entry id of the (new or existing) word

        Raises:
            WordTooLongError: word exceeds max_word_length
            OutOfMemoryError: the pool or index could not grow
        """
        data = _encode(word)
        if len(data) > self.max_word_length:
            raise WordTooLongError(str(word), self.max_word_length)

        existing = self.lookup(data)
        if existing is not None:
            logger.debug(f"Word {word} is already in {self.name}")
            return existing

        h = word_hash(data, self.bucket_count)
        entry_id = len(self._entries)
        offset = self.pool.append(data)
        try:
            self._entries.append(offset)
            chain = self._buckets[h]
            if chain is None:
                chain = self._buckets[h] = []
            chain.append(entry_id)
        except MemoryError as e:
            del self._entries[entry_id:]
            raise OutOfMemoryError(f"Cannot grow index of {self.name}") from e

        logger.debug(f"Added {word} to {self.name} at position {entry_id} (chain {h})")
        return entry_id

    def word(self, entry_id: int) -> str:
        """Return the word stored under entry_id."""
        return self.pool.get(self._entries[entry_id]).decode('latin-1')

    def offset(self, entry_id: int) -> int:
        """Pool offset of entry_id."""
        return self._entries[entry_id]

    def chain_lengths(self) -> list[int]:
        return [len(chain) if chain else 0 for chain in self._buckets]

    def stats(self) -> DictionaryStats:
        lengths = self.chain_lengths()
        return DictionaryStats(
            words=len(self),
            pool_bytes=len(self.pool),
            buckets=self.bucket_count,
            used_buckets=sum(1 for n in lengths if n),
            longest_chain=max(lengths),
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def dump(self, fp: TextIO) -> int:
        """Write words one per line in insertion order. Returns word count."""
        count = 0
        for word in self:
            fp.write(f"{word}\n")
            count += 1
        return count

    def save(self, path) -> int:
        """
        Write the dictionary to a file.

        Raises:
            FileOpenError: destination cannot be opened
        """
        try:
            fp = open(path, 'w', encoding='latin-1', newline='\n')
        except OSError as e:
            raise FileOpenError(path, e.strerror) from e
        with fp:
            count = self.dump(fp)
        stats = self.stats()
        logger.info(
            f"Saved {count} words from {self.name} to {Path(path).name} "
            f"({stats.used_buckets}/{stats.buckets} buckets used, "
            f"longest chain {stats.longest_chain})"
        )
        return count


__all__ = [
    "StringPool",
    "Dictionary",
    "DictionaryStats",
    "word_hash",
    "HASH_INCREMENT",
    "HASH_MULTIPLIER",
    "DEFAULT_BUCKET_COUNT",
]
