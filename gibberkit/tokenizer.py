#!/usr/bin/env python3
"""
Tokenizer
=========
Splits a raw byte stream into lowercase alphabetic words.

Bytes 192-255 (the accented Latin-1 letters) are folded to one or two
plain ASCII letters before the alphabetic test, so "Café" becomes "cafe"
and "Straße" becomes "strasse". Everything that is not an ASCII letter
after folding separates words.

Usage:
    with open("corpus.txt", "rb") as fp:
        for word in Tokenizer(fp):
            print(word)
"""

from typing import BinaryIO, Iterator, Optional


# =============================================================================
# Latin-1 Folding Tables
# =============================================================================
# Indexed by (code - 192). FOLD_FIRST is always set, FOLD_SECOND only for
# letters that decompose into two (Æ, ß, æ).

FOLD_FIRST = bytes([
    65, 65, 65, 65, 65, 65, 65, 67, 69, 69, 69, 69, 73, 73, 73, 73,
    68, 78, 79, 79, 79, 79, 79, 88, 79, 85, 85, 85, 85, 89, 80, 83,
    97, 97, 97, 97, 97, 97, 97, 99, 101, 101, 101, 101, 105, 105, 105, 105,
    100, 110, 111, 111, 111, 111, 111, 120, 111, 117, 117, 117, 117, 121, 112, 121,
])

FOLD_SECOND = bytes([
    0, 0, 0, 0, 0, 0, 69, 0, 0, 0, 0, 0, 0, 0, 0, 0,
    0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 83,
    0, 0, 0, 0, 0, 0, 101, 0, 0, 0, 0, 0, 0, 0, 0, 0,
    0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0,
])

EXTENDED_START = 192


def _build_fold_map() -> list:
    fold_map = []
    for code in range(256):
        if code >= EXTENDED_START:
            first = FOLD_FIRST[code - EXTENDED_START]
            second = FOLD_SECOND[code - EXTENDED_START]
            folded = bytes([first, second]) if second else bytes([first])
        else:
            folded = bytes([code])
        fold_map.append(folded.lower())
    return fold_map


FOLD_MAP = _build_fold_map()


def fold_byte(code: int) -> bytes:
    """Return the lowercase ASCII replacement for a single byte."""
    return FOLD_MAP[code]


def is_letter(code: int) -> bool:
    """ASCII letter test (no locale)."""
    return 65 <= code <= 90 or 97 <= code <= 122


# =============================================================================
# Tokenizer
# =============================================================================

class Tokenizer:
    """
    Lazy, single-pass word reader over a binary stream.

    Args:
        stream: Binary file object (anything with read(size) -> bytes)
        chunk_size: Bytes read per call to stream.read()
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = 65536):
        self.stream = stream
        self.chunk_size = chunk_size
        self._chunk = b''
        self._pos = 0
        self._exhausted = False

    def _next_byte(self) -> Optional[int]:
        if self._pos >= len(self._chunk):
            if self._exhausted:
                return None
            self._chunk = self.stream.read(self.chunk_size)
            self._pos = 0
            if not self._chunk:
                self._exhausted = True
                return None
        code = self._chunk[self._pos]
        self._pos += 1
        return code

    def next_token(self) -> Optional[str]:
        """
        Read the next non-empty word.

        Returns:
            Lowercase ASCII word, or None once the stream is exhausted
        """
        token = bytearray()
        while True:
            code = self._next_byte()
            if code is None:
                break
            folded = FOLD_MAP[code]
            if not is_letter(folded[-1]):
                if token:
                    break
                continue
            token += folded

        if not token:
            return None
        return token.decode('ascii')

    def __iter__(self) -> Iterator[str]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token


def iter_tokens(stream: BinaryIO) -> Iterator[str]:
    """Convenience wrapper: iterate words in a binary stream."""
    return iter(Tokenizer(stream))


__all__ = [
    "Tokenizer",
    "iter_tokens",
    "fold_byte",
    "is_letter",
    "FOLD_FIRST",
    "FOLD_SECOND",
]
