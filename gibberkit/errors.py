#!/usr/bin/env python3
"""
Errors
======
Exception hierarchy shared by the dictionary, model and generator.

Stage-local errors (FileOpenError, MissingArgumentError, RulesFormatError,
DegenerateGenerationError, WordTooLongError) are recovered by the caller.
OutOfMemoryError is fatal.
"""


class GibberkitError(Exception):
    """Base class for all gibberkit errors."""


class FileOpenError(GibberkitError, OSError):
    """A word source or destination could not be opened."""

    def __init__(self, path, reason: str = None):
        self.path = str(path)
        self.reason = reason
        message = f"Cannot open file {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MissingArgumentError(GibberkitError, ValueError):
    """A command-line flag that needs a value was given none."""

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"Argument missing for {flag} flag")


class OutOfMemoryError(GibberkitError, MemoryError):
    """Growing a pool or index failed."""


class WordTooLongError(GibberkitError, ValueError):
    """A word exceeds the dictionary's maximum word length."""

    def __init__(self, word: str, limit: int):
        self.word = word
        self.limit = limit
        super().__init__(f"Word of {len(word)} characters exceeds limit of {limit}")


class RulesFormatError(GibberkitError, ValueError):
    """A usage rules file is not valid rules JSON."""

    def __init__(self, path, reason: str = None):
        self.path = str(path)
        self.reason = reason
        message = f"Invalid rules file {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DegenerateGenerationError(GibberkitError, RuntimeError):
    """Generation settings or model can never reach the requested count."""


__all__ = [
    "GibberkitError",
    "FileOpenError",
    "MissingArgumentError",
    "OutOfMemoryError",
    "WordTooLongError",
    "RulesFormatError",
    "DegenerateGenerationError",
]
