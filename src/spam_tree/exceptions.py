"""Exception types raised by spam-tree."""

from __future__ import annotations


class SpamTreeError(Exception):
    """Base class for all spam-tree errors."""


class InvalidInputError(SpamTreeError, ValueError):
    """A required argument is missing or the data is not usable."""


class MalformedPersistedTreeError(SpamTreeError, ValueError):
    """A saved tree does not follow the line-oriented tree format.

    Attributes:
        line_number: 1-based line where the problem was found, if known.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
