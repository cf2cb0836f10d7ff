"""Word-frequency feature vectors for short text documents.

A ``FeatureVector`` is built once from raw text and is read-only after
that. Tokens are whitespace-separated words taken as-is (no case folding
or punctuation stripping), and the frequency of a word is its count
divided by the total number of tokens in the document.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from .exceptions import InvalidInputError


def tokenize(text: str) -> list[str]:
    """Split text into whitespace-delimited tokens."""
    return text.split()


class FeatureVector:
    """Per-word frequency representation of a single document.

    Example::

        vec = FeatureVector("buy now buy")
        vec.frequency("buy")    # 0.666...
        vec.frequency("hello")  # 0.0

    Args:
        content: Raw document text. Empty text is allowed and gives a
            vector with no features.

    Raises:
        InvalidInputError: If ``content`` is ``None``.
    """

    __slots__ = ("_counts", "_total")

    def __init__(self, content: str) -> None:
        if content is None:
            raise InvalidInputError("content cannot be None")
        self._counts: Counter[str] = Counter(tokenize(content))
        self._total = sum(self._counts.values())

    @property
    def total_tokens(self) -> int:
        """Number of tokens in the source text."""
        return self._total

    @property
    def counts(self) -> Mapping[str, int]:
        """Read-only view of the word -> occurrence count mapping."""
        return MappingProxyType(self._counts)

    def frequency(self, word: str) -> float:
        """Return ``count(word) / total_tokens``, or 0.0 for unknown words."""
        if self._total == 0:
            return 0.0
        return self._counts.get(word, 0) / self._total

    def features(self) -> frozenset[str]:
        """Distinct words seen in the document."""
        return frozenset(self._counts)

    def has_feature(self, word: str) -> bool:
        return word in self._counts

    def most_different_feature(self, other: "FeatureVector") -> Optional[str]:
        """Return the word whose frequency differs most from ``other``.

        Candidates are the union of both feature sets, visited in
        lexicographic order. Only a strictly larger absolute difference
        replaces the current best, so ties resolve to the smallest word.

        Args:
            other: Vector to compare against.

        Returns:
            The most discriminating word, or ``None`` when no word has a
            nonzero difference (including when both vectors are empty).
        """
        best_word: Optional[str] = None
        best_diff = 0.0
        for word in sorted(self._counts.keys() | other._counts.keys()):
            diff = abs(self.frequency(word) - other.frequency(word))
            if diff > best_diff:
                best_word = word
                best_diff = diff
        return best_word

    def __contains__(self, word: object) -> bool:
        return word in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"FeatureVector(features={len(self._counts)}, total_tokens={self._total})"
