"""Incremental binary decision tree over word-frequency features.

The tree is grown one labelled document at a time. When a document
reaches a leaf that carries a different label, the leaf is replaced by a
split on the word whose frequency differs most between the two
documents, with the threshold halfway between their frequencies.
Queries go left when their frequency for the split word is strictly
below the threshold and right otherwise.

Trees can be written to and read from a flat, pre-order line format::

    Feature: buy
    Threshold: 0.25
    Ham
    Spam

A split is two lines (feature, threshold) followed by its left and right
subtrees; a leaf is a single line holding its label.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Optional, TextIO, Union

from .dataset import Dataset
from .exceptions import InvalidInputError, MalformedPersistedTreeError
from .features import FeatureVector

logger = logging.getLogger(__name__)

FEATURE_MARKER = "Feature:"
THRESHOLD_MARKER = "Threshold:"
OVERALL = "Overall"

# Split word used when two conflicting documents have identical frequencies.
# Whitespace tokenization never yields it, so every document routes right.
DEGENERATE_FEATURE = ""

_EMPTY_VECTOR = FeatureVector("")


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

@dataclass
class Leaf:
    """Terminal node carrying a classification label.

    ``vector`` is the training document that created the leaf. It is only
    needed to split the leaf on a later conflicting insertion and is
    ``None`` for loaded trees.
    """

    label: str
    vector: Optional[FeatureVector] = None


@dataclass
class Split:
    """Internal node routing on one word's frequency."""

    feature: str
    threshold: float
    left: "Node"
    right: "Node"

    def child_for(self, vector: FeatureVector) -> "Node":
        if vector.frequency(self.feature) < self.threshold:
            return self.left
        return self.right


Node = Union[Leaf, Split]


def midpoint(a: float, b: float) -> float:
    """Halfway point between two frequencies."""
    return min(a, b) + abs(a - b) / 2


# ---------------------------------------------------------------------------
# Decision tree
# ---------------------------------------------------------------------------

class DecisionTree:
    """Binary text classifier built by incremental insertion.

    Example::

        tree = DecisionTree()
        tree.insert(FeatureVector("buy now"), "Spam")
        tree.insert(FeatureVector("hello friend"), "Ham")

        tree.classify(FeatureVector("buy"))    # "Spam"
        tree.classify(FeatureVector("hello"))  # "Ham"

        with open("model.txt", "w", encoding="utf-8") as f:
            tree.save(f)

    The tree is not safe for concurrent insertion. Reads (``classify``,
    ``accuracy``, ``to_lines``) may run concurrently with each other.

    Args:
        root: Existing root node, or ``None`` for an empty tree.
    """

    def __init__(self, root: Optional[Node] = None) -> None:
        self._root = root

    @classmethod
    def train(
        cls,
        vectors: Sequence[FeatureVector] | Dataset,
        labels: Optional[Sequence[str]] = None,
    ) -> "DecisionTree":
        """Build a tree by inserting every (vector, label) pair in order.

        Args:
            vectors: Training documents, or a ``Dataset`` holding both
                documents and labels.
            labels: Label for each document (same length as ``vectors``).
                Omitted when ``vectors`` is a ``Dataset``.

        Returns:
            The trained tree.

        Raises:
            InvalidInputError: If either sequence is ``None`` or empty,
                their lengths differ, or a label is not usable.
        """
        vectors, labels = _unpack(vectors, labels)
        if not vectors:
            raise InvalidInputError("training data cannot be empty")

        tree = cls()
        for vector, label in zip(vectors, labels):
            tree.insert(vector, label)
        logger.info(
            "Trained tree on %d documents: %d leaves, depth %d",
            len(vectors), tree.leaf_count, tree.depth,
        )
        return tree

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def root(self) -> Optional[Node]:
        return self._root

    @property
    def is_empty(self) -> bool:
        return self._root is None

    @property
    def depth(self) -> int:
        """Number of splits on the longest root-to-leaf path (-1 if empty)."""
        if self._root is None:
            return -1
        deepest = 0
        stack: list[tuple[Node, int]] = [(self._root, 0)]
        while stack:
            node, level = stack.pop()
            if isinstance(node, Split):
                stack.append((node.left, level + 1))
                stack.append((node.right, level + 1))
            else:
                deepest = max(deepest, level)
        return deepest

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in self._leaves())

    def labels(self) -> set[str]:
        """Distinct labels held by the leaves."""
        return {leaf.label for leaf in self._leaves()}

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def insert(self, vector: FeatureVector, label: str) -> None:
        """Insert one labelled document, splitting a leaf if needed.

        Descends from the root by the existing splits. An empty slot gets
        a new leaf; a leaf with the same label absorbs the document; a
        leaf with a different label is replaced by a split between the
        two documents.

        Labels must be savable as a single line of the tree format: not
        blank, no line breaks, not starting with ``Feature:``, and not the
        reserved ``"Overall"`` accuracy key.

        Raises:
            InvalidInputError: If ``vector`` or ``label`` is ``None``, or
                the label is not usable.
        """
        if vector is None:
            raise InvalidInputError("vector cannot be None")
        _check_label(label)

        if self._root is None:
            self._root = Leaf(label, vector)
            return

        parent: Optional[Split] = None
        went_left = False
        node = self._root
        while isinstance(node, Split):
            parent = node
            went_left = vector.frequency(node.feature) < node.threshold
            node = node.left if went_left else node.right

        replacement = self._grow(node, vector, label)
        if parent is None:
            self._root = replacement
        elif went_left:
            parent.left = replacement
        else:
            parent.right = replacement

    @staticmethod
    def _grow(leaf: Leaf, vector: FeatureVector, label: str) -> Node:
        """Return the subtree that replaces ``leaf`` after inserting ``vector``."""
        if leaf.label == label:
            return leaf

        existing = leaf.vector if leaf.vector is not None else _EMPTY_VECTOR
        feature = vector.most_different_feature(existing)
        if feature is None:
            feature = DEGENERATE_FEATURE
            threshold = 0.0
        else:
            threshold = midpoint(existing.frequency(feature), vector.frequency(feature))

        new_leaf = Leaf(label, vector)
        if vector.frequency(feature) < threshold:
            split = Split(feature, threshold, left=new_leaf, right=leaf)
        else:
            split = Split(feature, threshold, left=leaf, right=new_leaf)
        logger.debug(
            "Split %r/%r on feature %r at threshold %s",
            leaf.label, label, feature, threshold,
        )
        return split

    def discard_training_vectors(self) -> None:
        """Drop the documents retained by leaves to free memory.

        Later insertions still work but split such leaves as if their
        document were empty.
        """
        for leaf in self._leaves():
            leaf.vector = None

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, vector: FeatureVector) -> str:
        """Predict a label by walking from the root to a leaf.

        Returns:
            The leaf label, or ``""`` if the tree is empty.

        Raises:
            InvalidInputError: If ``vector`` is ``None``.
        """
        if vector is None:
            raise InvalidInputError("vector cannot be None")
        node = self._root
        if node is None:
            return ""
        while isinstance(node, Split):
            node = node.child_for(vector)
        return node.label

    def classify_all(self, vectors: Iterable[FeatureVector]) -> list[str]:
        """Classify several documents, preserving order."""
        if vectors is None:
            raise InvalidInputError("vectors cannot be None")
        return [self.classify(vector) for vector in vectors]

    def accuracy(
        self,
        vectors: Sequence[FeatureVector] | Dataset,
        labels: Optional[Sequence[str]] = None,
    ) -> dict[str, float]:
        """Per-label and overall accuracy on a labelled dataset.

        Each expected label maps to the fraction of its documents that
        were classified correctly; the ``"Overall"`` key holds the
        fraction across all documents.

        Args:
            vectors: Documents to classify, or a ``Dataset`` holding both
                documents and expected labels.
            labels: Expected label for each document. Omitted when
                ``vectors`` is a ``Dataset``.

        Returns:
            Mapping of label to accuracy in [0, 1]. An empty dataset gives
            ``{"Overall": 0.0}``.

        Raises:
            InvalidInputError: If either sequence is ``None``, the lengths
                differ, or an expected label is ``"Overall"``.
        """
        vectors, labels = _unpack(vectors, labels)
        if OVERALL in labels:
            raise InvalidInputError(f"{OVERALL!r} is reserved and cannot be an expected label")

        totals: dict[str, int] = {}
        correct: dict[str, int] = {}
        overall_correct = 0
        for vector, expected in zip(vectors, labels):
            predicted = self.classify(vector)
            totals[expected] = totals.get(expected, 0) + 1
            if predicted == expected:
                correct[predicted] = correct.get(predicted, 0) + 1
                overall_correct += 1

        scores = {label: correct.get(label, 0) / total for label, total in totals.items()}
        scores[OVERALL] = overall_correct / len(labels) if labels else 0.0
        return scores

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_lines(self) -> Iterator[str]:
        """Yield the tree in pre-order line format (no line terminators)."""
        if self._root is None:
            return
        stack: list[Node] = [self._root]
        while stack:
            node = stack.pop()
            if isinstance(node, Split):
                yield f"{FEATURE_MARKER} {node.feature}"
                yield f"{THRESHOLD_MARKER} {node.threshold!r}"
                stack.append(node.right)
                stack.append(node.left)
            else:
                yield node.label

    def save(self, output: TextIO) -> None:
        """Write the tree to a text stream, one node line per line.

        Raises:
            InvalidInputError: If ``output`` is ``None``.
        """
        if output is None:
            raise InvalidInputError("output cannot be None")
        for line in self.to_lines():
            output.write(line + "\n")

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "DecisionTree":
        """Rebuild a tree from its line format.

        Loaded leaves carry no training document.

        Args:
            lines: Lines of a saved tree; trailing newlines are ignored.
                An empty stream gives an empty tree.

        Raises:
            InvalidInputError: If ``lines`` is ``None``.
            MalformedPersistedTreeError: If the stream is not a single
                well-formed tree.
        """
        if lines is None:
            raise InvalidInputError("input cannot be None")

        root: Optional[Node] = None
        # Splits still waiting for children: (feature, threshold, children).
        pending: list[tuple[str, float, list[Node]]] = []
        numbered = enumerate((line.rstrip("\r\n") for line in lines), start=1)

        for number, line in numbered:
            if root is not None:
                if line.strip():
                    raise MalformedPersistedTreeError(
                        "unexpected content after a complete tree", number
                    )
                continue
            if not line.strip():
                if pending:
                    raise MalformedPersistedTreeError("empty node line", number)
                continue

            if line.startswith(FEATURE_MARKER):
                feature = _strip_marker(line, FEATURE_MARKER)
                threshold = _read_threshold(numbered, number)
                pending.append((feature, threshold, []))
                continue

            node: Node = Leaf(line)
            while pending:
                children = pending[-1][2]
                children.append(node)
                if len(children) < 2:
                    break
                feature, threshold, (left, right) = pending.pop()
                node = Split(feature, threshold, left, right)
            else:
                root = node

        if pending:
            raise MalformedPersistedTreeError(
                f"stream ended with {len(pending)} incomplete split(s)"
            )

        tree = cls(root)
        logger.debug("Loaded tree with %d leaves", tree.leaf_count)
        return tree

    @classmethod
    def load(cls, source: Iterable[str]) -> "DecisionTree":
        """Read a tree from a text stream or any iterable of lines."""
        return cls.from_lines(source)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _leaves(self) -> Iterator[Leaf]:
        if self._root is None:
            return
        stack: list[Node] = [self._root]
        while stack:
            node = stack.pop()
            if isinstance(node, Split):
                stack.append(node.right)
                stack.append(node.left)
            else:
                yield node

    def __repr__(self) -> str:
        if self._root is None:
            return "DecisionTree(empty)"
        return f"DecisionTree(leaves={self.leaf_count}, depth={self.depth})"


def _unpack(
    vectors: Sequence[FeatureVector] | Dataset,
    labels: Optional[Sequence[str]],
) -> tuple[Sequence[FeatureVector], Sequence[str]]:
    """Accept either a ``Dataset`` or parallel vector and label sequences."""
    if isinstance(vectors, Dataset):
        if labels is not None:
            raise InvalidInputError("labels must not be given separately with a Dataset")
        return vectors.vectors, vectors.labels
    if vectors is None or labels is None:
        raise InvalidInputError("vectors and labels cannot be None")
    if len(vectors) != len(labels):
        raise InvalidInputError(
            f"Length of provided data [{len(vectors)}] doesn't match "
            f"provided labels [{len(labels)}]"
        )
    return vectors, labels


def _check_label(label: str) -> None:
    # A label is saved as one line, so it must read back as a leaf.
    if label is None:
        raise InvalidInputError("label cannot be None")
    if not label.strip():
        raise InvalidInputError("label cannot be empty or whitespace")
    if "\n" in label or "\r" in label:
        raise InvalidInputError(f"label cannot contain line breaks: {label!r}")
    if label.startswith(FEATURE_MARKER):
        raise InvalidInputError(f"label cannot start with {FEATURE_MARKER!r}: {label!r}")
    if label == OVERALL:
        raise InvalidInputError(f"{OVERALL!r} is reserved for overall accuracy")


def _strip_marker(line: str, marker: str) -> str:
    value = line[len(marker):]
    return value[1:] if value.startswith(" ") else value


def _read_threshold(numbered: Iterator[tuple[int, str]], feature_line: int) -> float:
    """Consume and parse the threshold line that must follow a feature line."""
    entry = next(numbered, None)
    if entry is None:
        raise MalformedPersistedTreeError(
            "missing threshold line after feature line", feature_line
        )
    number, line = entry
    if not line.startswith(THRESHOLD_MARKER):
        raise MalformedPersistedTreeError(
            f"expected '{THRESHOLD_MARKER}' line, got {line!r}", number
        )
    raw = _strip_marker(line, THRESHOLD_MARKER).strip()
    try:
        return float(raw)
    except ValueError as exc:
        raise MalformedPersistedTreeError(f"non-numeric threshold {raw!r}", number) from exc
