"""Loading labelled documents from CSV files.

Rows are read with pandas, turned into ``FeatureVector`` objects and
shuffled so that training order does not follow file order. The random
source is passed in explicitly; a seeded ``random.Random`` makes the
order reproducible.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .exceptions import InvalidInputError
from .features import FeatureVector

logger = logging.getLogger(__name__)


@dataclass
class Dataset:
    """Parallel sequences of documents and their labels."""

    vectors: list[FeatureVector] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.vectors is None or self.labels is None:
            raise InvalidInputError("vectors and labels cannot be None")
        if len(self.vectors) != len(self.labels):
            raise InvalidInputError(
                f"Length of provided data [{len(self.vectors)}] doesn't match "
                f"provided labels [{len(self.labels)}]"
            )

    def __len__(self) -> int:
        return len(self.vectors)

    def __iter__(self) -> Iterator[tuple[FeatureVector, str]]:
        return iter(zip(self.vectors, self.labels))


def shuffle_together(data: list[Any], labels: list[Any], rng: random.Random) -> None:
    """Shuffle two parallel lists in place with the same permutation.

    One seed is drawn from ``rng`` and each list is shuffled by its own
    ``random.Random(seed)``, so index ``i`` still pairs the same items.

    Raises:
        InvalidInputError: If the lists differ in length.
    """
    if len(data) != len(labels):
        raise InvalidInputError(
            f"cannot shuffle {len(data)} items together with {len(labels)} labels"
        )
    seed = rng.randrange(2**31 - 1)
    random.Random(seed).shuffle(data)
    random.Random(seed).shuffle(labels)


class DataLoader:
    """Reads a CSV of labelled documents into a shuffled ``Dataset``.

    The first CSV row is treated as a header. Columns are addressed by
    zero-based position.

    Example::

        loader = DataLoader("data/emails/train.csv", rng=random.Random(7))
        tree = DecisionTree.train(loader.dataset)

    Args:
        path: CSV file to read.
        label_index: Column holding the label.
        content_index: Column holding the document text.
        rng: Random source for shuffling (a fresh unseeded one if omitted).
        shuffle: Set to ``False`` to keep file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidInputError: If ``path`` is ``None`` or a column index is
            out of range for the file.
    """

    def __init__(
        self,
        path: str | Path,
        label_index: int = 0,
        content_index: int = 1,
        rng: Optional[random.Random] = None,
        shuffle: bool = True,
    ) -> None:
        if path is None:
            raise InvalidInputError("path cannot be None")
        self.path = Path(path)
        self._rng = rng if rng is not None else random.Random()

        frame = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        n_columns = len(frame.columns)
        for name, index in (("label", label_index), ("content", content_index)):
            if not 0 <= index < n_columns:
                raise InvalidInputError(
                    f"{name} column {index} out of range for {self.path} "
                    f"({n_columns} columns)"
                )

        self._labels: list[str] = [str(v) for v in frame.iloc[:, label_index]]
        self._data: list[FeatureVector] = [
            FeatureVector(str(v)) for v in frame.iloc[:, content_index]
        ]
        logger.info("Loaded %d rows from %s", len(self._data), self.path)

        if shuffle:
            self.shuffle()

    @property
    def data(self) -> list[FeatureVector]:
        return self._data

    @property
    def labels(self) -> list[str]:
        return self._labels

    @property
    def dataset(self) -> Dataset:
        return Dataset(self._data, self._labels)

    def shuffle(self) -> None:
        """Reshuffle documents and labels together."""
        shuffle_together(self._data, self._labels, self._rng)
