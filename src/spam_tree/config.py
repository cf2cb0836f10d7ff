"""Runtime settings read from the environment and an optional ``.env`` file."""

from __future__ import annotations

import os
import random
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import InvalidInputError

ENV_PREFIX = "SPAM_TREE_"


def _get_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidInputError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Default file locations, CSV columns, seed and log level.

    Attributes:
        train_file: CSV used when a model has to be trained.
        test_file: CSV used for accuracy measurement.
        label_index: Zero-based CSV column holding the label.
        content_index: Zero-based CSV column holding the document text.
        seed: Shuffle seed; ``None`` means a different order every run.
        log_level: Name of the logging level for the CLI.
    """

    train_file: str = "data/emails/train.csv"
    test_file: str = "data/emails/test.csv"
    label_index: int = 0
    content_index: int = 1
    seed: Optional[int] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from ``SPAM_TREE_*`` environment variables.

        Args:
            dotenv: Load the nearest ``.env`` file from the working directory
                upward first (existing variables win).

        Raises:
            InvalidInputError: If a numeric variable is not an integer.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()
        return cls(
            train_file=os.getenv(ENV_PREFIX + "TRAIN_FILE", defaults.train_file),
            test_file=os.getenv(ENV_PREFIX + "TEST_FILE", defaults.test_file),
            label_index=_get_int("LABEL_INDEX", defaults.label_index),
            content_index=_get_int("CONTENT_INDEX", defaults.content_index),
            seed=_get_int("SEED", defaults.seed),
            log_level=os.getenv(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper(),
        )

    def make_rng(self) -> random.Random:
        """Random source for shuffling, seeded when ``seed`` is set."""
        return random.Random(self.seed)
