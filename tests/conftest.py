"""Shared test fixtures for spam-tree tests."""

from __future__ import annotations

import csv
from pathlib import Path

import pytest

from spam_tree.features import FeatureVector
from spam_tree.tree import DecisionTree

SPAM_TEXTS = [
    "WIN a FREE prize now call now",
    "URGENT you have won cash claim now",
    "free entry text WIN to claim",
    "cheap meds buy now limited offer",
]

HAM_TEXTS = [
    "are we still on for lunch today",
    "ok see you at home later",
    "can you pick up milk on the way",
    "thanks for the notes from class",
]


@pytest.fixture
def corpus_texts() -> tuple[list[str], list[str]]:
    """Raw spam and ham message texts."""
    return list(SPAM_TEXTS), list(HAM_TEXTS)


@pytest.fixture
def training_pairs() -> tuple[list[FeatureVector], list[str]]:
    """Interleaved spam/ham documents with their labels."""
    vectors: list[FeatureVector] = []
    labels: list[str] = []
    for spam, ham in zip(SPAM_TEXTS, HAM_TEXTS):
        vectors.extend([FeatureVector(spam), FeatureVector(ham)])
        labels.extend(["Spam", "Ham"])
    return vectors, labels


@pytest.fixture
def make_csv(tmp_path: Path):
    """Factory writing a Category/Message CSV like the email datasets."""

    def _make(rows: list[tuple[str, str]], name: str = "emails.csv") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["Category", "Message"])
            writer.writerows(rows)
        return path

    return _make


@pytest.fixture
def emails_csv(make_csv) -> Path:
    """Small labelled email CSV file."""
    rows = [("Spam", text) for text in SPAM_TEXTS] + [("Ham", text) for text in HAM_TEXTS]
    return make_csv(rows)


@pytest.fixture
def deep_chain():
    """Single-word documents with alternating labels; each one deepens the tree.

    Returns the trained tree, its vectors and labels. The tree has one
    split per document after the first, all on the left spine.
    """
    n = 1500
    vectors = [FeatureVector(f"w{i:05d}") for i in range(n)]
    labels = ["Spam" if i % 2 == 0 else "Ham" for i in range(n)]
    return DecisionTree.train(vectors, labels), vectors, labels


ENV_VARS = (
    "SPAM_TREE_TRAIN_FILE",
    "SPAM_TREE_TEST_FILE",
    "SPAM_TREE_LABEL_INDEX",
    "SPAM_TREE_CONTENT_INDEX",
    "SPAM_TREE_SEED",
    "SPAM_TREE_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Unset every SPAM_TREE_* variable and run from an empty directory.

    Variables are set then deleted so that anything a ``.env`` file loads
    during the test is removed again afterwards.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
