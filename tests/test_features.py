"""Tests for word-frequency feature vectors."""

from __future__ import annotations

import pytest

from spam_tree.exceptions import InvalidInputError
from spam_tree.features import FeatureVector, tokenize


class TestTokenize:
    def test_splits_on_any_whitespace(self) -> None:
        assert tokenize("buy  now\tfree\nprize") == ["buy", "now", "free", "prize"]

    def test_keeps_case_and_punctuation(self) -> None:
        assert tokenize("Free! free") == ["Free!", "free"]

    def test_empty(self) -> None:
        assert tokenize("   ") == []


class TestFeatureVector:
    def test_frequency_is_count_over_total(self) -> None:
        vec = FeatureVector("buy now buy")
        assert vec.total_tokens == 3
        assert vec.frequency("buy") == pytest.approx(2 / 3)
        assert vec.frequency("now") == pytest.approx(1 / 3)

    def test_unknown_word_has_zero_frequency(self) -> None:
        vec = FeatureVector("hello friend")
        assert vec.frequency("prize") == 0.0
        assert not vec.has_feature("prize")

    def test_empty_text(self) -> None:
        vec = FeatureVector("")
        assert vec.total_tokens == 0
        assert vec.features() == frozenset()
        assert vec.frequency("anything") == 0.0
        assert len(vec) == 0

    def test_none_content_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            FeatureVector(None)  # type: ignore[arg-type]

    def test_features_are_distinct_words(self) -> None:
        vec = FeatureVector("a b a c")
        assert vec.features() == {"a", "b", "c"}
        assert "a" in vec
        assert vec.has_feature("c")
        assert len(vec) == 3

    def test_counts_view_is_read_only(self) -> None:
        vec = FeatureVector("a a b")
        assert vec.counts == {"a": 2, "b": 1}
        with pytest.raises(TypeError):
            vec.counts["a"] = 5  # type: ignore[index]

    def test_frequencies_sum_to_one(self) -> None:
        vec = FeatureVector("the cat sat on the mat")
        assert sum(vec.frequency(w) for w in vec.features()) == pytest.approx(1.0)


class TestMostDifferentFeature:
    def test_picks_largest_absolute_difference(self) -> None:
        spam = FeatureVector("free free free prize")
        ham = FeatureVector("free lunch")
        # free: |0.75 - 0.5| = 0.25, prize: 0.25, lunch: 0.5
        assert spam.most_different_feature(ham) == "lunch"

    def test_symmetric_for_clear_winner(self) -> None:
        a = FeatureVector("win win win cash")
        b = FeatureVector("lunch")
        assert a.most_different_feature(b) == b.most_different_feature(a) == "lunch"

    def test_ties_resolve_to_smallest_word(self) -> None:
        spam = FeatureVector("buy now")
        ham = FeatureVector("hello friend")
        assert spam.most_different_feature(ham) == "buy"
        assert ham.most_different_feature(spam) == "buy"

    def test_identical_vectors_have_no_difference(self) -> None:
        a = FeatureVector("same words here")
        b = FeatureVector("here words same")
        assert a.most_different_feature(b) is None

    def test_both_empty(self) -> None:
        assert FeatureVector("").most_different_feature(FeatureVector("")) is None

    def test_against_empty_vector(self) -> None:
        vec = FeatureVector("spam spam eggs")
        assert vec.most_different_feature(FeatureVector("")) == "spam"
