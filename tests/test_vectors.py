"""
Unit tests for the fallback vectorizer, tokenizer and prefix cosine similarity.
"""

import math
import pytest

from file_search.domain.vectors import (
    FALLBACK_VECTOR_SIZE,
    cosine_similarity,
    fallback_vector,
    stable_bucket,
    terms,
)


class TestTerms:
    """Test tokenization."""

    def test_lowercases_and_splits_on_non_alphanumerics(self):
        """Test tokens are lowercased and split on punctuation."""
        assert terms("Q1 Report_final.PDF") == ["q1", "report", "final", "pdf"]

    def test_drops_single_character_tokens(self):
        """Test single-character tokens are dropped."""
        assert terms("a b cd e fg") == ["cd", "fg"]

    def test_keeps_unicode_letters(self):
        """Test non-ASCII letters are kept."""
        assert terms("Résumé 2024") == ["résumé", "2024"]

    def test_empty_input(self):
        """Test empty input yields no tokens."""
        assert terms("") == []
        assert terms(None) == []


class TestStableBucket:
    """Test the djb2 bucket hash."""

    def test_same_token_same_bucket(self):
        """Test buckets are deterministic."""
        assert stable_bucket("invoice") == stable_bucket("invoice")

    def test_bucket_in_range(self):
        """Test buckets fall within the modulo."""
        for token in ("a", "invoice", "résumé", "x" * 500):
            assert 0 <= stable_bucket(token) < FALLBACK_VECTOR_SIZE

    def test_matches_djb2_for_short_token(self):
        """Test the hash matches djb2 by hand."""
        # djb2("ab") = (5381 * 33 + 97) * 33 + 98, no overflow at this length
        expected = ((5381 * 33 + 97) * 33 + 98) % 512
        assert stable_bucket("ab") == expected


class TestFallbackVector:
    """Test the hashed fallback vector."""

    def test_deterministic(self):
        """Test the same text gives the same vector."""
        text = "Revenue grew 10% in the first quarter; revenue targets were met."
        assert fallback_vector(text) == fallback_vector(text)

    def test_fixed_length(self):
        """Test vectors have 512 entries."""
        assert len(fallback_vector("hello world")) == FALLBACK_VECTOR_SIZE

    def test_l2_normalized(self):
        """Test vectors have unit length."""
        vec = fallback_vector("alpha beta gamma alpha")
        assert math.isclose(math.sqrt(sum(v * v for v in vec)), 1.0, rel_tol=1e-9)

    def test_non_negative(self):
        """Test entries are never negative."""
        assert min(fallback_vector("one two three two one")) >= 0.0

    def test_zero_vector_for_text_without_terms(self):
        """Test text without terms gives a zero vector."""
        vec = fallback_vector("a . ! ?")
        assert len(vec) == FALLBACK_VECTOR_SIZE
        assert all(v == 0.0 for v in vec)

    def test_repeated_terms_weigh_more(self):
        """Test repeated terms weigh more."""
        vec = fallback_vector("budget budget plan")
        b, p = stable_bucket("budget"), stable_bucket("plan")
        assert b != p
        assert vec[b] == pytest.approx(2 * vec[p])

    def test_word_order_does_not_matter(self):
        """Test word order does not change the vector."""
        assert fallback_vector("red green blue") == fallback_vector("blue red green")


class TestCosineSimilarity:
    """Test cosine similarity."""

    def test_identical_vectors(self):
        """Test identical vectors score 1."""
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        """Test orthogonal vectors score 0."""
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_uses_overlapping_prefix_only(self):
        """Test only the shared prefix is compared."""
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 5.0, 7.0]) == pytest.approx(1.0)

    def test_zero_norm_is_zero(self):
        """Test zero-norm input scores 0."""
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_empty_or_missing(self):
        """Test empty or None input scores 0."""
        assert cosine_similarity([], [1.0]) == 0.0
        assert cosine_similarity(None, [1.0]) == 0.0
