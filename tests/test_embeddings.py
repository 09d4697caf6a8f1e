"""
Tests for embedding providers: deterministic hash embeddings and the
lazily-loaded sentence-transformers provider.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from cortex.vector.embeddings import (
    DeterministicHashEmbedding,
    IEmbeddingProvider,
    SentenceTransformerEmbedding,
    bag_of_words_embedding,
)
from cortex.vector.index import cosine_similarity


def test_embedding_interface():
    """Test that the embedding provider implements the interface correctly."""
    embedder = DeterministicHashEmbedding(dimension=384)

    assert isinstance(embedder, IEmbeddingProvider)
    assert embedder.get_dimension() == 384


def test_deterministic_embedding():
    """Test that the same input always produces the same output."""
    embedder = DeterministicHashEmbedding(dimension=384)

    vector1 = embedder.embed_text("Hello, world!")
    vector2 = DeterministicHashEmbedding(dimension=384).embed_text("Hello, world!")

    assert vector1 == vector2
    assert len(vector1) == 384


def test_embedding_is_unit_length():
    vector = bag_of_words_embedding("The sky is blue today", 256)
    assert np.linalg.norm(vector) == pytest.approx(1.0, abs=1e-6)


def test_empty_and_single_char_text_is_zero_vector():
    """Words of one character are skipped, so nothing is hashed."""
    assert not bag_of_words_embedding("", 64).any()
    assert not bag_of_words_embedding("a b c ! ?", 64).any()


def test_case_and_punctuation_insensitive():
    a = bag_of_words_embedding("Sky, BLUE!", 128)
    b = bag_of_words_embedding("sky blue", 128)
    assert np.array_equal(a, b)


def test_shared_words_score_higher():
    """Texts sharing words are closer than unrelated texts."""
    dim = 1024
    base = bag_of_words_embedding("the sky is blue", dim)
    related = bag_of_words_embedding("what color is the sky", dim)
    unrelated = bag_of_words_embedding("pasta recipes from naples", dim)

    assert cosine_similarity(base, related) > cosine_similarity(base, unrelated)


def test_embedding_with_different_dimensions():
    """Test embedding with different dimension sizes."""
    assert len(DeterministicHashEmbedding(dimension=64).embed_text("test")) == 64
    assert len(DeterministicHashEmbedding(dimension=512).embed_text("test")) == 512


class TestSentenceTransformerEmbedding:
    def test_model_not_loaded_on_construction(self):
        provider = SentenceTransformerEmbedding("some-model")
        assert provider._model is None
        assert provider.model_name == "some-model"

    def test_embed_text_uses_model(self):
        provider = SentenceTransformerEmbedding(normalize=False)
        fake_model = MagicMock()
        fake_model.encode.return_value = np.array([0.1, 0.2, 0.3])
        fake_model.get_sentence_embedding_dimension.return_value = 3
        provider._model = fake_model

        assert provider.embed_text("hello") == pytest.approx([0.1, 0.2, 0.3])
        fake_model.encode.assert_called_once_with(
            "hello", convert_to_tensor=False, normalize_embeddings=False
        )
        assert provider.get_dimension() == 3

    def test_missing_package_raises_import_error(self):
        provider = SentenceTransformerEmbedding()
        with patch.dict("sys.modules", {"sentence_transformers": None}):
            with pytest.raises(ImportError, match="embeddings"):
                provider.embed_text("hello")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
