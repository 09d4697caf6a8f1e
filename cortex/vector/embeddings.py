"""
Embedding providers.

The memory core never computes embeddings itself; it accepts whatever an
IEmbeddingProvider (or a text engine) hands it and only checks the length.
"""

import re
from abc import ABC, abstractmethod
from typing import List

import numpy as np

_WORD_SPLIT = re.compile(r"[^0-9a-z]+")
_MASK64 = (1 << 64) - 1


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


def _word_hash(word: str) -> int:
    h = 0
    for b in word.encode("utf-8"):
        h = (h * 31 + b) & _MASK64
    return h


def bag_of_words_embedding(text: str, dimension: int) -> np.ndarray:
    """Hash each word into 8 positions of a unit-length vector.

    Texts sharing words get similar vectors, which is enough to exercise
    similarity search without a model.
    """
    vector = np.zeros(dimension, dtype=np.float32)

    words = [w for w in _WORD_SPLIT.split(text.lower()) if len(w) > 1]
    for word in words:
        h = _word_hash(word)
        for i in range(8):
            pos = ((h + i * 7919) & _MASK64) % dimension
            vector[pos] += 1.0

    norm = np.linalg.norm(vector)
    if norm > 0:
        vector /= norm
    return vector


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Reproducible across runs and processes, with no model dependency.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        return bag_of_words_embedding(text, self.dimension).tolist()

    def get_dimension(self) -> int:
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    The model is loaded on first use.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", normalize: bool = True):
        self.model_name = model_name
        self.normalize = normalize
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as exc:
                raise ImportError(
                    "sentence-transformers not installed. Install the 'embeddings' extra."
                ) from exc
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(
            text, convert_to_tensor=False, normalize_embeddings=self.normalize
        )
        return embedding.tolist()

    def get_dimension(self) -> int:
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension
