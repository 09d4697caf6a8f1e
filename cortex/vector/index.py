"""
Capacity-bounded in-memory vector store with cosine similarity search.

Linear scan over all entries; sized for the common case of a few thousand
memories per session.
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import numpy as np

from .types import MemoryEntry, SearchResult


def normalize(vector) -> np.ndarray:
    """Return *vector* scaled to unit length. A zero vector is returned unchanged."""
    v = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm == 0:
        return v.copy()
    return v / norm


def cosine_similarity(a, b) -> float:
    """Cosine similarity of two vectors.

    Vectors of different lengths and zero-norm operands score 0.0.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        return 0.0

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def _rank_key(score: float) -> float:
    # NaN sorts after every real score
    return -score if not math.isnan(score) else math.inf


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def insert(self, entry: MemoryEntry) -> Optional[str]:
        """Insert an entry, evicting the oldest one when full."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[MemoryEntry]:
        """Exact lookup by key."""
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Remove an entry by key. Returns whether anything was removed."""
        pass

    @abstractmethod
    def search(self, query_vector, k: int = 5) -> List[SearchResult]:
        """Search for similar vectors and return ranked results."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass


class VectorMemory(IVectorStore):
    """Key -> MemoryEntry mapping plus insertion-order key sequence.

    Eviction is by insertion order, not access recency. insert() is a blind
    append: callers must remove an existing key before re-inserting it.
    """

    def __init__(self, dimension: int, max_entries: int):
        self.dimension = dimension
        self.max_entries = max_entries
        self._entries: Dict[str, MemoryEntry] = {}
        self._keys: List[str] = []

    def insert(self, entry: MemoryEntry) -> Optional[str]:
        """Insert *entry*; returns the key evicted to make room, if any."""
        evicted = None
        if len(self._entries) >= self.max_entries and self._keys:
            evicted = self._keys[0]
            self.remove(evicted)

        self._entries[entry.key] = entry
        self._keys.append(entry.key)
        return evicted

    def get(self, key: str) -> Optional[MemoryEntry]:
        return self._entries.get(key)

    def remove(self, key: str) -> bool:
        if key not in self._entries:
            return False
        del self._entries[key]
        self._keys = [k for k in self._keys if k != key]
        return True

    def search(self, query_vector, k: int = 5) -> List[SearchResult]:
        """Top-*k* entries by cosine similarity to *query_vector*.

        The query is normalized; stored embeddings are used as-is. Ties keep
        insertion order.
        """
        if not self._entries or k <= 0:
            return []

        query = normalize(query_vector)

        scored = []
        for key in self._keys:
            entry = self._entries[key]
            scored.append((entry, cosine_similarity(query, entry.embedding)))

        # sorted() is stable, so equal scores stay in insertion order
        scored.sort(key=lambda item: _rank_key(item[1]))

        return [SearchResult(entry=entry.copy(), score=score) for entry, score in scored[:k]]

    def entries(self) -> List[MemoryEntry]:
        """All entries in insertion order."""
        return [self._entries[k] for k in self._keys]

    def keys(self) -> List[str]:
        return list(self._keys)

    def clear(self) -> None:
        self._entries.clear()
        self._keys.clear()

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
