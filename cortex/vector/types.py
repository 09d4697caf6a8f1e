"""
Value types for the vector memory.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np


def as_embedding(values) -> np.ndarray:
    """Return an owned float32 copy of *values* as a 1-D array."""
    return np.array(values, dtype=np.float32).reshape(-1)


@dataclass(eq=False)
class MemoryEntry:
    """A stored memory with its embedding."""

    key: str
    """Unique key within a store"""

    content: str
    """Text content"""

    embedding: np.ndarray
    """float32 vector, length equal to the store's embedding_dim"""

    metadata: Dict[str, str] = field(default_factory=dict)
    """Caller-supplied string metadata"""

    created_at: float = 0.0
    """Unix timestamp of the write"""

    def copy(self) -> "MemoryEntry":
        return MemoryEntry(
            key=self.key,
            content=self.content,
            embedding=self.embedding.copy(),
            metadata=dict(self.metadata),
            created_at=self.created_at,
        )

    def same_as(self, other: "MemoryEntry") -> bool:
        """Field-wise equality, comparing embeddings element by element."""
        return (
            self.key == other.key
            and self.content == other.content
            and np.array_equal(self.embedding, other.embedding)
            and self.metadata == other.metadata
            and self.created_at == other.created_at
        )


@dataclass(eq=False)
class SearchResult:
    """A similarity search hit. Ephemeral, produced per query."""

    entry: MemoryEntry
    score: float


@dataclass(eq=False)
class MemorySnapshot:
    """Serializable memory state: configuration plus entries in insertion order."""

    embedding_dim: int
    max_entries: int
    entries: List[MemoryEntry] = field(default_factory=list)

    def copy(self) -> "MemorySnapshot":
        return MemorySnapshot(
            embedding_dim=self.embedding_dim,
            max_entries=self.max_entries,
            entries=[e.copy() for e in self.entries],
        )

    def same_as(self, other: "MemorySnapshot") -> bool:
        return (
            self.embedding_dim == other.embedding_dim
            and self.max_entries == other.max_entries
            and len(self.entries) == len(other.entries)
            and all(a.same_as(b) for a, b in zip(self.entries, other.entries))
        )
