"""
Semantic memory facade.

Wraps a VectorMemory with dimension validation, timestamps, a similarity
threshold filter and whole-file persistence.
"""

import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.codec import BinaryReader, BinaryWriter, atomic_write_bytes, read_bytes
from ..core.config import MemoryConfig
from ..core.errors import DimensionMismatchError, SerializationError
from ..util.logging import logger
from .index import VectorMemory
from .types import MemoryEntry, MemorySnapshot, SearchResult, as_embedding

MEMORY_MAGIC = b"CXMS"


def write_snapshot_body(writer: BinaryWriter, snapshot: MemorySnapshot) -> None:
    writer.u64(snapshot.embedding_dim)
    writer.u64(snapshot.max_entries)
    writer.u32(len(snapshot.entries))
    for entry in snapshot.entries:
        writer.string(entry.key)
        writer.string(entry.content)
        writer.vector(entry.embedding)
        writer.string_map(entry.metadata)
        writer.f64(entry.created_at)


def read_snapshot_body(reader: BinaryReader) -> MemorySnapshot:
    """Decode a snapshot body, rejecting entries a store could not hold."""
    embedding_dim = reader.u64()
    max_entries = reader.u64()
    count = reader.u32()
    entries = []
    seen = set()
    for _ in range(count):
        entry = MemoryEntry(
            key=reader.string(),
            content=reader.string(),
            embedding=reader.vector(),
            metadata=reader.string_map(),
            created_at=reader.f64(),
        )
        if entry.embedding.size != embedding_dim:
            raise SerializationError(
                f"Entry '{entry.key}' has {entry.embedding.size} dimensions, expected {embedding_dim}"
            )
        if entry.key in seen:
            raise SerializationError(f"Duplicate memory key '{entry.key}'")
        seen.add(entry.key)
        entries.append(entry)
    return MemorySnapshot(embedding_dim=embedding_dim, max_entries=max_entries, entries=entries)


def encode_snapshot(snapshot: MemorySnapshot) -> bytes:
    writer = BinaryWriter().header(MEMORY_MAGIC)
    write_snapshot_body(writer, snapshot)
    return writer.getvalue()


def decode_snapshot(data: bytes) -> MemorySnapshot:
    reader = BinaryReader(data)
    reader.header(MEMORY_MAGIC)
    snapshot = read_snapshot_body(reader)
    reader.finish()
    return snapshot


class SemanticMemory:
    """High-level memory interface used by the runtime.

    At most one entry per key: a write removes any prior entry at the same key
    before inserting.
    """

    def __init__(self, config: Optional[MemoryConfig] = None):
        self.config = config or MemoryConfig()
        self._store = VectorMemory(self.config.embedding_dim, self.config.max_entries)

    @classmethod
    def load(cls, path: Union[str, Path], config: Optional[MemoryConfig] = None) -> "SemanticMemory":
        """Rebuild memory from a file written by persist(), preserving entry order."""
        path = Path(path)
        try:
            snapshot = decode_snapshot(read_bytes(path))
        except SerializationError as exc:
            logger.log_persistence("memory.load", path, {"error": str(exc)}, status="failed")
            raise

        base = config or MemoryConfig()
        memory = cls(replace(
            base,
            embedding_dim=snapshot.embedding_dim,
            max_entries=snapshot.max_entries,
            persist_path=path,
        ))
        memory._fill(snapshot)
        logger.log_persistence("memory.load", path, {"entries": len(memory)})
        return memory

    # -- configuration ---------------------------------------------------

    @property
    def embedding_dim(self) -> int:
        return self.config.embedding_dim

    @property
    def max_entries(self) -> int:
        return self.config.max_entries

    @property
    def similarity_threshold(self) -> float:
        return self.config.similarity_threshold

    # -- writes ----------------------------------------------------------

    def write(self, key: str, content: str, embedding) -> None:
        """Write to memory. If the key exists, it is replaced."""
        self.write_with_metadata(key, content, embedding, {})

    def write_with_metadata(self, key: str, content: str, embedding,
                            metadata: Optional[Dict[str, str]] = None) -> None:
        vector = as_embedding(embedding)
        if vector.size != self.config.embedding_dim:
            logger.log_memory_operation("write", key, details={
                "expected_dim": self.config.embedding_dim,
                "actual_dim": int(vector.size),
            }, status="rejected")
            raise DimensionMismatchError(self.config.embedding_dim, int(vector.size))

        entry = MemoryEntry(
            key=key,
            content=content,
            embedding=vector,
            metadata={str(k): str(v) for k, v in (metadata or {}).items()},
            created_at=time.time(),
        )

        self._store.remove(key)
        evicted = self._store.insert(entry)
        if evicted is not None:
            logger.log_eviction("memory", evicted, self.config.max_entries)
        logger.log_memory_operation("write", key, content)

    def delete(self, key: str) -> bool:
        removed = self._store.remove(key)
        if removed:
            logger.log_memory_operation("delete", key)
        return removed

    def clear(self) -> None:
        self._store.clear()

    # -- reads -----------------------------------------------------------

    def read(self, key: str) -> Optional[MemoryEntry]:
        """Copy of the entry at *key*, or None."""
        entry = self._store.get(key)
        return entry.copy() if entry is not None else None

    def search(self, query_embedding, k: Optional[int] = None) -> List[SearchResult]:
        """Search by similarity, dropping hits below the configured threshold."""
        return self.search_with_threshold(query_embedding, k, self.config.similarity_threshold)

    def search_with_threshold(self, query_embedding, k: Optional[int],
                              threshold: float) -> List[SearchResult]:
        """Search by similarity with a per-call threshold."""
        if k is None:
            k = self.config.default_search_k
        results = [r for r in self._store.search(query_embedding, k) if r.score >= threshold]
        logger.log_memory_operation("search", "*", details={
            "k": k,
            "threshold": threshold,
            "hits": len(results),
        })
        return results

    def entries(self) -> List[MemoryEntry]:
        """Copies of all entries in insertion order."""
        return [e.copy() for e in self._store.entries()]

    def keys(self) -> List[str]:
        return self._store.keys()

    def is_empty(self) -> bool:
        return self._store.is_empty()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    # -- persistence -----------------------------------------------------

    def persist(self, path: Union[str, Path]) -> None:
        """Atomically write the full store to *path*."""
        atomic_write_bytes(path, encode_snapshot(self.get_state()))
        logger.log_persistence("memory.persist", path, {"entries": len(self)})

    def save(self) -> bool:
        """Persist to the configured persist_path. Returns False if none is set."""
        if self.config.persist_path is None:
            return False
        self.persist(self.config.persist_path)
        return True

    def get_state(self) -> MemorySnapshot:
        """Snapshot of configuration and entries, detached from this store."""
        return MemorySnapshot(
            embedding_dim=self.config.embedding_dim,
            max_entries=self.config.max_entries,
            entries=self.entries(),
        )

    def set_state(self, snapshot: MemorySnapshot) -> None:
        """Replace the store with a fresh one built from *snapshot*."""
        self.config = replace(
            self.config,
            embedding_dim=snapshot.embedding_dim,
            max_entries=snapshot.max_entries,
        )
        self._fill(snapshot)

    def _fill(self, snapshot: MemorySnapshot) -> None:
        self._store = VectorMemory(snapshot.embedding_dim, snapshot.max_entries)
        for entry in snapshot.entries:
            self._store.insert(entry.copy())
