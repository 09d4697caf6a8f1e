"""
Vector memory: capacity-bounded store, similarity search and the semantic facade.
"""

from .index import IVectorStore, VectorMemory, cosine_similarity, normalize
from .types import MemoryEntry, MemorySnapshot, SearchResult
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding
from .semantic_memory import SemanticMemory

__all__ = [
    'IVectorStore',
    'VectorMemory',
    'cosine_similarity',
    'normalize',
    'MemoryEntry',
    'MemorySnapshot',
    'SearchResult',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'SemanticMemory',
]
