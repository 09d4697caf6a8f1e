"""
cortex: memory and state primitives for AI agent runtimes.

Vector memory with similarity search, plus checkpoint/restore/branch of the
full working state (conversation, memory, engine state).
"""

from .core.config import CortexConfig, GenerationConfig, MemoryConfig, StateConfig, VERSION
from .core.errors import (
    BranchConsumedError,
    CortexError,
    DimensionMismatchError,
    IncompatibleEngineStateError,
    InvalidCheckpointError,
    SerializationError,
    StorageError,
)
from .core.messages import Message, Role
from .engine import EngineState, ITextEngine, StubEngine
from .vector import MemoryEntry, MemorySnapshot, SearchResult, SemanticMemory, VectorMemory
from .state import Branch, Checkpoint, CheckpointManager, RuntimeStateRecord, StateStore
from .runtime import CortexRuntime
from .session import Session, delete_session, list_sessions

__version__ = VERSION

__all__ = [
    'CortexConfig',
    'GenerationConfig',
    'MemoryConfig',
    'StateConfig',
    'BranchConsumedError',
    'CortexError',
    'DimensionMismatchError',
    'IncompatibleEngineStateError',
    'InvalidCheckpointError',
    'SerializationError',
    'StorageError',
    'Message',
    'Role',
    'EngineState',
    'ITextEngine',
    'StubEngine',
    'MemoryEntry',
    'MemorySnapshot',
    'SearchResult',
    'SemanticMemory',
    'VectorMemory',
    'Branch',
    'Checkpoint',
    'CheckpointManager',
    'RuntimeStateRecord',
    'StateStore',
    'CortexRuntime',
    'Session',
    'delete_session',
    'list_sessions',
]
