"""
Shared fixtures for memory and state tests.
"""

import numpy as np
import pytest

from cortex.core.config import CortexConfig, MemoryConfig, StateConfig
from cortex.core.messages import Message
from cortex.engine.state import EngineState
from cortex.state.record import RuntimeStateRecord
from cortex.vector.types import MemoryEntry, MemorySnapshot

DIM = 64


def make_embedding(dim: int, seed: float) -> np.ndarray:
    """sin(i * seed) for i in range(dim); seed 0 gives the zero vector."""
    return np.sin(np.arange(dim, dtype=np.float32) * seed).astype(np.float32)


def unit(dim: int, index: int) -> np.ndarray:
    v = np.zeros(dim, dtype=np.float32)
    v[index] = 1.0
    return v


def make_entry(key: str, embedding) -> MemoryEntry:
    return MemoryEntry(
        key=key,
        content=f"Content for {key}",
        embedding=np.asarray(embedding, dtype=np.float32),
        metadata={},
        created_at=0.0,
    )


def make_record(messages=None, entries=None, engine_state=None) -> RuntimeStateRecord:
    return RuntimeStateRecord.new(
        messages or [],
        MemorySnapshot(embedding_dim=3, max_entries=100, entries=entries or []),
        engine_state or EngineState(),
    )


@pytest.fixture
def memory_config():
    """Small-dimension memory config with the threshold filter disabled."""
    return MemoryConfig(embedding_dim=DIM, max_entries=100, similarity_threshold=0.0)


@pytest.fixture
def runtime_config(memory_config):
    return CortexConfig(memory=memory_config, state=StateConfig(max_checkpoints=10))


@pytest.fixture
def sample_messages():
    return [
        Message.system("You are a helpful assistant."),
        Message.user("Remember that I like jazz."),
        Message.assistant("Noted."),
        Message.tool("{\"ok\": true}", name="memory_write"),
    ]
