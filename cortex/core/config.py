"""
Runtime configuration.

Environment variables provide the defaults; the config dataclasses below are
what actually gets threaded into stores, sessions and the runtime. Nothing
outside this module reads the environment.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

# Memory subsystem defaults
EMBED_DIM = int(os.getenv("CORTEX_EMBED_DIM", "4096"))
MAX_ENTRIES = int(os.getenv("CORTEX_MAX_ENTRIES", "100000"))
SIMILARITY_THRESHOLD = float(os.getenv("CORTEX_SIMILARITY_THRESHOLD", "0.7"))
SEARCH_K = int(os.getenv("CORTEX_SEARCH_K", "5"))
MEMORY_PATH = os.getenv("CORTEX_MEMORY_PATH")  # unset = in-memory only

# Embedding provider (hash|sentence-transformers)
EMBED_PROVIDER = os.getenv("CORTEX_EMBED_PROVIDER", "hash")
EMBED_MODEL_NAME = os.getenv("CORTEX_EMBED_MODEL_NAME", "all-MiniLM-L6-v2")

# Checkpoint / state defaults
MAX_CHECKPOINTS = int(os.getenv("CORTEX_MAX_CHECKPOINTS", "100"))
STATE_DIR = os.getenv("CORTEX_STATE_DIR")  # unset = no durability
AUTO_CHECKPOINT_INTERVAL = int(os.getenv("CORTEX_AUTO_CHECKPOINT_INTERVAL", "0"))
SESSIONS_DIR = os.getenv("CORTEX_SESSIONS_DIR", "./data/sessions")

# Generation defaults
MAX_TOKENS = int(os.getenv("CORTEX_MAX_TOKENS", "1024"))
TEMPERATURE = float(os.getenv("CORTEX_TEMPERATURE", "0.7"))

VERSION = "0.3.0"


def _optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None


@dataclass
class MemoryConfig:
    """Configuration for the semantic memory facade."""

    embedding_dim: int = 4096
    max_entries: int = 100_000
    persist_path: Optional[Path] = None
    default_search_k: int = 5
    similarity_threshold: float = 0.7

    @classmethod
    def from_env(cls) -> "MemoryConfig":
        return cls(
            embedding_dim=EMBED_DIM,
            max_entries=MAX_ENTRIES,
            persist_path=_optional_path(MEMORY_PATH),
            default_search_k=SEARCH_K,
            similarity_threshold=SIMILARITY_THRESHOLD,
        )


@dataclass
class StateConfig:
    """Configuration for checkpoint retention and durability."""

    directory: Optional[Path] = None
    max_checkpoints: int = 100
    auto_checkpoint_interval: int = 0  # in messages, 0 = disabled

    @classmethod
    def from_env(cls) -> "StateConfig":
        return cls(
            directory=_optional_path(STATE_DIR),
            max_checkpoints=MAX_CHECKPOINTS,
            auto_checkpoint_interval=AUTO_CHECKPOINT_INTERVAL,
        )


@dataclass
class GenerationConfig:
    """Sampling parameters handed to the text engine."""

    max_tokens: int = 1024
    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40
    repeat_penalty: float = 1.1
    stop: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "GenerationConfig":
        return cls(max_tokens=MAX_TOKENS, temperature=TEMPERATURE)

    @classmethod
    def deterministic(cls) -> "GenerationConfig":
        return cls(temperature=0.0, top_p=1.0, top_k=1)

    @classmethod
    def creative(cls) -> "GenerationConfig":
        return cls(temperature=1.0, top_p=0.95, top_k=0)

    def with_max_tokens(self, n: int) -> "GenerationConfig":
        return replace(self, max_tokens=n)

    def with_temperature(self, t: float) -> "GenerationConfig":
        return replace(self, temperature=t)

    def with_stop(self, stop: List[str]) -> "GenerationConfig":
        return replace(self, stop=list(stop))


@dataclass
class CortexConfig:
    """Top-level runtime configuration."""

    memory: MemoryConfig = field(default_factory=MemoryConfig)
    state: StateConfig = field(default_factory=StateConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    embed_provider: str = "hash"
    embed_model_name: str = "all-MiniLM-L6-v2"

    @classmethod
    def from_env(cls) -> "CortexConfig":
        return cls(
            memory=MemoryConfig.from_env(),
            state=StateConfig.from_env(),
            generation=GenerationConfig.from_env(),
            embed_provider=EMBED_PROVIDER,
            embed_model_name=EMBED_MODEL_NAME,
        )

    def with_state_dir(self, path) -> "CortexConfig":
        return replace(self, state=replace(self.state, directory=Path(path)))

    def with_memory_persistence(self, path) -> "CortexConfig":
        return replace(self, memory=replace(self.memory, persist_path=Path(path)))


def get_embedding_provider(config: CortexConfig):
    """Get configured embedding provider implementation."""
    if config.embed_provider == "sentence-transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(config.embed_model_name)

    from ..vector.embeddings import DeterministicHashEmbedding
    return DeterministicHashEmbedding(dimension=config.memory.embedding_dim)


def validate_config(config: CortexConfig) -> List[str]:
    """Validate configuration and return any issues."""
    issues = []

    if config.memory.embedding_dim < 1:
        issues.append("embedding_dim must be >= 1")

    if config.memory.max_entries < 1:
        issues.append("max_entries must be >= 1")

    if not -1.0 <= config.memory.similarity_threshold <= 1.0:
        issues.append(f"similarity_threshold out of range: {config.memory.similarity_threshold}")

    if config.memory.default_search_k < 0:
        issues.append("default_search_k must be >= 0")

    if config.state.max_checkpoints < 0:
        issues.append("max_checkpoints must be >= 0")

    if config.embed_provider not in ["hash", "sentence-transformers"]:
        issues.append(f"Invalid embed_provider: {config.embed_provider}")

    return issues
