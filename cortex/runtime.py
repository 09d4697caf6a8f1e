"""
Core runtime: memory and checkpoint primitives around a pluggable text engine.

Usage:
    rt = CortexRuntime()
    rt.remember("user_pref", "likes jazz")
    snap = rt.checkpoint()
    rt.chat([Message.user("Hello")])
    rt.restore(snap)
"""

from typing import Dict, List, Optional, Union

from .core.config import CortexConfig, GenerationConfig, MemoryConfig
from .core.messages import Message
from .engine.base import ITextEngine, StreamCallback
from .engine.stub import StubEngine
from .state.checkpoint import Branch, Checkpoint, CheckpointManager
from .state.record import RuntimeStateRecord
from .state.store import StateStore
from .util.logging import logger
from .vector.semantic_memory import SemanticMemory
from .vector.types import SearchResult


def format_prompt(messages: List[Message]) -> str:
    """Plain newline join of message contents."""
    return "\n".join(m.content for m in messages)


class CortexRuntime:
    """Owns conversation history, semantic memory and the checkpoint stores.

    Every checkpoint is written to the StateStore (authoritative) and then
    recorded in the CheckpointManager (listing index).
    """

    def __init__(self, engine: Optional[ITextEngine] = None, config: Optional[CortexConfig] = None):
        self.config = config or CortexConfig()
        self.engine = engine or StubEngine(embedding_dim=self.config.memory.embedding_dim)
        self.memory = SemanticMemory(self.config.memory)
        self.state_store = StateStore.from_config(self.config.state)
        self.checkpoint_manager = CheckpointManager(self.config.state.max_checkpoints)
        self._messages: List[Message] = []
        self._messages_since_checkpoint = 0

    @classmethod
    def for_engine(cls, engine: ITextEngine, config: Optional[CortexConfig] = None) -> "CortexRuntime":
        """Runtime whose memory dimension follows the engine's embedding size."""
        config = config or CortexConfig()
        memory = MemoryConfig(
            embedding_dim=engine.embedding_dim(),
            max_entries=config.memory.max_entries,
            persist_path=config.memory.persist_path,
            default_search_k=config.memory.default_search_k,
            similarity_threshold=config.memory.similarity_threshold,
        )
        return cls(engine, CortexConfig(
            memory=memory,
            state=config.state,
            generation=config.generation,
            embed_provider=config.embed_provider,
            embed_model_name=config.embed_model_name,
        ))

    # ==================== Conversation ====================

    def messages(self) -> List[Message]:
        return list(self._messages)

    def add_messages(self, messages: List[Message]) -> None:
        self._messages.extend(messages)
        self._note_messages(len(messages))

    def clear_messages(self) -> None:
        self._messages.clear()
        self.engine.clear()

    def chat(self, messages: List[Message], config: Optional[GenerationConfig] = None) -> str:
        """Append *messages*, generate a reply and append it to the history."""
        self._messages.extend(messages)
        response = self.engine.generate(format_prompt(self._messages), config or self.config.generation)
        self._messages.append(Message.assistant(response))
        self._note_messages(len(messages) + 1)
        return response

    def chat_streaming(self, messages: List[Message], callback: StreamCallback,
                       config: Optional[GenerationConfig] = None) -> str:
        self._messages.extend(messages)
        response = self.engine.generate_streaming(
            format_prompt(self._messages), config or self.config.generation, callback
        )
        self._messages.append(Message.assistant(response))
        self._note_messages(len(messages) + 1)
        return response

    def _note_messages(self, count: int) -> None:
        interval = self.config.state.auto_checkpoint_interval
        if interval <= 0:
            return
        self._messages_since_checkpoint += count
        if self._messages_since_checkpoint >= interval:
            self.checkpoint(name="auto")

    # ==================== Memory ====================

    def remember(self, key: str, content: str, metadata: Optional[Dict[str, str]] = None) -> None:
        """Embed *content* with the engine and write it to memory."""
        embedding = self.engine.embed(content)
        self.memory.write_with_metadata(key, content, embedding, metadata)

    def recall(self, query: str, k: Optional[int] = None) -> List[str]:
        """Contents of memories similar to *query*, above the configured threshold."""
        return [r.entry.content for r in self.memory.search(self.engine.embed(query), k)]

    def recall_results(self, query: str, k: Optional[int] = None,
                       threshold: Optional[float] = None) -> List[SearchResult]:
        query_embedding = self.engine.embed(query)
        if threshold is None:
            return self.memory.search(query_embedding, k)
        return self.memory.search_with_threshold(query_embedding, k, threshold)

    # ==================== State ====================

    def snapshot(self, name: Optional[str] = None) -> RuntimeStateRecord:
        """Build a record of the current state without storing it."""
        record = RuntimeStateRecord.new(
            self._messages,
            self.memory.get_state(),
            self.engine.get_state(),
        )
        return record.with_name(name) if name is not None else record

    def checkpoint(self, name: Optional[str] = None) -> Checkpoint:
        record = self.snapshot(name)
        checkpoint = Checkpoint.from_state(record)
        self.state_store.save(record)
        self.checkpoint_manager.record(checkpoint)
        self._messages_since_checkpoint = 0
        return checkpoint

    def restore(self, checkpoint: Union[Checkpoint, str]) -> None:
        """Restore messages, memory and engine state from a checkpoint or its id."""
        checkpoint_id = checkpoint.id if isinstance(checkpoint, Checkpoint) else checkpoint
        self.apply_state(self.state_store.load(checkpoint_id))
        logger.log_checkpoint_operation("restore", checkpoint_id)

    def apply_state(self, state: RuntimeStateRecord) -> None:
        # Engine first: an incompatible blob must not leave a half-restored runtime
        self.engine.set_state(state.engine_state)
        self._messages = list(state.messages)
        self.memory.set_state(state.memory)

    def branch(self) -> Branch:
        """Checkpoint the current state and fork an independent copy of it."""
        checkpoint = self.checkpoint()
        branch = Branch(checkpoint.id, self.state_store.load(checkpoint.id))
        logger.log_checkpoint_operation("branch", checkpoint.id, {"branch_id": branch.id})
        return branch

    def adopt_branch(self, branch: Branch) -> None:
        """Make the branch's state current. Consumes the branch."""
        self.apply_state(branch.into_state())

    def latest_checkpoint(self) -> Optional[Checkpoint]:
        return self.checkpoint_manager.latest()

    def checkpoints(self) -> List[Checkpoint]:
        return self.checkpoint_manager.list()

    def delete_checkpoint(self, checkpoint_id: str) -> bool:
        removed = self.state_store.delete(checkpoint_id)
        self.checkpoint_manager.remove(checkpoint_id)
        return removed

    # ==================== Info ====================

    def context_size(self) -> int:
        return self.engine.context_size()

    def context_used(self) -> int:
        return self.engine.context_used()

    def embedding_dim(self) -> int:
        return self.memory.embedding_dim
