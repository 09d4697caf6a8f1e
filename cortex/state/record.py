"""
Complete runtime state captured by a checkpoint.
"""

import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.codec import BinaryReader, BinaryWriter, atomic_write_bytes, read_bytes
from ..core.errors import SerializationError
from ..core.messages import Message, Role
from ..engine.state import EngineState
from ..vector.semantic_memory import read_snapshot_body, write_snapshot_body
from ..vector.types import MemorySnapshot

CHECKPOINT_MAGIC = b"CXCK"
CHECKPOINT_EXTENSION = ".ckpt"


@dataclass(eq=False)
class RuntimeStateRecord:
    """Snapshot of conversation, memory and engine state.

    ``id`` is assigned once by new() and never changes. Stores copy records
    in and out, so a stored record is never aliased by a caller.
    """

    id: str
    messages: List[Message]
    memory: MemorySnapshot
    engine_state: EngineState
    created_at: float
    name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def new(cls, messages: List[Message], memory: MemorySnapshot,
            engine_state: Optional[EngineState] = None,
            metadata: Optional[Dict[str, str]] = None) -> "RuntimeStateRecord":
        return cls(
            id=str(uuid.uuid4()),
            messages=list(messages),
            memory=memory.copy(),
            engine_state=engine_state or EngineState(),
            created_at=time.time(),
            metadata=dict(metadata or {}),
        )

    def with_name(self, name: str) -> "RuntimeStateRecord":
        record = self.copy()
        record.name = name
        return record

    def copy(self) -> "RuntimeStateRecord":
        # Messages and EngineState are immutable, so copying the containers suffices
        return RuntimeStateRecord(
            id=self.id,
            messages=list(self.messages),
            memory=self.memory.copy(),
            engine_state=self.engine_state,
            created_at=self.created_at,
            name=self.name,
            metadata=dict(self.metadata),
        )

    # -- file format -----------------------------------------------------

    def to_bytes(self) -> bytes:
        writer = BinaryWriter().header(CHECKPOINT_MAGIC)
        writer.string(self.id)
        writer.optional_string(self.name)

        writer.u32(len(self.messages))
        for message in self.messages:
            writer.string(message.role.value)
            writer.string(message.content)
            writer.optional_string(message.name)

        write_snapshot_body(writer, self.memory)

        writer.blob(self.engine_state.data)
        writer.u64(self.engine_state.n_tokens)
        writer.string(self.engine_state.engine_id)

        writer.f64(self.created_at)
        writer.string_map(self.metadata)
        return writer.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "RuntimeStateRecord":
        reader = BinaryReader(data)
        reader.header(CHECKPOINT_MAGIC)
        record_id = reader.string()
        name = reader.optional_string()

        messages = []
        for _ in range(reader.u32()):
            role = reader.string()
            content = reader.string()
            msg_name = reader.optional_string()
            try:
                messages.append(Message(role=Role(role), content=content, name=msg_name))
            except ValueError as exc:
                raise SerializationError(f"Invalid message in checkpoint: {exc}") from exc

        memory = read_snapshot_body(reader)
        engine_state = EngineState(
            data=reader.blob(),
            n_tokens=reader.u64(),
            engine_id=reader.string(),
        )
        created_at = reader.f64()
        metadata = reader.string_map()
        reader.finish()

        return cls(
            id=record_id,
            messages=messages,
            memory=memory,
            engine_state=engine_state,
            created_at=created_at,
            name=name,
            metadata=metadata,
        )

    def save(self, path: Union[str, Path]) -> None:
        atomic_write_bytes(path, self.to_bytes())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "RuntimeStateRecord":
        return cls.from_bytes(read_bytes(path))
