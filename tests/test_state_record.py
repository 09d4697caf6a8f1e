"""
Tests for RuntimeStateRecord: construction, copying and checkpoint files.
"""

import uuid

import pytest

from cortex.core.errors import SerializationError, StorageError
from cortex.core.messages import Message
from cortex.engine.state import EngineState
from cortex.state.record import CHECKPOINT_MAGIC, RuntimeStateRecord
from cortex.vector.types import MemorySnapshot

from conftest import make_entry, make_record


def test_new_assigns_uuid_and_timestamp(sample_messages):
    record = make_record(sample_messages)
    uuid.UUID(record.id)
    assert record.created_at > 0
    assert record.name is None
    assert record.engine_state.engine_id == "none"
    assert make_record().id != record.id


def test_new_copies_inputs(sample_messages):
    snapshot = MemorySnapshot(embedding_dim=3, max_entries=10, entries=[make_entry("a", [1.0, 0.0, 0.0])])
    record = RuntimeStateRecord.new(sample_messages, snapshot)

    sample_messages.append(Message.user("later"))
    snapshot.entries[0].embedding[0] = 5.0

    assert len(record.messages) == 4
    assert record.memory.entries[0].embedding[0] == 1.0


def test_with_name_keeps_id():
    record = make_record()
    named = record.with_name("before-experiment")

    assert named.id == record.id
    assert named.name == "before-experiment"
    assert record.name is None


def test_copy_is_independent(sample_messages):
    record = make_record(sample_messages, [make_entry("a", [1.0, 0.0, 0.0])])
    clone = record.copy()

    clone.messages.append(Message.user("extra"))
    clone.memory.entries[0].metadata["x"] = "y"
    clone.metadata["k"] = "v"

    assert len(record.messages) == 4
    assert record.memory.entries[0].metadata == {}
    assert record.metadata == {}


def test_bytes_round_trip(sample_messages):
    record = RuntimeStateRecord.new(
        sample_messages,
        MemorySnapshot(embedding_dim=3, max_entries=10, entries=[make_entry("a", [1.0, 0.5, 0.0])]),
        EngineState(data=b"\x01\x02\x03", n_tokens=42, engine_id="stub"),
        metadata={"origin": "test"},
    ).with_name("named")

    data = record.to_bytes()
    assert data[:4] == CHECKPOINT_MAGIC

    restored = RuntimeStateRecord.from_bytes(data)
    assert restored.id == record.id
    assert restored.name == "named"
    assert restored.messages == record.messages
    assert restored.messages[3].name == "memory_write"
    assert restored.memory.same_as(record.memory)
    assert restored.engine_state == record.engine_state
    assert restored.created_at == record.created_at
    assert restored.metadata == {"origin": "test"}


def test_save_and_load(tmp_path, sample_messages):
    record = make_record(sample_messages)
    path = tmp_path / "states" / f"{record.id}.ckpt"

    record.save(path)
    loaded = RuntimeStateRecord.load(path)

    assert loaded.id == record.id
    assert loaded.messages == record.messages


def test_load_missing(tmp_path):
    with pytest.raises(StorageError):
        RuntimeStateRecord.load(tmp_path / "missing.ckpt")


def test_from_bytes_rejects_truncation():
    data = make_record([Message.user("hello")]).to_bytes()
    with pytest.raises(SerializationError):
        RuntimeStateRecord.from_bytes(data[:-5])


def test_from_bytes_rejects_unknown_role():
    data = make_record([Message.user("hello")]).to_bytes()
    tampered = data.replace(b"user", b"boss", 1)
    with pytest.raises(SerializationError, match="Invalid message"):
        RuntimeStateRecord.from_bytes(tampered)


def test_from_bytes_rejects_memory_entry_with_wrong_dimension():
    record = make_record(entries=[make_entry("a", [1.0, 0.0, 0.0, 0.0, 0.0])])
    with pytest.raises(SerializationError, match="dimensions"):
        RuntimeStateRecord.from_bytes(record.to_bytes())


def test_from_bytes_rejects_duplicate_memory_keys():
    entry = make_entry("a", [1.0, 0.0, 0.0])
    record = make_record(entries=[entry, entry.copy()])
    with pytest.raises(SerializationError, match="Duplicate"):
        RuntimeStateRecord.from_bytes(record.to_bytes())
