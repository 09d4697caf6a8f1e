"""
Tests for the checkpoint inspection script.
"""

import pytest

from cortex.core.config import CortexConfig, MemoryConfig
from cortex.core.messages import Message
from cortex.runtime import CortexRuntime
from scripts.checkpoints import main


@pytest.fixture
def state_dir(tmp_path):
    config = CortexConfig(memory=MemoryConfig(embedding_dim=32)).with_state_dir(tmp_path / "state")
    runtime = CortexRuntime(config=config)
    runtime.remember("fact", "The sky is blue")
    runtime.chat([Message.user("Hello")])
    runtime.checkpoint("first")
    return tmp_path / "state", runtime


def test_list(state_dir, capsys):
    path, runtime = state_dir
    assert main(["list", str(path)]) == 0

    out = capsys.readouterr().out
    assert "Found 1 checkpoint(s)" in out
    assert runtime.latest_checkpoint().id in out
    assert "name=first" in out


def test_list_empty(tmp_path, capsys):
    assert main(["list", str(tmp_path)]) == 0
    assert "No checkpoints" in capsys.readouterr().out


def test_show_verbose(state_dir, capsys):
    path, runtime = state_dir
    checkpoint_id = runtime.latest_checkpoint().id

    assert main(["show", str(path), checkpoint_id, "--verbose"]) == 0
    out = capsys.readouterr().out
    assert "Messages: 2" in out
    assert "[user] Hello" in out
    assert "<fact> The sky is blue" in out


def test_show_missing(tmp_path, capsys):
    assert main(["show", str(tmp_path), "missing"]) == 1
    assert "Checkpoint not found" in capsys.readouterr().out


def test_delete(state_dir, capsys):
    path, runtime = state_dir
    checkpoint_id = runtime.latest_checkpoint().id

    assert main(["delete", str(path), checkpoint_id]) == 0
    assert main(["delete", str(path), checkpoint_id]) == 1
    assert list(path.glob("*.ckpt")) == []


def test_memory(tmp_path, capsys):
    runtime = CortexRuntime(config=CortexConfig(memory=MemoryConfig(embedding_dim=32)))
    runtime.remember("fact", "The sky is blue")
    runtime.memory.persist(tmp_path / "memory.bin")

    assert main(["memory", str(tmp_path / "memory.bin"), "-v"]) == 0
    out = capsys.readouterr().out
    assert "Entries: 1/" in out
    assert "Dimension: 32" in out
    assert "<fact> The sky is blue" in out


def test_memory_bad_file(tmp_path, capsys):
    bad = tmp_path / "bad.bin"
    bad.write_bytes(b"nope")
    assert main(["memory", str(bad)]) == 1
    assert "ERROR" in capsys.readouterr().out
