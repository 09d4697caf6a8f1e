"""
Tests for the binary codec and atomic file writes.
"""

import numpy as np
import pytest

from cortex.core.codec import BinaryReader, BinaryWriter, atomic_write_bytes, read_bytes
from cortex.core.errors import SerializationError, StorageError

MAGIC = b"TEST"


def test_fields_round_trip():
    data = (
        BinaryWriter()
        .header(MAGIC)
        .u8(7)
        .u32(123456)
        .u64(2 ** 40)
        .f64(1.5)
        .string("héllo")
        .optional_string(None)
        .optional_string("named")
        .blob(b"\x00\x01\x02")
        .vector([1.0, -2.5, 3.25])
        .string_map({"a": "1", "b": "2"})
        .getvalue()
    )

    reader = BinaryReader(data)
    assert reader.header(MAGIC) == 1
    assert reader.u8() == 7
    assert reader.u32() == 123456
    assert reader.u64() == 2 ** 40
    assert reader.f64() == 1.5
    assert reader.string() == "héllo"
    assert reader.optional_string() is None
    assert reader.optional_string() == "named"
    assert reader.blob() == b"\x00\x01\x02"
    vector = reader.vector()
    assert vector.dtype == np.float32
    assert vector.tolist() == [1.0, -2.5, 3.25]
    assert reader.string_map() == {"a": "1", "b": "2"}
    reader.finish()


def test_wrong_magic():
    data = BinaryWriter().header(b"XXXX").getvalue()
    with pytest.raises(SerializationError, match="magic"):
        BinaryReader(data).header(MAGIC)


def test_unsupported_version():
    data = BinaryWriter().header(MAGIC, version=99).getvalue()
    with pytest.raises(SerializationError, match="version"):
        BinaryReader(data).header(MAGIC)


def test_truncated_string():
    data = BinaryWriter().string("hello world").getvalue()[:-3]
    with pytest.raises(SerializationError):
        BinaryReader(data).string()


def test_truncated_vector():
    data = BinaryWriter().vector([1.0, 2.0, 3.0]).getvalue()[:-1]
    with pytest.raises(SerializationError):
        BinaryReader(data).vector()


def test_trailing_bytes():
    reader = BinaryReader(BinaryWriter().u32(1).getvalue() + b"\x00")
    reader.u32()
    with pytest.raises(SerializationError, match="trailing"):
        reader.finish()


def test_invalid_utf8():
    data = BinaryWriter().u32(2).getvalue() + b"\xff\xfe"
    with pytest.raises(SerializationError, match="UTF-8"):
        BinaryReader(data).string()


def test_invalid_option_flag():
    with pytest.raises(SerializationError, match="option flag"):
        BinaryReader(b"\x05").optional_string()


def test_vector_is_writable_copy():
    reader = BinaryReader(BinaryWriter().vector([1.0, 2.0]).getvalue())
    vector = reader.vector()
    vector[0] = 9.0
    assert vector[0] == 9.0


class TestAtomicWrite:
    def test_write_and_read(self, tmp_path):
        path = tmp_path / "nested" / "file.bin"
        atomic_write_bytes(path, b"payload")

        assert read_bytes(path) == b"payload"
        assert not any(p.suffix == ".tmp" for p in path.parent.iterdir())

    def test_overwrite_replaces_content(self, tmp_path):
        path = tmp_path / "file.bin"
        atomic_write_bytes(path, b"old")
        atomic_write_bytes(path, b"new content")

        assert path.read_bytes() == b"new content"

    def test_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(StorageError) as exc_info:
            atomic_write_bytes(blocker / "file.bin", b"data")
        assert exc_info.value.path == blocker / "file.bin"

    def test_failed_replace_leaves_old_content(self, tmp_path, monkeypatch):
        path = tmp_path / "file.bin"
        atomic_write_bytes(path, b"old")

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("cortex.core.codec.os.replace", fail_replace)
        with pytest.raises(StorageError, match="disk full"):
            atomic_write_bytes(path, b"new")

        assert path.read_bytes() == b"old"
        assert not any(p.suffix == ".tmp" for p in tmp_path.iterdir())

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(StorageError):
            read_bytes(tmp_path / "missing.bin")
