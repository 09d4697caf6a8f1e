"""
Length-prefixed binary encoding for memory snapshots and checkpoint files.

Every file starts with a 4-byte magic and a u16 format version. All integers
are little-endian; strings carry a u32 byte length, blobs a u64 length and
vectors a u32 element count followed by float32 values.
"""

import os
import struct
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np

from .errors import SerializationError, StorageError

FORMAT_VERSION = 1

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_F64 = struct.Struct("<d")

_F32 = np.dtype("<f4")


class BinaryWriter:
    """Accumulates encoded fields into a byte buffer."""

    def __init__(self):
        self._buf = bytearray()

    def header(self, magic: bytes, version: int = FORMAT_VERSION) -> "BinaryWriter":
        self._buf += magic
        self._buf += _U16.pack(version)
        return self

    def u8(self, value: int) -> "BinaryWriter":
        self._buf += _U8.pack(value)
        return self

    def u32(self, value: int) -> "BinaryWriter":
        self._buf += _U32.pack(value)
        return self

    def u64(self, value: int) -> "BinaryWriter":
        self._buf += _U64.pack(value)
        return self

    def f64(self, value: float) -> "BinaryWriter":
        self._buf += _F64.pack(value)
        return self

    def string(self, value: str) -> "BinaryWriter":
        raw = value.encode("utf-8")
        self._buf += _U32.pack(len(raw))
        self._buf += raw
        return self

    def optional_string(self, value: Optional[str]) -> "BinaryWriter":
        if value is None:
            return self.u8(0)
        self.u8(1)
        return self.string(value)

    def blob(self, value: bytes) -> "BinaryWriter":
        self._buf += _U64.pack(len(value))
        self._buf += value
        return self

    def vector(self, value) -> "BinaryWriter":
        arr = np.asarray(value, dtype=_F32)
        self._buf += _U32.pack(arr.size)
        self._buf += arr.tobytes()
        return self

    def string_map(self, value: Dict[str, str]) -> "BinaryWriter":
        self._buf += _U32.pack(len(value))
        for k, v in value.items():
            self.string(k)
            self.string(v)
        return self

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class BinaryReader:
    """Decodes fields written by BinaryWriter, failing on any truncation."""

    def __init__(self, data: bytes):
        self._data = memoryview(data)
        self._pos = 0

    def _take(self, n: int) -> memoryview:
        end = self._pos + n
        if n < 0 or end > len(self._data):
            raise SerializationError(
                f"Unexpected end of data at offset {self._pos} (wanted {n} bytes, "
                f"{len(self._data) - self._pos} left)"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def header(self, magic: bytes, version: int = FORMAT_VERSION) -> int:
        found = bytes(self._take(len(magic)))
        if found != magic:
            raise SerializationError(f"Bad magic {found!r}, expected {magic!r}")
        found_version = self.u16()
        if found_version != version:
            raise SerializationError(f"Unsupported format version {found_version}")
        return found_version

    def u8(self) -> int:
        return _U8.unpack(self._take(_U8.size))[0]

    def u16(self) -> int:
        return _U16.unpack(self._take(_U16.size))[0]

    def u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def u64(self) -> int:
        return _U64.unpack(self._take(_U64.size))[0]

    def f64(self) -> float:
        return _F64.unpack(self._take(_F64.size))[0]

    def string(self) -> str:
        n = self.u32()
        try:
            return bytes(self._take(n)).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(f"Invalid UTF-8 string: {exc}") from exc

    def optional_string(self) -> Optional[str]:
        flag = self.u8()
        if flag == 0:
            return None
        if flag != 1:
            raise SerializationError(f"Invalid option flag {flag}")
        return self.string()

    def blob(self) -> bytes:
        n = self.u64()
        return bytes(self._take(n))

    def vector(self) -> np.ndarray:
        n = self.u32()
        raw = self._take(n * _F32.itemsize)
        return np.frombuffer(raw, dtype=_F32, count=n).astype(np.float32)

    def string_map(self) -> Dict[str, str]:
        n = self.u32()
        result = {}
        for _ in range(n):
            k = self.string()
            result[k] = self.string()
        return result

    def finish(self) -> None:
        """Fail if any bytes remain unread."""
        remaining = len(self._data) - self._pos
        if remaining:
            raise SerializationError(f"{remaining} trailing bytes after payload")


def atomic_write_bytes(path: Union[str, Path], data: bytes) -> None:
    """Write *data* to *path* via a temp file in the same directory and os.replace.

    *path* always holds either the old or the new content. Raises StorageError
    on failure.
    """
    path = Path(path)
    fd = -1
    tmp_path = ""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.stem}_",
            suffix=".tmp",
        )
        with os.fdopen(fd, "wb") as f:
            fd = -1
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        if fd >= 0:
            os.close(fd)
        if tmp_path and Path(tmp_path).exists():
            Path(tmp_path).unlink(missing_ok=True)
        raise StorageError(f"Write to {path} failed: {exc}", path=path) from exc


def read_bytes(path: Union[str, Path]) -> bytes:
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise StorageError(f"Read of {path} failed: {exc}", path=path) from exc
