"""Byte cursor used by generated code to cross the FFI boundary.

All values are big-endian. Variable length values (strings, bytes,
sequences, maps) carry a signed 32-bit length prefix.
"""

import struct
from collections.abc import Callable, Mapping, Sequence
from typing import TypeVar

K = TypeVar("K")
T = TypeVar("T")
V = TypeVar("V")

_I8 = struct.Struct(">b")
_U8 = struct.Struct(">B")
_I16 = struct.Struct(">h")
_U16 = struct.Struct(">H")
_I32 = struct.Struct(">i")
_U32 = struct.Struct(">I")
_I64 = struct.Struct(">q")
_U64 = struct.Struct(">Q")
_F32 = struct.Struct(">f")
_F64 = struct.Struct(">d")

MAX_LENGTH = 2**31 - 1

# Items that encode to zero bytes cannot be bounded by the buffer size
MAX_EMPTY_ITEMS = 2**16


class SerializationError(RuntimeError):
    """Raised when serialization or deserialization fails."""


class BufferUnderflowError(SerializationError):
    """Raised when a read runs past the end of the buffer."""


class Reader:
    """Sequential reader over a byte buffer."""

    def __init__(self, data: bytes | bytearray | memoryview, offset: int = 0) -> None:
        self._data = memoryview(data)
        self.offset = offset

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self.offset

    def _take(self, size: int) -> memoryview:
        if size > self.remaining:
            raise BufferUnderflowError(
                f"Need {size} bytes at offset {self.offset}, {self.remaining} available"
            )
        chunk = self._data[self.offset : self.offset + size]
        self.offset += size
        return chunk

    def _unpack(self, fmt: struct.Struct) -> int | float:
        return fmt.unpack(self._take(fmt.size))[0]

    def _read_length(self) -> int:
        length = self.read_i32()
        if length < 0:
            raise SerializationError(f"Negative length {length} at offset {self.offset - 4}")
        return length

    def _read_count(self, min_size: int) -> int:
        count = self._read_length()
        if min_size == 0:
            if count > MAX_EMPTY_ITEMS:
                raise SerializationError(f"Count {count} of empty items exceeds {MAX_EMPTY_ITEMS}")
        elif count * min_size > self.remaining:
            raise BufferUnderflowError(
                f"{count} items need at least {count * min_size} bytes at offset "
                f"{self.offset}, {self.remaining} available"
            )
        return count

    def read_i8(self) -> int:
        return int(self._unpack(_I8))

    def read_u8(self) -> int:
        return int(self._unpack(_U8))

    def read_i16(self) -> int:
        return int(self._unpack(_I16))

    def read_u16(self) -> int:
        return int(self._unpack(_U16))

    def read_i32(self) -> int:
        return int(self._unpack(_I32))

    def read_u32(self) -> int:
        return int(self._unpack(_U32))

    def read_i64(self) -> int:
        return int(self._unpack(_I64))

    def read_u64(self) -> int:
        return int(self._unpack(_U64))

    def read_f32(self) -> float:
        return float(self._unpack(_F32))

    def read_f64(self) -> float:
        return float(self._unpack(_F64))

    def read_bool(self) -> bool:
        value = self.read_u8()
        if value not in (0, 1):
            raise SerializationError(f"Invalid bool value {value}")
        return value == 1

    def read_bytes(self) -> bytes:
        return bytes(self._take(self._read_length()))

    def read_string(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Invalid UTF-8 string: {e}") from e

    def read_handle(self) -> int:
        """Read an object handle."""
        return self.read_u64()

    def read_optional(self, read_fn: Callable[["Reader"], T]) -> T | None:
        flag = self.read_u8()
        if flag == 0:
            return None
        if flag != 1:
            raise SerializationError(f"Invalid optional flag {flag}")
        return read_fn(self)

    def read_sequence(self, read_fn: Callable[["Reader"], T], min_size: int = 1) -> list[T]:
        """Read a counted sequence; ``min_size`` is the smallest encoding of one item."""
        count = self._read_count(min_size)
        return [read_fn(self) for _ in range(count)]

    def read_map(
        self,
        read_key: Callable[["Reader"], K],
        read_value: Callable[["Reader"], V],
        min_size: int = 1,
    ) -> dict[K, V]:
        count = self._read_count(min_size)
        result: dict[K, V] = {}
        for _ in range(count):
            key = read_key(self)
            result[key] = read_value(self)
        return result


class Writer:
    """Growable writer producing a byte buffer."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def _pack(self, fmt: struct.Struct, value: int | float) -> None:
        try:
            self._buf.extend(fmt.pack(value))
        except (struct.error, OverflowError) as e:
            raise SerializationError(f"Cannot encode {value!r}: {e}") from e

    def _write_length(self, length: int) -> None:
        if length > MAX_LENGTH:
            raise SerializationError(f"Length {length} exceeds {MAX_LENGTH}")
        self.write_i32(length)

    def write_i8(self, value: int) -> None:
        self._pack(_I8, value)

    def write_u8(self, value: int) -> None:
        self._pack(_U8, value)

    def write_i16(self, value: int) -> None:
        self._pack(_I16, value)

    def write_u16(self, value: int) -> None:
        self._pack(_U16, value)

    def write_i32(self, value: int) -> None:
        self._pack(_I32, value)

    def write_u32(self, value: int) -> None:
        self._pack(_U32, value)

    def write_i64(self, value: int) -> None:
        self._pack(_I64, value)

    def write_u64(self, value: int) -> None:
        self._pack(_U64, value)

    def write_f32(self, value: float) -> None:
        self._pack(_F32, value)

    def write_f64(self, value: float) -> None:
        self._pack(_F64, value)

    def write_bool(self, value: bool) -> None:
        self._buf.append(1 if value else 0)

    def write_bytes(self, value: bytes) -> None:
        self._write_length(len(value))
        self._buf.extend(value)

    def write_string(self, value: str) -> None:
        self.write_bytes(value.encode("utf-8"))

    def write_handle(self, value: int) -> None:
        """Write an object handle."""
        self.write_u64(value)

    def write_optional(self, value: T | None, write_fn: Callable[[T, "Writer"], None]) -> None:
        if value is None:
            self._buf.append(0)
            return
        self._buf.append(1)
        write_fn(value, self)

    def write_sequence(self, items: Sequence[T], write_fn: Callable[[T, "Writer"], None]) -> None:
        self._write_length(len(items))
        for item in items:
            write_fn(item, self)

    def write_map(
        self,
        mapping: Mapping[K, V],
        write_key: Callable[[K, "Writer"], None],
        write_value: Callable[[V, "Writer"], None],
    ) -> None:
        self._write_length(len(mapping))
        for key, value in mapping.items():
            write_key(key, self)
            write_value(value, self)
