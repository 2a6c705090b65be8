"""
Wire codec.

Values cross the boundary either as plain scalars (integers, pointers,
handles) or serialized into a ``RustBuffer``:

- integers and floats: fixed width, big-endian
- bool: i8 0/1
- string and bytes: i32 length prefix, then raw bytes
- optional: i8 flag (0 absent, 1 present), then the value
- sequence: i32 count, then elements
- map: i32 count, then key/value pairs
- tagged union: i32 1-based tag, then the variant payload
- record: fields concatenated in declaration order

A top-level string is the exception: its buffer holds the raw UTF-8 bytes
with no prefix.

Every converter implements ``read``/``write`` for nested use and
``lift``/``lower`` for the top-level boundary crossing.
"""

from __future__ import annotations

import enum
import struct
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Generic, Optional, TypeVar

from ._buffer import INT32_MAX, consume_rust_buffer, rustbuffer_free, rustbuffer_from_bytes
from ._native import RustBuffer
from .exceptions import ProtocolError, UsageError

__all__ = [
    "WireReader",
    "WireWriter",
    "FfiConverter",
    "FfiConverterPrimitive",
    "FfiConverterRustBuffer",
    "FfiConverterOptional",
    "FfiConverterSequence",
    "FfiConverterMap",
    "FfiConverterRecord",
    "FfiConverterEnum",
    "lower_into_rust_buffer",
    "lift_from_rust_buffer",
    "lower_all",
    "discard_all",
    "read_tag",
    "write_tag",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "FLOAT32",
    "FLOAT64",
    "BOOL",
    "STRING",
    "BYTES",
]

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")
E = TypeVar("E", bound=enum.IntEnum)

_I32 = struct.Struct(">i")


# =============================================================================
# Streams
# =============================================================================


class WireReader:
    """Cursor over a serialized payload."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read(self, size: int) -> bytes:
        if size < 0 or size > self.remaining():
            raise ProtocolError(
                f"read of {size} bytes past end of buffer ({self.remaining()} remaining)"
            )
        start = self._pos
        self._pos += size
        return self._data[start : self._pos].tobytes()

    def unpack(self, fmt: struct.Struct) -> Any:
        (value,) = fmt.unpack(self.read(fmt.size))
        return value

    def read_length(self) -> int:
        size = self.unpack(_I32)
        if size < 0:
            raise ProtocolError(f"negative length prefix {size}")
        return size

    def finish(self) -> None:
        """Require that every byte of the payload was consumed."""
        if self.remaining():
            raise ProtocolError(f"junk remaining in buffer after lifting: {self.remaining()} bytes")


class WireWriter:
    """Append-only serialization target."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def write(self, data: bytes) -> None:
        self._buf += data

    def pack(self, fmt: struct.Struct, value: Any) -> None:
        self._buf += fmt.pack(value)

    def write_length(self, size: int) -> None:
        if size > INT32_MAX:
            raise UsageError(f"length {size} exceeds the int32 length limit")
        self._buf += _I32.pack(size)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def lower_into_rust_buffer(converter: FfiConverter[T], value: T) -> RustBuffer:
    """Serialize ``value`` into a new native-owned buffer."""
    writer = WireWriter()
    converter.write(value, writer)
    return rustbuffer_from_bytes(writer.getvalue())


def lift_from_rust_buffer(converter: FfiConverter[T], buf: RustBuffer) -> T:
    """Decode a native-owned buffer, freeing it whether or not decoding succeeds."""
    reader = WireReader(consume_rust_buffer(buf))
    value = converter.read(reader)
    reader.finish()
    return value


def lower_all(*args: tuple[Any, Any]) -> list[Any]:
    """
    Lower ``(converter, value)`` call arguments in order.

    If one fails, the arguments already lowered are discarded before the
    error propagates, so no buffer, clone or handle is left behind.
    """
    lowered: list[Any] = []
    try:
        for converter, value in args:
            lowered.append(converter.lower(value))
    except BaseException:
        discard_all(args, lowered)
        raise
    return lowered


def discard_all(args: Sequence[tuple[Any, Any]], lowered: Sequence[Any]) -> None:
    """Discard arguments returned by ``lower_all`` that no native call consumed."""
    for (converter, _), raw in zip(args, lowered):
        converter.discard(raw)


# =============================================================================
# Converter bases
# =============================================================================


class FfiConverter(Generic[T]):
    """Serialization of one type inside a payload."""

    def read(self, reader: WireReader) -> T:
        raise NotImplementedError

    def write(self, value: T, writer: WireWriter) -> None:
        raise NotImplementedError

    def check_lower(self, value: T) -> None:
        """Validate ``value`` before anything is written or allocated."""


class FfiConverterPrimitive(FfiConverter[T]):
    """Types passed as bare C scalars at the top level."""

    def lift(self, value: T) -> T:
        return value

    def lower(self, value: T) -> T:
        self.check_lower(value)
        return value

    def discard(self, value: T) -> None:
        """Undo a ``lower`` whose result never reached a native call."""


class FfiConverterRustBuffer(FfiConverter[T]):
    """Types passed inside a ``RustBuffer`` at the top level."""

    def lift(self, buf: RustBuffer) -> T:
        return lift_from_rust_buffer(self, buf)

    def lower(self, value: T) -> RustBuffer:
        self.check_lower(value)
        return lower_into_rust_buffer(self, value)

    def discard(self, buf: RustBuffer) -> None:
        """Free a buffer of this type without decoding it."""
        rustbuffer_free(buf)


# =============================================================================
# Scalars
# =============================================================================


class _FfiConverterInt(FfiConverterPrimitive[int]):
    def __init__(self, fmt: str, bits: int, signed: bool) -> None:
        self._struct = struct.Struct(fmt)
        if signed:
            self.min, self.max = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
        else:
            self.min, self.max = 0, 2**bits - 1

    def check_lower(self, value: int) -> None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"expected int, got {type(value).__name__}")
        if not self.min <= value <= self.max:
            raise ValueError(f"{value} out of range [{self.min}, {self.max}]")

    def read(self, reader: WireReader) -> int:
        return reader.unpack(self._struct)

    def write(self, value: int, writer: WireWriter) -> None:
        self.check_lower(value)
        writer.pack(self._struct, value)


class _FfiConverterFloat(FfiConverterPrimitive[float]):
    def __init__(self, fmt: str) -> None:
        self._struct = struct.Struct(fmt)

    def check_lower(self, value: float) -> None:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise TypeError(f"expected float, got {type(value).__name__}")

    def read(self, reader: WireReader) -> float:
        return reader.unpack(self._struct)

    def write(self, value: float, writer: WireWriter) -> None:
        writer.pack(self._struct, value)


class _FfiConverterBool(FfiConverterPrimitive[bool]):
    _struct = struct.Struct(">b")

    def read(self, reader: WireReader) -> bool:
        value = reader.unpack(self._struct)
        if value not in (0, 1):
            raise ProtocolError(f"unexpected bool byte {value}")
        return bool(value)

    def write(self, value: bool, writer: WireWriter) -> None:
        writer.pack(self._struct, 1 if value else 0)

    def lift(self, value: int) -> bool:  # type: ignore[override]
        return bool(value)

    def lower(self, value: bool) -> int:  # type: ignore[override]
        return 1 if value else 0


INT8 = _FfiConverterInt(">b", 8, True)
INT16 = _FfiConverterInt(">h", 16, True)
INT32 = _FfiConverterInt(">i", 32, True)
INT64 = _FfiConverterInt(">q", 64, True)
UINT8 = _FfiConverterInt(">B", 8, False)
UINT16 = _FfiConverterInt(">H", 16, False)
UINT32 = _FfiConverterInt(">I", 32, False)
UINT64 = _FfiConverterInt(">Q", 64, False)
FLOAT32 = _FfiConverterFloat(">f")
FLOAT64 = _FfiConverterFloat(">d")
BOOL = _FfiConverterBool()


# =============================================================================
# Strings and bytes
# =============================================================================


class _FfiConverterString(FfiConverterRustBuffer[str]):
    @staticmethod
    def _decode(data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"invalid UTF-8 in string payload: {e}") from e

    def check_lower(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")

    def read(self, reader: WireReader) -> str:
        return self._decode(reader.read(reader.read_length()))

    def write(self, value: str, writer: WireWriter) -> None:
        self.check_lower(value)
        data = value.encode("utf-8")
        writer.write_length(len(data))
        writer.write(data)

    # Top-level strings carry the raw bytes with no length prefix.

    def lift(self, buf: RustBuffer) -> str:
        return self._decode(consume_rust_buffer(buf))

    def lower(self, value: str) -> RustBuffer:
        self.check_lower(value)
        return rustbuffer_from_bytes(value.encode("utf-8"))


class _FfiConverterBytes(FfiConverterRustBuffer[bytes]):
    def check_lower(self, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"expected bytes, got {type(value).__name__}")

    def read(self, reader: WireReader) -> bytes:
        return reader.read(reader.read_length())

    def write(self, value: bytes, writer: WireWriter) -> None:
        self.check_lower(value)
        data = bytes(value)
        writer.write_length(len(data))
        writer.write(data)


STRING = _FfiConverterString()
BYTES = _FfiConverterBytes()


# =============================================================================
# Compound types
# =============================================================================


class FfiConverterOptional(FfiConverterRustBuffer[Optional[T]]):
    _flag = struct.Struct(">b")

    def __init__(self, inner: FfiConverter[T]) -> None:
        self.inner = inner

    def check_lower(self, value: T | None) -> None:
        if value is not None:
            self.inner.check_lower(value)

    def read(self, reader: WireReader) -> T | None:
        flag = reader.unpack(self._flag)
        if flag == 0:
            return None
        if flag == 1:
            return self.inner.read(reader)
        raise ProtocolError(f"unexpected optional flag {flag}")

    def write(self, value: T | None, writer: WireWriter) -> None:
        if value is None:
            writer.pack(self._flag, 0)
        else:
            writer.pack(self._flag, 1)
            self.inner.write(value, writer)


class FfiConverterSequence(FfiConverterRustBuffer[list[T]]):
    def __init__(self, inner: FfiConverter[T]) -> None:
        self.inner = inner

    def check_lower(self, value: Sequence[T]) -> None:
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise TypeError(f"expected a sequence, got {type(value).__name__}")
        for item in value:
            self.inner.check_lower(item)

    def read(self, reader: WireReader) -> list[T]:
        count = reader.read_length()
        return [self.inner.read(reader) for _ in range(count)]

    def write(self, value: Sequence[T], writer: WireWriter) -> None:
        items = list(value)
        writer.write_length(len(items))
        for item in items:
            self.inner.write(item, writer)


class FfiConverterMap(FfiConverterRustBuffer[dict[K, V]]):
    def __init__(self, key: FfiConverter[K], value: FfiConverter[V]) -> None:
        self.key = key
        self.value = value

    def check_lower(self, value: Mapping[K, V]) -> None:
        if not isinstance(value, Mapping):
            raise TypeError(f"expected a mapping, got {type(value).__name__}")
        for k, v in value.items():
            self.key.check_lower(k)
            self.value.check_lower(v)

    def read(self, reader: WireReader) -> dict[K, V]:
        count = reader.read_length()
        result: dict[K, V] = {}
        for _ in range(count):
            k = self.key.read(reader)
            result[k] = self.value.read(reader)
        return result

    def write(self, value: Mapping[K, V], writer: WireWriter) -> None:
        writer.write_length(len(value))
        for k, v in value.items():
            self.key.write(k, writer)
            self.value.write(v, writer)


class FfiConverterRecord(FfiConverterRustBuffer[T]):
    """
    Record type serialized as its fields in order.

    Args:
        record_type: Class constructed with the fields as keyword arguments.
        fields: ``(attribute, converter)`` pairs in wire order.
    """

    def __init__(
        self,
        record_type: Callable[..., T],
        fields: Sequence[tuple[str, FfiConverter[Any]]],
    ) -> None:
        self.record_type = record_type
        self.fields = tuple(fields)

    def check_lower(self, value: T) -> None:
        if isinstance(self.record_type, type) and not isinstance(value, self.record_type):
            raise TypeError(f"expected {self.record_type.__name__}, got {type(value).__name__}")
        for name, converter in self.fields:
            converter.check_lower(getattr(value, name))

    def read(self, reader: WireReader) -> T:
        return self.record_type(**{name: conv.read(reader) for name, conv in self.fields})

    def write(self, value: T, writer: WireWriter) -> None:
        for name, converter in self.fields:
            converter.write(getattr(value, name), writer)


class FfiConverterEnum(FfiConverterRustBuffer[E]):
    """Fieldless enum serialized as its i32 tag."""

    def __init__(self, enum_type: type[E]) -> None:
        self.enum_type = enum_type

    def check_lower(self, value: E) -> None:
        if not isinstance(value, self.enum_type):
            raise TypeError(f"expected {self.enum_type.__name__}, got {type(value).__name__}")

    def read(self, reader: WireReader) -> E:
        tag = reader.unpack(_I32)
        try:
            return self.enum_type(tag)
        except ValueError:
            raise ProtocolError(f"unknown {self.enum_type.__name__} tag {tag}") from None

    def write(self, value: E, writer: WireWriter) -> None:
        writer.pack(_I32, int(value))


def read_tag(reader: WireReader) -> int:
    return reader.unpack(_I32)


def write_tag(writer: WireWriter, tag: int) -> None:
    writer.pack(_I32, tag)
