"""
Tests for the wire codec.

Tests for cdk._codec: scalar layout, top-level vs nested strings, compound
types, and the errors raised for malformed payloads.
"""

import math
import struct

import pytest

from cdk._codec import (
    BOOL,
    BYTES,
    FLOAT32,
    FLOAT64,
    INT8,
    INT16,
    INT32,
    INT64,
    STRING,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    FfiConverterMap,
    FfiConverterOptional,
    FfiConverterSequence,
    WireReader,
    WireWriter,
    lower_all,
)
from cdk.exceptions import ProtocolError, UsageError


def encode(converter, value):
    writer = WireWriter()
    converter.write(value, writer)
    return writer.getvalue()


def decode(converter, data):
    reader = WireReader(data)
    value = converter.read(reader)
    reader.finish()
    return value


class TestScalars:
    """Fixed-width big-endian scalars."""

    def test_int32_is_big_endian(self):
        """Integers are written most significant byte first."""
        assert encode(INT32, 1) == b"\x00\x00\x00\x01"
        assert encode(INT32, -2) == b"\xff\xff\xff\xfe"

    def test_uint64_max(self):
        """UINT64 accepts the full unsigned range."""
        assert encode(UINT64, 2**64 - 1) == b"\xff" * 8
        assert decode(UINT64, b"\xff" * 8) == 2**64 - 1

    def test_out_of_range_rejected(self):
        """Values outside the type's range raise ValueError before writing."""
        with pytest.raises(ValueError):
            encode(UINT8, 256)
        with pytest.raises(ValueError):
            encode(INT8, -129)
        with pytest.raises(ValueError):
            UINT32.lower(-1)

    def test_bool_is_not_an_int(self):
        """Passing a bool where an integer is declared is a TypeError."""
        with pytest.raises(TypeError):
            INT32.check_lower(True)

    def test_bool_layout(self):
        """Booleans are one signed byte, 0 or 1."""
        assert encode(BOOL, True) == b"\x01"
        assert encode(BOOL, False) == b"\x00"
        assert decode(BOOL, b"\x01") is True

    def test_bool_rejects_other_bytes(self):
        """Any byte other than 0 or 1 is a protocol violation."""
        with pytest.raises(ProtocolError, match="bool"):
            decode(BOOL, b"\x02")

    def test_short_read(self):
        """Reading past the end of the payload is a protocol violation."""
        with pytest.raises(ProtocolError, match="past end"):
            decode(UINT32, b"\x00\x01")


F32_MAX = struct.unpack(">f", b"\x7f\x7f\xff\xff")[0]

SCALAR_CASES = [
    (INT8, 1, [-(2**7), 0, 2**7 - 1]),
    (INT16, 2, [-(2**15), 0, 2**15 - 1]),
    (INT32, 4, [-(2**31), 0, 2**31 - 1]),
    (INT64, 8, [-(2**63), 0, 2**63 - 1]),
    (UINT8, 1, [0, 2**8 - 1]),
    (UINT16, 2, [0, 2**16 - 1]),
    (UINT32, 4, [0, 2**32 - 1]),
    (UINT64, 8, [0, 2**64 - 1]),
    (FLOAT32, 4, [0.0, -0.0, 1.5, -F32_MAX, F32_MAX, math.inf, -math.inf]),
    (FLOAT64, 8, [0.0, -0.0, 0.1, -1.7976931348623157e308, 5e-324, math.inf, -math.inf]),
    (BOOL, 1, [False, True]),
]


class TestRoundTrip:
    """decode(encode(v)) == v for every scalar at its edges."""

    @pytest.mark.parametrize(
        ("converter", "size", "value"),
        [(conv, size, value) for conv, size, values in SCALAR_CASES for value in values],
    )
    def test_scalar(self, converter, size, value):
        """Every scalar decodes to the value written and consumes exactly its width."""
        data = encode(converter, value)
        assert len(data) == size

        reader = WireReader(data)
        decoded = converter.read(reader)
        assert reader.remaining() == 0
        assert decoded == value
        assert type(decoded) is type(value)
        if isinstance(value, float):
            assert math.copysign(1.0, decoded) == math.copysign(1.0, value)

    @pytest.mark.parametrize("converter", [FLOAT32, FLOAT64])
    def test_nan(self, converter):
        assert math.isnan(decode(converter, encode(converter, math.nan)))


class TestStrings:
    """Strings and byte arrays."""

    def test_nested_string_has_length_prefix(self):
        """Strings inside a payload carry an i32 byte-length prefix."""
        assert encode(STRING, "hi") == b"\x00\x00\x00\x02hi"

    def test_prefix_counts_utf8_bytes(self):
        """The prefix is the UTF-8 byte length, not the character count."""
        data = encode(STRING, "héllo")
        assert struct.unpack(">i", data[:4])[0] == len("héllo".encode())

    def test_top_level_string_is_raw(self, native):
        """A top-level string buffer holds the raw UTF-8 bytes only."""
        buf = STRING.lower("héllo")
        assert native.take(buf) == "héllo".encode()

    def test_top_level_lift_frees_buffer(self, native):
        """Lifting a top-level string releases the native buffer."""
        assert STRING.lift(native.alloc("ünï".encode())) == "ünï"
        assert native.live_buffers == 0

    def test_empty_string(self, native):
        """Empty strings cross as empty buffers."""
        buf = STRING.lower("")
        assert buf.len == 0
        assert STRING.lift(buf) == ""

    def test_invalid_utf8(self, native):
        """Invalid UTF-8 from the native side is a protocol violation."""
        with pytest.raises(ProtocolError, match="UTF-8"):
            STRING.lift(native.alloc(b"\xff\xfe"))
        assert native.live_buffers == 0

    def test_negative_length_prefix(self):
        """A negative length prefix is rejected."""
        with pytest.raises(ProtocolError, match="negative"):
            decode(STRING, b"\xff\xff\xff\xff")

    def test_bytes_keep_prefix_at_top_level(self, native):
        """Byte arrays carry their length prefix even at the top level."""
        buf = BYTES.lower(b"\x00\x01")
        assert native.take(buf) == b"\x00\x00\x00\x02\x00\x01"

    def test_string_type_checked(self):
        """Lowering a non-string raises TypeError."""
        with pytest.raises(TypeError):
            STRING.lower(b"bytes")

    def test_length_limit(self):
        """Lengths beyond the int32 limit are a usage fault."""
        with pytest.raises(UsageError):
            WireWriter().write_length(2**31)


class TestCompound:
    """Optionals, sequences and maps."""

    def test_optional_absent(self):
        """None is a single 0 flag byte."""
        assert encode(FfiConverterOptional(UINT32), None) == b"\x00"

    def test_optional_present(self):
        """A present value is flag 1 followed by the value."""
        assert encode(FfiConverterOptional(UINT32), 7) == b"\x01\x00\x00\x00\x07"

    def test_optional_bad_flag(self):
        """Flags other than 0 and 1 are a protocol violation."""
        with pytest.raises(ProtocolError, match="optional flag"):
            decode(FfiConverterOptional(UINT32), b"\x02")

    def test_sequence_layout(self):
        """Sequences are an i32 count followed by the elements."""
        data = encode(FfiConverterSequence(STRING), ["a", "bc"])
        assert data == b"\x00\x00\x00\x02" + b"\x00\x00\x00\x01a" + b"\x00\x00\x00\x02bc"

    def test_sequence_rejects_str(self):
        """A bare string is not accepted as a sequence of strings."""
        with pytest.raises(TypeError):
            FfiConverterSequence(STRING).check_lower("abc")

    def test_map_layout(self):
        """Maps are an i32 count followed by key/value pairs."""
        converter = FfiConverterMap(STRING, UINT32)
        data = encode(converter, {"k": 1})
        assert data == b"\x00\x00\x00\x01" + b"\x00\x00\x00\x01k" + b"\x00\x00\x00\x01"
        assert decode(converter, data) == {"k": 1}

    def test_map_rejects_non_mapping(self):
        """Lowering a list where a map is declared raises TypeError."""
        with pytest.raises(TypeError, match="mapping"):
            FfiConverterMap(STRING, UINT32).check_lower([("k", 1)])


class TestBufferLifting:
    """lift/lower through native buffers."""

    def test_trailing_bytes_rejected(self, native):
        """Bytes left after decoding are a protocol violation, and the buffer is still freed."""
        converter = FfiConverterSequence(UINT8)
        buf = native.alloc(b"\x00\x00\x00\x01\x05\x06")
        with pytest.raises(ProtocolError, match="junk remaining"):
            converter.lift(buf)
        assert native.live_buffers == 0

    def test_lower_then_lift(self, native):
        """A serialized value handed to the native side decodes unchanged."""
        converter = FfiConverterMap(STRING, FfiConverterOptional(STRING))
        value = {"a": None, "b": "x"}
        assert converter.lift(converter.lower(value)) == value

    def test_lower_validates_before_allocating(self, native):
        """Invalid input raises before any native buffer is allocated."""
        converter = FfiConverterSequence(UINT8)
        with pytest.raises(ValueError):
            converter.lower([1, 2, 300])
        assert native.live_buffers == 0

    def test_discard_frees(self, native):
        """discard releases a buffer without decoding it."""
        STRING.discard(native.alloc(b"\xff"))
        assert native.live_buffers == 0

    def test_lower_all(self, native):
        args = lower_all((STRING, "a"), (UINT32, 7), (FfiConverterSequence(UINT8), [1]))
        assert args[1] == 7
        assert STRING.lift(args[0]) == "a"
        assert FfiConverterSequence(UINT8).lift(args[2]) == [1]

    def test_lower_all_frees_on_failure(self, native):
        """A failing argument releases the buffers lowered before it."""
        with pytest.raises(TypeError):
            lower_all((STRING, "a"), (BYTES, b"b"), (STRING, 5))
        assert native.live_buffers == 0
