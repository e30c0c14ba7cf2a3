"""Tests for the byte buffer codec"""

from pytest import approx, raises

from ffiwire.proto import BufferUnderflowError, Reader, SerializationError, Writer


def describe_writer():
    def writes_big_endian_integers(expect):
        buf = Writer()
        buf.write_i32(42)
        buf.write_i16(-2)
        buf.write_u64(1)
        expect(buf.getvalue()) == bytes.fromhex("0000002a" "fffe" "0000000000000001")
        expect(len(buf)) == 14

    def writes_length_prefixed_strings(expect):
        buf = Writer()
        buf.write_string("héllo")
        expect(buf.getvalue()) == bytes.fromhex("00000006") + "héllo".encode()

    def writes_optionals_with_flag(expect):
        buf = Writer()
        buf.write_optional(None, lambda v, buf: buf.write_i32(v))
        buf.write_optional(7, lambda v, buf: buf.write_i32(v))
        expect(buf.getvalue()) == bytes.fromhex("00" "01" "00000007")

    def writes_sequences_with_count(expect):
        buf = Writer()
        buf.write_sequence([1, 2], lambda v, buf: buf.write_u8(v))
        expect(buf.getvalue()) == bytes.fromhex("00000002" "01" "02")

    def writes_bools_as_single_bytes(expect):
        buf = Writer()
        buf.write_bool(True)
        buf.write_bool(False)
        expect(buf.getvalue()) == b"\x01\x00"

    def rejects_out_of_range_integers():
        with raises(SerializationError):
            Writer().write_u8(256)
        with raises(SerializationError):
            Writer().write_i64(2**63)

    def rejects_wrong_types():
        with raises(SerializationError):
            Writer().write_i32("1")


def describe_reader():
    def reads_big_endian_integers(expect):
        buf = Reader(bytes.fromhex("0000002a" "fffe" "ff"))
        expect(buf.read_i32()) == 42
        expect(buf.read_i16()) == -2
        expect(buf.read_u8()) == 255
        expect(buf.remaining) == 0

    def reads_floats(expect):
        buf = Reader(bytes.fromhex("3fc00000" "4008000000000000"))
        expect(buf.read_f32()) == approx(1.5)
        expect(buf.read_f64()) == approx(3.0)

    def reads_strings_and_bytes(expect):
        buf = Reader(bytes.fromhex("00000002" "6869" "00000000"))
        expect(buf.read_string()) == "hi"
        expect(buf.read_bytes()) == b""

    def reads_maps(expect):
        data = bytes.fromhex("00000001" "00000001" "61" "00000005")
        result = Reader(data).read_map(lambda buf: buf.read_string(), lambda buf: buf.read_i32())
        expect(result) == {"a": 5}

    def starts_at_offset(expect):
        buf = Reader(memoryview(b"\xff\x00\x00\x00\x01"), 1)
        expect(buf.read_i32()) == 1
        expect(buf.offset) == 5

    def rejects_reads_past_the_end():
        with raises(BufferUnderflowError):
            Reader(b"\x00\x00").read_i32()
        with raises(BufferUnderflowError):
            Reader(bytes.fromhex("00000010" "6869")).read_string()

    def rejects_negative_lengths():
        with raises(SerializationError):
            Reader(bytes.fromhex("ffffffff")).read_bytes()

    def rejects_invalid_flags():
        with raises(SerializationError):
            Reader(b"\x02").read_bool()
        with raises(SerializationError):
            Reader(b"\x05").read_optional(lambda buf: buf.read_u8())

    def rejects_invalid_utf8():
        with raises(SerializationError):
            Reader(bytes.fromhex("00000001" "ff")).read_string()

    def rejects_counts_larger_than_the_buffer():
        with raises(BufferUnderflowError):
            Reader(bytes.fromhex("7fffffff" "00")).read_sequence(lambda buf: buf.read_u8())
        with raises(BufferUnderflowError):
            Reader(bytes.fromhex("00000002" "00000001")).read_sequence(
                lambda buf: buf.read_i32(), min_size=4
            )
        with raises(BufferUnderflowError):
            Reader(bytes.fromhex("00010000")).read_map(
                lambda buf: buf.read_string(), lambda buf: buf.read_i32(), min_size=8
            )

    def caps_counts_of_empty_items(expect):
        items = Reader(bytes.fromhex("00000003")).read_sequence(lambda buf: None, min_size=0)
        expect(items) == [None, None, None]
        with raises(SerializationError, match="empty items"):
            Reader(bytes.fromhex("7fffffff")).read_sequence(lambda buf: None, min_size=0)
