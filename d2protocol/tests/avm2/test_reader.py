"""Tests for the byte reader."""

import pytest

from d2protocol.avm2.reader import ByteReader, ReadError


def describe_fixed_width():
    def reads_little_endian_integers(expect):
        reader = ByteReader(bytes([0x01, 0x34, 0x12, 0x78, 0x56, 0x34, 0x12]))
        expect(reader.u8()) == 0x01
        expect(reader.u16()) == 0x1234
        expect(reader.u32()) == 0x12345678
        expect(reader.at_end()) == True

    def reads_signed_24_bit_offsets(expect):
        expect(ByteReader(b"\x10\x00\x00").s24()) == 16
        expect(ByteReader(b"\xec\xff\xff").s24()) == -20

    def raises_past_the_end(expect):
        reader = ByteReader(b"\x01")
        with pytest.raises(ReadError) as exinfo:
            reader.u16()
        expect(str(exinfo.value)).includes("cannot read 2 bytes at offset 0")


def describe_variable_length():
    def reads_single_byte_u30(expect):
        expect(ByteReader(b"\x7f").u30()) == 127

    def reads_multi_byte_u30(expect):
        reader = ByteReader(b"\xe0\x07\x05")
        expect(reader.u30()) == 992
        expect(reader.remaining) == 1

    def sign_extends_short_s32(expect):
        expect(ByteReader(b"\x7e").s32()) == -2
        expect(ByteReader(b"\x3f").s32()) == 63

    def reads_five_byte_s32(expect):
        expect(ByteReader(b"\xfe\xff\xff\xff\x0f").s32()) == -2
        expect(ByteReader(b"\xff\xff\xff\xff\x07").s32()) == 0x7FFFFFFF

    def raises_on_truncated_varint(expect):
        with pytest.raises(ReadError):
            ByteReader(b"\x80\x80").u30()


def describe_strings():
    def reads_length_prefixed_strings(expect):
        reader = ByteReader(b"\x05hello\x00")
        expect(reader.string()) == "hello"
        expect(reader.u8()) == 0

    def reads_null_terminated_strings(expect):
        reader = ByteReader(b"frame1\x00\x2e")
        expect(reader.cstring()) == "frame1"
        expect(reader.u8()) == 0x2E

    def raises_on_unterminated_string(expect):
        with pytest.raises(ReadError) as exinfo:
            ByteReader(b"frame1").cstring()
        expect(str(exinfo.value)).includes("unterminated string")
