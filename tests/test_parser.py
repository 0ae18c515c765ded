import pytest

from sponge.buffer import Buffer
from sponge.parser import (
    NetParser,
    ParseResult,
    unparse_u8,
    unparse_u16,
    unparse_u32,
)

VAL1 = 0xDEADBEEF
VAL2 = 0xC0C0
VAL3 = 0xFF
VAL4 = 0x0C05FEFE


def _example_buffer() -> bytearray:
    buffer = bytearray([0x32])
    unparse_u32(buffer, VAL1)
    unparse_u16(buffer, VAL2)
    unparse_u8(buffer, VAL3)
    unparse_u32(buffer, VAL4)
    return buffer


def test_round_trip_example():
    parser = NetParser(bytes(_example_buffer()))
    assert parser.u8() == 0x32
    assert parser.u32() == VAL1
    assert parser.u16() == VAL2
    assert parser.u8() == VAL3
    assert parser.u32() == VAL4
    assert parser.error is ParseResult.NO_ERROR
    assert len(parser.buffer) == 0


def test_unparse_is_big_endian():
    buffer = bytearray()
    unparse_u32(buffer, VAL1)
    assert bytes(buffer) == b"\xde\xad\xbe\xef"
    unparse_u16(buffer, VAL2)
    assert bytes(buffer[4:]) == b"\xc0\xc0"


def test_unparse_truncates_to_width():
    buffer = bytearray()
    unparse_u8(buffer, 0x1FF)
    assert bytes(buffer) == b"\xff"


def test_example_length():
    assert len(_example_buffer()) == 1 + 4 + 2 + 1 + 4


def test_parse_from_buffer_does_not_touch_original():
    original = Buffer(b"\x00\x01\x02\x03")
    parser = NetParser(original)
    assert parser.u16() == 0x0001
    assert len(original) == 4
    assert original.copy() == b"\x00\x01\x02\x03"


def test_too_short_sets_sticky_error():
    parser = NetParser(b"\x01\x02")
    assert parser.u32() == 0
    assert parser.error is ParseResult.PACKET_TOO_SHORT
    assert not parser.ok
    assert parser.u8() == 0
    assert len(parser.buffer) == 2


def test_remove_prefix():
    parser = NetParser(b"\xaa\xbb\xcc")
    parser.remove_prefix(2)
    assert parser.u8() == 0xCC
    assert parser.ok


def test_remove_prefix_too_far():
    parser = NetParser(b"\xaa")
    parser.remove_prefix(5)
    assert parser.error is ParseResult.PACKET_TOO_SHORT
    assert len(parser.buffer) == 1


def test_error_can_be_set():
    parser = NetParser(b"\x00\x00")
    parser.error = ParseResult.BAD_CHECKSUM
    assert parser.u16() == 0
    assert parser.error is ParseResult.BAD_CHECKSUM


@pytest.mark.parametrize(
    "result, text",
    [
        (ParseResult.NO_ERROR, "NoError"),
        (ParseResult.BAD_CHECKSUM, "BadChecksum"),
        (ParseResult.PACKET_TOO_SHORT, "PacketTooShort"),
        (ParseResult.WRONG_IP_VERSION, "WrongIPVersion"),
        (ParseResult.HEADER_TOO_SHORT, "HeaderTooShort"),
        (ParseResult.TRUNCATED_PACKET, "TruncatedPacket"),
    ],
)
def test_parse_result_names(result, text):
    assert str(result) == text