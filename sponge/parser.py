"""Big-endian integer parsing and serialisation for network headers."""

from __future__ import annotations

from enum import Enum
from typing import Union

from sponge.buffer import Buffer

BytesLike = Union[bytes, bytearray, memoryview]


class ParseResult(Enum):
    """The result of parsing or unparsing an IP datagram, TCP segment, Ethernet frame or ARP message."""

    NO_ERROR = "NoError"
    BAD_CHECKSUM = "BadChecksum"
    PACKET_TOO_SHORT = "PacketTooShort"
    WRONG_IP_VERSION = "WrongIPVersion"
    HEADER_TOO_SHORT = "HeaderTooShort"
    TRUNCATED_PACKET = "TruncatedPacket"
    UNSUPPORTED = "Unsupported"

    def __str__(self) -> str:
        return self.value


class NetParser:
    """Reads network-order integers from the front of a buffer.

    Errors are sticky: once ``error`` is set, every further read returns 0
    and consumes nothing.
    """

    def __init__(self, buffer: Buffer | BytesLike) -> None:
        self._buffer = Buffer(buffer)
        self.error = ParseResult.NO_ERROR

    @property
    def buffer(self) -> Buffer:
        """The bytes not yet consumed."""
        return self._buffer

    @property
    def ok(self) -> bool:
        """True while no error has occurred."""
        return self.error is ParseResult.NO_ERROR

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.error = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, width: int) -> int:
        self._check_size(width)
        if not self.ok:
            return 0
        value = int.from_bytes(self._buffer.view()[:width], "big")
        self._buffer.remove_prefix(width)
        return value

    def u32(self) -> int:
        """Parse a 32-bit integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, or set the error if there are fewer."""
        self._check_size(n)
        if not self.ok:
            return
        self._buffer.remove_prefix(n)


def _unparse_int(buffer: bytearray, value: int, width: int) -> None:
    mask = (1 << (8 * width)) - 1
    buffer += (value & mask).to_bytes(width, "big")


def unparse_u32(buffer: bytearray, value: int) -> None:
    """Append a 32-bit integer to ``buffer`` in network byte order."""
    _unparse_int(buffer, value, 4)


def unparse_u16(buffer: bytearray, value: int) -> None:
    """Append a 16-bit integer to ``buffer`` in network byte order."""
    _unparse_int(buffer, value, 2)


def unparse_u8(buffer: bytearray, value: int) -> None:
    """Append an 8-bit integer to ``buffer``."""
    _unparse_int(buffer, value, 1)