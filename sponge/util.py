"""Small helpers: timestamps, random generators, Internet checksum and hex dumps."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import TextIO

_PROGRAM_START_NS = time.monotonic_ns()

# The Mersenne Twister keeps 624 32-bit words of state.
_MT_STATE_WORDS = 624


def timestamp_ms() -> int:
    """Return the number of milliseconds since the program started."""
    return (time.monotonic_ns() - _PROGRAM_START_NS) // 1_000_000


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded with a full state's worth of OS entropy."""
    seed = int.from_bytes(os.urandom(_MT_STATE_WORDS * 4), "little")
    return random.Random(seed)


class InternetChecksum:
    """The Internet checksum (one's-complement sum of 16-bit big-endian words).

    Evaluating the checksum over data that already holds a correct checksum
    field gives zero. To compute a checksum, zero the field, add the data and
    store ``value()`` in the field.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum
        self._parity = False

    def add(self, data: bytes) -> None:
        """Add bytes to the running sum; data may be split across calls at any point."""
        for byte in bytes(data):
            self._sum += byte if self._parity else byte << 8
            self._parity = not self._parity

    def value(self) -> int:
        """Return the checksum as an integer in host order."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def format_hexdump(data: bytes, indent: int = 0) -> str:
    """Render bytes as a hex dump: 16 bytes per line, offsets, hex pairs and printable characters."""
    data = bytes(data)
    pad = " " * indent
    parts: list[str] = []
    chars: list[str] = []
    for printed, byte in enumerate(data):
        if printed % 16 == 0:
            if printed:
                parts.append(f"    {''.join(chars)}\n")
                chars = []
            parts.append(f"{pad}{printed:08x}:    ")
        elif printed % 2 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars.append(_printable(byte))
    remainder = (16 - len(data) % 16) % 16
    parts.append(" " * (2 * remainder + remainder // 2 + 4))
    parts.append("".join(chars) or " ")
    parts.append("\n\n")
    return "".join(parts)


def hexdump(data: bytes, indent: int = 0, file: TextIO | None = None) -> None:
    """Write a hex dump of ``data`` to ``file`` (standard output by default)."""
    out = sys.stdout if file is None else file
    out.write(format_hexdump(data, indent))
    out.flush()