"""A flow-controlled, in-memory, in-order byte stream."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` unread bytes; the writer can end the
    input, after which the stream reaches EOF once the buffer drains.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_written = 0
        self._bytes_read = 0
        self._input_ended = False
        self._error = False

    # Writer interface

    def write(self, data: BytesLike) -> int:
        """Write as much of ``data`` as fits and return the number of bytes accepted."""
        accepted = min(len(data), self.remaining_capacity())
        self._buffer += memoryview(data)[:accepted]
        self._bytes_written += accepted
        return accepted

    def remaining_capacity(self) -> int:
        """Return how many more bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Reader interface

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[:length])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front."""
        removed = min(length, len(self._buffer))
        del self._buffer[:removed]
        self._bytes_read += removed

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes from the front."""
        data = self.peek_output(length)
        self.pop_output(length)
        return data

    def input_ended(self) -> bool:
        """Return True once the writer has ended the input."""
        return self._input_ended

    def error(self) -> bool:
        """Return True if the stream has suffered an error."""
        return self._error

    def buffer_size(self) -> int:
        """Return how many bytes can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        """Return True if there is nothing to read."""
        return not self._buffer

    def eof(self) -> bool:
        """Return True once input has ended and every byte has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        """Return the total number of bytes accepted by write()."""
        return self._bytes_written

    def bytes_read(self) -> int:
        """Return the total number of bytes popped."""
        return self._bytes_read