"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import os
import sys
from typing import Union

from sponge.buffer import Buffer, BufferList, BufferViewList

# Maximum number of bytes requested by a single read.
_MAX_READ = 1024 * 1024

Writable = Union[bytes, bytearray, memoryview, str, Buffer, BufferList, BufferViewList]


class _FDWrapper:
    """The shared state behind every duplicate of one descriptor; closes it when dropped."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        os.close(self.fd)
        self.eof = self.closed = True

    def __del__(self) -> None:
        if self.closed:
            return
        try:
            self.close()
        except OSError as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _views_of(data: Writable) -> list[memoryview]:
    if isinstance(data, BufferViewList):
        return data.as_memoryviews()
    return BufferViewList(data).as_memoryviews()


def _drop_prefix(views: list[memoryview], n: int) -> list[memoryview]:
    remaining: list[memoryview] = []
    for view in views:
        if n >= len(view):
            n -= len(view)
        else:
            remaining.append(view[n:])
            n = 0
    return remaining


class FileDescriptor:
    """A handle on a kernel file descriptor that tracks EOF and read/write counts.

    Duplicates made with ``duplicate()`` share state; the descriptor is closed
    when ``close()`` is called or the last handle is dropped.
    """

    def __init__(self, fd: int | FileDescriptor) -> None:
        if isinstance(fd, FileDescriptor):
            self._internal = fd._internal
        else:
            self._internal = _FDWrapper(fd)

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); an empty result marks EOF."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        data = os.read(self.fileno(), size)
        if size > 0 and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: Writable, write_all: bool = True) -> int:
        """Write ``data``; with ``write_all``, keep going until every byte is written.

        Returns the number of bytes written.
        """
        views = _views_of(data)
        remaining = sum(len(view) for view in views)
        total = 0
        while True:
            written = os.writev(self.fileno(), views)
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            views = _drop_prefix(views, written)
            remaining -= written
            total += written
            if not (write_all and remaining):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def duplicate(self) -> FileDescriptor:
        """Return another handle sharing this descriptor and its state."""
        return FileDescriptor(self)

    def set_blocking(self, blocking: bool) -> None:
        """Switch the descriptor between blocking and non-blocking mode."""
        os.set_blocking(self.fileno(), blocking)

    def fileno(self) -> int:
        """Return the descriptor number."""
        return self._internal.fd

    @property
    def fd_num(self) -> int:
        """The descriptor number."""
        return self._internal.fd

    @property
    def eof(self) -> bool:
        """True once a read has returned no data, or after close."""
        return self._internal.eof

    @property
    def closed(self) -> bool:
        """True once the descriptor has been closed."""
        return self._internal.closed

    @property
    def read_count(self) -> int:
        """Number of reads performed."""
        return self._internal.read_count

    @property
    def write_count(self) -> int:
        """Number of writes performed."""
        return self._internal.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *args: object) -> None:
        if not self.closed:
            self.close()