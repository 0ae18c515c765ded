"""Shared, prefix-trimmable byte buffers and lists of them."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A read-only byte string that can cheaply discard bytes from its front.

    Copies made by ``BufferList`` share the underlying storage; each keeps its
    own starting offset.
    """

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _clone(self) -> Buffer:
        twin = Buffer.__new__(Buffer)
        twin._storage = self._storage
        twin._offset = self._offset
        return twin

    def view(self) -> memoryview:
        """Return a zero-copy view of the remaining bytes."""
        return memoryview(self._storage)[self._offset:]

    def at(self, n: int) -> int:
        """Return the byte at position ``n``; raise IndexError if out of range."""
        if not 0 <= n < len(self):
            raise IndexError(f"Buffer.at: index {n} out of range")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """Return the remaining contents as new bytes."""
        return self._storage[self._offset:]

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes; raise IndexError if there are fewer."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self.view() == other.view()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.view() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({self.copy()!r})"


class BufferList:
    """A discontiguous byte string made of Buffers, used to prepend headers without copying payloads."""

    def __init__(self, data: Buffer | BytesLike | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if isinstance(data, Buffer):
            self._buffers.append(data._clone())
        elif data is not None:
            self._buffers.append(Buffer(data))

    @property
    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying Buffers, front first."""
        return tuple(self._buffers)

    def append(self, other: BufferList | Buffer | BytesLike) -> None:
        """Append the Buffers of another list (or a single Buffer or bytes)."""
        if not isinstance(other, BufferList):
            other = BufferList(other)
        self._buffers.extend(buf._clone() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the contents as a single Buffer; raise ValueError if there is more than one."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise ValueError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across Buffers; raise IndexError if there are fewer."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def concatenate(self) -> bytes:
        """Return all the bytes joined together."""
        return b"".join(buf.view() for buf in self._buffers)

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def __repr__(self) -> str:
        return f"BufferList({self.concatenate()!r})"


class BufferViewList:
    """A non-owning list of views over a discontiguous byte string."""

    def __init__(self, data: BufferList | Buffer | BytesLike | str) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            self._views.extend(buf.view() for buf in data.buffers)
        elif isinstance(data, Buffer):
            self._views.append(data.view())
        elif isinstance(data, str):
            self._views.append(memoryview(data.encode()))
        else:
            self._views.append(memoryview(data).cast("B"))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across views; raise IndexError if there are fewer."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def as_memoryviews(self) -> list[memoryview]:
        """Return the views, suitable for scatter-gather writes such as ``os.writev``."""
        return list(self._views)

    def __iter__(self) -> Iterable[memoryview]:
        return iter(self._views)

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)