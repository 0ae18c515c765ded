"""Thin wrappers over TCP, UDP and Unix-domain stream sockets built on FileDescriptor."""

from __future__ import annotations

import socket
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Union

from sponge.address import Address
from sponge.buffer import Buffer, BufferList, BufferViewList
from sponge.file_descriptor import FileDescriptor

Payload = Union[bytes, bytearray, memoryview, str, Buffer, BufferList, BufferViewList]


def _views(payload: Payload) -> list[memoryview]:
    if isinstance(payload, BufferViewList):
        return payload.as_memoryviews()
    return BufferViewList(payload).as_memoryviews()


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, type_: int, fd: FileDescriptor | int | None = None) -> None:
        if fd is None:
            fresh = socket.socket(domain, type_)
            super().__init__(fresh.detach())
            return
        super().__init__(fd)
        with self._borrow() as sock:
            if int(sock.family) != domain:
                raise RuntimeError("socket domain mismatch")
            if int(sock.type) != type_:
                raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrow(self) -> Iterator[socket.socket]:
        """Yield a socket object over this descriptor without taking ownership of it."""
        sock = socket.socket(fileno=self.fileno())
        try:
            yield sock
        finally:
            sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrow() as sock:
            sock.bind(address.sockaddr)

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrow() as sock:
            sock.connect(address.sockaddr)

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._borrow() as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """Return the local address of the socket."""
        with self._borrow() as sock:
            return Address.from_sockaddr(sock.getsockname())

    def peer_address(self) -> Address:
        """Return the address of the connected peer."""
        with self._borrow() as sock:
            return Address.from_sockaddr(sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        with self._borrow() as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """A UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise RuntimeError if it is larger than ``mtu``."""
        with self._borrow() as sock:
            data, _ancdata, flags, source = sock.recvmsg(mtu)
        if flags & socket.MSG_TRUNC:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), data)

    def _send(self, payload: Payload, destination: Address | None) -> None:
        views = _views(payload)
        expected = sum(len(view) for view in views)
        with self._borrow() as sock:
            if destination is None:
                sent = sock.sendmsg(views)
            else:
                sent = sock.sendmsg(views, [], 0, destination.sockaddr)
        if sent != expected:
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._send(payload, destination)

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer (connect() must be called first)."""
        self._send(payload, None)


class TCPSocket(Socket):
    """A TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    @classmethod
    def _adopt(cls, fd: int) -> TCPSocket:
        adopted = cls.__new__(cls)
        Socket.__init__(adopted, socket.AF_INET, socket.SOCK_STREAM, fd)
        return adopted

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        with self._borrow() as sock:
            sock.listen(backlog)

    def accept(self) -> TCPSocket:
        """Block until a connection arrives and return a socket connected to the peer."""
        self._register_read()
        with self._borrow() as sock:
            connection, _peer = sock.accept()
        return TCPSocket._adopt(connection.detach())


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket built from an existing descriptor."""

    def __init__(self, fd: FileDescriptor | int) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)