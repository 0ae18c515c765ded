"""IPv4 socket addresses and DNS resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

_AI_ALL = getattr(socket, "AI_ALL", 0)


def _resolve(node: str, service: str, flags: int) -> tuple[int, tuple[Any, ...]]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise socket.gaierror(exc.errno, f"getaddrinfo({node}, {service}): {exc.strerror}") from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canon, sockaddr = results[0]
    return family, tuple(sockaddr)


class Address:
    """A socket address: an IP address and a port."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, host: str, service: str | int) -> None:
        """Resolve a host name and a service name (such as ``"http"``) or port."""
        self._family, self._sockaddr = _resolve(host, str(service), _AI_ALL)

    @classmethod
    def _make(cls, family: int, sockaddr: tuple[Any, ...]) -> Address:
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = tuple(sockaddr)
        return address

    @classmethod
    def from_ip(cls, ip: str, port: int = 0) -> Address:
        """Build from a dotted-quad string and a numeric port, without any lookup."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        return cls._make(*_resolve(ip, str(port), flags))

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build from a 32-bit numeric IPv4 address (port 0)."""
        return cls._make(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    @classmethod
    def from_sockaddr(cls, sockaddr: tuple[Any, ...]) -> Address:
        """Build from a tuple as returned by the socket module (2-tuple IPv4, 4-tuple IPv6)."""
        if len(sockaddr) == 2:
            return cls._make(socket.AF_INET, sockaddr)
        if len(sockaddr) == 4:
            return cls._make(socket.AF_INET6, sockaddr)
        raise ValueError("invalid sockaddr size")

    @property
    def family(self) -> int:
        """The address family."""
        return self._family

    @property
    def sockaddr(self) -> tuple[Any, ...]:
        """The address as a tuple suitable for the socket module."""
        return self._sockaddr

    def ip_port(self) -> tuple[str, int]:
        """Return the IP address string and the numeric port."""
        return self._sockaddr[0], int(self._sockaddr[1])

    @property
    def ip(self) -> str:
        """The IP address string."""
        return self.ip_port()[0]

    @property
    def port(self) -> int:
        """The numeric port."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """Return the IPv4 address as a 32-bit integer; raise ValueError for other families."""
        if self._family != socket.AF_INET or len(self._sockaddr) != 2:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address({str(self)!r})"