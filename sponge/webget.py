"""Fetch a URL over HTTP/1.1 and copy everything the server sends to an output stream."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import BinaryIO

from sponge.address import Address
from sponge.socket import TCPSocket


def build_request(host: str, path: str) -> bytes:
    """Return the HTTP/1.1 GET request for ``path`` on ``host``, asking the server to close afterwards."""
    return f"GET {path} HTTP/1.1\r\nHost: {host}\r\nConnection: close\r\n\r\n".encode()


def get_url(host: str, path: str, output: BinaryIO | None = None) -> bytes:
    """Request ``path`` from the HTTP service on ``host`` and write the whole reply to ``output``.

    ``output`` defaults to standard output. The reply is also returned.
    """
    sock = TCPSocket()
    try:
        sock.connect(Address(host, "http"))
        sock.write(build_request(host, path))
        chunks: list[bytes] = []
        while not sock.eof:
            chunks.append(sock.read())
    finally:
        if not sock.closed:
            sock.close()
    reply = b"".join(chunks)
    out = sys.stdout.buffer if output is None else output
    out.write(reply)
    out.flush()
    return reply


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point: ``webget HOST PATH``. Returns the exit status."""
    if argv is None:
        prog, args = (sys.argv[0] if sys.argv else "webget"), sys.argv[1:]
    else:
        prog, args = "webget", list(argv)

    if len(args) != 2:
        print(f"Usage: {prog} HOST PATH", file=sys.stderr)
        print(f"\tExample: {prog} stanford.edu /class/cs144", file=sys.stderr)
        return 1

    host, path = args
    try:
        get_url(host, path)
    except (OSError, RuntimeError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())