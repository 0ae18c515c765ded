# sponge

Building blocks for writing a user-space network stack in Python:

- `sponge.byte_stream.ByteStream` is a finite, flow-controlled byte stream
  held in memory, with a fixed capacity. Writers push bytes in until the
  stream is full. Readers peek, pop or read bytes from the other end. The
  writer signals when the input has ended.
- `sponge.buffer` provides `Buffer`, `BufferList` and `BufferViewList`. These
  byte containers drop bytes from the front without copying, and they can
  represent a packet built from several headers and a payload.
- `sponge.parser`:
  - `NetParser` reads big-endian integers from a buffer. When it runs out of
    data it records a `ParseResult`.
  - `unparse_u32`, `unparse_u16` and `unparse_u8` append integers to a
    `bytearray` in network byte order.
- `sponge.util` provides:
  - the Internet checksum (`InternetChecksum`);
  - a millisecond clock counted from program start (`timestamp_ms`);
  - a random generator seeded from OS entropy (`get_random_generator`);
  - a hex dump formatter (`format_hexdump`, `hexdump`).
- `sponge.address.Address` holds a socket address. It can be resolved from a
  host name and a service, built from a dotted quad and a port, or built from
  a 32-bit number.
- Thin, reference-counted wrappers over POSIX descriptors and `poll`:
  - `sponge.file_descriptor.FileDescriptor`;
  - `sponge.socket`, with `UDPSocket`, `TCPSocket` and `LocalStreamSocket`;
  - `sponge.eventloop.EventLoop`.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install .[test]
pytest
```

## Byte streams

```python
from sponge.byte_stream import ByteStream

stream = ByteStream(2)
stream.write(b"cat")          # returns 2; only "ca" fits
stream.peek_output(2)         # b"ca"
stream.pop_output(1)
stream.write(b"t")            # returns 1
stream.end_input()
stream.read(2)                # b"at"
stream.eof()                  # True
```

## Parsing and unparsing

Errors in `NetParser` are sticky. Once `parser.error` is no longer
`ParseResult.NO_ERROR`, every further read returns 0 and consumes nothing.

```python
from sponge.parser import NetParser, ParseResult, unparse_u16, unparse_u32

data = bytearray()
unparse_u32(data, 0xDEADBEEF)
unparse_u16(data, 0xC0C0)

parser = NetParser(bytes(data))
parser.u32()                  # 0xDEADBEEF
parser.u16()                  # 0xC0C0
parser.u8()                   # 0; parser.error is now ParseResult.PACKET_TOO_SHORT
```

## Checksums

```python
from sponge.util import InternetChecksum

checksum = InternetChecksum()
checksum.add(b"\x45\x00\x00\x1c")
checksum.value()              # one's-complement checksum as an int
```

## Addresses and sockets

```python
from sponge.address import Address
from sponge.socket import UDPSocket

dns_server = Address.from_ip("18.71.0.151", 53)
dns_server.ipv4_numeric()     # 0x12470097
str(dns_server)               # "18.71.0.151:53"

receiver = UDPSocket()
receiver.bind(Address.from_ip("127.0.0.1", 40000))
sender = UDPSocket()
sender.sendto(Address.from_ip("127.0.0.1", 40000), b"hi there")
datagram = receiver.recv()
datagram.payload              # b"hi there"
```

`EventLoop.add_rule` registers a callback for a descriptor in a `Direction`
(`IN` or `OUT`). Each call to `wait_next_event(timeout_ms)` returns a
`Result`: `SUCCESS`, `TIMEOUT` or `EXIT`.

## Fetching a web page

The `webget` command does the following:

1. It connects to the `http` service of a host.
2. It sends a `GET` request for a path, with `Connection: close`.
3. It writes everything the server sends back to standard output.

```
webget example.com /
```

If it is not given exactly two arguments, it prints a usage message and exits
with status 1. The same work is available from Python as
`sponge.webget.get_url(host, path)`. `sponge.webget.build_request` returns the
request bytes that are sent.

## What this package does not do

This package supplies the pieces a TCP implementation is built from. It does
not contain the implementation itself. In particular, it has none of the
following:

- a TCP receiver, sender or connection;
- a stream reassembler;
- wrapping sequence numbers;
- access to TUN/TAP devices.

`webget` and the socket classes use the operating system's own TCP and UDP.