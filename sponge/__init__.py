"""Byte streams, buffers, wire parsing, checksums, addresses, socket wrappers and an event loop."""

__version__ = "0.1.0"