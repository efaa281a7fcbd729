"""
Raw block codec used inside frames.

The framing layer never looks inside a block; it only needs to turn one chunk
of at most 64 KiB into a raw Snappy block and back. Any object satisfying
`BlockCodec` can be plugged into the reader and writer. The default delegates
to the `cramjam` library.

Reference: https://github.com/google/snappy/blob/main/format_description.txt
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import cramjam

from .exceptions import CompressionError, DecompressionError


@runtime_checkable
class BlockCodec(Protocol):
    """
    Raw (unframed) block compressor/decompressor.

    Implementations report failures as `CompressionError` or
    `DecompressionError` so the reader and writer can pass them through.
    """

    def encode(self, src: bytes | bytearray | memoryview) -> bytes:
        """Compress one block."""
        ...

    def decode(self, src: bytes | bytearray | memoryview) -> bytes:
        """Decompress one block."""
        ...

    def decoded_length(self, src: bytes | bytearray | memoryview) -> int:
        """Read the uncompressed size announced by a compressed block."""
        ...

    def max_encoded_length(self, n: int) -> int:
        """Upper bound on the compressed size of `n` input bytes."""
        ...


class SnappyBlockCodec:
    """`BlockCodec` backed by the `cramjam.snappy` raw block functions."""

    def encode(self, src: bytes | bytearray | memoryview) -> bytes:
        try:
            return bytes(cramjam.snappy.compress_raw(src))
        except cramjam.CompressionError as e:
            raise CompressionError(f"Snappy compression failed: {e}") from e

    def decode(self, src: bytes | bytearray | memoryview) -> bytes:
        try:
            return bytes(cramjam.snappy.decompress_raw(src))
        except cramjam.DecompressionError as e:
            raise DecompressionError(f"Snappy decompression failed: {e}") from e

    def decoded_length(self, src: bytes | bytearray | memoryview) -> int:
        # The block starts with a varint of its uncompressed length.
        try:
            return cramjam.snappy.decompress_raw_len(src)
        except cramjam.DecompressionError as e:
            raise DecompressionError(f"Invalid Snappy block length: {e}") from e

    def max_encoded_length(self, n: int) -> int:
        # Bound from the reference MaxCompressedLength.
        return 32 + n + n // 6


DEFAULT_CODEC = SnappyBlockCodec()
"""Shared stateless codec instance."""
