"""
Snappy framed stream codec.

Wraps raw Snappy blocks in the self-describing framing format: a stream
identifier followed by typed, length-prefixed, checksummed frames. Both
directions are plain `io` streams, so they compose with files, sockets and
buffered wrappers.

Usage::

    from snappystream import FrameReader, FrameWriter

    with FrameWriter(sink) as writer:
        writer.write(data)

    original = FrameReader(source).read()

    # Or, for data already in memory:
    framed = frame_compress(data)
    original = frame_decompress(framed)

The format follows the Snappy framing specification:
https://github.com/google/snappy/blob/master/framing_format.txt
"""

from __future__ import annotations

import io

from .codec import BlockCodec, SnappyBlockCodec
from .constants import MAX_BLOCK_SIZE, STREAM_IDENTIFIER, ChunkType
from .crc import crc32c, mask_checksum, unmask_checksum
from .exceptions import (
    BlockTooLargeError,
    ChecksumMismatchError,
    CompressionError,
    DecompressionError,
    FrameFormatError,
    InvalidStreamIdentifierError,
    MissingStreamIdentifierError,
    SnappyStreamError,
    TruncatedFrameError,
    UnskippableFrameError,
)
from .reader import ChecksumPolicy, FrameReader
from .writer import FrameWriter


def frame_compress(data: bytes) -> bytes:
    """
    Frame and compress `data` in one call.

    Empty input still yields the stream identifier.
    """
    sink = io.BytesIO()
    with FrameWriter(sink) as writer:
        writer.write(data)
    return sink.getvalue()


def frame_decompress(data: bytes, checksum: ChecksumPolicy | str | None = None) -> bytes:
    """
    Decode a complete framed stream held in memory.

    Raises:
        SnappyStreamError: If the stream is malformed or corrupted.
    """
    with FrameReader(io.BytesIO(data), checksum=checksum) as reader:
        return reader.readall()


__all__ = [
    # Streams
    "FrameReader",
    "FrameWriter",
    "ChecksumPolicy",
    # One-shot helpers
    "frame_compress",
    "frame_decompress",
    # Format
    "ChunkType",
    "MAX_BLOCK_SIZE",
    "STREAM_IDENTIFIER",
    "crc32c",
    "mask_checksum",
    "unmask_checksum",
    # Block codec
    "BlockCodec",
    "SnappyBlockCodec",
    # Exceptions
    "SnappyStreamError",
    "FrameFormatError",
    "MissingStreamIdentifierError",
    "InvalidStreamIdentifierError",
    "BlockTooLargeError",
    "UnskippableFrameError",
    "TruncatedFrameError",
    "ChecksumMismatchError",
    "CompressionError",
    "DecompressionError",
]
