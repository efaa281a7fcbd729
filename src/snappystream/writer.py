"""
Framing writer.

Turns an arbitrary byte stream into Snappy framed output::

    [stream_identifier][frame_1][frame_2]...[frame_n]

Input is cut into chunks of at most `MAX_CHUNK_SIZE` bytes. Each chunk is
compressed on its own and written as one compressed frame::

    [0x00][length: 3 LE][masked_crc32c: 4 LE][raw snappy block]

The checksum covers the UNCOMPRESSED chunk. The writer always emits
compressed frames; uncompressed frames are only ever read.
"""

from __future__ import annotations

import errno
import io
import logging
from typing import BinaryIO

from .buffers import ScratchBuffer
from .codec import DEFAULT_CODEC, BlockCodec
from .constants import (
    CHECKSUM_SIZE,
    HEADER_SIZE,
    MAX_CHUNK_SIZE,
    MAX_ENCODED_BLOCK_SIZE,
    STREAM_IDENTIFIER,
    TAG_COMPRESSED,
)
from .crc import masked_crc32c
from .exceptions import BlockTooLargeError
from .frame import FrameHeader

logger = logging.getLogger(__name__)

_PREFIX_SIZE = HEADER_SIZE + CHECKSUM_SIZE
"""Header plus checksum: everything written before the block itself."""


class FrameWriter(io.RawIOBase):
    """
    Writable stream that frames and compresses everything written to it.

    The wrapped sink is borrowed, not owned: closing the writer flushes the
    sink but leaves it open.

    Usage::

        with FrameWriter(sink) as writer:
            writer.write(data)
    """

    def __init__(self, sink: BinaryIO, codec: BlockCodec | None = None) -> None:
        super().__init__()
        self._sink = sink
        self._codec = codec if codec is not None else DEFAULT_CODEC
        self._wrote_stream_identifier = False
        self._frame = ScratchBuffer(limit=_PREFIX_SIZE + MAX_ENCODED_BLOCK_SIZE)

    def writable(self) -> bool:
        return True

    def write(self, b: bytes | bytearray | memoryview) -> int:
        """
        Frame and write all of `b`.

        Returns:
            The number of input bytes consumed, always `len(b)`.

        Raises:
            CompressionError: If the codec rejects a chunk.
            BlockTooLargeError: If a compressed chunk exceeds the format limit.
            OSError: If the sink fails. Earlier frames of the same call may
                already have been written.
        """
        if self.closed:
            raise ValueError("I/O operation on closed file.")

        data = memoryview(b).cast("B")
        if data:
            largest = min(len(data), MAX_CHUNK_SIZE)
            bound = _PREFIX_SIZE + self._codec.max_encoded_length(largest)
            self._frame.reserve(min(bound, self._frame.limit))

        for start in range(0, len(data), MAX_CHUNK_SIZE):
            self._write_block(data[start : start + MAX_CHUNK_SIZE])
        return len(data)

    def _write_block(self, chunk: memoryview) -> None:
        if len(chunk) > MAX_CHUNK_SIZE:
            raise BlockTooLargeError(len(chunk), MAX_CHUNK_SIZE, what="Chunk")

        # Step 1: Compress before touching the sink.
        #
        # A codec failure must not leave a half-written frame behind.
        compressed = self._codec.encode(chunk)
        if len(compressed) > MAX_ENCODED_BLOCK_SIZE:
            raise BlockTooLargeError(
                len(compressed), MAX_ENCODED_BLOCK_SIZE, what="Compressed block"
            )

        # Step 2: Stream identifier goes out once, ahead of the first frame.
        if not self._wrote_stream_identifier:
            self._write_stream_identifier()

        # Step 3: Assemble [header][checksum][block] in the scratch buffer.
        header = FrameHeader(tag=TAG_COMPRESSED, length=len(compressed) + CHECKSUM_SIZE)
        frame = self._frame.view(_PREFIX_SIZE + len(compressed))
        frame[:HEADER_SIZE] = header.encode()
        frame[HEADER_SIZE:_PREFIX_SIZE] = masked_crc32c(chunk).to_bytes(CHECKSUM_SIZE, "little")
        frame[_PREFIX_SIZE:] = compressed

        # Step 4: Header first, then the block.
        self._write_all(frame[:_PREFIX_SIZE])
        self._write_all(frame[_PREFIX_SIZE:])

    def _write_stream_identifier(self) -> None:
        self._write_all(memoryview(STREAM_IDENTIFIER))
        self._wrote_stream_identifier = True
        logger.debug("Wrote stream identifier")

    def _write_all(self, view: memoryview) -> None:
        # Raw sinks may accept fewer bytes than offered.
        while view:
            written = self._sink.write(view)
            if written is None:
                raise BlockingIOError(errno.EAGAIN, "Sink is not ready for writing")
            view = view[written:]

    def flush(self) -> None:
        super().flush()
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()

    def close(self) -> None:
        """
        Finish the stream.

        A writer that never received data still emits the stream identifier,
        so the result is a valid (empty) framed stream.
        """
        if self.closed:
            return
        try:
            if not self._wrote_stream_identifier:
                self._write_stream_identifier()
        finally:
            super().close()
