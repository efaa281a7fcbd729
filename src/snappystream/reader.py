"""
Framing reader.

Consumes a Snappy framed stream one frame at a time and exposes the decoded
bytes as a flat readable stream.


FRAME DISPATCH
--------------
  0xff (stream identifier): Validate "sNaPpY", produce nothing.
  0x00 (compressed):        Decompress, verify CRC, buffer output.
  0x01 (uncompressed):      Verify CRC, buffer output.
  0xfe, 0x80-0xfd:          Skip payload unread.
  0x02-0x7f:                Skip payload, then fail.

The stream identifier MUST be the first frame. It may recur later, for
example when framed streams are concatenated.


BUFFERING
---------
A frame decodes to up to 64 KiB, while callers may ask for any amount.
Decoded bytes go to a pending buffer; reads are served from it and at most
one data frame is decoded per call when it runs short.


END OF STREAM
-------------
Running out of input exactly at a frame boundary is a clean end of stream.
Running out inside a frame is corruption and raises `TruncatedFrameError`.
"""

from __future__ import annotations

import errno
import io
import logging
from enum import Enum
from typing import BinaryIO

from . import config
from .buffers import ScratchBuffer
from .codec import DEFAULT_CODEC, BlockCodec
from .constants import (
    CHECKSUM_SIZE,
    HEADER_SIZE,
    MAX_BLOCK_SIZE,
    MAX_FRAME_LENGTH,
    STREAM_IDENTIFIER_MAGIC,
    ChunkType,
)
from .crc import crc32c, unmask_checksum
from .exceptions import (
    BlockTooLargeError,
    ChecksumMismatchError,
    FrameFormatError,
    InvalidStreamIdentifierError,
    MissingStreamIdentifierError,
    TruncatedFrameError,
    UnskippableFrameError,
)
from .frame import FrameHeader

logger = logging.getLogger(__name__)


class ChecksumPolicy(Enum):
    """How a reader treats the CRC32C stored in data frames."""

    VERIFY = "verify"
    """Recompute and compare; a mismatch is an error."""

    SKIP = "skip"
    """Read the checksum but do not check it."""


class FrameReader(io.RawIOBase):
    """
    Readable stream that decodes a Snappy framed source.

    The source is borrowed, not owned: closing the reader leaves it open.

    Usage::

        reader = FrameReader(source)
        data = reader.read()
    """

    def __init__(
        self,
        source: BinaryIO,
        checksum: ChecksumPolicy | str | None = None,
        codec: BlockCodec | None = None,
    ) -> None:
        super().__init__()
        self._pending = bytearray()
        self._source = source
        self._codec = codec if codec is not None else DEFAULT_CODEC
        self._checksum = ChecksumPolicy(
            checksum if checksum is not None else config.SNAPPYSTREAM_CHECKSUM
        )
        self._seen_stream_identifier = False
        self._header = bytearray(HEADER_SIZE)
        self._payload = ScratchBuffer(limit=MAX_FRAME_LENGTH)

        if self._checksum is ChecksumPolicy.SKIP:
            logger.debug("Checksum verification disabled")

    @property
    def checksum(self) -> ChecksumPolicy:
        """Checksum policy fixed at construction."""
        return self._checksum

    def readable(self) -> bool:
        return True

    def readinto(self, b: bytearray | memoryview) -> int:
        """
        Fill `b` with up to `len(b)` decoded bytes.

        Returns:
            Bytes stored in `b`, or 0 at end of stream.
        """
        if self.closed:
            raise ValueError("I/O operation on closed file.")

        with memoryview(b) as view, view.cast("B") as out:
            wanted = len(out)
            if wanted == 0:
                return 0

            # Serve from the pending buffer when it already suffices.
            if len(self._pending) < wanted:
                self._read_data_frame()

            n = min(wanted, len(self._pending))
            out[:n] = self._pending[:n]
            del self._pending[:n]
            return n

    def readall(self) -> bytes:
        """Decode everything up to the end of the stream."""
        if self.closed:
            raise ValueError("I/O operation on closed file.")

        output = bytearray()
        while True:
            output += self._pending
            self._pending.clear()
            if not self._read_data_frame():
                return bytes(output)

    def close(self) -> None:
        self._pending.clear()
        super().close()

    # =========================================================================
    # Frame decoding
    # =========================================================================

    def _read_data_frame(self) -> bool:
        """
        Decode frames until one yields data.

        Returns:
            True if bytes were appended to the pending buffer, False on a
            clean end of stream.
        """
        while True:
            header = self._read_header()
            if header is None:
                return False

            chunk_type = header.chunk_type
            if not self._seen_stream_identifier and chunk_type is not ChunkType.STREAM_IDENTIFIER:
                raise MissingStreamIdentifierError(header.tag)

            match chunk_type:
                case ChunkType.STREAM_IDENTIFIER:
                    self._read_stream_identifier(header)

                case ChunkType.COMPRESSED | ChunkType.UNCOMPRESSED:
                    data = self._read_block(header)
                    if data:
                        self._pending += data
                        return True

                case ChunkType.PADDING | ChunkType.SKIPPABLE:
                    self._discard(header.length)
                    logger.debug(
                        "Skipped %s frame type %#04x of %d bytes",
                        chunk_type.value,
                        header.tag,
                        header.length,
                    )

                case ChunkType.UNSKIPPABLE:
                    # Consume the payload so the source stays frame aligned.
                    self._discard(header.length)
                    raise UnskippableFrameError(header.tag)

    def _read_header(self) -> FrameHeader | None:
        got = self._read_full(memoryview(self._header))
        if got == 0:
            return None
        if got < HEADER_SIZE:
            raise TruncatedFrameError("frame header", expected=HEADER_SIZE, actual=got)
        return FrameHeader.decode(self._header)

    def _read_stream_identifier(self, header: FrameHeader) -> None:
        if header.length != len(STREAM_IDENTIFIER_MAGIC):
            raise InvalidStreamIdentifierError(
                f"Invalid stream identifier: length must be "
                f"{len(STREAM_IDENTIFIER_MAGIC)} bytes, got {header.length}"
            )
        payload = self._read_payload(header.length, "stream identifier")
        if payload != STREAM_IDENTIFIER_MAGIC:
            raise InvalidStreamIdentifierError(
                f"Invalid stream identifier content: {bytes(payload)!r}"
            )
        if not self._seen_stream_identifier:
            logger.debug("Accepted stream identifier")
        self._seen_stream_identifier = True

    def _read_block(self, header: FrameHeader) -> bytes:
        # Step 1: Bound the declared length before reading anything.
        #
        # The length field can claim up to 16 MiB. Rejecting it here keeps a
        # corrupt or hostile header from driving allocation.
        if header.length > MAX_FRAME_LENGTH:
            raise BlockTooLargeError(header.length, MAX_FRAME_LENGTH, what="Frame")
        if header.length < CHECKSUM_SIZE:
            raise FrameFormatError(
                f"Data frame of {header.length} bytes too short for {CHECKSUM_SIZE}-byte checksum"
            )

        # Step 2: Split [masked_crc: 4 LE][block].
        payload = self._read_payload(header.length, "data frame")
        stored = int.from_bytes(payload[:CHECKSUM_SIZE], "little")
        block = payload[CHECKSUM_SIZE:]

        # Step 3: Recover the uncompressed bytes.
        if header.chunk_type is ChunkType.COMPRESSED:
            decoded_length = self._codec.decoded_length(block)
            if decoded_length > MAX_BLOCK_SIZE:
                raise BlockTooLargeError(decoded_length, MAX_BLOCK_SIZE, what="Decoded block")
            data = self._codec.decode(block)
            if len(data) > MAX_BLOCK_SIZE:
                raise BlockTooLargeError(len(data), MAX_BLOCK_SIZE, what="Decoded block")
        else:
            if len(block) > MAX_BLOCK_SIZE:
                raise BlockTooLargeError(len(block), MAX_BLOCK_SIZE, what="Uncompressed block")
            data = bytes(block)

        # Step 4: The checksum covers the uncompressed bytes.
        if self._checksum is ChecksumPolicy.VERIFY:
            expected = unmask_checksum(stored)
            actual = crc32c(data)
            if expected != actual:
                raise ChecksumMismatchError(expected, actual)

        return data

    def _read_payload(self, length: int, what: str) -> memoryview:
        view = self._payload.view(length)
        got = self._read_full(view)
        if got < length:
            raise TruncatedFrameError(what, expected=length, actual=got)
        return view

    def _discard(self, length: int) -> None:
        remaining = length
        while remaining:
            step = min(remaining, self._payload.limit)
            self._read_payload(step, "skipped frame")
            remaining -= step

    def _read_full(self, view: memoryview) -> int:
        """Read until `view` is full or the source is exhausted."""
        filled = 0
        while filled < len(view):
            chunk = self._source.read(len(view) - filled)
            if chunk is None:
                raise BlockingIOError(errno.EAGAIN, "Source has no data available")
            if not chunk:
                break
            view[filled : filled + len(chunk)] = chunk
            filled += len(chunk)
        return filled
