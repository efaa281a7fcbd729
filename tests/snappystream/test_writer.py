"""Tests for the framing writer."""

from __future__ import annotations

import io
import random
from collections.abc import Callable

import pytest

from snappystream import CompressionError, FrameWriter
from snappystream.codec import BlockCodec, SnappyBlockCodec
from snappystream.constants import (
    MAX_CHUNK_SIZE,
    MAX_ENCODED_BLOCK_SIZE,
    MAX_FRAME_LENGTH,
    STREAM_IDENTIFIER,
    TAG_COMPRESSED,
)
from snappystream.crc import crc32c, mask_checksum
from snappystream.exceptions import BlockTooLargeError

ParseFrames = Callable[[bytes], list[tuple[int, bytes]]]


class FailingCodec(SnappyBlockCodec):
    """Codec whose compressor always fails."""

    def encode(self, src: bytes | bytearray | memoryview) -> bytes:
        raise CompressionError("refusing to compress")


class BloatingCodec(SnappyBlockCodec):
    """Codec producing blocks larger than the format allows."""

    def encode(self, src: bytes | bytearray | memoryview) -> bytes:
        return b"\x00" * (MAX_ENCODED_BLOCK_SIZE + 1)


class TrickleSink(io.RawIOBase):
    """Raw sink accepting at most a few bytes per write call."""

    def __init__(self, step: int) -> None:
        super().__init__()
        self.step = step
        self.data = bytearray()
        self.calls = 0

    def writable(self) -> bool:
        return True

    def write(self, b: bytes | bytearray | memoryview) -> int:
        self.calls += 1
        taken = bytes(b[: self.step])
        self.data += taken
        return len(taken)


def _write(data: bytes) -> bytes:
    sink = io.BytesIO()
    writer = FrameWriter(sink)
    assert writer.write(data) == len(data)
    return sink.getvalue()


class TestStreamIdentifier:
    """Tests for identifier emission."""

    def test_identifier_precedes_first_frame(self) -> None:
        """Output starts with the stream identifier."""
        assert _write(b"test data").startswith(STREAM_IDENTIFIER)

    def test_identifier_written_once(self, parse_frames: ParseFrames) -> None:
        """Several writes share one identifier."""
        sink = io.BytesIO()
        writer = FrameWriter(sink)
        writer.write(b"first")
        writer.write(b"second")

        tags = [tag for tag, _ in parse_frames(sink.getvalue())]
        assert tags == [0xFF, TAG_COMPRESSED, TAG_COMPRESSED]

    def test_empty_write_emits_nothing(self) -> None:
        """Writing nothing produces no bytes and reports zero."""
        sink = io.BytesIO()
        writer = FrameWriter(sink)
        assert writer.write(b"") == 0
        assert sink.getvalue() == b""

    def test_close_without_data_emits_identifier(self) -> None:
        """An unused writer still closes to a valid, empty stream."""
        sink = io.BytesIO()
        FrameWriter(sink).close()
        assert sink.getvalue() == STREAM_IDENTIFIER

    def test_close_after_data_adds_nothing(self) -> None:
        """Closing does not repeat the identifier."""
        sink = io.BytesIO()
        with FrameWriter(sink) as writer:
            writer.write(b"payload")
        assert sink.getvalue().count(STREAM_IDENTIFIER) == 1


class TestFrameLayout:
    """Tests for the bytes of emitted frames."""

    def test_simple_input_exact_bytes(self) -> None:
        """'test' encodes to identifier + 8-byte header + compressed block."""
        compressed = SnappyBlockCodec().encode(b"test")
        checksum = mask_checksum(crc32c(b"test"))

        expected = (
            STREAM_IDENTIFIER
            + bytes([TAG_COMPRESSED])
            + (len(compressed) + 4).to_bytes(3, "little")
            + checksum.to_bytes(4, "little")
            + compressed
        )
        assert _write(b"test") == expected

    def test_checksum_covers_uncompressed_bytes(self, parse_frames: ParseFrames) -> None:
        """The stored checksum is of the input, not of the block."""
        data = b"A" * 1000
        (_, payload) = parse_frames(_write(data))[1]
        stored = int.from_bytes(payload[:4], "little")
        assert stored == mask_checksum(crc32c(data))

    def test_always_compressed(self, parse_frames: ParseFrames) -> None:
        """Even incompressible data goes out in compressed frames."""
        data = random.Random(7).randbytes(MAX_CHUNK_SIZE)
        frames = parse_frames(_write(data))[1:]
        assert [tag for tag, _ in frames] == [TAG_COMPRESSED]
        assert len(frames[0][1]) <= MAX_FRAME_LENGTH


class TestChunking:
    """Tests for splitting large writes."""

    def test_large_write_split_into_chunks(self, parse_frames: ParseFrames) -> None:
        """Input is cut into MAX_CHUNK_SIZE pieces in order."""
        data = bytes(i % 251 for i in range(2 * MAX_CHUNK_SIZE + 5))
        frames = parse_frames(_write(data))[1:]

        codec = SnappyBlockCodec()
        chunks = [codec.decode(payload[4:]) for _, payload in frames]
        assert [len(c) for c in chunks] == [MAX_CHUNK_SIZE, MAX_CHUNK_SIZE, 5]
        assert b"".join(chunks) == data

    def test_exact_chunk_boundary(self, parse_frames: ParseFrames) -> None:
        """Input of exactly one chunk is one frame."""
        frames = parse_frames(_write(b"Y" * MAX_CHUNK_SIZE))
        assert len(frames) == 2

    def test_single_call_matches_piecewise_writes(self) -> None:
        """One large write produces the same bytes as chunk-sized writes."""
        data = bytes(i % 97 for i in range(3 * MAX_CHUNK_SIZE + 123))

        sink = io.BytesIO()
        writer = FrameWriter(sink)
        for start in range(0, len(data), MAX_CHUNK_SIZE):
            writer.write(data[start : start + MAX_CHUNK_SIZE])

        assert sink.getvalue() == _write(data)

    def test_accepts_memoryview_and_bytearray(self) -> None:
        """Any bytes-like input is accepted."""
        data = b"bytes-like input" * 10
        assert _write(bytearray(data)) == _write(data)
        assert _write(memoryview(data)) == _write(data)


class TestErrors:
    """Tests for failure handling."""

    def test_codec_failure_writes_nothing(self) -> None:
        """A compressor failure leaves the sink untouched."""
        sink = io.BytesIO()
        writer = FrameWriter(sink, codec=FailingCodec())
        with pytest.raises(CompressionError, match="refusing"):
            writer.write(b"data")
        assert sink.getvalue() == b""

    def test_oversized_block_rejected(self) -> None:
        """A block beyond the encoded ceiling is refused before writing."""
        sink = io.BytesIO()
        writer = FrameWriter(sink, codec=BloatingCodec())
        with pytest.raises(BlockTooLargeError, match="exceeds"):
            writer.write(b"data")
        assert sink.getvalue() == b""

    def test_sink_failure_propagates(self) -> None:
        """Errors from the sink reach the caller unchanged."""
        sink = io.BytesIO()
        sink.close()
        writer = FrameWriter(sink)
        with pytest.raises(ValueError):
            writer.write(b"data")

    def test_write_after_close(self) -> None:
        """A closed writer refuses input."""
        writer = FrameWriter(io.BytesIO())
        writer.close()
        with pytest.raises(ValueError, match="closed"):
            writer.write(b"data")


class TestSink:
    """Tests for interaction with the wrapped sink."""

    def test_short_writes_completed(self) -> None:
        """Partial writes by a raw sink are retried until complete."""
        sink = TrickleSink(step=7)
        writer = FrameWriter(sink)
        writer.write(b"hello world" * 20)

        assert bytes(sink.data) == _write(b"hello world" * 20)
        assert sink.calls > 3

    def test_close_leaves_sink_open(self) -> None:
        """The writer borrows the sink."""
        sink = io.BytesIO()
        with FrameWriter(sink) as writer:
            writer.write(b"data")
        assert not sink.closed

    def test_default_codec_satisfies_protocol(self) -> None:
        """The cramjam-backed codec implements BlockCodec."""
        assert isinstance(SnappyBlockCodec(), BlockCodec)
