"""
Shared fixtures for framed stream tests.

Hand-built frames let the reader be tested against input the writer would
never produce: uncompressed blocks, padding, reserved types, corruption.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from snappystream.codec import SnappyBlockCodec
from snappystream.constants import TAG_COMPRESSED, TAG_UNCOMPRESSED
from snappystream.crc import masked_crc32c


def _make_frame(tag: int, payload: bytes) -> bytes:
    return bytes([tag]) + len(payload).to_bytes(3, "little") + payload


def _make_data_frame(
    data: bytes, *, compressed: bool = True, checksum: int | None = None
) -> bytes:
    if checksum is None:
        checksum = masked_crc32c(data)
    block = SnappyBlockCodec().encode(data) if compressed else data
    tag = TAG_COMPRESSED if compressed else TAG_UNCOMPRESSED
    return _make_frame(tag, checksum.to_bytes(4, "little") + block)


def _parse_frames(stream: bytes) -> list[tuple[int, bytes]]:
    frames = []
    pos = 0
    while pos < len(stream):
        tag = stream[pos]
        length = int.from_bytes(stream[pos + 1 : pos + 4], "little")
        frames.append((tag, stream[pos + 4 : pos + 4 + length]))
        pos += 4 + length
    return frames


@pytest.fixture
def make_frame() -> Callable[[int, bytes], bytes]:
    """Build a raw frame: [tag][length: 3 LE][payload]."""
    return _make_frame


@pytest.fixture
def make_data_frame() -> Callable[..., bytes]:
    """Build a compressed (default) or uncompressed frame carrying data."""
    return _make_data_frame


@pytest.fixture
def parse_frames() -> Callable[[bytes], list[tuple[int, bytes]]]:
    """Split a framed stream into (tag, payload) pairs."""
    return _parse_frames
