"""
Wire constants for the Snappy framing format.

Reference: https://github.com/google/snappy/blob/master/framing_format.txt
"""

from __future__ import annotations

from enum import Enum

from typing_extensions import Final

# ===========================================================================
# Stream Identifier
# ===========================================================================

STREAM_IDENTIFIER_MAGIC: Final = b"sNaPpY"
"""Payload of the stream identifier frame."""

STREAM_IDENTIFIER: Final = b"\xff\x06\x00\x00" + STREAM_IDENTIFIER_MAGIC
"""The complete 10-byte stream identifier frame.

Format: [type=0xff][length=6 as 3-byte LE][magic="sNaPpY"]
"""

# ===========================================================================
# Frame Layout
# ===========================================================================
#
#   [type: 1 byte][length: 3 bytes LE][data: length bytes]
#
# Data frames start their data section with a 4-byte masked checksum.

HEADER_SIZE: Final = 4
"""Size of the type + length header preceding every frame."""

CHECKSUM_SIZE: Final = 4
"""Size of the masked CRC32C prefix of compressed/uncompressed frames."""

MAX_LENGTH_FIELD: Final = (1 << 24) - 1
"""Largest value the 3-byte length field can carry."""

# ===========================================================================
# Block Size Limits
# ===========================================================================

MAX_BLOCK_SIZE: Final = 65536
"""Maximum decoded bytes carried by one data frame (64 KiB).

Readers reject frames that decode to more than this, so a decoder can
always work with bounded buffers.
"""

MAX_CHUNK_SIZE: Final = MAX_BLOCK_SIZE - CHECKSUM_SIZE
"""Input bytes the writer places in a single frame."""

MAX_ENCODED_BLOCK_SIZE: Final = 32 + MAX_BLOCK_SIZE + MAX_BLOCK_SIZE // 6
"""Worst-case raw Snappy output for a maximal block.

Incompressible input expands slightly; this is the bound the block format
guarantees for `MAX_BLOCK_SIZE` input bytes.
"""

MAX_FRAME_LENGTH: Final = MAX_ENCODED_BLOCK_SIZE + CHECKSUM_SIZE
"""Largest declared length accepted for a compressed or uncompressed frame."""


# ===========================================================================
# Chunk Types
# ===========================================================================


class ChunkType(Enum):
    """
    Kind of a frame, decoded once from its tag byte.

    Every tag value in [0, 255] belongs to exactly one member. Reserved
    ranges collapse into `SKIPPABLE` and `UNSKIPPABLE`.
    """

    COMPRESSED = "compressed"
    """0x00: [masked_crc32c][raw snappy block]."""

    UNCOMPRESSED = "uncompressed"
    """0x01: [masked_crc32c][raw bytes]."""

    UNSKIPPABLE = "unskippable"
    """0x02-0x7f: reserved, a reader must fail on these."""

    SKIPPABLE = "skippable"
    """0x80-0xfd: reserved, a reader must skip these."""

    PADDING = "padding"
    """0xfe: filler, skipped without inspection."""

    STREAM_IDENTIFIER = "stream_identifier"
    """0xff: the 'sNaPpY' marker."""

    @classmethod
    def from_tag(cls, tag: int) -> ChunkType:
        """
        Classify a frame tag byte.

        Raises:
            ValueError: If the tag is not a byte value.
        """
        if not 0 <= tag <= 0xFF:
            raise ValueError(f"Frame tag must be a byte value, got {tag}")
        if tag == TAG_COMPRESSED:
            return cls.COMPRESSED
        if tag == TAG_UNCOMPRESSED:
            return cls.UNCOMPRESSED
        if tag == TAG_PADDING:
            return cls.PADDING
        if tag == TAG_STREAM_IDENTIFIER:
            return cls.STREAM_IDENTIFIER
        if tag <= 0x7F:
            return cls.UNSKIPPABLE
        return cls.SKIPPABLE


TAG_COMPRESSED: Final = 0x00
TAG_UNCOMPRESSED: Final = 0x01
TAG_PADDING: Final = 0xFE
TAG_STREAM_IDENTIFIER: Final = 0xFF
