"""
Frame header model.

Every frame starts with the same 4 bytes::

    [type: 1 byte][length: 3 bytes LE]

The length counts the data section only, never the header itself.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .constants import HEADER_SIZE, MAX_LENGTH_FIELD, ChunkType


class FrameHeader(BaseModel):
    """Type tag and data length of one frame."""

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    tag: int = Field(ge=0, le=0xFF)
    """Raw type byte."""

    length: int = Field(ge=0, le=MAX_LENGTH_FIELD)
    """Size of the data section in bytes."""

    @property
    def chunk_type(self) -> ChunkType:
        """Kind of frame this header introduces."""
        return ChunkType.from_tag(self.tag)

    def encode(self) -> bytes:
        """Serialize to the 4-byte wire form."""
        return bytes([self.tag]) + self.length.to_bytes(3, "little")

    @classmethod
    def decode(cls, data: bytes | bytearray | memoryview) -> FrameHeader:
        """
        Parse a header from exactly `HEADER_SIZE` bytes.

        Raises:
            ValueError: If `data` has the wrong size.
        """
        if len(data) != HEADER_SIZE:
            raise ValueError(f"Frame header requires {HEADER_SIZE} bytes, got {len(data)}")
        return cls(tag=data[0], length=int.from_bytes(data[1:HEADER_SIZE], "little"))
