"""Exception hierarchy for the Snappy framed stream codec."""

from __future__ import annotations


class SnappyStreamError(Exception):
    """
    Base exception for all framed stream errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class FrameFormatError(SnappyStreamError):
    """Base class for violations of the frame layout."""


class MissingStreamIdentifierError(FrameFormatError):
    """
    Raised when a frame appears before the stream identifier.

    Attributes:
        tag: Tag byte of the offending frame.
    """

    def __init__(self, tag: int) -> None:
        self.tag = tag
        super().__init__(f"Missing stream identifier: first frame has type {tag:#04x}")


class InvalidStreamIdentifierError(FrameFormatError):
    """Raised when a stream identifier frame has the wrong length or content."""


class BlockTooLargeError(FrameFormatError):
    """
    Raised when a frame declares or produces more bytes than allowed.

    Attributes:
        length: The offending size.
        limit: The maximum allowed size (inclusive).
    """

    def __init__(self, length: int, limit: int, *, what: str = "Block") -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"{what} of {length} bytes exceeds maximum of {limit} bytes")


class UnskippableFrameError(FrameFormatError):
    """
    Raised when a reserved unskippable frame (0x02-0x7f) is encountered.

    Attributes:
        tag: Tag byte of the frame.
    """

    def __init__(self, tag: int) -> None:
        self.tag = tag
        super().__init__(f"Unrecognized unskippable frame type {tag:#04x}")


class TruncatedFrameError(FrameFormatError, EOFError):
    """
    Raised when the source ends in the middle of a frame.

    This is distinct from a clean end of stream at a frame boundary.

    Attributes:
        expected: Bytes the frame required.
        actual: Bytes actually available.
    """

    def __init__(self, what: str, *, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Stream ended prematurely while reading {what}: "
            f"expected {expected} bytes, got {actual}"
        )


class ChecksumMismatchError(SnappyStreamError):
    """
    Raised when a block's CRC32C does not match the stored value.

    Attributes:
        expected: Unmasked checksum read from the frame.
        actual: Checksum computed over the decoded bytes.
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"CRC mismatch: stored {expected:#010x}, computed {actual:#010x}")


class CompressionError(SnappyStreamError):
    """Raised when the block codec fails to compress a chunk."""


class DecompressionError(SnappyStreamError):
    """Raised when the block codec fails to decompress a block."""
