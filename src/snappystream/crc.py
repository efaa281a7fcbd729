"""
CRC32C checksums and the framing format's checksum mask.

Data frames carry a CRC32C (Castagnoli polynomial) of their *uncompressed*
bytes. The value is stored "masked"::

    masked = rotate_right(crc, 15) + 0xa282ead8

Checksumming data that itself embeds CRCs tends to produce degenerate
values; the rotation and offset break that pattern.
"""

from __future__ import annotations

from typing_extensions import Final

CRC32C_POLYNOMIAL: Final = 0x82F63B78
"""Castagnoli polynomial, bit-reversed form of 0x1EDC6F41."""

CRC32C_MASK_DELTA: Final = 0xA282EAD8
"""Constant added after rotation when masking."""

_UINT32_MASK: Final = 0xFFFFFFFF


def _crc32c_table() -> list[int]:
    """
    Generate the 256-entry CRC32C lookup table.

    Each entry is the CRC of a single byte value, processed bit by bit:
    shift right, and XOR in the polynomial whenever the dropped bit was set.
    """
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ CRC32C_POLYNOMIAL
            else:
                crc >>= 1
        table.append(crc)
    return table


_CRC32C_TABLE: Final = _crc32c_table()


def crc32c(data: bytes | bytearray | memoryview, crc: int = 0) -> int:
    """
    Compute the CRC32C of `data`.

    Args:
        data: Input bytes.
        crc: Checksum of preceding data, to continue an incremental
            computation. Use 0 to start fresh.

    Returns:
        32-bit CRC32C checksum.
    """
    table = _CRC32C_TABLE

    # Work on the inverted register, as the standard algorithm does.
    crc ^= _UINT32_MASK
    for byte in data:
        crc = table[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _UINT32_MASK


def _check_uint32(value: int) -> None:
    if not 0 <= value <= _UINT32_MASK:
        raise ValueError(f"Checksum must fit in 32 bits, got {value:#x}")


def mask_checksum(crc: int) -> int:
    """
    Mask a CRC32C for storage in a frame.

    rotate_right(x, 15) = (x >> 15) | (x << 17), reduced to 32 bits after the
    addition.
    """
    _check_uint32(crc)
    return (((crc >> 15) | (crc << 17)) + CRC32C_MASK_DELTA) & _UINT32_MASK


def unmask_checksum(masked: int) -> int:
    """Invert `mask_checksum`: subtract the delta, then rotate left by 15."""
    _check_uint32(masked)
    rotated = (masked - CRC32C_MASK_DELTA) & _UINT32_MASK
    return ((rotated << 15) | (rotated >> 17)) & _UINT32_MASK


def masked_crc32c(data: bytes | bytearray | memoryview) -> int:
    """Checksum value as written on the wire for `data`."""
    return mask_checksum(crc32c(data))
