"""
8-bit additive checksum calculation and validation.

The control protocol terminates every frame with a single raw checksum byte:
- Sum all preceding bytes in the frame
- Keep only the lower 8 bits (modulo 256)

Inbound frames carry no trusted length for termination; a buffer whose last
byte equals the checksum of everything before it is a complete frame.
"""

from __future__ import annotations


def calculate_checksum(data: bytes | bytearray | memoryview) -> int:
    """
    Calculate 8-bit additive checksum over the specified data.

    Args:
        data: Data to checksum (excludes the checksum byte itself).

    Returns:
        8-bit checksum value (0-255).

    Example:
        >>> calculate_checksum(bytes([0x83, 0x00, 0x00, 0xFF, 0xFF]))
        129
    """
    return sum(data) & 0xFF


def is_valid_terminator(frame: bytes | bytearray | memoryview) -> bool:
    """
    Check whether the last byte of a frame is the checksum of the rest.

    Args:
        frame: Candidate frame including its final checksum byte.

    Returns:
        True if the final byte equals the checksum of the preceding bytes,
        False otherwise (including for an empty buffer).

    Example:
        >>> is_valid_terminator(bytes([0x70, 0x00, 0x70]))
        True
    """
    if not frame:
        return False
    return calculate_checksum(frame[:-1]) == frame[-1]


def append_checksum(data: bytes | bytearray) -> bytes:
    """
    Calculate checksum and append it as a single raw byte.

    Args:
        data: Data to checksum.

    Returns:
        Original data with the checksum byte appended.

    Example:
        >>> append_checksum(bytes([0x70, 0x00]))
        b'p\\x00p'
    """
    return bytes(data) + bytes([calculate_checksum(data)])
