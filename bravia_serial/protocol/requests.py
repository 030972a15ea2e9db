"""
Outgoing request frame encoding.

Two request formats are sent to the display:

1. **Read (query) requests**: fixed marker bytes, no data
   - Format: [0x83][0x00][FUNC][0xFF][0xFF][CS]

2. **Write (control) requests**: length-prefixed data
   - Format: [0x8C][0x00][FUNC][LEN][DATA...][CS]
   - LEN = number of data bytes + 1 (the length counts the checksum)

All bytes are raw (no escaping, no hex encoding). CS is the 8-bit additive
checksum of every preceding byte.
"""

from __future__ import annotations

from dataclasses import dataclass

from bravia_serial.protocol.checksums import append_checksum
from bravia_serial.protocol.constants import ProtocolConstants, RequestKind


@dataclass(frozen=True)
class ControlRequest:
    """
    An outgoing request.

    Attributes:
        kind: READ or WRITE.
        function_code: Function (register) addressed by the request.
        payload: Data bytes for write requests, empty for reads.
    """

    kind: RequestKind
    function_code: int
    payload: bytes = b""

    @property
    def wire_bytes(self) -> bytes:
        """Complete frame as transmitted, including the checksum byte."""
        header = bytes([self.kind, ProtocolConstants.REQUEST_CATEGORY, self.function_code])
        if self.kind == RequestKind.READ:
            body = header + ProtocolConstants.READ_MARKER
        else:
            body = header + bytes([len(self.payload) + 1]) + self.payload
        return append_checksum(body)

    def __repr__(self) -> str:
        if self.payload:
            return f"ControlRequest({self.kind.name}, 0x{self.function_code:02X}, payload={self.payload.hex()})"
        return f"ControlRequest({self.kind.name}, 0x{self.function_code:02X})"


def _check_byte(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be 0-255, got {value}")
    return value


def build_read_request(function_code: int) -> ControlRequest:
    """
    Build a read (query) request.

    Args:
        function_code: Function code (0-255).

    Returns:
        ControlRequest of kind READ.

    Raises:
        ValueError: If function_code is not a byte value.

    Example:
        >>> build_read_request(0x00).wire_bytes.hex()
        '830000ffff81'
    """
    return ControlRequest(RequestKind.READ, _check_byte(function_code, "function_code"))


def build_write_request(
    function_code: int,
    payload: bytes | bytearray | list[int] | tuple[int, ...] = b"",
) -> ControlRequest:
    """
    Build a write (control) request.

    Args:
        function_code: Function code (0-255).
        payload: Data bytes (each 0-255, at most 254 bytes).

    Returns:
        ControlRequest of kind WRITE.

    Raises:
        ValueError: If the function code or any payload byte is out of
            range, or the payload is too long for the length byte.

    Example:
        >>> build_write_request(0x00, [0x01]).wire_bytes.hex()
        '8c000002018f'
    """
    _check_byte(function_code, "function_code")
    if isinstance(payload, (bytes, bytearray)):
        data = bytes(payload)
    else:
        data = bytes(_check_byte(b, "payload byte") for b in payload)

    if len(data) > ProtocolConstants.MAX_WRITE_PAYLOAD:
        raise ValueError(
            f"payload must be at most {ProtocolConstants.MAX_WRITE_PAYLOAD} bytes, got {len(data)}"
        )
    return ControlRequest(RequestKind.WRITE, function_code, data)
