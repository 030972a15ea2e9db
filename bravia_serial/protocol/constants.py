"""
Serial control protocol constants.

Opcodes, answer codes, frame markers and the fixed serial line settings
used by the display's RS-232C control port.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class RequestKind(IntEnum):
    """
    Request opcodes sent from the controller to the display.

    The opcode is the first byte of every outgoing frame.
    """

    READ = 0x83
    """Query request (read the current value of a function)."""

    WRITE = 0x8C
    """Control request (change the value of a function)."""


class AnswerCode(IntEnum):
    """
    Answer codes carried in the second byte of every response frame.

    LIMIT_OVER_MAX and LIMIT_OVER_MIN only occur in 3-byte acknowledgment
    frames (responses to control requests).
    """

    COMPLETED = 0x00
    """Request processed successfully."""

    LIMIT_OVER_MAX = 0x01
    """Value above the maximum accepted by the function."""

    LIMIT_OVER_MIN = 0x02
    """Value below the minimum accepted by the function."""

    CANCELED = 0x03
    """Command canceled by the display."""

    PARSE_ERROR = 0x04
    """Request could not be parsed (data format error)."""


class ProtocolConstants:
    """
    Protocol constants.

    Frame markers, timing values and serial port configuration. The serial
    line settings are fixed by the display and are not configurable; data
    bits, parity and stop bits use the pyserial constants directly.
    """

    # ===== Frame Markers =====

    RESPONSE_HEADER: Final[int] = 0x70
    """First byte of every response frame."""

    REQUEST_CATEGORY: Final[int] = 0x00
    """Category byte following the opcode in every request."""

    READ_MARKER: Final[bytes] = b"\xff\xff"
    """Fixed bytes following the function code in a read request."""

    ACKNOWLEDGMENT_LENGTH: Final[int] = 3
    """Total length of an acknowledgment frame (header, answer, checksum)."""

    MAX_WRITE_PAYLOAD: Final[int] = 254
    """Largest write payload whose length byte (len + 1) fits in one byte."""

    # ===== Timing Constants =====

    DEFAULT_INTERVAL_MS: Final[int] = 500
    """Default minimum spacing between consecutive requests in milliseconds."""

    MIN_INTERVAL_MS: Final[int] = 0
    """Smallest accepted request interval in milliseconds."""

    MAX_INTERVAL_MS: Final[int] = 1000
    """Largest accepted request interval in milliseconds."""

    STALE_BUFFER_TIMEOUT: Final[float] = 5.0
    """Gap between inbound bytes after which buffered bytes are discarded."""

    # ===== Serial Port Configuration =====

    BAUD_RATE: Final[int] = 9600
    """Baud rate of the control port."""

    READ_CHUNK_SIZE: Final[int] = 256
    """Maximum number of bytes requested from the port per read."""


ANSWER_MESSAGES: Final[dict[int, str]] = {
    AnswerCode.COMPLETED: "Completed",
    AnswerCode.LIMIT_OVER_MAX: "Limit Over (over maximum value)",
    AnswerCode.LIMIT_OVER_MIN: "Limit Over (under minimum value)",
    AnswerCode.CANCELED: "Command Canceled",
    AnswerCode.PARSE_ERROR: "Parse Error (Data Format Error)",
}
"""Human-readable classification of each known answer code."""

QUERY_ANSWER_CODES: Final[frozenset[int]] = frozenset({
    AnswerCode.COMPLETED,
    AnswerCode.CANCELED,
    AnswerCode.PARSE_ERROR,
})
"""Answer codes that are meaningful in query-response frames."""


class FunctionCode(IntEnum):
    """
    Function codes addressed by the command methods of DisplayClient.

    Only the functions implemented by the client are listed; any byte value
    may be passed to the raw request methods.
    """

    POWER = 0x00
    """Power status (0x00 standby, 0x01 active)."""

    STANDBY = 0x01
    """Standby mode (0x00 disabled, 0x01 enabled)."""

    AUDIO_VOLUME = 0x05
    """Audio volume (direct value 0-100)."""

    AUDIO_MUTE = 0x06
    """Audio mute (toggle, or direct 0x00 off / 0x01 on)."""
