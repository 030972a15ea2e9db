"""
Exception hierarchy for bravia_serial.

All exceptions inherit from BraviaSerialError, providing a clean hierarchy
for error handling:

1. Configuration errors are raised at construction and never retried
2. Transport errors wrap failures of the underlying serial device
3. Protocol errors carry the answer code reported by the display
4. Malformed inbound frames are dropped silently and never raised
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bravia_serial.protocol.frame_assembler import ResponseFrame


class BraviaSerialError(Exception):
    """
    Base exception for all bravia_serial errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all bravia_serial errors with a single except clause.
    """

    pass


class ConfigurationError(BraviaSerialError, ValueError):
    """
    Invalid constructor parameters.

    Raised when the serial port path is missing or the command interval
    is outside 0-1000 ms.
    """

    pass


class TransportError(BraviaSerialError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Serial port cannot be opened (busy, missing, permission denied)
    - Write attempted while the port is closed
    - I/O errors while writing or closing
    """

    pass


class ProtocolError(BraviaSerialError):
    """
    Error response from the display.

    Raised when a response frame carries a non-success answer code. The
    message is the human-readable classification of the code.
    """

    def __init__(
        self,
        message: str,
        *,
        answer_code: int | None = None,
        frame: ResponseFrame | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.answer_code = answer_code
        self.frame = frame


class ResponseDataError(ProtocolError):
    """
    Response payload could not be interpreted.

    Raised by command methods when the display answered with success but
    the payload does not have the expected shape.
    """

    def __init__(
        self,
        message: str = "Unknown response data.",
        *,
        frame: ResponseFrame | None = None,
    ) -> None:
        super().__init__(
            message,
            answer_code=frame.answer_code if frame is not None else None,
            frame=frame,
        )


class CommandError(BraviaSerialError):
    """
    A command could not be carried out.

    Raised when a command precondition does not hold (e.g. changing the
    standby mode while the display is off) or when the state read back
    after a command does not match the requested state.
    """

    pass
