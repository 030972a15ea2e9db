"""
Response frame assembly and decoding.

The display answers every request with one response frame. Responses arrive
as an unstructured byte stream, split into arbitrary chunks by the serial
driver. Two frame formats exist:

1. **Acknowledgment frames**: response to a control request, or an error
   response to a query request
   - Format: [0x70][ANS][CS]

2. **Query-response frames**: successful response to a query request
   - Format: [0x70][ANS][LEN][DATA...][CS]
   - Data length = LEN - 1

Frame Boundary Notes:
- No length field is trusted for termination. A buffer is complete as soon
  as its last byte equals the checksum of the bytes before it.
- A checksum can coincidentally match mid-frame. Such a false terminator
  produces an invalid or truncated frame; the framing rule does not guard
  against it.
- Buffered bytes older than 5 seconds are discarded before new bytes are
  appended (recovery from a stale partial frame).
- Frames with a wrong header are dropped without raising.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from bravia_serial.protocol.constants import (
    ANSWER_MESSAGES,
    QUERY_ANSWER_CODES,
    AnswerCode,
    ProtocolConstants,
)

logger = logging.getLogger(__name__)


class AssemblyStatus(Enum):
    """
    Outcome of pushing one byte into the frame assembler.
    """

    INCOMPLETE = auto()
    """No frame boundary yet, more bytes needed."""

    COMPLETE = auto()
    """A frame boundary was found and the frame decoded successfully."""

    INVALID = auto()
    """A frame boundary was found but the bytes did not decode; they were dropped."""


@dataclass(frozen=True)
class ResponseFrame:
    """
    A decoded response frame.

    Attributes:
        header: Header byte (always 0x70 for decoded frames).
        answer_code: Answer code reported by the display.
        payload: Response data (empty for acknowledgments).
        message: Human-readable classification of the answer code.
        raw_frame: Complete frame bytes as received, including the checksum.
    """

    header: int
    answer_code: int
    payload: bytes
    message: str
    raw_frame: bytes

    @property
    def answer(self) -> AnswerCode | int:
        """
        Get the answer as AnswerCode enum if recognized, else raw int.
        """
        try:
            return AnswerCode(self.answer_code)
        except ValueError:
            return self.answer_code

    @property
    def is_success(self) -> bool:
        """Check if the display reported success."""
        return self.answer_code == AnswerCode.COMPLETED

    @property
    def is_acknowledgment(self) -> bool:
        """Check if this is a 3-byte acknowledgment frame."""
        return len(self.raw_frame) == ProtocolConstants.ACKNOWLEDGMENT_LENGTH

    def __repr__(self) -> str:
        if self.payload:
            return f"ResponseFrame({self.message!r}, payload={self.payload.hex()})"
        return f"ResponseFrame({self.message!r})"


@dataclass(frozen=True)
class AssemblyResult:
    """
    Tagged result of one assembly step.

    ``frame`` is set only when ``status`` is COMPLETE.
    """

    status: AssemblyStatus
    frame: ResponseFrame | None = None


_INCOMPLETE = AssemblyResult(AssemblyStatus.INCOMPLETE)
_INVALID = AssemblyResult(AssemblyStatus.INVALID)


def classify_answer(answer_code: int, acknowledgment: bool = True) -> str:
    """
    Map an answer code to its human-readable message.

    Args:
        answer_code: Raw answer code byte.
        acknowledgment: True for 3-byte acknowledgment frames. The limit-over
            codes are only recognized in acknowledgments.

    Returns:
        Classification message, e.g. "Completed" or "Unknown Answer (0x7f)".
    """
    if acknowledgment or answer_code in QUERY_ANSWER_CODES:
        message = ANSWER_MESSAGES.get(answer_code)
        if message is not None:
            return message
    return f"Unknown Answer (0x{answer_code:02x})"


def decode_frame(frame: bytes | bytearray | memoryview) -> ResponseFrame | None:
    """
    Decode a complete, checksum-terminated byte run into a ResponseFrame.

    Args:
        frame: Frame bytes including the final checksum byte.

    Returns:
        The decoded frame, or None if the header is wrong, the frame is
        too short, or the declared data length overruns the frame.

    Example:
        >>> decode_frame(bytes([0x70, 0x00, 0x03, 0xAA, 0xBB, 0xD8])).payload
        b'\\xaa\\xbb'
    """
    raw = bytes(frame)
    if len(raw) < ProtocolConstants.ACKNOWLEDGMENT_LENGTH:
        return None
    if raw[0] != ProtocolConstants.RESPONSE_HEADER:
        return None

    answer_code = raw[1]

    if len(raw) == ProtocolConstants.ACKNOWLEDGMENT_LENGTH:
        return ResponseFrame(
            header=raw[0],
            answer_code=answer_code,
            payload=b"",
            message=classify_answer(answer_code, acknowledgment=True),
            raw_frame=raw,
        )

    # Query response: LEN counts the data bytes plus the checksum; 0 means no data
    data_size = max(raw[2] - 1, 0)
    data_end = 3 + data_size
    if data_end > len(raw) - 1:
        return None

    return ResponseFrame(
        header=raw[0],
        answer_code=answer_code,
        payload=raw[3:data_end],
        message=classify_answer(answer_code, acknowledgment=False),
        raw_frame=raw,
    )


class FrameAssembler:
    """
    Reassembles response frames from a chunked byte stream.

    Holds the reassembly buffer for one connection. Bytes are appended one
    at a time; after each byte the buffer is tested with the checksum
    terminator rule. When the rule matches, the buffer is decoded and
    cleared whether or not decoding succeeded.

    Example:
        >>> assembler = FrameAssembler()
        >>> frames = assembler.feed(bytes([0x70, 0x00]))
        >>> frames
        []
        >>> assembler.feed(bytes([0x70]))
        [ResponseFrame('Completed')]
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        stale_timeout: float = ProtocolConstants.STALE_BUFFER_TIMEOUT,
    ) -> None:
        """
        Initialize the assembler.

        Args:
            clock: Monotonic time source in seconds.
            stale_timeout: Gap in seconds after which buffered bytes are
                discarded (default: 5.0).
        """
        self._clock = clock
        self._stale_timeout = stale_timeout
        self._buffer = bytearray()
        self._sum = 0
        self._last_received: float | None = None

    @property
    def buffered(self) -> bytes:
        """Bytes received since the last frame boundary."""
        return bytes(self._buffer)

    def reset(self) -> None:
        """Discard all buffered bytes."""
        self._buffer.clear()
        self._sum = 0

    def push_byte(self, value: int) -> AssemblyResult:
        """
        Append one byte and test for a frame boundary.

        Does not apply the stale-buffer rule; use feed() for stream input.

        Args:
            value: Received byte (0-255).

        Returns:
            AssemblyResult tagged INCOMPLETE, COMPLETE (with frame) or INVALID.
        """
        # Terminator test against the running sum before this byte
        terminated = (self._sum & 0xFF) == value

        self._buffer.append(value)
        self._sum += value

        if not terminated:
            return _INCOMPLETE

        raw = bytes(self._buffer)
        self.reset()

        frame = decode_frame(raw)
        if frame is None:
            logger.debug("Dropped invalid frame: %s", raw.hex())
            return _INVALID

        logger.debug("Received frame: %s (%s)", raw.hex(), frame.message)
        return AssemblyResult(AssemblyStatus.COMPLETE, frame)

    def feed(self, data: bytes | bytearray | memoryview) -> list[ResponseFrame]:
        """
        Consume a chunk of received bytes.

        All bytes of one chunk share its arrival time. If more than the stale
        timeout has passed since the previous chunk, buffered bytes are
        discarded before the chunk is appended.

        Args:
            data: Bytes received from the transport.

        Returns:
            Frames completed by this chunk, in arrival order.
        """
        now = self._clock()
        if self._last_received is not None and now - self._last_received > self._stale_timeout:
            if self._buffer:
                logger.debug("Discarding stale buffer: %s", self._buffer.hex())
            self.reset()
        self._last_received = now

        frames: list[ResponseFrame] = []
        for value in bytes(data):
            result = self.push_byte(value)
            if result.frame is not None:
                frames.append(result.frame)
        return frames

    def __repr__(self) -> str:
        return f"FrameAssembler(buffered={len(self._buffer)} bytes)"
