"""
Protocol layer for display serial control.

This module contains the low-level protocol handling:
- Opcodes, answer codes and protocol constants
- Checksum calculation and terminator detection
- Request frame encoding
- Response frame assembly and decoding
"""

from bravia_serial.protocol.checksums import append_checksum, calculate_checksum, is_valid_terminator
from bravia_serial.protocol.constants import (
    ANSWER_MESSAGES,
    AnswerCode,
    FunctionCode,
    ProtocolConstants,
    RequestKind,
)
from bravia_serial.protocol.frame_assembler import (
    AssemblyResult,
    AssemblyStatus,
    FrameAssembler,
    ResponseFrame,
    classify_answer,
    decode_frame,
)
from bravia_serial.protocol.requests import (
    ControlRequest,
    build_read_request,
    build_write_request,
)

__all__ = [
    # Constants
    "AnswerCode",
    "FunctionCode",
    "RequestKind",
    "ProtocolConstants",
    "ANSWER_MESSAGES",
    # Checksums
    "calculate_checksum",
    "is_valid_terminator",
    "append_checksum",
    # Requests
    "ControlRequest",
    "build_read_request",
    "build_write_request",
    # Frame Assembly
    "FrameAssembler",
    "AssemblyResult",
    "AssemblyStatus",
    "ResponseFrame",
    "classify_answer",
    "decode_frame",
]
