"""
bravia_serial - Python library for controlling displays over RS-232C.

This library provides async communication with professional displays over
their serial control port, using the vendor's binary request/response
protocol (query and control requests, checksum-terminated responses).

Example:
    >>> from bravia_serial import SerialControlPort
    >>>
    >>> async def main():
    ...     async with SerialControlPort(path="/dev/ttyUSB0") as port:
    ...         frame = await port.request_read(0x05)
    ...         print(frame.payload)
"""

from bravia_serial.client import DisplayClient
from bravia_serial.exceptions import (
    BraviaSerialError,
    CommandError,
    ConfigurationError,
    ProtocolError,
    ResponseDataError,
    TransportError,
)
from bravia_serial.models.config import PortConfig
from bravia_serial.port import RequestMode, SerialControlPort
from bravia_serial.protocol.constants import AnswerCode, FunctionCode
from bravia_serial.protocol.frame_assembler import ResponseFrame
from bravia_serial.transport import AbstractTransport, AsyncSerialTransport, CloseEvent

__version__ = "0.1.0"
__all__ = [
    # Port
    "SerialControlPort",
    "RequestMode",
    "DisplayClient",
    # Models
    "PortConfig",
    "ResponseFrame",
    "AnswerCode",
    "FunctionCode",
    # Exceptions
    "BraviaSerialError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "ResponseDataError",
    "CommandError",
    # Transport
    "AbstractTransport",
    "AsyncSerialTransport",
    "CloseEvent",
    # Version
    "__version__",
]
