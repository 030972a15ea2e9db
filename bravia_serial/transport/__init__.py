"""
Transport layer for display serial control.

This package provides transport implementations for communicating with
the display over its serial control port.

Available transports:
- AsyncSerialTransport: Async serial port using pyserial-asyncio
- MockTransport: Mock transport for testing without hardware

Example:
    >>> from bravia_serial.transport import AsyncSerialTransport
    >>> transport = AsyncSerialTransport("/dev/ttyUSB0")
    >>> transport.set_data_handler(print)
    >>> async with transport:
    ...     await transport.write(frame_data)

Testing Example:
    >>> from bravia_serial.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.set_response_callback(lambda request: bytes([0x70, 0x00, 0x70]))
"""

from bravia_serial.transport.abc import AbstractTransport, CloseEvent
from bravia_serial.transport.mock import MockTransport, ScriptedMockTransport
from bravia_serial.transport.serial_async import AsyncSerialTransport

__all__ = [
    "AbstractTransport",
    "AsyncSerialTransport",
    "CloseEvent",
    "MockTransport",
    "ScriptedMockTransport",
]
