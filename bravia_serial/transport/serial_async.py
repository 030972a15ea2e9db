"""
Async serial transport using pyserial-asyncio.

This module provides the primary transport implementation for communicating
with the display over its RS-232C control port.

Serial Configuration (fixed by the display):
- Baud rate: 9600
- Data bits: 8
- Parity: None
- Stop bits: 1
- Flow control: None

Inbound bytes are read by a background task and pushed to the data handler
as they arrive. End of stream or a read error ends the task and is reported
to the close handler as an unintentional closure.

Example:
    >>> transport = AsyncSerialTransport("/dev/ttyUSB0")
    >>> transport.set_data_handler(assembler_callback)
    >>> async with transport:
    ...     await transport.write(frame)
"""

from __future__ import annotations

import asyncio
import logging

import serial
import serial_asyncio

from bravia_serial.exceptions import TransportError
from bravia_serial.protocol.constants import ProtocolConstants
from bravia_serial.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


class AsyncSerialTransport(AbstractTransport):
    """
    Async serial transport using pyserial-asyncio.

    Provides non-blocking serial communication using Python's asyncio
    framework. This is the transport for real hardware communication.

    Attributes:
        port_name: Serial port path (e.g., "/dev/ttyUSB0", "COM3").
        is_open: Whether the port is currently open.

    Example:
        >>> transport = AsyncSerialTransport("/dev/ttyUSB0")
        >>> await transport.open()
        >>> try:
        ...     await transport.write(bytes([0x83, 0x00, 0x00, 0xFF, 0xFF, 0x81]))
        ... finally:
        ...     await transport.close()
    """

    def __init__(self, port: str) -> None:
        """
        Initialize the async serial transport.

        Args:
            port: Serial port path (e.g., "/dev/ttyUSB0", "COM3").
        """
        self._port = port
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._read_task: asyncio.Task[None] | None = None
        self._closing_intentionally = False

    @property
    def is_open(self) -> bool:
        """Check if the serial port is currently open."""
        return self._writer is not None and not self._writer.is_closing()

    @property
    def port_name(self) -> str:
        """Get the serial port path."""
        return self._port

    async def open(self) -> None:
        """
        Open the serial port connection.

        Configures the port with the display's fixed settings:
        - 9600 baud, 8 data bits, no parity, 1 stop bit
        - No flow control

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.is_open:
            return

        self._closing_intentionally = False

        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self._port,
                baudrate=ProtocolConstants.BAUD_RATE,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
        except serial.SerialException as e:
            raise TransportError(f"Failed to open serial port {self._port}: {e}") from e
        except OSError as e:
            raise TransportError(f"OS error opening {self._port}: {e}") from e

        self._read_task = asyncio.create_task(self._read_loop())
        logger.info("Opened serial port %s", self._port)

    async def close(self) -> None:
        """
        Close the serial port connection.

        The closure is reported to the close handler as intentional.
        Safe to call multiple times.

        Raises:
            TransportError: If the port fails to close.
        """
        if self._writer is None:
            return

        self._closing_intentionally = True
        writer = self._writer
        task = self._read_task

        try:
            writer.close()
            await writer.wait_closed()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Failed to close serial port {self._port}: {e}") from e
        finally:
            if task is not None and not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
            self._connection_lost()

    async def write(self, data: bytes) -> None:
        """
        Write data to the serial port.

        Args:
            data: Bytes to transmit.

        Raises:
            TransportError: If the port is not open or write fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        logger.debug("TX %s", data.hex())
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Write failed: {e}") from e

    async def _read_loop(self) -> None:
        """Push received chunks to the data handler until the stream ends."""
        reader = self._reader
        try:
            while True:
                try:
                    data = await reader.read(ProtocolConstants.READ_CHUNK_SIZE)
                except (serial.SerialException, OSError) as e:
                    if not self._closing_intentionally:
                        logger.warning("Read from %s failed: %s", self._port, e)
                    break
                if not data:
                    break
                logger.debug("RX %s", data.hex())
                self._dispatch_data(data)
        finally:
            self._connection_lost()

    def _connection_lost(self) -> None:
        """Tear down connection state and report the closure once."""
        writer = self._writer
        if writer is None:
            return

        self._reader = None
        self._writer = None
        self._read_task = None

        if not writer.is_closing():
            writer.close()

        self._dispatch_close()

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncSerialTransport({self._port!r}, {status})"
