"""
Abstract transport interface for display serial control.

This module defines the abstract base class for all transport implementations.
Transports own the physical connection to the display.

The transport layer is responsible for:
- Opening/closing the physical connection
- Writing raw bytes
- Pushing received bytes to a data handler as they arrive
- Reporting every closure, intentional or not, to a close handler

Implementations:
- AsyncSerialTransport: pyserial-asyncio based serial port
- MockTransport: For testing without hardware
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloseEvent:
    """
    Report of a transport closure.

    Attributes:
        intentional: True if the closure was requested through close(),
            False if the device or cable disconnected.
    """

    intentional: bool


DataHandler = Callable[[bytes], None]
"""Callback receiving each chunk of inbound bytes."""

CloseHandler = Callable[[CloseEvent], None]
"""Callback receiving the report of a closure."""


class AbstractTransport(ABC):
    """
    Abstract base class for display control transports.

    Inbound data is push-based: once open, the transport delivers every
    received chunk to the registered data handler in arrival order. When
    the connection closes for any reason the close handler is invoked once
    with a CloseEvent, after which the intentional flag is reset for the
    next open/close cycle.

    Transports support async context manager protocol for safe resource
    management:

        async with AsyncSerialTransport("/dev/ttyUSB0") as transport:
            await transport.write(frame)

    Attributes:
        is_open: Whether the transport connection is currently open.
        port_name: Identifier for the transport (e.g., serial port name).
    """

    _data_handler: DataHandler | None = None
    _close_handler: CloseHandler | None = None
    _closing_intentionally: bool = False

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """
        Check if the transport connection is currently open.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def port_name(self) -> str:
        """
        Get the transport identifier.

        Returns:
            Port name or identifier string (e.g., "/dev/ttyUSB0", "COM3").
        """
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Open the transport connection.

        Does nothing if the transport is already open.

        Raises:
            TransportError: If the connection cannot be established
                (port busy, missing, or permission denied).
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the transport connection.

        Marks the closure as intentional and releases the connection.
        Succeeds as a no-op if the transport is already closed.

        Raises:
            TransportError: If the underlying port fails to close.
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the transport.

        Args:
            data: Complete request frame including checksum.

        Raises:
            TransportError: If the transport is not open or write fails.
        """
        ...

    def set_data_handler(self, handler: DataHandler | None) -> None:
        """
        Register the callback receiving inbound bytes.

        Args:
            handler: Callable taking each received chunk, or None to detach.
        """
        self._data_handler = handler

    def set_close_handler(self, handler: CloseHandler | None) -> None:
        """
        Register the callback receiving closure reports.

        Args:
            handler: Callable taking a CloseEvent, or None to detach.
        """
        self._close_handler = handler

    def _dispatch_data(self, data: bytes) -> None:
        """Deliver a received chunk to the data handler."""
        if self._data_handler is not None:
            self._data_handler(data)

    def _dispatch_close(self) -> None:
        """Report a closure and re-arm the intentional flag."""
        event = CloseEvent(intentional=self._closing_intentionally)
        self._closing_intentionally = False
        if event.intentional:
            logger.info("Connection to %s closed", self.port_name)
        else:
            logger.warning("Connection to %s closed unexpectedly", self.port_name)
        if self._close_handler is not None:
            self._close_handler(event)

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry - opens the transport."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the transport."""
        await self.close()
