"""
Serial control port: request/response coordination.

This module provides the protocol engine for talking to the display. It
builds request frames, enforces the minimum spacing between consecutive
requests, writes them to the transport and completes each caller's request
when the matching response frame arrives.

The protocol carries no correlation token, so responses are matched to
requests by temporal adjacency and at most one request can be in flight:

    request_*() -> pace -> register pending slot -> write
    transport bytes -> FrameAssembler -> frame -> complete pending slot

In the default SINGLE_SLOT mode a new request overwrites the pending slot;
the earlier caller is then never completed. Callers must serialize their
own requests, or opt into SERIALIZED mode which queues them.

Example:
    >>> from bravia_serial import SerialControlPort
    >>>
    >>> async def main():
    ...     async with SerialControlPort(path="/dev/ttyUSB0") as port:
    ...         frame = await port.request_read(0x00)
    ...         print(frame.payload)
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable

from bravia_serial.exceptions import ConfigurationError, ProtocolError, TransportError
from bravia_serial.models.config import PortConfig
from bravia_serial.protocol.frame_assembler import FrameAssembler, ResponseFrame
from bravia_serial.protocol.requests import ControlRequest, build_read_request, build_write_request
from bravia_serial.transport.serial_async import AsyncSerialTransport

if TYPE_CHECKING:
    from bravia_serial.transport.abc import AbstractTransport, CloseEvent

logger = logging.getLogger(__name__)


class RequestMode(Enum):
    """How concurrent requests share the single pending slot."""

    SINGLE_SLOT = auto()
    """A new request overwrites the pending slot (compatible default)."""

    SERIALIZED = auto()
    """Requests queue until the previous one has been completed."""


class SerialControlPort:
    """
    Request/response coordinator for one serial connection.

    Owns the transport, the frame assembler (reassembly buffer) and the
    pending request slot. Instances are independent; each connection gets
    its own.

    Attributes:
        on_close: Optional callback receiving a CloseEvent whenever the
            connection closes, intentionally or not.

    Example:
        >>> port = SerialControlPort(path="/dev/ttyUSB0", interval=300)
        >>> await port.open()
        >>> await port.request_write(0x05, [0x01, 20])
        >>> await port.close()
    """

    def __init__(
        self,
        config: PortConfig | None = None,
        *,
        path: str | None = None,
        interval: int | None = None,
        transport: AbstractTransport | None = None,
        request_mode: RequestMode = RequestMode.SINGLE_SLOT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the control port.

        Args:
            config: Port configuration. If omitted, built from path/interval.
            path: Serial port identifier (e.g., "/dev/ttyUSB0", "COM3").
            interval: Minimum spacing between requests in ms (0-1000,
                default: 500).
            transport: Transport to use (default: AsyncSerialTransport on path).
            request_mode: Pending slot policy (default: SINGLE_SLOT).
            clock: Monotonic time source in seconds, shared by pacing and
                the stale-buffer check.

        Raises:
            ConfigurationError: If the path is missing, the interval is out
                of range, or both config and path/interval are given.
        """
        if config is None:
            config = PortConfig.create(path, interval)
        elif path is not None or interval is not None:
            raise ConfigurationError("Pass either config or path/interval, not both")

        self._config = config
        self._transport = transport if transport is not None else AsyncSerialTransport(config.path)
        self._request_mode = request_mode
        self._clock = clock
        self._assembler = FrameAssembler(clock=clock)
        self._pending: asyncio.Future[ResponseFrame] | None = None
        self._last_request_time: float | None = None
        self._lock = asyncio.Lock()

        self.on_close: Callable[[CloseEvent], None] | None = None

        self._transport.set_data_handler(self._on_data)
        self._transport.set_close_handler(self._on_transport_closed)

    @property
    def config(self) -> PortConfig:
        """Get the port configuration."""
        return self._config

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    @property
    def request_mode(self) -> RequestMode:
        """Get the pending slot policy."""
        return self._request_mode

    @property
    def is_open(self) -> bool:
        """Check if the connection is open."""
        return self._transport.is_open

    @property
    def has_pending_request(self) -> bool:
        """Check if a request is waiting for its response."""
        return self._pending is not None and not self._pending.done()

    async def open(self) -> None:
        """
        Open the serial connection.

        Raises:
            TransportError: If the port cannot be opened.
        """
        self._assembler.reset()
        await self._transport.open()
        logger.info("Control port %s open (interval=%dms)", self._config.path, self._config.interval)

    async def close(self) -> None:
        """
        Close the serial connection.

        Succeeds as a no-op if already closed. A request still waiting for
        its response stays pending.

        Raises:
            TransportError: If the port fails to close.
        """
        await self._transport.close()

    async def request_read(self, function_code: int) -> ResponseFrame:
        """
        Send a read (query) request and wait for its response.

        Args:
            function_code: Function code (0-255).

        Returns:
            The response frame (answer code COMPLETED).

        Raises:
            ValueError: If function_code is not a byte value.
            TransportError: If the port is closed or the write fails.
            ProtocolError: If the display answers with an error code.
        """
        return await self._request(build_read_request(function_code))

    async def request_write(
        self,
        function_code: int,
        payload: bytes | bytearray | list[int] | tuple[int, ...] = b"",
    ) -> ResponseFrame:
        """
        Send a write (control) request and wait for its acknowledgment.

        Args:
            function_code: Function code (0-255).
            payload: Data bytes.

        Returns:
            The acknowledgment frame (answer code COMPLETED).

        Raises:
            ValueError: If the function code or payload is out of range.
            TransportError: If the port is closed or the write fails.
            ProtocolError: If the display answers with an error code, e.g.
                "Limit Over (over maximum value)".
        """
        return await self._request(build_write_request(function_code, payload))

    async def _request(self, request: ControlRequest) -> ResponseFrame:
        if self._request_mode is RequestMode.SERIALIZED:
            async with self._lock:
                return await self._send(request)
        return await self._send(request)

    async def _send(self, request: ControlRequest) -> ResponseFrame:
        """
        Pace, register the pending slot, write and wait for the response.

        No timeout is applied; wrap the call in asyncio.wait_for() to bound it.
        """
        if not self._transport.is_open:
            raise TransportError("Serial port is not open")

        wire_bytes = request.wire_bytes
        await self._wait_for_interval()

        future: asyncio.Future[ResponseFrame] = asyncio.get_running_loop().create_future()
        if self.has_pending_request:
            logger.warning("Pending request overwritten by %r; it will not be completed", request)
        self._pending = future

        try:
            await self._transport.write(wire_bytes)
        except BaseException:
            # Includes cancellation while the write is draining
            if self._pending is future:
                self._pending = None
            raise

        logger.debug("Sent %r", request)
        return await future

    async def _wait_for_interval(self) -> None:
        """Delay until the configured interval has passed since the previous request."""
        now = self._clock()
        last = self._last_request_time
        # Baseline moves at evaluation time, not after the wait
        self._last_request_time = now

        if last is None:
            return
        delay = self._config.interval_seconds - (now - last)
        if delay > 0:
            logger.debug("Waiting %.3fs before next request", delay)
            await asyncio.sleep(delay)

    def _on_data(self, data: bytes) -> None:
        for frame in self._assembler.feed(data):
            self._complete(frame)

    def _complete(self, frame: ResponseFrame) -> None:
        """Resolve or reject the pending request with a received frame."""
        future, self._pending = self._pending, None
        if future is None or future.done():
            logger.debug("No request waiting, dropped %r", frame)
            return

        if frame.is_success:
            future.set_result(frame)
        else:
            logger.debug("Request failed: %s", frame.message)
            future.set_exception(
                ProtocolError(frame.message, answer_code=frame.answer_code, frame=frame)
            )

    def _on_transport_closed(self, event: CloseEvent) -> None:
        self._assembler.reset()
        if self.on_close is not None:
            self.on_close(event)

    async def __aenter__(self) -> SerialControlPort:
        """Async context manager entry - opens the port."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes the port."""
        await self.close()

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"SerialControlPort({self._config.path!r}, interval={self._config.interval}, {status})"
