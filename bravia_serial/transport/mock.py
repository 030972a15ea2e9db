"""
Mock transport for testing.

This module provides a mock transport implementation that allows testing
the control port without actual hardware. Inbound bytes can be injected
directly, generated from written requests by a callback, or scripted per
expected request.

Example:
    >>> from bravia_serial.transport import MockTransport
    >>> from bravia_serial import SerialControlPort
    >>>
    >>> mock = MockTransport()
    >>> mock.set_response_callback(lambda request: bytes([0x70, 0x00, 0x70]))
    >>>
    >>> async with SerialControlPort(path="mock://test", transport=mock) as port:
    ...     await port.request_write(0x00, [0x01])
"""

from __future__ import annotations

import asyncio
from typing import Callable

from bravia_serial.exceptions import TransportError
from bravia_serial.transport.abc import AbstractTransport


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without hardware.

    Records all written data for verification in tests. Responses produced
    by the response callback are delivered on the next event loop iteration,
    as a real serial port would deliver them after the write completes.

    Attributes:
        written_data: List of all bytes written to the transport.
        write_times: Event loop time of each write.

    Example:
        >>> mock = MockTransport()
        >>> async with mock:
        ...     await mock.write(b"test")
        ...     mock.feed(bytes([0x70, 0x00, 0x70]))
        ...     assert mock.written_data == [b"test"]
    """

    def __init__(self, port_name: str = "mock://test") -> None:
        """
        Initialize the mock transport.

        Args:
            port_name: Identifier for the mock transport.
        """
        self._port_name = port_name
        self._is_open = False
        self._written_data: list[bytes] = []
        self._write_times: list[float] = []
        self._response_callback: Callable[[bytes], bytes | None] | None = None
        self._write_error: Exception | None = None
        self._open_error: Exception | None = None
        self._closing_intentionally = False

    @property
    def is_open(self) -> bool:
        """Check if the mock transport is open."""
        return self._is_open

    @property
    def port_name(self) -> str:
        """Get the mock port name."""
        return self._port_name

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the transport."""
        return self._written_data.copy()

    @property
    def write_times(self) -> list[float]:
        """Get the event loop time of each write."""
        return self._write_times.copy()

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._written_data[-1] if self._written_data else None

    def set_response_callback(
        self,
        callback: Callable[[bytes], bytes | None] | None,
    ) -> None:
        """
        Set a callback to dynamically generate responses.

        The callback receives the written data and returns the bytes to
        deliver back, or None for no response.

        Args:
            callback: Function that takes written bytes and returns response.
        """
        self._response_callback = callback

    def fail_next_write(self, error: Exception | None = None) -> None:
        """
        Make the next write raise a TransportError.

        Args:
            error: Underlying cause (default: OSError("I/O error")).
        """
        self._write_error = error or OSError("I/O error")

    def fail_next_open(self, error: Exception | None = None) -> None:
        """
        Make the next open raise a TransportError.

        Args:
            error: Underlying cause (default: OSError("Port busy")).
        """
        self._open_error = error or OSError("Port busy")

    def clear(self) -> None:
        """Clear the written data history."""
        self._written_data.clear()
        self._write_times.clear()

    def feed(self, data: bytes) -> None:
        """
        Deliver inbound bytes to the data handler immediately.

        Args:
            data: Bytes "received" from the display.

        Raises:
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")
        self._dispatch_data(bytes(data))

    def simulate_disconnect(self) -> None:
        """Close the transport as if the cable had been unplugged."""
        if not self._is_open:
            return
        self._is_open = False
        self._dispatch_close()

    async def open(self) -> None:
        """
        Open the mock transport.

        Raises:
            TransportError: If fail_next_open() was called.
        """
        if self._is_open:
            return
        if self._open_error is not None:
            error, self._open_error = self._open_error, None
            raise TransportError(f"Failed to open {self._port_name}: {error}") from error
        self._closing_intentionally = False
        self._is_open = True

    async def close(self) -> None:
        """Close the mock transport, reporting an intentional closure."""
        if not self._is_open:
            return
        self._closing_intentionally = True
        self._is_open = False
        self._dispatch_close()

    async def write(self, data: bytes) -> None:
        """
        Write data to the mock transport.

        Records the written data and schedules any callback-generated
        response.

        Args:
            data: Bytes to write.

        Raises:
            TransportError: If transport is not open or a failure was armed.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        if self._write_error is not None:
            error, self._write_error = self._write_error, None
            raise TransportError(f"Write failed: {error}") from error

        loop = asyncio.get_running_loop()
        self._written_data.append(bytes(data))
        self._write_times.append(loop.time())

        response = self._respond(bytes(data))
        if response:
            loop.call_soon(self._deliver, response)

    def _respond(self, data: bytes) -> bytes | None:
        """Produce the response for a written request."""
        if self._response_callback is not None:
            return self._response_callback(data)
        return None

    def _deliver(self, response: bytes) -> None:
        if self._is_open:
            self._dispatch_data(response)

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that a request frame was written.

        Args:
            expected: Expected frame bytes.
            index: Position among the written frames (default: the last one).

        Raises:
            AssertionError: If nothing was written or the frame differs.
        """
        if not self._written_data:
            raise AssertionError(f"Nothing written to {self._port_name}")

        actual = self._written_data[index]
        if actual != expected:
            raise AssertionError(f"Frame {index}: expected {expected.hex()}, got {actual.hex()}")

    def assert_write_count(self, expected: int) -> None:
        """
        Assert how many request frames were written.

        Raises:
            AssertionError: If the count differs.
        """
        sent = [frame.hex() for frame in self._written_data]
        if len(sent) != expected:
            raise AssertionError(f"Expected {expected} writes, got {len(sent)}: {sent}")


class ScriptedMockTransport(MockTransport):
    """
    Mock transport with scripted request/response pairs.

    Each write consumes the next script step: the written request is checked
    against the expected request (if given) and the step's response is
    delivered back.

    Example:
        >>> mock = ScriptedMockTransport()
        >>> mock.expect(request=bytes.fromhex("830000ffff81"), response=bytes.fromhex("7000020173"))
    """

    def __init__(self, port_name: str = "mock://scripted") -> None:
        super().__init__(port_name)
        self._script: list[tuple[bytes | None, bytes]] = []
        self._script_index = 0

    @property
    def remaining_steps(self) -> int:
        """Number of script steps not yet consumed."""
        return len(self._script) - self._script_index

    def expect(
        self,
        response: bytes,
        request: bytes | None = None,
    ) -> None:
        """
        Add an expected request/response pair.

        Args:
            response: Response to deliver.
            request: Expected request (None to match any).
        """
        self._script.append((request, response))

    def _respond(self, data: bytes) -> bytes | None:
        """Validate the request against the script and return its response."""
        if self._script_index >= len(self._script):
            return super()._respond(data)

        expected_request, response = self._script[self._script_index]
        if expected_request is not None and data != expected_request:
            raise AssertionError(
                f"Script mismatch at step {self._script_index}: "
                f"expected {expected_request.hex()}, got {data.hex()}"
            )

        self._script_index += 1
        return response

    def reset_script(self) -> None:
        """Reset script to beginning."""
        self._script_index = 0

    def clear_script(self) -> None:
        """Clear all scripted expectations."""
        self._script.clear()
        self._script_index = 0
