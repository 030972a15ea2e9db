"""Tests for AsyncSerialTransport with a patched serial connection."""

import asyncio

import pytest
import pytest_asyncio
import serial

from bravia_serial.exceptions import TransportError
from bravia_serial.transport import AsyncSerialTransport, CloseEvent
from bravia_serial.transport import serial_async


class FakeWriter:
    """Stand-in for the StreamWriter returned by open_serial_connection."""

    def __init__(self):
        self.data = bytearray()
        self.closed = False
        self.drain_error = None

    def write(self, data):
        self.data.extend(data)

    async def drain(self):
        if self.drain_error is not None:
            raise self.drain_error

    def close(self):
        self.closed = True

    def is_closing(self):
        return self.closed

    async def wait_closed(self):
        pass


@pytest_asyncio.fixture
async def connection(monkeypatch):
    """Patch open_serial_connection and record its arguments."""
    reader = asyncio.StreamReader()
    writer = FakeWriter()
    calls = []

    async def open_serial_connection(**kwargs):
        calls.append(kwargs)
        return reader, writer

    monkeypatch.setattr(serial_async.serial_asyncio, "open_serial_connection", open_serial_connection)
    return reader, writer, calls


@pytest.fixture
def transport():
    """Create a transport with collected data and close events."""
    transport = AsyncSerialTransport("/dev/ttyUSB0")
    transport.received = []
    transport.events = []
    transport.set_data_handler(transport.received.append)
    transport.set_close_handler(transport.events.append)
    return transport


async def settle(steps: int = 10) -> None:
    for _ in range(steps):
        await asyncio.sleep(0)


class TestAsyncSerialTransport:
    """Tests for AsyncSerialTransport class."""

    @pytest.mark.asyncio
    async def test_open_uses_fixed_line_settings(self, connection, transport):
        """Test that the port is opened at 9600 8N1 without flow control."""
        _, _, calls = connection
        await transport.open()

        assert transport.is_open
        assert calls == [{
            "url": "/dev/ttyUSB0",
            "baudrate": 9600,
            "bytesize": serial.EIGHTBITS,
            "parity": serial.PARITY_NONE,
            "stopbits": serial.STOPBITS_ONE,
            "xonxoff": False,
            "rtscts": False,
            "dsrdtr": False,
        }]
        await transport.close()

    @pytest.mark.asyncio
    async def test_open_twice(self, connection, transport):
        """Test that opening an open port does not reconnect."""
        _, _, calls = connection
        await transport.open()
        await transport.open()
        assert len(calls) == 1
        await transport.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [serial.SerialException("busy"), OSError("no such device")])
    async def test_open_failure(self, monkeypatch, transport, error):
        """Test that open failures are wrapped in TransportError."""
        async def open_serial_connection(**kwargs):
            raise error

        monkeypatch.setattr(serial_async.serial_asyncio, "open_serial_connection", open_serial_connection)

        with pytest.raises(TransportError, match="/dev/ttyUSB0") as exc_info:
            await transport.open()
        assert exc_info.value.__cause__ is error
        assert not transport.is_open
        assert transport.events == []

    @pytest.mark.asyncio
    async def test_write(self, connection, transport):
        """Test that writes reach the stream writer."""
        _, writer, _ = connection
        await transport.open()
        await transport.write(b"\x83\x00\x00\xff\xff\x81")
        assert bytes(writer.data) == b"\x83\x00\x00\xff\xff\x81"
        await transport.close()

    @pytest.mark.asyncio
    async def test_write_when_closed(self, transport):
        """Test that writing to a closed port raises."""
        with pytest.raises(TransportError, match="not open"):
            await transport.write(b"\x00")

    @pytest.mark.asyncio
    async def test_write_failure(self, connection, transport):
        """Test that drain failures are wrapped in TransportError."""
        _, writer, _ = connection
        writer.drain_error = OSError("device disconnected")
        await transport.open()
        with pytest.raises(TransportError, match="Write failed"):
            await transport.write(b"\x00")
        await transport.close()

    @pytest.mark.asyncio
    async def test_received_data_dispatched(self, connection, transport):
        """Test that inbound chunks reach the data handler."""
        reader, _, _ = connection
        await transport.open()
        reader.feed_data(b"\x70\x00\x70")
        await settle()
        assert transport.received == [b"\x70\x00\x70"]
        await transport.close()

    @pytest.mark.asyncio
    async def test_end_of_stream_is_unintentional(self, connection, transport):
        """Test that end of stream is reported as an unintentional close."""
        reader, writer, _ = connection
        await transport.open()
        reader.feed_eof()
        await settle()

        assert transport.events == [CloseEvent(intentional=False)]
        assert not transport.is_open
        assert writer.closed

    @pytest.mark.asyncio
    async def test_close_is_intentional(self, connection, transport):
        """Test that close() is reported once as intentional."""
        await transport.open()
        await transport.close()
        await settle()

        assert transport.events == [CloseEvent(intentional=True)]
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_close_when_closed(self, transport):
        """Test that closing a closed port is a no-op."""
        await transport.close()
        assert transport.events == []

    def test_repr(self, transport):
        """Test string representation."""
        assert repr(transport) == "AsyncSerialTransport('/dev/ttyUSB0', closed)"
