"""Tests for MockTransport."""

import asyncio

import pytest

from bravia_serial.exceptions import TransportError
from bravia_serial.transport.abc import CloseEvent
from bravia_serial.transport.mock import MockTransport, ScriptedMockTransport

READ_POWER = bytes.fromhex("830000ffff81")
READ_VOLUME = bytes.fromhex("830005ffff86")
POWER_ON = bytes.fromhex("8c000002018f")
ACK = bytes.fromhex("700070")
STATUS_ON = bytes.fromhex("7000020173")


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.fixture
    def received(self, transport):
        """Collect chunks delivered to the data handler."""
        chunks = []
        transport.set_data_handler(chunks.append)
        return chunks

    @pytest.fixture
    def close_events(self, transport):
        """Collect close events."""
        events = []
        transport.set_close_handler(events.append)
        return events

    @pytest.mark.asyncio
    async def test_open_close(self, transport):
        """Test opening and closing transport."""
        assert not transport.is_open
        await transport.open()
        assert transport.is_open
        await transport.close()
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_double_open_is_noop(self, transport):
        """Test that opening twice does not raise."""
        await transport.open()
        await transport.open()
        assert transport.is_open

    @pytest.mark.asyncio
    async def test_close_when_closed_is_noop(self, transport, close_events):
        """Test that closing a closed transport reports nothing."""
        await transport.close()
        assert close_events == []

    @pytest.mark.asyncio
    async def test_open_failure(self, transport):
        """Test that an armed open failure raises TransportError."""
        transport.fail_next_open()
        with pytest.raises(TransportError, match="Port busy"):
            await transport.open()
        assert not transport.is_open
        await transport.open()
        assert transport.is_open

    @pytest.mark.asyncio
    async def test_write_records_data(self, transport):
        """Test that write records data."""
        await transport.open()
        await transport.write(READ_POWER)
        await transport.write(READ_VOLUME)
        assert transport.written_data == [READ_POWER, READ_VOLUME]
        assert transport.last_written == READ_VOLUME
        assert len(transport.write_times) == 2

    @pytest.mark.asyncio
    async def test_write_when_closed_raises(self, transport):
        """Test that writing to closed transport raises."""
        with pytest.raises(TransportError):
            await transport.write(POWER_ON)

    @pytest.mark.asyncio
    async def test_write_failure(self, transport):
        """Test that an armed write failure raises once."""
        await transport.open()
        transport.fail_next_write()
        with pytest.raises(TransportError, match="I/O error"):
            await transport.write(POWER_ON)
        assert transport.written_data == []
        await transport.write(POWER_ON)
        assert transport.written_data == [POWER_ON]

    @pytest.mark.asyncio
    async def test_feed_delivers_to_handler(self, transport, received):
        """Test that fed bytes reach the data handler."""
        await transport.open()
        transport.feed(b"\x70\x00")
        transport.feed(b"\x70")
        assert received == [b"\x70\x00", b"\x70"]

    @pytest.mark.asyncio
    async def test_feed_when_closed_raises(self, transport):
        """Test that feeding a closed transport raises."""
        with pytest.raises(TransportError):
            transport.feed(b"\x70")

    @pytest.mark.asyncio
    async def test_response_callback(self, transport, received):
        """Test dynamic response callback delivered after the write."""
        await transport.open()
        transport.set_response_callback(lambda data: data[:1])
        await transport.write(b"\x83\x00")
        assert received == []
        await asyncio.sleep(0)
        assert received == [b"\x83"]

    @pytest.mark.asyncio
    async def test_intentional_close_event(self, transport, close_events):
        """Test that close() reports an intentional closure."""
        await transport.open()
        await transport.close()
        assert close_events == [CloseEvent(intentional=True)]

    @pytest.mark.asyncio
    async def test_disconnect_event(self, transport, close_events):
        """Test that a simulated disconnect reports an unintentional closure."""
        await transport.open()
        transport.simulate_disconnect()
        assert not transport.is_open
        assert close_events == [CloseEvent(intentional=False)]

    @pytest.mark.asyncio
    async def test_intentional_flag_resets(self, transport, close_events):
        """Test that the intentional flag is re-armed after each closure."""
        await transport.open()
        await transport.close()
        await transport.open()
        transport.simulate_disconnect()
        assert [e.intentional for e in close_events] == [True, False]

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test async context manager protocol."""
        async with MockTransport() as transport:
            assert transport.is_open
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_assert_helpers(self, transport):
        """Test assert_written and assert_write_count helpers."""
        await transport.open()
        await transport.write(READ_POWER)
        await transport.write(POWER_ON)
        transport.assert_written(POWER_ON)
        transport.assert_written(READ_POWER, 0)
        transport.assert_write_count(2)
        with pytest.raises(AssertionError):
            transport.assert_written(READ_VOLUME)
        with pytest.raises(AssertionError):
            transport.assert_write_count(3)

    @pytest.mark.asyncio
    async def test_clear(self, transport):
        """Test clearing the write history."""
        await transport.open()
        await transport.write(POWER_ON)
        transport.clear()
        assert transport.written_data == []
        assert transport.write_times == []


class TestScriptedMockTransport:
    """Tests for ScriptedMockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a ScriptedMockTransport instance."""
        return ScriptedMockTransport()

    @pytest.mark.asyncio
    async def test_scripted_responses(self, transport):
        """Test scripted request/response pairs."""
        received = []
        transport.set_data_handler(received.append)
        await transport.open()
        transport.expect(response=STATUS_ON, request=READ_POWER)
        transport.expect(response=ACK, request=POWER_ON)

        await transport.write(READ_POWER)
        await asyncio.sleep(0)
        await transport.write(POWER_ON)
        await asyncio.sleep(0)

        assert received == [STATUS_ON, ACK]
        assert transport.remaining_steps == 0

    @pytest.mark.asyncio
    async def test_scripted_any_request(self, transport):
        """Test scripted response for any request."""
        received = []
        transport.set_data_handler(received.append)
        await transport.open()
        transport.expect(response=b"\x70\x00\x70")

        await transport.write(READ_VOLUME)
        await asyncio.sleep(0)
        assert received == [b"\x70\x00\x70"]

    @pytest.mark.asyncio
    async def test_script_mismatch_raises(self, transport):
        """Test that an unexpected request fails the write."""
        await transport.open()
        transport.expect(response=ACK, request=POWER_ON)
        with pytest.raises(AssertionError, match="Script mismatch"):
            await transport.write(READ_POWER)

    @pytest.mark.asyncio
    async def test_reset_script(self, transport):
        """Test replaying a script from the start."""
        await transport.open()
        transport.expect(response=ACK)
        await transport.write(POWER_ON)
        assert transport.remaining_steps == 0
        transport.reset_script()
        assert transport.remaining_steps == 1
        transport.clear_script()
        assert transport.remaining_steps == 0
