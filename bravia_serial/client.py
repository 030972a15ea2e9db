"""
Display control client.

This module provides a high-level interface over SerialControlPort for a
representative set of display functions (power, standby, audio volume and
mute). Every command is built only from request_read() and request_write();
multi-step commands are plain sequential awaits, so a client never has more
than one request in flight.

Example:
    >>> from bravia_serial import DisplayClient
    >>>
    >>> async def main():
    ...     async with DisplayClient(path="/dev/ttyUSB0") as display:
    ...         if not await display.get_power_status():
    ...             await display.power_on()
    ...         await display.set_audio_volume(20)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from bravia_serial.exceptions import CommandError, ResponseDataError
from bravia_serial.port import SerialControlPort
from bravia_serial.protocol.constants import FunctionCode

if TYPE_CHECKING:
    from bravia_serial.protocol.frame_assembler import ResponseFrame
    from bravia_serial.transport.abc import CloseEvent

logger = logging.getLogger(__name__)

MIN_VOLUME = 0
MAX_VOLUME = 100

# Direct-value payloads start with this marker byte
_DIRECT = 0x01
_TOGGLE = 0x00


class DisplayClient:
    """
    Client for controlling a display over its serial control port.

    Attributes:
        on_close: Optional callback receiving a CloseEvent whenever the
            connection closes, intentionally or not.
        power_settle_delay: Seconds to wait after a power command before
            reading the power status back.

    Example:
        >>> display = DisplayClient(path="/dev/ttyUSB0")
        >>> await display.open()
        >>> await display.volume_up(step=5)
        >>> await display.close()
    """

    POWER_SETTLE_DELAY: float = 1.0
    """Default wait between a power command and its verification."""

    def __init__(
        self,
        port: SerialControlPort | None = None,
        *,
        path: str | None = None,
        interval: int | None = None,
        power_settle_delay: float = POWER_SETTLE_DELAY,
    ) -> None:
        """
        Initialize the client.

        Args:
            port: Control port to use. If omitted, one is created from
                path/interval. A handler already set on port.on_close
                keeps being called, before the client's own on_close.
            path: Serial port identifier.
            interval: Minimum spacing between requests in ms.
            power_settle_delay: Seconds to wait before verifying a power change.

        Raises:
            ConfigurationError: If the port parameters are invalid.
        """
        self._port = port if port is not None else SerialControlPort(path=path, interval=interval)
        self._port_on_close = self._port.on_close
        self._port.on_close = self._handle_close
        self.power_settle_delay = power_settle_delay
        self.on_close: Callable[[CloseEvent], None] | None = None

    @property
    def port(self) -> SerialControlPort:
        """Get the underlying control port."""
        return self._port

    @property
    def is_open(self) -> bool:
        """Check if the connection is open."""
        return self._port.is_open

    async def open(self) -> None:
        """Open the serial connection."""
        await self._port.open()

    async def close(self) -> None:
        """Close the serial connection."""
        await self._port.close()

    def _handle_close(self, event: CloseEvent) -> None:
        if self._port_on_close is not None:
            self._port_on_close(event)
        if self.on_close is not None:
            self.on_close(event)

    # ===== Power =====

    async def get_power_status(self) -> bool:
        """
        Get the power status.

        Returns:
            True if the display is active (on), False if in standby (off).

        Raises:
            ResponseDataError: If the response payload is not recognized.
        """
        frame = await self._port.request_read(FunctionCode.POWER)
        if frame.payload == b"\x00":
            return False
        if frame.payload == b"\x01":
            return True
        raise ResponseDataError(frame=frame)

    async def power_on(self) -> bool:
        """
        Turn the display on and verify it.

        Returns:
            True (the new power status).

        Raises:
            CommandError: If the display is still off afterwards, which
                usually means standby mode is disabled.
        """
        await self._port.request_write(FunctionCode.POWER, [0x01])
        await asyncio.sleep(self.power_settle_delay)
        if not await self.get_power_status():
            raise CommandError(
                "Failed to power on. The standby mode is possibly disabled; "
                "turn the display on manually and call enable_standby() first."
            )
        logger.info("Display powered on")
        return True

    async def power_off(self) -> bool:
        """
        Turn the display off and verify it.

        Returns:
            False (the new power status).

        Raises:
            CommandError: If the display is still on afterwards.
        """
        await self._port.request_write(FunctionCode.POWER, [0x00])
        await asyncio.sleep(self.power_settle_delay)
        if await self.get_power_status():
            raise CommandError("Failed to power off.")
        logger.info("Display powered off")
        return False

    async def toggle_power(self) -> bool:
        """
        Toggle the power status.

        Returns:
            The new power status.
        """
        if await self.get_power_status():
            return await self.power_off()
        return await self.power_on()

    async def set_power_status(self, status: bool | None = None) -> bool:
        """
        Change the power status.

        Args:
            status: True for on, False for off, None to toggle.

        Returns:
            The new power status.
        """
        if status is None:
            return await self.toggle_power()
        if status:
            return await self.power_on()
        return await self.power_off()

    # ===== Standby =====

    async def enable_standby(self) -> None:
        """
        Enable standby mode (allows power_on() over the serial port).

        The display answers with an error if standby is already enabled.

        Raises:
            CommandError: If the display is off.
        """
        await self._set_standby(True)

    async def disable_standby(self) -> None:
        """
        Disable standby mode.

        The display answers with an error if standby is already disabled.

        Raises:
            CommandError: If the display is off.
        """
        await self._set_standby(False)

    async def _set_standby(self, enabled: bool) -> None:
        if not await self.get_power_status():
            raise CommandError("Turn on the display before changing the standby mode.")
        await self._port.request_write(FunctionCode.STANDBY, [0x01 if enabled else 0x00])

    # ===== Audio =====

    async def get_audio_volume(self) -> int:
        """
        Get the audio volume.

        Returns:
            Volume level (0-100).

        Raises:
            ResponseDataError: If the response payload is not recognized.
        """
        frame = await self._port.request_read(FunctionCode.AUDIO_VOLUME)
        return self._direct_value(frame)

    async def set_audio_volume(self, volume: int) -> int:
        """
        Set the audio volume and read it back.

        Args:
            volume: Volume level (0-100).

        Returns:
            The volume reported by the display afterwards.

        Raises:
            ValueError: If volume is not an integer in 0-100.
        """
        _check_range(volume, "volume", MIN_VOLUME, MAX_VOLUME)
        await self._port.request_write(FunctionCode.AUDIO_VOLUME, [_DIRECT, volume])
        return await self.get_audio_volume()

    async def volume_up(self, step: int = 1) -> int:
        """
        Increase the volume by step, capped at 100.

        Args:
            step: Increment (1-100).

        Returns:
            The new volume.
        """
        _check_range(step, "step", 1, MAX_VOLUME)
        volume = await self.get_audio_volume()
        return await self.set_audio_volume(min(volume + step, MAX_VOLUME))

    async def volume_down(self, step: int = 1) -> int:
        """
        Decrease the volume by step, floored at 0.

        Args:
            step: Decrement (1-100).

        Returns:
            The new volume.
        """
        _check_range(step, "step", 1, MAX_VOLUME)
        volume = await self.get_audio_volume()
        return await self.set_audio_volume(max(volume - step, MIN_VOLUME))

    async def get_audio_mute(self) -> bool:
        """
        Get the audio mute status.

        Returns:
            True if muted.

        Raises:
            ResponseDataError: If the response payload is not recognized.
        """
        frame = await self._port.request_read(FunctionCode.AUDIO_MUTE)
        return bool(self._direct_value(frame))

    async def set_audio_mute(self, status: bool | None = None) -> None:
        """
        Change the audio mute status.

        Args:
            status: True to mute, False to unmute, None to toggle.
        """
        if status is None:
            await self._port.request_write(FunctionCode.AUDIO_MUTE, [_TOGGLE])
        else:
            await self._port.request_write(FunctionCode.AUDIO_MUTE, [_DIRECT, 0x01 if status else 0x00])

    async def mute_audio(self) -> None:
        """Mute the audio."""
        await self.set_audio_mute(True)

    async def unmute_audio(self) -> None:
        """Unmute the audio."""
        await self.set_audio_mute(False)

    @staticmethod
    def _direct_value(frame: ResponseFrame) -> int:
        """Extract the value from a [0x01, value] query payload."""
        if len(frame.payload) != 2 or frame.payload[0] != _DIRECT:
            raise ResponseDataError(frame=frame)
        return frame.payload[1]

    async def __aenter__(self) -> DisplayClient:
        """Async context manager entry - opens the port."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes the port."""
        await self.close()

    def __repr__(self) -> str:
        return f"DisplayClient({self._port!r})"


def _check_range(value: int, name: str, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValueError(f"The {name} must be an integer between {low} and {high}.")
