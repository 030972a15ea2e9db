"""
Pydantic model for serial control port configuration.

Only the port path and the command interval are configurable. The serial
line settings (9600 baud, 8N1, no flow control) are fixed by the display.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

from bravia_serial.exceptions import ConfigurationError
from bravia_serial.protocol.constants import ProtocolConstants


class PortConfig(BaseModel):
    """
    Serial control port configuration.

    Example:
        >>> config = PortConfig(path="/dev/ttyUSB0")
        >>> config.interval
        500
        >>> config.interval_seconds
        0.5
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1, description="Serial port identifier, e.g. /dev/ttyUSB0 or COM3")
    interval: StrictInt = Field(
        default=ProtocolConstants.DEFAULT_INTERVAL_MS,
        ge=ProtocolConstants.MIN_INTERVAL_MS,
        le=ProtocolConstants.MAX_INTERVAL_MS,
        description="Minimum spacing between consecutive requests in milliseconds",
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject blank port identifiers."""
        v = v.strip()
        if not v:
            raise ValueError("The path is required")
        return v

    @property
    def interval_seconds(self) -> float:
        """Get the request interval in seconds."""
        return self.interval / 1000.0

    @classmethod
    def create(cls, path: str | None = None, interval: int | None = None) -> PortConfig:
        """
        Build a configuration, converting validation failures.

        Args:
            path: Serial port identifier.
            interval: Request interval in ms (None uses the default).

        Returns:
            PortConfig instance.

        Raises:
            ConfigurationError: If the path is missing or the interval is
                not an integer in 0-1000.
        """
        params: dict[str, object] = {"path": path}
        if interval is not None:
            params["interval"] = interval
        try:
            return cls.model_validate(params)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid port configuration: {e}") from e
