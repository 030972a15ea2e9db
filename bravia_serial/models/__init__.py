"""
Data models for display serial control.

Contains the Pydantic configuration model validated at construction.
"""

from bravia_serial.models.config import PortConfig

__all__ = [
    "PortConfig",
]
