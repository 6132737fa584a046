"""BLE transport."""

from .connection import BLEConnection

__all__ = ["BLEConnection"]
