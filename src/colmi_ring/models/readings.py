"""Single-packet results: battery, real-time readings, device info."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import RealTimeReading


@dataclass(frozen=True, slots=True)
class BatteryInfo:
    """Battery state reported by the ring.

    Attributes:
        level: Charge level in percent (0-100)
        charging: True while the ring sits on its charger
    """

    level: int
    charging: bool


@dataclass(frozen=True, slots=True)
class Reading:
    """One on-demand sensor measurement."""

    kind: RealTimeReading
    value: int


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    """Revision strings from the standard Device Information service.

    These are plain GATT reads, not part of the 16-byte command protocol.
    """

    hardware_version: str | None = None
    firmware_version: str | None = None
