from __future__ import annotations

from enum import IntEnum


class RealTimeReading(IntEnum):
    """Sensor kinds the ring can measure on demand.

    The value is sent as the first payload byte of the start/stop commands
    and echoed back in every real-time response.
    """
    HEART_RATE = 1
    BLOOD_PRESSURE = 2
    SPO2 = 3
    FATIGUE = 4
    HEALTH_CHECK = 5
    ECG = 7
    PRESSURE = 8
    BLOOD_SUGAR = 9
    HRV = 10


class RealTimeAction(IntEnum):
    """Action codes carried in the second payload byte of real-time commands."""
    START = 1
    PAUSE = 2
    CONTINUE = 3
    STOP = 4


class AssemblyState(IntEnum):
    """Lifecycle of a multi-packet response assembler."""
    IDLE = 0
    AWAITING_HEADER = 1
    ACCUMULATING = 2
