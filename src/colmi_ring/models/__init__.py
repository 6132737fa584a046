"""Data models for Colmi smart rings."""

from .activity import SportDetail
from .enums import AssemblyState, RealTimeAction, RealTimeReading
from .heart_rate import (
    SAMPLES_PER_DAY,
    HeartRateLog,
    HeartRateLogSettings,
    normalize_heart_rates,
)
from .readings import BatteryInfo, DeviceInfo, Reading

__all__ = [
    "AssemblyState",
    "BatteryInfo",
    "DeviceInfo",
    "HeartRateLog",
    "HeartRateLogSettings",
    "RealTimeAction",
    "RealTimeReading",
    "Reading",
    "SAMPLES_PER_DAY",
    "SportDetail",
    "normalize_heart_rates",
]
