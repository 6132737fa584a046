"""Colmi Smart Ring BLE Protocol Package.

  Pure Python package for communicating with Colmi BLE smart rings.
  """

from .device import ColmiRingDevice
from .discovery import discover_devices
from .exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    ChecksumMismatchError,
    ColmiRingError,
    DeviceReportedError,
    DisconnectedError,
    IncompleteReassemblyError,
    InvalidFrameError,
    NoDataError,
    PreconditionViolationError,
    ProtocolError,
)
from .models.activity import SportDetail
from .models.enums import RealTimeAction, RealTimeReading
from .models.heart_rate import HeartRateLog, HeartRateLogSettings
from .models.readings import BatteryInfo, DeviceInfo, Reading
from .protocol import SERVICE_UUID, CommandCode, Packet
from .sinks import ResultSink

__version__ = "0.1.0"

__all__ = [
    # Main API
    "ColmiRingDevice",
    "discover_devices",
    "ResultSink",
    # Exceptions
    "ColmiRingError",
    "BLEConnectionError",
    "DisconnectedError",
    "BLETimeoutError",
    "ProtocolError",
    "InvalidFrameError",
    "ChecksumMismatchError",
    "DeviceReportedError",
    "NoDataError",
    "IncompleteReassemblyError",
    "PreconditionViolationError",
    # Models
    "BatteryInfo",
    "DeviceInfo",
    "HeartRateLog",
    "HeartRateLogSettings",
    "Reading",
    "SportDetail",
    "Packet",
    # Enums
    "CommandCode",
    "RealTimeAction",
    "RealTimeReading",
    # Constants
    "SERVICE_UUID",
]
