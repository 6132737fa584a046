"""Command packet builders for the ring protocol."""

from __future__ import annotations

import struct
from datetime import date, datetime, time, timezone
from enum import IntEnum

from ..exceptions import PreconditionViolationError
from ..models.enums import RealTimeAction, RealTimeReading
from ..models.heart_rate import HeartRateLogSettings
from .packet import Packet, byte_to_bcd, encode


class CommandCode(IntEnum):
    """Command tags of the ring protocol.

    The same tag is echoed as byte 0 of the ring's reply.
    """

    SET_TIME = 1
    BATTERY = 3
    REBOOT = 8
    BLINK_TWICE = 16
    READ_HEART_RATE_LOG = 21
    HEART_RATE_LOG_SETTINGS = 22
    GET_STEP_SOMEDAY = 67
    START_REAL_TIME = 105
    STOP_REAL_TIME = 106


# Nordic UART-like service used for the command protocol
SERVICE_UUID = "6e40fff0-b5a3-f393-e0a9-e50e24dcca9e"
RX_CHAR_UUID = "6e400002-b5a3-f393-e0a9-e50e24dcca9e"  # Write to ring
TX_CHAR_UUID = "6e400003-b5a3-f393-e0a9-e50e24dcca9e"  # Notify from ring

# Standard Device Information service, read outside the command protocol
DEVICE_INFO_SERVICE_UUID = "0000180a-0000-1000-8000-00805f9b34fb"
HARDWARE_REVISION_UUID = "00002a27-0000-1000-8000-00805f9b34fb"
FIRMWARE_REVISION_UUID = "00002a26-0000-1000-8000-00805f9b34fb"

# Heart-rate log settings sub-commands
HR_SETTINGS_READ = 1
HR_SETTINGS_WRITE = 2
HR_SETTINGS_ENABLED = 1
HR_SETTINGS_DISABLED = 2

SET_TIME_LANGUAGE_ENGLISH = 1


def build_battery_command() -> Packet:
    """Build command to read battery level."""
    return encode(CommandCode.BATTERY)


def build_set_time_command(instant: datetime) -> Packet:
    """Build command to set the ring's clock.

    Naive datetimes are taken to be UTC already.

    Format:
        [1..6] BCD year (since 2000), month, day, hour, minute, second
        [7]    Language (1 = English)
    """
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    if not 2000 <= instant.year <= 2099:
        raise PreconditionViolationError(f"year out of range: {instant.year} (must be 2000-2099)")

    payload = bytes([
        byte_to_bcd(instant.year % 2000),
        byte_to_bcd(instant.month),
        byte_to_bcd(instant.day),
        byte_to_bcd(instant.hour),
        byte_to_bcd(instant.minute),
        byte_to_bcd(instant.second),
        SET_TIME_LANGUAGE_ENGLISH,
    ])
    return encode(CommandCode.SET_TIME, payload)


def build_reboot_command() -> Packet:
    return encode(CommandCode.REBOOT, b"\x01")


def build_blink_twice_command() -> Packet:
    return encode(CommandCode.BLINK_TWICE)


def day_start_utc(day: date | datetime) -> datetime:
    """Midnight UTC of the given day."""
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(timezone.utc)
        day = day.date()
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def build_read_heart_rate_log_command(day: date | datetime) -> Packet:
    """Build command to download the heart-rate log of one day.

    Format:
        [1..4] Midnight UTC of the day, seconds since epoch (little-endian int32)
    """
    timestamp = int(day_start_utc(day).timestamp())
    return encode(CommandCode.READ_HEART_RATE_LOG, struct.pack("<i", timestamp))


def build_read_heart_rate_log_settings_command() -> Packet:
    return encode(CommandCode.HEART_RATE_LOG_SETTINGS, bytes([HR_SETTINGS_READ]))


def build_write_heart_rate_log_settings_command(settings: HeartRateLogSettings) -> Packet:
    """Build command to change periodic heart-rate logging.

    Format:
        [1] 2 (write)
        [2] 1 = enabled, 2 = disabled
        [3] Interval in minutes

    Raises:
        PreconditionViolationError: If interval is not 1-255
    """
    if not 1 <= settings.interval <= 0xFF:
        raise PreconditionViolationError(
            f"interval out of range: {settings.interval} (must be 1-255)"
        )
    enabled = HR_SETTINGS_ENABLED if settings.enabled else HR_SETTINGS_DISABLED
    return encode(
        CommandCode.HEART_RATE_LOG_SETTINGS,
        bytes([HR_SETTINGS_WRITE, enabled, settings.interval]),
    )


def build_read_steps_command(day_offset: int = 0) -> Packet:
    """Build command to read sport details.

    Args:
        day_offset: Days back from today (0 = today)
    """
    if not 0 <= day_offset <= 0xFF:
        raise PreconditionViolationError(
            f"day_offset out of range: {day_offset} (must be 0-255)"
        )
    return encode(CommandCode.GET_STEP_SOMEDAY, bytes([day_offset, 0x0F, 0x00, 0x5F, 0x01]))


def real_time_kind(kind: int) -> RealTimeReading:
    """Convert a caller-supplied reading kind.

    Raises:
        PreconditionViolationError: If the kind is not a known RealTimeReading
    """
    try:
        return RealTimeReading(kind)
    except ValueError as e:
        raise PreconditionViolationError(f"Unknown real-time reading kind: {kind}") from e


def build_real_time_command(kind: RealTimeReading, action: RealTimeAction) -> Packet:
    """Build a real-time measurement control packet.

    START and CONTINUE go out on the start tag, STOP and PAUSE on the stop tag.

    Format:
        [1] Reading kind
        [2] Action code

    Raises:
        PreconditionViolationError: If kind or action is unknown
    """
    kind = real_time_kind(kind)
    try:
        action = RealTimeAction(action)
    except ValueError as e:
        raise PreconditionViolationError(f"Unknown real-time action: {action}") from e

    if action in (RealTimeAction.START, RealTimeAction.CONTINUE):
        tag = CommandCode.START_REAL_TIME
    else:
        tag = CommandCode.STOP_REAL_TIME
    return encode(tag, bytes([kind, action]))
