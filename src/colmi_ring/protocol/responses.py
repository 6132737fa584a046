"""Single-packet response parsing.

The parsers here never raise on foreign input: a buffer with the wrong tag
or length is simply not theirs, and they return None.
"""

from __future__ import annotations

import logging

from ..models.activity import SportDetail
from ..models.enums import RealTimeReading
from ..models.heart_rate import HeartRateLogSettings
from ..models.readings import BatteryInfo, Reading
from .commands import HR_SETTINGS_DISABLED, HR_SETTINGS_ENABLED, CommandCode
from .packet import PACKET_SIZE, Packet, bcd_to_decimal

_LOGGER = logging.getLogger(__name__)

# Calorie fields are sent in tens under the newer firmware protocol
NEW_CALORIE_PROTOCOL_FACTOR = 10


def _matches(packet: Packet | bytes | bytearray, tag: int) -> bool:
    return len(packet) == PACKET_SIZE and packet[0] == tag


def parse_battery(packet: Packet | bytes) -> BatteryInfo | None:
    """Parse battery response.

    Format: [3][level][charging]
    """
    if not _matches(packet, CommandCode.BATTERY):
        return None
    return BatteryInfo(level=packet[1], charging=packet[2] != 0)


def real_time_error_code(packet: Packet | bytes) -> int:
    return packet[2]


def parse_real_time_reading(packet: Packet | bytes) -> Reading | None:
    """Parse a real-time measurement response.

    Format: [105][kind][error code][value]

    Returns:
        Reading, or None for foreign packets, unknown kinds and device errors
    """
    if not _matches(packet, CommandCode.START_REAL_TIME):
        return None
    try:
        kind = RealTimeReading(packet[1])
    except ValueError:
        return None

    error_code = real_time_error_code(packet)
    if error_code != 0:
        _LOGGER.debug("Real-time reading %s error code: %d", kind.name, error_code)
        return None
    return Reading(kind=kind, value=packet[3])


def parse_heart_rate_log_settings(packet: Packet | bytes) -> HeartRateLogSettings | None:
    """Parse heart-rate log settings response.

    Format: [22][sub-command][enabled: 1=yes, 2=no][interval minutes]
    """
    if not _matches(packet, CommandCode.HEART_RATE_LOG_SETTINGS):
        return None

    raw_enabled = packet[2]
    if raw_enabled == HR_SETTINGS_ENABLED:
        enabled = True
    elif raw_enabled == HR_SETTINGS_DISABLED:
        enabled = False
    else:
        _LOGGER.warning(
            "Unexpected value in heart-rate log enabled byte: %d, treating as disabled",
            raw_enabled,
        )
        enabled = False
    return HeartRateLogSettings(enabled=enabled, interval=packet[3])


def parse_sport_detail(
        packet: Packet | bytes,
        new_calorie_protocol: bool = False,
) -> SportDetail | None:
    """Parse one sport detail record.

    Format:
        [1..3]   BCD year (since 2000), month, day
        [4]      15-minute time index
        [5]      Record index, [6] record count
        [7..8]   Calories (little-endian uint16)
        [9..10]  Steps (little-endian uint16)
        [11..12] Distance in meters (little-endian uint16)
    """
    if not _matches(packet, CommandCode.GET_STEP_SOMEDAY):
        return None

    calories = packet[7] | (packet[8] << 8)
    if new_calorie_protocol:
        calories *= NEW_CALORIE_PROTOCOL_FACTOR

    return SportDetail(
        year=bcd_to_decimal(packet[1]) + 2000,
        month=bcd_to_decimal(packet[2]),
        day=bcd_to_decimal(packet[3]),
        time_index=packet[4],
        calories=calories,
        steps=packet[9] | (packet[10] << 8),
        distance=packet[11] | (packet[12] << 8),
    )
