"""BLE protocol implementation."""

from .commands import (
    DEVICE_INFO_SERVICE_UUID,
    FIRMWARE_REVISION_UUID,
    HARDWARE_REVISION_UUID,
    RX_CHAR_UUID,
    SERVICE_UUID,
    TX_CHAR_UUID,
    CommandCode,
    build_battery_command,
    build_blink_twice_command,
    build_read_heart_rate_log_command,
    build_read_heart_rate_log_settings_command,
    build_read_steps_command,
    build_real_time_command,
    build_reboot_command,
    build_set_time_command,
    build_write_heart_rate_log_settings_command,
    day_start_utc,
    real_time_kind,
)
from .correlator import CommandCorrelator
from .heart_rate_log import HeartRateLogAssembler
from .packet import (
    PACKET_SIZE,
    Packet,
    bcd_to_decimal,
    byte_to_bcd,
    checksum,
    decode,
    encode,
    verify_checksum,
)
from .real_time import RealTimeReadingStream, is_acknowledgement
from .responses import (
    parse_battery,
    parse_heart_rate_log_settings,
    parse_real_time_reading,
    parse_sport_detail,
)
from .sport_detail import SportDetailAssembler

__all__ = [
    "CommandCode",
    "SERVICE_UUID",
    "RX_CHAR_UUID",
    "TX_CHAR_UUID",
    "DEVICE_INFO_SERVICE_UUID",
    "HARDWARE_REVISION_UUID",
    "FIRMWARE_REVISION_UUID",
    "PACKET_SIZE",
    "Packet",
    "encode",
    "decode",
    "checksum",
    "verify_checksum",
    "byte_to_bcd",
    "bcd_to_decimal",
    "build_battery_command",
    "build_set_time_command",
    "build_reboot_command",
    "build_blink_twice_command",
    "build_read_heart_rate_log_command",
    "build_read_heart_rate_log_settings_command",
    "build_write_heart_rate_log_settings_command",
    "day_start_utc",
    "real_time_kind",
    "build_read_steps_command",
    "build_real_time_command",
    "parse_battery",
    "parse_real_time_reading",
    "parse_heart_rate_log_settings",
    "parse_sport_detail",
    "CommandCorrelator",
    "HeartRateLogAssembler",
    "SportDetailAssembler",
    "RealTimeReadingStream",
    "is_acknowledgement",
]
