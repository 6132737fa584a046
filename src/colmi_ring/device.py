"""Main Colmi ring device class."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

from .exceptions import (
    BLETimeoutError,
    DisconnectedError,
    InvalidFrameError,
    ProtocolError,
)
from .models.activity import SportDetail
from .models.enums import RealTimeReading
from .models.heart_rate import HeartRateLog, HeartRateLogSettings
from .models.readings import BatteryInfo, DeviceInfo, Reading
from .protocol import (
    CommandCode,
    CommandCorrelator,
    HeartRateLogAssembler,
    Packet,
    RealTimeReadingStream,
    SportDetailAssembler,
    build_battery_command,
    build_blink_twice_command,
    build_read_heart_rate_log_command,
    build_read_heart_rate_log_settings_command,
    build_read_steps_command,
    build_reboot_command,
    build_set_time_command,
    build_write_heart_rate_log_settings_command,
    day_start_utc,
    decode,
    encode,
    parse_battery,
    parse_heart_rate_log_settings,
)
from .sinks import publish
from .transport import BLEConnection

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class ColmiRingDevice:
    """Colmi BLE smart ring.

    Main API for communicating with the ring. Owns the command correlator and
    the multi-packet assemblers, and is the single place inbound notifications
    are dispatched from.

    Usage:
        async with ColmiRingDevice("AA:BB:CC:DD:EE:FF") as ring:
            battery = await ring.get_battery()
            reading = await ring.get_real_time_reading(RealTimeReading.HEART_RATE)
            log = await ring.get_heart_rate_log(date.today())
    """

    # Measurements take a while for the sensor to settle
    TIMEOUT_REAL_TIME = 30.0
    # Multi-packet downloads
    TIMEOUT_LOG = 20.0

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            transport: Any | None = None,
            timeout: float = 10.0,
            sinks: Iterable[Any] | None = None,
    ):
        """Initialize ring device.

        Args:
            mac_address: Ring MAC address
            ble_device: Optional BLEDevice from HA bluetooth integration
            transport: Optional already-built transport (defaults to BLEConnection)
            timeout: Default reply timeout in seconds (default: 10)
            sinks: Optional result consumers, see colmi_ring.sinks
        """
        self.mac_address = mac_address
        self.timeout = timeout
        self._connection = transport or BLEConnection(mac_address, ble_device, timeout)
        self._connection.set_notification_handler(self.handle_notification)
        self._connection.set_disconnect_handler(self.handle_disconnect)

        self._sinks = list(sinks or [])
        self._correlator = CommandCorrelator(self._write, timeout)
        self._real_time = RealTimeReadingStream(self._correlator)
        self._heart_rate_log = HeartRateLogAssembler()
        self._sport_detail = SportDetailAssembler()
        self._heart_rate_log_result: asyncio.Future[HeartRateLog] | None = None
        self._sport_detail_result: asyncio.Future[list[SportDetail]] | None = None

    async def __aenter__(self) -> ColmiRingDevice:
        await self._connection.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._connection.disconnect()
        self.handle_disconnect()

    async def _write(self, data: bytes) -> None:
        await self._connection.write(data)

    # ------------------------------------------------------------------
    # Inbound dispatch
    # ------------------------------------------------------------------

    def handle_notification(self, data: bytes) -> None:
        """Route one inbound buffer.

        Packets for an active heart-rate or sport detail download go to its
        assembler, everything else to the correlator. Never raises: protocol
        errors are delivered to the operation waiting for the result.
        """
        try:
            packet = decode(data)
        except InvalidFrameError as e:
            _LOGGER.warning("Dropping notification %s: %s", bytes(data).hex(), e)
            return

        _LOGGER.debug("RX %s", packet.raw.hex())

        if packet.tag == CommandCode.READ_HEART_RATE_LOG and self._heart_rate_log.is_active:
            self._feed(self._heart_rate_log, self._heart_rate_log_result, packet)
        elif packet.tag == CommandCode.GET_STEP_SOMEDAY and self._sport_detail.is_active:
            self._feed(self._sport_detail, self._sport_detail_result, packet)
        else:
            self._correlator.resolve(packet)

    @staticmethod
    def _feed(assembler, result: asyncio.Future | None, packet: Packet) -> None:
        try:
            value = assembler.feed(packet)
        except ProtocolError as e:
            if result is not None and not result.done():
                result.set_exception(e)
            return
        if value is not None and result is not None and not result.done():
            result.set_result(value)

    def handle_disconnect(self) -> None:
        """Fail everything in flight and clear assembly state."""
        error = DisconnectedError(f"Disconnected from {self.mac_address}")
        self._correlator.fail_all(error)
        for result in (self._heart_rate_log_result, self._sport_detail_result):
            if result is not None and not result.done():
                result.set_exception(error)
        self._heart_rate_log.reset()
        self._sport_detail.reset()

    # ------------------------------------------------------------------
    # Single-packet commands
    # ------------------------------------------------------------------

    async def get_battery(self) -> BatteryInfo:
        """Read battery level and charging state."""
        reply = await self._correlator.send(build_battery_command())
        info = parse_battery(reply)
        _LOGGER.info("Battery: %d%% (charging=%s)", info.level, info.charging)
        publish(self._sinks, "on_battery", info)
        return info

    async def get_real_time_reading(
            self,
            kind: RealTimeReading,
            timeout: float | None = None,
    ) -> Reading:
        """Take one on-demand measurement.

        Args:
            kind: Sensor to read
            timeout: Seconds to wait for a value (default: TIMEOUT_REAL_TIME)

        Raises:
            DeviceReportedError: If the ring reports an error for the measurement
            BLETimeoutError: If no value arrives in time
            PreconditionViolationError: If kind is not a known reading
        """
        reading = await self._real_time.read(
            kind, timeout=self.TIMEOUT_REAL_TIME if timeout is None else timeout
        )
        _LOGGER.info("Real-time %s: %d", reading.kind.name, reading.value)
        publish(self._sinks, "on_reading", reading)
        return reading

    async def get_heart_rate_log_settings(self) -> HeartRateLogSettings:
        """Read whether periodic heart-rate logging is on and its interval."""
        reply = await self._correlator.send(build_read_heart_rate_log_settings_command())
        return parse_heart_rate_log_settings(reply)

    async def set_heart_rate_log_settings(
            self,
            settings: HeartRateLogSettings,
    ) -> HeartRateLogSettings:
        """Change periodic heart-rate logging.

        Returns:
            The settings as confirmed by the ring

        Raises:
            PreconditionViolationError: If the interval is not 1-255
        """
        command = build_write_heart_rate_log_settings_command(settings)
        reply = await self._correlator.send(command)
        confirmed = parse_heart_rate_log_settings(reply)
        _LOGGER.info(
            "Heart-rate logging %s every %d minutes",
            "enabled" if confirmed.enabled else "disabled",
            confirmed.interval,
        )
        return confirmed

    async def reboot(self) -> None:
        """Restart the ring. The ring drops the connection and sends no reply."""
        await self._correlator.transmit(build_reboot_command())

    async def blink_twice(self) -> None:
        """Blink the ring's LED twice, e.g. to find it. No reply is expected."""
        await self._correlator.transmit(build_blink_twice_command())

    async def set_time(self, instant: datetime | None = None) -> None:
        """Set the ring's clock (default: now)."""
        instant = instant or datetime.now(timezone.utc)
        await self._correlator.transmit(build_set_time_command(instant))
        _LOGGER.debug("Ring time set to %s", instant.isoformat())

    async def raw_command(
            self,
            tag: int,
            payload: bytes = b"",
            timeout: float | None = None,
    ) -> Packet:
        """Send an arbitrary command and return the first reply with its tag."""
        return await self._correlator.send(encode(tag, payload), timeout=timeout)

    async def get_device_info(self) -> DeviceInfo:
        """Read hardware/firmware revision (outside the command protocol)."""
        return await self._connection.read_device_info()

    # ------------------------------------------------------------------
    # Multi-packet downloads
    # ------------------------------------------------------------------

    async def get_heart_rate_log(
            self,
            day: date | datetime,
            timeout: float | None = None,
    ) -> HeartRateLog:
        """Download the heart-rate log of one day.

        Returns:
            HeartRateLog; empty (is_empty) if the ring has nothing for that day

        Raises:
            PreconditionViolationError: If a heart-rate log download is running
            IncompleteReassemblyError: If the ring's sequence is unusable
            BLETimeoutError: If the download does not finish in time
        """
        command = build_read_heart_rate_log_command(day)
        target = day_start_utc(day).date()
        is_today = target == datetime.now(timezone.utc).date()

        self._heart_rate_log.begin(target, is_today=is_today)
        result: asyncio.Future[HeartRateLog] = asyncio.get_running_loop().create_future()
        self._heart_rate_log_result = result
        try:
            log = await self._download(command, result, timeout)
        finally:
            self._heart_rate_log_result = None
            self._heart_rate_log.reset()

        _LOGGER.info("Heart-rate log for %s: %d samples", target, log.index)
        publish(self._sinks, "on_heart_rate_log", log)
        return log

    async def get_steps(
            self,
            day_offset: int = 0,
            timeout: float | None = None,
    ) -> list[SportDetail]:
        """Download the sport detail records of one day.

        Args:
            day_offset: Days back from today (0 = today)

        Raises:
            PreconditionViolationError: If a sport detail download is running
            NoDataError: If the ring has no records for that day
            BLETimeoutError: If the download does not finish in time
        """
        command = build_read_steps_command(day_offset)

        self._sport_detail.begin()
        result: asyncio.Future[list[SportDetail]] = asyncio.get_running_loop().create_future()
        self._sport_detail_result = result
        try:
            details = await self._download(command, result, timeout)
        finally:
            self._sport_detail_result = None
            self._sport_detail.reset()

        _LOGGER.info("Sport details for day offset %d: %d records", day_offset, len(details))
        publish(self._sinks, "on_sport_details", details)
        return details

    async def _download(self, command: Packet, result: asyncio.Future, timeout: float | None):
        deadline = self.TIMEOUT_LOG if timeout is None else timeout
        await self._correlator.transmit(command)
        try:
            return await asyncio.wait_for(result, timeout=deadline)
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Download for command {command.tag} not complete within {deadline}s"
            ) from e
