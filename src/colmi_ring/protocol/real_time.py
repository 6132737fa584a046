"""Real-time (on demand) sensor readings."""

from __future__ import annotations

import logging

from ..exceptions import DeviceReportedError
from ..models.enums import RealTimeAction, RealTimeReading
from ..models.readings import Reading
from .commands import build_real_time_command, real_time_kind
from .correlator import CommandCorrelator, ReplyFilter
from .packet import Packet
from .responses import real_time_error_code

_LOGGER = logging.getLogger(__name__)


def is_acknowledgement(packet: Packet | bytes) -> bool:
    """True for the error-free all-zero reply that only confirms the start command.

    A genuine zero value is indistinguishable from this, so it is never
    reported as a reading.
    """
    return real_time_error_code(packet) == 0 and packet[3] == 0


def real_time_reply_filter(kind: RealTimeReading) -> ReplyFilter:
    """Build the correlator filter for one real-time measurement.

    Raises:
        DeviceReportedError: From the filter, when the ring reports an error
    """
    def accept(packet: Packet) -> bool:
        if packet[1] != kind:
            _LOGGER.debug("Ignoring real-time reply for kind %d while reading %s", packet[1], kind.name)
            return False
        error_code = real_time_error_code(packet)
        if error_code != 0:
            raise DeviceReportedError(kind, error_code)
        return not is_acknowledgement(packet)

    return accept


class RealTimeReadingStream:
    """Starts a measurement, waits past the ACK for a value, then stops it."""

    def __init__(self, correlator: CommandCorrelator):
        self._correlator = correlator

    async def read(self, kind: RealTimeReading, timeout: float | None = None) -> Reading:
        """Take one measurement.

        Args:
            kind: Sensor to read
            timeout: Deadline for the measured value in seconds

        Raises:
            DeviceReportedError: If the ring rejects the measurement
            BLETimeoutError: If no value arrives in time
            PreconditionViolationError: If the kind is unknown, before anything is sent
        """
        kind = real_time_kind(kind)
        start = build_real_time_command(kind, RealTimeAction.START)
        try:
            reply = await self._correlator.send(
                start,
                timeout=timeout,
                accept=real_time_reply_filter(kind),
            )
        finally:
            await self.stop(kind)

        reading = Reading(kind=kind, value=reply[3])
        _LOGGER.debug("Real-time %s reading: %d", kind.name, reading.value)
        return reading

    async def stop(self, kind: RealTimeReading) -> None:
        """Send the stop command; send failures are logged, not raised."""
        stop = build_real_time_command(kind, RealTimeAction.STOP)
        try:
            await self._correlator.transmit(stop)
        except Exception as e:
            _LOGGER.warning("Failed to stop real-time %s reading: %s", RealTimeReading(stop[1]).name, e)
