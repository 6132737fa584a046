"""Reassembly of the multi-packet heart-rate log response."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from ..exceptions import IncompleteReassemblyError, NoDataError, PreconditionViolationError
from ..models.enums import AssemblyState
from ..models.heart_rate import DEFAULT_LOG_RANGE, HeartRateLog, normalize_heart_rates
from .commands import CommandCode, day_start_utc
from .packet import PACKET_SIZE, Packet

_LOGGER = logging.getLogger(__name__)

SAMPLES_PER_PACKET = 13
SAMPLES_IN_FIRST_PACKET = 9
GAP = -1

SUBTYPE_HEADER = 0
SUBTYPE_FIRST_DATA = 1
SUBTYPE_TODAY_END = 23
SUBTYPE_NO_DATA = 255


@dataclass
class _Progress:
    """Everything one heart-rate log download accumulates."""

    state: AssemblyState = AssemblyState.IDLE
    target_day: datetime | None = None
    is_today: bool = False
    raw_heart_rates: list[int] = field(default_factory=list)
    timestamp: datetime | None = None
    size: int = 0
    index: int = 0
    range: int = DEFAULT_LOG_RANGE


class HeartRateLogAssembler:
    """Assembles a day's heart-rate log from the ring's packet sequence.

    The ring answers a READ_HEART_RATE_LOG command with:
    - Subtype 0:   header, [2] = packet count, [3] = minutes between samples
    - Subtype 1:   [2..5] base timestamp (LE int32), [6..14] first 9 samples
    - Subtype 2+:  [2..14] 13 more samples each; the last one is size - 1
    - Subtype 255: no data for the requested day

    For today's log the ring may close the sequence early with subtype 23.
    """

    def __init__(self) -> None:
        self._progress = _Progress()

    def begin(self, target_day: date | datetime | None = None, is_today: bool = False) -> None:
        """Prepare for a new download.

        Args:
            target_day: Day being requested, used to date an empty log
            is_today: Whether the request covers the current day

        Raises:
            PreconditionViolationError: If a download is already in progress
        """
        if self.is_active:
            raise PreconditionViolationError("Heart-rate log download already in progress")
        self._progress = _Progress(
            state=AssemblyState.AWAITING_HEADER,
            target_day=day_start_utc(target_day) if target_day is not None else None,
            is_today=is_today,
        )

    def reset(self) -> None:
        self._progress = _Progress()

    @property
    def state(self) -> AssemblyState:
        return self._progress.state

    @property
    def is_active(self) -> bool:
        return self._progress.state != AssemblyState.IDLE

    @property
    def size(self) -> int:
        return self._progress.size

    @property
    def index(self) -> int:
        return self._progress.index

    @property
    def range(self) -> int:
        return self._progress.range

    @property
    def timestamp(self) -> datetime | None:
        return self._progress.timestamp

    @property
    def raw_heart_rates(self) -> list[int]:
        return list(self._progress.raw_heart_rates)

    def feed(self, packet: Packet | bytes) -> HeartRateLog | None:
        """Consume one packet.

        Returns:
            The finished HeartRateLog, or None while more packets are expected
            (and for packets that are not heart-rate log packets at all)

        Raises:
            NoDataError: Ring has no data and no target day was registered
            IncompleteReassemblyError: Sequence ended without a base timestamp
        """
        if len(packet) != PACKET_SIZE or packet[0] != CommandCode.READ_HEART_RATE_LOG:
            return None

        progress = self._progress
        subtype = packet[1]

        if subtype == SUBTYPE_NO_DATA:
            return self._no_data()

        if progress.is_today and subtype == SUBTYPE_TODAY_END:
            _LOGGER.debug("Today's heart-rate log ended early at %d samples", progress.index)
            return self._finish()

        if subtype == SUBTYPE_HEADER:
            progress.size = packet[2]
            progress.range = packet[3]
            progress.raw_heart_rates = [GAP] * (progress.size * SAMPLES_PER_PACKET)
            progress.state = AssemblyState.ACCUMULATING
            _LOGGER.debug(
                "Heart-rate log header: %d packets, %d minute range",
                progress.size,
                progress.range,
            )
            return None

        progress.state = AssemblyState.ACCUMULATING

        if subtype == SUBTYPE_FIRST_DATA:
            seconds = struct.unpack("<i", bytes(packet[2:6]))[0]
            progress.timestamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
            self._store(list(packet[6:PACKET_SIZE - 1]))
            if progress.size <= 1:
                return self._finish()
            return None

        self._store(list(packet[2:PACKET_SIZE - 1]))
        if subtype >= progress.size - 1:
            return self._finish()
        return None

    def _store(self, samples: list[int]) -> None:
        progress = self._progress
        start = progress.index
        progress.raw_heart_rates[start:start + len(samples)] = samples
        progress.index += len(samples)

    def _finish(self) -> HeartRateLog:
        progress = self._progress
        self.reset()

        if progress.timestamp is None:
            raise IncompleteReassemblyError(
                "Heart-rate log ended without a base timestamp from the ring"
            )

        samples = [0 if rate == GAP else rate for rate in progress.raw_heart_rates]
        log = HeartRateLog(
            heart_rates=normalize_heart_rates(samples),
            timestamp=progress.timestamp,
            size=progress.size,
            index=progress.index,
            range=progress.range,
        )
        _LOGGER.debug("Heart-rate log complete: %d samples from %s", progress.index, log.timestamp)
        return log

    def _no_data(self) -> HeartRateLog:
        progress = self._progress
        self.reset()

        if progress.target_day is None:
            raise NoDataError("Ring reported no heart-rate data and no target day is known")

        _LOGGER.debug("No heart-rate data for %s", progress.target_day.date())
        return HeartRateLog(
            heart_rates=[],
            timestamp=progress.target_day,
            size=0,
            index=0,
            range=progress.range,
        )
