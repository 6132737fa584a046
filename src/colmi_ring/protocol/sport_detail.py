"""Reassembly of the multi-packet sport detail (steps) response."""

from __future__ import annotations

import logging

from ..exceptions import NoDataError, PreconditionViolationError
from ..models.activity import SportDetail
from ..models.enums import AssemblyState
from .commands import CommandCode
from .packet import PACKET_SIZE, Packet
from .responses import parse_sport_detail

_LOGGER = logging.getLogger(__name__)

NO_DATA_MARKER = 255
PROTOCOL_MARKER = 240


class SportDetailAssembler:
    """Collects SportDetail records until the ring sends the last one.

    The sequence has no header with a total; instead every record carries
    its own index ([5]) and the record count ([6]). The first packet may be:
    - [1] = 255: no data for the requested day
    - [1] = 240: protocol marker, [3] = 1 selects the new calorie protocol
    """

    def __init__(self) -> None:
        self._state = AssemblyState.IDLE
        self._new_calorie_protocol = False
        self._index = 0
        self._details: list[SportDetail] = []

    def begin(self) -> None:
        """Prepare for a new download.

        Raises:
            PreconditionViolationError: If a download is already in progress
        """
        if self.is_active:
            raise PreconditionViolationError("Sport detail download already in progress")
        self.reset()
        self._state = AssemblyState.ACCUMULATING

    def reset(self) -> None:
        self._state = AssemblyState.IDLE
        self._new_calorie_protocol = False
        self._index = 0
        self._details = []

    @property
    def state(self) -> AssemblyState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state != AssemblyState.IDLE

    @property
    def index(self) -> int:
        return self._index

    @property
    def new_calorie_protocol(self) -> bool:
        return self._new_calorie_protocol

    @property
    def details(self) -> list[SportDetail]:
        return list(self._details)

    def feed(self, packet: Packet | bytes) -> list[SportDetail] | None:
        """Consume one packet.

        Returns:
            All records once the last one arrives, otherwise None

        Raises:
            NoDataError: If the ring has no sport data for the day
        """
        if len(packet) != PACKET_SIZE or packet[0] != CommandCode.GET_STEP_SOMEDAY:
            return None

        self._state = AssemblyState.ACCUMULATING

        if self._index == 0 and packet[1] == NO_DATA_MARKER:
            self.reset()
            raise NoDataError("Ring reported no sport data for the requested day")

        if self._index == 0 and packet[1] == PROTOCOL_MARKER:
            if packet[3] == 1:
                self._new_calorie_protocol = True
            _LOGGER.debug("Sport detail protocol marker, new calories=%s", self._new_calorie_protocol)
            self._index += 1
            return None

        detail = parse_sport_detail(packet, self._new_calorie_protocol)
        self._details.append(detail)

        if packet[5] == packet[6] - 1:
            details = self._details
            self.reset()
            _LOGGER.debug("Sport detail download complete: %d records", len(details))
            return details

        self._index += 1
        return None
