"""Optional consumers of decoded results (storage, health platforms, UI).

A sink is any object passed to ColmiRingDevice(sinks=[...]) that implements
some of the methods below. Missing methods are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from .models.activity import SportDetail
from .models.heart_rate import HeartRateLog
from .models.readings import BatteryInfo, Reading

_LOGGER = logging.getLogger(__name__)


class ResultSink(Protocol):
    """Receives results after the operation that produced them completes."""

    def on_battery(self, info: BatteryInfo) -> None: ...

    def on_reading(self, reading: Reading) -> None: ...

    def on_heart_rate_log(self, log: HeartRateLog) -> None: ...

    def on_sport_details(self, details: list[SportDetail]) -> None: ...


def publish(sinks: Iterable[Any], method: str, result: Any) -> None:
    """Deliver a result to every sink that implements ``method``.

    A failing sink is logged and does not affect the others or the caller.
    """
    for sink in sinks:
        handler = getattr(sink, method, None)
        if handler is None:
            continue
        try:
            handler(result)
        except Exception:
            _LOGGER.exception("Result sink %r failed in %s", sink, method)
