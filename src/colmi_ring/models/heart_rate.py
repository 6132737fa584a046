"""Heart-rate log and heart-rate logging settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

# 24h at 5-minute granularity
SAMPLES_PER_DAY = 288
DEFAULT_LOG_RANGE = 5


def normalize_heart_rates(samples: list[int]) -> list[int]:
    """Truncate or zero-pad samples to exactly one day of 5-minute slots."""
    if len(samples) >= SAMPLES_PER_DAY:
        return list(samples[:SAMPLES_PER_DAY])
    return list(samples) + [0] * (SAMPLES_PER_DAY - len(samples))


@dataclass(frozen=True)
class HeartRateLog:
    """Heart-rate history for one day.

    Attributes:
        heart_rates: Samples in bpm, 288 entries (0 = no measurement), or
            empty when the ring had no data for the requested day
        timestamp: Time of the first sample (UTC)
        size: Packet count declared by the ring's header packet
        index: Number of samples actually received
        range: Minutes between samples
    """

    heart_rates: list[int] = field(default_factory=list)
    timestamp: datetime | None = None
    size: int = 0
    index: int = 0
    range: int = DEFAULT_LOG_RANGE

    @property
    def is_empty(self) -> bool:
        """True for the placeholder log returned when the ring has no data."""
        return not self.heart_rates

    def heart_rates_with_times(self) -> list[tuple[int, datetime]]:
        """Pair every sample with its measurement time."""
        if self.timestamp is None:
            return []
        step = timedelta(minutes=self.range)
        return [
            (rate, self.timestamp + i * step)
            for i, rate in enumerate(self.heart_rates)
        ]


@dataclass(frozen=True, slots=True)
class HeartRateLogSettings:
    """Periodic heart-rate logging configuration.

    Attributes:
        enabled: Whether the ring logs heart rate in the background
        interval: Minutes between logged measurements (1-255)
    """

    enabled: bool
    interval: int
