"""Step/activity records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

MINUTES_PER_TIME_INDEX = 15


@dataclass(frozen=True, slots=True)
class SportDetail:
    """Activity totals for one 15-minute bucket of a day.

    Attributes:
        year: Full year (the ring sends it BCD-encoded, offset from 2000)
        month: Month 1-12
        day: Day of month
        time_index: 15-minute bucket of the day (0-95)
        calories: Calories burned in the bucket
        steps: Step count
        distance: Distance in meters
    """

    year: int
    month: int
    day: int
    time_index: int
    calories: int
    steps: int
    distance: int

    @property
    def timestamp(self) -> datetime:
        """Start of the bucket (UTC)."""
        return datetime(self.year, self.month, self.day, tzinfo=timezone.utc) + timedelta(
            minutes=self.time_index * MINUTES_PER_TIME_INDEX
        )
