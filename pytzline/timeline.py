"""Visible time window and instant <-> column mapping.

The window is centred on the scrub instant and sized from the terminal
width: about two columns per hour, never less than 48 hours (a day each
side) and never more than a week.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from .tzutil import to_local

COLUMNS_PER_HOUR = 2.0
MIN_HOURS = 48.0
MAX_HOURS = 168.0
MIN_RENDER_WIDTH = 2


def hours_for_width(width: int) -> float:
    return max(MIN_HOURS, min(MAX_HOURS, width / COLUMNS_PER_HOUR))


def window_bounds(scrub: datetime, width: int) -> tuple[datetime, datetime]:
    half = timedelta(minutes=int(hours_for_width(width) * 60 / 2))
    return scrub - half, scrub + half


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def instant_to_column(instant: datetime, start: datetime, end: datetime, width: int) -> int:
    if width <= 0:
        return 0
    total = int((end - start).total_seconds())
    if total == 0:
        return 0
    ratio = int((instant - start).total_seconds()) / total
    column = _round_half_up(ratio * width)
    return max(0, min(column, width - 1))


def column_to_instant(column: int, start: datetime, end: datetime, width: int) -> datetime:
    if width <= 0:
        return start
    column = max(0, min(column, width - 1))
    return start + (end - start) * column / width


@dataclass(frozen=True)
class TimelineWindow:
    start: datetime
    end: datetime
    width: int

    @classmethod
    def around(cls, scrub: datetime, width: int) -> "TimelineWindow":
        start, end = window_bounds(scrub, width)
        return cls(start, end, width)

    @property
    def hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600.0

    @property
    def renderable(self) -> bool:
        return self.width >= MIN_RENDER_WIDTH and self.end > self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def column_for(self, instant: datetime) -> int:
        return instant_to_column(instant, self.start, self.end, self.width)

    def instant_at(self, column: int) -> datetime:
        return column_to_instant(column, self.start, self.end, self.width)

    def local_hours(self, tz_id: str) -> list[int]:
        """Local wall-clock hour under each column, for shading."""
        if not self.renderable:
            return []
        hours = self.hours
        out = []
        for i in range(self.width):
            minutes = int(i * hours * 60 / self.width)
            # Add in UTC so DST changes inside the window shift the hour.
            out.append(to_local(tz_id, self.start + timedelta(minutes=minutes)).hour)
        return out
