"""Timezone primitives on top of zoneinfo.

Offsets at an instant, local -> UTC resolution (with DST fold/gap
detection) and the small formatting helpers shared by the dashboard.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

UTC = timezone.utc


@lru_cache(maxsize=None)
def get_zone(tz_id: str) -> ZoneInfo:
    return ZoneInfo(tz_id)


def utc_now() -> datetime:
    return datetime.now(UTC)


def offset_seconds(tz_id: str, instant: datetime) -> int:
    off = instant.astimezone(get_zone(tz_id)).utcoffset()
    return int(off.total_seconds()) if off else 0


def to_local(tz_id: str, instant: datetime) -> datetime:
    return instant.astimezone(get_zone(tz_id))


class Resolution(enum.Enum):
    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"  # fold: the wall time happens twice
    NONEXISTENT = "nonexistent"  # gap: the wall time is skipped


@dataclass(frozen=True)
class LocalResolution:
    kind: Resolution
    instant: datetime | None = None
    candidates: tuple[datetime, ...] = ()

    @property
    def is_unique(self) -> bool:
        return self.kind is Resolution.UNIQUE


def resolve_local(tz_id: str, naive: datetime) -> LocalResolution:
    """Resolve a naive wall-clock time in ``tz_id`` to UTC.

    Returns UNIQUE with the instant, AMBIGUOUS with both candidates
    (earlier first), or NONEXISTENT with the two instants produced by the
    offsets on either side of the gap. Callers decide what to do with the
    last two; nothing here guesses.
    """
    tz = get_zone(tz_id)
    naive = naive.replace(tzinfo=None)
    early = naive.replace(tzinfo=tz, fold=0).astimezone(UTC)
    late = naive.replace(tzinfo=tz, fold=1).astimezone(UTC)

    if early == late:
        return LocalResolution(Resolution.UNIQUE, early, (early,))

    # In a fold both candidates map back to the same wall time; in a gap
    # neither maps back cleanly.
    back = early.astimezone(tz).replace(tzinfo=None)
    pair = tuple(sorted((early, late)))
    if back == naive:
        return LocalResolution(Resolution.AMBIGUOUS, None, pair)
    return LocalResolution(Resolution.NONEXISTENT, None, pair)


def format_offset(offset: timedelta | None, with_colon: bool = True) -> str:
    if offset is None:
        return "+00:00" if with_colon else "+0000"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    hours, rem = divmod(total, 3600)
    minutes = rem // 60
    if with_colon:
        return f"{sign}{hours:02d}:{minutes:02d}"
    return f"{sign}{hours:02d}{minutes:02d}"


def format_utc_label(seconds: int) -> str:
    """Short "UTC+9" / "UTC-3:30" form used in zone titles."""
    sign = "+" if seconds >= 0 else "-"
    hours, rem = divmod(abs(seconds), 3600)
    minutes = rem // 60
    if minutes:
        return f"UTC{sign}{hours}:{minutes:02d}"
    return f"UTC{sign}{hours}"


def format_dt_full(dt: datetime) -> str:
    base = dt.strftime("%Y-%m-%d %H:%M:%S")
    tzname = dt.tzname() or "UTC"
    off = format_offset(dt.utcoffset(), with_colon=True)
    return f"{base} {tzname} ({off})"


def format_clock(dt: datetime, twelve_hour: bool = False, with_day: bool = True) -> str:
    fmt = "%I:%M %p" if twelve_hour else "%H:%M"
    if with_day:
        fmt += " %a"
    return dt.strftime(fmt)
