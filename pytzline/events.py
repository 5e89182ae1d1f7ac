"""DST transitions and local-midnight markers inside a timeline window.

Transitions are found by comparing the zone's UTC offset at each hour
step with the offset one hour later. Real transitions need not fall on
the hour, so a marker can sit up to an hour before the actual change;
that precision limit is accepted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from .timeline import TimelineWindow
from .tzutil import offset_seconds, resolve_local, to_local

STEP = timedelta(hours=1)


class EventKind(enum.Enum):
    SPRING_FORWARD = "spring_forward"
    FALL_BACK = "fall_back"
    MIDNIGHT = "midnight"


@dataclass(frozen=True)
class TimelineEvent:
    instant: datetime
    kind: EventKind


def classify_offset_change(before: int, after: int) -> EventKind | None:
    """Offsets are local-minus-UTC seconds.

    A larger offset after the step means local clocks jumped ahead
    (spring forward); a smaller one means they were set back.
    """
    if after > before:
        return EventKind.SPRING_FORWARD
    if after < before:
        return EventKind.FALL_BACK
    return None


def dst_transitions(tz_id: str, start: datetime, end: datetime) -> list[TimelineEvent]:
    events: list[TimelineEvent] = []
    current = start
    before = offset_seconds(tz_id, current)
    while current < end:
        after = offset_seconds(tz_id, current + STEP)
        kind = classify_offset_change(before, after)
        if kind is not None:
            events.append(TimelineEvent(current, kind))
        current += STEP
        before = after
    return events


def _local_dates(tz_id: str, start: datetime, end: datetime, skip_partial_first: bool) -> list[date]:
    local_start = to_local(tz_id, start)
    local_end = to_local(tz_id, end)
    day = local_start.date()
    if skip_partial_first and local_start.time() != time(0, 0, 0):
        day += timedelta(days=1)
    days = []
    while day <= local_end.date():
        days.append(day)
        day += timedelta(days=1)
    return days


def _resolve_each(tz_id: str, days: list[date], at: time, start: datetime, end: datetime) -> list[datetime]:
    out = []
    for day in days:
        resolved = resolve_local(tz_id, datetime.combine(day, at))
        # Fold or gap at this wall time: no single instant, no marker.
        if not resolved.is_unique:
            continue
        if start <= resolved.instant < end:
            out.append(resolved.instant)
    return out


def midnight_instants(tz_id: str, start: datetime, end: datetime) -> list[datetime]:
    days = _local_dates(tz_id, start, end, skip_partial_first=True)
    return _resolve_each(tz_id, days, time(0, 0, 0), start, end)


def midnight_markers(tz_id: str, start: datetime, end: datetime) -> list[TimelineEvent]:
    return [TimelineEvent(t, EventKind.MIDNIGHT) for t in midnight_instants(tz_id, start, end)]


def date_anchors(window: TimelineWindow, tz_id: str, hour: int) -> list[tuple[int, date]]:
    """(column, local date) for ``hour:00`` local on every visible day."""
    if not window.renderable:
        return []
    days = _local_dates(tz_id, window.start, window.end, skip_partial_first=False)
    out = []
    for instant in _resolve_each(tz_id, days, time(hour % 24, 0, 0), window.start, window.end):
        out.append((window.column_for(instant), to_local(tz_id, instant).date()))
    return out


def scan(window: TimelineWindow, tz_id: str, show_dst: bool = True) -> list[TimelineEvent]:
    events = midnight_markers(tz_id, window.start, window.end)
    if show_dst:
        events += dst_transitions(tz_id, window.start, window.end)
    return sorted(events, key=lambda e: e.instant)


def markers(window: TimelineWindow, tz_id: str, show_dst: bool = True) -> list[tuple[int, EventKind]]:
    if not window.renderable:
        return []
    return [(window.column_for(e.instant), e.kind) for e in scan(window, tz_id, show_dst)]
