"""Zone rows and the registry that keeps them.

A ZoneEntry is one timeline row backed by exactly one IANA zone and
fronting one or more catalog cities. ZoneRegistry keeps the rows sorted
by their current UTC offset and never holds two rows for the same zone.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Iterator

from .catalog import CityCatalog, CityRecord, Coordinates
from .tzutil import format_utc_label, offset_seconds, to_local, utc_now

logger = logging.getLogger(__name__)

DEFAULT_CITIES = [
    "Los Angeles",
    "New York",
    "UTC",
    "London",
    "Berlin",
    "Tokyo",
    "Sydney",
]

Clock = Callable[[], datetime]


def _fallback_code(tz_id: str) -> str:
    last = tz_id.split("/")[-1]
    code = last[:3].upper()
    return code or "UNK"


@dataclass
class ZoneEntry:
    timezone_id: str
    short_code: str
    custom_label: str | None = None
    member_cities: list[str] = field(default_factory=list)

    @classmethod
    def from_timezone(cls, tz_id: str, catalog: CityCatalog | None = None) -> "ZoneEntry":
        city = catalog.first_for_timezone(tz_id) if catalog else None
        code = city.code if city and city.code else _fallback_code(tz_id)
        return cls(tz_id, code)

    def copy(self) -> "ZoneEntry":
        return dataclasses.replace(self, member_cities=list(self.member_cities))

    def add_city(self, name: str) -> bool:
        if name in self.member_cities:
            return False
        self.member_cities.append(name)
        return True

    # Offsets are always "as of" an instant; default is now.

    def utc_offset_seconds(self, at: datetime | None = None) -> int:
        return offset_seconds(self.timezone_id, at or utc_now())

    def current_utc_offset_hours(self, at: datetime | None = None) -> float:
        return self.utc_offset_seconds(at) / 3600.0

    def offset_label(self, at: datetime | None = None) -> str:
        return format_utc_label(self.utc_offset_seconds(at))

    def local_time(self, instant: datetime) -> datetime:
        return to_local(self.timezone_id, instant)

    def abbreviation(self, at: datetime | None = None) -> str:
        return self.local_time(at or utc_now()).tzname() or "UTC"

    def city_name(self) -> str:
        if self.member_cities:
            return self.member_cities[0]
        return self.timezone_id.split("/")[-1].replace("_", " ")

    def display_name(self, use_full_names: bool = False, show_all_in_groups: bool = False,
                     at: datetime | None = None) -> str:
        cities = self.member_cities
        if not cities:
            return self.short_code
        if len(cities) == 1:
            return cities[0] if use_full_names else self.short_code
        if show_all_in_groups:
            if use_full_names:
                return ", ".join(cities)
            return f"{self.abbreviation(at)} ({', '.join(cities)})"
        first = cities[0] if use_full_names else self.short_code
        return f"{first} +{len(cities) - 1}"

    def effective_display_name(self, use_full_names: bool = False, show_all_in_groups: bool = False,
                               at: datetime | None = None) -> str:
        if self.custom_label:
            return self.custom_label
        return self.display_name(use_full_names, show_all_in_groups, at)

    def full_display_name(self, at: datetime | None = None) -> str:
        last = self.timezone_id.split("/")[-1].replace("_", " ")
        return f"{last} {self.abbreviation(at)} {self.offset_label(at)}"

    def coordinates(self, catalog: CityCatalog) -> Coordinates | None:
        for name in self.member_cities:
            city = catalog.find(name)
            if city and city.coordinates:
                return city.coordinates
        city = catalog.first_for_timezone(self.timezone_id)
        return city.coordinates if city else None


# -----------------------------
# Pure reorganisation helpers
# -----------------------------

def same_wall_clock(tz_a: str, tz_b: str, at: datetime) -> bool:
    a = to_local(tz_a, at)
    b = to_local(tz_b, at)
    return a.hour == b.hour and a.minute == b.minute and a.utcoffset() == b.utcoffset()


def sort_by_offset(entries: Iterable[ZoneEntry], at: datetime) -> list[ZoneEntry]:
    # sorted() is stable: equal offsets keep their relative order.
    return sorted(entries, key=lambda e: e.utc_offset_seconds(at))


def _absorb(target: ZoneEntry, source: ZoneEntry) -> None:
    for city in source.member_cities:
        target.add_city(city)
    if not target.custom_label and source.custom_label:
        target.custom_label = source.custom_label


def coalesce_entries(entries: Iterable[ZoneEntry], at: datetime) -> list[ZoneEntry]:
    """Merge rows sharing a zone, then rows showing the same wall clock."""
    merged: list[ZoneEntry] = []
    for entry in entries:
        target = next((m for m in merged if m.timezone_id == entry.timezone_id), None)
        if target is None:
            target = next(
                (m for m in merged if same_wall_clock(m.timezone_id, entry.timezone_id, at)),
                None,
            )
        if target is None:
            merged.append(entry.copy())
        else:
            _absorb(target, entry)
    return merged


def split_entries(entries: Iterable[ZoneEntry], catalog: CityCatalog) -> list[ZoneEntry]:
    """Break multi-city rows back into one row per distinct zone."""
    result: list[ZoneEntry] = []

    def slot(tz_id: str, code: str) -> ZoneEntry:
        for existing in result:
            if existing.timezone_id == tz_id:
                return existing
        created = ZoneEntry(tz_id, code)
        result.append(created)
        return created

    for entry in entries:
        if len(entry.member_cities) <= 1:
            target = next((r for r in result if r.timezone_id == entry.timezone_id), None)
            if target is None:
                result.append(entry.copy())
            else:
                _absorb(target, entry)
            continue

        for name in entry.member_cities:
            city = catalog.find(name)
            if city is None:
                # Not in the catalog any more; leave it on its current zone.
                tz_id, code = entry.timezone_id, entry.short_code
            else:
                tz_id, code = city.timezone_id, city.code
            target = slot(tz_id, code)
            target.add_city(name)
            if tz_id == entry.timezone_id and entry.custom_label and not target.custom_label:
                target.custom_label = entry.custom_label
    return result


# -----------------------------
# Registry
# -----------------------------

class ZoneRegistry:
    """Ordered set of ZoneEntry, one per IANA zone, sorted by current offset."""

    def __init__(self, catalog: CityCatalog, merge_by_time: bool = False,
                 clock: Clock = utc_now) -> None:
        self.catalog = catalog
        self.merge_by_time = merge_by_time
        self.clock = clock
        self._entries: list[ZoneEntry] = []

    @classmethod
    def with_defaults(cls, catalog: CityCatalog, merge_by_time: bool = False,
                      clock: Clock = utc_now) -> "ZoneRegistry":
        registry = cls(catalog, merge_by_time, clock)
        for name in DEFAULT_CITIES:
            registry.add_city(name)
        return registry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ZoneEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ZoneEntry:
        return self._entries[index]

    @property
    def entries(self) -> list[ZoneEntry]:
        return list(self._entries)

    def _resort(self) -> None:
        self._entries = sort_by_offset(self._entries, self.clock())

    def member_name(self, city: CityRecord) -> str:
        return self.catalog.label_for(city)

    def add_city(self, name: str, label: str | None = None) -> bool:
        city = self.catalog.find(name)
        if city is None:
            logger.info("add_city: unknown city %r", name)
            return False

        member = self.member_name(city)
        target = next((e for e in self._entries if e.timezone_id == city.timezone_id), None)

        if target is None and self.merge_by_time:
            now = self.clock()
            target = next(
                (e for e in self._entries if same_wall_clock(e.timezone_id, city.timezone_id, now)),
                None,
            )

        if target is None:
            target = ZoneEntry(city.timezone_id, city.code or _fallback_code(city.timezone_id))
            self._entries.append(target)
            logger.info("add_city: %s -> new zone %s", member, city.timezone_id)
        else:
            logger.info("add_city: %s -> existing zone %s", member, target.timezone_id)

        target.add_city(member)
        if label and label.strip() and not target.custom_label:
            target.custom_label = label.strip()
        self._resort()
        return True

    def remove(self, index: int) -> ZoneEntry | None:
        if not 0 <= index < len(self._entries):
            return None
        removed = self._entries.pop(index)
        logger.info("remove: %s (%s)", removed.timezone_id, ", ".join(removed.member_cities))
        self._resort()
        return removed

    def set_label(self, index: int, label: str | None) -> bool:
        if not 0 <= index < len(self._entries):
            return False
        cleaned = label.strip() if label else ""
        self._entries[index].custom_label = cleaned or None
        return True

    def reorganize_for_merge(self, enable: bool) -> None:
        self.merge_by_time = enable
        if enable:
            self._entries = coalesce_entries(self._entries, self.clock())
        else:
            self._entries = split_entries(self._entries, self.catalog)
        self._resort()
        logger.info("reorganize_for_merge(%s): %d zones", enable, len(self._entries))

    def index_for_city(self, name: str) -> int | None:
        city = self.catalog.find(name)
        if city is None:
            return None
        member = self.member_name(city)
        for i, entry in enumerate(self._entries):
            if member in entry.member_cities:
                return i
        for i, entry in enumerate(self._entries):
            if entry.timezone_id == city.timezone_id:
                return i
        return None

    def index_for_offset(self, seconds: int) -> int | None:
        now = self.clock()
        for i, entry in enumerate(self._entries):
            if entry.utc_offset_seconds(now) == seconds:
                return i
        return None

    def city_names(self) -> list[tuple[str, str | None]]:
        """(city, label) pairs for persistence; every member city is listed."""
        out: list[tuple[str, str | None]] = []
        for entry in self._entries:
            for i, name in enumerate(entry.member_cities):
                out.append((name, entry.custom_label if i == 0 else None))
        return out
