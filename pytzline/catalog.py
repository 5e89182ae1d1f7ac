"""Embedded city catalog.

Static reference data: city name, short code, IANA zone, country,
coordinates and aliases. Loaded once at startup; a catalog that fails to
parse or names an unknown zone is a fatal error (CatalogError).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfoNotFoundError

from .tzutil import get_zone

logger = logging.getLogger(__name__)

CATALOG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "cities.json")

Coordinates = tuple[float, float]


class CatalogError(Exception):
    """The embedded catalog is malformed; the program cannot start."""


@dataclass(frozen=True)
class CityRecord:
    name: str
    code: str
    timezone_id: str
    country: str
    coordinates: Coordinates | None = None
    aliases: frozenset[str] = frozenset()


def _parse_city(item: object, idx: int) -> CityRecord:
    if not isinstance(item, dict):
        raise CatalogError(f"cities[{idx}] is not an object")
    try:
        name = str(item["name"]).strip()
        code = str(item["code"]).strip()
        tz_id = str(item["timezone"]).strip()
        country = str(item["country"]).strip()
    except KeyError as exc:
        raise CatalogError(f"cities[{idx}] missing key {exc}") from exc
    if not name or not tz_id:
        raise CatalogError(f"cities[{idx}] has an empty name or timezone")

    try:
        get_zone(tz_id)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise CatalogError(f"cities[{idx}] ({name}): invalid timezone {tz_id!r}") from exc

    coords = item.get("coordinates")
    coordinates: Coordinates | None = None
    if coords is not None:
        if not isinstance(coords, (list, tuple)) or len(coords) != 2:
            raise CatalogError(f"cities[{idx}] ({name}): coordinates must be [lat, lon]")
        coordinates = (float(coords[0]), float(coords[1]))

    aliases = item.get("aliases") or []
    if not isinstance(aliases, list):
        raise CatalogError(f"cities[{idx}] ({name}): aliases must be a list")

    return CityRecord(
        name=name,
        code=code,
        timezone_id=tz_id,
        country=country,
        coordinates=coordinates,
        aliases=frozenset(str(a) for a in aliases),
    )


class CityCatalog:
    """Read-only collection of CityRecord with case-insensitive lookup."""

    def __init__(self, cities: list[CityRecord], major_cities: set[str] | None = None) -> None:
        self._cities = list(cities)
        self._major = frozenset(major_cities or ())
        self._by_name: dict[str, list[CityRecord]] = {}
        for city in self._cities:
            self._by_name.setdefault(city.name.lower(), []).append(city)

    @classmethod
    def from_dict(cls, data: object) -> "CityCatalog":
        if not isinstance(data, dict) or not isinstance(data.get("cities"), list):
            raise CatalogError("catalog must be an object with a 'cities' list")
        cities = [_parse_city(item, i) for i, item in enumerate(data["cities"])]
        major = data.get("major_cities") or []
        if not isinstance(major, list):
            raise CatalogError("'major_cities' must be a list")
        return cls(cities, {str(m) for m in major})

    @classmethod
    def load(cls, path: str | None = None) -> "CityCatalog":
        path = path or CATALOG_PATH
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise CatalogError(f"Failed to read {path}: {exc}") from exc
        catalog = cls.from_dict(data)
        logger.debug("loaded %d cities from %s", len(catalog), path)
        return catalog

    def __len__(self) -> int:
        return len(self._cities)

    def __iter__(self):
        return iter(self._cities)

    @property
    def cities(self) -> list[CityRecord]:
        return list(self._cities)

    def matches(self, name: str) -> list[CityRecord]:
        return list(self._by_name.get(name.strip().lower(), []))

    def is_ambiguous(self, name: str) -> bool:
        return len(self.matches(name)) > 1

    def is_major(self, name: str) -> bool:
        return name in self._major

    def label_for(self, city: CityRecord) -> str:
        if self.is_ambiguous(city.name):
            return f"{city.name}, {city.country}"
        return city.name

    def find(self, name: str) -> CityRecord | None:
        """Look up a city by name, or by "City, Country" for shared names."""
        key = name.strip()
        if not key:
            return None
        found = self.matches(key)
        if found:
            return found[0]
        if "," in key:
            city_part, _, country_part = key.rpartition(",")
            country = country_part.strip().lower()
            for city in self.matches(city_part):
                if city.country.lower() == country:
                    return city
        return None

    def first_for_timezone(self, tz_id: str) -> CityRecord | None:
        for city in self._cities:
            if city.timezone_id == tz_id:
                return city
        return None

    def country_for(self, name: str) -> str:
        city = self.find(name)
        return city.country if city else "Unknown"


@lru_cache(maxsize=1)
def load_catalog() -> CityCatalog:
    return CityCatalog.load()
