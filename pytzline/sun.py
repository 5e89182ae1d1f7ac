"""Sunrise/sunset for a zone row, via astral."""

from __future__ import annotations

import logging
from datetime import date, datetime

from astral import Observer
from astral.sun import sun

from .catalog import Coordinates
from .tzutil import get_zone

logger = logging.getLogger(__name__)


def sun_times(coordinates: Coordinates | None, day: date, tz_id: str) -> tuple[datetime, datetime] | None:
    """Local (sunrise, sunset) on ``day``, or None.

    None when there are no coordinates or when the sun does not rise or
    set that day (polar day/night).
    """
    if coordinates is None:
        return None
    lat, lon = coordinates
    observer = Observer(latitude=lat, longitude=lon, elevation=0.0)
    try:
        times = sun(observer, date=day, tzinfo=get_zone(tz_id))
    except ValueError as exc:
        logger.debug("no sun times for %s on %s: %s", coordinates, day, exc)
        return None
    sunrise = times.get("sunrise")
    sunset = times.get("sunset")
    if not (sunrise and sunset):
        return None
    return sunrise, sunset


def format_sun_times(coordinates: Coordinates | None, day: date, tz_id: str,
                     twelve_hour: bool = False) -> str | None:
    times = sun_times(coordinates, day, tz_id)
    if times is None:
        return None
    fmt = "%I:%M%p" if twelve_hour else "%H:%M"
    sunrise, sunset = times
    return f"rise {sunrise.strftime(fmt)} set {sunset.strftime(fmt)}"
