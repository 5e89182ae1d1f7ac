"""Preferences file (JSON) and the display settings it carries."""

from __future__ import annotations

import enum
import json
import logging
import os
from dataclasses import asdict, dataclass, field

from .zones import DEFAULT_CITIES

logger = logging.getLogger(__name__)

CONFIG_PATH = os.environ.get(
    "PYTZLINE_CONFIG",
    os.path.join(os.path.expanduser("~"), ".pytzline.json"),
)

TIME_FORMATS = ["24h", "12h"]
DISPLAY_MODES = ["short", "full"]
BOX_MODES = ["ascii", "unicode"]
THEMES = ["default", "ocean", "forest", "sunset", "cyberpunk", "monochrome"]


class TimeActivity(enum.Enum):
    NIGHT = "night"
    AWAKE = "awake"
    WORK = "work"


@dataclass
class HourBands:
    work_start: int = 8
    work_end: int = 18
    awake_start: int = 6
    awake_end: int = 22

    def activity(self, hour: int) -> TimeActivity:
        hour %= 24
        if self.work_start <= hour < self.work_end:
            return TimeActivity.WORK
        if self.awake_start <= hour < self.awake_end:
            return TimeActivity.AWAKE
        return TimeActivity.NIGHT

    @property
    def work_middle(self) -> int:
        return (self.work_start + self.work_end) // 2


@dataclass
class ZoneSpec:
    city: str
    label: str | None = None


@dataclass
class AppConfig:
    zones: list[ZoneSpec] = field(default_factory=lambda: [ZoneSpec(c) for c in DEFAULT_CITIES])
    selected_zone_index: int = 0
    time_format: str = "24h"
    display_mode: str = "short"
    hours: HourBands = field(default_factory=HourBands)
    theme: str = "default"
    show_date: bool = False
    show_sun_times: bool = True
    group_same_time: bool = True
    use_full_city_names: bool = False
    show_all_cities_in_groups: bool = False
    box_drawing: str = "ascii"


def next_theme(theme: str) -> str:
    try:
        idx = THEMES.index(theme)
    except ValueError:
        return THEMES[0]
    return THEMES[(idx + 1) % len(THEMES)]


def _pick(value: object, allowed: list[str], default: str) -> str:
    if isinstance(value, str) and value.lower() in allowed:
        return value.lower()
    return default


def _hour(value: object, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 24:
        return value
    return default


def _zone_specs(items: object) -> list[ZoneSpec]:
    specs: list[ZoneSpec] = []
    if not isinstance(items, list):
        return specs
    for item in items:
        if isinstance(item, str) and item.strip():
            specs.append(ZoneSpec(item.strip()))
        elif isinstance(item, dict) and isinstance(item.get("city"), str):
            label = item.get("label")
            specs.append(ZoneSpec(item["city"], label if isinstance(label, str) and label else None))
    return specs


def config_from_dict(data: dict) -> AppConfig:
    cfg = AppConfig()
    zones = _zone_specs(data.get("zones"))
    if zones:
        cfg.zones = zones
    idx = data.get("selected_zone_index")
    if isinstance(idx, int) and not isinstance(idx, bool) and idx >= 0:
        cfg.selected_zone_index = idx
    cfg.time_format = _pick(data.get("time_format"), TIME_FORMATS, cfg.time_format)
    cfg.display_mode = _pick(data.get("display_mode"), DISPLAY_MODES, cfg.display_mode)
    cfg.theme = _pick(data.get("theme"), THEMES, cfg.theme)
    cfg.box_drawing = _pick(data.get("box_drawing"), BOX_MODES, cfg.box_drawing)

    hours = data.get("hours")
    if isinstance(hours, dict):
        base = HourBands()
        cfg.hours = HourBands(
            work_start=_hour(hours.get("work_start"), base.work_start),
            work_end=_hour(hours.get("work_end"), base.work_end),
            awake_start=_hour(hours.get("awake_start"), base.awake_start),
            awake_end=_hour(hours.get("awake_end"), base.awake_end),
        )

    for key in ("show_date", "show_sun_times", "group_same_time",
                "use_full_city_names", "show_all_cities_in_groups"):
        value = data.get(key)
        if isinstance(value, bool):
            setattr(cfg, key, value)
    return cfg


def config_to_dict(cfg: AppConfig) -> dict:
    data = asdict(cfg)
    data["zones"] = [
        {"city": z.city, "label": z.label} if z.label else z.city
        for z in cfg.zones
    ]
    return data


def load_config(path: str | None = None) -> AppConfig:
    path = path or CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return AppConfig()
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return AppConfig()
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: top level is not an object", path)
        return AppConfig()
    return config_from_dict(data)


def save_config(cfg: AppConfig, path: str | None = None) -> bool:
    path = path or CONFIG_PATH
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(cfg), f, indent=2)
    except OSError as exc:
        logger.warning("could not save config %s: %s", path, exc)
        return False
    return True
