"""Dashboard control state and every user action.

State is a plain dict owned by the UI loop. Actions mutate it and return
True when a redraw is needed. Nothing here touches curses, so all of it
runs under tests with a fixed clock.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .catalog import CityCatalog
from .config import AppConfig, ZoneSpec, next_theme, save_config
from .search import search
from .tzutil import utc_now
from .zones import ZoneRegistry

logger = logging.getLogger(__name__)

MAX_QUICK_SELECT = 8


def build_registry(cfg: AppConfig, catalog: CityCatalog, clock=utc_now) -> ZoneRegistry:
    registry = ZoneRegistry(catalog, merge_by_time=cfg.group_same_time, clock=clock)
    for spec in cfg.zones:
        if not registry.add_city(spec.city, spec.label):
            logger.warning("config names unknown city %r; skipped", spec.city)
    if not len(registry):
        registry = ZoneRegistry.with_defaults(catalog, merge_by_time=cfg.group_same_time, clock=clock)
    return registry


def new_state(cfg: AppConfig, catalog: CityCatalog, clock=utc_now,
              config_path: str | None = None, persist: bool = True) -> dict:
    registry = build_registry(cfg, catalog, clock)
    now = clock()
    return {
        "catalog": catalog,
        "registry": registry,
        "clock": clock,
        "config": cfg,
        "config_path": config_path,
        "persist": persist,
        "now": now,
        "scrub": now,
        "selected": min(cfg.selected_zone_index, max(0, len(registry) - 1)),
        "quit": False,
        "show_help": False,
        "adding": False,
        "add_input": "",
        "add_results": [],
        "add_idx": 0,
        "renaming": False,
        "rename_input": "",
        "message": "",
    }


def select_local_zone(state: dict, local_offset_seconds: int | None = None) -> None:
    """Pre-select the row whose offset matches the machine's local offset."""
    if local_offset_seconds is None:
        off = state["now"].astimezone().utcoffset()
        local_offset_seconds = int(off.total_seconds()) if off else 0
    idx = state["registry"].index_for_offset(local_offset_seconds)
    if idx is not None:
        state["selected"] = idx


def config_from_state(state: dict) -> AppConfig:
    cfg: AppConfig = state["config"]
    cfg.zones = [ZoneSpec(city, label) for city, label in state["registry"].city_names()]
    cfg.selected_zone_index = state["selected"]
    cfg.group_same_time = state["registry"].merge_by_time
    return cfg


def persist(state: dict) -> None:
    if not state.get("persist"):
        return
    save_config(config_from_state(state), state.get("config_path"))


def clamp_selection(state: dict) -> None:
    count = len(state["registry"])
    state["selected"] = max(0, min(state["selected"], count - 1))


# -----------------------------
# Time navigation
# -----------------------------

def tick(state: dict) -> bool:
    state["now"] = state["clock"]()
    return True


def scrub_hour(state: dict, direction: int) -> bool:
    """Snap to the previous or next whole hour."""
    pos: datetime = state["scrub"]
    floor = pos.replace(minute=0, second=0, microsecond=0)
    if direction < 0:
        state["scrub"] = floor - timedelta(hours=1) if floor == pos else floor
    else:
        state["scrub"] = floor + timedelta(hours=1)
    return True


def adjust_minutes(state: dict, minutes: int) -> bool:
    state["scrub"] = state["scrub"] + timedelta(minutes=minutes)
    return True


def reset_to_now(state: dict) -> bool:
    state["scrub"] = state["now"]
    return True


def navigate_zone(state: dict, direction: int) -> bool:
    count = len(state["registry"])
    if not count:
        return False
    old = state["selected"]
    state["selected"] = max(0, min(count - 1, old + direction))
    if state["selected"] != old:
        persist(state)
        return True
    return False


# -----------------------------
# Display toggles
# -----------------------------

def toggle_time_format(state: dict) -> bool:
    cfg: AppConfig = state["config"]
    cfg.time_format = "12h" if cfg.time_format == "24h" else "24h"
    persist(state)
    return True


def toggle_display_mode(state: dict) -> bool:
    cfg: AppConfig = state["config"]
    cfg.display_mode = "full" if cfg.display_mode == "short" else "short"
    persist(state)
    return True


def toggle_flag(state: dict, name: str) -> bool:
    cfg: AppConfig = state["config"]
    setattr(cfg, name, not getattr(cfg, name))
    persist(state)
    return True


def toggle_grouping(state: dict) -> bool:
    registry: ZoneRegistry = state["registry"]
    registry.reorganize_for_merge(not registry.merge_by_time)
    clamp_selection(state)
    persist(state)
    return True


def cycle_theme(state: dict) -> bool:
    cfg: AppConfig = state["config"]
    cfg.theme = next_theme(cfg.theme)
    persist(state)
    return True


def toggle_help(state: dict) -> bool:
    state["show_help"] = not state["show_help"]
    return True


# -----------------------------
# Add zone
# -----------------------------

def start_add_zone(state: dict) -> bool:
    state["renaming"] = False
    state["rename_input"] = ""
    state["adding"] = True
    state["add_input"] = ""
    state["add_results"] = []
    state["add_idx"] = 0
    return True


def update_add_input(state: dict, text: str) -> bool:
    state["add_input"] = text
    state["add_results"] = search(text, state["catalog"])
    state["add_idx"] = 0
    return True


def navigate_results(state: dict, direction: int) -> bool:
    results = state["add_results"]
    if not results:
        return False
    state["add_idx"] = max(0, min(len(results) - 1, state["add_idx"] + direction))
    return True


def cancel_add_zone(state: dict) -> bool:
    state["adding"] = False
    state["add_input"] = ""
    state["add_results"] = []
    state["add_idx"] = 0
    return True


def add_zone(state: dict, name: str) -> bool:
    registry: ZoneRegistry = state["registry"]
    if not registry.add_city(name):
        state["message"] = f"City '{name}' not found."
        return False
    idx = registry.index_for_city(name)
    if idx is not None:
        state["selected"] = idx
    clamp_selection(state)
    state["message"] = f"Added {name}."
    persist(state)
    return True


def confirm_add_zone(state: dict, index: int | None = None) -> bool:
    """Add the highlighted result (or ``index``), else the raw input."""
    results = state["add_results"]
    if index is not None:
        if 0 <= index < len(results):
            add_zone(state, results[index])
    elif results:
        add_zone(state, results[state["add_idx"]])
    elif state["add_input"].strip():
        add_zone(state, state["add_input"].strip())
    cancel_add_zone(state)
    return True


def quick_select(state: dict, digit: int) -> bool:
    """Digits 1-8 pick a search result; otherwise they are typed."""
    if 1 <= digit <= min(MAX_QUICK_SELECT, len(state["add_results"])):
        return confirm_add_zone(state, digit - 1)
    return update_add_input(state, state["add_input"] + str(digit))


def remove_current_zone(state: dict) -> bool:
    registry: ZoneRegistry = state["registry"]
    if len(registry) <= 1:
        state["message"] = "At least one zone must remain."
        return False
    removed = registry.remove(state["selected"])
    clamp_selection(state)
    if removed is not None:
        state["message"] = f"Removed {removed.effective_display_name()}."
    persist(state)
    return True


# -----------------------------
# Rename
# -----------------------------

def start_rename(state: dict) -> bool:
    registry: ZoneRegistry = state["registry"]
    if not len(registry):
        return False
    state["adding"] = False
    state["add_input"] = ""
    state["add_results"] = []
    state["renaming"] = True
    state["rename_input"] = registry[state["selected"]].custom_label or ""
    return True


def confirm_rename(state: dict) -> bool:
    registry: ZoneRegistry = state["registry"]
    if len(registry):
        registry.set_label(state["selected"], state["rename_input"])
        persist(state)
    return cancel_rename(state)


def cancel_rename(state: dict) -> bool:
    state["renaming"] = False
    state["rename_input"] = ""
    return True


def clear_label(state: dict) -> bool:
    registry: ZoneRegistry = state["registry"]
    if not registry.set_label(state["selected"], None):
        return False
    persist(state)
    return True
