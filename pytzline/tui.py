"""Curses dashboard: one shaded timeline row per zone, shared scrub cursor.

ASCII by default; Unicode shading and box drawing when the terminal and
locale allow it and the config asks for it.
"""

from __future__ import annotations

import curses
import locale
import logging
import sys
import time

from . import app
from .events import EventKind, date_anchors, markers
from .sun import format_sun_times
from .timeline import TimelineWindow
from .tzutil import format_clock, format_dt_full
from .zones import ZoneEntry

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0
POLL_MS = 200
ROW_HEIGHT = 4  # top border + bar + clock line + bottom border
MIN_W = 40
MIN_H = 10

# Box drawing styles (ASCII default, Unicode optional).
BOX_STYLES = {
    "ascii": {
        "tl": "+",
        "tr": "+",
        "bl": "+",
        "br": "+",
        "h": "-",
        "v": "|",
    },
    "unicode": {
        "tl": "┌",
        "tr": "┐",
        "bl": "└",
        "br": "┘",
        "h": "─",
        "v": "│",
    },
}

GLYPHS = {
    "ascii": {
        "night": ".",
        "awake": "-",
        "work": "#",
        "now": "|",
        "scrub": "!",
        "spring": "^",
        "fall": "v",
        "midnight": ":",
    },
    "unicode": {
        "night": "░",
        "awake": "▒",
        "work": "▓",
        "now": "│",
        "scrub": "┃",
        "spring": "⇈",
        "fall": "⇊",
        "midnight": "┊",
    },
}

CP_HEADER = 1
CP_BORDER = 2
CP_NIGHT = 3
CP_AWAKE = 4
CP_WORK = 5
CP_NOW = 6
CP_SCRUB = 7
CP_SPRING = 8
CP_FALL = 9
CP_DATE = 10

ROLE_PAIRS = {
    "night": CP_NIGHT,
    "awake": CP_AWAKE,
    "work": CP_WORK,
    "now": CP_NOW,
    "scrub": CP_SCRUB,
    "spring": CP_SPRING,
    "fall": CP_FALL,
    "midnight": CP_NIGHT,
    "date": CP_DATE,
}

# night, awake, work, selected border, scrub line
THEME_COLORS = {
    "default": (curses.COLOR_BLUE, curses.COLOR_CYAN, curses.COLOR_GREEN, curses.COLOR_YELLOW, curses.COLOR_YELLOW),
    "ocean": (curses.COLOR_BLUE, curses.COLOR_CYAN, curses.COLOR_WHITE, curses.COLOR_CYAN, curses.COLOR_WHITE),
    "forest": (curses.COLOR_GREEN, curses.COLOR_YELLOW, curses.COLOR_GREEN, curses.COLOR_GREEN, curses.COLOR_YELLOW),
    "sunset": (curses.COLOR_MAGENTA, curses.COLOR_RED, curses.COLOR_YELLOW, curses.COLOR_RED, curses.COLOR_YELLOW),
    "cyberpunk": (curses.COLOR_MAGENTA, curses.COLOR_CYAN, curses.COLOR_GREEN, curses.COLOR_MAGENTA, curses.COLOR_CYAN),
    "monochrome": (curses.COLOR_WHITE, curses.COLOR_WHITE, curses.COLOR_WHITE, curses.COLOR_WHITE, curses.COLOR_WHITE),
}

HELP_LINES = [
    "TIME NAVIGATION",
    "  h/Left l/Right   scrub to previous/next hour",
    "  H/L, Shift+arrow fine scrub (1 minute)",
    "  [ ]              adjust by 15 minutes",
    "  { }              adjust by 1 hour",
    "  t                reset to now",
    "ZONES",
    "  j/Down k/Up      select zone",
    "  a                add zone (1-8 picks a result)",
    "  r                remove selected zone",
    "  e / E            rename / clear custom name",
    "  g                group cities showing the same time",
    "DISPLAY",
    "  m 12/24h   n short/full names   d dates   s sun times",
    "  c cycle colour theme   ? help   q quit",
    "MARKERS",
    "  now line, scrub line, midnight, DST spring forward / fall back",
]


# -----------------------------
# Rendering helpers
# -----------------------------

def safe_addstr(stdscr: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    h, w = stdscr.getmaxyx()
    if y < 0 or y >= h or x < 0 or x >= w:
        return
    # The last cell of the screen scrolls the cursor off; never touch it.
    if y == h - 1 and x == w - 1:
        return
    max_len = w - x
    if y == h - 1:
        max_len -= 1
    if max_len <= 0:
        return
    stdscr.addstr(y, x, text[:max_len], attr)


def draw_hline(stdscr: curses.window, y: int, x: int, length: int, ch: str, attr: int = 0) -> None:
    if length <= 0:
        return
    safe_addstr(stdscr, y, x, ch * length, attr)


def draw_vline(stdscr: curses.window, y: int, x: int, length: int, ch: str, attr: int = 0) -> None:
    for i in range(max(0, length)):
        safe_addstr(stdscr, y + i, x, ch, attr)


def draw_box(stdscr: curses.window, y: int, x: int, h: int, w: int, style: dict, attr: int = 0) -> None:
    if h < 2 or w < 2:
        return
    draw_hline(stdscr, y, x + 1, w - 2, style["h"], attr)
    draw_hline(stdscr, y + h - 1, x + 1, w - 2, style["h"], attr)
    draw_vline(stdscr, y + 1, x, h - 2, style["v"], attr)
    draw_vline(stdscr, y + 1, x + w - 1, h - 2, style["v"], attr)
    safe_addstr(stdscr, y, x, style["tl"], attr)
    safe_addstr(stdscr, y, x + w - 1, style["tr"], attr)
    safe_addstr(stdscr, y + h - 1, x, style["bl"], attr)
    safe_addstr(stdscr, y + h - 1, x + w - 1, style["br"], attr)


def ensure_visible(idx: int, scroll: int, height: int, total: int) -> int:
    """First visible row index such that row ``idx`` stays on screen."""
    if total <= height:
        return 0
    lowest = max(0, idx - height + 1)
    return min(max(scroll, lowest), idx)


def init_colors(state: dict) -> None:
    state["colors"] = False
    if curses.has_colors():
        try:
            curses.start_color()
            curses.use_default_colors()
            state["colors"] = True
            apply_theme(state)
        except curses.error:
            state["colors"] = False


def apply_theme(state: dict) -> None:
    if not state.get("colors"):
        return
    night, awake, work, selected, scrub = THEME_COLORS.get(state["config"].theme, THEME_COLORS["default"])
    try:
        curses.init_pair(CP_HEADER, curses.COLOR_CYAN, -1)
        curses.init_pair(CP_BORDER, selected, -1)
        curses.init_pair(CP_NIGHT, night, -1)
        curses.init_pair(CP_AWAKE, awake, -1)
        curses.init_pair(CP_WORK, work, -1)
        curses.init_pair(CP_NOW, curses.COLOR_RED, -1)
        curses.init_pair(CP_SCRUB, scrub, -1)
        curses.init_pair(CP_SPRING, curses.COLOR_GREEN, -1)
        curses.init_pair(CP_FALL, curses.COLOR_YELLOW, -1)
        curses.init_pair(CP_DATE, curses.COLOR_WHITE, curses.COLOR_BLACK)
    except curses.error:
        state["colors"] = False
    state["theme_applied"] = state["config"].theme


def env_allows_unicode() -> bool:
    encodings = (sys.stdout.encoding, locale.getpreferredencoding(False))
    return all("utf-8" in (enc or "").lower() for enc in encodings)


def unicode_supported(stdscr: curses.window) -> bool:
    if not env_allows_unicode():
        return False
    try:
        # Scratch window; one box corner is enough to tell.
        win = curses.newwin(2, 2, 0, 0)
        win.addstr(0, 0, BOX_STYLES["unicode"]["tl"])
        return True
    except curses.error:
        return False


def apply_box_mode(state: dict, desired: str) -> None:
    if desired == "unicode" and not state.get("unicode_supported"):
        state["box_mode"] = "ascii"
    else:
        state["box_mode"] = desired
    state["box_style"] = BOX_STYLES[state["box_mode"]]
    state["glyphs"] = GLYPHS[state["box_mode"]]


def role_attr(state: dict, role: str) -> int:
    if not state.get("colors"):
        return curses.A_BOLD if role in ("now", "scrub") else 0
    return curses.color_pair(ROLE_PAIRS.get(role, 0))


# -----------------------------
# Row composition (no curses calls)
# -----------------------------

def zone_title(entry: ZoneEntry, state: dict) -> str:
    cfg = state["config"]
    now = state["now"]
    offset = entry.offset_label(now)
    if cfg.display_mode == "full":
        if entry.custom_label:
            return f"{entry.custom_label} ({entry.city_name()} {offset})"
        return f"{entry.display_name(True, cfg.show_all_cities_in_groups, now)} {offset}"
    name = entry.effective_display_name(cfg.use_full_city_names, cfg.show_all_cities_in_groups, now)
    return f"{name} {offset}"


def bar_cells(entry: ZoneEntry, window: TimelineWindow, state: dict) -> list[tuple[str, str]]:
    """(glyph, role) per column for one zone's timeline bar."""
    if not window.renderable:
        return []
    cfg = state["config"]
    glyphs = state.get("glyphs", GLYPHS["ascii"])
    cells = []
    for hour in window.local_hours(entry.timezone_id):
        role = cfg.hours.activity(hour).value
        cells.append((glyphs[role], role))

    now_col = window.column_for(state["now"]) if window.contains(state["now"]) else None
    scrub_col = window.column_for(state["scrub"])
    if now_col is not None:
        cells[now_col] = (glyphs["now"], "now")
    if scrub_col != now_col:
        cells[scrub_col] = (glyphs["scrub"], "scrub")

    for col, kind in markers(window, entry.timezone_id):
        if kind is EventKind.SPRING_FORWARD:
            cells[col] = (glyphs["spring"], "spring")
        elif kind is EventKind.FALL_BACK:
            cells[col] = (glyphs["fall"], "fall")
        elif col not in (now_col, scrub_col):
            cells[col] = (glyphs["midnight"], "midnight")

    if cfg.show_date:
        for col, day in date_anchors(window, entry.timezone_id, cfg.hours.work_middle):
            text = day.strftime("%d %b")
            left = max(0, min(col - len(text) // 2, window.width - len(text)))
            for i, ch in enumerate(text):
                if 0 <= left + i < window.width:
                    cells[left + i] = (ch, "date")
    return cells


def clock_line(entry: ZoneEntry, window: TimelineWindow, state: dict) -> tuple[int, str]:
    """Scrub-time text for the row and the column it starts at."""
    twelve = state["config"].time_format == "12h"
    text = format_clock(entry.local_time(state["scrub"]), twelve_hour=twelve)
    col = window.column_for(state["scrub"])
    left = max(0, min(col - len(text) // 2, window.width - len(text)))
    return left, text


def sun_label(entry: ZoneEntry, state: dict) -> str | None:
    if not state["config"].show_sun_times:
        return None
    local_day = entry.local_time(state["now"]).date()
    coords = entry.coordinates(state["catalog"])
    return format_sun_times(coords, local_day, entry.timezone_id, state["config"].time_format == "12h")


# -----------------------------
# Screen render
# -----------------------------

def render_zone(stdscr: curses.window, state: dict, entry: ZoneEntry, y: int, w: int, selected: bool) -> None:
    style = state["box_style"]
    border_attr = role_attr(state, "") if not selected else (
        curses.color_pair(CP_BORDER) | curses.A_BOLD if state.get("colors") else curses.A_BOLD
    )
    draw_box(stdscr, y, 0, ROW_HEIGHT, w, style, border_attr)
    safe_addstr(stdscr, y, 2, f" {zone_title(entry, state)} ", border_attr)

    sun = sun_label(entry, state)
    if sun:
        safe_addstr(stdscr, y, max(2, w - len(sun) - 4), f" {sun} ", border_attr)

    inner_w = w - 2
    window = TimelineWindow.around(state["scrub"], inner_w)
    if not window.renderable:
        return
    for i, (ch, role) in enumerate(bar_cells(entry, window, state)):
        safe_addstr(stdscr, y + 1, 1 + i, ch, role_attr(state, role))

    left, text = clock_line(entry, window, state)
    safe_addstr(stdscr, y + 2, 1 + left, text)


def render_help(stdscr: curses.window, state: dict, h: int, w: int) -> None:
    box_w = min(w - 2, max(len(line) for line in HELP_LINES) + 4)
    box_h = min(h - 2, len(HELP_LINES) + 4)
    y0 = max(0, (h - box_h) // 2)
    x0 = max(0, (w - box_w) // 2)
    for row in range(box_h):
        safe_addstr(stdscr, y0 + row, x0, " " * box_w)
    draw_box(stdscr, y0, x0, box_h, box_w, state["box_style"])
    safe_addstr(stdscr, y0, x0 + 2, " Help ")
    for i, line in enumerate(HELP_LINES[: box_h - 4]):
        safe_addstr(stdscr, y0 + 2 + i, x0 + 2, line[: box_w - 4])
    safe_addstr(stdscr, y0 + box_h - 1, x0 + 2, " any key closes ")


def render_prompt(stdscr: curses.window, state: dict, h: int, w: int) -> tuple[int, int]:
    if state["renaming"]:
        title, value, rows = " Rename zone (empty clears) ", state["rename_input"], []
    else:
        title, value = " Add zone ", state["add_input"]
        rows = [f"{i + 1}. {label}" for i, label in enumerate(state["add_results"])]
    box_w = min(w - 2, 60)
    box_h = min(h - 2, 4 + max(1, len(rows)))
    y0 = max(0, (h - box_h) // 2)
    x0 = max(0, (w - box_w) // 2)
    for row in range(box_h):
        safe_addstr(stdscr, y0 + row, x0, " " * box_w)
    draw_box(stdscr, y0, x0, box_h, box_w, state["box_style"])
    safe_addstr(stdscr, y0, x0 + 2, title)
    prefix = "Search: " if not state["renaming"] else "Label: "
    safe_addstr(stdscr, y0 + 1, x0 + 2, (prefix + value)[: box_w - 4])
    for i, text in enumerate(rows[: box_h - 3]):
        attr = curses.A_REVERSE if i == state["add_idx"] else 0
        safe_addstr(stdscr, y0 + 2 + i, x0 + 2, text[: box_w - 4], attr)
    return y0 + 1, min(x0 + 2 + len(prefix) + len(value), x0 + box_w - 2)


def render_main(stdscr: curses.window, state: dict) -> None:
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    if w < MIN_W or h < MIN_H:
        safe_addstr(stdscr, 0, 0, f"Window too small. Need at least {MIN_W}x{MIN_H}.")
        safe_addstr(stdscr, 1, 0, f"Current size: {w}x{h}.")
        stdscr.refresh()
        return

    if state.get("theme_applied") != state["config"].theme:
        apply_theme(state)

    header_attr = curses.color_pair(CP_HEADER) if state.get("colors") else curses.A_BOLD
    registry = state["registry"]
    local_now = state["now"].astimezone()
    local_scrub = state["scrub"].astimezone()
    safe_addstr(stdscr, 0, 0, "pytzline", header_attr | curses.A_BOLD)
    safe_addstr(stdscr, 0, 10, f"Local: {format_dt_full(local_now)}")
    safe_addstr(stdscr, 1, 10, f"Timeline: {format_dt_full(local_scrub)}")

    top = 3
    footer_y = h - 1
    rows_fit = max(1, (footer_y - top) // ROW_HEIGHT)
    state["zone_scroll"] = ensure_visible(state["selected"], state.get("zone_scroll", 0), rows_fit, len(registry))
    start = state["zone_scroll"]
    for i, entry in enumerate(registry.entries[start:start + rows_fit]):
        idx = start + i
        render_zone(stdscr, state, entry, top + i * ROW_HEIGHT, w, idx == state["selected"])

    if not len(registry):
        safe_addstr(stdscr, top, 2, "No timezones configured")

    footer = state["message"] or "?: help | a: add | r: remove | g: group | q: quit"
    safe_addstr(stdscr, footer_y, 0, footer)

    cursor = None
    if state["show_help"]:
        render_help(stdscr, state, h, w)
    elif state["adding"] or state["renaming"]:
        cursor = render_prompt(stdscr, state, h, w)

    try:
        curses.curs_set(1 if cursor else 0)
    except curses.error:
        pass
    if cursor:
        stdscr.move(*cursor)
    stdscr.refresh()


# -----------------------------
# Input handling
# -----------------------------

NAV_KEYS = {
    ord("h"): lambda s: app.scrub_hour(s, -1),
    curses.KEY_LEFT: lambda s: app.scrub_hour(s, -1),
    ord("l"): lambda s: app.scrub_hour(s, 1),
    curses.KEY_RIGHT: lambda s: app.scrub_hour(s, 1),
    ord("H"): lambda s: app.adjust_minutes(s, -1),
    curses.KEY_SLEFT: lambda s: app.adjust_minutes(s, -1),
    ord("L"): lambda s: app.adjust_minutes(s, 1),
    curses.KEY_SRIGHT: lambda s: app.adjust_minutes(s, 1),
    ord("["): lambda s: app.adjust_minutes(s, -15),
    ord("]"): lambda s: app.adjust_minutes(s, 15),
    ord("{"): lambda s: app.adjust_minutes(s, -60),
    ord("}"): lambda s: app.adjust_minutes(s, 60),
    ord("t"): app.reset_to_now,
    ord("j"): lambda s: app.navigate_zone(s, 1),
    curses.KEY_DOWN: lambda s: app.navigate_zone(s, 1),
    ord("k"): lambda s: app.navigate_zone(s, -1),
    curses.KEY_UP: lambda s: app.navigate_zone(s, -1),
    ord("m"): app.toggle_time_format,
    ord("n"): app.toggle_display_mode,
    ord("d"): lambda s: app.toggle_flag(s, "show_date"),
    ord("s"): lambda s: app.toggle_flag(s, "show_sun_times"),
    ord("g"): app.toggle_grouping,
    ord("c"): app.cycle_theme,
    ord("?"): app.toggle_help,
    ord("a"): app.start_add_zone,
    ord("r"): app.remove_current_zone,
    ord("e"): app.start_rename,
    ord("E"): app.clear_label,
}

ENTER_KEYS = (curses.KEY_ENTER, 10, 13)
BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 127, 8)
ESC = 27


def handle_add_input(key: int, state: dict) -> bool:
    if key == ESC:
        return app.cancel_add_zone(state)
    if key in ENTER_KEYS:
        return app.confirm_add_zone(state)
    if key == curses.KEY_UP:
        return app.navigate_results(state, -1)
    if key == curses.KEY_DOWN:
        return app.navigate_results(state, 1)
    if key in BACKSPACE_KEYS:
        return app.update_add_input(state, state["add_input"][:-1])
    if ord("0") <= key <= ord("9") and state["add_results"]:
        return app.quick_select(state, key - ord("0"))
    if 32 <= key < 127:
        return app.update_add_input(state, state["add_input"] + chr(key))
    return False


def handle_rename_input(key: int, state: dict) -> bool:
    if key == ESC:
        return app.cancel_rename(state)
    if key in ENTER_KEYS:
        return app.confirm_rename(state)
    if key in BACKSPACE_KEYS:
        state["rename_input"] = state["rename_input"][:-1]
        return True
    if 32 <= key < 127:
        state["rename_input"] += chr(key)
        return True
    return False


def handle_key(key: int, state: dict) -> bool:
    if key == -1:
        return False
    if key == 3:  # Ctrl-C
        state["quit"] = True
        return False
    if state["show_help"]:
        return app.toggle_help(state)
    if state["renaming"]:
        return handle_rename_input(key, state)
    if state["adding"]:
        return handle_add_input(key, state)

    if key in (ord("q"), ord("Q")):
        state["quit"] = True
        return False
    action = NAV_KEYS.get(key)
    if action is None:
        return False
    state["message"] = ""
    return action(state)


# -----------------------------
# Main loop
# -----------------------------

def main(stdscr: curses.window, state: dict) -> None:
    stdscr.timeout(POLL_MS)
    stdscr.keypad(True)
    try:
        curses.raw()
    except curses.error:
        pass

    state["unicode_supported"] = unicode_supported(stdscr)
    init_colors(state)
    apply_box_mode(state, state["config"].box_drawing)
    render_main(stdscr, state)

    last_tick = time.monotonic()
    while not state["quit"]:
        key = stdscr.getch()
        changed = handle_key(key, state)

        now = time.monotonic()
        if now - last_tick >= TICK_SECONDS:
            last_tick = now
            changed = app.tick(state) or changed

        if changed and not state["quit"]:
            render_main(stdscr, state)


def run_dashboard(state: dict) -> None:
    # Enable wide-char support in curses based on the current locale.
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        pass
    logger.info("starting dashboard with %d zones", len(state["registry"]))
    curses.wrapper(main, state)
