"""Rendering of the interactive screens with rich."""

from typing import Dict, List

from rich.console import Group
from rich.text import Text

from time_tracker.core.app_state import MENU_ITEMS, AppState, View
from time_tracker.core.durations import format_duration
from time_tracker.models.settings import SETTING_LABELS

DARK_PALETTE: Dict[str, str] = {
    "title": "bold color(205)",
    "selected": "bold color(86)",
    "normal": "color(252)",
    "timer": "bold color(212) on color(236)",
    "item": "color(243)",
    "help": "color(241)",
    "status": "bold red",
}

LIGHT_PALETTE: Dict[str, str] = {
    "title": "bold color(125)",
    "selected": "bold color(30)",
    "normal": "color(235)",
    "timer": "bold color(162) on color(254)",
    "item": "color(240)",
    "help": "color(244)",
    "status": "bold red",
}


def _palette(state: AppState) -> Dict[str, str]:
    return DARK_PALETTE if state.settings.dark_mode else LIGHT_PALETTE


def _cursor_line(text: str, selected: bool, palette: Dict[str, str], style: str) -> Text:
    prefix = "> " if selected else "  "
    return Text(prefix + text, style=palette["selected"] if selected else palette[style])


def render(state: AppState) -> Group:
    """Build the renderable for ``state.view``."""
    renderer = {
        View.MENU: _render_menu,
        View.TRACKING: _render_tracking,
        View.HISTORY: _render_history,
        View.SETTINGS: _render_settings,
    }[state.view]
    palette = _palette(state)
    lines = renderer(state, palette)
    if state.status:
        lines += [Text(""), Text(state.status, style=palette["status"])]
    return Group(*lines)


def _render_menu(state: AppState, palette: Dict[str, str]) -> List[Text]:
    lines = [Text("⏱  Time Tracking", style=palette["title"]), Text("")]
    if state.tracking:
        lines += [
            Text(f"● Recording: {format_duration(state.elapsed)}", style=palette["timer"]),
            Text(""),
        ]
    for i, item in enumerate(MENU_ITEMS):
        lines.append(_cursor_line(item, state.cursor == i, palette, "normal"))
    lines += [Text(""), Text("↑/↓: navigate • enter: select • q: quit", style=palette["help"])]
    return lines


def _render_tracking(state: AppState, palette: Dict[str, str]) -> List[Text]:
    clock = "%H:%M:%S" if state.settings.show_seconds else "%H:%M"
    started = state.tracking_start.strftime(clock) if state.tracking_start else "--"
    return [
        Text("⏱  Tracking Time", style=palette["title"]),
        Text(""),
        Text(f"  {format_duration(state.elapsed)}  ", style=palette["timer"]),
        Text(""),
        Text(f"Started: {started}", style=palette["normal"]),
        Text(""),
        Text("> Stop and save", style=palette["selected"]),
        Text(
            "  Press enter/s to stop, esc/b to go back (keeps running)",
            style=palette["normal"],
        ),
        Text(""),
        Text("enter/s: stop • esc/b: back • q: quit", style=palette["help"]),
    ]


def _render_history(state: AppState, palette: Dict[str, str]) -> List[Text]:
    lines = [Text("📋 History", style=palette["title"]), Text("")]
    if not state.history:
        lines.append(Text("No tracking sessions yet.", style=palette["normal"]))
    for i, session in enumerate(state.history):
        line = "{} - {} ({})".format(
            session.start.strftime("%b %d %H:%M"),
            session.end.strftime("%H:%M"),
            format_duration(session.duration),
        )
        lines.append(_cursor_line(line, state.cursor == i, palette, "item"))
    lines += [
        Text(""),
        Text("↑/↓: navigate • d: delete • esc/b: back • q: quit", style=palette["help"]),
    ]
    return lines


def _render_settings(state: AppState, palette: Dict[str, str]) -> List[Text]:
    lines = [Text("⚙  Settings", style=palette["title"]), Text("")]
    for i, (label, field) in enumerate(SETTING_LABELS):
        mark = "●" if getattr(state.settings, field) else "○"
        lines.append(
            _cursor_line(f"[{mark}] {label}", state.settings_cursor == i, palette, "normal")
        )
    lines += [
        Text(""),
        Text(
            "↑/↓: navigate • enter/space: toggle • esc/b: back • q: quit",
            style=palette["help"],
        ),
    ]
    return lines
