"""Application state and the single update step driven by UI events.

The interactive UI keeps no shared mutable state: every key press or timer
tick is passed to :func:`update` together with the current :class:`AppState`
and the returned state replaces it.  Side effects (persisting history,
quitting) are returned as an :class:`Effect` for the caller to carry out.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel

from time_tracker.core.history_store import MAX_SESSION_LENGTH
from time_tracker.models.session import Session
from time_tracker.models.settings import SETTING_LABELS, Settings

logger = logging.getLogger(__name__)


class View(str, Enum):
    """Screen currently shown."""

    MENU = "menu"
    TRACKING = "tracking"
    HISTORY = "history"
    SETTINGS = "settings"


class Effect(str, Enum):
    """Side effect requested by a state transition."""

    NONE = "none"
    SAVE = "save"
    QUIT = "quit"


MENU_ITEMS: List[str] = [
    "Start tracking",
    "Stop tracking",
    "View history",
    "Settings",
    "Quit",
]

QUIT_KEYS = ("ctrl+c", "q")
BACK_KEYS = ("esc", "b")
UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")


class KeyPress(BaseModel):
    """A normalised key name such as ``"enter"``, ``"up"`` or ``"d"``."""

    key: str


class Tick(BaseModel):
    """Periodic timer message delivered while the UI is idle."""

    now: datetime


Event = Union[KeyPress, Tick]


class AppState(BaseModel):
    """Everything the interactive UI needs to render and react to events."""

    view: View = View.MENU
    cursor: int = 0
    settings_cursor: int = 0
    tracking: bool = False
    tracking_start: Optional[datetime] = None
    elapsed: timedelta = timedelta()
    history: List[Session] = []
    settings: Settings = Settings()
    status: str = ""

    model_config = {"frozen": True}

    def with_(self, **changes) -> "AppState":
        return self.model_copy(update=changes)


def initial_state(history: List[Session]) -> AppState:
    """State shown at startup, holding the previously saved sessions."""
    return AppState(history=list(history))


def update(state: AppState, event: Event, now: datetime) -> Tuple[AppState, Effect]:
    """Apply one event to ``state``."""
    if isinstance(event, Tick):
        if state.tracking and state.tracking_start is not None:
            return state.with_(elapsed=event.now - state.tracking_start), Effect.NONE
        return state, Effect.NONE

    # Any key press clears the previous status line.
    if state.status:
        state = state.with_(status="")

    handler = {
        View.MENU: _update_menu,
        View.TRACKING: _update_tracking,
        View.HISTORY: _update_history,
        View.SETTINGS: _update_settings,
    }[state.view]
    return handler(state, event.key, now)


def _stop_tracking(state: AppState, now: datetime) -> AppState:
    session = Session(start=state.tracking_start, end=now)
    if session.duration >= MAX_SESSION_LENGTH:
        logger.warning(
            "Session of %s started %s is 24h or longer; the history file only "
            "keeps its start date, so it will reload shorter",
            session.duration,
            session.start,
        )
    return state.with_(
        tracking=False,
        tracking_start=None,
        elapsed=timedelta(),
        history=state.history + [session],
    )


def _move(cursor: int, key: str, size: int) -> int:
    if key in UP_KEYS and cursor > 0:
        return cursor - 1
    if key in DOWN_KEYS and cursor < size - 1:
        return cursor + 1
    return cursor


def _update_menu(state: AppState, key: str, now: datetime) -> Tuple[AppState, Effect]:
    if key in QUIT_KEYS:
        return state, Effect.QUIT
    if key in UP_KEYS + DOWN_KEYS:
        return state.with_(cursor=_move(state.cursor, key, len(MENU_ITEMS))), Effect.NONE
    if key != "enter":
        return state, Effect.NONE

    choice = MENU_ITEMS[state.cursor]
    if choice == "Start tracking":
        if not state.tracking:
            state = state.with_(
                tracking=True,
                tracking_start=now,
                elapsed=timedelta(),
                view=View.TRACKING,
            )
    elif choice == "Stop tracking":
        if state.tracking:
            return _stop_tracking(state, now), Effect.SAVE
    elif choice == "View history":
        state = state.with_(view=View.HISTORY, cursor=0)
    elif choice == "Settings":
        state = state.with_(view=View.SETTINGS, settings_cursor=0)
    elif choice == "Quit":
        return state, Effect.QUIT
    return state, Effect.NONE


def _update_tracking(
    state: AppState, key: str, now: datetime
) -> Tuple[AppState, Effect]:
    if key in QUIT_KEYS:
        return state, Effect.QUIT
    if key in BACK_KEYS:
        # The timer keeps running in the background.
        return state.with_(view=View.MENU), Effect.NONE
    if key in ("enter", "s") and state.tracking:
        return _stop_tracking(state, now).with_(view=View.MENU), Effect.SAVE
    return state, Effect.NONE


def _update_history(
    state: AppState, key: str, now: datetime
) -> Tuple[AppState, Effect]:
    if key in QUIT_KEYS:
        return state, Effect.QUIT
    if key in BACK_KEYS:
        return state.with_(view=View.MENU, cursor=0), Effect.NONE
    if key in UP_KEYS + DOWN_KEYS:
        return (
            state.with_(cursor=_move(state.cursor, key, len(state.history))),
            Effect.NONE,
        )
    if key in ("d", "backspace") and 0 <= state.cursor < len(state.history):
        history = state.history[: state.cursor] + state.history[state.cursor + 1 :]
        cursor = state.cursor
        if cursor >= len(history) and cursor > 0:
            cursor -= 1
        return state.with_(history=history, cursor=cursor), Effect.SAVE
    return state, Effect.NONE


def _update_settings(
    state: AppState, key: str, now: datetime
) -> Tuple[AppState, Effect]:
    if key in QUIT_KEYS:
        return state, Effect.QUIT
    if key in BACK_KEYS:
        return state.with_(view=View.MENU, cursor=0), Effect.NONE
    if key in UP_KEYS + DOWN_KEYS:
        cursor = _move(state.settings_cursor, key, len(SETTING_LABELS))
        return state.with_(settings_cursor=cursor), Effect.NONE
    if key in ("enter", "space"):
        _, field = SETTING_LABELS[state.settings_cursor]
        return state.with_(settings=state.settings.toggle(field)), Effect.NONE
    return state, Effect.NONE
