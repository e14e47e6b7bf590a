"""Interactive event loop for the terminal UI.

Key presses are read on a background thread and handed to the main loop
through a queue; when no key arrives within :data:`TICK_INTERVAL` the loop
delivers a :class:`Tick` instead.  The reader only fetches the next key
after the main loop has finished with the previous one, so a single state
transition is in flight at any time.
"""

import logging
import queue
import threading
from datetime import datetime
from typing import Callable, Optional

import click
from rich.console import Console
from rich.live import Live

from time_tracker.core.app_state import (
    AppState,
    Effect,
    KeyPress,
    Tick,
    initial_state,
    update,
)
from time_tracker.core.history_store import HistoryStore
from time_tracker.ui.view import render

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0

_KEY_NAMES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1b": "esc",
    "\r": "enter",
    "\n": "enter",
    "\r\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    " ": "space",
    "\x03": "ctrl+c",
}


def normalize_key(raw: str) -> str:
    """Map a raw terminal key sequence to the names used by the state machine."""
    return _KEY_NAMES.get(raw, raw)


class KeyReader(threading.Thread):
    """Reads one key at a time and posts its normalised name to ``keys``."""

    def __init__(self, read_key: Callable[[], str] = click.getchar):
        super().__init__(name="key-reader", daemon=True)
        self.read_key = read_key
        self.keys: "queue.Queue[str]" = queue.Queue()
        self._ready = threading.Event()
        self._ready.set()
        self._stopped = threading.Event()

    def run(self) -> None:
        while True:
            self._ready.wait()
            if self._stopped.is_set():
                return
            self._ready.clear()
            try:
                key = normalize_key(self.read_key())
            except (KeyboardInterrupt, EOFError):
                key = "ctrl+c"
            self.keys.put(key)

    def resume(self) -> None:
        """Allow the next key to be read."""
        self._ready.set()

    def stop(self) -> None:
        self._stopped.set()
        self._ready.set()


def _save(store: HistoryStore, state: AppState) -> AppState:
    try:
        store.save(state.history)
    except OSError as e:
        logger.error("Failed to save history to %s: %s", store.path, e)
        return state.with_(status=f"Could not save history: {e}")
    return state


def run(
    store: HistoryStore,
    console: Optional[Console] = None,
    read_key: Callable[[], str] = click.getchar,
    clock: Callable[[], datetime] = datetime.now,
    screen: bool = True,
) -> AppState:
    """Run the interactive UI until the user quits; return the final state."""
    state = initial_state(store.load())
    logger.info("Starting UI with %d stored session(s)", len(state.history))

    reader = KeyReader(read_key)
    reader.start()
    try:
        with Live(render(state), console=console, screen=screen, auto_refresh=False) as live:
            while True:
                try:
                    key = reader.keys.get(timeout=TICK_INTERVAL)
                except queue.Empty:
                    key = None
                now = clock()
                event = Tick(now=now) if key is None else KeyPress(key=key)

                state, effect = update(state, event, now)
                if effect is Effect.QUIT:
                    break
                if effect is Effect.SAVE:
                    state = _save(store, state)

                live.update(render(state), refresh=True)
                if isinstance(event, KeyPress):
                    reader.resume()
    finally:
        reader.stop()

    if state.tracking:
        logger.info("Quit with a running timer; the session was not recorded")
    return state
