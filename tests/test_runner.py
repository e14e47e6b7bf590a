"""Tests for the interactive event loop with scripted key input."""

import io
import itertools
import logging
import tempfile
import time
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from rich.console import Console

from time_tracker.core.app_state import Tick, update
from time_tracker.core.history_store import HistoryStore, read_report
from time_tracker.models.session import Session
from time_tracker.ui import runner
from time_tracker.ui.runner import normalize_key, run


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def scripted(*keys):
    """Return a ``read_key`` replacement that yields ``keys`` in order."""
    it = iter(keys)
    return lambda: next(it)


def stepping_clock(start=datetime(2024, 4, 1, 9, 0, 0)):
    counter = itertools.count()
    return lambda: start + timedelta(minutes=next(counter))


def quiet_console():
    return Console(file=io.StringIO(), width=100)


@pytest.mark.parametrize(
    "raw, name",
    [
        ("\x1b[A", "up"),
        ("\x1b[B", "down"),
        ("\r", "enter"),
        ("\x1b", "esc"),
        ("\x7f", "backspace"),
        (" ", "space"),
        ("q", "q"),
        ("\x03", "ctrl+c"),
    ],
)
def test_normalize_key(raw, name):
    assert normalize_key(raw) == name


def test_start_stop_quit_saves_session(temp_dir):
    store = HistoryStore(temp_dir / "history.txt")

    state = run(
        store,
        console=quiet_console(),
        read_key=scripted("\r", "s", "q"),
        clock=stepping_clock(),
        screen=False,
    )

    assert len(state.history) == 1
    assert state.history[0].end > state.history[0].start
    assert read_report(store.path) == state.history


def test_delete_from_history_screen(temp_dir):
    store = HistoryStore(temp_dir / "history.txt")
    sessions = [
        Session(start=datetime(2024, 1, 1, 9, 0), end=datetime(2024, 1, 1, 10, 0)),
        Session(start=datetime(2024, 1, 2, 9, 0), end=datetime(2024, 1, 2, 11, 0)),
    ]
    store.save(sessions)

    state = run(
        store,
        console=quiet_console(),
        read_key=scripted("\x1b[B", "\x1b[B", "\r", "d", "q"),
        screen=False,
    )

    assert state.history == sessions[1:]
    assert store.load() == sessions[1:]


def test_ctrl_c_quits(temp_dir):
    def interrupt():
        raise KeyboardInterrupt

    state = run(
        HistoryStore(temp_dir / "history.txt"),
        console=quiet_console(),
        read_key=interrupt,
        screen=False,
    )

    assert state.history == []


def test_save_failure_is_logged_not_raised(temp_dir, caplog):
    # A directory cannot be written as a file.
    store = HistoryStore(temp_dir)

    with caplog.at_level(logging.ERROR, logger="time_tracker"):
        state = run(
            store,
            console=quiet_console(),
            read_key=scripted("\r", "s", "q"),
            clock=stepping_clock(),
            screen=False,
        )

    assert len(state.history) == 1
    assert "Failed to save history" in caplog.text


def test_tick_uses_a_single_clock_reading(temp_dir, monkeypatch):
    """Test that a tick and its update step see the same time."""
    seen = []

    def recording_update(state, event, now):
        seen.append((event, now))
        return update(state, event, now)

    def slow_keys():
        keys = iter(["\r", "s", "q"])

        def read_key():
            time.sleep(0.05)
            return next(keys)

        return read_key

    monkeypatch.setattr(runner, "TICK_INTERVAL", 0.01)
    monkeypatch.setattr(runner, "update", recording_update)

    run(
        HistoryStore(temp_dir / "history.txt"),
        console=quiet_console(),
        read_key=slow_keys(),
        clock=stepping_clock(),
        screen=False,
    )

    ticks = [(event, now) for event, now in seen if isinstance(event, Tick)]
    assert ticks
    assert all(event.now == now for event, now in ticks)
