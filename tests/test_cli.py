"""Tests for the non-interactive CLI commands."""

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from time_tracker.cli.main import main
from time_tracker.core.history_store import read_report


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def history_file(temp_dir):
    return temp_dir / "history.txt"


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, history_file, *args):
    return runner.invoke(main, ["--history-file", str(history_file), *args])


def test_history_without_sessions(runner, history_file):
    result = invoke(runner, history_file, "history")

    assert result.exit_code == 0
    assert "No sessions recorded yet" in result.output


def test_add_and_list_sessions(runner, history_file):
    result = invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-01 10:30")
    assert result.exit_code == 0, result.output
    assert "Recorded session #1 (1h 30m 0s)" in result.output

    result = invoke(runner, history_file, "add", "2024-05-02 13:15:20", "2024-05-02 14:15:20")
    assert result.exit_code == 0, result.output

    sessions = read_report(history_file)
    assert len(sessions) == 2

    result = invoke(runner, history_file, "history")
    assert result.exit_code == 0
    assert "Tracked Sessions" in result.output
    assert "Wed May 01, 2024" in result.output
    assert "01:15:20 PM" in result.output


def test_add_rejects_end_before_start(runner, history_file):
    result = invoke(runner, history_file, "add", "2024-05-01 10:00", "2024-05-01 09:00")

    assert result.exit_code == 2
    assert "END must not be before START" in result.output
    assert not history_file.exists()


def test_summary(runner, history_file):
    invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-01 10:30")
    invoke(runner, history_file, "add", "2024-05-02 09:00", "2024-05-02 10:00:05")

    result = invoke(runner, history_file, "summary")

    assert result.exit_code == 0
    assert "Total sessions: 2" in result.output
    assert "Total time: 2h 30m 5s" in result.output


def test_delete_session(runner, history_file):
    invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-01 10:30")
    invoke(runner, history_file, "add", "2024-05-02 09:00", "2024-05-02 10:00")

    result = invoke(runner, history_file, "delete", "1")

    assert result.exit_code == 0, result.output
    assert "Deleted session #1" in result.output
    sessions = read_report(history_file)
    assert len(sessions) == 1
    assert sessions[0].start.day == 2


def test_delete_out_of_range(runner, history_file):
    invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-01 10:30")

    result = invoke(runner, history_file, "delete", "3")

    assert result.exit_code == 1
    assert "no session #3" in result.output
    assert len(read_report(history_file)) == 1


def test_report_prints_file_layout(runner, history_file):
    invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-01 10:30")

    result = invoke(runner, history_file, "report")

    assert result.exit_code == 0
    assert "SESSION HISTORY" in result.output
    assert "Wednesday, May 01, 2024" in result.output
    assert "END OF REPORT" in result.output


def test_history_file_from_config(runner, temp_dir):
    config_file = temp_dir / "config.json"
    history_file = temp_dir / "from-config.txt"
    config_file.write_text(json.dumps({"history_file": str(history_file)}))

    result = runner.invoke(
        main,
        ["--config", str(config_file), "add", "2024-05-01 09:00", "2024-05-01 09:30"],
    )

    assert result.exit_code == 0, result.output
    assert len(read_report(history_file)) == 1


def test_bad_config_aborts(runner, temp_dir):
    config_file = temp_dir / "config.json"
    config_file.write_text("{broken")

    result = runner.invoke(main, ["--config", str(config_file), "history"])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_log_file_receives_records(runner, temp_dir, history_file):
    log_file = temp_dir / "tracker.log"

    result = runner.invoke(
        main,
        [
            "--history-file",
            str(history_file),
            "--log-file",
            str(log_file),
            "--verbose",
            "add",
            "2024-05-01 09:00",
            "2024-05-01 09:30",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Wrote 1 session(s)" in log_file.read_text()


def test_add_rejects_sessions_of_a_day_or_more(runner, history_file):
    """Test that sessions the report cannot hold are refused."""
    result = invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-03 10:00")

    assert result.exit_code == 2
    assert "24 hours or more" in result.output
    assert not history_file.exists()

    result = invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-02 09:00")
    assert result.exit_code == 2

    result = invoke(runner, history_file, "add", "2024-05-01 09:00", "2024-05-02 08:59:59")
    assert result.exit_code == 0, result.output
    assert read_report(history_file)[0].end.day == 2


def test_history_file_precedence(runner, temp_dir):
    """Test that the env var beats the config file and the option beats both."""
    config_file = temp_dir / "config.json"
    from_file = temp_dir / "from-file.txt"
    from_env = temp_dir / "from-env.txt"
    from_option = temp_dir / "from-option.txt"
    config_file.write_text(json.dumps({"history_file": str(from_file)}))
    env = {
        "TIME_TRACKER_CONFIG": str(config_file),
        "TIME_TRACKER_HISTORY_FILE": str(from_env),
    }
    args = ["add", "2024-05-01 09:00", "2024-05-01 09:30"]

    result = runner.invoke(main, args, env=env)
    assert result.exit_code == 0, result.output
    assert from_env.exists()
    assert not from_file.exists()

    result = runner.invoke(main, ["--history-file", str(from_option), *args], env=env)
    assert result.exit_code == 0, result.output
    assert from_option.exists()
    assert len(read_report(from_env)) == 1

    env["TIME_TRACKER_HISTORY_FILE"] = None
    result = runner.invoke(main, args, env=env)
    assert result.exit_code == 0, result.output
    assert from_file.exists()
