"""Session history persistence as a human-readable text report.

The report written by :func:`write_report` is both the user's printable
history and the tracker's only storage.  :func:`read_report` recovers the
sessions by scanning the same text for the labels and box-drawing markers
the writer emits, so the two halves must stay in lock-step: changing a
label, the record delimiter or a timestamp format breaks loading of files
written earlier.
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from time_tracker.core.durations import format_duration_long
from time_tracker.models.session import Session

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = "history.txt"

DATE_FORMAT = "%A, %B %d, %Y"
TIME_FORMAT = "%I:%M:%S %p"
TIMESTAMP_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"
GENERATED_FORMAT = "%a %b %d, %Y at %I:%M %p"

# Only the start date is written, so longer sessions lose whole days.
MAX_SESSION_LENGTH = timedelta(days=1)

# Markers the reader keys on.
RECORD_MARKER = "SESSION #"
RECORD_END_MARKER = "└──"
BORDER_RUN = "──"
VALUE_BORDER = "│"
DATE_LABEL = "Date:"
START_LABEL = "Start:"
END_LABEL = "End:"

HEADER_BANNER = """
 ╔════════════════════════════════════════════════════════════════╗
 ║                                                                ║
 ║    ████████╗██╗███╗   ███╗███████╗                             ║
 ║    ╚══██╔══╝██║████╗ ████║██╔════╝                             ║
 ║       ██║   ██║██╔████╔██║█████╗                               ║
 ║       ██║   ██║██║╚██╔╝██║██╔══╝                               ║
 ║       ██║   ██║██║ ╚═╝ ██║███████╗                             ║
 ║       ╚═╝   ╚═╝╚═╝     ╚═╝╚══════╝                             ║
 ║                                                                ║
 ║    ████████╗██████╗  █████╗  ██████╗██╗  ██╗███████╗██████╗    ║
 ║    ╚══██╔══╝██╔══██╗██╔══██╗██╔════╝██║ ██╔╝██╔════╝██╔══██╗   ║
 ║       ██║   ██████╔╝███████║██║     █████╔╝ █████╗  ██████╔╝   ║
 ║       ██║   ██╔══██╗██╔══██║██║     ██╔═██╗ ██╔══╝  ██╔══██╗   ║
 ║       ██║   ██║  ██║██║  ██║╚██████╗██║  ██╗███████╗██║  ██║   ║
 ║       ╚═╝   ╚═╝  ╚═╝╚═╝  ╚═╝ ╚═════╝╚═╝  ╚═╝╚══════╝╚═╝  ╚═╝   ║
 ║                                                                ║
 ╚════════════════════════════════════════════════════════════════╝
"""

HISTORY_BANNER = """
 ┌────────────────────────────────────────────────────────────────┐
 │                      SESSION HISTORY                           │
 └────────────────────────────────────────────────────────────────┘
"""

RECORD_TEMPLATE = """
   ┌──────────────────────────────────────────┐
   │  SESSION #{index:<3d}                            │
   ├──────────────────────────────────────────┤
   │  Date:     {date:<29} │
   │  Start:    {start:<29} │
   │  End:      {end:<29} │
   │  Duration: {duration:<29} │
   └──────────────────────────────────────────┘
"""

EMPTY_HISTORY = "\n   No sessions recorded yet.\n"

FOOTER_BANNER = """
 ╔════════════════════════════════════════════════════════════════╗
 ║                        END OF REPORT                           ║
 ╚════════════════════════════════════════════════════════════════╝
"""

PathLike = Union[str, Path]


def render_record(index: int, session: Session) -> str:
    """Render one session as a boxed record block (``index`` is 1-based)."""
    return RECORD_TEMPLATE.format(
        index=index,
        date=session.start.strftime(DATE_FORMAT),
        start=session.start.strftime(TIME_FORMAT),
        end=session.end.strftime(TIME_FORMAT),
        duration=format_duration_long(session.duration),
    )


def render_report(
    sessions: Sequence[Session], generated_at: Optional[datetime] = None
) -> str:
    """Render the full history report for ``sessions`` in collection order."""
    if generated_at is None:
        generated_at = datetime.now()
    total = sum((s.duration for s in sessions), timedelta())

    parts = [
        HEADER_BANNER,
        f"\n  Generated: {generated_at.strftime(GENERATED_FORMAT)}\n",
        f"  Total Sessions: {len(sessions)}\n",
        f"  Total Time: {format_duration_long(total)}\n",
        HISTORY_BANNER,
    ]
    if sessions:
        parts.extend(render_record(i, s) for i, s in enumerate(sessions, start=1))
    else:
        parts.append(EMPTY_HISTORY)
    parts.append(FOOTER_BANNER)
    return "".join(parts)


def write_report(
    path: PathLike,
    sessions: Sequence[Session],
    generated_at: Optional[datetime] = None,
) -> None:
    """Overwrite ``path`` with the report for ``sessions``.

    Raises:
        OSError: If the file cannot be written.  No temp-file swap is made,
            so a failure part-way through can leave a truncated report.
    """
    text = render_report(sessions, generated_at)
    Path(path).write_text(text, encoding="utf-8")
    logger.debug("Wrote %d session(s) to %s", len(sessions), path)


def _label_value(line: str, label: str) -> Optional[str]:
    """Return the text between ``label`` and the next vertical border."""
    if label not in line:
        return None
    rest = line.split(label, 1)[1]
    return rest.split(VALUE_BORDER, 1)[0].strip()


def _parse_record(date_str: str, start_str: str, end_str: str) -> Optional[Session]:
    try:
        start = datetime.strptime(f"{date_str} {start_str}", TIMESTAMP_FORMAT)
        end = datetime.strptime(f"{date_str} {end_str}", TIMESTAMP_FORMAT)
    except ValueError:
        return None
    # Only the start date is written; an earlier clock time means the
    # session ran past midnight.
    if end < start:
        end += timedelta(days=1)
    return Session(start=start, end=end)


def parse_report(lines: Iterable[str]) -> List[Session]:
    """Recover sessions from report lines in on-disk order.

    Blocks missing a date, start or end value, or whose timestamps do not
    parse, are skipped without error.
    """
    sessions: List[Session] = []
    pending = False
    date_str = start_str = end_str = ""

    for line in lines:
        if RECORD_MARKER in line:
            pending = True
            date_str = start_str = end_str = ""

        value = _label_value(line, DATE_LABEL)
        if value is not None:
            date_str = value

        # Border art may spell "Start:" as decoration; value lines never
        # contain a dash run.
        if BORDER_RUN not in line:
            value = _label_value(line, START_LABEL)
            if value is not None:
                start_str = value

        value = _label_value(line, END_LABEL)
        if value is not None:
            end_str = value

        if RECORD_END_MARKER in line and pending and date_str and start_str and end_str:
            session = _parse_record(date_str, start_str, end_str)
            if session is None:
                logger.warning(
                    "Dropping unparseable history record: %r %r %r",
                    date_str,
                    start_str,
                    end_str,
                )
            else:
                sessions.append(session)
            pending = False

    return sessions


def read_report(path: PathLike) -> List[Session]:
    """Load sessions from the report at ``path``.

    A missing or unreadable file yields an empty history rather than an
    error.  Bytes that are not valid UTF-8 are replaced, so they only spoil
    the line they appear on.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            sessions = parse_report(f)
    except FileNotFoundError:
        logger.debug("No history file at %s", path)
        return []
    except OSError as e:
        logger.warning("Could not read history file %s: %s", path, e)
        return []
    logger.debug("Loaded %d session(s) from %s", len(sessions), path)
    return sessions


class HistoryStore:
    """Loads and saves the session history report at a fixed path."""

    def __init__(self, path: PathLike = DEFAULT_HISTORY_FILE):
        self.path = Path(path)

    def load(self) -> List[Session]:
        """Return the stored sessions, or an empty list if there are none."""
        return read_report(self.path)

    def save(self, sessions: Sequence[Session]) -> None:
        """Rewrite the report from ``sessions``; raises ``OSError`` on failure."""
        write_report(self.path, sessions)
