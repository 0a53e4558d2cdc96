"""Date helpers for daily tab titles and summary windows.

Daily tabs are titled ``"Mar 5, 2024"``. Titles are parsed into ``date``
values as soon as they enter the engine; filtering and ordering always work
on the parsed date and never on the string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Final, Iterable, List, Optional, Sequence

from .constants import WEEKDAY_NAMES

MONTHS: Final[tuple[str, ...]] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
SHORT_DAYS: Final[dict[str, str]] = {name: name[:3] for name in WEEKDAY_NAMES}

# Some daily tabs were saved without the space after the comma ("Mar 22,2024").
_TAB_TITLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^([A-Z][a-z]{2})\s+(\d{1,2}),\s*(\d{4})$")


@dataclass(frozen=True, order=True)
class TabTitle:
    """A daily tab title together with the calendar date it encodes."""

    day: date
    title: str

    @classmethod
    def parse(cls, title: Any) -> Optional["TabTitle"]:
        """Return the parsed title, or ``None`` when *title* is not a date tab."""
        if not isinstance(title, str):
            raise TypeError(f"Tab title must be a string, got {type(title).__name__}")
        match = _TAB_TITLE_PATTERN.match(title.strip())
        if not match:
            return None
        month_text, day_text, year_text = match.groups()
        if month_text not in MONTHS:
            return None
        try:
            parsed = date(int(year_text), MONTHS.index(month_text) + 1, int(day_text))
        except ValueError:
            return None
        return cls(day=parsed, title=title)

    @property
    def weekday_label(self) -> str:
        return SHORT_DAYS[WEEKDAY_NAMES[self.day.weekday()]]


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime

    def contains(self, day: date) -> bool:
        moment = datetime.combine(day, time.min)
        return self.start <= moment <= self.end


def format_tab_title(day: date) -> str:
    """Return the canonical tab title for *day*, e.g. ``"Mar 5, 2024"``."""
    return f"{MONTHS[day.month - 1]} {day.day}, {day.year}"


def week_window(today: date, week_start_index: int = 0) -> DateWindow:
    """Return the week containing *today*.

    The window opens at 00:00 on the most recent ``week_start_index`` weekday
    (0 = Monday) and closes at the last microsecond of the sixth day after it.
    """
    offset = (today.weekday() - week_start_index) % 7
    start_day = today - timedelta(days=offset)
    end_day = start_day + timedelta(days=6)
    return DateWindow(
        start=datetime.combine(start_day, time.min),
        end=datetime.combine(end_day, time.max),
    )


def last_month_window(today: date) -> DateWindow:
    first_of_month = today.replace(day=1)
    last_day = first_of_month - timedelta(days=1)
    return DateWindow(
        start=datetime.combine(last_day.replace(day=1), time.min),
        end=datetime.combine(last_day, time.max),
    )


def format_duration(duration_ms: Any) -> str:
    """Format milliseconds as ``"<minutes>:<seconds>:<milliseconds>"``.

    Returns an empty string when the duration is missing or not numeric.
    """
    if duration_ms is None or isinstance(duration_ms, bool):
        return ""
    try:
        total = int(duration_ms)
    except (TypeError, ValueError):
        return ""
    minutes, remainder = divmod(total, 60000)
    seconds, milliseconds = divmod(remainder, 1000)
    return f"{minutes}:{seconds}:{milliseconds}"


def get_current_time(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%H%M%S")


def validate_tab_titles(titles: Any) -> List[str]:
    if isinstance(titles, str) or not isinstance(titles, Sequence):
        raise TypeError("Invalid input: Expected a list of tab titles.")
    for index, title in enumerate(titles):
        if not isinstance(title, str):
            raise TypeError(f"Invalid element at index {index}: Expected a string.")
    return list(titles)


def parse_tab_titles(titles: Iterable[str]) -> List[TabTitle]:
    """Parse *titles*, dropping those that are not daily tabs, sorted by date."""
    parsed = [TabTitle.parse(title) for title in titles]
    return sorted(item for item in parsed if item is not None)


def titles_in_window(titles: Iterable[str], window: DateWindow) -> List[TabTitle]:
    return [item for item in parse_tab_titles(titles) if window.contains(item.day)]


def get_last_month_tab_titles(titles: Sequence[str], today: date | None = None) -> List[str]:
    """Return the daily tab titles that fall into the previous calendar month."""
    validated = validate_tab_titles(titles)
    window = last_month_window(today or date.today())
    return [item.title for item in titles_in_window(validated, window)]


def create_summary_title(today: date | None = None) -> str:
    window = last_month_window(today or date.today())
    return f"Summary {MONTHS[window.start.month - 1]} {window.start.year}"


def create_weekly_summary_title(today: date | None = None, week_start_index: int = 0) -> str:
    window = week_window(today or date.today(), week_start_index)
    start, end = window.start, window.end
    return (
        f"Weekly Summary {WEEKDAY_NAMES[start.weekday()]} "
        f"{MONTHS[start.month - 1]} {start.day}-{end.day} {start.year}"
    )


def create_compact_weekly_summary_title(today: date | None = None, week_start_index: int = 0) -> str:
    """Short weekly title, e.g. ``"Week Mar 18-24 2024"``, for workbooks with a title limit."""
    window = week_window(today or date.today(), week_start_index)
    start, end = window.start, window.end
    return f"Week {MONTHS[start.month - 1]} {start.day}-{end.day} {start.year}"
