"""Split a trailing "due DATE" clause off an action's text and settle the date."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

from ghircbot.core.interfaces import DateParser

_DUE_CLAUSE = re.compile(r"^(?P<text>.*)(?: *- *| +)due +(?P<date>.*?)[. ]*$", re.IGNORECASE)
DEFAULT_DUE_IN = timedelta(weeks=1)


@dataclass(frozen=True)
class DueDate:
    text: str
    due: date
    adjusted: bool = False

    @property
    def body_line(self) -> str:
        return f"Due: {self.due.isoformat()} ({self.due:%A} {self.due.day} {self.due:%B})"


def add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:  # 29 February
        return day.replace(year=day.year + years, day=28)


def split_due_date(text: str, parser: DateParser, today: date) -> DueDate:
    """Return the action text without its due clause, and the due date.

    Without a parseable due clause the action is due a week from today. A
    date that lies in the past (typically "1 June" said in July) is moved
    forward a year at a time until it is today or later.
    """
    due: date | None = None
    match = _DUE_CLAUSE.match(text)
    if match:
        due = parser.parse(match.group("date"), today)
        if due is not None:
            text = match.group("text").rstrip(" -")
    if due is None:
        return DueDate(text=text, due=today + DEFAULT_DUE_IN)

    adjusted = False
    years = 0
    parsed = due
    while due < today:
        years += 1
        due = add_years(parsed, years)
        adjusted = True
    return DueDate(text=text, due=due, adjusted=adjusted)
