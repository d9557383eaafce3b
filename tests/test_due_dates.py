from __future__ import annotations

from datetime import date

from ghircbot.engine.due_dates import DueDate, add_years, split_due_date


class _FakeParser:
    def __init__(self, known: dict[str, date]) -> None:
        self.known = known
        self.seen: list[str] = []

    def parse(self, text: str, today: date) -> date | None:
        self.seen.append(text)
        return self.known.get(text)


def test_past_date_moves_to_next_year() -> None:
    parser = _FakeParser({"1 June": date(2026, 6, 1)})

    due = split_due_date("fix the thing - due 1 June", parser, today=date(2026, 10, 19))

    assert due == DueDate(text="fix the thing", due=date(2027, 6, 1), adjusted=True)
    assert parser.seen == ["1 June"]


def test_future_date_is_kept_and_trailing_period_dropped() -> None:
    parser = _FakeParser({"tomorrow": date(2026, 10, 20)})

    due = split_due_date("review the draft due tomorrow.", parser, today=date(2026, 10, 19))

    assert due.text == "review the draft"
    assert due.due == date(2026, 10, 20)
    assert not due.adjusted


def test_missing_or_unparseable_due_date_defaults_to_a_week() -> None:
    parser = _FakeParser({})

    plain = split_due_date("write tests", parser, today=date(2026, 10, 19))
    vague = split_due_date("write tests due someday", parser, today=date(2026, 10, 19))

    assert plain == DueDate(text="write tests", due=date(2026, 10, 26))
    assert vague.text == "write tests due someday"
    assert vague.due == date(2026, 10, 26)


def test_body_line_spells_out_the_day() -> None:
    assert DueDate(text="x", due=date(2026, 10, 26)).body_line == "Due: 2026-10-26 (Monday 26 October)"


def test_add_years_handles_leap_day() -> None:
    assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
    assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)
