from __future__ import annotations

from datetime import date

from epixodo.domain.task_sections import SECTION_ORDER, categorize_tasks
from epixodo.tests.fakes import make_record

TODAY = date(2025, 1, 8)  # Wednesday


def _tasks():
    return [
        make_record("late", due_date="2025-01-07 09:00:00.000Z", status="pending"),
        make_record("now", due_date="2025-01-08 10:00:00.000Z", status="blocked"),
        make_record("fri", due_date="2025-01-10 00:00:00.000Z"),
        make_record("next", due_date="2025-01-15 00:00:00.000Z"),
        make_record("far", due_date="2025-01-25 00:00:00.000Z"),
        make_record("loose", due_date=""),
        make_record("done", due_date="2025-01-07 09:00:00.000Z", status="completed"),
    ]


def test_categorize_tasks_by_due_day() -> None:
    result = categorize_tasks(_tasks(), TODAY, "UTC")
    ids = {key: [task.id for task in result.sections[key]] for key in SECTION_ORDER}

    assert ids == {
        "overdue": ["late"],
        "today": ["now"],
        "this_week": ["fri"],
        "next_week": ["next"],
        "later": ["far"],
        "no_date": ["loose"],
        "completed": ["done"],
    }
    assert result.focus_count == 2
    assert result.pending_count == 6


def test_categorize_tasks_ranges() -> None:
    result = categorize_tasks([], TODAY, "UTC")
    assert result.ranges["today"] == "08/01"
    assert result.ranges["this_week"] == "09/01 - 12/01"
    assert result.ranges["next_week"] == "13/01 - 19/01"
    assert result.ranges["later"] == "From 20/01"
