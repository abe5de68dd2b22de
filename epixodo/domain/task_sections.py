"""Group tasks into due-date sections for the task board and dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .entities import Record
from .kinds import is_completed
from .time_utils import ZoneLike, end_of_week, local_date

SECTION_ORDER: Tuple[str, ...] = (
    "overdue",
    "today",
    "this_week",
    "next_week",
    "later",
    "no_date",
    "completed",
)

SECTION_TITLES: Dict[str, str] = {
    "overdue": "Overdue",
    "today": "Today",
    "this_week": "This week",
    "next_week": "Next week",
    "later": "Later",
    "no_date": "No date",
    "completed": "Completed",
}

FOCUS_SECTIONS: Tuple[str, ...] = ("overdue", "today")


@dataclass
class TaskSections:
    sections: Dict[str, List[Record]] = field(
        default_factory=lambda: {key: [] for key in SECTION_ORDER}
    )
    ranges: Dict[str, str] = field(default_factory=dict)

    @property
    def pending_count(self) -> int:
        return sum(len(items) for key, items in self.sections.items() if key != "completed")

    @property
    def focus_count(self) -> int:
        return sum(len(self.sections[key]) for key in FOCUS_SECTIONS)


def _short(day: date) -> str:
    return day.strftime("%d/%m")


def categorize_tasks(
    tasks: Iterable[Record],
    today: date,
    tz: ZoneLike = None,
) -> TaskSections:
    """Split ``tasks`` by due day relative to ``today`` (weeks end on Sunday).

    Completed tasks always land in ``completed``; tasks without a due date in
    ``no_date``. Input order is kept inside every section.
    """
    week_end = end_of_week(today)
    next_week_start = week_end + timedelta(days=1)
    next_week_end = week_end + timedelta(days=7)

    result = TaskSections()
    result.ranges = {
        "today": _short(today),
        "this_week": f"{_short(today + timedelta(days=1))} - {_short(week_end)}",
        "next_week": f"{_short(next_week_start)} - {_short(next_week_end)}",
        "later": f"From {_short(next_week_end + timedelta(days=1))}",
    }

    for task in tasks:
        key = _section_for(task, today, week_end, next_week_end, tz)
        result.sections[key].append(task)
    return result


def _section_for(
    task: Record,
    today: date,
    week_end: date,
    next_week_end: date,
    tz: ZoneLike,
) -> str:
    if is_completed(task.fields):
        return "completed"
    due: Optional[date] = local_date(task.get("due_date"), tz)
    if due is None:
        return "no_date"
    if due < today:
        return "overdue"
    if due == today:
        return "today"
    if due <= week_end:
        return "this_week"
    if due <= next_week_end:
        return "next_week"
    return "later"


__all__ = [
    "FOCUS_SECTIONS",
    "SECTION_ORDER",
    "SECTION_TITLES",
    "TaskSections",
    "categorize_tasks",
]
