"""Recurrence rules for repeating tasks.

Rules are stored on the task as JSON text, e.g.
``{"frequency": "weekly", "interval": 2}``. Completing a recurring task
creates the next occurrence, dated by :func:`calculate_next_due_date`.
"""

from __future__ import annotations

import calendar
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from .time_utils import ZoneLike, parse_iso, resolve_zone

FREQUENCIES: Tuple[str, ...] = ("none", "daily", "weekly", "monthly", "yearly")

RECURRENCE_OPTIONS: Dict[str, str] = {
    "none": "Does not repeat",
    "daily": "Daily",
    "weekly": "Weekly",
    "monthly": "Monthly",
    "yearly": "Yearly",
}

_PLURAL_UNITS: Dict[str, str] = {
    "daily": "days",
    "weekly": "weeks",
    "monthly": "months",
    "yearly": "years",
}


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: str
    interval: int = 1
    days_of_week: Optional[Tuple[int, ...]] = None
    end_date: Optional[str] = None

    def __post_init__(self) -> None:
        if self.frequency not in FREQUENCIES:
            raise ValueError(f"Unsupported recurrence frequency '{self.frequency}'.")
        if self.interval < 1:
            raise ValueError("Recurrence interval must be at least 1.")

    def to_json(self) -> str:
        payload: Dict[str, Any] = {"frequency": self.frequency, "interval": self.interval}
        if self.days_of_week:
            payload["daysOfWeek"] = list(self.days_of_week)
        if self.end_date:
            payload["endDate"] = self.end_date
        return json.dumps(payload)


def parse_recurrence_rule(raw: Any) -> Optional[RecurrenceRule]:
    """Parse JSON text or a mapping; ``none``, blanks and garbage give ``None``."""
    if not raw:
        return None
    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None
    frequency = data.get("frequency")
    if not frequency or frequency == "none" or frequency not in FREQUENCIES:
        return None
    try:
        interval = int(data.get("interval") or 1)
    except (TypeError, ValueError):
        interval = 1
    days = data.get("daysOfWeek")
    days_of_week: Optional[Tuple[int, ...]] = None
    if isinstance(days, list):
        try:
            days_of_week = tuple(int(day) for day in days)
        except (TypeError, ValueError):
            days_of_week = None
    end_date = data.get("endDate") or None
    return RecurrenceRule(
        frequency=str(frequency),
        interval=max(interval, 1),
        days_of_week=days_of_week,
        end_date=str(end_date) if end_date else None,
    )


def _add_months(moment: datetime, months: int) -> datetime:
    # Clamp to the last day of the target month (Jan 31 + 1 month -> Feb 28/29).
    index = moment.month - 1 + months
    year = moment.year + index // 12
    month = index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def calculate_next_due_date(
    from_date: datetime, rule: Optional[RecurrenceRule], tz: ZoneLike = None
) -> Optional[datetime]:
    """Next occurrence after ``from_date``, or ``None`` past the rule's end date.

    Aware dates are stepped on the wall clock of ``tz`` (the display zone), so
    a task due at local midnight on Jan 31 repeats on the local Feb 28 rather
    than on whatever day the UTC instant happens to fall. Weekly rules step
    whole weeks from the current due date; ``days_of_week`` is kept on the
    rule and written back unchanged but does not pick individual weekdays.
    """
    if rule is None or rule.frequency == "none":
        return None
    if from_date.tzinfo is not None:
        from_date = from_date.astimezone(resolve_zone(tz))

    interval = rule.interval
    if rule.frequency == "daily":
        next_date = from_date + timedelta(days=interval)
    elif rule.frequency == "weekly":
        next_date = from_date + timedelta(weeks=interval)
    elif rule.frequency == "monthly":
        next_date = _add_months(from_date, interval)
    else:
        next_date = _add_months(from_date, 12 * interval)

    if rule.end_date:
        end = parse_iso(rule.end_date)
        if end is not None:
            candidate = next_date if next_date.tzinfo else next_date.replace(tzinfo=end.tzinfo)
            if candidate > end:
                return None
    return next_date


def format_recurrence_rule(rule: Optional[RecurrenceRule]) -> str:
    if rule is None or rule.frequency == "none":
        return ""
    label = RECURRENCE_OPTIONS.get(rule.frequency, rule.frequency)
    if rule.interval == 1:
        return label
    return f"Every {rule.interval} {_PLURAL_UNITS[rule.frequency]}"


__all__ = [
    "FREQUENCIES",
    "RECURRENCE_OPTIONS",
    "RecurrenceRule",
    "calculate_next_due_date",
    "format_recurrence_rule",
    "parse_recurrence_rule",
]
