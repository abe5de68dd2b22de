"""Conversion between modal form values and backend record payloads."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from .entities import Record
from .kinds import (
    FIELD_DATE,
    FIELD_DATETIME,
    FIELD_RECURRENCE,
    FIELD_RELATION,
    FIELD_STATUS,
    ResourceKind,
)
from .recurrence import RecurrenceRule, parse_recurrence_rule
from .time_utils import (
    ZoneLike,
    from_input_date_to_utc,
    from_input_datetime_to_utc,
    to_input_date,
    to_input_datetime,
)

RECURRENCE_KEYS = ("frequency", "interval", "end_date", "days_of_week")


class FieldValueError(ValueError):
    """A form value that cannot be turned into a payload entry."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message)
        self.field = field_name


def recurrence_draft(raw: Any = None, tz: ZoneLike = None) -> Dict[str, Any]:
    """Form state for a stored recurrence rule (or a blank one).

    ``days_of_week`` has no input of its own; it rides along so saving an
    edited rule writes it back unchanged.
    """
    rule = parse_recurrence_rule(raw)
    if rule is None:
        return {"frequency": "none", "interval": "1", "end_date": "", "days_of_week": None}
    return {
        "frequency": rule.frequency,
        "interval": str(rule.interval),
        "end_date": to_input_date(rule.end_date, tz),
        "days_of_week": rule.days_of_week,
    }


def merge_recurrence(current: Any, update: Any) -> Dict[str, Any]:
    """Apply a partial recurrence edit; a bare string sets the frequency only."""
    merged = dict(current) if isinstance(current, Mapping) else recurrence_draft()
    if isinstance(current, str):
        merged["frequency"] = current
    changes = {"frequency": update} if isinstance(update, str) else dict(update or {})
    unknown = set(changes) - set(RECURRENCE_KEYS)
    if unknown:
        raise KeyError(f"Unknown recurrence keys: {sorted(unknown)}")
    merged.update(changes)
    return merged


def blank_values(kind: ResourceKind) -> Dict[str, Any]:
    """Empty form state for a new record of ``kind``."""
    values: Dict[str, Any] = {}
    for entry in kind.form_fields:
        if entry.kind == FIELD_RECURRENCE:
            values[entry.name] = recurrence_draft()
        else:
            values[entry.name] = ""
    values.update(dict(kind.defaults))
    return values


def values_from_record(kind: ResourceKind, record: Record, tz: ZoneLike = None) -> Dict[str, Any]:
    """Prefilled form state for editing ``record``."""
    values = blank_values(kind)
    for entry in kind.form_fields:
        raw = record.get(entry.name)
        if entry.kind == FIELD_DATE:
            values[entry.name] = to_input_date(raw, tz)
        elif entry.kind == FIELD_DATETIME:
            values[entry.name] = to_input_datetime(raw, tz)
        elif entry.kind == FIELD_RECURRENCE:
            values[entry.name] = recurrence_draft(raw, tz)
        elif entry.kind == FIELD_STATUS:
            values[entry.name] = str(raw or kind.defaults.get(entry.name, ""))
        else:
            values[entry.name] = "" if raw is None else str(raw)
    return values


def build_payload(
    kind: ResourceKind,
    values: Mapping[str, Any],
    tz: ZoneLike = None,
    *,
    only: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Translate form values into a backend payload.

    Args:
        kind: Resource kind that owns the form.
        values: Current form values keyed by field name.
        tz: Display zone the date inputs were entered in.
        only: Restrict the payload to these field names (partial update).

    Returns:
        Flat payload. Blank dates and relations become ``None``; a status
        change also carries the mirrored ``completed`` flag.

    Raises:
        FieldValueError: A date or recurrence value is malformed. ``field``
            names the offending input.
    """
    selected = set(only) if only is not None else None
    payload: Dict[str, Any] = {}
    for entry in kind.form_fields:
        if selected is not None and entry.name not in selected:
            continue
        raw = values.get(entry.name)
        text = "" if raw is None or isinstance(raw, Mapping) else str(raw)
        if entry.kind == FIELD_DATE:
            payload[entry.name] = _convert(entry.name, from_input_date_to_utc, text, tz)
        elif entry.kind == FIELD_DATETIME:
            payload[entry.name] = _convert(entry.name, from_input_datetime_to_utc, text, tz)
        elif entry.kind == FIELD_RELATION:
            payload[entry.name] = text.strip() or None
        elif entry.kind == FIELD_RECURRENCE:
            payload[entry.name] = _recurrence_payload(entry.name, merge_recurrence(raw, {}), tz)
        elif entry.kind == FIELD_STATUS:
            payload[entry.name] = text
            payload["completed"] = text == "completed"
        elif entry.name == "title":
            payload[entry.name] = text.strip()
        else:
            payload[entry.name] = text
    return payload


def _convert(name: str, converter, text: str, tz: ZoneLike) -> Optional[str]:
    try:
        return converter(text, tz) or None
    except ValueError as exc:
        raise FieldValueError(name, f"Enter a valid date ({text.strip()!r} is not one).") from exc


def _recurrence_payload(name: str, draft: Mapping[str, Any], tz: ZoneLike) -> Optional[str]:
    frequency = str(draft.get("frequency") or "").strip() or "none"
    if frequency == "none":
        return None
    raw_interval = draft.get("interval")
    if isinstance(raw_interval, float) and raw_interval.is_integer():
        raw_interval = int(raw_interval)
    try:
        interval = int(str(raw_interval or "1").strip())
    except ValueError as exc:
        raise FieldValueError(name, "Repeat interval must be a whole number.") from exc
    end_date = _convert(name, from_input_date_to_utc, str(draft.get("end_date") or ""), tz)
    days = draft.get("days_of_week")
    try:
        rule = RecurrenceRule(
            frequency,
            interval=interval,
            days_of_week=tuple(days) if days else None,
            end_date=end_date,
        )
    except ValueError as exc:
        raise FieldValueError(name, str(exc)) from exc
    return rule.to_json()


def changed_field_names(before: Mapping[str, Any], after: Mapping[str, Any]) -> list[str]:
    """Names whose value differs between two form snapshots, in ``after`` order."""
    return [name for name, value in after.items() if before.get(name) != value]


__all__ = [
    "FieldValueError",
    "RECURRENCE_KEYS",
    "blank_values",
    "build_payload",
    "changed_field_names",
    "merge_recurrence",
    "recurrence_draft",
    "values_from_record",
]
