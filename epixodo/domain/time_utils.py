"""Date helpers that render backend UTC timestamps in the configured zone.

The backend stores every timestamp in UTC (``2025-12-30 03:00:00.000Z``).
Forms work with plain ``YYYY-MM-DD`` / ``YYYY-MM-DDTHH:MM`` strings in the
display zone; these helpers convert between the two.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "UTC"

ZoneLike = Union[str, tzinfo, None]


def resolve_zone(tz: ZoneLike = None) -> tzinfo:
    """Return a ``tzinfo`` for a zone name, falling back to UTC."""
    if isinstance(tz, tzinfo):
        return tz
    name = str(tz or "").strip() or DEFAULT_TIMEZONE
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{name}'.") from exc


def parse_iso(value: Any) -> Optional[datetime]:
    """Parse backend timestamps into aware UTC datetimes; blanks map to ``None``."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return None
        normalized = text.replace(" ", "T", 1)
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_utc_iso(moment: datetime) -> str:
    """Render ``moment`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def utcnow_iso() -> str:
    return to_utc_iso(datetime.now(timezone.utc))


def format_date(iso_string: Any, tz: ZoneLike = None) -> str:
    """``DD/MM/YYYY`` in the display zone, or ``""``."""
    parsed = parse_iso(iso_string)
    if parsed is None:
        return ""
    return parsed.astimezone(resolve_zone(tz)).strftime("%d/%m/%Y")


def format_datetime(iso_string: Any, tz: ZoneLike = None) -> str:
    """``DD/MM/YYYY HH:MM`` in the display zone, or ``""``."""
    parsed = parse_iso(iso_string)
    if parsed is None:
        return ""
    return parsed.astimezone(resolve_zone(tz)).strftime("%d/%m/%Y %H:%M")


def to_input_date(iso_string: Any, tz: ZoneLike = None) -> str:
    parsed = parse_iso(iso_string)
    if parsed is None:
        return ""
    return parsed.astimezone(resolve_zone(tz)).strftime("%Y-%m-%d")


def to_input_datetime(iso_string: Any, tz: ZoneLike = None) -> str:
    parsed = parse_iso(iso_string)
    if parsed is None:
        return ""
    return parsed.astimezone(resolve_zone(tz)).strftime("%Y-%m-%dT%H:%M")


def from_input_date_to_utc(date_string: str, tz: ZoneLike = None) -> str:
    """Midnight of ``YYYY-MM-DD`` in the display zone, as a UTC ISO string."""
    text = str(date_string or "").strip()
    if not text:
        return ""
    day = date.fromisoformat(text)
    local = datetime(day.year, day.month, day.day, tzinfo=resolve_zone(tz))
    return to_utc_iso(local)


def from_input_datetime_to_utc(datetime_string: str, tz: ZoneLike = None) -> str:
    """``YYYY-MM-DDTHH:MM`` in the display zone, as a UTC ISO string."""
    text = str(datetime_string or "").strip()
    if not text:
        return ""
    naive = datetime.fromisoformat(text)
    local = naive.replace(tzinfo=resolve_zone(tz), second=0, microsecond=0)
    return to_utc_iso(local)


def today_in_zone(tz: ZoneLike = None, now: Optional[datetime] = None) -> date:
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(resolve_zone(tz)).date()


def local_date(iso_string: Any, tz: ZoneLike = None) -> Optional[date]:
    parsed = parse_iso(iso_string)
    if parsed is None:
        return None
    return parsed.astimezone(resolve_zone(tz)).date()


def is_overdue(
    iso_string: Any,
    completed: bool,
    tz: ZoneLike = None,
    now: Optional[datetime] = None,
) -> bool:
    """True when the due day lies strictly before today in the display zone."""
    if completed:
        return False
    due = local_date(iso_string, tz)
    if due is None:
        return False
    return today_in_zone(tz, now) > due


def end_of_week(day: date) -> date:
    """Sunday closing the week that contains ``day``."""
    return day + timedelta(days=6 - day.weekday())


__all__ = [
    "DEFAULT_TIMEZONE",
    "end_of_week",
    "format_date",
    "format_datetime",
    "from_input_date_to_utc",
    "from_input_datetime_to_utc",
    "is_overdue",
    "local_date",
    "parse_iso",
    "resolve_zone",
    "to_input_date",
    "to_input_datetime",
    "to_utc_iso",
    "today_in_zone",
    "utcnow_iso",
]
