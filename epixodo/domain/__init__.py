"""Domain package exports for value objects and pure helpers."""

from .entities import Record, RecordPage, Session, UserIdentity
from .kinds import KINDS, FormField, KindRegistry, ResourceKind
from .reconcile import find_record, remove_record, upsert_record
from .recurrence import RecurrenceRule, calculate_next_due_date, parse_recurrence_rule

__all__ = [
    "KINDS",
    "FormField",
    "KindRegistry",
    "Record",
    "RecordPage",
    "RecurrenceRule",
    "ResourceKind",
    "Session",
    "UserIdentity",
    "calculate_next_due_date",
    "find_record",
    "parse_recurrence_rule",
    "remove_record",
    "upsert_record",
]
