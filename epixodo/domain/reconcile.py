"""Merge rules for keeping a list view in step with single-record results.

A list view mirrors the last successful fetch. Records coming back from a
create or update round-trip are reconciled by id: replaced in place when the
id is already listed, appended otherwise. Order of untouched entries is never
changed.
"""

from __future__ import annotations

from typing import Iterable, List

from .entities import Record


def upsert_record(records: Iterable[Record], record: Record) -> List[Record]:
    """Return a new list with ``record`` replacing its id match or appended."""
    merged: List[Record] = []
    replaced = False
    for existing in records:
        if existing.id == record.id:
            if not replaced:
                merged.append(record)
                replaced = True
            continue
        merged.append(existing)
    if not replaced:
        merged.append(record)
    return merged


def remove_record(records: Iterable[Record], record_id: str) -> List[Record]:
    """Return a new list without entries whose id equals ``record_id``."""
    return [existing for existing in records if existing.id != record_id]


def find_record(records: Iterable[Record], record_id: str) -> Record | None:
    for existing in records:
        if existing.id == record_id:
            return existing
    return None


__all__ = ["find_record", "remove_record", "upsert_record"]
