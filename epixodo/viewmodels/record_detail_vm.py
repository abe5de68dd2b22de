"""Read-only detail view of one matter or activity and the records linked to it.

Call context:
    ``epixodo/web_ui/main.py`` builds one ``RecordDetailVM`` when the detail
    dialog opens, runs :meth:`RecordDetailVM.refresh` through ``run.io_bound``
    and renders ``record``, ``linked`` and ``progress``. Task checkboxes in the
    dialog call :meth:`RecordDetailVM.toggle`.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from epixodo.domain.entities import Record, RecordPage
from epixodo.domain.kinds import (
    KINDS,
    KindRegistry,
    ResourceKind,
    any_of,
    is_completed,
    relation_filter,
)
from epixodo.domain.ports import UseCaseError
from epixodo.domain.reconcile import find_record, upsert_record
from epixodo.usecases.complete_task import CompleteTaskResult

LOGGER = logging.getLogger(__name__)

GetRecordFn = Callable[[ResourceKind, str], Record]
LoadRecordsFn = Callable[..., RecordPage]
CompleteTaskFn = Callable[[Record, bool], CompleteTaskResult]


class RecordDetailVM:
    """Loads a record plus every record of another kind that points at it.

    For a matter that means its tasks and activities; for an activity, its
    tasks. Progress counts the tasks linked directly and, for a matter, the
    tasks of its activities as well. A linked list that fails to load is left
    empty and reported in ``link_errors``; only a failure to load the record
    itself sets ``error``.
    """

    def __init__(
        self,
        kind: ResourceKind,
        record_id: str,
        get_record: GetRecordFn,
        load_records: LoadRecordsFn,
        owner_id: Optional[str],
        *,
        complete_task: Optional[CompleteTaskFn] = None,
        kinds: KindRegistry = KINDS,
    ) -> None:
        self.kind = kind
        self.record_id = record_id
        self.get_record = get_record
        self.load_records = load_records
        self.owner_id = owner_id
        self.complete_task = complete_task
        self.kinds = kinds
        self.links: Tuple[Tuple[ResourceKind, str], ...] = kinds.linked_kinds(kind)

        self.record: Optional[Record] = None
        self.linked: Dict[str, List[Record]] = {}
        self.progress_tasks: List[Record] = []
        self.is_loading: bool = False
        self.error: Optional[str] = None
        self.link_errors: Dict[str, str] = {}

    @property
    def progress(self) -> Tuple[int, int]:
        """``(completed, total)`` over the tasks counted for this record."""
        done = sum(1 for task in self.progress_tasks if is_completed(task.fields))
        return done, len(self.progress_tasks)

    @property
    def progress_ratio(self) -> float:
        done, total = self.progress
        return done / total if total else 0.0

    def refresh(self) -> bool:
        self.is_loading = True
        self.error = None
        self.link_errors = {}
        try:
            try:
                record = self.get_record(self.kind, self.record_id)
            except UseCaseError as exc:
                LOGGER.warning("Loading %s %s failed: %s", self.kind.singular, self.record_id, exc)
                self.error = exc.message
                return False
            linked: Dict[str, List[Record]] = {}
            for other, field_name in self.links:
                linked[other.key] = self._load(other, relation_filter(field_name, [record.id]))
            self.record = record
            self.linked = linked
            self.progress_tasks = self._load_progress_tasks(record)
            return True
        finally:
            self.is_loading = False

    def toggle(self, task: Record, completed: bool) -> CompleteTaskResult:
        """Complete or reopen a linked task and merge the result into every list."""
        if self.complete_task is None:
            raise RuntimeError("Task completion is not available here.")
        result = self.complete_task(task, completed)
        for key, records in list(self.linked.items()):
            self.linked[key] = self._merge(records, task.id, result)
        self.progress_tasks = self._merge(self.progress_tasks, task.id, result)
        return result

    # ------------------------------------------------------------------
    def _load(self, kind: ResourceKind, extra_filter: Optional[str]) -> List[Record]:
        try:
            page = self.load_records(kind, owner_id=self.owner_id, extra_filter=extra_filter)
        except UseCaseError as exc:
            LOGGER.warning("Loading %s for %s failed: %s", kind.label, self.record_id, exc)
            self.link_errors[kind.key] = exc.message
            return []
        return list(page.items)

    def _load_progress_tasks(self, record: Record) -> List[Record]:
        tasks = self.kinds.get("tasks")
        direct = [
            relation_filter(name, [record.id]) for other, name in self.links if other.key == tasks.key
        ]
        indirect = []
        for other, _ in self.links:
            if other.key == tasks.key:
                continue
            ids = [linked.id for linked in self.linked.get(other.key, [])]
            for linking, name in self.kinds.linked_kinds(other):
                if linking.key == tasks.key:
                    indirect.append(relation_filter(name, ids))
        if not any(indirect):
            return list(self.linked.get(tasks.key, []))
        return self._load(tasks, any_of(*direct, *indirect))

    @staticmethod
    def _merge(records: List[Record], task_id: str, result: CompleteTaskResult) -> List[Record]:
        if find_record(records, task_id) is None:
            return records
        merged = upsert_record(records, result.task)
        if result.follow_up is not None:
            merged = upsert_record(merged, result.follow_up)
        return merged


__all__ = ["RecordDetailVM"]
