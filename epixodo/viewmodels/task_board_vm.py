"""Sectioned task board and dashboard projection over a task list."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

from epixodo.domain.entities import Record
from epixodo.domain.kinds import is_completed, task_status_info
from epixodo.domain.recurrence import format_recurrence_rule, parse_recurrence_rule
from epixodo.domain.task_sections import FOCUS_SECTIONS, TaskSections, categorize_tasks
from epixodo.domain.time_utils import ZoneLike, format_date, is_overdue, today_in_zone
from epixodo.usecases.complete_task import CompleteTaskResult

from .record_list_vm import RecordListVM


class TaskBoardVM:
    def __init__(
        self,
        tasks: RecordListVM,
        complete_task: Callable[[Record, bool], CompleteTaskResult],
        *,
        tz: ZoneLike = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.tasks = tasks
        self.complete_task = complete_task
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def sections(self) -> TaskSections:
        today = today_in_zone(self.tz, self._clock())
        return categorize_tasks(self.tasks.records, today, self.tz)

    def focus(self) -> List[Record]:
        """Overdue and due-today tasks, in that order."""
        grouped = self.sections().sections
        return [task for key in FOCUS_SECTIONS for task in grouped[key]]

    def toggle(self, task: Record, completed: bool) -> CompleteTaskResult:
        """Complete or reopen ``task``; merges the saved task and any follow-up."""
        result = self.complete_task(task, completed)
        self.tasks.upsert(result.task)
        if result.follow_up is not None:
            self.tasks.upsert(result.follow_up)
        return result

    # ---- row helpers for the page ----
    def due_label(self, task: Record) -> str:
        return format_date(task.get("due_date"), self.tz)

    def is_overdue(self, task: Record) -> bool:
        return is_overdue(task.get("due_date"), is_completed(task.fields), self.tz, self._clock())

    @staticmethod
    def status_label(task: Record) -> str:
        return task_status_info(task.get("status")).label

    @staticmethod
    def status_color(task: Record) -> str:
        return task_status_info(task.get("status")).color

    @staticmethod
    def recurrence_label(task: Record) -> str:
        return format_recurrence_rule(parse_recurrence_rule(task.get("recurrence")))

    @staticmethod
    def context_label(task: Record) -> str:
        """Title of the linked matter or activity, if expanded."""
        for relation in ("matter", "activity"):
            linked = task.expanded(relation)
            if linked and linked.get("title"):
                return str(linked["title"])
        return ""


__all__ = ["TaskBoardVM"]
