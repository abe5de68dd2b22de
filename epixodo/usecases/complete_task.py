"""Use case for toggling a task's completion, spawning the next occurrence."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from epixodo.domain.entities import Record
from epixodo.domain.kinds import KINDS, ResourceKind, is_completed
from epixodo.domain.ports import RecordPort
from epixodo.domain.recurrence import calculate_next_due_date, parse_recurrence_rule
from epixodo.domain.time_utils import ZoneLike, parse_iso, to_utc_iso
from epixodo.usecases.error_mapping import map_api_error

LOGGER = logging.getLogger(__name__)

_CARRIED_FIELDS = ("title", "description", "matter", "activity", "recurrence")


@dataclass
class CompleteTaskResult:
    task: Record
    follow_up: Optional[Record] = None
    follow_up_error: Optional[str] = None
    """Set when the task was saved but its next occurrence could not be."""


@dataclass
class CompleteTask:
    """Mark a task completed (or reopen it).

    Completing a task that carries a recurrence rule also creates the next
    occurrence, stepped on the calendar of ``tz``. That second call is best
    effort: its failure is logged and reported in the result, while the
    completed task stays saved.
    """

    record_port: RecordPort
    kind: ResourceKind = field(default_factory=lambda: KINDS.get("tasks"))
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(timezone.utc))
    tz: ZoneLike = None

    def __call__(
        self,
        task: Record,
        completed: bool,
        *,
        token: Optional[str],
        owner_id: Optional[str] = None,
    ) -> CompleteTaskResult:
        now = self.clock()
        was_completed = is_completed(task.fields)
        if completed:
            changes: Dict[str, Any] = {
                "status": "completed",
                "completed": True,
                "completed_date": to_utc_iso(now),
            }
        else:
            changes = {"status": "pending", "completed": False, "completed_date": None}

        try:
            updated = self.record_port.update_record(
                self.kind.collection, task.id, changes, token=token, expand=self.kind.expand
            )
        except Exception as exc:
            raise map_api_error(
                exc, default_code="UPDATE_FAILED", default_message="Could not update task."
            ) from exc

        result = CompleteTaskResult(task=updated)
        if completed and not was_completed:
            self._spawn_follow_up(task, result, now=now, token=token, owner_id=owner_id)
        return result

    def _spawn_follow_up(
        self,
        task: Record,
        result: CompleteTaskResult,
        *,
        now: datetime,
        token: Optional[str],
        owner_id: Optional[str],
    ) -> None:
        rule = parse_recurrence_rule(task.get("recurrence"))
        if rule is None:
            return
        base = parse_iso(task.get("due_date")) or now
        next_due = calculate_next_due_date(base, rule, self.tz)
        if next_due is None:
            LOGGER.info("Recurrence of task %s has ended; no follow-up created.", task.id)
            return

        payload: Dict[str, Any] = {
            name: task.get(name) for name in _CARRIED_FIELDS if task.get(name) not in (None, "")
        }
        payload.update(
            {
                "status": "pending",
                "completed": False,
                "due_date": to_utc_iso(next_due),
            }
        )
        user = task.get("user") or owner_id
        if user:
            payload["user"] = user
        try:
            result.follow_up = self.record_port.create_record(
                self.kind.collection, payload, token=token, expand=self.kind.expand
            )
        except Exception as exc:
            mapped = map_api_error(
                exc,
                default_code="CREATE_FAILED",
                default_message="Could not create the next occurrence.",
            )
            LOGGER.warning(
                "Task %s completed but its next occurrence failed: %s", task.id, mapped.message
            )
            result.follow_up_error = mapped.message


__all__ = ["CompleteTask", "CompleteTaskResult"]
