"""Create/edit modal state machine shared by every resource page."""

from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from epixodo.domain.entities import Record
from epixodo.domain.forms import (
    FieldValueError,
    blank_values,
    build_payload,
    changed_field_names,
    merge_recurrence,
    values_from_record,
)
from epixodo.domain.kinds import FIELD_RECURRENCE, ResourceKind, is_completed
from epixodo.domain.ports import UseCaseError
from epixodo.domain.time_utils import ZoneLike
from epixodo.usecases.complete_task import CompleteTaskResult

LOGGER = logging.getLogger(__name__)


class FormState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"
    ERROR = "error"


CreateRecordFn = Callable[[ResourceKind, Dict[str, Any]], Record]
UpdateRecordFn = Callable[[ResourceKind, str, Dict[str, Any]], Record]
CompleteTaskFn = Callable[[Record, bool], CompleteTaskResult]


class RecordFormVM:
    """Holds the modal's fields and drives Closed -> Open -> Submitting.

    A page owns exactly one instance, so there is never more than one modal.
    Calling :meth:`open` while the modal is already open replaces its
    contents instead of stacking a second dialog.

    When ``complete_task`` is given, an edit that moves a task into or out of
    ``completed`` goes through it, so the completion date is stamped and a
    recurring task gets its next occurrence. The outcome is kept in
    ``last_completion`` for the page to report.
    """

    def __init__(
        self,
        kind: ResourceKind,
        create_record: CreateRecordFn,
        update_record: UpdateRecordFn,
        on_saved: Optional[Callable[[Record], None]] = None,
        *,
        tz: ZoneLike = None,
        complete_task: Optional[CompleteTaskFn] = None,
    ) -> None:
        self.kind = kind
        self.create_record = create_record
        self.update_record = update_record
        self.on_saved = on_saved
        self.tz = tz
        self.complete_task = complete_task

        self.state: FormState = FormState.CLOSED
        self.values: Dict[str, Any] = {}
        self.editing: Optional[Record] = None
        self.error: Optional[str] = None
        self.field_errors: Dict[str, str] = {}
        self.last_completion: Optional[CompleteTaskResult] = None
        self._initial: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self.state is not FormState.CLOSED

    @property
    def is_edit(self) -> bool:
        return self.editing is not None

    @property
    def title(self) -> str:
        verb = "Edit" if self.is_edit else "New"
        return f"{verb} {self.kind.singular.lower()}"

    def open(self, existing: Optional[Record] = None) -> None:
        if existing is None:
            values = blank_values(self.kind)
        else:
            values = values_from_record(self.kind, existing, self.tz)
        self.editing = existing
        self.values = copy.deepcopy(values)
        self._initial = copy.deepcopy(values)
        self.error = None
        self.field_errors = {}
        self.last_completion = None
        self.state = FormState.OPEN

    def set_field(self, name: str, value: Any) -> None:
        """Update one input; recurrence accepts a frequency or a partial mapping."""
        if self.state not in (FormState.OPEN, FormState.ERROR):
            raise RuntimeError(f"Cannot edit a {self.state.value} form.")
        entry = self.kind.form_field(name)
        if entry is None:
            raise ValueError(f"Unknown field '{name}' for {self.kind.key}.")
        if entry.kind == FIELD_RECURRENCE:
            value = merge_recurrence(self.values.get(name), value)
        self.values[name] = value
        self.field_errors.pop(name, None)
        # a task belongs to either a matter or an activity, not both
        if name in self.kind.exclusive_fields and value:
            for other in self.kind.exclusive_fields:
                if other != name:
                    self.values[other] = ""

    def submit(self) -> Optional[Record]:
        """Send the form; returns the saved record or ``None`` on failure."""
        if self.state not in (FormState.OPEN, FormState.ERROR):
            raise RuntimeError(f"Cannot submit a {self.state.value} form.")

        if not str(self.values.get("title") or "").strip():
            self._fail("Title is required.", {"title": "Required"})
            return None
        try:
            payload = self._build()
        except FieldValueError as exc:
            self._fail(str(exc), {exc.field: str(exc)})
            return None

        self.state = FormState.SUBMITTING
        self.error = None
        self.field_errors = {}
        self.last_completion = None
        try:
            record = self._send(payload)
        except UseCaseError as exc:
            LOGGER.warning("Saving %s failed: %s (%s)", self.kind.singular, exc.message, exc.code)
            fields = exc.meta.get("fields") if isinstance(exc.meta, dict) else None
            self._fail(exc.message, dict(fields) if isinstance(fields, dict) else {})
            return None
        except Exception:
            self._fail("Could not save. Try again.", {})
            raise

        self._reset()
        if self.on_saved is not None:
            self.on_saved(record)
        return record

    def close(self) -> bool:
        """Discard the form. Ignored while a submit is in flight."""
        if self.state is FormState.SUBMITTING:
            return False
        self._reset()
        return True

    # ------------------------------------------------------------------
    def _build(self) -> Optional[Dict[str, Any]]:
        """Payload to send, or ``None`` for an edit that changed nothing."""
        if self.editing is None:
            return build_payload(self.kind, self.values, self.tz)
        changed = changed_field_names(self._initial, self.values)
        if not changed:
            return None
        return build_payload(self.kind, self.values, self.tz, only=changed)

    def _send(self, payload: Optional[Dict[str, Any]]) -> Record:
        if self.editing is None:
            return self.create_record(self.kind, payload or {})
        if payload is None:
            return self.editing
        completing = self._completion_change(payload)
        if completing is None:
            return self.update_record(self.kind, self.editing.id, payload)
        return self._send_with_completion(payload, completing)

    def _completion_change(self, payload: Dict[str, Any]) -> Optional[bool]:
        if self.complete_task is None or "status" not in payload:
            return None
        now_completed = payload["status"] == "completed"
        if now_completed == is_completed(self.editing.fields):
            return None
        return now_completed

    def _send_with_completion(self, payload: Dict[str, Any], completing: bool) -> Record:
        status = payload.pop("status")
        payload.pop("completed", None)
        record = self.editing
        if completing:
            # save the other edits first so the next occurrence copies them
            if payload:
                record = self.update_record(self.kind, record.id, payload)
            result = self.complete_task(record, True)
        else:
            result = self.complete_task(record, False)
            if status != "pending":
                payload["status"] = status
            if payload:
                result.task = self.update_record(self.kind, record.id, payload)
        self.last_completion = result
        return result.task

    def _fail(self, message: str, field_errors: Dict[str, str]) -> None:
        self.state = FormState.ERROR
        self.error = message
        self.field_errors = field_errors

    def _reset(self) -> None:
        self.state = FormState.CLOSED
        self.values = {}
        self._initial = {}
        self.editing = None
        self.error = None
        self.field_errors = {}


__all__ = ["FormState", "RecordFormVM"]
