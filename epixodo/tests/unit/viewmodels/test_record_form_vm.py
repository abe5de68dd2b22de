from __future__ import annotations

import pytest

from epixodo.domain.kinds import KINDS
from epixodo.domain.ports import UseCaseError
from epixodo.tests.fakes import make_record
from epixodo.usecases.complete_task import CompleteTaskResult
from epixodo.viewmodels.record_form_vm import FormState, RecordFormVM

TASKS = KINDS.get("tasks")
NOTES = KINDS.get("notes")


class _Recorder:
    def __init__(self, fail: Exception | None = None) -> None:
        self.created = []
        self.updated = []
        self.saved = []
        self.fail = fail

    def create(self, kind, payload):
        self.created.append(payload)
        if self.fail is not None:
            raise self.fail
        return make_record("new1", kind.collection, **payload)

    def update(self, kind, record_id, payload):
        self.updated.append((record_id, payload))
        if self.fail is not None:
            raise self.fail
        return make_record(record_id, kind.collection, **payload)

    def vm(self, kind=TASKS) -> RecordFormVM:
        return RecordFormVM(kind, self.create, self.update, self.saved.append, tz="UTC")


def test_create_sends_full_payload_and_closes() -> None:
    rec = _Recorder()
    vm = rec.vm()
    vm.open()
    assert vm.state is FormState.OPEN
    assert vm.title == "New task"
    assert vm.values["status"] == "pending"
    assert vm.values["recurrence"]["frequency"] == "none"

    vm.set_field("title", "  E2E Test Task ")
    vm.set_field("description", "This is a test task description")
    vm.set_field("due_date", "2025-01-10")
    saved = vm.submit()

    assert saved is not None
    assert rec.created == [
        {
            "title": "E2E Test Task",
            "status": "pending",
            "completed": False,
            "due_date": "2025-01-10T00:00:00.000Z",
            "planned_date": None,
            "recurrence": None,
            "matter": None,
            "activity": None,
            "description": "This is a test task description",
        }
    ]
    assert rec.saved == [saved]
    assert vm.state is FormState.CLOSED
    assert vm.values == {}


def test_blank_title_stays_open_without_call() -> None:
    rec = _Recorder()
    vm = rec.vm()
    vm.open()
    vm.set_field("title", "   ")

    assert vm.submit() is None
    assert vm.state is FormState.ERROR
    assert vm.error == "Title is required."
    assert vm.field_errors == {"title": "Required"}
    assert rec.created == []

    vm.set_field("title", "Fixed")
    assert vm.field_errors == {}
    assert vm.submit() is not None


def test_failed_submit_keeps_values_for_retry() -> None:
    rec = _Recorder(
        fail=UseCaseError(
            "INVALID_FIELDS",
            "Invalid fields: due_date: Invalid date.",
            meta={"fields": {"due_date": "Invalid date."}},
        )
    )
    vm = rec.vm()
    vm.open()
    vm.set_field("title", "Keep me")

    assert vm.submit() is None
    assert vm.state is FormState.ERROR
    assert vm.error == "Invalid fields: due_date: Invalid date."
    assert vm.field_errors == {"due_date": "Invalid date."}
    assert vm.values["title"] == "Keep me"
    assert rec.saved == []

    rec.fail = None
    assert vm.submit() is not None
    assert len(rec.created) == 2


def test_edit_sends_only_changed_fields() -> None:
    rec = _Recorder()
    existing = make_record(
        "t1",
        "tasks",
        title="Old",
        status="pending",
        due_date="2025-01-10T00:00:00.000Z",
        description="<p>same</p>",
    )
    vm = rec.vm()
    vm.open(existing)
    assert vm.is_edit is True
    assert vm.title == "Edit task"
    assert vm.values["due_date"] == "2025-01-10"

    vm.set_field("title", "New")
    vm.set_field("status", "completed")
    vm.submit()

    assert rec.updated == [("t1", {"title": "New", "status": "completed", "completed": True})]


def test_edit_without_changes_skips_backend() -> None:
    rec = _Recorder()
    existing = make_record("n1", "notes", title="Note", content="<p>x</p>")
    vm = rec.vm(NOTES)
    vm.open(existing)

    assert vm.submit() is existing
    assert rec.updated == []
    assert rec.saved == [existing]


def test_open_replaces_current_form() -> None:
    vm = _Recorder().vm(NOTES)
    vm.open()
    vm.set_field("title", "Draft")
    vm.open(make_record("n1", "notes", title="Other", content=""))

    assert vm.values["title"] == "Other"
    assert vm.editing is not None


def test_close_resets_state() -> None:
    vm = _Recorder().vm(NOTES)
    vm.open()
    vm.set_field("title", "Draft")
    assert vm.close() is True
    assert vm.is_open is False
    assert vm.values == {}


def test_set_field_guards() -> None:
    vm = _Recorder().vm()
    with pytest.raises(RuntimeError):
        vm.set_field("title", "x")
    with pytest.raises(RuntimeError):
        vm.submit()

    vm.open()
    with pytest.raises(ValueError):
        vm.set_field("priority", "high")


def test_matter_and_activity_are_exclusive() -> None:
    vm = _Recorder().vm()
    vm.open()
    vm.set_field("matter", "m1")
    vm.set_field("activity", "a1")
    assert vm.values["matter"] == ""
    assert vm.values["activity"] == "a1"

    vm.set_field("activity", "")
    assert vm.values["matter"] == ""


def test_malformed_date_is_reported_before_sending() -> None:
    rec = _Recorder()
    vm = rec.vm()
    vm.open()
    vm.set_field("title", "Pay rent")
    vm.set_field("due_date", "10/01/2025")

    assert vm.submit() is None
    assert vm.state is FormState.ERROR
    assert "due_date" in vm.field_errors
    assert rec.created == []
    assert vm.close() is True


def test_unexpected_failure_leaves_the_form_closable() -> None:
    rec = _Recorder(fail=RuntimeError("socket closed"))
    vm = rec.vm()
    vm.open()
    vm.set_field("title", "Pay rent")

    with pytest.raises(RuntimeError):
        vm.submit()
    assert vm.state is FormState.ERROR
    assert vm.close() is True


def test_recurrence_frequency_change_keeps_interval_and_end() -> None:
    rec = _Recorder()
    existing = make_record(
        "t1", "tasks", title="Water plants", recurrence='{"frequency": "weekly", "interval": 2}'
    )
    vm = rec.vm()
    vm.open(existing)

    vm.set_field("recurrence", {"end_date": "2025-08-31"})
    vm.set_field("recurrence", "daily")
    vm.submit()

    assert rec.updated == [
        (
            "t1",
            {
                "recurrence": '{"frequency": "daily", "interval": 2, '
                '"endDate": "2025-08-31T00:00:00.000Z"}'
            },
        )
    ]


class _Completer:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, task, completed):
        self.calls.append((task.id, task.get("title"), completed))
        status = "completed" if completed else "pending"
        follow_up = make_record("t2", "tasks", title=task.get("title")) if completed else None
        return CompleteTaskResult(
            task=make_record(task.id, "tasks", title=task.get("title"), status=status),
            follow_up=follow_up,
        )


def test_completing_through_the_modal_uses_the_completion_flow() -> None:
    rec = _Recorder()
    complete = _Completer()
    vm = RecordFormVM(
        TASKS, rec.create, rec.update, rec.saved.append, tz="UTC", complete_task=complete
    )
    vm.open(make_record("t1", "tasks", title="Old", status="pending"))

    vm.set_field("title", "New")
    vm.set_field("status", "completed")
    saved = vm.submit()

    assert rec.updated == [("t1", {"title": "New"})]
    assert complete.calls == [("t1", "New", True)]
    assert saved.get("status") == "completed"
    assert vm.last_completion.follow_up.id == "t2"
    assert rec.saved == [saved]


def test_reopening_to_a_custom_status_applies_it_after_the_completion_flow() -> None:
    rec = _Recorder()
    complete = _Completer()
    vm = RecordFormVM(TASKS, rec.create, rec.update, tz="UTC", complete_task=complete)
    vm.open(make_record("t1", "tasks", title="Done", status="completed", completed=True))

    vm.set_field("status", "blocked")
    saved = vm.submit()

    assert complete.calls == [("t1", "Done", False)]
    assert rec.updated == [("t1", {"status": "blocked"})]
    assert saved.get("status") == "blocked"
    assert vm.last_completion.follow_up is None
