from __future__ import annotations

from datetime import datetime, timezone

from epixodo.domain.entities import RecordPage
from epixodo.domain.kinds import KINDS
from epixodo.tests.fakes import make_record
from epixodo.usecases.complete_task import CompleteTaskResult
from epixodo.viewmodels.navigation_vm import FEATURES, HUB_PATH, feature_cards
from epixodo.viewmodels.record_list_vm import RecordListVM
from epixodo.viewmodels.task_board_vm import TaskBoardVM

NOW = datetime(2025, 1, 8, 15, 0, tzinfo=timezone.utc)


def _board(tasks, complete=None) -> TaskBoardVM:
    page = RecordPage(items=list(tasks), page=1, per_page=200, total_items=len(tasks), total_pages=1)
    tasks_vm = RecordListVM(KINDS.get("tasks"), lambda kind, *, owner_id: page, "user_1")
    tasks_vm.refresh()
    return TaskBoardVM(tasks_vm, complete or (lambda task, done: None), tz="UTC", clock=lambda: NOW)


def test_focus_lists_overdue_then_today() -> None:
    board = _board(
        [
            make_record("today", title="Today", due_date="2025-01-08T00:00:00.000Z"),
            make_record("late", title="Late", due_date="2025-01-02T00:00:00.000Z"),
            make_record("later", title="Later", due_date="2025-02-01T00:00:00.000Z"),
            make_record("done", title="Done", status="completed", due_date="2025-01-01T00:00:00.000Z"),
        ]
    )

    assert [task.id for task in board.focus()] == ["late", "today"]
    sections = board.sections()
    assert [task.id for task in sections.sections["completed"]] == ["done"]
    assert sections.ranges["today"] == "08/01"


def test_toggle_merges_task_and_follow_up() -> None:
    task = make_record("t1", title="Weekly", recurrence='{"frequency": "weekly"}')
    saved = make_record("t1", title="Weekly", status="completed", completed=True)
    follow_up = make_record("t2", title="Weekly", status="pending")
    calls = []

    def complete(target, done):
        calls.append((target.id, done))
        return CompleteTaskResult(task=saved, follow_up=follow_up)

    board = _board([task], complete)
    result = board.toggle(task, True)

    assert calls == [("t1", True)]
    assert result.follow_up is follow_up
    assert [record.id for record in board.tasks.records] == ["t1", "t2"]
    assert board.tasks.find("t1").get("status") == "completed"


def test_row_helpers() -> None:
    task = make_record(
        "t1",
        title="Call",
        status="waiting_response",
        due_date="2025-01-07T00:00:00.000Z",
        recurrence='{"frequency": "weekly", "interval": 2}',
        expand={"matter": {"id": "m1", "title": "Lawsuit"}},
    )
    board = _board([task])

    assert board.is_overdue(task) is True
    assert board.status_label(task) == "Waiting for response"
    assert board.recurrence_label(task) == "Every 2 weeks"
    assert board.context_label(task) == "Lawsuit"
    assert board.context_label(make_record("t2", title="Bare")) == ""


def test_hub_lists_every_module() -> None:
    assert HUB_PATH == "/principal"
    assert feature_cards() == FEATURES
    assert [card.path for card in FEATURES] == [
        "/dashboard",
        "/tasks",
        "/activities",
        "/matters",
        "/notes",
    ]
