from __future__ import annotations

import json
from pathlib import Path

import pytest

from epixodo.domain.ports import UseCaseError
from epixodo.tests.fakes import USER, FakeBackend, make_session
from epixodo.web_ui.runtime import WebRuntime


@pytest.fixture()
def backend() -> FakeBackend:
    fake = FakeBackend()
    fake.users["ana@example.com"] = ("secret", USER)
    return fake


def _runtime(tmp_path: Path, backend: FakeBackend, environ=None) -> WebRuntime:
    return WebRuntime(
        settings_dir=str(tmp_path),
        environ=environ or {},
        adapter_factory=lambda *args, **kwargs: backend,
    )


def test_runtime_loads_saved_settings_then_env(tmp_path: Path, backend: FakeBackend) -> None:
    (tmp_path / "user_settings.json").write_text(
        json.dumps({"backend_url": "http://saved:8090", "page_size": 40}), encoding="utf-8"
    )
    runtime = _runtime(tmp_path, backend, {"EPIXODO_PAGE_SIZE": "10"})

    assert runtime.settings_vm.backend_url == "http://saved:8090"
    assert runtime.settings_vm.page_size == 10


def test_runtime_ignores_broken_settings_file(tmp_path: Path, backend: FakeBackend, caplog) -> None:
    (tmp_path / "user_settings.json").write_text("[1, 2]", encoding="utf-8")
    runtime = _runtime(tmp_path, backend)
    assert runtime.settings_payload()["page_size"] == 200
    assert "Could not load local settings" in caplog.text


def test_pages_bind_session_token_and_owner(tmp_path: Path, backend: FakeBackend) -> None:
    runtime = _runtime(tmp_path, backend)
    storage: dict = {}
    store = runtime.session_store(storage)
    session = runtime.sign_in(store, "ana@example.com", "secret")

    tasks = runtime.kinds.get("tasks")
    list_vm = runtime.list_vm(tasks, session)
    list_vm.refresh()
    assert backend.calls[-1][:3] == ("list", "tasks", session.token)
    assert backend.calls[-1][6] == 'user = "user_1"'

    form = runtime.form_vm(tasks, session, on_saved=list_vm.upsert)
    form.open()
    form.set_field("title", "Bound")
    form.submit()
    assert backend.collections["tasks"][0]["user"] == "user_1"
    assert [record.title for record in list_vm.records] == ["Bound"]

    runtime.delete_record(tasks, list_vm.records[0].id, session)
    assert backend.collections["tasks"] == []


def test_settings_change_rebuilds_adapter(tmp_path: Path, backend: FakeBackend) -> None:
    runtime = _runtime(tmp_path, backend)
    runtime.controller.ensure_ready()
    runtime.apply_settings_payload({"backend_url": "http://other:8090"})
    assert runtime.controller.adapter is None


def test_runtime_without_backend_url_reports_not_configured(tmp_path: Path, backend: FakeBackend) -> None:
    runtime = _runtime(tmp_path, backend)
    runtime.settings_vm.config.backend_url = ""
    with pytest.raises(UseCaseError) as excinfo:
        runtime.sign_in(runtime.session_store({}), "ana@example.com", "secret")
    assert excinfo.value.code == "NOT_CONFIGURED"


def test_settings_page_save_persists_and_keeps_env_overrides(
    tmp_path: Path, backend: FakeBackend, monkeypatch
) -> None:
    monkeypatch.delenv("EPIXODO_LOG_LEVEL", raising=False)
    monkeypatch.delenv("EPIXODO_DEBUG", raising=False)
    runtime = _runtime(tmp_path, backend, {"EPIXODO_PAGE_SIZE": "10"})
    payload = runtime.settings_payload()
    payload.update({"backend_url": "http://other:8090", "page_size": 30, "debug_logging": True})

    runtime.apply_settings_payload(payload)

    saved = json.loads((tmp_path / "user_settings.json").read_text(encoding="utf-8"))
    assert saved["backend_url"] == "http://other:8090"
    assert saved["page_size"] == 30
    assert runtime.settings_vm.page_size == 10
    assert runtime.log_level_name == "DEBUG"

    runtime.apply_settings_payload({"debug_logging": False})
    assert runtime.log_level_name == "INFO"


def test_invalid_settings_are_neither_applied_nor_saved(
    tmp_path: Path, backend: FakeBackend
) -> None:
    runtime = _runtime(tmp_path, backend)
    before = runtime.settings_payload()

    with pytest.raises(ValueError):
        runtime.apply_settings_payload({"backend_url": "http://ok:8090", "page_size": 0})

    assert runtime.settings_payload() == before
    assert not (tmp_path / "user_settings.json").exists()
    assert runtime.default_settings()["page_size"] == 200


def test_auth_callback_token_becomes_the_session(tmp_path: Path, backend: FakeBackend) -> None:
    runtime = _runtime(tmp_path, backend)
    storage: dict = {}
    store = runtime.session_store(storage)
    token = make_session().token

    session = runtime.adopt_session(store, {"token": token})

    assert backend.calls == [("refresh", token)]
    assert store.current_user() == session
    assert runtime.guard(store).check().allowed is True


def test_detail_view_loads_linked_records(tmp_path: Path, backend: FakeBackend) -> None:
    runtime = _runtime(tmp_path, backend)
    session = runtime.sign_in(runtime.session_store({}), "ana@example.com", "secret")
    matter = backend.seed("matters", title="House", user="user_1")
    activity = backend.seed("activities", title="Renovation", matter=matter.id, user="user_1")
    backend.seed("tasks", title="Call plumber", matter=matter.id, user="user_1")
    backend.seed("tasks", title="Buy tiles", activity=activity.id, status="completed", user="user_1")
    backend.seed("tasks", title="Other user", matter=matter.id, user="user_2")

    detail = runtime.detail_vm(runtime.kinds.get("matters"), matter, session)
    assert detail.refresh() is True

    assert detail.record.title == "House"
    assert [task.title for task in detail.linked["tasks"]] == ["Call plumber"]
    assert [item.title for item in detail.linked["activities"]] == ["Renovation"]
    assert detail.progress == (1, 2)
    list_filters = [call[6] for call in backend.calls if call[0] == "list"]
    assert f'user = "user_1" && matter = "{matter.id}"' in list_filters
