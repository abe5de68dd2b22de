"""NiceGUI entrypoint for the Epixodo web runtime."""

from __future__ import annotations

import argparse
import html
import os
import re
from typing import Any, Callable, Dict, Optional

from nicegui import Client, app, run, ui

from epixodo.domain.entities import Record, Session
from epixodo.domain.kinds import (
    FIELD_DATE,
    FIELD_DATETIME,
    FIELD_RECURRENCE,
    FIELD_RELATION,
    FIELD_RICH_TEXT,
    FIELD_STATUS,
    TASK_STATUSES,
    FormField,
    ResourceKind,
    is_completed,
)
from epixodo.domain.ports import UseCaseError
from epixodo.domain.recurrence import RECURRENCE_OPTIONS
from epixodo.domain.task_sections import SECTION_ORDER, SECTION_TITLES
from epixodo.domain.time_utils import format_date, format_datetime
from epixodo.usecases.complete_task import CompleteTaskResult
from epixodo.utils.logging import configure_root
from epixodo.viewmodels.navigation_vm import (
    AUTH_CALLBACK_PATH,
    HUB_PATH,
    SETTINGS_PATH,
    feature_cards,
)
from epixodo.viewmodels.record_detail_vm import RecordDetailVM
from epixodo.viewmodels.record_form_vm import FormState
from epixodo.viewmodels.record_list_vm import RecordListVM
from epixodo.viewmodels.route_guard import LOGIN_PATH
from epixodo.web_ui.runtime import WebRuntime

_TAG_RE = re.compile(r"<[^>]+>")


def _install_theme() -> None:
    """Install global CSS/theme tokens for the web runtime."""
    ui.add_head_html(
        """
<style>
:root {
  --epx-bg: #f4f6fb;
  --epx-card: #ffffff;
  --epx-border: #dde3ee;
  --epx-accent: #3157d5;
  --epx-danger: #c62828;
  --epx-muted: #5b6475;
}
body { background: var(--epx-bg); }
.epx-page { max-width: 1100px; margin: 0 auto; padding: 16px; }
.epx-card {
  background: var(--epx-card);
  border: 1px solid var(--epx-border);
  border-radius: 12px;
}
.epx-muted { color: var(--epx-muted); }
.epx-overdue { color: var(--epx-danger); font-weight: 600; }
.epx-feature { cursor: pointer; transition: transform 120ms ease-out; }
.epx-feature:hover { transform: translateY(-2px); }
</style>
        """
    )


def _notify_error(exc: Exception) -> None:
    """Render exceptions as concise NiceGUI toasts."""
    message = exc.message if isinstance(exc, UseCaseError) else str(exc)
    ui.notify(message, color="negative", close_button="OK")


def _plain_text(markup: Any, limit: int = 180) -> str:
    """Excerpt of rich-text content without markup."""
    text = html.unescape(_TAG_RE.sub(" ", str(markup or "")))
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def _as_number(value: Any) -> Optional[float]:
    """Value for a ``ui.number`` input; blanks and junk show as empty."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _build_ui(runtime: WebRuntime) -> None:
    """Register the NiceGUI pages for the runtime."""

    def guarded_session() -> Optional[Session]:
        """Run the route guard; navigates away and returns ``None`` when denied."""
        decision = runtime.guard(runtime.session_store(app.storage.user)).check()
        if not decision.allowed:
            ui.navigate.to(decision.redirect_to or LOGIN_PATH)
            return None
        return decision.session

    def logout() -> None:
        runtime.session_store(app.storage.user).logout()
        ui.navigate.to(LOGIN_PATH)

    def report_completion(result: Optional[CompleteTaskResult]) -> None:
        if result is None:
            return
        if result.follow_up is not None:
            due = format_date(result.follow_up.get("due_date"), runtime.timezone)
            ui.notify(f"Next occurrence scheduled for {due}.", color="positive")
        elif result.follow_up_error:
            ui.notify(result.follow_up_error, color="warning")

    def render_header(title: str, session: Session, *, back: bool = True) -> None:
        with ui.row().classes("w-full items-center justify-between epx-card q-pa-md q-mb-md"):
            with ui.row().classes("items-center q-gutter-sm"):
                if back:
                    ui.button(icon="arrow_back", on_click=lambda: ui.navigate.to(HUB_PATH)).props(
                        "flat round dense"
                    )
                ui.label(title).classes("text-h5")
            with ui.row().classes("items-center q-gutter-sm"):
                ui.label(session.user.display_name).classes("epx-muted")
                ui.button(icon="settings", on_click=lambda: ui.navigate.to(SETTINGS_PATH)).props(
                    "flat round dense"
                )
                ui.button("Log out", icon="logout", on_click=logout).props("flat")

    # ------------------------------------------------------------------
    # Sign-in
    # ------------------------------------------------------------------
    @ui.page(LOGIN_PATH)
    async def login_page() -> None:
        store = runtime.session_store(app.storage.user)
        if runtime.guard(store).check().allowed:
            ui.navigate.to(HUB_PATH)
            return

        state: Dict[str, str] = {"identity": "", "password": "", "error": ""}

        @ui.refreshable
        def render_error() -> None:
            if state["error"]:
                ui.label(state["error"]).classes("text-negative")

        async def sign_in() -> None:
            button.disable()
            try:
                await run.io_bound(runtime.sign_in, store, state["identity"], state["password"])
            except UseCaseError as exc:
                state["error"] = exc.message
                render_error.refresh()
                return
            finally:
                button.enable()
            ui.navigate.to(HUB_PATH)

        with ui.column().classes("epx-page items-center"):
            with ui.card().classes("epx-card q-pa-lg w-96"):
                ui.label("Epixodo").classes("text-h4")
                ui.label("Sign in to continue").classes("epx-muted q-mb-md")
                ui.input(
                    "Email",
                    on_change=lambda e: state.__setitem__("identity", str(e.value or "")),
                ).props("outlined").classes("w-full")
                ui.input(
                    "Password",
                    password=True,
                    on_change=lambda e: state.__setitem__("password", str(e.value or "")),
                ).props("outlined").classes("w-full").on("keydown.enter", sign_in)
                render_error()
                button = ui.button("Sign in", on_click=sign_in, color="primary").classes("w-full")

    @ui.page(AUTH_CALLBACK_PATH)
    async def auth_callback_page(client: Client, token: str = "") -> None:
        with ui.column().classes("epx-page items-center") as root:
            ui.spinner(size="lg")
        await client.connected()
        store = runtime.session_store(app.storage.user)
        try:
            await run.io_bound(runtime.adopt_session, store, {"token": token})
        except UseCaseError as exc:
            root.clear()
            with root:
                ui.label(exc.message).classes("text-negative")
                ui.button("Back to sign-in", on_click=lambda: ui.navigate.to(LOGIN_PATH))
            return
        ui.navigate.to(HUB_PATH)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    @ui.page(SETTINGS_PATH)
    async def settings_page() -> None:
        session = guarded_session()
        if session is None:
            return
        values: Dict[str, Any] = runtime.settings_payload()
        state: Dict[str, str] = {"error": ""}

        def setter(key: str) -> Callable[[Any], None]:
            return lambda e: values.__setitem__(key, e.value)

        @ui.refreshable
        def render_settings() -> None:
            ui.input("Backend URL", value=values["backend_url"], on_change=setter("backend_url")).props(
                "outlined dense"
            ).classes("w-full")
            ui.input(
                "Time zone",
                value=values["timezone"],
                placeholder="Europe/Madrid",
                on_change=setter("timezone"),
            ).props("outlined dense").classes("w-full")
            with ui.row().classes("w-full q-gutter-sm no-wrap"):
                ui.number(
                    "Request timeout (s)",
                    value=_as_number(values["request_timeout_s"]),
                    min=1,
                    format="%d",
                    on_change=setter("request_timeout_s"),
                ).props("outlined dense").classes("col")
                ui.number(
                    "Retries",
                    value=_as_number(values["retries"]),
                    min=0,
                    format="%d",
                    on_change=setter("retries"),
                ).props("outlined dense").classes("col")
                ui.number(
                    "Page size",
                    value=_as_number(values["page_size"]),
                    min=1,
                    format="%d",
                    on_change=setter("page_size"),
                ).props("outlined dense").classes("col")
            ui.switch(
                "Debug logging",
                value=bool(values["debug_logging"]),
                on_change=setter("debug_logging"),
            )
            ui.label(f"Current log level: {runtime.log_level_name}").classes("epx-muted text-caption")
            if state["error"]:
                ui.label(state["error"]).classes("text-negative")

        def restore_defaults() -> None:
            values.clear()
            values.update(runtime.default_settings())
            state["error"] = ""
            render_settings.refresh()

        async def save() -> None:
            try:
                await run.io_bound(runtime.apply_settings_payload, dict(values))
            except (OSError, ValueError) as exc:
                state["error"] = str(exc)
                render_settings.refresh()
                return
            state["error"] = ""
            values.clear()
            values.update(runtime.settings_payload())
            render_settings.refresh()
            ui.notify("Settings saved.", color="positive")

        with ui.column().classes("epx-page w-full"):
            render_header("Settings", session)
            with ui.card().classes("epx-card q-pa-md w-full"):
                render_settings()
                with ui.row().classes("w-full justify-end q-gutter-sm"):
                    ui.button("Restore defaults", on_click=restore_defaults).props("flat")
                    ui.button("Save", on_click=save, color="primary")

    # ------------------------------------------------------------------
    # Hub
    # ------------------------------------------------------------------
    @ui.page(HUB_PATH)
    async def hub_page() -> None:
        session = guarded_session()
        if session is None:
            return
        with ui.column().classes("epx-page w-full"):
            render_header("Epixodo", session, back=False)
            with ui.row().classes("w-full q-gutter-md"):
                for card in feature_cards():
                    with ui.card().classes("epx-card epx-feature q-pa-md w-64").on(
                        "click", lambda _, path=card.path: ui.navigate.to(path)
                    ):
                        ui.icon(card.icon).classes("text-h4 text-primary")
                        ui.label(card.label).classes("text-h6")
                        ui.label(card.description).classes("epx-muted")

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    @ui.page("/dashboard")
    async def dashboard_page(client: Client) -> None:
        with ui.column().classes("epx-page w-full") as root:
            ui.spinner(size="lg")
        session = guarded_session()
        if session is None:
            return
        store = runtime.session_store(app.storage.user)
        tasks = runtime.list_vm(runtime.kinds.get("tasks"), session, on_auth_failed=store.logout)
        board = runtime.task_board(tasks, session)

        @ui.refreshable
        def render_focus() -> None:
            if tasks.is_loading:
                ui.spinner(size="lg")
                return
            if tasks.error:
                ui.label(tasks.error).classes("text-negative")
                ui.button("Retry", on_click=load)
                return
            grouped = board.sections()
            with ui.row().classes("w-full q-gutter-md"):
                for key in ("overdue", "today"):
                    items = grouped.sections[key]
                    with ui.card().classes("epx-card q-pa-md col"):
                        with ui.row().classes("items-center justify-between w-full"):
                            ui.label(SECTION_TITLES[key]).classes("text-h6")
                            ui.badge(str(len(items)), color="negative" if key == "overdue" else "primary")
                        if not items:
                            ui.label("Nothing here.").classes("epx-muted")
                        for task in items:
                            with ui.row().classes("items-center q-gutter-sm"):
                                ui.label(task.title)
                                ui.label(board.due_label(task)).classes(
                                    "epx-overdue" if board.is_overdue(task) else "epx-muted"
                                )
            ui.button("Open tasks", on_click=lambda: ui.navigate.to("/tasks")).props("flat")

        async def load() -> None:
            tasks.is_loading = True
            render_focus.refresh()
            await run.io_bound(tasks.refresh)
            if tasks.error_code == "AUTH_FAILED":
                ui.navigate.to(LOGIN_PATH)
                return
            render_focus.refresh()

        root.clear()
        with root:
            render_header("Dashboard", session)
            render_focus()
        await client.connected()
        await load()

    # ------------------------------------------------------------------
    # Resource pages
    # ------------------------------------------------------------------
    async def resource_page(client: Client, kind: ResourceKind) -> None:
        with ui.column().classes("epx-page w-full") as root:
            ui.spinner(size="lg")
        session = guarded_session()
        if session is None:
            return

        store = runtime.session_store(app.storage.user)
        records = runtime.list_vm(kind, session, on_auth_failed=store.logout)
        related: Dict[str, RecordListVM] = {}
        for entry in kind.form_fields:
            if entry.kind == FIELD_RELATION and entry.relation and entry.relation != kind.collection:
                related_kind = runtime.kinds.by_collection(entry.relation)
                if related_kind is not None and entry.relation not in related:
                    related[entry.relation] = runtime.list_vm(related_kind, session)
        board = runtime.task_board(records, session) if kind.key == "tasks" else None

        def on_saved(record: Record) -> None:
            records.upsert(record)

        form = runtime.form_vm(
            kind, session, on_saved, complete_task=board.toggle if board is not None else None
        )
        links = runtime.kinds.linked_kinds(kind)
        detail: Dict[str, Optional[RecordDetailVM]] = {"vm": None}
        saving = {"active": False}

        def relation_options(entry: FormField) -> Dict[str, str]:
            source = records if entry.relation == kind.collection else related.get(entry.relation or "")
            options = {"": "None"}
            if source is not None:
                options.update(source.options())
            if form.editing is not None and entry.relation == kind.collection:
                options.pop(form.editing.id, None)
            return options

        # ---- modal ----
        def set_field(name: str, value: Any, *, rerender: bool = False) -> None:
            if form.state not in (FormState.OPEN, FormState.ERROR):
                return
            form.set_field(name, value)
            if rerender:
                render_form.refresh()

        def render_input(entry: FormField) -> None:
            value = form.values.get(entry.name, "")
            on_change: Callable[[Any], None] = lambda e, n=entry.name: set_field(n, e.value)
            if entry.kind == FIELD_RICH_TEXT:
                ui.label(entry.label).classes("epx-muted")
                ui.editor(value=value, placeholder=entry.placeholder, on_change=on_change).classes(
                    "w-full"
                )
            elif entry.kind == FIELD_DATE:
                ui.input(entry.label, value=value, on_change=on_change).props(
                    "type=date outlined dense stack-label"
                ).classes("w-full")
            elif entry.kind == FIELD_DATETIME:
                ui.input(entry.label, value=value, on_change=on_change).props(
                    "type=datetime-local outlined dense stack-label"
                ).classes("w-full")
            elif entry.kind == FIELD_STATUS:
                ui.select(
                    {status.id: status.label for status in TASK_STATUSES},
                    value=value or None,
                    label=entry.label,
                    on_change=on_change,
                ).props("outlined dense").classes("w-full")
            elif entry.kind == FIELD_RECURRENCE:
                draft = value if isinstance(value, dict) else {}
                frequency = draft.get("frequency") or "none"
                ui.select(
                    dict(RECURRENCE_OPTIONS),
                    value=frequency,
                    label=entry.label,
                    on_change=lambda e, n=entry.name: set_field(
                        n, {"frequency": e.value or "none"}, rerender=True
                    ),
                ).props("outlined dense").classes("w-full")
                if frequency != "none":
                    with ui.row().classes("w-full q-gutter-sm no-wrap"):
                        ui.number(
                            "Every",
                            value=_as_number(draft.get("interval")),
                            min=1,
                            format="%d",
                            on_change=lambda e, n=entry.name: set_field(
                                n, {"interval": "" if e.value is None else e.value}
                            ),
                        ).props("outlined dense").classes("col")
                        ui.input(
                            "Ends on",
                            value=draft.get("end_date") or "",
                            on_change=lambda e, n=entry.name: set_field(n, {"end_date": e.value or ""}),
                        ).props("type=date outlined dense stack-label clearable").classes("col")
            elif entry.kind == FIELD_RELATION:
                options = relation_options(entry)
                ui.select(
                    options,
                    value=value if value in options else "",
                    label=entry.label,
                    on_change=lambda e, n=entry.name: set_field(n, e.value or "", rerender=True),
                ).props("outlined dense").classes("w-full")
            else:
                ui.input(
                    entry.label, value=value, placeholder=entry.placeholder, on_change=on_change
                ).props("outlined dense").classes("w-full")
            hint = form.field_errors.get(entry.name)
            if hint:
                ui.label(hint).classes("text-negative text-caption")

        @ui.refreshable
        def render_form() -> None:
            if not form.is_open:
                return
            ui.label(form.title).classes("text-h6")
            for entry in kind.form_fields:
                render_input(entry)
            if form.error:
                ui.label(form.error).classes("text-negative")
            busy = saving["active"] or form.state is FormState.SUBMITTING
            with ui.row().classes("w-full justify-end q-gutter-sm"):
                ui.button("Cancel", on_click=dialog.close).props("flat").set_enabled(not busy)
                save = ui.button("Save", on_click=submit, color="primary")
                save.set_enabled(not busy)
                if busy:
                    ui.spinner(size="sm")

        def open_form(existing: Optional[Record] = None) -> None:
            form.open(existing)
            render_form.refresh()
            dialog.open()

        def on_dialog_change(event: Any) -> None:
            # Escape and backdrop clicks close the dialog; keep it while saving.
            if event.value:
                return
            if saving["active"] or not form.close():
                dialog.open()
                return
            render_form.refresh()

        async def submit() -> None:
            if saving["active"]:
                return
            saving["active"] = True
            render_form.refresh()
            try:
                saved = await run.io_bound(form.submit)
            finally:
                saving["active"] = False
            if saved is None:
                render_form.refresh()
                return
            dialog.close()
            ui.notify(f"{kind.singular} saved.", color="positive")
            report_completion(form.last_completion)
            render_list.refresh()

        async def delete(record: Record) -> None:
            try:
                await run.io_bound(runtime.delete_record, kind, record.id, session)
            except UseCaseError as exc:
                _notify_error(exc)
                return
            records.remove(record.id)
            ui.notify(f"{kind.singular} deleted.", color="positive")
            render_list.refresh()

        async def toggle(task: Record, completed: bool) -> None:
            if board is None or completed == is_completed(task.fields):
                return
            try:
                result = await run.io_bound(board.toggle, task, completed)
            except UseCaseError as exc:
                _notify_error(exc)
                render_list.refresh()
                return
            report_completion(result)
            render_list.refresh()

        # ---- detail ----
        @ui.refreshable
        def render_detail() -> None:
            vm = detail["vm"]
            if vm is None:
                return
            if vm.is_loading:
                ui.spinner(size="lg")
                return
            if vm.error or vm.record is None:
                ui.label(vm.error or "Not found.").classes("text-negative")
                ui.button("Close", on_click=detail_dialog.close).props("flat")
                return
            record = vm.record
            ui.label(record.title or "(untitled)").classes("text-h6")
            when = record.get("start_date") or record.get("due_date")
            if when:
                ui.label(format_date(when, runtime.timezone)).classes("epx-muted")
            excerpt = _plain_text(record.get(kind.content_field), limit=400)
            if excerpt:
                ui.label(excerpt).classes("epx-muted")
            done, total = vm.progress
            if total:
                ui.linear_progress(value=vm.progress_ratio, show_value=False).props("rounded size=10px")
                ui.label(f"{done} of {total} tasks completed").classes("epx-muted text-caption")
            for linked_kind, _ in vm.links:
                items = vm.linked.get(linked_kind.key, [])
                ui.label(f"{linked_kind.label} ({len(items)})").classes("text-subtitle1 q-mt-md")
                problem = vm.link_errors.get(linked_kind.key)
                if problem:
                    ui.label(problem).classes("text-negative")
                elif not items:
                    ui.label(f"No {linked_kind.label.lower()} yet.").classes("epx-muted")
                for item in items:
                    with ui.row().classes("items-center q-gutter-sm no-wrap"):
                        if linked_kind.key == "tasks":
                            ui.checkbox(
                                value=is_completed(item.fields),
                                on_change=lambda e, t=item: detail_toggle(t, bool(e.value)),
                            )
                        ui.label(item.title or "(untitled)")
                        due = item.get("due_date") or item.get("start_date")
                        if due:
                            ui.label(format_date(due, runtime.timezone)).classes("epx-muted text-caption")
            with ui.row().classes("w-full justify-end"):
                ui.button("Close", on_click=detail_dialog.close).props("flat")

        async def open_detail(record: Record) -> None:
            vm = runtime.detail_vm(kind, record, session)
            detail["vm"] = vm
            vm.is_loading = True
            render_detail.refresh()
            detail_dialog.open()
            await run.io_bound(vm.refresh)
            if detail["vm"] is vm:
                render_detail.refresh()

        async def detail_toggle(task: Record, completed: bool) -> None:
            vm = detail["vm"]
            if vm is None or completed == is_completed(task.fields):
                return
            try:
                result = await run.io_bound(vm.toggle, task, completed)
            except UseCaseError as exc:
                _notify_error(exc)
                render_detail.refresh()
                return
            report_completion(result)
            render_detail.refresh()

        # ---- list ----
        def render_record(record: Record) -> None:
            with ui.card().classes("epx-card q-pa-md w-full"):
                with ui.row().classes("w-full items-center justify-between no-wrap"):
                    with ui.row().classes("items-center q-gutter-sm no-wrap"):
                        if board is not None:
                            ui.checkbox(
                                value=is_completed(record.fields),
                                on_change=lambda e, r=record: toggle(r, bool(e.value)),
                            )
                        ui.label(record.title or "(untitled)").classes("text-subtitle1")
                        if board is not None:
                            ui.badge(board.status_label(record), color=board.status_color(record))
                    with ui.row().classes("q-gutter-xs no-wrap"):
                        if links:
                            ui.button(
                                icon="visibility", on_click=lambda _, r=record: open_detail(r)
                            ).props("flat round dense")
                        ui.button(icon="edit", on_click=lambda _, r=record: open_form(r)).props(
                            "flat round dense"
                        )
                        ui.button(icon="delete", on_click=lambda _, r=record: delete(r)).props(
                            "flat round dense color=negative"
                        )
                with ui.row().classes("q-gutter-md epx-muted text-caption"):
                    if board is not None:
                        due = board.due_label(record)
                        if due:
                            ui.label(f"Due {due}").classes("epx-overdue" if board.is_overdue(record) else "")
                        context = board.context_label(record)
                        if context:
                            ui.label(context)
                        recurrence = board.recurrence_label(record)
                        if recurrence:
                            ui.label(recurrence)
                    elif record.get("start_date"):
                        ui.label(format_datetime(record.get("start_date"), runtime.timezone))
                    elif record.get("due_date"):
                        ui.label(f"Due {format_date(record.get('due_date'), runtime.timezone)}")
                    stamp = record.updated if kind.sort == "-updated" else record.created
                    if stamp:
                        ui.label(format_date(stamp, runtime.timezone))
                excerpt = _plain_text(record.get(kind.content_field))
                if excerpt:
                    ui.label(excerpt).classes("epx-muted")

        @ui.refreshable
        def render_list() -> None:
            if records.is_loading:
                ui.spinner(size="lg")
                return
            if records.error:
                with ui.row().classes("items-center q-gutter-sm"):
                    ui.label(records.error).classes("text-negative")
                    ui.button("Retry", on_click=load)
                return
            if records.is_empty:
                ui.label(f"No {kind.label.lower()} yet.").classes("epx-muted")
                return
            if records.is_truncated:
                ui.label(
                    f"Showing the first {len(records.records)} of {records.total_items}."
                ).classes("epx-muted text-caption")
            if board is None:
                for record in records.records:
                    render_record(record)
                return
            grouped = board.sections()
            for key in SECTION_ORDER:
                items = grouped.sections[key]
                if not items:
                    continue
                caption = grouped.ranges.get(key, "")
                with ui.row().classes("items-baseline q-gutter-sm q-mt-md"):
                    ui.label(SECTION_TITLES[key]).classes("text-h6")
                    ui.label(f"{caption} ({len(items)})".strip()).classes("epx-muted")
                for record in items:
                    render_record(record)

        async def load() -> None:
            records.is_loading = True
            render_list.refresh()
            for source in related.values():
                await run.io_bound(source.refresh)
            await run.io_bound(records.refresh)
            if records.error_code == "AUTH_FAILED":
                ui.navigate.to(LOGIN_PATH)
                return
            render_list.refresh()

        root.clear()
        with ui.dialog() as dialog, ui.card().classes("w-full").style("max-width: 640px"):
            render_form()
        dialog.on_value_change(on_dialog_change)
        with ui.dialog() as detail_dialog, ui.card().classes("w-full").style("max-width: 720px"):
            render_detail()
        with root:
            render_header(kind.label, session)
            with ui.row().classes("w-full justify-end q-mb-sm"):
                ui.button(f"New {kind.singular.lower()}", icon="add", on_click=lambda: open_form()).props(
                    "color=primary"
                )
            with ui.column().classes("w-full q-gutter-sm"):
                render_list()
        await client.connected()
        await load()

    def register_resource_page(kind: ResourceKind) -> None:
        @ui.page(kind.path)
        async def page(client: Client) -> None:
            await resource_page(client, kind)

    for resource_kind in runtime.kinds.all():
        register_resource_page(resource_kind)


def _parse_args() -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the Epixodo NiceGUI web UI.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--settings-dir", default=None, help="Directory holding user_settings.json")
    parser.add_argument("--smoke-test", action="store_true")
    return parser.parse_args()


def main() -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    args = _parse_args()
    configure_root()
    runtime = WebRuntime(settings_dir=args.settings_dir)
    if args.smoke_test:
        payload = runtime.settings_payload()
        print("web-smoke-ok", payload.get("backend_url"), [kind.key for kind in runtime.kinds.all()])
        return
    _install_theme()
    _build_ui(runtime)
    ui.run(
        host=args.host,
        port=args.port,
        title="Epixodo",
        reload=args.reload,
        show=False,
        storage_secret=os.environ.get("EPIXODO_STORAGE_SECRET", "epixodo-web-ui-secret"),
    )


if __name__ == "__main__":
    main()
