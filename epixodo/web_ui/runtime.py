"""NiceGUI runtime orchestration for Epixodo.

This module composes viewmodels and use cases for the web pages. It holds no
per-user state: the session of each browser lives in that browser's storage
mapping and is handed in by the page.
"""

from __future__ import annotations

import logging
import os
from functools import partial
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional

from epixodo.adapters.session_store import SessionStore
from epixodo.adapters.storage_local import StorageLocal
from epixodo.app.controller import AdapterFactory, AppController
from epixodo.domain.entities import Record, Session
from epixodo.domain.kinds import KINDS, ResourceKind
from epixodo.domain.ports import UseCaseError
from epixodo.usecases.complete_task import CompleteTaskResult
from epixodo.utils.logging import apply_preferences, level_name
from epixodo.viewmodels.record_detail_vm import RecordDetailVM
from epixodo.viewmodels.record_form_vm import CompleteTaskFn, RecordFormVM
from epixodo.viewmodels.record_list_vm import RecordListVM
from epixodo.viewmodels.route_guard import RouteGuard
from epixodo.viewmodels.settings_vm import SettingsVM, default_settings_payload
from epixodo.viewmodels.task_board_vm import TaskBoardVM

LOGGER = logging.getLogger(__name__)


class WebRuntime:
    """Orchestration state used by NiceGUI views."""

    def __init__(
        self,
        *,
        settings_dir: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        adapter_factory: Optional[AdapterFactory] = None,
    ) -> None:
        env = os.environ if environ is None else environ
        self._env = env
        self.storage = StorageLocal(root_dir=settings_dir or env.get("EPIXODO_SETTINGS_DIR") or ".")
        self.settings_vm = SettingsVM(on_save=self.storage.save_user_settings)
        self.kinds = KINDS

        self._load_settings_defaults()
        self.settings_vm.apply_env(env)
        self.log_level = apply_preferences(self.settings_vm.debug_logging)

        self.controller = AppController(self.settings_vm, adapter_factory=adapter_factory)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    @property
    def timezone(self) -> str:
        return self.settings_vm.timezone

    def settings_payload(self) -> Dict[str, Any]:
        return self.settings_vm.to_dict()

    @property
    def log_level_name(self) -> str:
        return level_name(self.log_level)

    @staticmethod
    def default_settings() -> Dict[str, Any]:
        return default_settings_payload()

    def apply_settings_payload(self, payload: Mapping[str, Any]) -> None:
        """Validate, persist and apply settings edited on the settings page.

        Nothing changes when validation or the write fails. ``EPIXODO_*``
        environment overrides still win in memory after the save.
        """
        previous = self.settings_vm.config
        try:
            self.settings_vm.apply_dict(payload)
            self.settings_vm.cmd_save()
        except (OSError, ValueError):
            self.settings_vm.config = previous
            raise
        self.settings_vm.apply_env(self._env)
        self.controller.reset()
        self.log_level = apply_preferences(self.settings_vm.debug_logging)
        LOGGER.info("Settings saved; backend %s", self.settings_vm.backend_url)

    def _load_settings_defaults(self) -> None:
        try:
            payload = self.storage.load_user_settings()
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not load local settings: %s", exc)
            return
        try:
            self.settings_vm.apply_dict(payload)
        except ValueError as exc:
            LOGGER.warning("Could not apply local settings: %s", exc)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    @staticmethod
    def session_store(storage: MutableMapping[str, Any]) -> SessionStore:
        return SessionStore(storage)

    def guard(self, store: SessionStore) -> RouteGuard:
        return RouteGuard(store)

    def sign_in(self, store: SessionStore, identity: str, password: str) -> Session:
        if not self.controller.ensure_ready():
            raise UseCaseError("NOT_CONFIGURED", "Configure the backend URL first.")
        return self.controller.build_sign_in(store)(identity, password)

    def adopt_session(self, store: SessionStore, payload: Mapping[str, Any]) -> Session:
        if not self.controller.ensure_ready():
            raise UseCaseError("NOT_CONFIGURED", "Configure the backend URL first.")
        return self.controller.build_adopt_session(store)(payload)

    # ------------------------------------------------------------------
    # Per-page viewmodels
    # ------------------------------------------------------------------
    def _ready(self) -> AppController:
        if not self.controller.ensure_ready():
            raise UseCaseError("NOT_CONFIGURED", "Configure the backend URL first.")
        return self.controller

    def list_vm(
        self,
        kind: ResourceKind,
        session: Session,
        *,
        on_auth_failed: Optional[Callable[[], None]] = None,
    ) -> RecordListVM:
        controller = self._ready()
        loader = partial(controller.uc_load, token=session.token)
        return RecordListVM(kind, loader, session.user.id, on_auth_failed=on_auth_failed)

    def form_vm(
        self,
        kind: ResourceKind,
        session: Session,
        on_saved: Optional[Callable[[Record], None]] = None,
        *,
        complete_task: Optional[CompleteTaskFn] = None,
    ) -> RecordFormVM:
        controller = self._ready()
        create = partial(controller.uc_create, token=session.token, owner_id=session.user.id)
        update = partial(controller.uc_update, token=session.token)
        return RecordFormVM(
            kind, create, update, on_saved, tz=self.timezone, complete_task=complete_task
        )

    def task_board(self, tasks: RecordListVM, session: Session) -> TaskBoardVM:
        return TaskBoardVM(tasks, self._complete_fn(session), tz=self.timezone)

    def detail_vm(self, kind: ResourceKind, record: Record, session: Session) -> RecordDetailVM:
        controller = self._ready()
        return RecordDetailVM(
            kind,
            record.id,
            partial(controller.uc_get, token=session.token),
            partial(controller.uc_load, token=session.token),
            session.user.id,
            complete_task=self._complete_fn(session),
            kinds=self.kinds,
        )

    def _complete_fn(self, session: Session) -> CompleteTaskFn:
        controller = self._ready()

        def complete(task: Record, completed: bool) -> CompleteTaskResult:
            return controller.uc_complete_task(
                task, completed, token=session.token, owner_id=session.user.id
            )

        return complete

    def delete_record(self, kind: ResourceKind, record_id: str, session: Session) -> None:
        self._ready().uc_delete(kind, record_id, token=session.token)


__all__ = ["WebRuntime"]
