"""Adapter and use-case wiring shared by every page of the web runtime.

This module owns lazy construction of the single backend adapter and the
use-case objects built on top of it, from values in
:class:`epixodo.viewmodels.settings_vm.SettingsVM`.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..adapters.pocketbase_rest import PocketBaseRestAdapter
from ..domain.ports import SessionPort
from ..usecases.complete_task import CompleteTask
from ..usecases.load_records import GetRecord, LoadRecords
from ..usecases.save_record import CreateRecord, DeleteRecord, UpdateRecord
from ..usecases.sign_in import AdoptSession, SignIn
from ..viewmodels.settings_vm import SettingsVM

LOGGER = logging.getLogger(__name__)

AdapterFactory = Callable[..., PocketBaseRestAdapter]


class AppController:
    """Create and cache the backend adapter and use-cases from settings state.

    Call chain:
        ``epixodo.web_ui.runtime.WebRuntime`` creates one instance per server
        process. Every page goes through ``ensure_ready`` before a backend
        call, so the adapter (and its ``requests.Session``) is built once and
        injected everywhere.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        adapter_factory: Optional[AdapterFactory] = None,
    ) -> None:
        self.settings_vm = settings_vm
        self._adapter_factory = adapter_factory or PocketBaseRestAdapter
        self._adapter: Optional[PocketBaseRestAdapter] = None
        self.uc_load: Optional[LoadRecords] = None
        self.uc_get: Optional[GetRecord] = None
        self.uc_create: Optional[CreateRecord] = None
        self.uc_update: Optional[UpdateRecord] = None
        self.uc_delete: Optional[DeleteRecord] = None
        self.uc_complete_task: Optional[CompleteTask] = None

    @property
    def adapter(self) -> Optional[PocketBaseRestAdapter]:
        return self._adapter

    def reset(self) -> None:
        """Drop the cached adapter so the next ``ensure_ready`` rebuilds it."""
        self._adapter = None
        self.uc_load = None
        self.uc_get = None
        self.uc_create = None
        self.uc_update = None
        self.uc_delete = None
        self.uc_complete_task = None

    def ensure_ready(self) -> bool:
        """Build adapter and use-cases on first use.

        Returns:
            ``True`` when dependencies are available, ``False`` when no backend
            URL is configured.
        """
        if self._adapter is not None:
            return True
        base_url = str(self.settings_vm.backend_url or "").strip()
        if not base_url:
            return False

        self._adapter = self._adapter_factory(
            base_url,
            request_timeout_s=self.settings_vm.request_timeout_s,
            retries=self.settings_vm.config.retries,
        )
        LOGGER.info("Backend adapter ready for %s", base_url)
        self.uc_load = LoadRecords(self._adapter, page_size=self.settings_vm.page_size)
        self.uc_get = GetRecord(self._adapter)
        self.uc_create = CreateRecord(self._adapter)
        self.uc_update = UpdateRecord(self._adapter)
        self.uc_delete = DeleteRecord(self._adapter)
        self.uc_complete_task = CompleteTask(self._adapter, tz=self.settings_vm.timezone)
        return True

    def build_sign_in(self, session_store: SessionPort) -> SignIn:
        self._require_ready()
        return SignIn(self._adapter, session_store)

    def build_adopt_session(self, session_store: SessionPort) -> AdoptSession:
        self._require_ready()
        return AdoptSession(self._adapter, session_store)

    def _require_ready(self) -> None:
        if not self.ensure_ready():
            raise RuntimeError("Configure the backend URL first.")
