"""List state for one resource page (tasks, activities, matters, notes).

Call context:
    ``epixodo/web_ui/main.py`` builds one ``RecordListVM`` per page visit,
    calls :meth:`RecordListVM.refresh` through ``run.io_bound`` once the route
    guard passed, and re-renders from ``records``/``error``/``is_loading``.
    The create/edit modal feeds saved records back via :meth:`upsert`.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from epixodo.domain.entities import Record, RecordPage
from epixodo.domain.kinds import ResourceKind
from epixodo.domain.ports import UseCaseError
from epixodo.domain.reconcile import find_record, remove_record, upsert_record

LOGGER = logging.getLogger(__name__)

LoadRecordsFn = Callable[..., RecordPage]


class RecordListVM:
    """Mirror of the last successful fetch, plus local create/update merges.

    Every refresh takes a ticket; a response whose ticket is no longer the
    latest is dropped, so an older slow fetch can never overwrite a newer one.
    """

    def __init__(
        self,
        kind: ResourceKind,
        load_records: LoadRecordsFn,
        owner_id: Optional[str],
        *,
        on_auth_failed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.kind = kind
        self.load_records = load_records
        self.owner_id = owner_id
        self.on_auth_failed = on_auth_failed

        self.records: List[Record] = []
        self.is_loading: bool = False
        self.error: Optional[str] = None
        self.error_code: Optional[str] = None
        self.total_items: int = 0
        self.is_truncated: bool = False

        self._lock = threading.Lock()
        self._ticket = 0

    def refresh(self) -> bool:
        """Fetch page one of the collection.

        Returns:
            ``True`` when this call's result was applied, ``False`` when it
            failed or was superseded by a newer refresh.
        """
        with self._lock:
            self._ticket += 1
            ticket = self._ticket
            self.is_loading = True
            self.error = None
            self.error_code = None

        try:
            page = self.load_records(self.kind, owner_id=self.owner_id)
        except UseCaseError as exc:
            return self._apply_failure(ticket, exc)
        except Exception:
            with self._lock:
                if ticket == self._ticket:
                    self.is_loading = False
            raise

        with self._lock:
            if ticket != self._ticket:
                LOGGER.debug("Discarding stale %s response (ticket %d)", self.kind.key, ticket)
                return False
            self.records = list(page.items)
            self.total_items = page.total_items
            self.is_truncated = page.is_truncated
            self.is_loading = False
        return True

    def _apply_failure(self, ticket: int, exc: UseCaseError) -> bool:
        with self._lock:
            if ticket != self._ticket:
                return False
            self.records = []
            self.total_items = 0
            self.is_truncated = False
            self.error = exc.message
            self.error_code = exc.code
            self.is_loading = False
        LOGGER.warning("Loading %s failed: %s (%s)", self.kind.key, exc.message, exc.code)
        if exc.code == "AUTH_FAILED" and self.on_auth_failed is not None:
            self.on_auth_failed()
        return False

    # ------------------------------------------------------------------
    # Local merges
    # ------------------------------------------------------------------
    def upsert(self, record: Record) -> None:
        with self._lock:
            before = len(self.records)
            self.records = upsert_record(self.records, record)
            self.total_items += len(self.records) - before

    def remove(self, record_id: str) -> None:
        with self._lock:
            before = len(self.records)
            self.records = remove_record(self.records, record_id)
            self.total_items = max(self.total_items - (before - len(self.records)), 0)

    def find(self, record_id: str) -> Optional[Record]:
        return find_record(self.records, record_id)

    @property
    def is_empty(self) -> bool:
        return not self.is_loading and self.error is None and not self.records

    def options(self) -> Dict[str, str]:
        """``{id: title}`` for relation selects in the form of another kind."""
        return {record.id: record.title or record.id for record in self.records}


__all__ = ["LoadRecordsFn", "RecordListVM"]
