"""Ports and the use-case error model."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

from .entities import Record, RecordPage, Session

RecordId = str
CollectionName = str


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


# ---- Ports (Hexagonal boundaries) ----
class RecordPort(Protocol):
    """List/read/create/update/delete against the backend record collections.

    ``token`` is the caller's session credential; adapters never keep one.
    """

    def list_records(
        self,
        collection: CollectionName,
        *,
        token: Optional[str],
        page: int = 1,
        per_page: int = 200,
        sort: Optional[str] = None,
        filter: Optional[str] = None,
        expand: Optional[str] = None,
    ) -> RecordPage: ...
    def get_record(
        self,
        collection: CollectionName,
        record_id: RecordId,
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record: ...
    def create_record(
        self,
        collection: CollectionName,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record: ...
    def update_record(
        self,
        collection: CollectionName,
        record_id: RecordId,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record: ...
    def delete_record(
        self, collection: CollectionName, record_id: RecordId, *, token: Optional[str]
    ) -> None: ...


class AuthPort(Protocol):
    """Credential exchange with the backend auth collection."""

    def auth_with_password(self, identity: str, password: str) -> Session: ...
    def auth_refresh(self, token: str) -> Session: ...


class SessionPort(Protocol):
    """Per-browser session persistence."""

    def current_user(self) -> Optional[Session]: ...
    def save(self, session: Session) -> None: ...
    def logout(self) -> None: ...


class StoragePort(Protocol):
    """Persistence for local user settings."""

    def save_user_settings(self, payload: Dict) -> None: ...
    def load_user_settings(self) -> Dict: ...
