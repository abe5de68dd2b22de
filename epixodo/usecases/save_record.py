"""Use cases for creating, updating and deleting records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from epixodo.domain.entities import Record
from epixodo.domain.kinds import ResourceKind
from epixodo.domain.ports import RecordPort, UseCaseError
from epixodo.usecases.error_mapping import map_api_error

LOGGER = logging.getLogger(__name__)


def _require_title(fields: Mapping[str, Any]) -> None:
    if "title" in fields and not str(fields.get("title") or "").strip():
        raise UseCaseError(
            "TITLE_REQUIRED", "Title is required.", meta={"fields": {"title": "Required"}}
        )


@dataclass
class CreateRecord:
    """POST a new record; the owner relation is filled from the session."""

    record_port: RecordPort

    def __call__(
        self,
        kind: ResourceKind,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        owner_id: Optional[str] = None,
    ) -> Record:
        payload: Dict[str, Any] = dict(fields)
        if "title" not in payload and kind.form_field("title") is not None:
            payload["title"] = ""
        _require_title(payload)
        if kind.owned:
            if not owner_id:
                raise UseCaseError("AUTH_MISSING", "Sign in to create records.")
            payload["user"] = owner_id
        try:
            record = self.record_port.create_record(
                kind.collection, payload, token=token, expand=kind.expand
            )
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="CREATE_FAILED",
                default_message=f"Could not create {kind.singular.lower()}.",
            ) from exc
        LOGGER.info("Created %s %s", kind.collection, record.id)
        return record


@dataclass
class UpdateRecord:
    """PATCH the given fields of an existing record."""

    record_port: RecordPort

    def __call__(
        self,
        kind: ResourceKind,
        record_id: str,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
    ) -> Record:
        if not str(record_id or "").strip():
            raise UseCaseError("UPDATE_FAILED", "Missing record id.")
        payload = dict(fields)
        _require_title(payload)
        try:
            record = self.record_port.update_record(
                kind.collection, record_id, payload, token=token, expand=kind.expand
            )
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="UPDATE_FAILED",
                default_message=f"Could not update {kind.singular.lower()}.",
            ) from exc
        LOGGER.info(
            "Updated %s %s (%s)", kind.collection, record.id, ", ".join(sorted(payload)) or "no fields"
        )
        return record


@dataclass
class DeleteRecord:
    record_port: RecordPort

    def __call__(self, kind: ResourceKind, record_id: str, *, token: Optional[str]) -> None:
        try:
            self.record_port.delete_record(kind.collection, record_id, token=token)
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="DELETE_FAILED",
                default_message=f"Could not delete {kind.singular.lower()}.",
            ) from exc
        LOGGER.info("Deleted %s %s", kind.collection, record_id)


__all__ = ["CreateRecord", "DeleteRecord", "UpdateRecord"]
