"""Use cases for fetching the current user's records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from epixodo.domain.entities import Record, RecordPage
from epixodo.domain.kinds import ResourceKind, all_of
from epixodo.domain.ports import RecordPort, UseCaseError
from epixodo.usecases.error_mapping import map_api_error

DEFAULT_PAGE_SIZE = 200


@dataclass
class LoadRecords:
    """Use-case callable returning page one of a collection, owner-filtered.

    ``extra_filter`` narrows the listing further (e.g. ``matter = "m1"``) and
    is combined with the owner filter, never in place of it.
    """

    record_port: RecordPort
    page_size: int = DEFAULT_PAGE_SIZE

    def __call__(
        self,
        kind: ResourceKind,
        *,
        token: Optional[str],
        owner_id: Optional[str] = None,
        extra_filter: Optional[str] = None,
    ) -> RecordPage:
        if kind.owned and not owner_id:
            raise UseCaseError("AUTH_MISSING", "Sign in to see your records.")
        try:
            return self.record_port.list_records(
                kind.collection,
                token=token,
                page=1,
                per_page=self.page_size,
                sort=kind.sort,
                filter=all_of(kind.owner_filter(owner_id), extra_filter),
                expand=kind.expand,
            )
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="FETCH_FAILED",
                default_message=f"Could not load {kind.label.lower()}.",
            ) from exc


@dataclass
class GetRecord:
    """Fetch one record by id, with the kind's relations expanded."""

    record_port: RecordPort

    def __call__(self, kind: ResourceKind, record_id: str, *, token: Optional[str]) -> Record:
        try:
            return self.record_port.get_record(
                kind.collection, record_id, token=token, expand=kind.expand
            )
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="FETCH_FAILED",
                default_message=f"Could not load {kind.singular.lower()}.",
            ) from exc


__all__ = ["DEFAULT_PAGE_SIZE", "GetRecord", "LoadRecords"]
