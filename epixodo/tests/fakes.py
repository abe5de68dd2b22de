"""In-memory collaborators shared by use-case, viewmodel and integration tests."""

from __future__ import annotations

import base64
import json
import re
from typing import Any, Dict, List, Mapping, Optional

from epixodo.adapters.api_errors import ApiClientError, ApiServerError
from epixodo.domain.entities import Record, RecordPage, Session, UserIdentity

USER = UserIdentity(id="user_1", email="ana@example.com", name="Ana")

_CLAUSE = re.compile(r'(\w+) = "((?:[^"\\]|\\.)*)"')


def make_token(exp: Optional[float] = None, **claims: Any) -> str:
    """Unsigned JWT-shaped token carrying ``exp`` (and any extra claims)."""
    body = dict(claims)
    if exp is not None:
        body["exp"] = exp
    header = base64.urlsafe_b64encode(b'{"alg":"HS256","typ":"JWT"}').decode().rstrip("=")
    payload = base64.urlsafe_b64encode(json.dumps(body).encode()).decode().rstrip("=")
    return f"{header}.{payload}.signature"


def make_session(exp: Optional[float] = 4_102_444_800, user: UserIdentity = USER) -> Session:
    return Session(token=make_token(exp, id=user.id), user=user)


def make_record(record_id: str, collection: str = "tasks", **fields: Any) -> Record:
    return Record(id=record_id, collection=collection, fields=dict(fields))


class FakeBackend:
    """RecordPort/AuthPort double keeping collections in dictionaries.

    ``fail_next`` queues an exception for the next call of the named method.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_next: Dict[str, Exception] = {}
        self.users: Dict[str, tuple] = {}
        self._next_id = 1

    # ---- helpers ----
    def seed(self, collection: str, **fields: Any) -> Record:
        payload = {"id": self._new_id(), "created": "2025-01-01 10:00:00.000Z", **fields}
        self.collections.setdefault(collection, []).append(payload)
        return Record.from_payload(payload, collection=collection)

    def _new_id(self) -> str:
        rid = f"rec{self._next_id:04d}"
        self._next_id += 1
        return rid

    def _maybe_fail(self, method: str) -> None:
        exc = self.fail_next.pop(method, None)
        if exc is not None:
            raise exc

    # ---- RecordPort ----
    def list_records(
        self,
        collection: str,
        *,
        token: Optional[str],
        page: int = 1,
        per_page: int = 200,
        sort: Optional[str] = None,
        filter: Optional[str] = None,
        expand: Optional[str] = None,
    ) -> RecordPage:
        self.calls.append(("list", collection, token, page, per_page, sort, filter, expand))
        self._maybe_fail("list_records")
        rows = list(self.collections.get(collection, []))
        if filter:
            rows = [row for row in rows if _matches(row, filter)]
        items = [Record.from_payload(row, collection=collection) for row in rows[:per_page]]
        return RecordPage(
            items=items, page=page, per_page=per_page, total_items=len(rows), total_pages=1
        )

    def get_record(self, collection, record_id, *, token, expand=None) -> Record:
        self.calls.append(("get", collection, record_id))
        self._maybe_fail("get_record")
        for row in self.collections.get(collection, []):
            if row["id"] == record_id:
                return Record.from_payload(row, collection=collection)
        raise ApiClientError("not found", status=404)

    def create_record(
        self,
        collection: str,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record:
        self.calls.append(("create", collection, dict(fields)))
        self._maybe_fail("create_record")
        payload = {"id": self._new_id(), "created": "2025-01-02 10:00:00.000Z", **dict(fields)}
        self.collections.setdefault(collection, []).append(payload)
        return Record.from_payload(payload, collection=collection)

    def update_record(
        self,
        collection: str,
        record_id: str,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record:
        self.calls.append(("update", collection, record_id, dict(fields)))
        self._maybe_fail("update_record")
        for row in self.collections.get(collection, []):
            if row["id"] == record_id:
                row.update(dict(fields))
                return Record.from_payload(row, collection=collection)
        raise ApiClientError("not found", status=404)

    def delete_record(self, collection: str, record_id: str, *, token: Optional[str]) -> None:
        self.calls.append(("delete", collection, record_id))
        self._maybe_fail("delete_record")
        rows = self.collections.get(collection, [])
        self.collections[collection] = [row for row in rows if row["id"] != record_id]

    # ---- AuthPort ----
    def auth_with_password(self, identity: str, password: str) -> Session:
        self.calls.append(("auth", identity))
        self._maybe_fail("auth_with_password")
        known = self.users.get(identity)
        if known is None or known[0] != password:
            raise ApiClientError("Failed to authenticate.", status=400)
        return make_session(user=known[1])

    def auth_refresh(self, token: str) -> Session:
        self.calls.append(("refresh", token))
        self._maybe_fail("auth_refresh")
        if not token:
            raise ApiClientError("unauthorized", status=401)
        return make_session()


def _matches(row: Mapping[str, Any], filter: str) -> bool:
    """Evaluate the ``a = "x" && (b = "y" || c = "z")`` filters the app builds."""
    for group in filter.split(" && "):
        clauses = _CLAUSE.findall(group)
        if not any(row.get(name) == value.replace('\\"', '"') for name, value in clauses):
            return False
    return True


def server_error() -> ApiServerError:
    return ApiServerError("boom", status=500)
