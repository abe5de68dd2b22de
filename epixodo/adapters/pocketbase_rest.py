from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import requests

from epixodo.domain.entities import Record, RecordPage, Session
from epixodo.domain.ports import AuthPort, RecordPort

from .api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    build_error_message,
    extract_error_code,
    extract_error_hint,
    parse_error_payload,
)
from .http_client import HttpConfig, RetryingSession

LOGGER = logging.getLogger(__name__)

AUTH_COLLECTION = "users"


class PocketBaseRestAdapter(RecordPort, AuthPort):
    """REST adapter for the backend record collections and the users auth collection.

    One instance (one ``requests.Session``) is shared by every page; the
    session token is passed in per call and never stored here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        request_timeout_s: float = 10,
        retries: int = 0,
        auth_collection: str = AUTH_COLLECTION,
    ) -> None:
        if not str(base_url or "").strip():
            raise ValueError("PocketBaseRestAdapter requires a backend URL")
        self.base_url = str(base_url).strip().rstrip("/")
        self.auth_collection = auth_collection
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(self.cfg)

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
        ctx = f"list[{collection}]"
        params: Dict[str, Any] = {"page": int(page), "perPage": int(per_page)}
        if sort:
            params["sort"] = sort
        if filter:
            params["filter"] = filter
        if expand:
            params["expand"] = expand
        resp = self.session.get(self._records_url(collection), token=token, params=params)
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp, ctx)
        if not isinstance(data, dict):
            raise ApiError(f"{ctx}: expected object response", context=ctx)
        items = [
            Record.from_payload(entry, collection=collection)
            for entry in data.get("items") or []
            if isinstance(entry, dict) and entry.get("id")
        ]
        result = RecordPage(
            items=items,
            page=self._as_int(data.get("page"), int(page)),
            per_page=self._as_int(data.get("perPage"), int(per_page)),
            total_items=self._as_int(data.get("totalItems"), len(items)),
            total_pages=self._as_int(data.get("totalPages"), 1),
        )
        if result.is_truncated:
            LOGGER.warning(
                "%s: showing %d of %d records", ctx, len(result.items), result.total_items
            )
        return result

    def get_record(
        self,
        collection: str,
        record_id: str,
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record:
        ctx = f"get[{collection}:{record_id}]"
        params = {"expand": expand} if expand else None
        resp = self.session.get(self._records_url(collection, record_id), token=token, params=params)
        self._ensure_ok(resp, ctx)
        return self._record(self._json_any(resp, ctx), collection, ctx)

    def create_record(
        self,
        collection: str,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record:
        ctx = f"create[{collection}]"
        params = {"expand": expand} if expand else None
        resp = self.session.post(
            self._records_url(collection), token=token, json_body=dict(fields), params=params
        )
        self._ensure_ok(resp, ctx)
        return self._record(self._json_any(resp, ctx), collection, ctx)

    def update_record(
        self,
        collection: str,
        record_id: str,
        fields: Mapping[str, Any],
        *,
        token: Optional[str],
        expand: Optional[str] = None,
    ) -> Record:
        ctx = f"update[{collection}:{record_id}]"
        params = {"expand": expand} if expand else None
        resp = self.session.patch(
            self._records_url(collection, record_id),
            token=token,
            json_body=dict(fields),
            params=params,
        )
        self._ensure_ok(resp, ctx)
        return self._record(self._json_any(resp, ctx), collection, ctx)

    def delete_record(self, collection: str, record_id: str, *, token: Optional[str]) -> None:
        ctx = f"delete[{collection}:{record_id}]"
        resp = self.session.delete(self._records_url(collection, record_id), token=token)
        self._ensure_ok(resp, ctx)

    # ---- AuthPort ----
    def auth_with_password(self, identity: str, password: str) -> Session:
        ctx = f"auth[{self.auth_collection}]"
        url = self._make_url(f"/api/collections/{quote(self.auth_collection)}/auth-with-password")
        resp = self.session.post(url, json_body={"identity": identity, "password": password})
        self._ensure_ok(resp, ctx)
        return self._session_from(self._json_any(resp, ctx), ctx)

    def auth_refresh(self, token: str) -> Session:
        ctx = f"auth_refresh[{self.auth_collection}]"
        url = self._make_url(f"/api/collections/{quote(self.auth_collection)}/auth-refresh")
        resp = self.session.post(url, token=token)
        self._ensure_ok(resp, ctx)
        return self._session_from(self._json_any(resp, ctx), ctx)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _records_url(self, collection: str, record_id: Optional[str] = None) -> str:
        name = str(collection or "").strip()
        if not name:
            raise ValueError("Collection name must be a non-empty string.")
        path = f"/api/collections/{quote(name)}/records"
        if record_id is not None:
            rid = str(record_id).strip()
            if not rid:
                raise ValueError("Record id must be a non-empty string.")
            path = f"{path}/{quote(rid)}"
        return self._make_url(path)

    @staticmethod
    def _record(data: Any, collection: str, ctx: str) -> Record:
        if not isinstance(data, dict) or not data.get("id"):
            raise ApiError(f"{ctx}: expected record object", payload=data, context=ctx)
        return Record.from_payload(data, collection=collection)

    @staticmethod
    def _session_from(data: Any, ctx: str) -> Session:
        try:
            return Session.from_auth_payload(data)
        except ValueError as exc:
            raise ApiError(f"{ctx}: {exc}", payload=data, context=ctx) from exc

    @staticmethod
    def _as_int(value: Any, default: int) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        LOGGER.debug("%s failed with HTTP %s: %s", ctx, status, payload)
        if 400 <= status < 500:
            raise ApiClientError(
                message,
                status=status,
                code=extract_error_code(payload),
                hint=extract_error_hint(payload),
                payload=payload,
                context=ctx,
            )
        if 500 <= status < 600:
            raise ApiServerError(message, status=status, payload=payload, context=ctx)
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _json_any(resp: requests.Response, ctx: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            snippet = (getattr(resp, "text", "") or "")[:400]
            raise ApiError(f"{ctx}: invalid JSON response: {snippet}", context=ctx) from exc


__all__ = ["AUTH_COLLECTION", "PocketBaseRestAdapter"]
