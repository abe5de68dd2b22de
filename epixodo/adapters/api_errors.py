"""Typed failures raised by the backend REST adapter.

The backend reports errors as ``{"code": 400, "message": "...", "data": {...}}``
where ``data`` maps a field name to ``{"code": ..., "message": ...}``. The
helpers below pull a readable message and per-field hints out of that shape
without ever raising themselves.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ApiError(RuntimeError):
    """Base class for REST adapter failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context

    @property
    def field_errors(self) -> Dict[str, str]:
        return extract_field_errors(self.payload)


class ApiClientError(ApiError):
    """HTTP 4xx from the backend (validation, auth, missing record)."""


class ApiServerError(ApiError):
    """HTTP 5xx from the backend."""


class ApiTimeoutError(ApiError):
    """Transport level timeout or connectivity failure."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


def parse_error_payload(resp: Any) -> Any:
    """Best-effort extraction of the error body."""
    try:
        return resp.json()
    except ValueError:
        snippet = getattr(resp, "text", "") or ""
        return snippet[:400] or None


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def extract_field_errors(payload: Any) -> Dict[str, str]:
    """Map field name to message from the ``data`` block of an error body."""
    if not isinstance(payload, dict):
        return {}
    data = payload.get("data")
    if not isinstance(data, dict):
        return {}
    errors: Dict[str, str] = {}
    for name, detail in data.items():
        if isinstance(detail, dict):
            text = first_string(detail) or stringify(detail.get("code"))
        else:
            text = stringify(detail)
        if text:
            errors[str(name)] = text
    return errors


def extract_error_code(payload: Any) -> Optional[str]:
    """First field-level code (``validation_required``...), else the top code."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if isinstance(data, dict):
        for detail in data.values():
            if isinstance(detail, dict) and detail.get("code"):
                return str(detail["code"])
    value = payload.get("code")
    if value is None or value == "":
        return None
    return str(value)


def extract_error_hint(payload: Any) -> Optional[str]:
    fields = extract_field_errors(payload)
    if fields:
        return stringify([f"{name}: {text}" for name, text in fields.items()])
    if isinstance(payload, str):
        return payload.strip() or None
    return None


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, (list, dict)):
                candidate = first_string(value)
                if candidate:
                    return candidate
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None


def stringify(data: Any, *, limit: int = 200) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, str):
        cleaned = data.strip()
        return cleaned[:limit] if cleaned else None
    if isinstance(data, list):
        parts = []
        for item in data:
            text = stringify(item, limit=limit)
            if text:
                parts.append(text)
            if len(parts) >= 3:
                break
        return "; ".join(parts)[:limit] if parts else None
    text = str(data).strip()
    return text[:limit] if text else None


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiServerError",
    "ApiTimeoutError",
    "build_error_message",
    "extract_error_code",
    "extract_error_hint",
    "extract_field_errors",
    "first_string",
    "parse_error_payload",
    "stringify",
]
