"""Domain value objects shared across adapters, use-cases, and view models."""

from __future__ import annotations

import base64
import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class UserIdentity:
    """Authenticated user as reported by the backend auth collection."""

    id: str
    """Backend-assigned user identifier, used as the owner of every record."""

    email: str = ""
    name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("UserIdentity.id must be a non-empty string.")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserIdentity":
        if not isinstance(payload, Mapping):
            raise ValueError("User payload must be a mapping.")
        return cls(
            id=str(payload.get("id") or ""),
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
        )

    def to_payload(self) -> Dict[str, str]:
        return {"id": self.id, "email": self.email, "name": self.name}

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id


@dataclass(frozen=True)
class Session:
    """Bearer credential plus the identity it was issued for."""

    token: str
    user: UserIdentity

    def __post_init__(self) -> None:
        if not isinstance(self.token, str) or not self.token.strip():
            raise ValueError("Session.token must be a non-empty string.")

    @classmethod
    def from_auth_payload(cls, payload: Mapping[str, Any]) -> "Session":
        """Build a session from ``{"token": ..., "record"|"model": {...}}``."""
        if not isinstance(payload, Mapping):
            raise ValueError("Auth payload must be a mapping.")
        user = payload.get("record") or payload.get("model")
        if not isinstance(user, Mapping):
            raise ValueError("Auth payload is missing the user record.")
        return cls(token=str(payload.get("token") or ""), user=UserIdentity.from_payload(user))

    def to_auth_payload(self) -> Dict[str, Any]:
        return {"token": self.token, "model": self.user.to_payload()}

    def expires_at(self) -> Optional[float]:
        """Return the JWT ``exp`` claim, or ``None`` for opaque tokens."""
        claims = _jwt_claims(self.token)
        exp = claims.get("exp")
        if isinstance(exp, (int, float)) and not isinstance(exp, bool):
            return float(exp)
        return None

    def is_valid(self, now: Optional[float] = None) -> bool:
        exp = self.expires_at()
        if exp is None:
            return True
        current = time.time() if now is None else now
        return exp > current


def _jwt_claims(token: str) -> Dict[str, Any]:
    # Signature is not checked; the backend stays the authority.
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        decoded = base64.urlsafe_b64decode(segment.encode("ascii"))
        claims = json.loads(decoded.decode("utf-8"))
    except (ValueError, UnicodeError):
        return {}
    return claims if isinstance(claims, dict) else {}


@dataclass(frozen=True)
class Record:
    """One persisted item of a collection (task, activity, matter, note)."""

    id: str
    """Backend-assigned identifier; never generated client-side."""

    collection: str
    fields: Dict[str, Any] = field(default_factory=dict)
    """Flat record payload as returned by the backend, minus ``id``."""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("Record.id must be a non-empty string.")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, collection: str = "") -> "Record":
        if not isinstance(payload, Mapping):
            raise ValueError("Record payload must be a mapping.")
        fields = {key: value for key, value in payload.items() if key != "id"}
        name = collection or str(payload.get("collectionName") or "")
        return cls(id=str(payload.get("id") or ""), collection=name, fields=fields)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def title(self) -> str:
        return str(self.fields.get("title") or "")

    @property
    def created(self) -> str:
        return str(self.fields.get("created") or "")

    @property
    def updated(self) -> str:
        return str(self.fields.get("updated") or "")

    def expanded(self, relation: str) -> Optional[Dict[str, Any]]:
        """Return the expanded relation record, if the backend included it."""
        expand = self.fields.get("expand")
        if not isinstance(expand, Mapping):
            return None
        value = expand.get(relation)
        return dict(value) if isinstance(value, Mapping) else None

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.fields)
        payload["id"] = self.id
        return payload


@dataclass(frozen=True)
class RecordPage:
    """One page of a collection listing."""

    items: List[Record] = field(default_factory=list)
    page: int = 1
    per_page: int = 0
    total_items: int = 0
    total_pages: int = 0

    @property
    def is_truncated(self) -> bool:
        """True when items remain beyond the end of this page.

        Earlier pages count as already seen, so page 2 of a two-page listing is
        not truncated even though it holds fewer items than ``total_items``.
        """
        seen = max(self.page - 1, 0) * self.per_page + len(self.items)
        return seen < self.total_items


__all__ = ["Record", "RecordPage", "Session", "UserIdentity"]
