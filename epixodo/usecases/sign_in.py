"""Use cases that establish a browser session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from epixodo.adapters.api_errors import ApiClientError
from epixodo.domain.entities import Session
from epixodo.domain.ports import AuthPort, SessionPort, UseCaseError
from epixodo.usecases.error_mapping import map_api_error


@dataclass
class SignIn:
    """Exchange email/password for a session and store it."""

    auth_port: AuthPort
    session_store: SessionPort

    def __call__(self, identity: str, password: str) -> Session:
        identity = str(identity or "").strip()
        if not identity or not password:
            raise UseCaseError("AUTH_MISSING_CREDENTIALS", "Enter your email and password.")
        try:
            session = self.auth_port.auth_with_password(identity, password)
        except ApiClientError as exc:
            # The backend answers bad credentials with a plain 400.
            if exc.status in (400, 401, 403):
                raise UseCaseError("AUTH_FAILED", "Invalid email or password.") from exc
            raise map_api_error(exc, default_code="AUTH_FAILED") from exc
        except Exception as exc:
            raise map_api_error(
                exc, default_code="AUTH_FAILED", default_message="Sign-in failed."
            ) from exc
        self.session_store.save(session)
        return session


@dataclass
class AdoptSession:
    """Accept a token issued elsewhere, e.g. handed to ``/auth/callback``.

    ``payload`` needs only a ``token``; any user record it carries is ignored
    because the token is confirmed with an auth refresh, and the refreshed
    session is what gets stored. A forged or stale token never reaches the
    session store.
    """

    auth_port: AuthPort
    session_store: SessionPort

    def __call__(self, payload: Mapping[str, Any]) -> Session:
        token = payload.get("token") if isinstance(payload, Mapping) else None
        token = str(token or "").strip()
        if not token:
            raise UseCaseError("AUTH_FAILED", "Invalid auth payload: token missing.")
        try:
            session = self.auth_port.auth_refresh(token)
        except Exception as exc:
            raise map_api_error(
                exc, default_code="AUTH_FAILED", default_message="Session could not be confirmed."
            ) from exc
        self.session_store.save(session)
        return session


__all__ = ["AdoptSession", "SignIn"]
