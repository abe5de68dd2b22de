from __future__ import annotations

import logging
import time
from typing import Any, Callable, MutableMapping, Optional

from epixodo.domain.entities import Session
from epixodo.domain.ports import SessionPort

LOGGER = logging.getLogger(__name__)

AUTH_STORAGE_KEY = "pocketbase_auth"


class SessionStore(SessionPort):
    """Keeps the auth payload of one browser in a mutable mapping.

    At runtime the mapping is NiceGUI's ``app.storage.user``; tests pass a
    plain dict. Each browser has its own mapping, so no session is shared
    between users of the same server process.
    """

    def __init__(
        self,
        storage: MutableMapping[str, Any],
        *,
        key: str = AUTH_STORAGE_KEY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock

    def current_user(self) -> Optional[Session]:
        """Return the stored session, or ``None`` when absent or unreadable."""
        payload = self.storage.get(self.key)
        if not payload:
            return None
        try:
            return Session.from_auth_payload(payload)
        except ValueError:
            LOGGER.warning("Discarding malformed auth payload from session storage.")
            self.storage.pop(self.key, None)
            return None

    @property
    def is_valid(self) -> bool:
        session = self.current_user()
        return session is not None and session.is_valid(now=self._clock())

    def save(self, session: Session) -> None:
        self.storage[self.key] = session.to_auth_payload()
        LOGGER.info("Signed in as %s", session.user.display_name)

    def logout(self) -> None:
        """Forget the stored session; a no-op when nobody is signed in."""
        if self.storage.pop(self.key, None) is not None:
            LOGGER.info("Signed out")


__all__ = ["AUTH_STORAGE_KEY", "SessionStore"]
