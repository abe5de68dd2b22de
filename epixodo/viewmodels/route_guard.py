"""Access gate evaluated at the top of every protected page."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from epixodo.domain.entities import Session
from epixodo.domain.ports import SessionPort

LOGGER = logging.getLogger(__name__)

LOGIN_PATH = "/"


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    session: Optional[Session] = None
    redirect_to: Optional[str] = None


class RouteGuard:
    """Decides whether a page may render for the current browser session.

    A page shows only a spinner until :meth:`check` allows it; no data is
    requested before that. An expired session is cleared on the spot so the
    login page starts clean.
    """

    def __init__(
        self,
        session_store: SessionPort,
        *,
        login_path: str = LOGIN_PATH,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.session_store = session_store
        self.login_path = login_path
        self._clock = clock

    def check(self) -> GuardDecision:
        session = self.session_store.current_user()
        if session is None:
            return GuardDecision(allowed=False, redirect_to=self.login_path)
        if not session.is_valid(now=self._clock()):
            LOGGER.info("Session for %s expired; redirecting to sign-in.", session.user.display_name)
            self.session_store.logout()
            return GuardDecision(allowed=False, redirect_to=self.login_path)
        return GuardDecision(allowed=True, session=session)


__all__ = ["GuardDecision", "LOGIN_PATH", "RouteGuard"]
