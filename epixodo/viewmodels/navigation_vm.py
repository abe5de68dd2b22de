"""Feature cards shown on the hub page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from epixodo.domain.kinds import KINDS


@dataclass(frozen=True)
class NavCard:
    label: str
    description: str
    icon: str
    path: str


FEATURES: Tuple[NavCard, ...] = (
    NavCard("Dashboard", "Overdue and due-today tasks at a glance", "dashboard", "/dashboard"),
    NavCard("Tasks", "Plan, track and complete your tasks", "task_alt", KINDS.get("tasks").path),
    NavCard("Activities", "Scheduled activities and events", "event", KINDS.get("activities").path),
    NavCard("Matters", "Projects and matters you are working on", "folder", KINDS.get("matters").path),
    NavCard("Notes", "Free-form notes", "sticky_note_2", KINDS.get("notes").path),
)

HUB_PATH = "/principal"
SETTINGS_PATH = "/settings"
# Sign-in flows that happen elsewhere (e.g. OAuth) land here with ?token=...
AUTH_CALLBACK_PATH = "/auth/callback"


def feature_cards() -> Tuple[NavCard, ...]:
    return FEATURES


__all__ = [
    "AUTH_CALLBACK_PATH",
    "FEATURES",
    "HUB_PATH",
    "NavCard",
    "SETTINGS_PATH",
    "feature_cards",
]
