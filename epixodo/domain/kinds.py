"""Central registry of resource kinds and their form fields.

ViewModels ask this registry which collection backs a page, how the list is
sorted/expanded, and which form fields the create/edit modal shows. Use cases
consume the same descriptors when building list queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

FIELD_TEXT = "text"
FIELD_RICH_TEXT = "rich_text"
FIELD_DATE = "date"
FIELD_DATETIME = "datetime"
FIELD_STATUS = "status"
FIELD_RELATION = "relation"
FIELD_RECURRENCE = "recurrence"


@dataclass(frozen=True)
class TaskStatus:
    id: str
    label: str
    color: str


TASK_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus("pending", "Pending", "grey"),
    TaskStatus("waiting_response", "Waiting for response", "orange"),
    TaskStatus("blocked", "Blocked", "red"),
    TaskStatus("completed", "Completed", "green"),
)


def task_status_info(status: Optional[str]) -> TaskStatus:
    """Return the status descriptor, defaulting to ``pending``."""
    for entry in TASK_STATUSES:
        if entry.id == status:
            return entry
    return TASK_STATUSES[0]


def is_completed(fields: Mapping[str, Any]) -> bool:
    return fields.get("status") == "completed" or bool(fields.get("completed"))


@dataclass(frozen=True)
class FormField:
    """One input of the create/edit modal."""

    name: str
    label: str
    kind: str = FIELD_TEXT
    relation: Optional[str] = None
    """Collection name of the related kind for ``relation`` fields."""
    placeholder: str = ""


@dataclass(frozen=True)
class ResourceKind:
    """Definition of one domain module (tasks, activities, matters, notes)."""

    key: str
    collection: str
    label: str
    singular: str
    path: str
    sort: str = "-created"
    expand: Optional[str] = None
    owned: bool = True
    """Records carry a ``user`` relation and lists are filtered by it."""
    content_field: str = "description"
    form_fields: Tuple[FormField, ...] = ()
    defaults: Mapping[str, Any] = field(default_factory=dict)
    exclusive_fields: Tuple[str, ...] = ()
    """Relation fields of which at most one may be set at a time."""

    def field_names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.form_fields)

    def form_field(self, name: str) -> Optional[FormField]:
        for entry in self.form_fields:
            if entry.name == name:
                return entry
        return None

    def owner_filter(self, owner_id: Optional[str]) -> Optional[str]:
        if not self.owned or not owner_id:
            return None
        return relation_filter("user", [owner_id])


class KindRegistry:
    """Registry for resource-kind lookups by key or collection."""

    def __init__(self, kinds: Iterable[ResourceKind]) -> None:
        self._kinds: Dict[str, ResourceKind] = {}
        for kind in kinds:
            self._kinds[self._normalize_key(kind.key)] = kind

    @classmethod
    def default(cls) -> "KindRegistry":
        """Build the registry for the four productivity modules."""
        title = FormField("title", "Title", FIELD_TEXT)
        return cls(
            [
                ResourceKind(
                    key="tasks",
                    collection="tasks",
                    label="Tasks",
                    singular="Task",
                    path="/tasks",
                    sort="due_date",
                    expand="activity,matter",
                    form_fields=(
                        FormField("title", "Title", FIELD_TEXT, placeholder="Task title"),
                        FormField("status", "Status", FIELD_STATUS),
                        FormField("due_date", "Due date", FIELD_DATE),
                        FormField("planned_date", "Planned date", FIELD_DATE),
                        FormField("recurrence", "Recurrence", FIELD_RECURRENCE),
                        FormField("matter", "Matter", FIELD_RELATION, relation="matters"),
                        FormField("activity", "Activity", FIELD_RELATION, relation="activities"),
                        FormField(
                            "description",
                            "Description",
                            FIELD_RICH_TEXT,
                            placeholder="Write a description...",
                        ),
                    ),
                    defaults={"status": "pending"},
                    exclusive_fields=("matter", "activity"),
                ),
                ResourceKind(
                    key="activities",
                    collection="activities",
                    label="Activities",
                    singular="Activity",
                    path="/activities",
                    expand="matter",
                    form_fields=(
                        FormField("title", "Title", FIELD_TEXT, placeholder="Activity name"),
                        FormField("matter", "Matter (optional)", FIELD_RELATION, relation="matters"),
                        FormField("start_date", "Start", FIELD_DATETIME),
                        FormField("end_date", "End", FIELD_DATETIME),
                        FormField(
                            "description",
                            "Description",
                            FIELD_RICH_TEXT,
                            placeholder="Activity details...",
                        ),
                    ),
                ),
                ResourceKind(
                    key="matters",
                    collection="matters",
                    label="Matters",
                    singular="Matter",
                    path="/matters",
                    form_fields=(
                        FormField("title", "Title", FIELD_TEXT, placeholder="Matter name"),
                        FormField("due_date", "Due date", FIELD_DATE),
                        FormField("parent", "Parent matter", FIELD_RELATION, relation="matters"),
                        FormField("description", "Description", FIELD_RICH_TEXT),
                    ),
                ),
                ResourceKind(
                    key="notes",
                    collection="notes",
                    label="Notes",
                    singular="Note",
                    path="/notes",
                    sort="-updated",
                    content_field="content",
                    form_fields=(
                        title,
                        FormField(
                            "content",
                            "Content",
                            FIELD_RICH_TEXT,
                            placeholder="Write the content of your note...",
                        ),
                    ),
                ),
            ]
        )

    def get(self, key: str) -> ResourceKind:
        try:
            return self._kinds[self._normalize_key(key)]
        except KeyError as exc:
            raise KeyError(f"Unknown resource kind '{key}'") from exc

    def by_collection(self, collection: str) -> Optional[ResourceKind]:
        for kind in self._kinds.values():
            if kind.collection == collection:
                return kind
        return None

    def all(self) -> Tuple[ResourceKind, ...]:
        return tuple(self._kinds.values())

    def linked_kinds(self, kind: ResourceKind) -> Tuple[Tuple[ResourceKind, str], ...]:
        """Other kinds holding a relation field that points at ``kind``.

        Each entry pairs the linking kind with the name of that field, e.g.
        ``(tasks, "matter")`` for matters.
        """
        links = []
        for other in self._kinds.values():
            if other.key == kind.key:
                continue
            for entry in other.form_fields:
                if entry.kind == FIELD_RELATION and entry.relation == kind.collection:
                    links.append((other, entry.name))
        return tuple(links)

    @staticmethod
    def _normalize_key(key: str) -> str:
        return str(key or "").strip().lower()


def relation_filter(field_name: str, ids: Iterable[Optional[str]]) -> Optional[str]:
    """PocketBase filter matching ``field_name`` against any of ``ids``."""
    clauses = []
    for value in ids:
        if not value:
            continue
        escaped = str(value).replace('"', '\\"')
        clauses.append(f'{field_name} = "{escaped}"')
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return "(" + " || ".join(clauses) + ")"


def any_of(*filters: Optional[str]) -> Optional[str]:
    parts = [part for part in filters if part]
    if len(parts) <= 1:
        return parts[0] if parts else None
    return "(" + " || ".join(parts) + ")"


def all_of(*filters: Optional[str]) -> Optional[str]:
    parts = [part for part in filters if part]
    return " && ".join(parts) or None

KINDS = KindRegistry.default()

__all__ = [
    "FIELD_DATE",
    "FIELD_DATETIME",
    "FIELD_RECURRENCE",
    "FIELD_RELATION",
    "FIELD_RICH_TEXT",
    "FIELD_STATUS",
    "FIELD_TEXT",
    "FormField",
    "KINDS",
    "KindRegistry",
    "ResourceKind",
    "TASK_STATUSES",
    "TaskStatus",
    "all_of",
    "any_of",
    "is_completed",
    "relation_filter",
    "task_status_info",
]
