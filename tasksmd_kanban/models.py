"""Data models for tasks parsed from checklist lines and the boards they land on."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_COLUMNS = ["Todo", "In Progress", "Done"]


@dataclass
class Task:
    """A single checklist line parsed from a markdown document."""

    id: str
    text: str
    clean_text: str
    source_note: str
    status: str
    path: str
    line: int
    column: str
    tags: list[str] = field(default_factory=list)
    start_date: str | None = None
    scheduled_date: str | None = None
    due_date: str | None = None
    priority: str | None = None
    linked_notes: list[str] = field(default_factory=list)
    swimlane: str | None = None
    indent: str = ""

    def fields_dict(self) -> dict:
        """Return the fields that survive a write-back and re-parse."""
        return {
            "status": self.status,
            "clean_text": self.clean_text,
            "tags": list(self.tags),
            "start_date": self.start_date,
            "scheduled_date": self.scheduled_date,
            "due_date": self.due_date,
            "priority": self.priority,
            "linked_notes": list(self.linked_notes),
        }


@dataclass
class TaskFile:
    """All tasks found in one document."""

    tasks: list[Task] = field(default_factory=list)
    source_path: str = ""

    @property
    def by_column(self) -> dict[str, list[Task]]:
        groups: dict[str, list[Task]] = {}
        for task in self.tasks:
            groups.setdefault(task.column, []).append(task)
        return groups

    @property
    def by_id(self) -> dict[str, Task]:
        return {t.id: t for t in self.tasks}


@dataclass
class Swimlane:
    """A horizontal board lane selected by tag match."""

    name: str
    tags: list[str] = field(default_factory=list)
    enabled: bool = True


def _default_swimlanes() -> list[Swimlane]:
    return [
        Swimlane(name="Work Tasks", tags=["work"]),
        Swimlane(name="Personal Tasks", tags=["personal"]),
    ]


@dataclass
class BoardConfig:
    """Persisted configuration of one board."""

    id: str = "default"
    name: str = "Default Board"
    columns: list[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))
    tag_filters: list[str] = field(default_factory=list)
    swimlanes_enabled: bool = False
    swimlanes: list[Swimlane] = field(default_factory=_default_swimlanes)
    sort_by_due_date: bool = True
    column_sort_order: list[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))
    max_completed_items: int = 50
