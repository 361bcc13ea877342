"""Inline marker vocabulary: extraction from and emission to a task's text.

Every marker a checklist line can carry is described once in ``MARKERS``.
The table is compiled into a single alternation so a line is scanned left
to right exactly once, and ``EMIT_ORDER`` fixes the order markers are
written back in.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# YYYY-MM-DD with a plausible month and day; calendar validity is checked by
# the due-date sort, not here.
DATE_SHAPE = r"\d{4}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12]\d|3[01])(?!\d)"

# Emoji may be followed by a variation selector
VS16 = r"\ufe0f?"

START_SYMBOL = "🛫"
SCHEDULED_SYMBOL = "⏰"
DUE_SYMBOL = "📅"

PRIORITY_SYMBOLS = {
    "High": "🔺",
    "Medium": "🔼",
    "Low": "🔽",
}
PRIORITY_RANK = {"High": 3, "Medium": 2, "Low": 1}


@dataclass(frozen=True)
class MarkerSpec:
    """One entry of the marker table.

    ``pattern`` matches the whole marker; its first group, if any, is the
    value. Markers without a group (priority symbols) yield ``value``.
    """

    field: str
    pattern: str
    value: str | None = None

    @property
    def regex(self) -> re.Pattern[str]:
        return re.compile(self.pattern)


def _date_marker(field_name: str, symbol: str) -> MarkerSpec:
    return MarkerSpec(field_name, re.escape(symbol) + VS16 + r"\s*(" + DATE_SHAPE + ")")


def _priority_marker(level: str) -> MarkerSpec:
    symbol = PRIORITY_SYMBOLS[level]
    return MarkerSpec("priority", re.escape(symbol) + VS16 + r"(?:[ \t]*" + level + r"\b)?", value=level)


MARKERS: list[MarkerSpec] = [
    MarkerSpec("linked_notes", r"\[\[([^\]|]+)(?:\|[^\]]+)?\]\]"),
    _date_marker("start_date", START_SYMBOL),
    _date_marker("scheduled_date", SCHEDULED_SYMBOL),
    _date_marker("due_date", DUE_SYMBOL),
    _priority_marker("High"),
    _priority_marker("Medium"),
    _priority_marker("Low"),
    MarkerSpec("tags", r"#([\w-]+)"),
]

EMIT_ORDER = (
    "linked_notes",
    "start_date",
    "scheduled_date",
    "due_date",
    "priority",
    "tags",
)

RE_WHITESPACE = re.compile(r"\s+")

RE_ANY_MARKER = re.compile(
    "|".join(f"(?P<m{i}>{spec.pattern})" for i, spec in enumerate(MARKERS))
)


@dataclass
class MarkerFields:
    """Structured values carried by a task's inline markers."""

    tags: list[str] = field(default_factory=list)
    linked_notes: list[str] = field(default_factory=list)
    start_date: str | None = None
    scheduled_date: str | None = None
    due_date: str | None = None
    priority: str | None = None


def iter_markers(text: str):
    """Yield ``(spec, value, match)`` for each marker in ``text``, left to right."""
    for m in RE_ANY_MARKER.finditer(text):
        name = next(k for k, v in m.groupdict().items() if v is not None)
        spec = MARKERS[int(name[1:])]
        if spec.value is not None:
            value = spec.value
        else:
            value = spec.regex.fullmatch(m.group(name)).group(1)
        yield spec, value, m


def extract_markers(text: str) -> MarkerFields:
    """Read every recognised marker out of a task's text."""
    fields = MarkerFields()
    for spec, value, _ in iter_markers(text):
        if spec.field == "tags":
            fields.tags.append(value)
        elif spec.field == "linked_notes":
            name = value.strip()
            if name:
                fields.linked_notes.append(name)
        elif spec.field == "priority":
            if fields.priority is not None and fields.priority != value:
                logger.debug(
                    "[PARSE] conflicting priorities %s and %s in %r",
                    fields.priority, value, text,
                )
            # Highest priority wins when several symbols are present
            if fields.priority is None or PRIORITY_RANK[value] > PRIORITY_RANK[fields.priority]:
                fields.priority = value
        elif getattr(fields, spec.field) is None:
            setattr(fields, spec.field, value)
    return fields


def clean_text(text: str) -> str:
    """Strip every recognised marker and collapse whitespace."""
    cleaned = text
    # Removing one marker can splice together another; repeat until none remain
    while True:
        stripped = RE_ANY_MARKER.sub(" ", cleaned)
        if stripped == cleaned:
            break
        cleaned = stripped
    return RE_WHITESPACE.sub(" ", cleaned).strip()


def _emit_linked_notes(fields: MarkerFields) -> str:
    return " ".join(f"[[{note}]]" for note in fields.linked_notes)


def _emit_date(symbol: str, value: str | None) -> str:
    return f"{symbol} {value}" if value else ""


def _emit_priority(fields: MarkerFields) -> str:
    return PRIORITY_SYMBOLS.get(fields.priority or "", "")


def _emit_tags(fields: MarkerFields) -> str:
    return " ".join(f"#{tag.lstrip('#')}" for tag in fields.tags)


_EMITTERS = {
    "linked_notes": _emit_linked_notes,
    "start_date": lambda f: _emit_date(START_SYMBOL, f.start_date),
    "scheduled_date": lambda f: _emit_date(SCHEDULED_SYMBOL, f.scheduled_date),
    "due_date": lambda f: _emit_date(DUE_SYMBOL, f.due_date),
    "priority": _emit_priority,
    "tags": _emit_tags,
}


def emit_markers(fields: MarkerFields) -> str:
    """Render marker fields in ``EMIT_ORDER``, skipping empty groups."""
    parts = [_EMITTERS[name](fields) for name in EMIT_ORDER]
    return " ".join(p for p in parts if p)


def build_task_text(description: str, fields: MarkerFields) -> str:
    """Join a clean description with its re-emitted markers."""
    return " ".join(p for p in (description.strip(), emit_markers(fields)) if p)
