"""Write edited tasks back into the line they were parsed from."""

from __future__ import annotations

import logging
import re

from .markers import MarkerFields, build_task_text
from .models import Task

logger = logging.getLogger(__name__)

# Bullet + bracket, bracket contents, closing bracket + separator, task text
RE_TASK_PARTS = re.compile(r"^(\s*-\s+\[)([^\]]+)(\]\s+)(.+)$")


def task_text_for(task: Task) -> str:
    """Rebuild the text after the status bracket from a task's fields."""
    fields = MarkerFields(
        tags=list(task.tags),
        linked_notes=list(task.linked_notes),
        start_date=task.start_date or None,
        scheduled_date=task.scheduled_date or None,
        due_date=task.due_date or None,
        priority=task.priority or None,
    )
    return build_task_text(task.clean_text, fields)


def check_status(status: str) -> str:
    """Return ``status`` if it can sit between the brackets of a checklist line.

    Raises:
        ValueError: the status is empty, or would close the bracket or the line.
    """
    if not status or "]" in status or "\n" in status or "\r" in status:
        raise ValueError(f"invalid task status {status!r}")
    return status


def _split_eol(line: str) -> tuple[str, str]:
    if line.endswith("\r"):
        return line[:-1], "\r"
    return line, ""


def reconstruct_line(task: Task, current_line: str) -> str:
    """Return ``current_line`` rewritten to carry the task's status and fields.

    Indentation, bullet and bracket syntax of the current line are kept. If
    the line no longer looks like a checklist line it is replaced with a
    fresh one using the task's original indentation.
    """
    check_status(task.status)
    body, eol = _split_eol(current_line)
    new_text = task_text_for(task)
    m = RE_TASK_PARTS.match(body)
    if m:
        prefix, _, separator, _ = m.groups()
        return f"{prefix}{task.status}{separator}{new_text}{eol}"

    logger.warning(
        "[WRITEBACK] %s: line is no longer a checklist line, rewriting it whole",
        task.id,
    )
    return f"{task.indent}- [{task.status}] {new_text}{eol}"


def set_line_status(current_line: str, status: str) -> str | None:
    """Replace only the bracket contents of a checklist line.

    Returns None when the line is not a checklist line. Raises ValueError
    for a status that cannot sit between the brackets.
    """
    check_status(status)
    body, eol = _split_eol(current_line)
    m = RE_TASK_PARTS.match(body)
    if not m:
        return None
    prefix, _, separator, text = m.groups()
    return f"{prefix}{status}{separator}{text}{eol}"


def replace_line(content: str, line_index: int, new_line: str) -> str:
    """Swap one line of ``content``; every other line is left byte-identical.

    Raises:
        IndexError: the document no longer has that line.
    """
    lines = content.split("\n")
    if not 0 <= line_index < len(lines):
        raise IndexError(f"line {line_index} is out of range ({len(lines)} lines)")
    lines[line_index] = new_line
    return "\n".join(lines)


def get_line(content: str, line_index: int) -> str | None:
    """Return one line of ``content`` or None if the index is out of range."""
    lines = content.split("\n")
    if 0 <= line_index < len(lines):
        return lines[line_index]
    return None
