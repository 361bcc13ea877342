"""Parser for checklist lines in markdown documents."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath

from .classifier import column_for_status
from .markers import clean_text, extract_markers
from .models import Task, TaskFile

logger = logging.getLogger(__name__)

# Regex patterns
RE_TASK_LINE = re.compile(r"^(\s*)-\s+\[([^\]]+)\]\s+(.+)$")


def parse_task_line(line: str, path: str = "", line_index: int = 0) -> Task | None:
    """Parse one line into a Task, or return None if it is not a checklist line."""
    m = RE_TASK_LINE.match(line.rstrip("\r"))
    if not m:
        return None
    indent, raw_status, task_text = m.groups()
    status = _normalize_status(raw_status)
    fields = extract_markers(task_text)
    return Task(
        id=f"{path}:{line_index}",
        text=task_text.strip(),
        clean_text=clean_text(task_text),
        source_note=document_name(path),
        status=status,
        path=path,
        line=line_index,
        column=column_for_status(status),
        tags=fields.tags,
        start_date=fields.start_date,
        scheduled_date=fields.scheduled_date,
        due_date=fields.due_date,
        priority=fields.priority,
        linked_notes=fields.linked_notes,
        indent=indent,
    )


def extract_tasks(path: str, content: str) -> list[Task]:
    """Return every task in a document, in line order.

    Lines are split on ``\\n`` only, so indices match what an editor shows.
    """
    tasks: list[Task] = []
    for index, line in enumerate(content.split("\n")):
        task = parse_task_line(line, path, index)
        if task is not None:
            tasks.append(task)
    logger.debug("[PARSE] %s: %d task(s)", path, len(tasks))
    return tasks


def parse_task_document(content: str, source_path: str = "") -> TaskFile:
    """Parse a markdown string into a TaskFile model."""
    return TaskFile(tasks=extract_tasks(source_path, content), source_path=source_path)


def parse_task_file(path: str | Path) -> TaskFile:
    """Parse a markdown file from disk."""
    p = Path(path)
    content = p.read_text(encoding="utf-8")
    return parse_task_document(content, source_path=str(p))


def document_name(path: str) -> str:
    """Display name of a document: its file name without extension."""
    return PurePosixPath(path.replace("\\", "/")).stem


def _normalize_status(raw: str) -> str:
    """Trim the bracket contents; a blank bracket is the Todo status ``" "``."""
    return raw.strip() or " "
