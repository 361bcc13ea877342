"""Keep a board's task list in step with the documents it was read from."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .classifier import status_for_column
from .models import BoardConfig, Task
from .parser import extract_tasks, parse_task_line
from .policy import apply_board_policy
from .vault import DocumentStore, StoreError
from .writeback import get_line, reconstruct_line, replace_line, set_line_status

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Outcome of writing one task back to its document."""

    ok: bool
    message: str
    task: Task | None = None


async def collect_tasks(store: DocumentStore) -> list[Task]:
    """Parse every document in the store, in document-then-line order.

    A document that cannot be read is logged and skipped so the rest of the
    board still loads.
    """
    tasks: list[Task] = []
    paths = await store.list_documents()
    for path in paths:
        try:
            content = await store.read(path)
        except StoreError as e:
            logger.error("Skipping %s: %s", path, e)
            continue
        tasks.extend(extract_tasks(path, content))
    logger.info("Found %d tasks in %d document(s)", len(tasks), len(paths))
    return tasks


async def refresh_board(store: DocumentStore, board: BoardConfig) -> list[Task]:
    """Re-read the whole store and apply the board's policies."""
    tasks = await collect_tasks(store)
    return apply_board_policy(tasks, board)


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    return next((t for t in tasks if t.id == task_id), None)


async def _read_line(store: DocumentStore, task: Task) -> tuple[str, str]:
    content = await store.read(task.path)
    line = get_line(content, task.line)
    if line is None:
        raise LookupError(f"{task.path} no longer has line {task.line + 1}")
    return content, line


async def move_task(
    store: DocumentStore,
    task: Task,
    new_column: str,
    new_swimlane: str | None = None,
) -> UpdateResult:
    """Move a task to another column by rewriting its status bracket.

    Only the bracket contents change on disk. ``task`` is updated in place
    only when the write succeeded.
    """
    status = status_for_column(new_column)
    try:
        content, line = await _read_line(store, task)
        new_line = set_line_status(line, status)
        if new_line is None:
            raise LookupError(f"line {task.line + 1} of {task.path} is no longer a task")
        if new_line != line:
            await store.write(task.path, replace_line(content, task.line, new_line))
    except (StoreError, LookupError, ValueError) as e:
        msg = f"Failed to move task: {e}"
        logger.error(msg)
        return UpdateResult(ok=False, message=msg)

    task.status = status
    task.column = new_column
    if new_swimlane and new_swimlane != task.swimlane:
        task.swimlane = new_swimlane
        msg = f"Task moved to {new_column} in {new_swimlane}"
    else:
        msg = f"Task moved to {new_column}"
    logger.info("%s (%s)", msg, task.id)
    return UpdateResult(ok=True, message=msg, task=task)


async def save_task(store: DocumentStore, edited: Task) -> UpdateResult:
    """Write an edited task back over its source line.

    The line is re-read from the store first so unrelated edits made since
    the last parse are not overwritten. On success the result carries the
    record re-parsed from the written line; the caller's copy is never modified.
    """
    try:
        content, line = await _read_line(store, edited)
        new_line = reconstruct_line(edited, line)
        written = parse_task_line(new_line, edited.path, edited.line)
        if written is None:
            raise ValueError("the edited task would not be a checklist line")
        if new_line != line:
            await store.write(edited.path, replace_line(content, edited.line, new_line))
        else:
            logger.debug("[WRITEBACK] %s unchanged", edited.id)
    except (StoreError, LookupError, ValueError) as e:
        msg = f"Failed to update task: {e}"
        logger.error(msg)
        return UpdateResult(ok=False, message=msg)

    updated = replace(written, swimlane=edited.swimlane)
    logger.info("Task updated successfully (%s)", updated.id)
    return UpdateResult(ok=True, message="Task updated successfully", task=updated)
