"""Filter, swimlane and sort policies applied to a board's task list."""

from __future__ import annotations

import logging
from datetime import date

from .classifier import DONE, OTHER_SWIMLANE, assign_swimlanes
from .models import BoardConfig, Task

logger = logging.getLogger(__name__)


def apply_board_policy(tasks: list[Task], board: BoardConfig) -> list[Task]:
    """Run the board's pipeline: tag filter, swimlanes, due-date sort, column sort.

    Each stage is optional per the board configuration. Both sorts are
    stable, so the column order, applied last, dominates.
    """
    result = list(tasks)

    if board.tag_filters:
        result = filter_by_tags(result, board.tag_filters)
        logger.debug(
            "[POLICY] tag filter %s kept %d of %d task(s)",
            board.tag_filters, len(result), len(tasks),
        )

    if board.swimlanes_enabled:
        assign_swimlanes(result, board.swimlanes)

    if board.sort_by_due_date:
        result = sort_by_due_date(result)

    if board.column_sort_order:
        result = sort_by_column_order(result, board.column_sort_order)

    return result


def filter_by_tags(tasks: list[Task], tag_filters: list[str]) -> list[Task]:
    """Keep tasks carrying at least one of the filter tags."""
    if not tag_filters:
        return list(tasks)
    wanted = set(tag_filters)
    return [t for t in tasks if wanted.intersection(t.tags)]


def due_date_value(task: Task) -> date | None:
    """Calendar value of a task's due date, None if absent or not a real date."""
    if not task.due_date:
        return None
    try:
        return date.fromisoformat(task.due_date)
    except ValueError:
        logger.debug("[POLICY] %s has impossible due date %r", task.id, task.due_date)
        return None


def sort_by_due_date(tasks: list[Task]) -> list[Task]:
    """Earliest due date first; tasks without one keep their order at the end."""

    def key(task: Task) -> tuple:
        due = due_date_value(task)
        return (0, due) if due is not None else (1,)

    return sorted(tasks, key=key)


def sort_by_column_order(tasks: list[Task], column_order: list[str]) -> list[Task]:
    """Order tasks by their column's position; unlisted columns go last."""
    positions = {}
    for index, column in enumerate(column_order):
        positions.setdefault(column, index)
    missing = len(column_order)
    return sorted(tasks, key=lambda t: positions.get(t.column, missing))


def group_by_swimlane(tasks: list[Task]) -> dict[str, list[Task]]:
    """Bucket tasks by swimlane name, keeping their order within each bucket."""
    groups: dict[str, list[Task]] = {}
    for task in tasks:
        groups.setdefault(task.swimlane or OTHER_SWIMLANE, []).append(task)
    return groups


def group_by_column(tasks: list[Task], columns: list[str]) -> dict[str, list[Task]]:
    """Bucket tasks by column.

    Every configured column gets a (possibly empty) bucket, in configured
    order; tasks whose column is not configured get buckets after those.
    """
    groups: dict[str, list[Task]] = {column: [] for column in columns}
    for task in tasks:
        groups.setdefault(task.column, []).append(task)
    return groups


def limit_completed(tasks: list[Task], max_items: int) -> list[Task]:
    """Drop Done tasks beyond the first ``max_items``; other columns are untouched."""
    if max_items < 0:
        return list(tasks)
    kept: list[Task] = []
    done = 0
    for task in tasks:
        if task.column == DONE:
            done += 1
            if done > max_items:
                continue
        kept.append(task)
    return kept
