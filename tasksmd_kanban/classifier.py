"""Map task statuses to board columns and tasks to swimlanes."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import Swimlane, Task

logger = logging.getLogger(__name__)

TODO = "Todo"
IN_PROGRESS = "In Progress"
DONE = "Done"
CANCELLED = "Cancelled"
WAITING = "Waiting on Feedback"

# Catch-all lane for tasks no configured swimlane claims. Never persisted.
OTHER_SWIMLANE = "Other"

_STATUS_TO_COLUMN = {
    " ": TODO,
    "": TODO,
    "/": IN_PROGRESS,
    "x": DONE,
    "X": DONE,
    "-": CANCELLED,
    "?": WAITING,
}

_COLUMN_TO_STATUS = {
    TODO: " ",
    IN_PROGRESS: "/",
    DONE: "x",
    CANCELLED: "-",
    WAITING: "?",
}

KNOWN_COLUMNS = tuple(_COLUMN_TO_STATUS)


def column_for_status(status: str) -> str:
    """Return the board column for a checkbox status; unknown codes land in Todo."""
    return _STATUS_TO_COLUMN.get(status, TODO)


def status_for_column(column: str) -> str:
    """Return the checkbox status for a column.

    Columns outside the five built-in ones map back to the Todo status, so a
    task dropped on a custom column is written as ``[ ]``.
    """
    return _COLUMN_TO_STATUS.get(column, " ")


def match_swimlane(task: Task, swimlanes: Iterable[Swimlane]) -> Swimlane | None:
    """Return the first enabled swimlane sharing a tag with the task."""
    tags = set(task.tags)
    for lane in swimlanes:
        if lane.enabled and tags.intersection(lane.tags):
            return lane
    return None


def assign_swimlanes(tasks: Iterable[Task], swimlanes: list[Swimlane]) -> None:
    """Set ``task.swimlane`` on each task, first match wins."""
    for task in tasks:
        lane = match_swimlane(task, swimlanes)
        task.swimlane = lane.name if lane else OTHER_SWIMLANE
        logger.debug("[POLICY] %s -> swimlane %s", task.id, task.swimlane)
