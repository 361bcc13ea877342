"""Tests for the board policy pipeline (filter, swimlanes, sorting, grouping)."""

from tasksmd_kanban.classifier import column_for_status
from tasksmd_kanban.models import BoardConfig, Swimlane, Task
from tasksmd_kanban.policy import (
    apply_board_policy,
    due_date_value,
    filter_by_tags,
    group_by_column,
    group_by_swimlane,
    limit_completed,
    sort_by_column_order,
    sort_by_due_date,
)


def _make_task(task_id, status=" ", tags=None, due=None, column=None):
    return Task(
        id=task_id,
        text=task_id,
        clean_text=task_id,
        source_note="Note",
        status=status,
        path="Note.md",
        line=0,
        column=column or column_for_status(status),
        tags=list(tags or []),
        due_date=due,
    )


def _ids(tasks):
    return [t.id for t in tasks]


def _board(**kwargs):
    defaults = dict(sort_by_due_date=False, column_sort_order=[])
    defaults.update(kwargs)
    return BoardConfig(**defaults)


# ---------------------------------------------------------------------------
# Tag filter
# ---------------------------------------------------------------------------


def test_filter_keeps_any_matching_tag():
    tasks = [
        _make_task("a", tags=["work"]),
        _make_task("b", tags=["home"]),
        _make_task("c", tags=["urgent", "home"]),
        _make_task("d"),
    ]
    kept = filter_by_tags(tasks, ["work", "urgent"])
    assert _ids(kept) == ["a", "c"]


def test_empty_filter_keeps_everything():
    tasks = [_make_task("a"), _make_task("b", tags=["x"])]
    assert _ids(filter_by_tags(tasks, [])) == ["a", "b"]


def test_policy_filter_is_exact_narrowing():
    tasks = [
        _make_task("a", tags=["x"]),
        _make_task("b", tags=["y"]),
        _make_task("c", tags=["y", "z"]),
        _make_task("d", tags=[]),
    ]
    board = _board(tag_filters=["z", "x"])
    result = apply_board_policy(tasks, board)
    wanted = set(board.tag_filters)
    assert all(wanted & set(t.tags) for t in result)
    assert _ids(result) == [t.id for t in tasks if wanted & set(t.tags)]


# ---------------------------------------------------------------------------
# Due-date sort
# ---------------------------------------------------------------------------


def test_due_date_sort_orders_by_calendar_and_puts_missing_last():
    tasks = [
        _make_task("none1"),
        _make_task("mar", due="2024-03-01"),
        _make_task("jan", due="2024-01-15"),
        _make_task("none2"),
        _make_task("dec", due="2023-12-31"),
    ]
    assert _ids(sort_by_due_date(tasks)) == ["dec", "jan", "mar", "none1", "none2"]


def test_due_date_sort_is_stable_for_equal_dates():
    tasks = [
        _make_task("first", due="2024-01-01"),
        _make_task("second", due="2024-01-01"),
    ]
    assert _ids(sort_by_due_date(tasks)) == ["first", "second"]


def test_impossible_due_date_counts_as_missing():
    task = _make_task("feb30", due="2024-02-30")
    assert due_date_value(task) is None
    tasks = [task, _make_task("real", due="2030-01-01")]
    assert _ids(sort_by_due_date(tasks)) == ["real", "feb30"]


# ---------------------------------------------------------------------------
# Column-order sort
# ---------------------------------------------------------------------------


def test_column_order_sort():
    tasks = [
        _make_task("p", status="/"),
        _make_task("t1"),
        _make_task("d", status="x"),
        _make_task("t2"),
    ]
    result = sort_by_column_order(tasks, ["Done", "Todo"])
    assert _ids(result) == ["d", "t1", "t2", "p"]


def test_column_sort_dominates_due_sort():
    tasks = [
        _make_task("todo-late", due="2024-05-01"),
        _make_task("done-early", status="x", due="2024-01-01"),
        _make_task("todo-early", due="2024-02-01"),
        _make_task("todo-none"),
    ]
    board = _board(sort_by_due_date=True, column_sort_order=["Todo", "In Progress", "Done"])
    result = apply_board_policy(tasks, board)
    assert _ids(result) == ["todo-early", "todo-late", "todo-none", "done-early"]


# ---------------------------------------------------------------------------
# Swimlanes and grouping
# ---------------------------------------------------------------------------


def test_swimlanes_only_assigned_when_enabled():
    lanes = [Swimlane("Work", ["work"])]
    tasks = [_make_task("a", tags=["work"]), _make_task("b")]

    apply_board_policy(tasks, _board(swimlanes=lanes))
    assert [t.swimlane for t in tasks] == [None, None]

    result = apply_board_policy(tasks, _board(swimlanes=lanes, swimlanes_enabled=True))
    assert [t.swimlane for t in result] == ["Work", "Other"]


def test_policy_does_not_reorder_input_list():
    tasks = [_make_task("b", due="2024-02-01"), _make_task("a", due="2024-01-01")]
    apply_board_policy(tasks, _board(sort_by_due_date=True))
    assert _ids(tasks) == ["b", "a"]


def test_group_by_swimlane_keeps_order():
    tasks = [
        _make_task("a"),
        _make_task("b"),
        _make_task("c"),
    ]
    tasks[0].swimlane = "Work"
    tasks[2].swimlane = "Work"
    groups = group_by_swimlane(tasks)
    assert list(groups) == ["Work", "Other"]
    assert _ids(groups["Work"]) == ["a", "c"]
    assert _ids(groups["Other"]) == ["b"]


def test_group_by_column_includes_empty_and_unknown_columns():
    tasks = [
        _make_task("c", column="Cancelled", status="-"),
        _make_task("t"),
    ]
    groups = group_by_column(tasks, ["Todo", "In Progress", "Done"])
    assert list(groups) == ["Todo", "In Progress", "Done", "Cancelled"]
    assert groups["In Progress"] == []
    assert _ids(groups["Cancelled"]) == ["c"]


def test_limit_completed():
    tasks = [
        _make_task("d1", status="x"),
        _make_task("t"),
        _make_task("d2", status="x"),
        _make_task("d3", status="X"),
    ]
    assert _ids(limit_completed(tasks, 2)) == ["d1", "t", "d2"]
    assert _ids(limit_completed(tasks, 0)) == ["t"]
    assert _ids(limit_completed(tasks, -1)) == ["d1", "t", "d2", "d3"]


def test_default_board_runs_full_pipeline():
    tasks = [
        _make_task("done", status="x", due="2024-01-01"),
        _make_task("todo", due="2024-06-01"),
        _make_task("doing", status="/"),
    ]
    result = apply_board_policy(tasks, BoardConfig())
    assert _ids(result) == ["todo", "doing", "done"]
