"""CLI entry point for tasksmd-kanban."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import re
import sys
from dataclasses import asdict, replace
from datetime import date
from pathlib import Path

from .classifier import OTHER_SWIMLANE
from .markers import DATE_SHAPE
from .models import BoardConfig, Task
from .policy import group_by_column, group_by_swimlane, limit_completed
from .settings import SettingsError, SettingsManager
from .sync import find_task, move_task, refresh_board, save_task
from .vault import DEFAULT_REST_URL, DirectoryStore, RestVaultStore, StoreError
from .writeback import task_text_for

RE_DATE = re.compile(DATE_SHAPE)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasksmd-kanban",
        description="Kanban board over the checklist tasks in a markdown vault.",
    )
    parser.add_argument(
        "--vault",
        type=str,
        default=None,
        help="Path to the vault directory (or set TASKSMD_KANBAN_VAULT)",
    )
    parser.add_argument(
        "--rest-url",
        type=str,
        default=None,
        help="Use the Obsidian Local REST API at this URL instead of a directory "
        f"(e.g. {DEFAULT_REST_URL})",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Local REST API key (or set TASKSMD_KANBAN_API_KEY)",
    )
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip TLS verification (the REST plugin uses a self-signed certificate)",
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Path to the board settings JSON file (defaults to <vault>/.tasksmd-kanban.json)",
    )
    parser.add_argument(
        "--board",
        type=str,
        default=None,
        help="Board id to use (defaults to the first configured board)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print the board")
    show.add_argument(
        "--all",
        action="store_true",
        help="Show every Done task instead of capping at the board's maxCompletedItems",
    )
    show.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Also write the board's tasks to a JSON file",
    )

    move = sub.add_parser("move", help="Move a task to another column")
    move.add_argument("task_id", help="Task id as printed by 'show' (path:line)")
    move.add_argument("column", help="Target column name")
    move.add_argument("--swimlane", default=None, help="Target swimlane name")

    edit = sub.add_parser("edit", help="Edit a task's text and metadata")
    edit.add_argument("task_id", help="Task id as printed by 'show' (path:line)")
    edit.add_argument("--text", default=None, help="New description")
    edit.add_argument("--status", default=None, help="New status character, e.g. 'x' or '/'")
    edit.add_argument("--start", default=None, help="Start date YYYY-MM-DD ('' clears)")
    edit.add_argument("--scheduled", default=None, help="Scheduled date YYYY-MM-DD ('' clears)")
    edit.add_argument("--due", default=None, help="Due date YYYY-MM-DD ('' clears)")
    edit.add_argument(
        "--priority",
        default=None,
        choices=["High", "Medium", "Low", ""],
        help="Priority ('' clears)",
    )
    edit.add_argument("--tags", default=None, help="Comma-separated tags ('' clears)")
    edit.add_argument("--links", default=None, help="Comma-separated linked note names ('' clears)")

    sub.add_parser("boards", help="List configured boards")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    vault = args.vault or os.environ.get("TASKSMD_KANBAN_VAULT")
    settings_path = args.settings
    if not settings_path and vault:
        settings_path = str(Path(vault) / ".tasksmd-kanban.json")

    settings = SettingsManager(settings_path)
    try:
        settings.load()
    except SettingsError as e:
        logging.error("%s", e)
        return 1

    if args.command == "boards":
        for board in settings.boards:
            print(f"{board.id}\t{board.name}\t{', '.join(board.columns)}")
        return 0

    board = settings.get_board(args.board) if args.board else settings.default_board()
    if board is None:
        logging.error("Board not found: %s", args.board)
        return 1

    if args.rest_url:
        api_key = args.api_key or os.environ.get("TASKSMD_KANBAN_API_KEY")
        if not api_key:
            logging.error(
                "No REST API key provided. Use --api-key or set TASKSMD_KANBAN_API_KEY"
            )
            return 1
        store = RestVaultStore(api_key, base_url=args.rest_url, verify=not args.no_verify)
    else:
        if not vault:
            logging.error("No vault given. Use --vault or set TASKSMD_KANBAN_VAULT")
            return 1
        if not Path(vault).is_dir():
            logging.error("Vault directory not found: %s", vault)
            return 1
        store = DirectoryStore(vault)

    return asyncio.run(_run(args, store, board))


async def _run(args: argparse.Namespace, store, board: BoardConfig) -> int:
    try:
        tasks = await refresh_board(store, board)
        if args.command == "show":
            return _show(args, tasks, board)
        if args.command == "move":
            return await _move(args, store, tasks)
        if args.command == "edit":
            return await _edit(args, store, tasks)
        return 1
    except StoreError as e:
        logging.error("%s", e)
        return 1
    finally:
        if isinstance(store, RestVaultStore):
            await store.close()


def _show(args: argparse.Namespace, tasks: list[Task], board: BoardConfig) -> int:
    visible = tasks if args.all else limit_completed(tasks, board.max_completed_items)
    print(f"# {board.name}")
    if board.swimlanes_enabled:
        lanes = group_by_swimlane(visible)
        names = [lane.name for lane in board.swimlanes if lane.enabled]
        names += [n for n in lanes if n not in names and n != OTHER_SWIMLANE]
        names.append(OTHER_SWIMLANE)
        for name in names:
            if name not in lanes:
                continue
            print(f"\n## {name}")
            _print_columns(lanes[name], board.columns)
    else:
        _print_columns(visible, board.columns)

    if args.output_json:
        out = [asdict(t) for t in visible]
        Path(args.output_json).write_text(json.dumps(out, indent=2, ensure_ascii=False), encoding="utf-8")
        logging.info("Tasks written to %s", args.output_json)
    return 0


def _print_columns(tasks: list[Task], columns: list[str]) -> None:
    for column, column_tasks in group_by_column(tasks, columns).items():
        print(f"\n### {column} ({len(column_tasks)})")
        for task in column_tasks:
            print(f"  - {task_text_for(task)}  [{task.id}]")


async def _move(args: argparse.Namespace, store, tasks: list[Task]) -> int:
    task = find_task(tasks, args.task_id)
    if task is None:
        logging.error("Task not found: %s", args.task_id)
        return 1
    result = await move_task(store, task, args.column, args.swimlane)
    return 0 if result.ok else 1


def _valid_date(raw: str) -> bool:
    if not RE_DATE.fullmatch(raw):
        return False
    try:
        date.fromisoformat(raw)
    except ValueError:
        return False
    return True


def _split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


async def _edit(args: argparse.Namespace, store, tasks: list[Task]) -> int:
    task = find_task(tasks, args.task_id)
    if task is None:
        logging.error("Task not found: %s", args.task_id)
        return 1

    changes: dict = {}
    if args.text is not None:
        changes["clean_text"] = args.text.strip()
    if args.status is not None:
        status = args.status or " "
        if len(status) != 1 or status in "]\r\n":
            logging.error("Invalid status %r: expected a single character", args.status)
            return 1
        changes["status"] = status
    dates = (
        (args.start, "start_date"),
        (args.scheduled, "scheduled_date"),
        (args.due, "due_date"),
    )
    for option, attr in dates:
        if option is None:
            continue
        if option and not _valid_date(option):
            logging.error("Invalid date %r: expected YYYY-MM-DD", option)
            return 1
        changes[attr] = option or None
    if args.priority is not None:
        changes["priority"] = args.priority or None
    if args.tags is not None:
        changes["tags"] = [t.lstrip("#") for t in _split_list(args.tags)]
    if args.links is not None:
        changes["linked_notes"] = _split_list(args.links)

    result = await save_task(store, replace(task, **changes))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
