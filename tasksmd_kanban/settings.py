"""Persisted board configuration.

Settings live in a JSON file laid out like the Obsidian plugin's
``data.json`` (camelCase keys), so an existing plugin configuration can be
pointed at directly.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import asdict
from pathlib import Path

from .classifier import OTHER_SWIMLANE
from .models import DEFAULT_COLUMNS, BoardConfig, Swimlane

logger = logging.getLogger(__name__)

LEGACY_KEYS = (
    "defaultColumns",
    "taskStatusMapping",
    "swimlanesEnabled",
    "swimlanes",
    "sortByDueDate",
    "currentBoardId",
)

_BOARD_KEYS = {
    "id": "id",
    "name": "name",
    "columns": "columns",
    "tagFilters": "tag_filters",
    "swimlanesEnabled": "swimlanes_enabled",
    "swimlanes": "swimlanes",
    "sortByDueDate": "sort_by_due_date",
    "columnSortOrder": "column_sort_order",
    "maxCompletedItems": "max_completed_items",
}


class SettingsError(ValueError):
    """The settings file exists but cannot be understood."""


def board_from_dict(data: dict) -> BoardConfig:
    """Build a BoardConfig from its persisted form; missing keys take defaults."""
    kwargs: dict = {}
    for key, attr in _BOARD_KEYS.items():
        if key in data:
            kwargs[attr] = data[key]
    if "swimlanes" in kwargs:
        kwargs["swimlanes"] = _swimlanes_from_list(kwargs["swimlanes"] or [])
    for attr in ("columns", "tag_filters", "column_sort_order"):
        if attr in kwargs:
            kwargs[attr] = [str(v) for v in kwargs[attr] or []]
    return BoardConfig(**kwargs)


def _swimlanes_from_list(raw: list[dict]) -> list[Swimlane]:
    if not isinstance(raw, list):
        raise SettingsError(f"swimlanes must be a list, got {raw!r}")
    lanes: list[Swimlane] = []
    for item in raw:
        if not isinstance(item, dict):
            raise SettingsError(f"swimlane entries must be objects, got {item!r}")
        tags = item.get("tags", [])
        if not isinstance(tags, list):
            raise SettingsError(f"swimlane tags must be a list, got {tags!r}")
        name = str(item.get("name", "")).strip()
        if not name:
            continue
        if name == OTHER_SWIMLANE:
            logger.warning(
                "Ignoring configured swimlane named '%s': that name is reserved "
                "for tasks no swimlane matches",
                OTHER_SWIMLANE,
            )
            continue
        lanes.append(
            Swimlane(
                name=name,
                tags=[str(t) for t in tags],
                enabled=bool(item.get("enabled", True)),
            )
        )
    return lanes


def board_to_dict(board: BoardConfig) -> dict:
    """Return the persisted (camelCase) form of a board."""
    raw = asdict(board)
    raw["swimlanes"] = [
        lane for lane in raw["swimlanes"] if lane["name"] != OTHER_SWIMLANE
    ]
    return {key: raw[attr] for key, attr in _BOARD_KEYS.items()}


def _migrate_legacy(data: dict) -> bool:
    """Fold pre-multi-board settings into a single default board.

    Returns True when ``data`` was changed.
    """
    if "defaultColumns" not in data or data.get("boards"):
        return False
    columns = data["defaultColumns"] or list(DEFAULT_COLUMNS)
    data["boards"] = [
        {
            "id": "default",
            "name": "Default Board",
            "columns": columns,
            "tagFilters": [],
            "swimlanesEnabled": bool(data.get("swimlanesEnabled", False)),
            "swimlanes": data.get("swimlanes") or [],
            "sortByDueDate": bool(data.get("sortByDueDate", False)),
            "columnSortOrder": list(columns),
            "maxCompletedItems": 50,
        }
    ]
    for key in LEGACY_KEYS:
        data.pop(key, None)
    logger.info("Migrated legacy settings into board 'default'")
    return True


class SettingsManager:
    """Loads, saves and broadcasts changes to the board list."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None
        self.boards: list[BoardConfig] = [BoardConfig()]
        self._callbacks: list[Callable[[], None]] = []

    def load(self) -> None:
        """Read settings from ``path``; a missing file leaves the defaults."""
        if self.path is None or not self.path.exists():
            logger.debug("No settings file, using the default board")
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid settings file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsError(f"Invalid settings file {self.path}: expected an object")

        migrated = _migrate_legacy(data)
        raw_boards = data.get("boards") or []
        if not isinstance(raw_boards, list) or not all(isinstance(b, dict) for b in raw_boards):
            raise SettingsError(f"Invalid settings file {self.path}: boards must be a list of objects")
        boards = [board_from_dict(b) for b in raw_boards]
        self.boards = boards or [BoardConfig()]
        if migrated:
            self.save()

    def save(self) -> None:
        """Persist the boards (when a path is set) and notify listeners."""
        if self.path is not None:
            payload = {"boards": [board_to_dict(b) for b in self.boards]}
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        self._notify()

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def default_board(self) -> BoardConfig:
        return self.boards[0] if self.boards else BoardConfig()

    def get_board(self, board_id: str) -> BoardConfig | None:
        return next((b for b in self.boards if b.id == board_id), None)

    def add_board(self, board: BoardConfig) -> None:
        self.boards.append(board)
        self.save()

    def update_board(self, board: BoardConfig) -> bool:
        for i, existing in enumerate(self.boards):
            if existing.id == board.id:
                self.boards[i] = board
                self.save()
                return True
        return False

    def delete_board(self, board_id: str) -> bool:
        """Remove a board. The last remaining board is never deleted."""
        if len(self.boards) <= 1:
            return False
        remaining = [b for b in self.boards if b.id != board_id]
        if len(remaining) == len(self.boards):
            return False
        self.boards = remaining
        self.save()
        return True

    # ------------------------------------------------------------------
    # Change listeners
    # ------------------------------------------------------------------

    def register_change_callback(self, callback: Callable[[], None]) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_change_callback(self, callback: Callable[[], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception:
                logger.exception("Settings change callback %r failed", callback)
