"""SQLite store for targets, games and distance markers.

One connection is shared by every caller and guarded by a lock. sqlite errors
are re-raised as ``StorageError`` with the original chained.
"""
from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Union

from shooting_range.core.logger import APP_LOGGER
from .models import DistanceMarker, Game, GameTarget, GameTargetInput, Target, validate_game

IN_MEMORY = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS targets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    node_id INTEGER NOT NULL,
    distance REAL NOT NULL,
    image_num INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    total_time INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE TABLE IF NOT EXISTS game_targets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id INTEGER NOT NULL REFERENCES games(id) ON DELETE CASCADE,
    target_id INTEGER NOT NULL REFERENCES targets(id),
    start_time INTEGER NOT NULL,
    end_time INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS distance_markers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    marker_number INTEGER NOT NULL UNIQUE,
    distance REAL NOT NULL
);
"""


class StorageError(RuntimeError):
    """Raised when the database rejects or fails an operation."""


class NotFoundError(StorageError):
    """Raised when a row looked up by id does not exist."""


class RangeStore:
    def __init__(self, db_path: Union[Path, str] = IN_MEMORY):
        self.db_path = str(db_path)
        if self.db_path != IN_MEMORY:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open database {self.db_path}: {e}") from e
        APP_LOGGER.info(f"Opened database at {self.db_path}")

    def close(self):
        with self._lock:
            self._conn.close()

    @contextmanager
    def _tx(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e

    # --- Targets ---
    def list_targets(self) -> list[Target]:
        with self._tx() as conn:
            rows = conn.execute(
                "SELECT id, node_id, distance, image_num FROM targets ORDER BY node_id"
            ).fetchall()
        return [Target(id=r[0], node_id=r[1], distance=r[2], image_num=r[3]) for r in rows]

    def get_target(self, target_id: int) -> Target:
        with self._tx() as conn:
            row = conn.execute(
                "SELECT id, node_id, distance, image_num FROM targets WHERE id = ?",
                (target_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Target {target_id} not found")
        return Target(id=row[0], node_id=row[1], distance=row[2], image_num=row[3])

    def create_target(self, node_id: int, distance: float, image_num: int) -> Target:
        with self._tx() as conn:
            cur = conn.execute(
                "INSERT INTO targets (node_id, distance, image_num) VALUES (?, ?, ?)",
                (node_id, distance, image_num),
            )
            target_id = cur.lastrowid
        return Target(id=target_id, node_id=node_id, distance=distance, image_num=image_num)

    def update_target(self, target_id: int, node_id: int, distance: float, image_num: int) -> Target:
        with self._tx() as conn:
            cur = conn.execute(
                "UPDATE targets SET node_id = ?, distance = ?, image_num = ?, "
                "updated_at = datetime('now') WHERE id = ?",
                (node_id, distance, image_num, target_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"Target {target_id} not found")
        return Target(id=target_id, node_id=node_id, distance=distance, image_num=image_num)

    def delete_target(self, target_id: int) -> None:
        with self._tx() as conn:
            cur = conn.execute("DELETE FROM targets WHERE id = ?", (target_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Target {target_id} not found")

    # --- Games ---
    def _game_targets(self, conn: sqlite3.Connection, game_id: int) -> list[GameTarget]:
        rows = conn.execute(
            "SELECT gt.id, gt.start_time, gt.end_time, t.id, t.node_id, t.distance, t.image_num "
            "FROM game_targets gt JOIN targets t ON gt.target_id = t.id "
            "WHERE gt.game_id = ? ORDER BY gt.start_time, gt.id",
            (game_id,),
        ).fetchall()
        return [
            GameTarget(
                id=r[0],
                start_time=r[1],
                end_time=r[2],
                target=Target(id=r[3], node_id=r[4], distance=r[5], image_num=r[6]),
            )
            for r in rows
        ]

    def _insert_windows(self, conn: sqlite3.Connection, game_id: int,
                        windows: Iterable[GameTargetInput]) -> None:
        conn.executemany(
            "INSERT INTO game_targets (game_id, target_id, start_time, end_time) VALUES (?, ?, ?, ?)",
            [(game_id, w.target_id, w.start_time, w.end_time) for w in windows],
        )

    def list_games(self) -> list[Game]:
        with self._tx() as conn:
            rows = conn.execute("SELECT id, name, total_time FROM games ORDER BY name").fetchall()
            return [
                Game(id=r[0], name=r[1], total_time=r[2], targets=self._game_targets(conn, r[0]))
                for r in rows
            ]

    def get_game(self, game_id: int) -> Game:
        with self._tx() as conn:
            row = conn.execute(
                "SELECT id, name, total_time FROM games WHERE id = ?", (game_id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Game {game_id} not found")
            return Game(id=row[0], name=row[1], total_time=row[2],
                        targets=self._game_targets(conn, row[0]))

    def create_game(self, name: str, total_time: int, windows: list[GameTargetInput]) -> Game:
        validate_game(total_time, windows)
        with self._tx() as conn:
            cur = conn.execute(
                "INSERT INTO games (name, total_time) VALUES (?, ?)", (name, total_time)
            )
            game_id = cur.lastrowid
            self._insert_windows(conn, game_id, windows)
            targets = self._game_targets(conn, game_id)
        return Game(id=game_id, name=name, total_time=total_time, targets=targets)

    def update_game(self, game_id: int, name: str, total_time: int,
                    windows: list[GameTargetInput]) -> Game:
        """Rename/retime a game and replace all of its windows."""
        validate_game(total_time, windows)
        with self._tx() as conn:
            cur = conn.execute(
                "UPDATE games SET name = ?, total_time = ?, updated_at = datetime('now') WHERE id = ?",
                (name, total_time, game_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"Game {game_id} not found")
            conn.execute("DELETE FROM game_targets WHERE game_id = ?", (game_id,))
            self._insert_windows(conn, game_id, windows)
            targets = self._game_targets(conn, game_id)
        return Game(id=game_id, name=name, total_time=total_time, targets=targets)

    def delete_game(self, game_id: int) -> None:
        with self._tx() as conn:
            cur = conn.execute("DELETE FROM games WHERE id = ?", (game_id,))
            if cur.rowcount == 0:
                raise NotFoundError(f"Game {game_id} not found")

    # --- Distance markers ---
    def list_distance_markers(self) -> list[DistanceMarker]:
        with self._tx() as conn:
            rows = conn.execute(
                "SELECT id, marker_number, distance FROM distance_markers ORDER BY marker_number"
            ).fetchall()
        return [DistanceMarker(id=r[0], marker_number=r[1], distance=r[2]) for r in rows]

    def upsert_distance_marker(self, marker_number: int, distance: float) -> DistanceMarker:
        with self._tx() as conn:
            cur = conn.execute(
                "UPDATE distance_markers SET distance = ? WHERE marker_number = ?",
                (distance, marker_number),
            )
            if cur.rowcount == 0:
                conn.execute(
                    "INSERT INTO distance_markers (marker_number, distance) VALUES (?, ?)",
                    (marker_number, distance),
                )
            row = conn.execute(
                "SELECT id, marker_number, distance FROM distance_markers WHERE marker_number = ?",
                (marker_number,),
            ).fetchone()
        return DistanceMarker(id=row[0], marker_number=row[1], distance=row[2])
