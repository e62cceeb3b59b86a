from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Type, TypeVar

from .errors import StoreError, StoreSchemaError
from .model import Bookmark, Origin, Place

PLACES_FILE_NAME = "places.sqlite"

_Row = TypeVar("_Row", Bookmark, Place, Origin)


def resolve_places_path(profile_or_db_path: Path | str) -> Path:
    p = Path(profile_or_db_path)
    if p.is_dir():
        return p / PLACES_FILE_NAME
    return p


class PlacesDB:
    """Handle on one profile's places.sqlite.

    The bookmark merge reads from a snapshot handle and writes into an original
    handle. Every insert commits on its own; there is no transaction spanning
    several rows.
    """

    def __init__(self, db_path: Path | str, *, readonly: bool = False, busy_timeout_ms: int = 5000):
        self.db_path = resolve_places_path(db_path)
        self.readonly = readonly
        self.busy_timeout_ms = max(0, int(busy_timeout_ms))
        self.conn: sqlite3.Connection | None = None

    def __enter__(self) -> "PlacesDB":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if not self.db_path.exists():
            raise StoreError("open", f"database not found: {self.db_path}")
        mode = "ro" if self.readonly else "rw"
        uri = f"file:{self.db_path.as_posix()}?mode={mode}"
        timeout_s = max(0.1, self.busy_timeout_ms / 1000.0) if self.busy_timeout_ms > 0 else 0.1
        try:
            self.conn = sqlite3.connect(uri, uri=True, timeout=timeout_s)
            self.conn.row_factory = sqlite3.Row
            if self.busy_timeout_ms > 0:
                self.conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
            for model in (Bookmark, Place, Origin):
                self._require_columns(model.TABLE, model.COLUMNS)
        except sqlite3.Error as e:
            self.close()
            raise StoreError("open", describe_sqlite_error(e, self.db_path)) from e
        except StoreError:
            self.close()
            raise

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def latest_bookmark(self) -> Optional[Bookmark]:
        rows = self._select(Bookmark, "ORDER BY id DESC LIMIT 1")
        return rows[0] if rows else None

    def bookmarks_between(self, low_id: int, high_id: int) -> List[Bookmark]:
        return self._select(Bookmark, "WHERE id > ? AND id <= ? ORDER BY id", (low_id, high_id))

    def get_place(self, place_id: int) -> Optional[Place]:
        rows = self._select(Place, "WHERE id = ?", (place_id,))
        return rows[0] if rows else None

    def get_origin(self, origin_id: int) -> Optional[Origin]:
        rows = self._select(Origin, "WHERE id = ?", (origin_id,))
        return rows[0] if rows else None

    def find_origin_id(self, prefix: str, host: str, frecency: int) -> Optional[int]:
        c = self._cursor()
        row = c.execute(
            "SELECT id FROM moz_origins WHERE prefix = ? AND host = ? AND frecency = ? ORDER BY id LIMIT 1",
            (prefix, host, frecency),
        ).fetchone()
        return int(row["id"]) if row else None

    def max_id(self, table: str) -> int:
        _check_table(table)
        c = self._cursor()
        row = c.execute(f"SELECT COALESCE(MAX(id), 0) AS m FROM {table}").fetchone()
        return int(row["m"])

    def insert_origin(self, origin: Origin) -> None:
        self._insert(origin)

    def insert_place(self, place: Place) -> None:
        self._insert(place)

    def insert_bookmark(self, bookmark: Bookmark) -> None:
        self._insert(bookmark)

    def count(self, table: str) -> int:
        _check_table(table)
        c = self._cursor()
        return int(c.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])

    def _select(self, model: Type[_Row], tail: str, params: Iterable[object] = ()) -> List[_Row]:
        cols = ", ".join(model.COLUMNS)
        c = self._cursor()
        rows = c.execute(f"SELECT {cols} FROM {model.TABLE} {tail}", tuple(params)).fetchall()
        return [model.from_row(r) for r in rows]

    def _insert(self, row: Bookmark | Place | Origin) -> None:
        self._assert_writable()
        cols = ", ".join(row.COLUMNS)
        placeholders = ", ".join(["?"] * len(row.COLUMNS))
        c = self._cursor()
        c.execute(f"INSERT INTO {row.TABLE} ({cols}) VALUES ({placeholders})", row.values())
        self.conn.commit()

    def _require_columns(self, table_name: str, columns: Iterable[str]) -> None:
        c = self._cursor()
        rows = c.execute(f"PRAGMA table_info({table_name})").fetchall()
        if not rows:
            raise StoreSchemaError("open", f"table {table_name} not found in {self.db_path}")
        present = {str(r[1]) for r in rows}
        missing = [col for col in columns if col not in present]
        if missing:
            raise StoreSchemaError("open", f"{table_name} is missing column(s): {', '.join(missing)}")

    def _assert_writable(self) -> None:
        if self.readonly:
            raise RuntimeError("database opened in readonly mode")

    def _cursor(self) -> sqlite3.Cursor:
        if self.conn is None:
            raise RuntimeError("database is not open")
        return self.conn.cursor()


def _check_table(table: str) -> None:
    # Table names are interpolated into SQL; only the three places tables are allowed.
    if table not in (Bookmark.TABLE, Place.TABLE, Origin.TABLE):
        raise ValueError(f"unknown table: {table}")


def describe_sqlite_error(e: sqlite3.Error, db_path: Path) -> str:
    msg = str(e).strip()
    if "locked" in msg.lower() or "busy" in msg.lower():
        return f"Firefox database is locked ({db_path}). Close Firefox and rerun."
    return msg
