"""Minimal Firefox places.sqlite builder shared by the tests."""

import sqlite3
from pathlib import Path
from typing import Iterable, Optional, Tuple

SCHEMA = """
CREATE TABLE moz_origins (
  id INTEGER PRIMARY KEY,
  prefix TEXT NOT NULL,
  host TEXT NOT NULL,
  frecency INTEGER NOT NULL,
  UNIQUE (prefix, host)
);
CREATE TABLE moz_places (
  id INTEGER PRIMARY KEY,
  url LONGVARCHAR,
  title LONGVARCHAR,
  rev_host LONGVARCHAR,
  visit_count INTEGER DEFAULT 0,
  hidden INTEGER DEFAULT 0 NOT NULL,
  typed INTEGER DEFAULT 0 NOT NULL,
  favicon_id INTEGER,
  frecency INTEGER DEFAULT -1 NOT NULL,
  last_visit_date INTEGER,
  guid TEXT,
  foreign_count INTEGER DEFAULT 0 NOT NULL,
  url_hash INTEGER DEFAULT 0 NOT NULL,
  description TEXT,
  preview_image_url TEXT,
  origin_id INTEGER REFERENCES moz_origins(id),
  site_name TEXT
);
CREATE UNIQUE INDEX moz_places_guid_uniqueindex ON moz_places (guid);
CREATE TABLE moz_bookmarks (
  id INTEGER PRIMARY KEY,
  type INTEGER,
  fk INTEGER DEFAULT NULL,
  parent INTEGER,
  position INTEGER,
  title LONGVARCHAR,
  keyword_id INTEGER,
  folder_type TEXT,
  dateAdded INTEGER,
  lastModified INTEGER,
  guid TEXT,
  syncStatus INTEGER NOT NULL DEFAULT 0,
  syncChangeCounter INTEGER NOT NULL DEFAULT 1
);
CREATE UNIQUE INDEX moz_bookmarks_guid_uniqueindex ON moz_bookmarks (guid);
"""

ROOTS = [
    (1, 2, None, 0, 0, "root", 0, 0, "root________"),
    (2, 2, None, 1, 0, "menu", 0, 0, "menu________"),
    (3, 2, None, 1, 1, "toolbar", 0, 0, "toolbar_____"),
    (4, 2, None, 1, 2, "tags", 0, 0, "tags________"),
    (5, 2, None, 1, 3, "unfiled", 0, 0, "unfiled_____"),
    (6, 2, None, 1, 4, "mobile", 0, 0, "mobile______"),
]


def bm(id: int, fk: Optional[int] = None, parent: int = 3, title: str = "") -> Tuple:
    """A moz_bookmarks row: a link when ``fk`` is set, a folder otherwise."""
    btype = 1 if fk is not None else 2
    return (id, btype, fk, parent, 0, title or f"b{id}", 1000 + id, 1000 + id, f"bm-{id:08d}")


def place(id: int, url: str, origin_id: Optional[int] = None) -> Tuple:
    return (id, url, url, 100 + id, f"pl-{id:08d}", origin_id)


def mk_places_db(
    path: Path,
    *,
    origins: Iterable[Tuple] = (),
    places: Iterable[Tuple] = (),
    bookmarks: Iterable[Tuple] = (),
    with_roots: bool = True,
) -> Path:
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA)
        rows = list(ROOTS) if with_roots else []
        rows.extend(bookmarks)
        conn.executemany("INSERT INTO moz_origins(id, prefix, host, frecency) VALUES(?, ?, ?, ?)", list(origins))
        conn.executemany(
            "INSERT INTO moz_places(id, url, title, frecency, guid, origin_id) VALUES(?, ?, ?, ?, ?, ?)",
            list(places),
        )
        conn.executemany(
            "INSERT INTO moz_bookmarks(id, type, fk, parent, position, title, dateAdded, lastModified, guid) "
            "VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?)",
            rows,
        )
        conn.commit()
    finally:
        conn.close()
    return path


def add_rows(path: Path, *, origins: Iterable[Tuple] = (), places: Iterable[Tuple] = (), bookmarks: Iterable[Tuple] = ()) -> None:
    """Simulate the browser writing into an existing profile."""
    conn = sqlite3.connect(path)
    try:
        conn.executemany("INSERT INTO moz_origins(id, prefix, host, frecency) VALUES(?, ?, ?, ?)", list(origins))
        conn.executemany(
            "INSERT INTO moz_places(id, url, title, frecency, guid, origin_id) VALUES(?, ?, ?, ?, ?, ?)",
            list(places),
        )
        conn.executemany(
            "INSERT INTO moz_bookmarks(id, type, fk, parent, position, title, dateAdded, lastModified, guid) "
            "VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?)",
            list(bookmarks),
        )
        conn.commit()
    finally:
        conn.close()


def fetch_all(path: Path, sql: str, params: Tuple = ()) -> list:
    conn = sqlite3.connect(path)
    try:
        return conn.execute(sql, params).fetchall()
    finally:
        conn.close()


def run_sql(path: Path, sql: str, params: Tuple = ()) -> None:
    conn = sqlite3.connect(path)
    try:
        conn.execute(sql, params)
        conn.commit()
    finally:
        conn.close()
