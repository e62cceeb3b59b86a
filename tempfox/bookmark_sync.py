"""Merge bookmarks created in a snapshot profile back into the original profile.

Rows are fetched from the snapshot in the order bookmarks -> places -> origins
and written into the original in dependency order origins -> places ->
bookmarks. Ids are store-local, so every inserted row gets a fresh id in the
original and the references pointing at it are rewritten on the way.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .config import Settings
from .errors import MissingReferenceError, StoreError, TempfoxError
from .log import get_logger
from .model import Bookmark, Delta, Origin, Place
from .places_db import PlacesDB, describe_sqlite_error

log = get_logger(__name__)

STAGE_FETCH_BOOKMARKS = "fetch-bookmarks"
STAGE_FETCH_PLACES = "fetch-places"
STAGE_FETCH_ORIGINS = "fetch-origins"
STAGE_ORIGINS = "insert-origins"
STAGE_PLACES = "insert-places"
STAGE_BOOKMARKS = "insert-bookmarks"


@dataclass
class SyncReport:
    fetched_bookmarks: int = 0
    fetched_places: int = 0
    fetched_origins: int = 0
    inserted_bookmarks: int = 0
    inserted_places: int = 0
    inserted_origins: int = 0
    reused_origins: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class IdAllocator:
    """Hands out primary keys for one destination store during a run.

    Each table is seeded from its current ``MAX(id)`` the first time it is
    asked for and then counts up, so ids allocated for a table within a run are
    strictly increasing and above every id that was present at seed time.
    """

    def __init__(self, store: PlacesDB):
        self.store = store
        self._next: Dict[str, int] = {}

    def next_id(self, table: str) -> int:
        if table not in self._next:
            self._next[table] = self.store.max_id(table) + 1
        new_id = self._next[table]
        self._next[table] = new_id + 1
        return new_id


@contextmanager
def _query_stage(stage: str, store: PlacesDB) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise StoreError(stage, describe_sqlite_error(e, store.db_path)) from e


def latest_bookmark(store: PlacesDB) -> Optional[Bookmark]:
    return store.latest_bookmark()


def capture_anchor(profile_dir: Path | str, settings: Optional[Settings] = None) -> Optional[Bookmark]:
    """Newest bookmark of a profile, taken before the snapshot is launched."""
    s = settings or Settings()
    with PlacesDB(profile_dir, readonly=True, busy_timeout_ms=s.busy_timeout_ms) as db:
        with _query_stage("anchor", db):
            return latest_bookmark(db)


def fetch_delta(snapshot: PlacesDB, anchor: Optional[Bookmark]) -> Delta:
    with _query_stage(STAGE_FETCH_BOOKMARKS, snapshot):
        latest = latest_bookmark(snapshot)
        low_id = anchor.id if anchor is not None else 0
        if latest is None or low_id >= latest.id:
            # Nothing new, or bookmarks were removed; deletions are not merged.
            log.info("No new bookmarks in snapshot (anchor=%d).", low_id)
            return Delta.empty()
        bookmarks = snapshot.bookmarks_between(low_id, latest.id)
    if not bookmarks:
        return Delta.empty()

    with _query_stage(STAGE_FETCH_PLACES, snapshot):
        places = _fetch_places(snapshot, bookmarks)
    if not places:
        return Delta(bookmarks=bookmarks)

    with _query_stage(STAGE_FETCH_ORIGINS, snapshot):
        origins = _fetch_origins(snapshot, places)
    return Delta(bookmarks=bookmarks, places=places, origins=origins or None)


def _fetch_places(snapshot: PlacesDB, bookmarks: List[Bookmark]) -> Dict[int, Place]:
    places: Dict[int, Place] = {}
    for b in bookmarks:
        if b.fk is None or b.fk in places:
            continue
        place = snapshot.get_place(b.fk)
        if place is not None:
            places[b.fk] = place
    return places


def _fetch_origins(snapshot: PlacesDB, places: Dict[int, Place]) -> Dict[int, Origin]:
    origins: Dict[int, Origin] = {}
    for place in places.values():
        if place.origin_id is None or place.origin_id in origins:
            continue
        origin = snapshot.get_origin(place.origin_id)
        if origin is not None:
            origins[place.origin_id] = origin
    return origins


def reconcile_and_insert_origins(
    store: PlacesDB,
    origins: Dict[int, Origin],
    allocator: Optional[IdAllocator] = None,
    *,
    mapping: Optional[Dict[int, int]] = None,
    report: Optional[SyncReport] = None,
) -> Dict[int, int]:
    allocator = allocator or IdAllocator(store)
    mapping = {} if mapping is None else mapping
    with _query_stage(STAGE_ORIGINS, store):
        for snapshot_id, origin in sorted(origins.items()):
            existing_id = store.find_origin_id(*origin.natural_key)
            if existing_id is not None:
                origin.id = existing_id
                mapping[snapshot_id] = existing_id
                if report is not None:
                    report.reused_origins += 1
                log.debug("Origin %s%s already present as %d", origin.prefix, origin.host, existing_id)
                continue
            origin.id = allocator.next_id(Origin.TABLE)
            store.insert_origin(origin)
            mapping[snapshot_id] = origin.id
            if report is not None:
                report.inserted_origins += 1
            log.debug("Origin %d -> %d (%s%s)", snapshot_id, origin.id, origin.prefix, origin.host)
    return mapping


def reconcile_and_insert_places(
    store: PlacesDB,
    places: Dict[int, Place],
    origin_mapping: Dict[int, int],
    allocator: Optional[IdAllocator] = None,
    *,
    mapping: Optional[Dict[int, int]] = None,
    report: Optional[SyncReport] = None,
) -> Dict[int, int]:
    allocator = allocator or IdAllocator(store)
    mapping = {} if mapping is None else mapping
    with _query_stage(STAGE_PLACES, store):
        for snapshot_id, place in sorted(places.items()):
            if place.origin_id is not None:
                new_origin_id = origin_mapping.get(place.origin_id)
                if new_origin_id is None:
                    raise MissingReferenceError(STAGE_PLACES, "place", snapshot_id, place.origin_id)
                place.origin_id = new_origin_id
            place.id = allocator.next_id(Place.TABLE)
            store.insert_place(place)
            mapping[snapshot_id] = place.id
            if report is not None:
                report.inserted_places += 1
            log.debug("Place %d -> %d (%s)", snapshot_id, place.id, place.url)
    return mapping


def reconcile_and_insert_bookmarks(
    store: PlacesDB,
    bookmarks: List[Bookmark],
    place_mapping: Dict[int, int],
    allocator: Optional[IdAllocator] = None,
    *,
    report: Optional[SyncReport] = None,
) -> Dict[int, int]:
    allocator = allocator or IdAllocator(store)
    mapping: Dict[int, int] = {}
    with _query_stage(STAGE_BOOKMARKS, store):
        for b in sorted(bookmarks, key=lambda x: x.id):
            snapshot_id = b.id
            if b.fk is not None:
                new_fk = place_mapping.get(b.fk)
                if new_fk is None:
                    raise MissingReferenceError(STAGE_BOOKMARKS, "bookmark", snapshot_id, b.fk)
                b.fk = new_fk
            # Folders created in the same batch got new ids; older parents are shared.
            if b.parent is not None and b.parent in mapping:
                b.parent = mapping[b.parent]
            b.id = allocator.next_id(Bookmark.TABLE)
            store.insert_bookmark(b)
            mapping[snapshot_id] = b.id
            if report is not None:
                report.inserted_bookmarks += 1
            log.debug("Bookmark %d -> %d (%s)", snapshot_id, b.id, b.title)
    return mapping


def run_sync(
    original: PlacesDB,
    snapshot: PlacesDB,
    anchor: Optional[Bookmark],
    *,
    strict: bool = False,
) -> SyncReport:
    report = SyncReport()
    try:
        delta = fetch_delta(snapshot, anchor)
    except StoreError as e:
        log.error("Error during get new entries: %s", e)
        report.errors.append((e.stage, str(e)))
        return report
    if delta.is_empty:
        return report

    report.fetched_bookmarks = len(delta.bookmarks or [])
    report.fetched_places = len(delta.places or {})
    report.fetched_origins = len(delta.origins or {})
    log.info(
        "Merging %d bookmark(s), %d place(s), %d origin(s) from snapshot (phase=merge)",
        report.fetched_bookmarks,
        report.fetched_places,
        report.fetched_origins,
    )

    allocator = IdAllocator(original)
    origin_mapping: Dict[int, int] = {}
    place_mapping: Dict[int, int] = {}

    if delta.origins is not None:
        _run_stage(
            report,
            STAGE_ORIGINS,
            lambda: reconcile_and_insert_origins(
                original, delta.origins, allocator, mapping=origin_mapping, report=report
            ),
        )
    if delta.places is not None and _may_run(report, STAGE_PLACES, strict):
        # Carries on with a partial origin mapping; unmapped origins fail below.
        _run_stage(
            report,
            STAGE_PLACES,
            lambda: reconcile_and_insert_places(
                original, delta.places, origin_mapping, allocator, mapping=place_mapping, report=report
            ),
        )
    if delta.bookmarks is not None and _may_run(report, STAGE_BOOKMARKS, strict):
        _run_stage(
            report,
            STAGE_BOOKMARKS,
            lambda: reconcile_and_insert_bookmarks(
                original, delta.bookmarks, place_mapping, allocator, report=report
            ),
        )

    log.info(
        "Merged bookmarks=%d places=%d origins=%d (reused origins=%d, errors=%d)",
        report.inserted_bookmarks,
        report.inserted_places,
        report.inserted_origins,
        report.reused_origins,
        len(report.errors),
    )
    return report


def _run_stage(report: SyncReport, stage: str, fn: Callable[[], object]) -> None:
    try:
        fn()
    except TempfoxError as e:
        log.error("Error during %s: %s", stage, e)
        report.errors.append((getattr(e, "stage", stage), str(e)))


def _may_run(report: SyncReport, stage: str, strict: bool) -> bool:
    if strict and not report.ok:
        log.warning("Skipping %s after an earlier failure (strict mode).", stage)
        return False
    return True


def sync_profiles(
    original_dir: Path | str,
    snapshot_dir: Path | str,
    anchor: Optional[Bookmark],
    settings: Optional[Settings] = None,
) -> SyncReport:
    """Open both profiles and merge the snapshot's new bookmarks into the original."""
    s = settings or Settings()
    try:
        with PlacesDB(snapshot_dir, readonly=True, busy_timeout_ms=s.busy_timeout_ms) as snapshot, PlacesDB(
            original_dir, readonly=False, busy_timeout_ms=s.busy_timeout_ms
        ) as original:
            return run_sync(original, snapshot, anchor, strict=s.sync_strict)
    except StoreError as e:
        log.error("Unable to open places database: %s", e)
        report = SyncReport()
        report.errors.append((e.stage, str(e)))
        return report
