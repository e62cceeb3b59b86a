from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import ClassVar, Dict, List, Optional, Tuple


@dataclass
class Bookmark:
    TABLE: ClassVar[str] = "moz_bookmarks"
    COLUMNS: ClassVar[Tuple[str, ...]] = (
        "id", "type", "fk", "parent", "position", "title", "keyword_id",
        "folder_type", "dateAdded", "lastModified", "guid", "syncStatus", "syncChangeCounter",
    )

    id: int
    type: Optional[int] = None
    fk: Optional[int] = None
    parent: Optional[int] = None
    position: Optional[int] = None
    title: Optional[str] = None
    keyword_id: Optional[int] = None
    folder_type: Optional[str] = None
    date_added: Optional[int] = None
    last_modified: Optional[int] = None
    guid: Optional[str] = None
    sync_status: int = 0
    sync_change_counter: int = 1

    @classmethod
    def from_row(cls, row) -> "Bookmark":
        return cls(*tuple(row))

    def values(self) -> tuple:
        return astuple(self)


@dataclass
class Place:
    TABLE: ClassVar[str] = "moz_places"
    COLUMNS: ClassVar[Tuple[str, ...]] = (
        "id", "url", "title", "rev_host", "visit_count", "hidden", "typed", "favicon_id",
        "frecency", "last_visit_date", "guid", "foreign_count", "url_hash", "description",
        "preview_image_url", "origin_id",
    )

    id: int
    url: Optional[str] = None
    title: Optional[str] = None
    rev_host: Optional[str] = None
    visit_count: Optional[int] = 0
    hidden: int = 0
    typed: int = 0
    favicon_id: Optional[int] = None
    frecency: int = -1
    last_visit_date: Optional[int] = None
    guid: Optional[str] = None
    foreign_count: int = 0
    url_hash: int = 0
    description: Optional[str] = None
    preview_image_url: Optional[str] = None
    origin_id: Optional[int] = None

    @classmethod
    def from_row(cls, row) -> "Place":
        return cls(*tuple(row))

    def values(self) -> tuple:
        return astuple(self)


@dataclass
class Origin:
    TABLE: ClassVar[str] = "moz_origins"
    COLUMNS: ClassVar[Tuple[str, ...]] = ("id", "prefix", "host", "frecency")

    id: int
    prefix: str
    host: str
    frecency: int = 0

    @property
    def natural_key(self) -> Tuple[str, str, int]:
        # moz_origins has no uniqueness constraint covering frecency; this triple is our identity.
        return (self.prefix, self.host, self.frecency)

    @classmethod
    def from_row(cls, row) -> "Origin":
        return cls(*tuple(row))

    def values(self) -> tuple:
        return astuple(self)


@dataclass
class Delta:
    """Rows created in a snapshot after the anchor bookmark.

    Each tier is ``None`` when no rows were found, so callers can skip the
    matching insert stage.
    """

    bookmarks: Optional[List[Bookmark]] = None
    places: Optional[Dict[int, Place]] = None
    origins: Optional[Dict[int, Origin]] = None

    @classmethod
    def empty(cls) -> "Delta":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.bookmarks is None and self.places is None and self.origins is None
