"""Error types raised by the store handle and the bookmark merge."""

from __future__ import annotations

from typing import Optional


class TempfoxError(RuntimeError):
    """Base class for tempfox failures."""


class StoreError(TempfoxError):
    """A places.sqlite query or connection failed during ``stage``."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class StoreSchemaError(StoreError):
    """A required table or column is missing from places.sqlite."""


class MissingReferenceError(TempfoxError):
    """A row points at a parent row that is not part of the reconciled batch."""

    def __init__(self, stage: str, entity: str, entity_id: int, ref_id: Optional[int]):
        super().__init__(f"{stage}: unable to find reference {ref_id} from {entity} {entity_id}")
        self.stage = stage
        self.entity = entity
        self.entity_id = entity_id
        self.ref_id = ref_id


class ProfileNotFoundError(TempfoxError):
    """No Firefox profile directory matches the requested name."""
