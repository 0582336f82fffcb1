# noteflow/lifecycle.py
"""
Tagged lifecycle state for notes and folders.

An entity is either Active or Deleted(at, from_folder_id). The persisted
is_deleted / deleted_at / deleted_from_folder_id columns are only ever
written from one of these values, so "deleted_at is set iff is_deleted"
holds for every row written by this service.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Active:
    """Live entity, visible in normal listings."""

    def to_columns(self, track_origin: bool = True) -> dict:
        columns = {"is_deleted": False, "deleted_at": None}
        if track_origin:
            columns["deleted_from_folder_id"] = None
        return columns


@dataclass(frozen=True)
class Deleted:
    """Soft-deleted entity sitting in the trash."""

    at: datetime
    from_folder_id: uuid.UUID | None = None

    def to_columns(self, track_origin: bool = True) -> dict:
        columns = {"is_deleted": True, "deleted_at": self.at}
        if track_origin:
            columns["deleted_from_folder_id"] = self.from_folder_id
        return columns


Lifecycle = Active | Deleted

ACTIVE = Active()


def from_columns(
    is_deleted: bool | None,
    deleted_at: datetime | None,
    deleted_from_folder_id: uuid.UUID | None = None,
) -> Lifecycle:
    """
    Rebuild the lifecycle value from stored columns.

    Legacy rows flagged deleted without a timestamp are treated as deleted at
    datetime.min so the next sweep picks them up.
    """
    if not is_deleted:
        return ACTIVE
    return Deleted(at=deleted_at or datetime.min, from_folder_id=deleted_from_folder_id)
