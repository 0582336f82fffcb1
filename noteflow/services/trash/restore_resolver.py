# noteflow/services/trash/restore_resolver.py
"""
Decides where a restored note lands.

Precedence:
1. An explicit target chosen by the caller (not checked for existence)
2. The folder the note was deleted from, if it still exists and is live
3. Root (no folder)
"""

import logging
import uuid

from sqlalchemy.orm import Session

from noteflow.models import Folder

logger = logging.getLogger(__name__)


def resolve_restore_target(
    db: Session,
    deleted_from_folder_id: uuid.UUID | None,
    explicit_override: uuid.UUID | None = None,
) -> uuid.UUID | None:
    if explicit_override is not None:
        return explicit_override

    if deleted_from_folder_id is None:
        return None

    folder = (
        db.query(Folder.id)
        .filter(Folder.id == deleted_from_folder_id, Folder.is_deleted == False)
        .first()
    )
    if folder is None:
        logger.debug(f"Original folder {deleted_from_folder_id} unavailable, restoring to root")
        return None
    return folder.id


def is_restoring_to_original(
    target_folder_id: uuid.UUID | None,
    deleted_from_folder_id: uuid.UUID | None,
) -> bool:
    """Root counts as the original location for a note deleted outside any folder."""
    return target_folder_id == deleted_from_folder_id
