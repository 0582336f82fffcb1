# noteflow/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.
"""

from noteflow.schemas.trash import (
    AuditEntryResponse,
    AuditLogResponse,
    BulkNoteIdsRequest,
    BulkOperationResponse,
    DeletedNoteResponse,
    ErrorResponse,
    RestoreNoteRequest,
    SweepResponse,
    TrashListResponse,
)

__all__ = [
    "AuditEntryResponse",
    "AuditLogResponse",
    "BulkNoteIdsRequest",
    "BulkOperationResponse",
    "DeletedNoteResponse",
    "ErrorResponse",
    "RestoreNoteRequest",
    "SweepResponse",
    "TrashListResponse",
]
