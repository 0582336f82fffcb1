# noteflow/services/trash/errors.py
"""
Error taxonomy for trash operations.

Each error carries the HTTP status and machine-readable code the API layer
reports. NotFound is raised for both missing and foreign-owned entities so
callers cannot probe for other users' data.
"""


class TrashError(Exception):
    """Base exception for trash and retention errors."""

    status_code = 400
    error_code = "trash_error"
    default_message = "Trash operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TrashError):
    """No verified caller identity."""

    status_code = 401
    error_code = "unauthenticated"
    default_message = "Authentication required"


class Unauthorized(TrashError):
    """Caller is known but lacks an active admin role."""

    status_code = 403
    error_code = "unauthorized"
    default_message = "Unauthorized - admin access only"


class NotFound(TrashError):
    """Entity does not exist or is not owned by the caller."""

    status_code = 404
    error_code = "not_found"
    default_message = "Item not found"


class NotDeleted(TrashError):
    """Restore attempted on an item that is not in the trash."""

    status_code = 409
    error_code = "not_deleted"
    default_message = "Item is not in the trash"


class AlreadyDeleted(TrashError):
    """Soft delete attempted on an item already in the trash."""

    status_code = 409
    error_code = "already_deleted"
    default_message = "Item is already in the trash"


class ValidationError(TrashError):
    """Malformed input, e.g. an empty id list."""

    status_code = 422
    error_code = "validation_error"
    default_message = "Invalid request"
