"""
Error types for floorsync.

Every error is a deterministic function of its input state, so none of
them is retried inside the engine.
"""

from typing import Optional


class FloorSyncError(Exception):
    """Base class for all floorsync errors."""

    code: str = "FLOORSYNC_ERROR"


class NotFoundError(FloorSyncError):
    """Raised when a referenced floor plan, version or editor does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.replace('_', ' ').capitalize()} not found: {entity_id}")


class UnauthorizedError(FloorSyncError):
    """Raised when an editor without review authority merges or rejects."""

    code = "UNAUTHORIZED"

    def __init__(self, editor_id: str, action: str):
        self.editor_id = editor_id
        self.action = action
        super().__init__(f"Only the head editor or an admin can {action} versions")


class AlreadyTerminalError(FloorSyncError):
    """Raised when a version that is no longer a draft is merged or rejected."""

    code = "ALREADY_TERMINAL"

    def __init__(self, version_id: str, status: str):
        self.version_id = version_id
        self.status = status
        super().__init__(f"Version is already {status}")


class ValidationError(FloorSyncError):
    """Raised when room, floor plan or version data is malformed."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class PersistenceError(FloorSyncError):
    """Raised when a store fails to write."""

    code = "PERSISTENCE_ERROR"
