"""Service layer for floorsync."""

from floorsync.services.version_service import (
    ManualMergeResult,
    VersionService,
    floor_plan_lock,
)

__all__ = ["ManualMergeResult", "VersionService", "floor_plan_lock"]
