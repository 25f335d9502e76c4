"""JSON-file storage for floor plans, versions and editors."""

from floorsync.storage.editors import EditorDirectory
from floorsync.storage.floor_plans import FloorPlanStore
from floorsync.storage.versions import VersionStore

__all__ = ["EditorDirectory", "FloorPlanStore", "VersionStore"]
