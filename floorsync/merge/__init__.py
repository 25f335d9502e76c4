"""
Merge engine for floorsync.

Provides change detection, conflict classification, resolution and
assembly for concurrent edits of one floor plan.
"""

from floorsync.merge.assembler import MergeAssembler
from floorsync.merge.classifier import ConflictClassifier
from floorsync.merge.config import (
    MergeConfig,
    get_merge_config,
    load_merge_config,
    set_merge_config,
)
from floorsync.merge.coordinator import MergeCoordinator
from floorsync.merge.detector import ChangeDetector
from floorsync.merge.models import (
    ConflictAnalysis,
    ConflictReport,
    DeletionConflict,
    Editor,
    EditorRole,
    FloorPlan,
    MergeResult,
    NonOverlapping,
    OverlappingResolved,
    ResolutionOutcome,
    Room,
    RoomChange,
    RoomDeletion,
    RoomType,
    SingleChange,
    Version,
    VersionComparison,
    VersionStatus,
)
from floorsync.merge.report import generate_conflict_report
from floorsync.merge.strategies import PriorityTimestampStrategy

__all__ = [
    # Models
    "Room",
    "RoomType",
    "FloorPlan",
    "Version",
    "VersionStatus",
    "Editor",
    "EditorRole",
    "RoomChange",
    "SingleChange",
    "NonOverlapping",
    "OverlappingResolved",
    "RoomDeletion",
    "DeletionConflict",
    "ResolutionOutcome",
    "ConflictAnalysis",
    "ConflictReport",
    "MergeResult",
    "VersionComparison",
    # Config
    "MergeConfig",
    "get_merge_config",
    "set_merge_config",
    "load_merge_config",
    # Core components
    "ChangeDetector",
    "ConflictClassifier",
    "PriorityTimestampStrategy",
    "MergeAssembler",
    "MergeCoordinator",
    "generate_conflict_report",
]
