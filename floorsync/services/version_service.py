"""
Version service for floorsync.

The controller around the merge engine. Loads snapshots from the stores,
runs the engine, and commits the outcome. Merges of one floor plan are
serialized, and a commit either lands completely or leaves the base and
every version as they were.
"""

import logging
import threading
import weakref
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from floorsync.errors import FloorSyncError, ValidationError
from floorsync.merge.coordinator import MergeCoordinator
from floorsync.merge.models import (
    ConflictReport,
    FloorPlan,
    MergeResult,
    Room,
    Version,
    VersionComparison,
)
from floorsync.storage import EditorDirectory, FloorPlanStore, VersionStore
from floorsync.telemetry import trace_sync
from floorsync.versions.lifecycle import AutoMergeOutcome, VersionLifecycle, utcnow

logger = logging.getLogger(__name__)

NO_PENDING_MESSAGE = "No pending versions to merge"

# Held or awaited locks stay referenced; idle ones are dropped
_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def floor_plan_lock(floor_plan_id: str) -> threading.Lock:
    """Get the process-wide lock serializing merges of one floor plan."""
    with _locks_guard:
        lock = _locks.get(floor_plan_id)
        if lock is None:
            lock = _locks[floor_plan_id] = threading.Lock()
        return lock


@dataclass
class ManualMergeResult:
    """Result of merging a single version by hand."""

    floor_plan: FloorPlan
    version: Version

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "floor_plan": self.floor_plan.to_dict(),
            "version": self.version.to_dict(),
        }


class VersionService:
    """
    Coordinates stores, lifecycle and merge engine.

    Operations:
    - create_version: store a draft based on the current floor plan
    - analyze: report conflicts among pending versions
    - auto_merge: merge every pending version, all or nothing
    - merge_version: apply one version's snapshot by hand
    - reject_version: reject a draft
    - compare_versions: compare two versions side by side
    """

    def __init__(
        self,
        data_dir: str | Path,
        coordinator: Optional[MergeCoordinator] = None,
        floor_plans: Optional[FloorPlanStore] = None,
        versions: Optional[VersionStore] = None,
        editors: Optional[EditorDirectory] = None,
    ):
        """
        Initialize version service.

        Args:
            data_dir: Data directory for the default stores
            coordinator: Merge coordinator
            floor_plans: Floor plan store
            versions: Version store
            editors: Editor directory
        """
        self.coordinator = coordinator or MergeCoordinator()
        self.lifecycle = VersionLifecycle(coordinator=self.coordinator)
        self.floor_plans = floor_plans or FloorPlanStore(data_dir)
        self.versions = versions or VersionStore(data_dir)
        self.editors = editors or EditorDirectory(data_dir)

    # ===== Drafts =====

    @trace_sync("service.create_version")
    def create_version(
        self,
        floor_plan_id: str,
        rooms: list[Room],
        editor_id: str,
        name: Optional[str] = None,
        change_description: Optional[str] = None,
        deleted_room_ids: Optional[list[str]] = None,
        created_at: Optional[datetime] = None,
    ) -> Version:
        """
        Store a draft version of a floor plan.

        The version number is the base version + 1 and the editor's current
        priority is copied onto the version.

        Args:
            floor_plan_id: Floor plan being edited
            rooms: Full room snapshot
            editor_id: Creating editor
            name: Optional new floor plan name
            change_description: What changed
            deleted_room_ids: Base rooms this version deletes
            created_at: Creation time (defaults to now)

        Returns:
            Stored draft version
        """
        base = self.floor_plans.load(floor_plan_id)
        editor = self.editors.get(editor_id)

        version = Version(
            floor_plan_id=base.id,
            version_number=base.version + 1,
            name=name,
            rooms=rooms,
            deleted_room_ids=deleted_room_ids or [],
            creator_id=editor.id,
            creator_name=editor.name,
            creator_priority=editor.priority,
            created_at=created_at or utcnow(),
            change_description=change_description,
        )
        return self.versions.create(version)

    def list_versions(self, floor_plan_id: str) -> list[Version]:
        """All versions of an existing floor plan, newest first."""
        self.floor_plans.load(floor_plan_id)
        return self.versions.list_for_floor_plan(floor_plan_id)

    def pending_versions(self, floor_plan_id: str) -> list[Version]:
        """Draft versions of an existing floor plan, in merge order."""
        self.floor_plans.load(floor_plan_id)
        return self.versions.find_pending_versions(floor_plan_id)

    # ===== Analysis =====

    @trace_sync("service.analyze")
    def analyze(self, floor_plan_id: str) -> Optional[ConflictReport]:
        """
        Report conflicts among the pending versions of a floor plan.

        Read-only; does not take the merge lock.

        Returns:
            ConflictReport, or None if the floor plan has no pending versions
        """
        base = self.floor_plans.load(floor_plan_id)
        pending = self.versions.find_pending_versions(floor_plan_id)
        if not pending:
            return None
        analysis = self.coordinator.analyze_versions(base, pending)
        return self.coordinator.generate_conflict_report(analysis)

    def compare_versions(self, first_id: str, second_id: str) -> VersionComparison:
        """Compare two stored versions."""
        return self.coordinator.compare_versions(
            self.versions.get(first_id), self.versions.get(second_id)
        )

    # ===== Review =====

    @trace_sync("service.auto_merge")
    def auto_merge(self, floor_plan_id: str, editor_id: str) -> AutoMergeOutcome:
        """
        Merge every pending version of a floor plan.

        Holds the floor plan's lock across load, merge and commit. If the
        merge is blocked by conflicts nothing is written.

        Args:
            floor_plan_id: Floor plan to merge into
            editor_id: Reviewing editor

        Returns:
            AutoMergeOutcome
        """
        editor = self.editors.get(editor_id)

        with floor_plan_lock(floor_plan_id):
            base = self.floor_plans.load(floor_plan_id)
            pending = self.versions.find_pending_versions(floor_plan_id)

            if not pending:
                self.lifecycle.check_authority(editor, "merge")
                logger.info(f"Floor plan {floor_plan_id} has no pending versions")
                return AutoMergeOutcome(
                    result=MergeResult(success=False, message=NO_PENDING_MESSAGE)
                )

            outcome = self.lifecycle.auto_merge_all(base, pending, editor)
            if not outcome.success:
                logger.info(
                    f"Auto-merge of {floor_plan_id} blocked by "
                    f"{len(outcome.result.conflicts)} conflicts"
                )
                return outcome

            self._commit(
                base,
                outcome.result.merged_floor_plan,
                [v.id for v in outcome.merged_versions],
                editor.id,
                outcome.merged_at,
            )
            return outcome

    @trace_sync("service.merge_version")
    def merge_version(self, version_id: str, editor_id: str) -> ManualMergeResult:
        """
        Merge a single version by hand.

        The version's snapshot replaces the base room set, without
        tombstoned rooms, and its name replaces the base name if set.

        Args:
            version_id: Version to merge
            editor_id: Reviewing editor

        Returns:
            ManualMergeResult with the new base and the merged version
        """
        editor = self.editors.get(editor_id)
        floor_plan_id = self.versions.get(version_id).floor_plan_id

        with floor_plan_lock(floor_plan_id):
            version = self.versions.get(version_id)
            merged = self.lifecycle.merge(version, editor)

            base = self.floor_plans.load(floor_plan_id)
            deleted = set(version.deleted_room_ids)
            new_base = replace(
                base,
                name=version.name or base.name,
                rooms=[room for room in version.rooms if room.id not in deleted],
                version=base.version + 1,
            )

            self._commit(base, new_base, [version.id], editor.id, merged.merged_at)
            logger.info(
                f"Version {version_id} applied to floor plan {floor_plan_id} "
                f"(v{base.version} -> v{new_base.version})"
            )
            return ManualMergeResult(floor_plan=new_base, version=merged)

    @trace_sync("service.reject_version")
    def reject_version(
        self,
        version_id: str,
        editor_id: str,
        reason: Optional[str] = None,
    ) -> Version:
        """
        Reject a draft version.

        Args:
            version_id: Version to reject
            editor_id: Reviewing editor
            reason: Why the version was rejected

        Returns:
            The rejected version
        """
        editor = self.editors.get(editor_id)
        floor_plan_id = self.versions.get(version_id).floor_plan_id

        with floor_plan_lock(floor_plan_id):
            version = self.versions.get(version_id)
            rejected = self.lifecycle.reject(version, editor, reason)
            return self.versions.mark_rejected(
                floor_plan_id,
                version.id,
                rejected_by=editor.id,
                reason=reason,
                rejected_at=rejected.rejected_at,
            )

    def _commit(
        self,
        base: FloorPlan,
        merged: FloorPlan,
        version_ids: list[str],
        merged_by: str,
        merged_at: datetime,
    ) -> None:
        """
        Persist a merged base, then mark the consumed versions.

        If marking the versions fails the previous base is restored, so a
        failed commit leaves no trace.
        """
        if merged.version != base.version + 1:
            raise ValidationError(
                f"Merged floor plan must be v{base.version + 1}, got v{merged.version}",
                field="version",
            )

        self.floor_plans.save(merged)
        try:
            self.versions.mark_merged(base.id, version_ids, merged_by, merged_at)
        except FloorSyncError:
            logger.error(
                f"Failed to mark versions merged for {base.id}; restoring v{base.version}"
            )
            self.floor_plans.save(base)
            raise
