"""
Merge assembly for floor plans.

Applies the safe changes of a conflict analysis onto a copy of the base
room set and places new rooms that do not collide with the result.
"""

import logging
from dataclasses import replace
from typing import Optional

from floorsync.merge.config import MergeConfig, get_merge_config
from floorsync.merge.geometry import find_collision
from floorsync.merge.models import (
    ChangeAction,
    ConflictAnalysis,
    FloorPlan,
    MergeResult,
    Room,
    RoomDeletion,
    Version,
)

logger = logging.getLogger(__name__)


class MergeAssembler:
    """
    Builds the merged floor plan from an auto-mergeable analysis.

    Each call works on its own room map; nothing is cached between calls
    and the base floor plan is never modified.
    """

    def __init__(self, config: Optional[MergeConfig] = None):
        """
        Initialize assembler.

        Args:
            config: Merge configuration
        """
        self.config = config or get_merge_config()

    def assemble(
        self,
        base: FloorPlan,
        pending_versions: list[Version],
        analysis: ConflictAnalysis,
    ) -> MergeResult:
        """
        Assemble the merged floor plan.

        Args:
            base: Base floor plan
            pending_versions: Versions consumed by the merge
            analysis: Analysis of those versions against the base

        Returns:
            MergeResult; a failure carrying the conflicts if the analysis
            cannot be auto-merged
        """
        if not analysis.can_auto_merge:
            logger.info(
                f"Refusing to merge floor plan {base.id}: "
                f"{analysis.total_conflicts} unresolved conflicts"
            )
            return MergeResult.blocked(analysis.conflicts)

        working: dict[str, Room] = base.room_map()
        additions: dict[str, Room] = {}
        deleted: set[str] = set()

        for change in analysis.safe_changes:
            if isinstance(change, RoomDeletion):
                working.pop(change.room_id, None)
                deleted.add(change.room_id)
            elif change.action == ChangeAction.ADD:
                # Placed below; may still be dropped on collision
                additions.setdefault(change.room_id, change.resolved_room)
            else:
                working[change.room_id] = change.resolved_room

        # Rooms no safe change accounted for; duplicates are idempotent
        for version in pending_versions:
            for room in version.rooms:
                if room.id not in working and room.id not in deleted:
                    additions.setdefault(room.id, room)

        dropped = self._place_new_rooms(working, additions)

        merged = replace(base, rooms=list(working.values()), version=base.version + 1)
        logger.info(
            f"Merged {len(pending_versions)} versions into floor plan {base.id} "
            f"(v{base.version} -> v{merged.version}, "
            f"{analysis.total_safe_changes} changes, {len(dropped)} rooms dropped)"
        )
        return MergeResult(
            success=True,
            merged_floor_plan=merged,
            applied_changes=list(analysis.safe_changes),
            merged_version_count=len(pending_versions),
            dropped_rooms=dropped,
        )

    def _place_new_rooms(
        self,
        working: dict[str, Room],
        additions: dict[str, Room],
    ) -> list[Room]:
        """
        Add new rooms that do not collide with the working layout.

        Rooms are placed in first-seen order, so a later addition is also
        checked against earlier ones.

        Returns:
            Rooms that were dropped
        """
        dropped = []
        for room_id, room in additions.items():
            collision = find_collision(room, working.values(), self.config.placement)
            if collision is not None:
                logger.warning(
                    f"Dropping new room {room_id}: overlaps existing room {collision.id}"
                )
                dropped.append(room)
                continue
            working[room_id] = room
        return dropped
