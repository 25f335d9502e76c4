"""
Change detection for floor plan merging.

Groups every room occurrence across pending versions by room id, and
compares versions side by side.
"""

import logging
from typing import Optional

from floorsync.errors import ValidationError
from floorsync.merge.config import MergeConfig, get_merge_config
from floorsync.merge.models import (
    FloorPlan,
    RoomChange,
    RoomDifference,
    Version,
    VersionComparison,
)

logger = logging.getLogger(__name__)

RoomChangeMap = dict[str, list[RoomChange]]


class ChangeDetector:
    """
    Extracts per-room changes from pending versions.

    Pure with respect to its inputs: neither the base floor plan nor the
    versions are modified.
    """

    def __init__(self, config: Optional[MergeConfig] = None):
        """
        Initialize change detector.

        Args:
            config: Merge configuration
        """
        self.config = config or get_merge_config()

    def extract_changes(
        self,
        base: FloorPlan,
        pending_versions: list[Version],
    ) -> RoomChangeMap:
        """
        Group every room in every pending version by room id.

        Groups keep version order, so the first entry of a group comes
        from the earliest version that mentions the room.

        Args:
            base: Base floor plan
            pending_versions: Draft versions for that floor plan

        Returns:
            Mapping of room id to its occurrences
        """
        changes: RoomChangeMap = {}

        for version in pending_versions:
            if version.floor_plan_id != base.id:
                raise ValidationError(
                    f"Version {version.id} belongs to floor plan {version.floor_plan_id}, "
                    f"not {base.id}",
                    field="floor_plan_id",
                )
            for room in version.rooms:
                changes.setdefault(room.id, []).append(
                    RoomChange(
                        room=room,
                        source_version=version,
                        creator_priority=version.creator_priority,
                        created_at_epoch=version.created_at_epoch,
                    )
                )

        additions = len(self.addition_candidates(base, changes))
        logger.debug(
            f"Extracted {len(changes)} room groups from {len(pending_versions)} versions "
            f"for floor plan {base.id} ({additions} addition candidates)"
        )
        return changes

    def addition_candidates(self, base: FloorPlan, changes: RoomChangeMap) -> list[str]:
        """Room ids proposed by some version but absent from the base."""
        base_ids = {room.id for room in base.rooms}
        return [room_id for room_id in changes if room_id not in base_ids]

    def modification_candidates(self, base: FloorPlan, changes: RoomChangeMap) -> list[str]:
        """Base room ids that at least one version changes."""
        base_rooms = base.room_map()
        return [
            room_id
            for room_id, entries in changes.items()
            if room_id in base_rooms
            and any(entry.room != base_rooms[room_id] for entry in entries)
        ]

    def compare_versions(self, first: Version, second: Version) -> VersionComparison:
        """
        Compare two versions side by side.

        Args:
            first: First version
            second: Second version

        Returns:
            VersionComparison with rooms unique to each side and rooms
            whose properties differ
        """
        first_rooms = {room.id: room for room in first.rooms}
        second_rooms = {room.id: room for room in second.rooms}

        modified = []
        for room_id, room in first_rooms.items():
            other = second_rooms.get(room_id)
            if other is None:
                continue
            differences = room.diff(other)
            if differences:
                modified.append(
                    RoomDifference(
                        room_id=room_id,
                        first=room,
                        second=other,
                        differences=differences,
                    )
                )

        return VersionComparison(
            first=first,
            second=second,
            only_in_first=[r for r in first.rooms if r.id not in second_rooms],
            only_in_second=[r for r in second.rooms if r.id not in first_rooms],
            modified=modified,
        )
