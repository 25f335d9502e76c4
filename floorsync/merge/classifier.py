"""
Conflict classification for floor plan merging.

Decides, per room, whether pending changes merge automatically or need a
human decision.
"""

import logging
from dataclasses import replace
from typing import Optional

from floorsync.merge.config import MergeConfig, get_merge_config
from floorsync.merge.detector import ChangeDetector, RoomChangeMap
from floorsync.merge.models import (
    ChangeAction,
    Conflict,
    ConflictAnalysis,
    DeletionConflict,
    FloorPlan,
    NonOverlapping,
    OverlappingResolved,
    Room,
    RoomChange,
    RoomDeletion,
    RoomOutcome,
    RoomProperty,
    SafeChange,
    SingleChange,
    Version,
)
from floorsync.merge.strategies import PriorityTimestampStrategy

logger = logging.getLogger(__name__)


def modified_properties(base_room: Optional[Room], room: Room) -> list[RoomProperty]:
    """
    Get the property groups a proposed room changes relative to the base.

    A room absent from the base changes everything (``*``).
    """
    if base_room is None:
        return [RoomProperty.ALL]
    return base_room.diff(room)


class ConflictClassifier:
    """
    Classifies per-room changes from pending versions.

    Per room:
    - One contributing version: single change (add or modify)
    - Several, disjoint properties: non-overlapping, properties unioned
    - Several, shared property: overlapping, resolved by priority/recency
    - Tombstoned and changed elsewhere: deletion conflict

    An occurrence identical to the base room does not contribute.
    """

    def __init__(
        self,
        config: Optional[MergeConfig] = None,
        detector: Optional[ChangeDetector] = None,
        strategy: Optional[PriorityTimestampStrategy] = None,
    ):
        """
        Initialize classifier.

        Args:
            config: Merge configuration
            detector: Change detector used when no change map is supplied
            strategy: Strategy for overlapping changes
        """
        self.config = config or get_merge_config()
        self.detector = detector or ChangeDetector(config=self.config)
        self.strategy = strategy or PriorityTimestampStrategy()

    def analyze(
        self,
        base: FloorPlan,
        pending_versions: list[Version],
        changes: Optional[RoomChangeMap] = None,
    ) -> ConflictAnalysis:
        """
        Analyze pending versions against the base floor plan.

        Args:
            base: Base floor plan
            pending_versions: Draft versions for that floor plan
            changes: Precomputed change map (extracted if omitted)

        Returns:
            ConflictAnalysis with conflicts and safe changes
        """
        if changes is None:
            changes = self.detector.extract_changes(base, pending_versions)

        base_rooms = base.room_map()
        tombstones = self._collect_tombstones(base_rooms, pending_versions)

        conflicts: list[Conflict] = []
        safe_changes: list[SafeChange] = []

        for room_id, entries in changes.items():
            if room_id in tombstones:
                continue
            outcome = self.classify_room(base_rooms.get(room_id), entries)
            if outcome is None:
                continue
            if (
                isinstance(outcome, OverlappingResolved)
                and not self.config.resolution.auto_resolve_overlapping
            ):
                conflicts.append(outcome)
            else:
                safe_changes.append(outcome)

        for room_id, deleting_versions in tombstones.items():
            outcome = self._classify_deletion(
                base_rooms[room_id], deleting_versions, changes.get(room_id, [])
            )
            if isinstance(outcome, DeletionConflict):
                conflicts.append(outcome)
            else:
                safe_changes.append(outcome)

        analysis = ConflictAnalysis(conflicts=conflicts, safe_changes=safe_changes)
        logger.info(
            f"Analyzed {len(pending_versions)} versions for floor plan {base.id}: "
            f"{analysis.total_safe_changes} safe changes, "
            f"{analysis.total_conflicts} conflicts"
        )
        return analysis

    def classify_room(
        self,
        base_room: Optional[Room],
        entries: list[RoomChange],
    ) -> Optional[RoomOutcome]:
        """
        Classify the occurrences of one room.

        Args:
            base_room: Room in the base, or None for a new room
            entries: Occurrences of the room across pending versions

        Returns:
            The room outcome, or None if no version changes the room
        """
        contributors = [
            entry for entry in entries if modified_properties(base_room, entry.room)
        ]
        if not contributors:
            return None

        room_id = contributors[0].room.id
        action = ChangeAction.ADD if base_room is None else ChangeAction.MODIFY

        if len(contributors) == 1:
            logger.debug(f"Room {room_id}: single {action.value} by {contributors[0].version_id}")
            return SingleChange(room_id=room_id, change=contributors[0], action=action)

        property_map: dict[RoomProperty, list[RoomChange]] = {}
        for entry in contributors:
            for prop in modified_properties(base_room, entry.room):
                property_map.setdefault(prop, []).append(entry)

        if property_map and all(len(owners) == 1 for owners in property_map.values()):
            logger.debug(
                f"Room {room_id}: non-overlapping changes to "
                f"{', '.join(p.value for p in property_map)}"
            )
            return NonOverlapping(
                room_id=room_id,
                merged_room=self._merge_properties(base_room, contributors),
                changes=tuple(contributors),
                action=action,
            )

        overlapping = tuple(prop for prop, owners in property_map.items() if len(owners) > 1)
        return OverlappingResolved(
            room_id=room_id,
            outcome=self.strategy.resolve(contributors),
            overlapping_properties=overlapping,
            action=action,
        )

    def _merge_properties(
        self,
        base_room: Optional[Room],
        contributors: list[RoomChange],
    ) -> Room:
        """Union each contributor's changed properties onto the base room."""
        merged = base_room or contributors[0].room
        for entry in contributors:
            proposed = entry.room
            for prop in modified_properties(base_room, proposed):
                if prop == RoomProperty.POSITION:
                    merged = replace(merged, x=proposed.x, y=proposed.y)
                elif prop == RoomProperty.NAME:
                    merged = replace(merged, name=proposed.name)
                elif prop == RoomProperty.TYPE:
                    merged = replace(merged, type=proposed.type)
        return merged

    def _collect_tombstones(
        self,
        base_rooms: dict[str, Room],
        pending_versions: list[Version],
    ) -> dict[str, list[Version]]:
        """
        Map base room ids to the versions that delete them.

        Deletions are explicit tombstones. With
        ``infer_deletions_from_absence`` a version omitting a base room
        also counts as deleting it.
        """
        tombstones: dict[str, list[Version]] = {}
        infer = self.config.detection.infer_deletions_from_absence

        for version in pending_versions:
            deleted = list(dict.fromkeys(version.deleted_room_ids))
            if infer:
                deleted.extend(
                    room_id
                    for room_id in base_rooms
                    if room_id not in deleted and not version.has_room(room_id)
                )
            for room_id in deleted:
                if room_id not in base_rooms:
                    logger.warning(
                        f"Version {version.id} deletes room {room_id}, "
                        f"which is not in the base floor plan; ignoring"
                    )
                    continue
                tombstones.setdefault(room_id, []).append(version)

        # Keep base layout order
        return {room_id: tombstones[room_id] for room_id in base_rooms if room_id in tombstones}

    def _classify_deletion(
        self,
        base_room: Room,
        deleting_versions: list[Version],
        entries: list[RoomChange],
    ) -> RoomDeletion | DeletionConflict:
        """Classify a tombstoned base room."""
        deleting_ids = {v.id for v in deleting_versions}
        modifiers: dict[str, Version] = {}
        for entry in entries:
            if entry.version_id in deleting_ids:
                continue  # a version's own tombstone wins over its snapshot
            if modified_properties(base_room, entry.room):
                modifiers.setdefault(entry.version_id, entry.source_version)

        if modifiers:
            logger.debug(
                f"Room {base_room.id}: deleted by {len(deleting_versions)} version(s), "
                f"modified by {len(modifiers)}"
            )
            return DeletionConflict(
                room_id=base_room.id,
                base_room=base_room,
                versions=tuple(deleting_versions) + tuple(modifiers.values()),
            )

        return RoomDeletion(
            room_id=base_room.id,
            base_room=base_room,
            versions=tuple(deleting_versions),
        )
