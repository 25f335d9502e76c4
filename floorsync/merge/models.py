"""
Data models for floor plan merging.

Defines rooms, floor plans, draft versions and editors, and the tagged
union of per-room outcomes produced by conflict analysis.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from floorsync.errors import ValidationError


class RoomType(str, Enum):
    """Room type tag. Determines dimensions via the room dimension table."""

    MEETING_ROOM = "meeting_room"
    CONFERENCE_ROOM = "conference_room"
    WASHROOM = "washroom"
    STAIRS = "stairs"
    ELEVATOR = "elevator"
    STAFF_ROOM = "staff_room"
    PANTRY = "pantry"
    STORAGE = "storage"


class RoomProperty(str, Enum):
    """Mergeable room property groups."""

    POSITION = "position"  # x and y move together
    NAME = "name"
    TYPE = "type"
    ALL = "*"  # room absent from the base


class VersionStatus(str, Enum):
    """Lifecycle status of a draft version."""

    DRAFT = "draft"
    MERGED = "merged"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self != VersionStatus.DRAFT


class EditorRole(str, Enum):
    """Role of an editor."""

    EDITOR = "editor"
    ADMIN = "admin"


class ChangeAction(str, Enum):
    """What a safe change does to the base room set."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


class ResolutionReason(str, Enum):
    """Why a contributor won an overlapping-property resolution."""

    HIGHER_PRIORITY = "higher_priority"
    LATEST_TIMESTAMP = "latest_timestamp"
    HIGHEST_PRIORITY = "highest_priority"  # first contributor was never displaced


def _as_utc(value: datetime) -> datetime:
    """Read naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_priority(priority: Any, owner: str) -> None:
    if isinstance(priority, bool) or not isinstance(priority, int) or priority < 1:
        raise ValidationError(
            f"{owner} has invalid priority: {priority!r}", field="priority"
        )


def _check_unique_rooms(rooms: list["Room"], owner: str) -> None:
    seen: set[str] = set()
    for room in rooms:
        if not isinstance(room, Room):
            raise ValidationError(f"{owner} contains a non-room entry: {room!r}", field="rooms")
        if room.id in seen:
            raise ValidationError(f"{owner} contains duplicate room id: {room.id}", field="rooms")
        seen.add(room.id)


@dataclass(frozen=True)
class Room:
    """A room placed on a floor plan. Identity is ``id``."""

    id: str
    type: RoomType
    x: float
    y: float
    name: str = ""

    def __post_init__(self):
        """Validate and normalize fields."""
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("Room id is required", field="id")

        try:
            object.__setattr__(self, "type", RoomType(self.type))
        except (ValueError, TypeError):
            raise ValidationError(
                f"Room {self.id} has unknown type: {self.type!r}", field="type"
            ) from None

        for axis in ("x", "y"):
            value = getattr(self, axis)
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not math.isfinite(value)
            ):
                raise ValidationError(
                    f"Room {self.id} has invalid {axis}: {value!r}", field=axis
                )

        if self.name is None:
            object.__setattr__(self, "name", "")
        elif not isinstance(self.name, str):
            raise ValidationError(f"Room {self.id} has invalid name: {self.name!r}", field="name")

    def diff(self, other: "Room") -> list[RoomProperty]:
        """
        List the property groups that differ between two states of a room.

        Args:
            other: Another state of the same room

        Returns:
            Differing properties, in position/name/type order
        """
        changed = []
        if self.x != other.x or self.y != other.y:
            changed.append(RoomProperty.POSITION)
        if self.name != other.name:
            changed.append(RoomProperty.NAME)
        if self.type != other.type:
            changed.append(RoomProperty.TYPE)
        return changed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "name": self.name,
        }


@dataclass
class FloorPlan:
    """
    The canonical, last-agreed-upon layout.

    ``version`` only ever moves forward, by exactly one per merge.
    """

    id: str
    name: str = ""
    rooms: list[Room] = field(default_factory=list)
    version: int = 1

    def __post_init__(self):
        """Validate room set."""
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError("Floor plan id is required", field="id")
        self.rooms = list(self.rooms)
        _check_unique_rooms(self.rooms, f"Floor plan {self.id}")

    def room_map(self) -> dict[str, Room]:
        """Rooms keyed by id, in layout order."""
        return {room.id: room for room in self.rooms}

    def get_room(self, room_id: str) -> Optional[Room]:
        """Get a room by id."""
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "rooms": [r.to_dict() for r in self.rooms],
            "version": self.version,
        }


@dataclass
class Version:
    """
    A draft snapshot of an editor's intended layout.

    The room set is a full snapshot, not a delta. Deletions are explicit:
    a base room is deleted only when its id is listed in
    ``deleted_room_ids``.
    """

    floor_plan_id: str
    creator_id: str
    creator_priority: int
    created_at: datetime
    rooms: list[Room] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    version_number: int = 1
    status: VersionStatus = VersionStatus.DRAFT
    name: Optional[str] = None
    creator_name: str = ""
    change_description: Optional[str] = None
    deleted_room_ids: list[str] = field(default_factory=list)

    # Review metadata
    merged_at: Optional[datetime] = None
    merged_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: Optional[str] = None

    def __post_init__(self):
        """Validate and normalize fields."""
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError("Version id is required", field="id")
        _check_priority(self.creator_priority, f"Version {self.id}")
        if not isinstance(self.created_at, datetime):
            raise ValidationError(
                f"Version {self.id} has invalid created_at: {self.created_at!r}",
                field="created_at",
            )
        self.created_at = _as_utc(self.created_at)
        try:
            self.status = VersionStatus(self.status)
        except ValueError:
            raise ValidationError(
                f"Version {self.id} has unknown status: {self.status!r}", field="status"
            ) from None
        self.rooms = list(self.rooms)
        _check_unique_rooms(self.rooms, f"Version {self.id}")
        if not isinstance(self.deleted_room_ids, (list, tuple)) or not all(
            isinstance(room_id, str) and room_id for room_id in self.deleted_room_ids
        ):
            raise ValidationError(
                f"Version {self.id} has invalid deleted_room_ids: {self.deleted_room_ids!r}",
                field="deleted_room_ids",
            )
        self.deleted_room_ids = list(self.deleted_room_ids)

    @property
    def created_at_epoch(self) -> int:
        """Creation time in milliseconds since the epoch."""
        return int(self.created_at.timestamp() * 1000)

    @property
    def is_draft(self) -> bool:
        return self.status == VersionStatus.DRAFT

    def has_room(self, room_id: str) -> bool:
        """Check if the snapshot contains a room."""
        return any(room.id == room_id for room in self.rooms)

    def get_room(self, room_id: str) -> Optional[Room]:
        """Get a room from the snapshot by id."""
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "floor_plan_id": self.floor_plan_id,
            "version_number": self.version_number,
            "name": self.name,
            "rooms": [r.to_dict() for r in self.rooms],
            "deleted_room_ids": list(self.deleted_room_ids),
            "creator_id": self.creator_id,
            "creator_name": self.creator_name,
            "creator_priority": self.creator_priority,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "change_description": self.change_description,
            "merged_at": self.merged_at.isoformat() if self.merged_at else None,
            "merged_by": self.merged_by,
            "rejected_at": self.rejected_at.isoformat() if self.rejected_at else None,
            "rejected_by": self.rejected_by,
            "rejection_reason": self.rejection_reason,
        }


@dataclass
class Editor:
    """An editor. Lower priority number means higher authority."""

    id: str
    priority: int
    name: str = ""
    role: EditorRole = EditorRole.EDITOR

    def __post_init__(self):
        """Validate fields."""
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError("Editor id is required", field="id")
        _check_priority(self.priority, f"Editor {self.id}")
        try:
            self.role = EditorRole(self.role)
        except ValueError:
            raise ValidationError(
                f"Editor {self.id} has unknown role: {self.role!r}", field="role"
            ) from None

    @property
    def is_head_editor(self) -> bool:
        return self.priority == 1

    @property
    def can_review(self) -> bool:
        """Head editors and admins may merge or reject versions."""
        return self.is_head_editor or self.role == EditorRole.ADMIN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "priority": self.priority,
            "role": self.role.value,
        }


@dataclass(frozen=True, eq=False)
class RoomChange:
    """One occurrence of a room in a pending version."""

    room: Room
    source_version: Version
    creator_priority: int
    created_at_epoch: int

    @property
    def version_id(self) -> str:
        return self.source_version.id

    @property
    def creator_id(self) -> str:
        return self.source_version.creator_id

    @property
    def creator_name(self) -> str:
        return self.source_version.creator_name or self.source_version.creator_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "room": self.room.to_dict(),
            "version_id": self.version_id,
            "creator": self.creator_name,
            "priority": self.creator_priority,
            "timestamp": self.created_at_epoch,
        }


@dataclass(frozen=True)
class ResolutionOutcome:
    """Winner of an overlapping-property resolution, with the losers kept for reporting."""

    winner: RoomChange
    losers: tuple[RoomChange, ...]
    reason: ResolutionReason
    detail: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "winner": self.winner.to_dict(),
            "losers": [c.to_dict() for c in self.losers],
            "reason": self.reason.value,
            "detail": self.detail,
        }


# ===== Per-room outcomes =====


@dataclass(frozen=True)
class SingleChange:
    """
    Exactly one version proposes a change to the room.

    A modification is applied as proposed. An addition still has to pass
    the placement check and is dropped if it collides with the merged
    layout; see ``MergeResult.dropped_rooms``.
    """

    kind: ClassVar[str] = "single_change"

    room_id: str
    change: RoomChange
    action: ChangeAction

    @property
    def resolved_room(self) -> Room:
        return self.change.room

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "room_id": self.room_id,
            "action": self.action.value,
            "change": self.change.to_dict(),
        }


@dataclass(frozen=True)
class NonOverlapping:
    """Several versions change disjoint properties; their changes are unioned."""

    kind: ClassVar[str] = "merge_properties"

    room_id: str
    merged_room: Room
    changes: tuple[RoomChange, ...]
    action: ChangeAction

    @property
    def resolved_room(self) -> Room:
        return self.merged_room

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "room_id": self.room_id,
            "action": self.action.value,
            "merged_room": self.merged_room.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass(frozen=True)
class OverlappingResolved:
    """Several versions change the same property; one winner is picked."""

    kind: ClassVar[str] = "priority_timestamp"

    room_id: str
    outcome: ResolutionOutcome
    overlapping_properties: tuple[RoomProperty, ...]
    action: ChangeAction

    @property
    def winner(self) -> RoomChange:
        return self.outcome.winner

    @property
    def losers(self) -> tuple[RoomChange, ...]:
        return self.outcome.losers

    @property
    def reason(self) -> ResolutionReason:
        return self.outcome.reason

    @property
    def resolved_room(self) -> Room:
        return self.outcome.winner.room

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "room_id": self.room_id,
            "action": self.action.value,
            "properties": [p.value for p in self.overlapping_properties],
            "resolution": self.outcome.to_dict(),
        }


@dataclass(frozen=True)
class RoomDeletion:
    """A base room tombstoned by one or more versions and changed by none."""

    kind: ClassVar[str] = "deletion"
    action: ClassVar[ChangeAction] = ChangeAction.DELETE

    room_id: str
    base_room: Room
    versions: tuple[Version, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "room_id": self.room_id,
            "action": self.action.value,
            "base_room": self.base_room.to_dict(),
            "version_ids": [v.id for v in self.versions],
        }


@dataclass(frozen=True)
class DeletionConflict:
    """A base room deleted by some versions and changed by others."""

    kind: ClassVar[str] = "deletion_conflict"

    room_id: str
    base_room: Room
    versions: tuple[Version, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "room_id": self.room_id,
            "base_room": self.base_room.to_dict(),
            "version_ids": [v.id for v in self.versions],
        }


SafeChange = Union[SingleChange, NonOverlapping, OverlappingResolved, RoomDeletion]
Conflict = Union[DeletionConflict, OverlappingResolved]
RoomOutcome = Union[SingleChange, NonOverlapping, OverlappingResolved, RoomDeletion, DeletionConflict]


@dataclass
class ConflictAnalysis:
    """Result of analyzing pending versions against a base floor plan."""

    conflicts: list[Conflict] = field(default_factory=list)
    safe_changes: list[SafeChange] = field(default_factory=list)

    @property
    def can_auto_merge(self) -> bool:
        return not self.conflicts

    @property
    def total_conflicts(self) -> int:
        return len(self.conflicts)

    @property
    def total_safe_changes(self) -> int:
        return len(self.safe_changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "conflicts": [c.to_dict() for c in self.conflicts],
            "safe_changes": [c.to_dict() for c in self.safe_changes],
            "can_auto_merge": self.can_auto_merge,
            "total_conflicts": self.total_conflicts,
            "total_safe_changes": self.total_safe_changes,
        }


@dataclass
class ReportEntry:
    """One human-readable line of a conflict report."""

    type: str
    room_id: str
    description: str
    needs_manual_review: bool = False
    suggested_resolution: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "room_id": self.room_id,
            "description": self.description,
        }
        if self.needs_manual_review or self.suggested_resolution is not None:
            data["needs_manual_review"] = self.needs_manual_review
            data["suggested_resolution"] = self.suggested_resolution
        return data


@dataclass
class ConflictReport:
    """Human-readable projection of a ConflictAnalysis."""

    total_conflicts: int
    total_safe_changes: int
    can_auto_merge: bool
    conflicts: list[ReportEntry] = field(default_factory=list)
    safe_changes: list[ReportEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "summary": {
                "total_conflicts": self.total_conflicts,
                "total_safe_changes": self.total_safe_changes,
                "can_auto_merge": self.can_auto_merge,
            },
            "conflicts": [e.to_dict() for e in self.conflicts],
            "safe_changes": [e.to_dict() for e in self.safe_changes],
        }


@dataclass
class MergeResult:
    """
    Result of an auto-merge.

    On success ``merged_floor_plan`` holds the new layout; otherwise
    ``conflicts`` lists what blocked the merge and nothing was changed.

    ``applied_changes`` lists every safe change of the analysis, including
    additions that were then dropped for colliding with the layout. Those
    rooms are in ``dropped_rooms`` and absent from ``merged_floor_plan``.
    """

    success: bool
    merged_floor_plan: Optional[FloorPlan] = None
    applied_changes: list[SafeChange] = field(default_factory=list)
    merged_version_count: int = 0
    dropped_rooms: list[Room] = field(default_factory=list)
    message: str = ""
    conflicts: list[Conflict] = field(default_factory=list)

    @classmethod
    def blocked(cls, conflicts: list[Conflict]) -> "MergeResult":
        """Build the failure result for an analysis with unresolved conflicts."""
        return cls(
            success=False,
            message="Cannot auto-merge - manual conflict resolution required",
            conflicts=list(conflicts),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        if not self.success:
            return {
                "success": False,
                "message": self.message,
                "conflicts": [c.to_dict() for c in self.conflicts],
            }
        return {
            "success": True,
            "merged_floor_plan": self.merged_floor_plan.to_dict()
            if self.merged_floor_plan
            else None,
            "applied_changes": [c.to_dict() for c in self.applied_changes],
            "merged_version_count": self.merged_version_count,
            "dropped_rooms": [r.to_dict() for r in self.dropped_rooms],
        }


@dataclass
class RoomDifference:
    """A room present in two versions with differing properties."""

    room_id: str
    first: Room
    second: Room
    differences: list[RoomProperty] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "first": self.first.to_dict(),
            "second": self.second.to_dict(),
            "differences": [d.value for d in self.differences],
        }


@dataclass
class VersionComparison:
    """Side-by-side comparison of two versions."""

    first: Version
    second: Version
    only_in_first: list[Room] = field(default_factory=list)
    only_in_second: list[Room] = field(default_factory=list)
    modified: list[RoomDifference] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""

        def summary(version: Version, added: list[Room]) -> dict[str, Any]:
            return {
                "id": version.id,
                "creator": version.creator_name or version.creator_id,
                "priority": version.creator_priority,
                "created_at": version.created_at.isoformat(),
                "added_rooms": [r.to_dict() for r in added],
                "total_rooms": len(version.rooms),
            }

        return {
            "first": summary(self.first, self.only_in_first),
            "second": summary(self.second, self.only_in_second),
            "differences": {
                "added_in_first": len(self.only_in_first),
                "added_in_second": len(self.only_in_second),
                "modified": len(self.modified),
                "modified_rooms": [m.to_dict() for m in self.modified],
            },
        }
