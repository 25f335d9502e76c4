"""
Pydantic schemas for floorsync.

Validates raw JSON (files, CLI input) into domain objects. Validation
failures surface as ``floorsync.errors.ValidationError``.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from floorsync.errors import ValidationError
from floorsync.merge.models import (
    Editor,
    EditorRole,
    FloorPlan,
    Room,
    RoomType,
    Version,
    VersionStatus,
)


# ===== Room Schemas =====


class RoomSchema(BaseModel):
    """A room on a floor plan."""

    id: str = Field(..., min_length=1, description="Room identity, stable across versions")
    type: RoomType = Field(..., description="Room type tag")
    x: float = Field(..., description="Anchor x coordinate")
    y: float = Field(..., description="Anchor y coordinate")
    name: str = Field(default="", description="Display name")

    def to_domain(self) -> Room:
        return Room(id=self.id, type=self.type, x=self.x, y=self.y, name=self.name)


# ===== Floor Plan Schemas =====


class FloorPlanSchema(BaseModel):
    """The canonical layout of a floor."""

    id: str = Field(..., min_length=1, description="Floor plan identifier")
    name: str = Field(default="", description="Floor plan name")
    rooms: list[RoomSchema] = Field(default_factory=list, description="Rooms in layout order")
    version: int = Field(default=1, ge=1, description="Monotonic version counter")

    def to_domain(self) -> FloorPlan:
        return FloorPlan(
            id=self.id,
            name=self.name,
            rooms=[r.to_domain() for r in self.rooms],
            version=self.version,
        )


# ===== Version Schemas =====


class VersionSchema(BaseModel):
    """A draft snapshot of an editor's layout."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Version ID")
    floor_plan_id: str = Field(..., min_length=1, description="Floor plan this version edits")
    version_number: int = Field(default=1, ge=1, description="Base version + 1 at creation")
    name: Optional[str] = Field(default=None, description="Optional new floor plan name")
    rooms: list[RoomSchema] = Field(default_factory=list, description="Full room snapshot")
    deleted_room_ids: list[str] = Field(
        default_factory=list, description="Base rooms this version deletes"
    )
    creator_id: str = Field(..., min_length=1, description="Editor who created the version")
    creator_name: str = Field(default="", description="Editor display name")
    creator_priority: int = Field(..., ge=1, description="Editor priority (1 is highest)")
    created_at: datetime = Field(..., description="Creation timestamp")
    status: VersionStatus = Field(default=VersionStatus.DRAFT, description="Lifecycle status")
    change_description: Optional[str] = Field(default=None, description="What changed")
    merged_at: Optional[datetime] = Field(default=None)
    merged_by: Optional[str] = Field(default=None)
    rejected_at: Optional[datetime] = Field(default=None)
    rejected_by: Optional[str] = Field(default=None)
    rejection_reason: Optional[str] = Field(default=None)

    def to_domain(self) -> Version:
        return Version(
            id=self.id,
            floor_plan_id=self.floor_plan_id,
            version_number=self.version_number,
            name=self.name,
            rooms=[r.to_domain() for r in self.rooms],
            deleted_room_ids=list(self.deleted_room_ids),
            creator_id=self.creator_id,
            creator_name=self.creator_name,
            creator_priority=self.creator_priority,
            created_at=self.created_at,
            status=self.status,
            change_description=self.change_description,
            merged_at=self.merged_at,
            merged_by=self.merged_by,
            rejected_at=self.rejected_at,
            rejected_by=self.rejected_by,
            rejection_reason=self.rejection_reason,
        )


# ===== Editor Schemas =====


class EditorSchema(BaseModel):
    """An editor and their merge authority."""

    id: str = Field(..., min_length=1, description="Editor identifier")
    name: str = Field(default="", description="Display name")
    priority: int = Field(..., ge=1, description="Priority (1 is the head editor)")
    role: EditorRole = Field(default=EditorRole.EDITOR, description="Editor role")

    def to_domain(self) -> Editor:
        return Editor(id=self.id, name=self.name, priority=self.priority, role=self.role)


# ===== Loaders =====


def _validate(schema: type[BaseModel], data: Any, what: str) -> BaseModel:
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(
            f"Invalid {what}: {location}: {first['msg']}", field=location or None
        ) from e


def parse_room(data: Any) -> Room:
    """Validate a room mapping."""
    return _validate(RoomSchema, data, "room").to_domain()


def parse_rooms(data: Any) -> list[Room]:
    """Validate a list of room mappings."""
    if not isinstance(data, list):
        raise ValidationError("Rooms must be a list", field="rooms")
    return [parse_room(item) for item in data]


def parse_floor_plan(data: Any) -> FloorPlan:
    """Validate a floor plan mapping."""
    return _validate(FloorPlanSchema, data, "floor plan").to_domain()


def parse_version(data: Any) -> Version:
    """Validate a version mapping."""
    return _validate(VersionSchema, data, "version").to_domain()


def parse_editor(data: Any) -> Editor:
    """Validate an editor mapping."""
    return _validate(EditorSchema, data, "editor").to_domain()
