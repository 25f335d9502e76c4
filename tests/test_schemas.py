"""Tests for pydantic input schemas."""

from datetime import timezone

import pytest

from floorsync.errors import ValidationError
from floorsync.merge.models import EditorRole, RoomType, VersionStatus
from floorsync.schemas import (
    parse_editor,
    parse_floor_plan,
    parse_room,
    parse_rooms,
    parse_version,
)


class TestSchemas:
    """Tests for the parse_* loaders."""

    def test_parse_room(self):
        """Test a room mapping becomes a Room."""
        room = parse_room({"id": "r1", "type": "stairs", "x": 10, "y": 20.5})
        assert room.type is RoomType.STAIRS
        assert (room.x, room.y, room.name) == (10, 20.5, "")

    def test_unknown_room_type(self):
        """Test pydantic failures surface as floorsync validation errors."""
        with pytest.raises(ValidationError) as exc_info:
            parse_room({"id": "r1", "type": "ballroom", "x": 0, "y": 0})
        assert exc_info.value.field == "type"

    def test_missing_room_id(self):
        """Test a room without id is rejected."""
        with pytest.raises(ValidationError, match="id"):
            parse_room({"type": "stairs", "x": 0, "y": 0})

    def test_parse_rooms_requires_list(self):
        """Test room collections must be lists."""
        with pytest.raises(ValidationError):
            parse_rooms({"id": "r1"})

    def test_parse_floor_plan(self):
        """Test a floor plan mapping with rooms."""
        plan = parse_floor_plan(
            {
                "id": "fp-1",
                "name": "Level 3",
                "version": 4,
                "rooms": [
                    {"id": "r1", "type": "pantry", "x": 0, "y": 0, "name": "Kitchen"},
                    {"id": "r2", "type": "storage", "x": 200, "y": 0},
                ],
            }
        )
        assert plan.version == 4
        assert [r.id for r in plan.rooms] == ["r1", "r2"]

    def test_floor_plan_version_must_be_positive(self):
        """Test version counters start at 1."""
        with pytest.raises(ValidationError):
            parse_floor_plan({"id": "fp-1", "version": 0})

    def test_duplicate_rooms_rejected(self):
        """Test domain validation still applies after schema validation."""
        room = {"id": "r1", "type": "pantry", "x": 0, "y": 0}
        with pytest.raises(ValidationError, match="duplicate"):
            parse_floor_plan({"id": "fp-1", "rooms": [room, room]})

    def test_parse_version(self):
        """Test a stored version with ISO timestamps."""
        version = parse_version(
            {
                "id": "v1",
                "floor_plan_id": "fp-1",
                "creator_id": "bob",
                "creator_priority": 5,
                "created_at": "2024-03-01T09:00:00Z",
                "status": "merged",
                "merged_at": "2024-03-02T09:00:00+00:00",
                "merged_by": "alice",
                "rooms": [{"id": "r1", "type": "elevator", "x": 1, "y": 2}],
                "deleted_room_ids": ["r2"],
            }
        )
        assert version.status is VersionStatus.MERGED
        assert version.created_at.utcoffset() == timezone.utc.utcoffset(None)
        assert version.deleted_room_ids == ["r2"]
        assert version.rooms[0].type is RoomType.ELEVATOR

    def test_version_priority_required(self):
        """Test a version without creator priority is rejected."""
        with pytest.raises(ValidationError, match="creator_priority"):
            parse_version(
                {"floor_plan_id": "fp-1", "creator_id": "bob", "created_at": "2024-03-01T09:00:00Z"}
            )

    def test_parse_editor(self):
        """Test an editor mapping."""
        editor = parse_editor({"id": "ops", "priority": 3, "role": "admin"})
        assert editor.role is EditorRole.ADMIN
        assert editor.can_review
