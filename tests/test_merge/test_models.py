"""Tests for merge data models."""

from datetime import datetime, timezone

import pytest

from floorsync.errors import ValidationError
from floorsync.merge.models import (
    ConflictAnalysis,
    Editor,
    EditorRole,
    FloorPlan,
    MergeResult,
    Room,
    RoomProperty,
    RoomType,
    Version,
    VersionStatus,
)


class TestRoom:
    """Tests for Room."""

    def test_type_is_coerced_from_string(self):
        """Test room type strings become RoomType members."""
        room = Room(id="r1", type="pantry", x=1, y=2)
        assert room.type is RoomType.PANTRY
        assert room.name == ""

    def test_missing_id_rejected(self):
        """Test an empty id fails fast."""
        with pytest.raises(ValidationError) as exc_info:
            Room(id="", type="pantry", x=0, y=0)
        assert exc_info.value.field == "id"

    def test_unknown_type_rejected(self):
        """Test an unknown room type fails fast."""
        with pytest.raises(ValidationError) as exc_info:
            Room(id="r1", type="ballroom", x=0, y=0)
        assert exc_info.value.field == "type"

    @pytest.mark.parametrize("value", ["10", None, True, float("nan")])
    def test_invalid_coordinates_rejected(self, value):
        """Test non-numeric coordinates fail fast."""
        with pytest.raises(ValidationError):
            Room(id="r1", type="pantry", x=value, y=0)

    def test_diff_reports_property_groups(self, make_room):
        """Test diff groups x/y as position and reports name and type."""
        base = make_room("r1", RoomType.MEETING_ROOM, 0, 0, "A")
        moved = make_room("r1", RoomType.MEETING_ROOM, 0, 5, "A")
        changed = make_room("r1", RoomType.STORAGE, 10, 0, "B")

        assert base.diff(base) == []
        assert base.diff(moved) == [RoomProperty.POSITION]
        assert base.diff(changed) == [
            RoomProperty.POSITION,
            RoomProperty.NAME,
            RoomProperty.TYPE,
        ]

    def test_rooms_are_immutable(self, make_room):
        """Test rooms cannot be modified in place."""
        room = make_room()
        with pytest.raises(AttributeError):
            room.x = 5


class TestFloorPlan:
    """Tests for FloorPlan."""

    def test_duplicate_room_ids_rejected(self, make_room):
        """Test a floor plan cannot hold the same room twice."""
        with pytest.raises(ValidationError, match="duplicate room id"):
            FloorPlan(id="fp-1", rooms=[make_room("r1"), make_room("r1", x=300)])

    def test_room_map_keeps_layout_order(self, base_plan):
        """Test room_map is keyed by id in layout order."""
        assert list(base_plan.room_map()) == ["1", "2"]
        assert base_plan.get_room("2").name == "WC"
        assert base_plan.get_room("missing") is None


class TestVersion:
    """Tests for Version."""

    def test_naive_timestamp_read_as_utc(self):
        """Test naive created_at values are treated as UTC."""
        version = Version(
            floor_plan_id="fp-1",
            creator_id="alice",
            creator_priority=1,
            created_at=datetime(2024, 1, 1, 0, 0, 1),
        )
        assert version.created_at.tzinfo is timezone.utc
        assert version.created_at_epoch == 1704067201000

    @pytest.mark.parametrize("priority", [0, -1, "1", True])
    def test_invalid_priority_rejected(self, priority):
        """Test priorities must be positive integers."""
        with pytest.raises(ValidationError) as exc_info:
            Version(
                floor_plan_id="fp-1",
                creator_id="alice",
                creator_priority=priority,
                created_at=datetime.now(timezone.utc),
            )
        assert exc_info.value.field == "priority"

    @pytest.mark.parametrize("deleted", ["r7", [7], [""], ["r1", None], {"r1"}])
    def test_invalid_deleted_room_ids_rejected(self, deleted):
        """Test tombstones must be a list of room id strings."""
        with pytest.raises(ValidationError) as exc_info:
            Version(
                floor_plan_id="fp-1",
                creator_id="alice",
                creator_priority=1,
                created_at=datetime.now(timezone.utc),
                deleted_room_ids=deleted,
            )
        assert exc_info.value.field == "deleted_room_ids"

    def test_deleted_room_ids_tuple_accepted(self):
        """Test a tuple of ids is stored as a list."""
        version = Version(
            floor_plan_id="fp-1",
            creator_id="alice",
            creator_priority=1,
            created_at=datetime.now(timezone.utc),
            deleted_room_ids=("r1", "r2"),
        )
        assert version.deleted_room_ids == ["r1", "r2"]

    def test_new_version_is_draft(self, make_version, make_room):
        """Test versions start as drafts with generated ids."""
        first = make_version([make_room()])
        second = make_version([make_room()])
        assert first.status is VersionStatus.DRAFT
        assert first.is_draft
        assert first.id != second.id
        assert first.has_room("r1")
        assert not first.has_room("r2")

    def test_to_dict_serializes_status_and_times(self, make_version, make_room):
        """Test serialization uses plain values."""
        data = make_version([make_room()], deleted=["r9"]).to_dict()
        assert data["status"] == "draft"
        assert data["created_at"].startswith("2024-03-01T09:00:00")
        assert data["deleted_room_ids"] == ["r9"]
        assert data["merged_at"] is None


class TestEditor:
    """Tests for Editor."""

    def test_review_authority(self, head_editor, editor, admin):
        """Test only the head editor and admins may review."""
        assert head_editor.is_head_editor
        assert head_editor.can_review
        assert not editor.can_review
        assert not admin.is_head_editor
        assert admin.can_review

    def test_unknown_role_rejected(self):
        """Test an unknown role fails fast."""
        with pytest.raises(ValidationError):
            Editor(id="x", priority=2, role="owner")

    def test_role_coerced(self):
        """Test role strings become EditorRole members."""
        assert Editor(id="x", priority=2, role="admin").role is EditorRole.ADMIN


class TestResults:
    """Tests for analysis and merge result containers."""

    def test_empty_analysis_can_auto_merge(self):
        """Test an analysis without conflicts is auto-mergeable."""
        analysis = ConflictAnalysis()
        assert analysis.can_auto_merge
        assert analysis.total_conflicts == 0
        assert analysis.to_dict()["can_auto_merge"] is True

    def test_blocked_result(self):
        """Test the blocked result carries the conflict list and no plan."""
        result = MergeResult.blocked([])
        assert not result.success
        assert result.merged_floor_plan is None
        assert result.message == "Cannot auto-merge - manual conflict resolution required"
        assert result.to_dict() == {
            "success": False,
            "message": result.message,
            "conflicts": [],
        }
