"""Tests for VersionService."""

import threading
from dataclasses import replace
from unittest.mock import patch

import pytest

from floorsync.errors import (
    AlreadyTerminalError,
    NotFoundError,
    PersistenceError,
    UnauthorizedError,
    ValidationError,
)
from floorsync.merge.config import MergeConfig
from floorsync.merge.coordinator import MergeCoordinator
from floorsync.merge.models import (
    DeletionConflict,
    Editor,
    RoomProperty,
    RoomType,
    VersionStatus,
)
from floorsync.services import VersionService, floor_plan_lock
from floorsync.services import version_service
from floorsync.services.version_service import NO_PENDING_MESSAGE


class TestVersionService:
    """Tests for VersionService against real stores in a temp directory."""

    @pytest.fixture
    def service(self, tmp_path, base_plan, head_editor, editor, admin):
        service = VersionService(tmp_path, coordinator=MergeCoordinator(MergeConfig()))
        service.floor_plans.save(base_plan)
        for e in (head_editor, editor, admin, Editor(id="carol", name="Carol", priority=3)):
            service.editors.add(e)
        return service

    @pytest.fixture
    def room_2(self, base_plan):
        return base_plan.get_room("2")

    @pytest.fixture
    def moved(self, service, base_room, room_2):
        """Bob moves room 1."""
        return service.create_version(
            "fp-1", [replace(base_room, y=300), room_2], "bob", change_description="move"
        )

    def test_create_version(self, service, moved):
        """Test a draft copies the editor's priority and bumps the version number."""
        assert moved.version_number == 2
        assert moved.creator_priority == 5
        assert moved.creator_name == "Bob"
        assert moved.status is VersionStatus.DRAFT
        assert [v.id for v in service.pending_versions("fp-1")] == [moved.id]

    def test_create_version_unknown_editor(self, service, base_room):
        """Test drafts need a registered editor."""
        with pytest.raises(NotFoundError):
            service.create_version("fp-1", [base_room], "mallory")

    def test_create_version_unknown_plan(self, service, base_room):
        """Test drafts need an existing floor plan."""
        with pytest.raises(NotFoundError):
            service.create_version("fp-404", [base_room], "bob")

    def test_create_version_invalid_tombstones(self, service, base_room, moved):
        """Test bad tombstones are rejected before anything is stored."""
        with pytest.raises(ValidationError) as exc_info:
            service.create_version("fp-1", [base_room], "alice", deleted_room_ids=[7])
        assert exc_info.value.field == "deleted_room_ids"

        assert [v.id for v in service.pending_versions("fp-1")] == [moved.id]
        assert service.versions.get(moved.id).is_draft

    def test_list_versions_unknown_plan(self, service):
        """Test listing versions of a missing floor plan."""
        with pytest.raises(NotFoundError):
            service.list_versions("fp-404")

    def test_auto_merge(self, service, moved, base_room, room_2, make_room):
        """Test disjoint edits from two editors land in one merge."""
        carol = service.create_version(
            "fp-1",
            [
                base_room,
                replace(room_2, name="Restroom"),
                make_room("3", RoomType.PANTRY, 800, 0, "Kitchen"),
            ],
            "carol",
        )

        outcome = service.auto_merge("fp-1", "alice")

        assert outcome.success
        base = service.floor_plans.load("fp-1")
        assert base.version == 2
        assert [r.id for r in base.rooms] == ["1", "2", "3"]
        assert base.get_room("1").y == 300
        assert base.get_room("2").name == "Restroom"

        stored = [service.versions.get(v) for v in (moved.id, carol.id)]
        assert all(v.status is VersionStatus.MERGED for v in stored)
        assert all(v.merged_by == "alice" for v in stored)
        assert stored[0].merged_at == stored[1].merged_at == outcome.merged_at
        assert service.pending_versions("fp-1") == []

    def test_auto_merge_drops_colliding_room(self, service, base_room, room_2, make_room):
        """Test a new room overlapping an existing one is dropped, not fatal."""
        service.create_version(
            "fp-1",
            [base_room, room_2, make_room("3", RoomType.STORAGE, 410, 10, "Closet")],
            "carol",
        )

        outcome = service.auto_merge("fp-1", "alice")

        assert outcome.success
        assert [r.id for r in outcome.result.dropped_rooms] == ["3"]
        assert service.floor_plans.load("fp-1").get_room("3") is None

    def test_auto_merge_blocked(self, service, moved, room_2):
        """Test a delete/modify conflict blocks the merge and writes nothing."""
        service.create_version("fp-1", [room_2], "carol", deleted_room_ids=["1"])

        outcome = service.auto_merge("fp-1", "alice")

        assert not outcome.success
        assert isinstance(outcome.result.conflicts[0], DeletionConflict)
        assert service.floor_plans.load("fp-1").version == 1
        assert service.versions.pending_count("fp-1") == 2

    def test_auto_merge_requires_authority(self, service, moved):
        """Test a regular editor cannot auto-merge."""
        with pytest.raises(UnauthorizedError):
            service.auto_merge("fp-1", "bob")

        assert service.versions.get(moved.id).is_draft

    def test_auto_merge_by_admin(self, service, moved):
        """Test admins may merge regardless of priority."""
        assert service.auto_merge("fp-1", "ops").success

    def test_auto_merge_nothing_pending(self, service):
        """Test an empty merge reports instead of bumping the version."""
        outcome = service.auto_merge("fp-1", "alice")

        assert not outcome.success
        assert outcome.result.message == NO_PENDING_MESSAGE
        assert service.floor_plans.load("fp-1").version == 1

    def test_auto_merge_nothing_pending_still_checks_authority(self, service):
        """Test authority is checked even when there is nothing to merge."""
        with pytest.raises(UnauthorizedError):
            service.auto_merge("fp-1", "bob")

    def test_failed_commit_restores_base(self, service, moved, base_plan):
        """Test the base is restored if versions cannot be marked merged."""
        with patch.object(
            service.versions, "mark_merged", side_effect=PersistenceError("disk full")
        ):
            with pytest.raises(PersistenceError):
                service.auto_merge("fp-1", "alice")

        assert service.floor_plans.load("fp-1") == base_plan
        assert service.versions.get(moved.id).is_draft

    def test_merge_version(self, service, base_room, room_2, make_room):
        """Test a manual merge applies the snapshot without tombstoned rooms."""
        version = service.create_version(
            "fp-1",
            [base_room, room_2, make_room("3", RoomType.STAIRS, 0, 500, "North stairs")],
            "carol",
            name="Level 3 East",
            deleted_room_ids=["2"],
        )

        result = service.merge_version(version.id, "alice")

        assert result.floor_plan.version == 2
        assert result.floor_plan.name == "Level 3 East"
        assert [r.id for r in result.floor_plan.rooms] == ["1", "3"]
        assert service.floor_plans.load("fp-1") == result.floor_plan
        assert service.versions.get(version.id).merged_by == "alice"

    def test_merge_version_keeps_name(self, service, moved):
        """Test a version without a name keeps the base name."""
        result = service.merge_version(moved.id, "alice")

        assert result.floor_plan.name == "Level 3"

    def test_merge_version_twice(self, service, moved):
        """Test a merged version cannot be merged again."""
        service.merge_version(moved.id, "alice")

        with pytest.raises(AlreadyTerminalError):
            service.merge_version(moved.id, "alice")
        assert service.floor_plans.load("fp-1").version == 2

    def test_reject_version(self, service, moved):
        """Test rejection is stored and leaves the base untouched."""
        rejected = service.reject_version(moved.id, "alice", "Blocks fire exit")

        assert rejected.status is VersionStatus.REJECTED
        assert service.versions.get(moved.id).rejection_reason == "Blocks fire exit"
        assert service.pending_versions("fp-1") == []
        assert service.floor_plans.load("fp-1").version == 1

    def test_reject_requires_authority(self, service, moved):
        """Test a regular editor cannot reject."""
        with pytest.raises(UnauthorizedError):
            service.reject_version(moved.id, "bob")

    def test_reject_unknown_version(self, service):
        """Test rejecting a version that does not exist."""
        with pytest.raises(NotFoundError):
            service.reject_version("ghost", "alice")

    def test_analyze(self, service, moved, room_2):
        """Test the conflict report of pending versions."""
        service.create_version("fp-1", [room_2], "carol", deleted_room_ids=["1"])

        report = service.analyze("fp-1")

        assert not report.can_auto_merge
        assert report.total_conflicts == 1
        assert report.conflicts[0].type == "deletion_conflict"
        assert report.conflicts[0].needs_manual_review

    def test_analyze_nothing_pending(self, service):
        """Test analyze returns None without pending versions and loads once."""
        with patch.object(
            service.versions,
            "find_pending_versions",
            wraps=service.versions.find_pending_versions,
        ) as find_pending:
            assert service.analyze("fp-1") is None
        find_pending.assert_called_once_with("fp-1")

    def test_compare_versions(self, service, moved, base_room, room_2, make_room):
        """Test comparing two stored versions."""
        other = service.create_version(
            "fp-1", [base_room, room_2, make_room("3", RoomType.PANTRY, 800, 0)], "carol"
        )

        comparison = service.compare_versions(moved.id, other.id)

        assert [r.id for r in comparison.only_in_second] == ["3"]
        assert comparison.only_in_first == []
        assert comparison.modified[0].room_id == "1"
        assert comparison.modified[0].differences == [RoomProperty.POSITION]


class TestFloorPlanLock:
    """Tests for the per-floor-plan merge lock."""

    def test_same_lock_per_floor_plan(self):
        """Test one lock object per floor plan id."""
        assert floor_plan_lock("fp-lock-a") is floor_plan_lock("fp-lock-a")
        assert floor_plan_lock("fp-lock-a") is not floor_plan_lock("fp-lock-b")

    def test_lock_is_exclusive(self):
        """Test a held lock cannot be taken again."""
        lock = floor_plan_lock("fp-lock-c")
        with lock:
            assert not lock.acquire(blocking=False)

    def test_idle_locks_are_released(self):
        """Test the registry does not keep locks nobody references."""
        lock = floor_plan_lock("fp-lock-d")
        assert "fp-lock-d" in version_service._locks

        del lock
        assert "fp-lock-d" not in version_service._locks


class TestMergeSerialization:
    """Tests that review operations run under the floor plan's lock."""

    @pytest.fixture
    def service(self, tmp_path, base_plan, head_editor, editor):
        service = VersionService(tmp_path, coordinator=MergeCoordinator(MergeConfig()))
        service.floor_plans.save(base_plan)
        service.editors.add(head_editor)
        service.editors.add(editor)
        return service

    @pytest.fixture
    def draft(self, service, base_room, base_plan):
        return service.create_version(
            "fp-1", [replace(base_room, y=300), base_plan.get_room("2")], "bob"
        )

    def test_auto_merge_waits_for_lock(self, service, draft):
        """Test an auto-merge does not commit while another merge holds the lock."""
        outcomes = []
        worker = threading.Thread(
            target=lambda: outcomes.append(service.auto_merge("fp-1", "alice"))
        )

        with floor_plan_lock("fp-1"):
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            assert service.floor_plans.load("fp-1").version == 1
            assert service.versions.get(draft.id).is_draft

        worker.join(timeout=5)
        assert not worker.is_alive()
        assert outcomes[0].success
        assert service.floor_plans.load("fp-1").version == 2

    def test_merge_version_holds_lock(self, service, draft):
        """Test a manual merge reads the base under the lock."""
        load = service.floor_plans.load
        held = []

        def checked_load(floor_plan_id):
            held.append(floor_plan_lock(floor_plan_id).locked())
            return load(floor_plan_id)

        with patch.object(service.floor_plans, "load", side_effect=checked_load):
            service.merge_version(draft.id, "alice")

        assert held == [True]

    def test_reject_version_holds_lock(self, service, draft):
        """Test a rejection is written under the lock."""
        mark_rejected = service.versions.mark_rejected
        held = []

        def checked_mark(floor_plan_id, *args, **kwargs):
            held.append(floor_plan_lock(floor_plan_id).locked())
            return mark_rejected(floor_plan_id, *args, **kwargs)

        with patch.object(service.versions, "mark_rejected", side_effect=checked_mark):
            service.reject_version(draft.id, "alice", "Stale")

        assert held == [True]
