"""Shared fixtures for floorsync tests."""

from datetime import datetime, timedelta, timezone

import pytest

from floorsync.merge.config import MergeConfig, set_merge_config
from floorsync.merge.models import Editor, EditorRole, FloorPlan, Room, RoomType, Version

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_merge_config():
    """Keep the process-wide merge config isolated between tests."""
    set_merge_config(None)
    yield
    set_merge_config(None)


@pytest.fixture
def config():
    """Default merge configuration."""
    return MergeConfig()


@pytest.fixture
def make_room():
    """Factory for rooms with sensible defaults."""

    def _make(room_id="r1", room_type=RoomType.MEETING_ROOM, x=0, y=0, name="A"):
        return Room(id=room_id, type=room_type, x=x, y=y, name=name)

    return _make


@pytest.fixture
def make_version():
    """Factory for draft versions of floor plan fp-1."""

    def _make(
        rooms,
        priority=1,
        seconds=0,
        creator="alice",
        deleted=None,
        version_id=None,
        floor_plan_id="fp-1",
    ):
        kwargs = {}
        if version_id is not None:
            kwargs["id"] = version_id
        return Version(
            floor_plan_id=floor_plan_id,
            creator_id=creator,
            creator_name=creator.capitalize(),
            creator_priority=priority,
            created_at=T0 + timedelta(seconds=seconds),
            rooms=list(rooms),
            deleted_room_ids=list(deleted or []),
            **kwargs,
        )

    return _make


@pytest.fixture
def base_room(make_room):
    """Room 1 of the base layout: a meeting room at the origin named A."""
    return make_room("1", RoomType.MEETING_ROOM, 0, 0, "A")


@pytest.fixture
def base_plan(base_room, make_room):
    """Base floor plan with a meeting room and a washroom far apart."""
    return FloorPlan(
        id="fp-1",
        name="Level 3",
        rooms=[base_room, make_room("2", RoomType.WASHROOM, 400, 0, "WC")],
        version=1,
    )


@pytest.fixture
def head_editor():
    return Editor(id="alice", name="Alice", priority=1)


@pytest.fixture
def editor():
    return Editor(id="bob", name="Bob", priority=5)


@pytest.fixture
def admin():
    return Editor(id="ops", name="Ops", priority=9, role=EditorRole.ADMIN)
