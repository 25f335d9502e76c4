"""
Spatial checks for rooms added during a merge.

Rooms are approximated by axis-aligned boxes sized from the room
dimension table. This is deliberately not polygon collision.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from floorsync.merge.config import PlacementConfig
from floorsync.merge.models import Room


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box anchored at its top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def padded(self, padding: float) -> "BoundingBox":
        """Grow the box by ``padding`` on every side."""
        return BoundingBox(
            self.x - padding,
            self.y - padding,
            self.width + 2 * padding,
            self.height + 2 * padding,
        )

    def intersects(self, other: "BoundingBox") -> bool:
        """Strict overlap; boxes that only touch do not intersect."""
        return (
            self.x < other.x + other.width
            and self.x + self.width > other.x
            and self.y < other.y + other.height
            and self.y + self.height > other.y
        )


def bounding_box(room: Room, placement: PlacementConfig) -> BoundingBox:
    """Build the bounding box of a room from the dimension table."""
    width, height = placement.dimensions_for(room.type.value)
    return BoundingBox(room.x, room.y, width, height)


def collides_with(new_room: Room, existing: Room, placement: PlacementConfig) -> bool:
    """
    Check whether a new room collides with an existing one.

    The existing room's box is padded. A new room anchored inside the
    existing room's center zone (within a third of its smaller side from
    its center) does not collide; that zone is kept for pass-through use.

    Args:
        new_room: Room being added
        existing: Room already in the layout
        placement: Placement configuration

    Returns:
        True if the new room must not be placed
    """
    existing_box = bounding_box(existing, placement)
    if not bounding_box(new_room, placement).intersects(
        existing_box.padded(placement.padding)
    ):
        return False

    center_x, center_y = existing_box.center
    distance = math.hypot(new_room.x - center_x, new_room.y - center_y)
    center_zone = min(existing_box.width, existing_box.height) / placement.center_zone_divisor
    return distance >= center_zone


def find_collision(
    new_room: Room,
    existing_rooms: Iterable[Room],
    placement: PlacementConfig,
) -> Optional[Room]:
    """
    Find the first existing room a new room collides with.

    A room never collides with another state of itself.

    Returns:
        The colliding room, or None if the new room can be placed
    """
    for existing in existing_rooms:
        if existing.id == new_room.id:
            continue
        if collides_with(new_room, existing, placement):
            return existing
    return None
