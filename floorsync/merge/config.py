"""
Configuration for floor plan merging.

Provides settings for deletion detection, overlap resolution and the
placement check applied to newly added rooms, including the room
dimension table.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from floorsync.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "merge.yaml"

# Fixed footprint of each room type (width, height)
DEFAULT_ROOM_DIMENSIONS: dict[str, tuple[float, float]] = {
    "meeting_room": (150, 100),
    "conference_room": (200, 150),
    "washroom": (80, 80),
    "stairs": (100, 60),
    "elevator": (80, 80),
    "staff_room": (120, 100),
    "pantry": (100, 80),
    "storage": (90, 90),
}


@dataclass
class DetectionConfig:
    """Configuration for change and deletion detection."""

    # Treat a base room omitted by every pending version as deleted.
    # Off by default: deletions must be explicit tombstones.
    infer_deletions_from_absence: bool = False


@dataclass
class ResolutionConfig:
    """Configuration for conflict resolution."""

    # Resolve same-property changes by priority then recency.
    # When off, they are reported as conflicts for a human.
    auto_resolve_overlapping: bool = True


@dataclass
class PlacementConfig:
    """Configuration for the overlap check on added rooms."""

    padding: float = 10.0
    center_zone_divisor: float = 3.0
    default_dimensions: tuple[float, float] = (100.0, 100.0)
    room_dimensions: dict[str, tuple[float, float]] = field(
        default_factory=lambda: dict(DEFAULT_ROOM_DIMENSIONS)
    )

    def dimensions_for(self, room_type: str) -> tuple[float, float]:
        """Get (width, height) for a room type, falling back to the default."""
        return self.room_dimensions.get(room_type, self.default_dimensions)


@dataclass
class MergeConfig:
    """
    Complete configuration for floor plan merging.

    Combines detection, resolution and placement settings.
    """

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)
    placement: PlacementConfig = field(default_factory=PlacementConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "detection": {
                "infer_deletions_from_absence": self.detection.infer_deletions_from_absence,
            },
            "resolution": {
                "auto_resolve_overlapping": self.resolution.auto_resolve_overlapping,
            },
            "placement": {
                "padding": self.placement.padding,
                "center_zone_divisor": self.placement.center_zone_divisor,
                "default_dimensions": {
                    "width": self.placement.default_dimensions[0],
                    "height": self.placement.default_dimensions[1],
                },
                "room_dimensions": {
                    room_type: {"width": w, "height": h}
                    for room_type, (w, h) in self.placement.room_dimensions.items()
                },
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MergeConfig":
        """Create from dictionary."""
        detection_data = data.get("detection") or {}
        resolution_data = data.get("resolution") or {}
        placement_data = data.get("placement") or {}

        room_dimensions = dict(DEFAULT_ROOM_DIMENSIONS)
        for room_type, dims in (placement_data.get("room_dimensions") or {}).items():
            room_dimensions[room_type] = _parse_dimensions(dims, f"room_dimensions.{room_type}")

        default_dimensions = (100.0, 100.0)
        if placement_data.get("default_dimensions") is not None:
            default_dimensions = _parse_dimensions(
                placement_data["default_dimensions"], "default_dimensions"
            )

        return cls(
            detection=DetectionConfig(
                infer_deletions_from_absence=bool(
                    detection_data.get("infer_deletions_from_absence", False)
                ),
            ),
            resolution=ResolutionConfig(
                auto_resolve_overlapping=bool(
                    resolution_data.get("auto_resolve_overlapping", True)
                ),
            ),
            placement=PlacementConfig(
                padding=float(placement_data.get("padding", 10.0)),
                center_zone_divisor=float(placement_data.get("center_zone_divisor", 3.0)),
                default_dimensions=default_dimensions,
                room_dimensions=room_dimensions,
            ),
        )


def _parse_dimensions(value: Any, key: str) -> tuple[float, float]:
    """Accept ``{width, height}`` mappings or ``[width, height]`` pairs."""
    try:
        if isinstance(value, dict):
            width, height = float(value["width"]), float(value["height"])
        else:
            width, height = (float(v) for v in value)
    except (KeyError, TypeError, ValueError):
        raise ValidationError(f"Invalid dimensions for {key}: {value!r}", field=key) from None
    if width <= 0 or height <= 0:
        raise ValidationError(f"Dimensions for {key} must be positive", field=key)
    return width, height


def load_merge_config(config_path: Optional[str | Path] = None) -> MergeConfig:
    """
    Load merge configuration from a YAML file.

    Args:
        config_path: Path to the YAML file. Defaults to the packaged
                     ``config/merge.yaml``.

    Returns:
        MergeConfig instance
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Merge config not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    logger.debug(f"Loaded merge config from {path}")
    return MergeConfig.from_dict(data)


# Global configuration instance
_merge_config: Optional[MergeConfig] = None


def get_merge_config() -> MergeConfig:
    """
    Get the global merge configuration.

    Creates a default configuration if none exists.

    Returns:
        MergeConfig instance
    """
    global _merge_config
    if _merge_config is None:
        _merge_config = MergeConfig()
    return _merge_config


def set_merge_config(config: Optional[MergeConfig]):
    """
    Set the global merge configuration.

    Args:
        config: MergeConfig to use globally, or None to reset to defaults
    """
    global _merge_config
    _merge_config = config
