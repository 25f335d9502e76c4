"""
Floor plan storage for floorsync.

One JSON file per floor plan under ``<data_dir>/floor_plans``.
"""

import logging
from pathlib import Path

from floorsync.errors import NotFoundError
from floorsync.merge.models import FloorPlan
from floorsync.schemas import parse_floor_plan
from floorsync.storage.files import read_json, safe_file_name, write_json_atomic

logger = logging.getLogger(__name__)


class FloorPlanStore:
    """
    Store and load base floor plans.

    The store holds only the current base of each floor plan; history is
    carried by the versions.
    """

    def __init__(self, base_path: str | Path):
        """
        Initialize floor plan store.

        Args:
            base_path: Data directory
        """
        self.base_path = Path(base_path) / "floor_plans"
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, floor_plan_id: str) -> Path:
        return self.base_path / f"{safe_file_name(floor_plan_id, 'floor_plan_id')}.json"

    def exists(self, floor_plan_id: str) -> bool:
        """Check whether a floor plan is stored."""
        return self._path(floor_plan_id).exists()

    def load(self, floor_plan_id: str) -> FloorPlan:
        """
        Load a floor plan.

        Raises:
            NotFoundError: If the floor plan does not exist
        """
        path = self._path(floor_plan_id)
        if not path.exists():
            raise NotFoundError("floor_plan", floor_plan_id)
        return parse_floor_plan(read_json(path))

    def save(self, floor_plan: FloorPlan) -> FloorPlan:
        """
        Store a floor plan, replacing any previous base.

        Args:
            floor_plan: Floor plan to store

        Returns:
            The stored floor plan
        """
        write_json_atomic(self._path(floor_plan.id), floor_plan.to_dict())
        logger.debug(f"Saved floor plan {floor_plan.id} at v{floor_plan.version}")
        return floor_plan

    def list_floor_plans(self) -> list[FloorPlan]:
        """List all stored floor plans, ordered by id."""
        return [
            parse_floor_plan(read_json(path)) for path in sorted(self.base_path.glob("*.json"))
        ]
