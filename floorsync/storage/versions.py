"""
Version storage for floorsync.

Versions of one floor plan share a JSON file under
``<data_dir>/versions``, so every status change of a commit lands in a
single atomic write.
"""

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from floorsync.errors import AlreadyTerminalError, NotFoundError, ValidationError
from floorsync.merge.models import Version, VersionStatus
from floorsync.schemas import parse_version
from floorsync.storage.files import read_json, safe_file_name, write_json_atomic

logger = logging.getLogger(__name__)


class VersionStore:
    """
    Store and query draft versions.

    Provides the pending-version query used by merges and batched status
    updates used when a merge commits.
    """

    def __init__(self, base_path: str | Path):
        """
        Initialize version store.

        Args:
            base_path: Data directory
        """
        self.base_path = Path(base_path) / "versions"
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, floor_plan_id: str) -> Path:
        return self.base_path / f"{safe_file_name(floor_plan_id, 'floor_plan_id')}.json"

    def _load_all(self, floor_plan_id: str) -> dict[str, Version]:
        path = self._path(floor_plan_id)
        if not path.exists():
            return {}
        data = read_json(path)
        return {
            version_id: parse_version(item)
            for version_id, item in data.get("versions", {}).items()
        }

    def _save_all(self, floor_plan_id: str, versions: dict[str, Version]) -> None:
        write_json_atomic(
            self._path(floor_plan_id),
            {
                "floor_plan_id": floor_plan_id,
                "versions": {vid: v.to_dict() for vid, v in versions.items()},
            },
        )

    def create(self, version: Version) -> Version:
        """
        Store a new version.

        Raises:
            ValidationError: If a version with the same id exists
        """
        versions = self._load_all(version.floor_plan_id)
        if version.id in versions:
            raise ValidationError(f"Version already exists: {version.id}", field="id")
        versions[version.id] = version
        self._save_all(version.floor_plan_id, versions)
        logger.info(
            f"Created version {version.id} for floor plan {version.floor_plan_id} "
            f"by {version.creator_id}"
        )
        return version

    def get(self, version_id: str) -> Version:
        """
        Get a version by id.

        Raises:
            NotFoundError: If no floor plan has such a version
        """
        for path in sorted(self.base_path.glob("*.json")):
            item = read_json(path).get("versions", {}).get(version_id)
            if item is not None:
                return parse_version(item)
        raise NotFoundError("version", version_id)

    def list_for_floor_plan(self, floor_plan_id: str) -> list[Version]:
        """All versions of a floor plan, newest first."""
        return sorted(
            self._load_all(floor_plan_id).values(),
            key=lambda v: v.created_at,
            reverse=True,
        )

    def find_pending_versions(self, floor_plan_id: str) -> list[Version]:
        """
        Draft versions of a floor plan.

        Ordered by creator priority, then creation time, both ascending.
        """
        return sorted(
            (v for v in self._load_all(floor_plan_id).values() if v.is_draft),
            key=lambda v: (v.creator_priority, v.created_at),
        )

    def pending_count(self, floor_plan_id: str) -> int:
        """Number of draft versions of a floor plan."""
        return sum(1 for v in self._load_all(floor_plan_id).values() if v.is_draft)

    def mark_merged(
        self,
        floor_plan_id: str,
        version_ids: list[str],
        merged_by: str,
        merged_at: datetime,
    ) -> list[Version]:
        """
        Mark versions as merged in one write.

        Either every listed version is updated or none is.

        Raises:
            NotFoundError: If a version is not stored for the floor plan
            AlreadyTerminalError: If a version is no longer a draft
        """
        versions = self._load_all(floor_plan_id)
        updated = []
        for version_id in version_ids:
            version = self._require_draft(versions, version_id)
            updated.append(
                replace(
                    version,
                    status=VersionStatus.MERGED,
                    merged_at=merged_at,
                    merged_by=merged_by,
                )
            )

        for version in updated:
            versions[version.id] = version
        self._save_all(floor_plan_id, versions)
        logger.debug(f"Marked {len(updated)} versions of {floor_plan_id} as merged")
        return updated

    def mark_rejected(
        self,
        floor_plan_id: str,
        version_id: str,
        rejected_by: str,
        reason: Optional[str],
        rejected_at: datetime,
    ) -> Version:
        """
        Mark a version as rejected.

        Raises:
            NotFoundError: If the version is not stored for the floor plan
            AlreadyTerminalError: If the version is no longer a draft
        """
        versions = self._load_all(floor_plan_id)
        version = replace(
            self._require_draft(versions, version_id),
            status=VersionStatus.REJECTED,
            rejected_at=rejected_at,
            rejected_by=rejected_by,
            rejection_reason=reason,
        )
        versions[version_id] = version
        self._save_all(floor_plan_id, versions)
        return version

    @staticmethod
    def _require_draft(versions: dict[str, Version], version_id: str) -> Version:
        version = versions.get(version_id)
        if version is None:
            raise NotFoundError("version", version_id)
        if version.status.is_terminal:
            raise AlreadyTerminalError(version_id, version.status.value)
        return version
