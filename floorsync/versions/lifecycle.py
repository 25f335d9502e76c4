"""
Version lifecycle for floorsync.

Governs the legal status transitions of a version and who may trigger
them:

    draft -> merged
    draft -> rejected

Both targets are terminal. Transitions return updated copies; the
version passed in is never modified.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional

from floorsync.errors import AlreadyTerminalError, UnauthorizedError
from floorsync.merge.coordinator import MergeCoordinator
from floorsync.merge.models import (
    Editor,
    FloorPlan,
    MergeResult,
    Version,
    VersionStatus,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class AutoMergeOutcome:
    """Result of merging every pending version at once."""

    result: MergeResult
    merged_versions: list[Version] = field(default_factory=list)
    merged_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.result.success

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = self.result.to_dict()
        if self.success:
            data["merged_version_ids"] = [v.id for v in self.merged_versions]
            data["merged_at"] = self.merged_at.isoformat() if self.merged_at else None
        return data


class VersionLifecycle:
    """
    State machine for version review.

    Only an editor who can review (the head editor or an admin) may merge
    or reject, and only from ``draft``.
    """

    def __init__(self, coordinator: Optional[MergeCoordinator] = None):
        """
        Initialize version lifecycle.

        Args:
            coordinator: Merge coordinator used by auto_merge_all
        """
        self.coordinator = coordinator or MergeCoordinator()

    def check_authority(self, editor: Editor, action: str) -> None:
        """Raise UnauthorizedError unless the editor may review versions."""
        if not editor.can_review:
            logger.warning(
                f"Editor {editor.id} (priority {editor.priority}) tried to {action} versions"
            )
            raise UnauthorizedError(editor.id, action)

    def check_draft(self, version: Version) -> None:
        """Raise AlreadyTerminalError unless the version is a draft."""
        if version.status.is_terminal:
            raise AlreadyTerminalError(version.id, version.status.value)

    def merge(
        self,
        version: Version,
        editor: Editor,
        at: Optional[datetime] = None,
    ) -> Version:
        """
        Transition a draft to merged.

        Args:
            version: Draft version
            editor: Reviewing editor
            at: Merge timestamp (defaults to now)

        Returns:
            The merged copy of the version
        """
        self.check_authority(editor, "merge")
        self.check_draft(version)

        merged = replace(
            version,
            status=VersionStatus.MERGED,
            merged_at=at or utcnow(),
            merged_by=editor.id,
        )
        logger.info(f"Version {version.id} merged by {editor.id}")
        return merged

    def reject(
        self,
        version: Version,
        editor: Editor,
        reason: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> Version:
        """
        Transition a draft to rejected.

        Args:
            version: Draft version
            editor: Reviewing editor
            reason: Why the version was rejected
            at: Rejection timestamp (defaults to now)

        Returns:
            The rejected copy of the version
        """
        self.check_authority(editor, "reject")
        self.check_draft(version)

        rejected = replace(
            version,
            status=VersionStatus.REJECTED,
            rejected_at=at or utcnow(),
            rejected_by=editor.id,
            rejection_reason=reason,
        )
        logger.info(f"Version {version.id} rejected by {editor.id}: {reason or 'no reason'}")
        return rejected

    def auto_merge_all(
        self,
        base: FloorPlan,
        versions: list[Version],
        editor: Editor,
    ) -> AutoMergeOutcome:
        """
        Merge every version into the base, all or nothing.

        Authority and draft status are checked for every version before the
        merge runs, so a failure never leaves some versions transitioned.
        All merged versions share one merge timestamp.

        Args:
            base: Base floor plan
            versions: Pending versions
            editor: Reviewing editor

        Returns:
            AutoMergeOutcome; on conflict, no version is transitioned
        """
        self.check_authority(editor, "merge")
        for version in versions:
            self.check_draft(version)

        result = self.coordinator.auto_merge(base, versions)
        if not result.success:
            return AutoMergeOutcome(result=result)

        merged_at = utcnow()
        merged_versions = [
            replace(
                version,
                status=VersionStatus.MERGED,
                merged_at=merged_at,
                merged_by=editor.id,
            )
            for version in versions
        ]
        logger.info(
            f"Auto-merged {len(merged_versions)} versions into floor plan {base.id} "
            f"by {editor.id}"
        )
        return AutoMergeOutcome(
            result=result,
            merged_versions=merged_versions,
            merged_at=merged_at,
        )
