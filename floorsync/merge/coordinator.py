"""
Merge Coordinator for floorsync.

Engine facade that wires change detection, conflict classification,
resolution and assembly together. Stateless between calls: every
operation works only on the snapshots it is given.
"""

import logging
from typing import Optional

from floorsync.merge.assembler import MergeAssembler
from floorsync.merge.classifier import ConflictClassifier
from floorsync.merge.config import MergeConfig, get_merge_config
from floorsync.merge.detector import ChangeDetector
from floorsync.merge.models import (
    ConflictAnalysis,
    ConflictReport,
    FloorPlan,
    MergeResult,
    Version,
    VersionComparison,
)
from floorsync.merge.report import generate_conflict_report
from floorsync.merge.strategies import PriorityTimestampStrategy
from floorsync.telemetry import get_meter, trace_merge

logger = logging.getLogger(__name__)


class MergeCoordinator:
    """
    Main orchestration component for floor plan merging.

    Coordinates:
    - Extraction of per-room changes from pending versions
    - Classification into safe changes and conflicts
    - Priority/timestamp resolution of overlapping changes
    - Assembly of the merged floor plan
    """

    def __init__(
        self,
        config: Optional[MergeConfig] = None,
        detector: Optional[ChangeDetector] = None,
        classifier: Optional[ConflictClassifier] = None,
        assembler: Optional[MergeAssembler] = None,
        strategy: Optional[PriorityTimestampStrategy] = None,
    ):
        """
        Initialize merge coordinator.

        Args:
            config: Merge configuration
            detector: Change detector
            classifier: Conflict classifier
            assembler: Merge assembler
            strategy: Resolution strategy for overlapping changes
        """
        self.config = config or get_merge_config()

        self.detector = detector or ChangeDetector(config=self.config)
        self.classifier = classifier or ConflictClassifier(
            config=self.config,
            detector=self.detector,
            strategy=strategy,
        )
        self.assembler = assembler or MergeAssembler(config=self.config)

        meter = get_meter("floorsync.merge")
        self._conflicts_counter = meter.create_counter(
            "floorsync.conflicts.detected",
            unit="1",
            description="Conflicts found while analyzing pending versions",
        )
        self._merges_counter = meter.create_counter(
            "floorsync.merges.completed",
            unit="1",
            description="Auto-merges attempted, by outcome",
        )

    @trace_merge("analyze_versions")
    def analyze_versions(
        self,
        base: FloorPlan,
        pending_versions: list[Version],
    ) -> ConflictAnalysis:
        """
        Analyze pending versions against the base floor plan.

        Args:
            base: Base floor plan
            pending_versions: Draft versions, in the order they should be
                              considered (priority, then creation time)

        Returns:
            ConflictAnalysis with safe changes and conflicts
        """
        changes = self.detector.extract_changes(base, pending_versions)
        analysis = self.classifier.analyze(base, pending_versions, changes=changes)

        if analysis.total_conflicts:
            self._conflicts_counter.add(
                analysis.total_conflicts, {"floor_plan.id": base.id}
            )
        return analysis

    def generate_conflict_report(self, analysis: ConflictAnalysis) -> ConflictReport:
        """
        Generate a human-readable report from an analysis.

        Args:
            analysis: Conflict analysis

        Returns:
            ConflictReport with summary counts and descriptions
        """
        return generate_conflict_report(analysis)

    @trace_merge("auto_merge")
    def auto_merge(
        self,
        base: FloorPlan,
        pending_versions: list[Version],
    ) -> MergeResult:
        """
        Merge every pending version into the base, or none of them.

        Nothing is modified in place: on success the result carries a new
        floor plan whose version is ``base.version + 1``; on conflict the
        result carries the conflicts and no floor plan.

        Args:
            base: Base floor plan
            pending_versions: Draft versions to merge

        Returns:
            MergeResult
        """
        analysis = self.analyze_versions(base, pending_versions)
        result = self.assembler.assemble(base, pending_versions, analysis)

        self._merges_counter.add(
            1,
            {
                "floor_plan.id": base.id,
                "outcome": "merged" if result.success else "blocked",
            },
        )
        return result

    def compare_versions(self, first: Version, second: Version) -> VersionComparison:
        """
        Compare two versions side by side.

        Args:
            first: First version
            second: Second version

        Returns:
            VersionComparison
        """
        return self.detector.compare_versions(first, second)
