"""Tests for conflict reports."""

from floorsync.merge.classifier import ConflictClassifier
from floorsync.merge.config import MergeConfig, ResolutionConfig
from floorsync.merge.models import RoomType
from floorsync.merge.report import describe, generate_conflict_report


class TestConflictReport:
    """Tests for generate_conflict_report."""

    def test_safe_changes_described(self, config, base_plan, base_room, make_room, make_version):
        """Test safe changes get one entry each with a description."""
        v1 = make_version([make_room("1", x=50, y=50), make_room("5", RoomType.PANTRY, 900, 0)])
        v2 = make_version([base_room], deleted=["2"], priority=3, creator="carol")
        analysis = ConflictClassifier(config=config).analyze(base_plan, [v1, v2])

        report = generate_conflict_report(analysis)

        assert report.can_auto_merge
        assert report.total_safe_changes == 3
        descriptions = {e.room_id: e.description for e in report.safe_changes}
        assert descriptions == {
            "1": "Room modified by Alice",
            "5": "New room added by Alice",
            "2": "Room deleted by Carol",
        }
        assert "needs_manual_review" not in report.to_dict()["safe_changes"][0]

    def test_conflicts_need_manual_review(self, config, base_plan, base_room, make_room, make_version):
        """Test conflicts are flagged for manual review."""
        deleter = make_version([base_room], deleted=["2"])
        modifier = make_version([make_room("2", RoomType.WASHROOM, 450, 0)], priority=5)
        analysis = ConflictClassifier(config=config).analyze(base_plan, [deleter, modifier])

        data = generate_conflict_report(analysis).to_dict()

        assert data["summary"] == {
            "total_conflicts": 1,
            "total_safe_changes": 0,
            "can_auto_merge": False,
        }
        (entry,) = data["conflicts"]
        assert entry["type"] == "deletion_conflict"
        assert entry["needs_manual_review"] is True
        assert entry["suggested_resolution"] is None
        assert entry["description"] == "Room deleted in one version, modified in another"

    def test_overlap_conflict_carries_suggestion(self, base_plan, make_room, make_version):
        """Test unresolved overlaps suggest the priority/timestamp winner."""
        config = MergeConfig(resolution=ResolutionConfig(auto_resolve_overlapping=False))
        v1 = make_version([make_room("1", x=50, y=50)], priority=1)
        v2 = make_version([make_room("1", x=80, y=80)], priority=5, creator="bob")
        analysis = ConflictClassifier(config=config).analyze(base_plan, [v2, v1])

        (entry,) = generate_conflict_report(analysis).conflicts

        assert entry.type == "priority_timestamp"
        assert entry.suggested_resolution["winner"]["version_id"] == v1.id
        assert entry.suggested_resolution["reason"] == "higher_priority"
        assert describe(analysis.conflicts[0]) == "Resolved position using higher_priority (1 vs 5)"
