"""
Conflict reports for display.

Projects a ConflictAnalysis into human-readable entries.
"""

from floorsync.merge.models import (
    ChangeAction,
    ConflictAnalysis,
    ConflictReport,
    DeletionConflict,
    NonOverlapping,
    OverlappingResolved,
    ReportEntry,
    RoomDeletion,
    RoomOutcome,
    SingleChange,
)


def describe(outcome: RoomOutcome) -> str:
    """Get a human-readable description of a room outcome."""
    if isinstance(outcome, SingleChange):
        verb = "New room added" if outcome.action == ChangeAction.ADD else "Room modified"
        return f"{verb} by {outcome.change.creator_name}"
    if isinstance(outcome, NonOverlapping):
        return "Merged non-overlapping changes to room"
    if isinstance(outcome, OverlappingResolved):
        properties = ", ".join(p.value for p in outcome.overlapping_properties)
        return f"Resolved {properties} using {outcome.outcome.detail}"
    if isinstance(outcome, RoomDeletion):
        creators = ", ".join(v.creator_name or v.creator_id for v in outcome.versions)
        return f"Room deleted by {creators}"
    if isinstance(outcome, DeletionConflict):
        return "Room deleted in one version, modified in another"
    raise TypeError(f"Unknown room outcome: {type(outcome).__name__}")


def generate_conflict_report(analysis: ConflictAnalysis) -> ConflictReport:
    """
    Generate a conflict report for display.

    Args:
        analysis: Conflict analysis

    Returns:
        ConflictReport with summary counts and one entry per conflict and
        per safe change
    """
    conflicts = []
    for conflict in analysis.conflicts:
        suggested = (
            conflict.outcome.to_dict() if isinstance(conflict, OverlappingResolved) else None
        )
        conflicts.append(
            ReportEntry(
                type=conflict.kind,
                room_id=conflict.room_id,
                description=describe(conflict),
                needs_manual_review=True,
                suggested_resolution=suggested,
            )
        )

    return ConflictReport(
        total_conflicts=analysis.total_conflicts,
        total_safe_changes=analysis.total_safe_changes,
        can_auto_merge=analysis.can_auto_merge,
        conflicts=conflicts,
        safe_changes=[
            ReportEntry(type=change.kind, room_id=change.room_id, description=describe(change))
            for change in analysis.safe_changes
        ],
    )
