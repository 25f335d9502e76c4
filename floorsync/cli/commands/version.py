"""
Version command for floorsync CLI.

Creates drafts and handles manual review.
"""

from pathlib import Path
from typing import Optional

import typer

from floorsync.cli.context import fail, get_formatter, get_service, read_json_input
from floorsync.errors import FloorSyncError, ValidationError
from floorsync.schemas import parse_rooms

app = typer.Typer()


@app.command("create")
def create_version(
    ctx: typer.Context,
    floor_plan_id: str = typer.Argument(..., help="Floor plan ID"),
    file: Path = typer.Argument(
        ...,
        help="JSON file with the room snapshot (a list, or an object with 'rooms')",
    ),
    editor: str = typer.Option(..., "--editor", "-e", help="Creating editor ID"),
    name: Optional[str] = typer.Option(None, "--name", help="New floor plan name"),
    description: Optional[str] = typer.Option(
        None,
        "--description", "-d",
        help="What this version changes",
    ),
    delete: Optional[list[str]] = typer.Option(
        None,
        "--delete",
        help="Base room ID this version deletes (repeatable)",
    ),
):
    """
    Create a draft version of a floor plan.

    Examples:
        floorsync version create floor-3 draft.json --editor alice
        floorsync version create floor-3 draft.json -e bob --delete r7
    """
    formatter = get_formatter(ctx)
    data = read_json_input(ctx, file)

    try:
        deleted = list(delete or [])
        if isinstance(data, dict):
            tombstones = data.get("deleted_room_ids", [])
            if not isinstance(tombstones, list):
                raise ValidationError(
                    "deleted_room_ids must be a list of room ids", field="deleted_room_ids"
                )
            deleted.extend(tombstones)
            name = name or data.get("name")
            description = description or data.get("change_description")
            data = data.get("rooms")
        if data is None:
            raise ValidationError("Input has no rooms", field="rooms")

        created = get_service(ctx).create_version(
            floor_plan_id,
            parse_rooms(data),
            editor,
            name=name,
            change_description=description,
            deleted_room_ids=deleted,
        )
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.success(
        f"Created version {created.id}",
        {
            "version_id": created.id,
            "floor_plan_id": created.floor_plan_id,
            "version_number": created.version_number,
        },
    )


@app.command("list")
def list_versions(
    ctx: typer.Context,
    floor_plan_id: str = typer.Argument(..., help="Floor plan ID"),
    pending: bool = typer.Option(
        False,
        "--pending", "-p",
        help="Only drafts, in merge order",
    ),
):
    """
    List versions of a floor plan.

    Examples:
        floorsync version list floor-3
        floorsync version list floor-3 --pending
    """
    formatter = get_formatter(ctx)
    service = get_service(ctx)

    try:
        if pending:
            versions = service.pending_versions(floor_plan_id)
        else:
            versions = service.list_versions(floor_plan_id)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.print_version_list(
        [v.to_dict() for v in versions],
        title="Pending Versions" if pending else "Versions",
    )


@app.command("show")
def show_version(
    ctx: typer.Context,
    version_id: str = typer.Argument(..., help="Version ID"),
):
    """
    View version details.

    Examples:
        floorsync version show <version-id>
    """
    formatter = get_formatter(ctx)

    try:
        version = get_service(ctx).versions.get(version_id)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.print_version_detail(version.to_dict())


@app.command("merge")
def merge_version(
    ctx: typer.Context,
    version_id: str = typer.Argument(..., help="Version ID"),
    editor: str = typer.Option(..., "--editor", "-e", help="Reviewing editor ID"),
):
    """
    Merge one version by hand, replacing the base layout with its snapshot.

    Examples:
        floorsync version merge <version-id> --editor alice
    """
    formatter = get_formatter(ctx)

    try:
        result = get_service(ctx).merge_version(version_id, editor)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.success(
        f"Version {version_id} merged",
        {
            "floor_plan_id": result.floor_plan.id,
            "floor_plan_version": result.floor_plan.version,
        },
    )


@app.command("reject")
def reject_version(
    ctx: typer.Context,
    version_id: str = typer.Argument(..., help="Version ID"),
    editor: str = typer.Option(..., "--editor", "-e", help="Reviewing editor ID"),
    reason: Optional[str] = typer.Option(
        None,
        "--reason", "-r",
        help="Reason for rejection",
    ),
):
    """
    Reject a draft version.

    Examples:
        floorsync version reject <version-id> --editor alice -r "Blocks fire exit"
    """
    formatter = get_formatter(ctx)

    try:
        rejected = get_service(ctx).reject_version(version_id, editor, reason)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.success(
        f"Version {version_id} rejected",
        {"rejected_by": rejected.rejected_by, "reason": rejected.rejection_reason},
    )


@app.command("compare")
def compare_versions(
    ctx: typer.Context,
    first: str = typer.Argument(..., help="First version ID"),
    second: str = typer.Argument(..., help="Second version ID"),
):
    """
    Compare two versions side by side.

    Examples:
        floorsync version compare <version-a> <version-b>
    """
    formatter = get_formatter(ctx)

    try:
        comparison = get_service(ctx).compare_versions(first, second)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.print_comparison(comparison.to_dict())
