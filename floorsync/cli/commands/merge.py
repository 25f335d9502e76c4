"""
Merge command for floorsync CLI.

Analyzes pending versions and runs the all-or-nothing auto-merge.
"""

import typer

from floorsync.cli.context import fail, get_formatter, get_service
from floorsync.errors import FloorSyncError
from floorsync.services.version_service import NO_PENDING_MESSAGE

app = typer.Typer()


@app.command("analyze")
def analyze(
    ctx: typer.Context,
    floor_plan_id: str = typer.Argument(..., help="Floor plan ID"),
):
    """
    Report safe changes and conflicts among pending versions.

    Examples:
        floorsync merge analyze floor-3
        floorsync -o json merge analyze floor-3
    """
    formatter = get_formatter(ctx)

    try:
        report = get_service(ctx).analyze(floor_plan_id)
    except FloorSyncError as e:
        fail(ctx, e)

    if report is None:
        formatter.warning("No pending versions to analyze")
        return

    formatter.print_conflict_report(report.to_dict())


@app.command("auto")
def auto_merge(
    ctx: typer.Context,
    floor_plan_id: str = typer.Argument(..., help="Floor plan ID"),
    editor: str = typer.Option(..., "--editor", "-e", help="Reviewing editor ID"),
):
    """
    Merge every pending version, or none if any conflict remains.

    Exits with status 1 when conflicts block the merge.

    Examples:
        floorsync merge auto floor-3 --editor alice
    """
    formatter = get_formatter(ctx)

    try:
        outcome = get_service(ctx).auto_merge(floor_plan_id, editor)
    except FloorSyncError as e:
        fail(ctx, e)

    if not outcome.success and outcome.result.message == NO_PENDING_MESSAGE:
        formatter.warning(NO_PENDING_MESSAGE)
        return

    formatter.print_merge_result(outcome.to_dict())
    if not outcome.success:
        raise typer.Exit(1)
