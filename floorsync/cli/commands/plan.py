"""
Plan command for floorsync CLI.

Imports and inspects base floor plans.
"""

from pathlib import Path

import typer

from floorsync.cli.context import fail, get_formatter, get_service, read_json_input
from floorsync.errors import FloorSyncError
from floorsync.schemas import parse_floor_plan

app = typer.Typer()


@app.command("import")
def import_plan(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ...,
        help="JSON file with the floor plan (id, name, rooms, version)",
    ),
    force: bool = typer.Option(
        False,
        "--force", "-f",
        help="Replace an existing floor plan",
    ),
):
    """
    Import a floor plan as the base layout.

    Examples:
        floorsync plan import floor-3.json
        floorsync plan import floor-3.json --force
    """
    formatter = get_formatter(ctx)
    service = get_service(ctx)

    try:
        plan = parse_floor_plan(read_json_input(ctx, file))
        if service.floor_plans.exists(plan.id) and not force:
            formatter.error(
                f"Floor plan already exists: {plan.id}",
                code="ALREADY_EXISTS",
                details={"hint": "use --force to replace it"},
            )
            raise typer.Exit(1)
        service.floor_plans.save(plan)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.success(
        f"Imported floor plan {plan.id}",
        {"version": plan.version, "rooms": len(plan.rooms)},
    )


@app.command("show")
def show_plan(
    ctx: typer.Context,
    floor_plan_id: str = typer.Argument(..., help="Floor plan ID"),
):
    """
    Show a floor plan and its rooms.

    Examples:
        floorsync plan show floor-3
    """
    formatter = get_formatter(ctx)

    try:
        plan = get_service(ctx).floor_plans.load(floor_plan_id)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.print_floor_plan(plan.to_dict())


@app.command("list")
def list_plans(ctx: typer.Context):
    """
    List floor plans with their pending version counts.

    Examples:
        floorsync plan list
    """
    formatter = get_formatter(ctx)
    service = get_service(ctx)

    try:
        plans = []
        for plan in service.floor_plans.list_floor_plans():
            data = plan.to_dict()
            data["pending_versions"] = service.versions.pending_count(plan.id)
            plans.append(data)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.print_floor_plan_list(plans)
