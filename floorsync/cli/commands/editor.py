"""
Editor command for floorsync CLI.

Registers editors and their merge priority.
"""

import typer

from floorsync.cli.context import fail, get_formatter, get_service
from floorsync.errors import FloorSyncError
from floorsync.merge.models import EditorRole
from floorsync.schemas import parse_editor

app = typer.Typer()


@app.command("add")
def add_editor(
    ctx: typer.Context,
    editor_id: str = typer.Argument(..., help="Editor ID"),
    priority: int = typer.Option(
        ...,
        "--priority", "-p",
        help="Priority (1 is the head editor; lower wins conflicts)",
    ),
    name: str = typer.Option("", "--name", "-n", help="Display name"),
    role: EditorRole = typer.Option(EditorRole.EDITOR, "--role", help="Editor role"),
):
    """
    Register or update an editor.

    Examples:
        floorsync editor add alice --priority 1 --name "Alice"
        floorsync editor add ops --priority 9 --role admin
    """
    formatter = get_formatter(ctx)

    try:
        editor = parse_editor(
            {"id": editor_id, "name": name, "priority": priority, "role": role.value}
        )
        get_service(ctx).editors.add(editor)
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.success(f"Registered editor {editor.id}", editor.to_dict())


@app.command("list")
def list_editors(ctx: typer.Context):
    """
    List editors, highest authority first.

    Examples:
        floorsync editor list
    """
    formatter = get_formatter(ctx)

    try:
        editors = get_service(ctx).editors.list_editors()
    except FloorSyncError as e:
        fail(ctx, e)

    formatter.print_editor_list([e.to_dict() for e in editors])
