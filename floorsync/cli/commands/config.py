"""
Config command for floorsync CLI.

Shows the effective settings and merge configuration.
"""

import typer

from floorsync.cli.context import fail, get_formatter
from floorsync.config.settings import Settings, load_configured_merge_config
from floorsync.errors import FloorSyncError

app = typer.Typer()


@app.command("show")
def show_config(ctx: typer.Context):
    """
    Show effective configuration.

    Settings come from FLOORSYNC_* environment variables or .env; merge
    rules come from the merge config YAML.

    Examples:
        floorsync config show
        floorsync -o json config show
    """
    formatter = get_formatter(ctx)
    settings: Settings = ctx.obj["settings"]

    try:
        merge_config = load_configured_merge_config(settings)
    except FileNotFoundError as e:
        formatter.error(str(e), code="CONFIG_NOT_FOUND")
        raise typer.Exit(1)
    except FloorSyncError as e:
        fail(ctx, e)

    settings_data = settings.model_dump()
    settings_data["data_dir"] = ctx.obj["data_dir"]

    merge_data = merge_config.to_dict()
    placement = merge_data["placement"]
    formatter.print_config(
        {
            "settings": settings_data,
            "detection": merge_data["detection"],
            "resolution": merge_data["resolution"],
            "placement": {k: v for k, v in placement.items() if k != "room_dimensions"},
            "room_dimensions": placement["room_dimensions"],
        }
    )
