"""
Shared CLI state.

The service is built on first use so commands that never touch the data
directory do not create it.
"""

import json
from pathlib import Path
from typing import Any, NoReturn

import typer

from floorsync.cli.output import Formatter
from floorsync.config.settings import Settings, load_configured_merge_config
from floorsync.errors import FloorSyncError, ValidationError
from floorsync.merge.coordinator import MergeCoordinator
from floorsync.services import VersionService


def get_formatter(ctx: typer.Context) -> Formatter:
    return ctx.obj["formatter"]


def get_service(ctx: typer.Context) -> VersionService:
    """Get the version service for this invocation."""
    if ctx.obj.get("service") is None:
        settings: Settings = ctx.obj["settings"]
        formatter = get_formatter(ctx)
        try:
            merge_config = load_configured_merge_config(settings)
        except FileNotFoundError as e:
            formatter.error(str(e), code="CONFIG_NOT_FOUND")
            raise typer.Exit(1)

        formatter.debug(f"Using data directory {ctx.obj['data_dir']}")
        ctx.obj["service"] = VersionService(
            ctx.obj["data_dir"],
            coordinator=MergeCoordinator(config=merge_config),
        )
    return ctx.obj["service"]


def read_json_input(ctx: typer.Context, path: Path) -> Any:
    """Read a JSON input file, exiting with an error if it is unreadable."""
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        get_formatter(ctx).error(f"Cannot read {path}: {e}", code="INVALID_INPUT")
        raise typer.Exit(1)


def fail(ctx: typer.Context, error: FloorSyncError) -> NoReturn:
    """Report a floorsync error and exit with status 1."""
    details = {"field": error.field} if isinstance(error, ValidationError) and error.field else None
    get_formatter(ctx).error(str(error), code=error.code, details=details)
    raise typer.Exit(1)
