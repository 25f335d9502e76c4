"""
floorsync CLI main entry point.

The main Typer application that provides all CLI commands.
"""

import logging
from typing import Optional

import typer

from floorsync.cli.output import Formatter, OutputFormat
from floorsync.config.settings import get_settings
from floorsync.telemetry import configure_telemetry, shutdown_telemetry

# Create main app
app = typer.Typer(
    name="floorsync",
    help="Collaborative floor plan versioning and merging",
    no_args_is_help=True,
)

# Import and include command groups
from floorsync.cli.commands import config, editor, merge, plan, version  # noqa: E402

app.add_typer(plan.app, name="plan", help="Floor plan management")
app.add_typer(version.app, name="version", help="Draft versions and review")
app.add_typer(merge.app, name="merge", help="Conflict analysis and auto-merge")
app.add_typer(editor.app, name="editor", help="Editor management")
app.add_typer(config.app, name="config", help="Configuration")


# Global options
@app.callback()
def main(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output", "-o",
        help="Output format (human, json)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    data_dir: Optional[str] = typer.Option(
        None,
        "--data-dir",
        envvar="FLOORSYNC_DATA_DIR",
        help="Data directory",
    ),
):
    """
    floorsync - merge concurrent edits of shared floor plans.

    Editors submit draft versions; the head editor reviews, rejects or
    merges them.
    """
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format=settings.log_format,
    )

    if settings.telemetry_enabled:
        configure_telemetry(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )
        ctx.call_on_close(shutdown_telemetry)

    # Initialize context
    ctx.ensure_object(dict)

    # Set output format
    try:
        output_format = OutputFormat((output or settings.default_output_format).lower())
    except ValueError:
        output_format = OutputFormat.HUMAN

    ctx.obj["formatter"] = Formatter(format=output_format, verbose=verbose)
    ctx.obj["settings"] = settings
    ctx.obj["data_dir"] = data_dir or settings.data_dir
    ctx.obj["service"] = None
    ctx.obj["verbose"] = verbose


if __name__ == "__main__":
    app()
