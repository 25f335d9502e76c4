"""
CLI output formatting helpers.

Provides consistent formatting for human-readable and JSON output.
"""

import json
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"


error_console = Console(stderr=True)

STATUS_COLORS = {
    "draft": "yellow",
    "merged": "green",
    "rejected": "red",
}


class Formatter:
    """Output formatter with support for multiple formats."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.HUMAN,
        verbose: bool = False,
        color: bool = True,
    ):
        """
        Initialize formatter.

        Args:
            format: Output format (human or json)
            verbose: Enable verbose output
            color: Enable colored output
        """
        self.format = format
        self.verbose = verbose
        self.color = color
        self.console = Console(no_color=not color)

    @property
    def is_json(self) -> bool:
        return self.format == OutputFormat.JSON

    def success(self, message: str, data: Optional[dict] = None):
        """Display success message."""
        if self.is_json:
            output = {"status": "success", "message": message}
            if data:
                output.update(data)
            self.print_json(output)
        else:
            self.console.print(f"[green]✓[/green] {message}")
            if data and self.verbose:
                for key, value in data.items():
                    self.console.print(f"  [dim]{key}:[/dim] {value}")

    def error(self, message: str, code: Optional[str] = None, details: Optional[dict] = None):
        """Display error message."""
        if self.is_json:
            self.print_json(
                {
                    "status": "error",
                    "error": {
                        "message": message,
                        "code": code or "ERROR",
                        "details": details,
                    },
                }
            )
        else:
            error_console.print(f"[red]✗[/red] {message}")
            if code:
                error_console.print(f"  [dim]Code:[/dim] {code}")
            if details:
                for key, value in details.items():
                    error_console.print(f"  [dim]{key}:[/dim] {value}")

    def warning(self, message: str):
        """Display warning message."""
        if self.is_json:
            self.print_json({"status": "warning", "message": message})
        else:
            self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str):
        """Display info message."""
        if not self.is_json:
            self.console.print(f"[blue]ℹ[/blue] {message}")

    def debug(self, message: str):
        """Display debug message (only in verbose mode)."""
        if self.verbose and not self.is_json:
            self.console.print(f"[dim][DEBUG][/dim] {message}")

    def print_json(self, data: Any):
        """Print data as JSON."""
        print(json.dumps(data, indent=2, default=str))

    # ===== Floor plans =====

    def print_floor_plan(self, plan: dict):
        """Print a floor plan and its rooms."""
        if self.is_json:
            self.print_json(plan)
            return

        self.console.print()
        self.console.print(Panel.fit(
            f"[cyan]Floor plan:[/cyan] {plan['id']}\n"
            f"[dim]Name:[/dim] {plan.get('name') or '-'}\n"
            f"[dim]Version:[/dim] {plan['version']}\n"
            f"[dim]Rooms:[/dim] {len(plan['rooms'])}",
            title="floorsync",
        ))
        self.print_rooms(plan["rooms"])

    def print_rooms(self, rooms: list[dict], title: str = "Rooms"):
        """Print a table of rooms."""
        if not rooms:
            self.console.print("[dim]No rooms[/dim]")
            return

        table = Table(title=title)
        table.add_column("ID", style="cyan")
        table.add_column("Type")
        table.add_column("Name")
        table.add_column("X", justify="right")
        table.add_column("Y", justify="right")

        for room in rooms:
            table.add_row(
                room["id"],
                room["type"],
                room.get("name", ""),
                f"{room['x']:g}",
                f"{room['y']:g}",
            )

        self.console.print(table)

    def print_floor_plan_list(self, plans: list[dict]):
        """Print list of floor plans."""
        if self.is_json:
            self.print_json({"floor_plans": plans})
            return

        if not plans:
            self.console.print("[dim]No floor plans found[/dim]")
            return

        table = Table(title="Floor Plans")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Version", justify="right")
        table.add_column("Rooms", justify="right")
        table.add_column("Pending", justify="right")

        for plan in plans:
            pending = plan.get("pending_versions", 0)
            pending_str = f"[yellow]{pending}[/yellow]" if pending else "0"
            table.add_row(
                plan["id"],
                plan.get("name", ""),
                str(plan["version"]),
                str(len(plan["rooms"])),
                pending_str,
            )

        self.console.print(table)

    # ===== Versions =====

    def print_version_list(self, versions: list[dict], title: str = "Versions"):
        """Print list of versions."""
        if self.is_json:
            self.print_json({"versions": versions, "total": len(versions)})
            return

        if not versions:
            self.console.print("[dim]No versions found[/dim]")
            return

        table = Table(title=title)
        table.add_column("ID", style="cyan")
        table.add_column("Status")
        table.add_column("Creator")
        table.add_column("Priority", justify="right")
        table.add_column("Rooms", justify="right")
        table.add_column("Created")

        for version in versions:
            status = version["status"]
            color = STATUS_COLORS.get(status, "white")
            table.add_row(
                version["id"],
                f"[{color}]{status}[/{color}]",
                version.get("creator_name") or version["creator_id"],
                str(version["creator_priority"]),
                str(len(version["rooms"])),
                version["created_at"][:19].replace("T", " "),
            )

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(versions)}[/dim]")

    def print_version_detail(self, version: dict):
        """Print version details."""
        if self.is_json:
            self.print_json(version)
            return

        status = version["status"]
        color = STATUS_COLORS.get(status, "white")
        lines = [
            f"[cyan]Version ID:[/cyan] {version['id']}",
            f"[dim]Floor plan:[/dim] {version['floor_plan_id']} "
            f"(version {version['version_number']})",
            f"[dim]Status:[/dim] [{color}]{status}[/{color}]",
            f"[dim]Creator:[/dim] {version.get('creator_name') or version['creator_id']} "
            f"(priority {version['creator_priority']})",
            f"[dim]Created:[/dim] {version['created_at']}",
        ]
        if version.get("change_description"):
            lines.append(f"[dim]Description:[/dim] {version['change_description']}")
        if version.get("deleted_room_ids"):
            lines.append(f"[dim]Deletes:[/dim] {', '.join(version['deleted_room_ids'])}")
        if version.get("merged_by"):
            lines.append(f"[dim]Merged by:[/dim] {version['merged_by']} at {version['merged_at']}")
        if version.get("rejected_by"):
            lines.append(
                f"[dim]Rejected by:[/dim] {version['rejected_by']} at {version['rejected_at']}"
            )
            if version.get("rejection_reason"):
                lines.append(f"[dim]Reason:[/dim] {version['rejection_reason']}")

        self.console.print()
        self.console.print(Panel.fit("\n".join(lines), title="Version Details"))
        self.print_rooms(version["rooms"])

    def print_comparison(self, comparison: dict):
        """Print a side-by-side version comparison."""
        if self.is_json:
            self.print_json(comparison)
            return

        first, second = comparison["first"], comparison["second"]
        differences = comparison["differences"]

        self.console.print()
        self.console.print(
            f"[cyan]{first['id']}[/cyan] ({first['creator']}, priority {first['priority']}) "
            f"vs [cyan]{second['id']}[/cyan] ({second['creator']}, priority {second['priority']})"
        )
        self.console.print(
            f"Only in first: {differences['added_in_first']}  "
            f"Only in second: {differences['added_in_second']}  "
            f"Modified: {differences['modified']}"
        )

        if first["added_rooms"]:
            self.print_rooms(first["added_rooms"], title="Only in first")
        if second["added_rooms"]:
            self.print_rooms(second["added_rooms"], title="Only in second")

        if differences["modified_rooms"]:
            table = Table(title="Modified rooms")
            table.add_column("Room", style="cyan")
            table.add_column("Differences")
            for modified in differences["modified_rooms"]:
                table.add_row(modified["room_id"], ", ".join(modified["differences"]))
            self.console.print(table)

    # ===== Merging =====

    def print_conflict_report(self, report: dict):
        """Print a conflict report."""
        if self.is_json:
            self.print_json(report)
            return

        summary = report["summary"]
        verdict = (
            "[green]can auto-merge[/green]"
            if summary["can_auto_merge"]
            else "[red]manual resolution required[/red]"
        )
        self.console.print()
        self.console.print(Panel.fit(
            f"[dim]Safe changes:[/dim] {summary['total_safe_changes']}\n"
            f"[dim]Conflicts:[/dim] {summary['total_conflicts']}\n"
            f"[dim]Verdict:[/dim] {verdict}",
            title="Conflict Analysis",
        ))

        if report["conflicts"]:
            table = Table(title="Conflicts")
            table.add_column("Room", style="cyan")
            table.add_column("Type", style="red")
            table.add_column("Description")
            for entry in report["conflicts"]:
                table.add_row(entry["room_id"], entry["type"], entry["description"])
            self.console.print(table)

        if report["safe_changes"]:
            table = Table(title="Safe changes")
            table.add_column("Room", style="cyan")
            table.add_column("Type")
            table.add_column("Description")
            for entry in report["safe_changes"]:
                table.add_row(entry["room_id"], entry["type"], entry["description"])
            self.console.print(table)

    def print_merge_result(self, result: dict):
        """Print the result of an auto-merge."""
        if self.is_json:
            self.print_json(result)
            return

        if not result["success"]:
            error_console.print(f"[red]✗[/red] {result['message']}")
            for conflict in result.get("conflicts", []):
                error_console.print(f"  • {conflict['room_id']}: {conflict['type']}")
            return

        plan = result["merged_floor_plan"]
        self.console.print(
            f"[green]✓[/green] Merged {result['merged_version_count']} versions into "
            f"[cyan]{plan['id']}[/cyan] (now version {plan['version']})"
        )
        self.console.print(f"  [dim]Applied changes:[/dim] {len(result['applied_changes'])}")
        dropped = result.get("dropped_rooms", [])
        if dropped:
            self.console.print(
                f"  [yellow]Dropped overlapping rooms:[/yellow] "
                f"{', '.join(r['id'] for r in dropped)}"
            )

    # ===== Editors and config =====

    def print_editor_list(self, editors: list[dict]):
        """Print list of editors."""
        if self.is_json:
            self.print_json({"editors": editors})
            return

        if not editors:
            self.console.print("[dim]No editors registered[/dim]")
            return

        table = Table(title="Editors")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Priority", justify="right")
        table.add_column("Role")

        for editor in editors:
            priority = str(editor["priority"])
            if editor["priority"] == 1:
                priority = f"[green]{priority} (head)[/green]"
            table.add_row(editor["id"], editor.get("name", ""), priority, editor["role"])

        self.console.print(table)

    def print_config(self, config: dict):
        """Print configuration sections."""
        if self.is_json:
            self.print_json(config)
            return

        for section, values in config.items():
            table = Table(title=section)
            table.add_column("Key", style="cyan")
            table.add_column("Value")
            for key, value in values.items():
                table.add_row(key, json.dumps(value) if isinstance(value, (dict, list)) else str(value))
            self.console.print(table)
