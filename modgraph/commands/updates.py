"""Updates command implementation for modgraph.

Checks every installed mod for an upgrade that runs on a target platform
version and does not break the constraints of the rest of the installed
set. Results are grouped into available updates, blocked updates, mods
that are up to date and mods with no version for the target platform.

Typical usage::

    $ modgraph updates --mods "5:1.2.0,com.example.mod:2.0.5" \\
        --platform-version 3.11.5 --catalog catalog.json

    # Machine-readable JSON output
    $ modgraph updates --mods "5:1.2.0" --platform-version 3.11.5 --format json
"""

from __future__ import annotations

import sys
import json
import click
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.markup import escape

from modgraph.commands.common import catalog_option, mods_option, open_catalog
from modgraph.context import ModGraphContext, pass_context
from modgraph.core import UpdateChecker
from modgraph.exceptions import ModGraphError
from modgraph.models.report import BlockedUpdate, UpdateReport
from modgraph.utils import (
    colorize_update_type,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.updates")


@click.command()
@mods_option
@click.option(
    "--platform-version",
    "-p",
    required=True,
    help="Target platform version to check compatibility against.",
)
@catalog_option
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def updates(
    ctx: ModGraphContext,
    mods: str,
    platform_version: str,
    catalog: Optional[Path],
    format: str,
) -> None:
    """Check installed mods for safe updates.

    Exits:
        0 if no update is available, 1 if updates are available or an
        error occurred.
    """
    try:
        repository = open_catalog(ctx, catalog)
        config = ctx.effective_config
        checker = UpdateChecker(
            repository,
            candidate_selection=config.candidate_selection,
            constraint_scope=config.constraint_scope,
        )
        report = checker.check(mods, platform_version)
    except ModGraphError as e:
        print_error(f"{e}")
        sys.exit(1)

    if format == "json":
        print(json.dumps(report.to_json(), indent=2))
    else:
        _display_report(report)

    sys.exit(1 if report.has_updates else 0)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _block_detail(entry: BlockedUpdate) -> str:
    detail = entry.validation.detail
    return escape(str(detail)) if detail is not None else "-"


def _display_report(report: UpdateReport) -> None:
    """Render the four report categories as Rich tables."""
    if report.is_empty:
        print_warning("No installed mods matched the catalog")
        return

    rows: List[Dict[str, Any]] = []

    for entry in report.updates:
        rows.append(
            {
                "Status": "[yellow]UPDATE[/yellow]",
                "Mod": escape(entry.package.name),
                "Current": entry.current.version,
                "Available": entry.recommended.version,
                "Update Type": colorize_update_type(entry.update_type),
                "Details": entry.update_reason,
            }
        )

    for entry in report.blocked_updates:
        rows.append(
            {
                "Status": "[red]BLOCKED[/red]",
                "Mod": escape(entry.package.name),
                "Current": entry.current.version,
                "Available": entry.latest.version,
                "Update Type": "-",
                "Details": f"{entry.block_reason}: {_block_detail(entry)}",
            }
        )

    for entry in report.up_to_date:
        rows.append(
            {
                "Status": "[green]OK[/green]",
                "Mod": escape(entry.package.name),
                "Current": entry.current.version,
                "Available": "-",
                "Update Type": "-",
                "Details": "-",
            }
        )

    for entry in report.incompatible_with_platform:
        rows.append(
            {
                "Status": "[red]INCOMPATIBLE[/red]",
                "Mod": escape(entry.package.name),
                "Current": entry.current.version,
                "Available": "-",
                "Update Type": "-",
                "Details": entry.reason,
            }
        )

    print_table(
        rows,
        title=f"Updates for platform {report.target_platform_version}",
        column_styles={
            "Status": {"justify": "center", "no_wrap": True},
            "Mod": {"style": "bold cyan", "no_wrap": True},
            "Current": {"justify": "center", "style": "dim"},
            "Available": {"justify": "center", "style": "bold green"},
            "Update Type": {"justify": "center"},
            "Details": {"justify": "left", "no_wrap": False},
        },
        show_row_lines=True,
    )

    if report.has_updates:
        print_warning(f"\n{len(report.updates)} mod(s) have updates available")
    else:
        print_success("\nNo safe updates available")
