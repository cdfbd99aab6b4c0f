"""Tree command implementation for modgraph.

Resolves a set of installed ``identifier:version`` pairs against a catalog
snapshot and prints the merged, deduplicated dependency tree. Packages
whose constraints cannot all be met by one version are shown once per
variant and flagged as conflicts.

Typical usage::

    # Rich tree on the terminal
    $ modgraph tree --mods "5:1.2.0,com.example.mod:2.0.5" --catalog catalog.json

    # Machine-readable JSON output
    $ modgraph tree --mods "5:1.2.0" --format json > tree.json
"""

from __future__ import annotations

import sys
import json
import click
from pathlib import Path
from typing import List, Optional, Sequence

from rich.markup import escape
from rich.tree import Tree

from modgraph.commands.common import catalog_option, mods_option, open_catalog
from modgraph.context import ModGraphContext, pass_context
from modgraph.core import DependencyResolver
from modgraph.exceptions import ModGraphError
from modgraph.models.tree import TreeNode, tree_to_json, walk_tree
from modgraph.utils import (
    get_logger,
    print_error,
    print_success,
    print_tree,
    print_warning,
)

logger = get_logger("commands.tree")


@click.command()
@mods_option
@catalog_option
@click.option(
    "--format",
    "-f",
    type=click.Choice(["tree", "json"], case_sensitive=False),
    default="tree",
    help="Output format.",
)
@pass_context
def tree(
    ctx: ModGraphContext,
    mods: str,
    catalog: Optional[Path],
    format: str,
) -> None:
    """Show the dependency tree of installed mods.

    Exits:
        0 on success (including an empty tree), 1 on invalid input or an
        unreadable catalog.
    """
    try:
        repository = open_catalog(ctx, catalog)
        config = ctx.effective_config
        resolver = DependencyResolver(
            repository,
            candidate_selection=config.candidate_selection,
            constraint_scope=config.constraint_scope,
        )
        nodes = resolver.resolve(mods)
    except ModGraphError as e:
        print_error(f"{e}")
        sys.exit(1)

    if format == "json":
        _display_json(nodes)
        return

    _display_tree(nodes)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _node_label(node: TreeNode) -> str:
    label = (
        f"[bold cyan]{escape(node.package.name)}[/bold cyan] "
        f"[dim]({escape(node.package.guid)})[/dim] "
        f"[bold green]{escape(node.version.version)}[/bold green]"
    )
    if node.conflict:
        label += " [conflict]CONFLICT[/conflict]"
    return label


def _add_branches(parent: Tree, nodes: Sequence[TreeNode]) -> None:
    for node in nodes:
        branch = parent.add(_node_label(node))
        _add_branches(branch, node.dependencies)


def _display_tree(nodes: List[TreeNode]) -> None:
    """Render the dependency forest with Rich."""
    if not nodes:
        print_success("No dependencies to resolve")
        return

    root = Tree("[bold]Dependencies[/bold]")
    _add_branches(root, nodes)
    print_tree(root)

    conflicts = {node.package_id for node in walk_tree(nodes) if node.conflict}
    if conflicts:
        print_warning(
            f"{len(conflicts)} package(s) have conflicting version constraints"
        )


def _display_json(nodes: List[TreeNode]) -> None:
    """Print the tree as JSON to stdout."""
    print(json.dumps(tree_to_json(nodes), indent=2))
