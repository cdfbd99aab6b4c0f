"""Helpers shared by modgraph CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from modgraph.context import ModGraphContext
from modgraph.core.catalog import InMemoryCatalog, load_catalog
from modgraph.utils.logger import get_logger

logger = get_logger("commands.common")

#: Reusable ``--catalog`` option.
catalog_option = click.option(
    "--catalog",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Catalog snapshot (JSON). Defaults to MODGRAPH_CATALOG or the config file.",
)

#: Reusable ``--mods`` option.
mods_option = click.option(
    "--mods",
    "-m",
    required=True,
    help='Installed mods as "identifier:version" pairs, comma separated.',
)


def open_catalog(ctx: ModGraphContext, catalog: Optional[Path]) -> InMemoryCatalog:
    """Load the catalog chosen by CLI option, environment or config.

    Raises:
        click.UsageError: If no catalog path is configured anywhere.
        CatalogError: If the snapshot is invalid.
        FileOperationError: If the snapshot cannot be read.
    """
    path = ctx.effective_config.resolve_catalog(catalog)
    if path is None:
        raise click.UsageError(
            "No catalog given. Use --catalog, set MODGRAPH_CATALOG, or set "
            "'catalog' in modgraph.toml."
        )

    logger.info("Using catalog %s", path)
    return load_catalog(path)
