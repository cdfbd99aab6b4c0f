"""
Command-line interface for modgraph.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from modgraph.config import load_config
from modgraph.__version__ import __version__
from modgraph.context import ModGraphContext
from modgraph.exceptions import ConfigError, ModGraphError
from modgraph.utils.logger import get_logger, setup_logging
from modgraph.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="MODGRAPH_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="MODGRAPH_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="modgraph",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """modgraph: dependency trees and safe updates for mod catalogs.

    \b
    Available commands:
      modgraph tree       Show the resolved dependency tree
      modgraph updates    Check installed mods for safe updates

    \b
    Examples:
      modgraph tree --mods "5:1.2.0,com.example.mod:2.0.5" --catalog catalog.json
      modgraph updates --mods "5:1.2.0" --platform-version 3.11.5
      modgraph -v tree --mods "5:1.2.0" --format json

    Use ``modgraph COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    modgraph_ctx = ModGraphContext()
    modgraph_ctx.config_path = config or loaded_config.source_path
    modgraph_ctx.color = color
    modgraph_ctx.verbose = verbose
    modgraph_ctx.config = loaded_config
    ctx.obj = modgraph_ctx

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    logger.debug("modgraph v%s", __version__)
    logger.debug("Config path: %s", modgraph_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
try:
    from modgraph.commands.tree import tree
    from modgraph.commands.updates import updates

    cli.add_command(tree)
    cli.add_command(updates)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the modgraph CLI.

    Returns:
        Exit code:
            0   Success
            1   Updates available, or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except ModGraphError as exc:
        print_error(str(exc))
        logger.debug(
            "ModGraphError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
