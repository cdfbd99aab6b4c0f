"""
Shared context object for modgraph CLI commands.

This module defines the global Click context used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from modgraph.config import ModGraphConfig


class ModGraphContext:
    """Global context object for modgraph CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        config_path: Path to the modgraph configuration file, if provided.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration, set by the CLI group.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional[ModGraphConfig] = None

    @property
    def effective_config(self) -> ModGraphConfig:
        """Loaded configuration, or defaults when none was loaded."""
        return self.config if self.config is not None else ModGraphConfig()


#: Click decorator for injecting :class:`ModGraphContext` into commands.
pass_context = click.make_pass_decorator(ModGraphContext, ensure=True)
