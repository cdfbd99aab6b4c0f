from __future__ import annotations

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from modgraph.config import ModGraphConfig
from modgraph.context import ModGraphContext, pass_context


@pytest.mark.unit
class TestModGraphContext:
    """Tests for ModGraphContext."""

    def test_defaults(self) -> None:
        ctx = ModGraphContext()

        assert ctx.config_path is None
        assert ctx.verbose == 0
        assert ctx.color is True
        assert ctx.config is None

    def test_slots_reject_unknown_attributes(self) -> None:
        """Test the context only carries its declared attributes."""
        with pytest.raises(AttributeError):
            ModGraphContext().unknown = 1  # type: ignore[attr-defined]

    def test_effective_config_defaults(self) -> None:
        """Test an unloaded context falls back to default configuration."""
        config = ModGraphContext().effective_config

        assert config.candidate_selection == "highest_id"
        assert config.constraint_scope == "global"

    def test_effective_config_loaded(self) -> None:
        ctx = ModGraphContext()
        ctx.config = ModGraphConfig(catalog=Path("c.json"), constraint_scope="branch")

        assert ctx.effective_config is ctx.config


@pytest.mark.unit
class TestPassContext:
    """Tests for the pass_context decorator."""

    def test_creates_context_when_missing(self) -> None:
        """Test commands receive a fresh context when none was set."""
        seen = []

        @click.command()
        @pass_context
        def command(ctx: ModGraphContext) -> None:
            seen.append(ctx)

        result = CliRunner().invoke(command, [])

        assert result.exit_code == 0
        assert isinstance(seen[0], ModGraphContext)
