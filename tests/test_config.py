from __future__ import annotations

from pathlib import Path

import pytest

from modgraph.config import (
    ModGraphConfig,
    _parse_section,
    _pyproject_has_modgraph_section,
    _read_toml,
    discover_config_file,
    load_config,
)
from modgraph.exceptions import ConfigError


@pytest.mark.unit
class TestModGraphConfig:
    """Tests for the ModGraphConfig dataclass."""

    def test_defaults(self) -> None:
        config = ModGraphConfig()

        assert config.catalog is None
        assert config.candidate_selection == "highest_id"
        assert config.constraint_scope == "global"
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        """Test the log dict excludes metadata."""
        config = ModGraphConfig(
            catalog=Path("catalog.json"),
            constraint_scope="branch",
            source_path=Path("/x/modgraph.toml"),
        )

        assert config.to_log_dict() == {
            "catalog": "catalog.json",
            "candidate_selection": "highest_id",
            "constraint_scope": "branch",
        }

    def test_resolve_catalog_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test CLI value beats environment, which beats the file."""
        config = ModGraphConfig(catalog=Path("file.json"))
        monkeypatch.delenv("MODGRAPH_CATALOG", raising=False)

        assert config.resolve_catalog() == Path("file.json")

        monkeypatch.setenv("MODGRAPH_CATALOG", "env.json")
        assert config.resolve_catalog() == Path("env.json")
        assert config.resolve_catalog(Path("cli.json")) == Path("cli.json")

    def test_resolve_catalog_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MODGRAPH_CATALOG", raising=False)

        assert ModGraphConfig().resolve_catalog() is None


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text("[modgraph]\n", encoding="utf-8")

        assert discover_config_file(path) == path.resolve()

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Configuration file not found"):
            discover_config_file(tmp_path / "missing.toml")

    def test_modgraph_toml_preferred(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test modgraph.toml wins over pyproject.toml."""
        (tmp_path / "modgraph.toml").write_text("[modgraph]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.modgraph]\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert discover_config_file() == (tmp_path / "modgraph.toml").resolve()

    def test_pyproject_with_section(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.modgraph]\nconstraint_scope = "branch"\n', encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)

        assert discover_config_file() == (tmp_path / "pyproject.toml").resolve()

    def test_pyproject_without_section(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.black]\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert discover_config_file() is None

    def test_nothing_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert discover_config_file() is None


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml and _pyproject_has_modgraph_section."""

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[modgraph\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            _read_toml(path)

    def test_broken_pyproject_has_no_section(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("not toml = = =", encoding="utf-8")

        assert _pyproject_has_modgraph_section(path) is False


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_all_options(self, tmp_path: Path) -> None:
        config = _parse_section(
            {
                "catalog": "data/catalog.json",
                "candidate_selection": "highest_version",
                "constraint_scope": "branch",
            },
            config_path=tmp_path / "modgraph.toml",
        )

        assert config.catalog == tmp_path / "data" / "catalog.json"
        assert config.candidate_selection == "highest_version"
        assert config.constraint_scope == "branch"

    def test_absolute_catalog_kept(self, tmp_path: Path) -> None:
        catalog = tmp_path / "abs.json"

        config = _parse_section({"catalog": str(catalog)}, config_path=Path("/etc/modgraph.toml"))

        assert config.catalog == catalog

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
            _parse_section({"colour": True}, config_path=tmp_path / "modgraph.toml")

    @pytest.mark.parametrize(
        "section,option",
        [
            ({"catalog": ""}, "catalog"),
            ({"catalog": 3}, "catalog"),
            ({"candidate_selection": "newest"}, "candidate_selection"),
            ({"constraint_scope": 1}, "constraint_scope"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, section, option: str) -> None:
        """Test bad values name the offending option."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path=tmp_path / "modgraph.toml")

        assert exc_info.value.option == option


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert load_config() == ModGraphConfig()

    def test_modgraph_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "modgraph.toml"
        path.write_text(
            '[modgraph]\ncatalog = "catalog.json"\nconstraint_scope = "branch"\n',
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.catalog == path.resolve().parent / "catalog.json"
        assert config.constraint_scope == "branch"
        assert config.source_path == path.resolve()

    def test_pyproject(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[tool.modgraph]\ncandidate_selection = "highest_version"\n', encoding="utf-8"
        )

        assert load_config(path).candidate_selection == "highest_version"

    def test_empty_section(self, tmp_path: Path) -> None:
        """Test a file without a modgraph table yields defaults."""
        path = tmp_path / "modgraph.toml"
        path.write_text("[other]\nkey = 1\n", encoding="utf-8")

        config = load_config(path)

        assert config.candidate_selection == "highest_id"
        assert config.source_path == path.resolve()
