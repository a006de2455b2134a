"""Tests for specctx configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from specctx.config import SpecctxConfig, find_config_file, load_config


class TestSpecctxConfig:
    """Tests for the SpecctxConfig dataclass."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        config = SpecctxConfig()
        assert config.workspace_dir == ".specctx"
        assert config.specs_dir == "specs"
        assert config.logs_dir == "logs"
        assert config.config_name == "config.toml"

    def test_custom_values(self) -> None:
        """Test that custom values can be set."""
        config = SpecctxConfig(
            workspace_dir=".work",
            specs_dir="documents",
            logs_dir="history",
            config_name="project.toml",
        )
        assert config.workspace_dir == ".work"
        assert config.specs_dir == "documents"
        assert config.logs_dir == "history"
        assert config.config_name == "project.toml"

    @pytest.mark.parametrize("name", ["workspace_dir", "specs_dir", "logs_dir", "config_name"])
    def test_validation_empty_value(self, name: str) -> None:
        """Test that empty values raise ValueError."""
        with pytest.raises(ValueError, match=f"{name} must be a non-empty string"):
            SpecctxConfig(**{name: ""})

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("workspace_dir", "/srv/elsewhere"),
            ("workspace_dir", "../outside"),
            ("specs_dir", "nested/../../up"),
            ("logs_dir", "/var/log/specctx"),
        ],
    )
    def test_validation_path_outside_project(self, name: str, value: str) -> None:
        """Test that absolute and escaping paths are rejected."""
        with pytest.raises(ValueError, match=f"{name} must be a relative path inside the project"):
            SpecctxConfig(**{name: value})

    def test_nested_relative_paths_allowed(self) -> None:
        config = SpecctxConfig(workspace_dir="tools/.specctx", specs_dir="docs/specs")
        assert config.workspace_dir == "tools/.specctx"

    def test_absolute_env_value_rejected(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECCTX_WORKSPACE_DIR", str(tmp_path / "elsewhere"))
        with pytest.raises(ValueError, match="relative path"):
            load_config(start_dir=tmp_path)

    def test_validation_config_name_extension(self) -> None:
        """Test that config_name must end with .toml."""
        with pytest.raises(ValueError, match="config_name must end with .toml"):
            SpecctxConfig(config_name="config.yaml")

    def test_paths(self, tmp_path: Path) -> None:
        """Test path helpers resolve below the workspace directory."""
        config = SpecctxConfig()
        assert config.get_workspace_path(tmp_path) == tmp_path / ".specctx"
        assert config.get_specs_path(tmp_path) == tmp_path / ".specctx" / "specs"
        assert config.get_logs_path(tmp_path) == tmp_path / ".specctx" / "logs"
        assert config.get_config_path(tmp_path) == tmp_path / ".specctx" / "config.toml"

    def test_workspace_path_default(self) -> None:
        """Test get_workspace_path uses cwd when no base_path provided."""
        assert SpecctxConfig().get_workspace_path() == Path.cwd() / ".specctx"


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_find_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".specctxrc"
        config_file.write_text("\n")
        assert find_config_file(".specctxrc", tmp_path) == config_file

    def test_find_in_ancestor_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".specctxrc"
        config_file.write_text("\n")
        nested_dir = tmp_path / "a" / "b" / "c"
        nested_dir.mkdir(parents=True)
        assert find_config_file(".specctxrc", nested_dir) == config_file

    def test_not_found(self, tmp_path: Path) -> None:
        assert find_config_file(".specctxrc-that-does-not-exist", tmp_path) is None

    def test_prefers_closest_file(self, tmp_path: Path) -> None:
        (tmp_path / ".specctxrc").write_text('workspace_dir = ".parent"\n')
        child_dir = tmp_path / "subdir"
        child_dir.mkdir()
        child_config = child_dir / ".specctxrc"
        child_config.write_text('workspace_dir = ".child"\n')

        assert find_config_file(".specctxrc", child_dir) == child_config


class TestLoadFromFiles:
    """Tests for loading configuration from .specctxrc and pyproject.toml."""

    def test_load_specctxrc(self, tmp_path: Path) -> None:
        (tmp_path / ".specctxrc").write_text(
            'workspace_dir = ".work"\n'
            'specs_dir = "documents"\n'
        )
        config = load_config(start_dir=tmp_path)
        assert config.workspace_dir == ".work"
        assert config.specs_dir == "documents"
        assert config.logs_dir == "logs"

    def test_unknown_fields_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".specctxrc").write_text(
            'workspace_dir = ".work"\n'
            'unknown_field = "value"\n'
        )
        assert load_config(start_dir=tmp_path).workspace_dir == ".work"

    def test_load_from_tool_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            "[project]\n"
            'name = "myproject"\n'
            "\n"
            "[tool.specctx]\n"
            'workspace_dir = ".pyproject-work"\n'
        )
        assert load_config(start_dir=tmp_path).workspace_dir == ".pyproject-work"

    def test_no_tool_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "myproject"\n')
        assert load_config(start_dir=tmp_path).workspace_dir == ".specctx"

    def test_invalid_toml_files_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".specctxrc").write_text("this is not valid toml [[[")
        (tmp_path / "pyproject.toml").write_text("neither is this [[[")
        assert load_config(start_dir=tmp_path) == SpecctxConfig()

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        (tmp_path / ".specctxrc").write_text('config_name = "config.ini"\n')
        with pytest.raises(ValueError, match=".toml"):
            load_config(start_dir=tmp_path)


class TestConfigPrecedence:
    """Tests for configuration precedence."""

    @pytest.fixture
    def layered(self, tmp_path: Path) -> Path:
        (tmp_path / "pyproject.toml").write_text(
            "[tool.specctx]\n"
            'workspace_dir = ".pyproject-work"\n'
            'specs_dir = "pyproject-specs"\n'
            'logs_dir = "pyproject-logs"\n'
        )
        (tmp_path / ".specctxrc").write_text(
            'workspace_dir = ".rc-work"\n'
            'specs_dir = "rc-specs"\n'
        )
        return tmp_path

    def test_specctxrc_overrides_pyproject(self, layered: Path) -> None:
        config = load_config(start_dir=layered)
        assert config.workspace_dir == ".rc-work"
        assert config.specs_dir == "rc-specs"
        assert config.logs_dir == "pyproject-logs"

    def test_env_overrides_files(self, layered: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECCTX_WORKSPACE_DIR", ".env-work")
        config = load_config(start_dir=layered)
        assert config.workspace_dir == ".env-work"
        assert config.specs_dir == "rc-specs"

    def test_cli_overrides_all(self, layered: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECCTX_WORKSPACE_DIR", ".env-work")
        config = load_config(cli_overrides={"workspace_dir": ".cli-work"}, start_dir=layered)
        assert config.workspace_dir == ".cli-work"

    def test_none_cli_values_ignored(self, layered: Path) -> None:
        config = load_config(
            cli_overrides={"workspace_dir": None, "unknown": "x"},
            start_dir=layered,
        )
        assert config.workspace_dir == ".rc-work"
