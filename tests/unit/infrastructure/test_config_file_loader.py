"""Unit tests for ConfigFileLoader."""

from pathlib import Path

import pytest

from lambda2knative.infrastructure.config_file_loader import ConfigFileLoader


class TestConfigFileLoader:
    """Test the upward search for configuration files."""

    def test_reads_tool_table_from_pyproject(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.lambda2knative]\nentry-function = "run"\n', encoding="utf-8")
        nested = tmp_path / "cmd" / "api"
        nested.mkdir(parents=True)
        assert ConfigFileLoader.load_config_from_fs(str(nested)) == {"entry-function": "run"}

    def test_dedicated_file_wins_in_same_directory(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.lambda2knative]\nentry-function = "run"\n', encoding="utf-8")
        (tmp_path / "lambda2knative.toml").write_text(
            '[tool.lambda2knative]\nadapter-type = "Function"\n', encoding="utf-8")
        assert ConfigFileLoader.load_config_from_fs(str(tmp_path)) == {"adapter-type": "Function"}

    def test_pyproject_without_table_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.lambda2knative]\nconstructor = "Make"\n', encoding="utf-8")
        nested = tmp_path / "service"
        nested.mkdir()
        (nested / "pyproject.toml").write_text('[project]\nname = "service"\n', encoding="utf-8")
        assert ConfigFileLoader.load_config_from_fs(str(nested)) == {"constructor": "Make"}

    def test_malformed_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "lambda2knative.toml").write_text("[tool.lambda2knative\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid configuration file"):
            ConfigFileLoader.load_config_from_fs(str(tmp_path))
