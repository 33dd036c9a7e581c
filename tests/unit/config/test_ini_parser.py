"""
Unit tests for the wirebuild.ini parser.
"""

import pytest

from wirebuild.config.ini_parser import TARGET_ENV_VAR, ProjectConfig
from wirebuild.errors import ConfigurationError


class TestProjectConfig:
    """Test suite for ProjectConfig loading."""

    @pytest.fixture(autouse=True)
    def clear_target_env(self, monkeypatch):
        """Keep the developer's environment out of the tests."""
        monkeypatch.delenv(TARGET_ENV_VAR, raising=False)

    @pytest.fixture
    def write_ini(self, tmp_path):
        def writer(content):
            (tmp_path / "wirebuild.ini").write_text(content)
            return tmp_path

        return writer

    def test_defaults_without_file(self, tmp_path):
        """Test a project without wirebuild.ini gets defaults."""
        config = ProjectConfig.load(tmp_path)

        assert config.project_dir == tmp_path.resolve()
        assert config.target is None
        assert config.description == "wire.py"
        assert config.default_tag == "main"
        assert config.fetch_method == "git"
        assert config.max_workers == 4
        assert config.strict_amendments is False
        assert config.description_path == tmp_path.resolve() / "wire.py"
        assert config.output_dir == tmp_path.resolve() / ".wirebuild"

    def test_full_config(self, write_ini):
        project = write_ini(
            """
[project]
target = xcore_unit_test
description = build/wire.py
default_tag = master
fetch_method = archive
max_workers = 8
strict_amendments = yes
"""
        )

        config = ProjectConfig.load(project)

        assert config.target == "xcore_unit_test"
        assert config.description == "build/wire.py"
        assert config.default_tag == "master"
        assert config.fetch_method == "archive"
        assert config.max_workers == 8
        assert config.strict_amendments is True

    def test_variable_substitution(self, write_ini):
        """Test ${section:key} interpolation is supported."""
        project = write_ini(
            """
[common]
name = game

[project]
target = ${common:name}_unit_test
"""
        )

        assert ProjectConfig.load(project).target == "game_unit_test"

    def test_missing_project_section(self, write_ini):
        project = write_ini("[other]\nkey = value\n")

        assert ProjectConfig.load(project).target is None

    def test_env_overrides_file(self, write_ini, monkeypatch):
        project = write_ini("[project]\ntarget = from_file\n")
        monkeypatch.setenv(TARGET_ENV_VAR, "from_env")

        assert ProjectConfig.load(project).target == "from_env"

    def test_argument_overrides_env(self, write_ini, monkeypatch):
        project = write_ini("[project]\ntarget = from_file\n")
        monkeypatch.setenv(TARGET_ENV_VAR, "from_env")

        assert ProjectConfig.load(project, target="from_cli").target == "from_cli"

    def test_unknown_fetch_method(self, write_ini):
        project = write_ini("[project]\nfetch_method = svn\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ProjectConfig.load(project)

        assert "svn" in str(exc_info.value)

    def test_invalid_max_workers(self, write_ini):
        project = write_ini("[project]\nmax_workers = many\n")

        with pytest.raises(ConfigurationError):
            ProjectConfig.load(project)

    def test_zero_max_workers(self, write_ini):
        project = write_ini("[project]\nmax_workers = 0\n")

        with pytest.raises(ConfigurationError):
            ProjectConfig.load(project)

    def test_malformed_file(self, write_ini):
        project = write_ini("this is not ini\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ProjectConfig.load(project)

        assert "Failed to parse" in str(exc_info.value)

    @pytest.mark.parametrize(
        "key",
        ["description", "default_tag", "fetch_method", "max_workers", "strict_amendments"],
    )
    @pytest.mark.parametrize("line", ["{key}\n", "{key} =\n"])
    def test_key_without_value(self, write_ini, key, line):
        """Test a bare or empty key is reported by name."""
        project = write_ini("[project]\n" + line.format(key=key))

        with pytest.raises(ConfigurationError) as exc_info:
            ProjectConfig.load(project)

        assert f"'{key}'" in str(exc_info.value)
        assert "needs a value" in str(exc_info.value)

    def test_bare_target_means_unset(self, write_ini):
        project = write_ini("[project]\ntarget\n")

        assert ProjectConfig.load(project).target is None
