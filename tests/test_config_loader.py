# tests/test_config_loader.py
"""Tests for loading, validating and saving project settings."""

import pytest
import toml
from pathlib import Path

from repoprompt.config.loader import load_project_settings, save_project_settings, settings_from_dict
from repoprompt.config.settings import ProjectSettings, TaskKind, DEFAULT_EXCLUDE_PATTERNS
from repoprompt.exceptions import ConfigError


@pytest.fixture
def no_user_config(tmp_path: Path) -> Path:
    return tmp_path / "no-user-config.toml"


class TestLoadProjectSettings:

    def test_defaults_without_files(self, tmp_path, no_user_config):
        settings = load_project_settings(tmp_path, user_config_file=no_user_config)
        assert settings == ProjectSettings()
        assert settings.project.main_branch == "main"
        assert settings.repository.exclude_patterns == DEFAULT_EXCLUDE_PATTERNS
        assert settings.prompts.directory == ".repoprompt/templates"

    def test_project_config_file(self, tmp_path, no_user_config):
        (tmp_path / ".repoprompt").mkdir()
        (tmp_path / ".repoprompt" / "config.toml").write_text(
            '[project]\nname = "demo"\nmain_branch = "develop"\n'
            '[repository]\nmax_files = 5\nexclude_patterns = ["dist/"]\n'
            '[limits]\nmax_turns = 40\nmax_cost_usd = 2\n'
        )
        settings = load_project_settings(tmp_path, user_config_file=no_user_config)
        assert settings.project.name == "demo"
        assert settings.project.main_branch == "develop"
        assert settings.repository.max_files == 5
        assert settings.repository.exclude_patterns == ["dist/"]
        assert settings.limits.max_turns == 40
        assert settings.limits.max_cost_usd == 2.0

    def test_pyproject_tool_table(self, tmp_path, no_user_config):
        (tmp_path / "pyproject.toml").write_text('[tool.repoprompt.project]\nmain_branch = "trunk"\n')
        settings = load_project_settings(tmp_path, user_config_file=no_user_config)
        assert settings.project.main_branch == "trunk"

    def test_pyproject_without_tool_table_is_skipped(self, tmp_path, no_user_config):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "other"\n')
        settings = load_project_settings(tmp_path, user_config_file=no_user_config)
        assert settings.project.name == ""

    def test_user_config_is_overlaid_by_project(self, tmp_path):
        user_file = tmp_path / "user.toml"
        user_file.write_text('[limits]\nmax_turns = 10\nmax_cost_usd = 1.5\n')
        project = tmp_path / "proj"
        project.mkdir()
        (project / "repoprompt.toml").write_text('[limits]\nmax_turns = 20\n')
        settings = load_project_settings(project, user_config_file=user_file)
        assert settings.limits.max_turns == 20
        assert settings.limits.max_cost_usd == 1.5

    def test_unknown_keys_are_ignored(self):
        settings = settings_from_dict({"project": {"colour": "blue"}, "extras": {"a": 1}})
        assert settings == ProjectSettings()

    @pytest.mark.parametrize("data", [
        {"repository": {"max_files": "ten"}},
        {"repository": {"max_file_size": -1}},
        {"repository": {"exclude_patterns": "target/"}},
        {"limits": {"max_turns": 0}},
        {"prompts": {"use_bundled": "yes"}},
        {"logging": {"level": "loud"}},
        {"project": {"main_branch": ""}},
        {"project": "not a table"},
    ])
    def test_invalid_values_raise(self, data):
        with pytest.raises(ConfigError):
            settings_from_dict(data)

    def test_malformed_toml_raises(self, tmp_path, no_user_config):
        (tmp_path / "repoprompt.toml").write_text("[project\nname = ")
        with pytest.raises(ConfigError):
            load_project_settings(tmp_path, user_config_file=no_user_config)


class TestSaveProjectSettings:

    def test_round_trip(self, tmp_path, no_user_config):
        settings = ProjectSettings()
        settings.project.name = "demo"
        settings.project.repository_url = "https://example.com/demo.git"
        settings.limits.max_turns = 42

        saved = save_project_settings(settings, tmp_path)

        assert saved == tmp_path / ".repoprompt" / "config.toml"
        raw = toml.load(saved)
        assert raw["project"]["name"] == "demo"
        loaded = load_project_settings(tmp_path, user_config_file=no_user_config)
        assert loaded == settings


class TestTaskKind:

    @pytest.mark.parametrize("text, expected", [
        ("planning", TaskKind.PLANNING),
        ("plan", TaskKind.PLANNING),
        ("IMPLEMENT", TaskKind.IMPLEMENTATION),
        (" verify ", TaskKind.VERIFICATION),
        ("review", TaskKind.REVIEW),
        ("resume", TaskKind.RESUME),
        ("init", TaskKind.INIT),
    ])
    def test_from_string(self, text, expected):
        assert TaskKind.from_string(text) == expected

    def test_from_string_invalid(self):
        assert TaskKind.from_string("deploy") is None
        assert TaskKind.from_string("") is None
