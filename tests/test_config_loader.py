"""Tests for YAML settings loading."""

import pytest

from fit_vault.core.config import DEFAULT_BASE_PATH, DEFAULT_REST_SECONDS, Settings
from fit_vault.core.config_loader import get_user_config_path, load_settings


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "nope.yaml")
        assert settings == Settings()
        assert settings.base_path == DEFAULT_BASE_PATH
        assert settings.default_rest_seconds == DEFAULT_REST_SECONDS

    def test_overrides_and_unknown_keys(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("weight_unit: lbs\ndefault_rest_seconds: 90\ntheme: dark\n")
        settings = load_settings(path)
        assert settings.weight_unit == "lbs"
        assert settings.default_rest_seconds == 90
        assert settings.weight_increments == [45, 10, 5, 2.5]

    def test_malformed_yaml_warns(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("weight_unit: [unclosed\n")
        with pytest.warns(UserWarning):
            settings = load_settings(path)
        assert settings == Settings()

    def test_non_mapping_warns(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.warns(UserWarning):
            assert load_settings(path) == Settings()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("default_rest_seconds: 0\n")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_user_config_path_follows_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_user_config_path() == tmp_path / ".fit-vault" / "config.yaml"
        assert load_settings() == Settings()
