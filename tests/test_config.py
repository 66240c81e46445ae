"""Tests for configuration loading"""

import json

import pytest

import costcast.core.config as config_module
from costcast.core.config import Settings, get_settings, reload_settings
from costcast.core.exceptions import InvalidConfigurationError


class TestSettings:
    """Test Settings"""

    def test_defaults(self):
        """Test default values"""
        settings = Settings()

        assert settings.app_name == "costcast"
        assert settings.forecast.default_forecast_days == 30
        assert settings.forecast.min_forecast_days == 7
        assert settings.forecast.max_forecast_days == 365
        assert settings.forecast.default_confidence_level == 0.95
        assert settings.trend.recent_window_days == 7
        assert settings.trend.stable_threshold == 0.05
        assert settings.summary.high_risk_burn_multiple == 1.3
        assert settings.budget.default_growth_rate == 0.15
        assert settings.budget.warning_percent == 80.0
        assert settings.budget.critical_percent == 100.0

    def test_from_yaml(self, temp_config_file):
        """Test loading from YAML file"""
        settings = Settings.from_yaml(temp_config_file)

        assert settings.environment == "test"
        assert settings.forecast.default_forecast_days == 14
        assert settings.forecast.default_confidence_level == 0.90
        assert settings.trend.stable_threshold == 0.1
        assert settings.logging.level == "WARNING"
        # Untouched sections keep their defaults
        assert settings.budget.default_growth_rate == 0.15

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing file falls back to defaults"""
        settings = Settings.from_yaml(tmp_path / "absent.yaml")

        assert settings.forecast.default_forecast_days == 30

    def test_round_trip_json(self, tmp_path):
        """Test saving and loading JSON"""
        path = tmp_path / "config.json"
        Settings(trend={"recent_window_days": 14}).to_json(path)

        assert json.loads(path.read_text())["trend"]["recent_window_days"] == 14
        assert Settings.from_json(path).trend.recent_window_days == 14

    def test_to_yaml(self, tmp_path):
        """Test saving YAML into a new directory"""
        path = tmp_path / "nested" / "config.yaml"
        Settings().to_yaml(path)

        assert Settings.from_yaml(path).forecast.default_forecast_days == 30

    def test_save_picks_format_from_suffix(self, tmp_path):
        """Test save writes JSON or YAML by file suffix"""
        settings = Settings(budget={"default_growth_rate": 0.25})
        json_path, yaml_path = tmp_path / "c.json", tmp_path / "c.yml"

        settings.save(json_path)
        settings.save(yaml_path)

        assert json.loads(json_path.read_text())["budget"]["default_growth_rate"] == 0.25
        assert Settings.from_file(yaml_path).budget.default_growth_rate == 0.25

    def test_invalid_horizon_bounds(self, tmp_path):
        """Test inconsistent horizon bounds are rejected"""
        path = tmp_path / "config.yaml"
        path.write_text("forecast:\n  min_forecast_days: 30\n  max_forecast_days: 10\n")

        with pytest.raises(InvalidConfigurationError):
            Settings.from_yaml(path)

    def test_default_outside_bounds(self, tmp_path):
        """Test a default horizon outside its bounds is rejected"""
        path = tmp_path / "config.yaml"
        path.write_text("forecast:\n  default_forecast_days: 400\n")

        with pytest.raises(InvalidConfigurationError):
            Settings.from_yaml(path)

    def test_inverted_alert_thresholds(self, tmp_path):
        """Test warning above critical is rejected"""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"budget": {"warning_percent": 120}}))

        with pytest.raises(InvalidConfigurationError):
            Settings.from_json(path)

    def test_malformed_yaml(self, tmp_path):
        """Test unparseable YAML is rejected"""
        path = tmp_path / "config.yaml"
        path.write_text("forecast: [unclosed\n")

        with pytest.raises(InvalidConfigurationError):
            Settings.from_yaml(path)

    def test_non_mapping_config(self, tmp_path):
        """Test a configuration file must hold a mapping"""
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(InvalidConfigurationError):
            Settings.from_yaml(path)

    def test_environment_override(self, monkeypatch):
        """Test nested settings come from the environment"""
        monkeypatch.setenv("COSTCAST_FORECAST__DEFAULT_FORECAST_DAYS", "60")
        monkeypatch.setenv("COSTCAST_DEBUG", "true")

        settings = Settings()

        assert settings.forecast.default_forecast_days == 60
        assert settings.debug is True


class TestGlobalSettings:
    """Test the global settings instance"""

    @pytest.fixture
    def isolated(self, tmp_path, monkeypatch):
        """Point home and the working directory at an empty location"""
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.chdir(tmp_path)
        return tmp_path

    def test_get_settings_defaults(self, isolated):
        """Test defaults are used when no config file exists"""
        settings = get_settings()

        assert settings.forecast.default_forecast_days == 30
        assert get_settings() is settings

    def test_get_settings_from_home(self, isolated):
        """Test the per-user config file is picked up"""
        (isolated / ".costcast").mkdir()
        (isolated / ".costcast" / "config.yaml").write_text(
            "forecast:\n  default_forecast_days: 90\n"
        )

        assert get_settings().forecast.default_forecast_days == 90

    def test_reload_settings_from_path(self, isolated, temp_config_file):
        """Test reloading replaces the global instance"""
        first = get_settings()

        reloaded = reload_settings(temp_config_file)

        assert reloaded is not first
        assert config_module.settings is reloaded
        assert get_settings().forecast.default_forecast_days == 14
