"""Unit tests for configuration module.

Tests cover:
- Environment variable loading
- Configuration validation
"""

from importlib import reload

import pytest

import climate_report.config as config_module
from climate_report.exceptions import ConfigurationError


@pytest.fixture
def reload_config(monkeypatch):
    """Reload the config module, restoring env and module after the test."""
    yield lambda: reload(config_module)
    monkeypatch.undo()
    reload(config_module)


# ============================================================================
# Environment Variable Tests
# ============================================================================

@pytest.mark.unit
class TestEnvironmentVariables:
    """Test environment variable configuration."""

    def test_year_range_defaults(self, monkeypatch, reload_config):
        monkeypatch.delenv("YEAR_START", raising=False)
        monkeypatch.delenv("YEAR_END", raising=False)
        config = reload_config()
        assert (config.YEAR_START, config.YEAR_END) == (1960, 2020)

    def test_year_range_from_env(self, monkeypatch, reload_config):
        monkeypatch.setenv("YEAR_START", "1990")
        monkeypatch.setenv("YEAR_END", "2015")
        config = reload_config()
        assert (config.YEAR_START, config.YEAR_END) == (1990, 2015)

    def test_invalid_integer(self, monkeypatch, reload_config):
        monkeypatch.setenv("MAP_YEAR", "last year")
        with pytest.raises(ConfigurationError):
            reload_config()

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1990,2017", [1990, 2017]),
            (" 2000 , 2010 ,", [2000, 2010]),
        ],
    )
    def test_table_years(self, value, expected, monkeypatch, reload_config):
        monkeypatch.setenv("TABLE_YEARS", value)
        assert reload_config().TABLE_YEARS == expected

    def test_line_countries(self, monkeypatch, reload_config):
        monkeypatch.setenv("LINE_COUNTRIES", "USA, FRA")
        assert reload_config().LINE_COUNTRIES == ["USA", "FRA"]

    def test_paths_follow_data_dir(self, monkeypatch, reload_config, temp_dir):
        monkeypatch.setenv("DATA_DIR", str(temp_dir))
        for name in ("RAW_DATA_DIR", "OUTPUT_DIR", "INDICATORS_CSV", "COUNTRIES_CSV"):
            monkeypatch.delenv(name, raising=False)
        config = reload_config()
        assert config.OUTPUT_DIR == str(temp_dir / "report")
        assert config.INDICATORS_CSV == str(temp_dir / "raw" / "climate_indicators.csv")

    def test_indicator_labels_cover_report_indicators(self):
        for code in config_module.MAP_INDICATORS + config_module.BAR_INDICATORS:
            assert code in config_module.INDICATOR_LABELS


# ============================================================================
# Configuration Validation Tests
# ============================================================================

@pytest.mark.unit
class TestValidateConfig:
    """Test validate_config."""

    @pytest.fixture(autouse=True)
    def valid_settings(self, monkeypatch, temp_dir):
        monkeypatch.setattr(config_module, "YEAR_START", 1960)
        monkeypatch.setattr(config_module, "YEAR_END", 2020)
        monkeypatch.setattr(config_module, "MAP_YEAR", 2017)
        monkeypatch.setattr(config_module, "TABLE_YEARS", [1990, 2017])
        monkeypatch.setattr(config_module, "OUTPUT_DIR", str(temp_dir / "out"))

    def test_valid_config_creates_output_dir(self, temp_dir):
        config_module.validate_config()
        assert (temp_dir / "out").is_dir()

    def test_explicit_output_dir(self, temp_dir):
        config_module.validate_config(str(temp_dir / "elsewhere"))
        assert (temp_dir / "elsewhere").is_dir()
        assert not (temp_dir / "out").exists()

    def test_inverted_year_range(self, monkeypatch):
        monkeypatch.setattr(config_module, "YEAR_START", 2021)
        with pytest.raises(ConfigurationError, match="YEAR_START"):
            config_module.validate_config()

    def test_map_year_out_of_range(self, monkeypatch):
        monkeypatch.setattr(config_module, "MAP_YEAR", 2030)
        with pytest.raises(ConfigurationError, match="MAP_YEAR"):
            config_module.validate_config()

    def test_table_years_out_of_range(self, monkeypatch):
        monkeypatch.setattr(config_module, "TABLE_YEARS", [1950, 2017])
        with pytest.raises(ConfigurationError, match="1950"):
            config_module.validate_config()

    def test_no_table_years(self, monkeypatch):
        monkeypatch.setattr(config_module, "TABLE_YEARS", [])
        with pytest.raises(ConfigurationError):
            config_module.validate_config()

    def test_uncreatable_output_dir(self, monkeypatch, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("not a directory")
        monkeypatch.setattr(config_module, "OUTPUT_DIR", str(blocker / "out"))
        with pytest.raises(ConfigurationError, match="output directory"):
            config_module.validate_config()
