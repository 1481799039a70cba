"""Tests for configuration manager."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]
import yaml  # type: ignore[import-untyped]

from activity_clock.core.config import ConfigManager


@pytest.fixture
def temp_config_path():
    """Create a temporary config file path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "config.yml"


class TestConfigManager:
    """Test ConfigManager."""

    def test_initialization_creates_default_config(self, temp_config_path: Path) -> None:
        """Test that initialization creates default configuration."""
        assert not temp_config_path.exists()

        config = ConfigManager(temp_config_path)

        assert temp_config_path.exists()
        assert config.get("version") == "1.0"
        assert config.get("general.data_dir") == "~/.activity-clock/data"
        assert config.get("tracking.max_history_days") == 30
        assert config.get("api.port") == 5000

    def test_default_categories(self, temp_config_path: Path) -> None:
        """Test the default category set and its order."""
        config = ConfigManager(temp_config_path)

        assert config.categories == ["Python", "SQL", "Datasetu", "Break", "TT"]

    def test_load_existing_config(self, temp_config_path: Path) -> None:
        """Test loading existing configuration."""
        config_data = {
            "version": "1.0",
            "general": {"data_dir": "/custom/path"},
            "tracking": {"categories": ["Reading", "Writing"]},
        }

        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(temp_config_path)

        assert config.data_dir == Path("/custom/path")
        assert config.categories == ["Reading", "Writing"]
        # Defaults fill the rest
        assert config.get("tracking.history_days") == 30
        assert config.get("api.authentication.enabled") is True

    def test_get_with_default(self, temp_config_path: Path) -> None:
        """Test getting missing values."""
        config = ConfigManager(temp_config_path)

        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"
        assert config.get("api.authentication.secret_key", "none") == "none"

    def test_set_persists(self, temp_config_path: Path) -> None:
        """Test that set values are written to disk."""
        config = ConfigManager(temp_config_path)
        config.set("tracking.max_history_days", 14)

        reloaded = ConfigManager(temp_config_path)
        assert reloaded.get("tracking.max_history_days") == 14

    def test_set_invalid_value_rolls_back(self, temp_config_path: Path) -> None:
        """Test that an invalid value is rejected and not kept."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("tracking.categories", [])

        assert config.categories == ["Python", "SQL", "Datasetu", "Break", "TT"]

    def test_duplicate_categories_rejected(self, temp_config_path: Path) -> None:
        """Test that categories must be unique."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError):
            config.set("tracking.categories", ["Python", "Python"])

    def test_invalid_file_is_backed_up(self, temp_config_path: Path) -> None:
        """Test that an invalid config file is moved aside and replaced."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "api": {"port": "not-a-port"}}, f)

        with pytest.raises(ValueError, match="backed up"):
            ConfigManager(temp_config_path)

        backup = temp_config_path.with_suffix(".yml.backup")
        assert backup.exists()
        assert ConfigManager(temp_config_path).get("api.port") == 5000

    def test_reset(self, temp_config_path: Path) -> None:
        """Test resetting to defaults."""
        config = ConfigManager(temp_config_path)
        config.set("api.port", 8080)

        config.reset()

        assert config.get("api.port") == 5000

    def test_get_all_keys(self, temp_config_path: Path) -> None:
        """Test listing keys in dot notation."""
        keys = ConfigManager(temp_config_path).get_all_keys()

        assert "tracking.categories" in keys
        assert "api.authentication.token_expiry_hours" in keys
        assert "general" not in keys

    def test_ensure_api_secret_key(self, temp_config_path: Path) -> None:
        """Test that a secret key is generated once and then reused."""
        config = ConfigManager(temp_config_path)

        key = config.ensure_api_secret_key()

        assert key
        assert config.ensure_api_secret_key() == key
        assert ConfigManager(temp_config_path).get("api.authentication.secret_key") == key
