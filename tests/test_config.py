"""Tests for configuration system."""

from pathlib import Path

import pytest
import tomlkit

from dashy.config import Config, LoggingConfig, SamplingConfig


def test_sampling_config_defaults():
    """SamplingConfig has correct defaults."""
    config = SamplingConfig()
    assert config.interval == 1.0
    assert config.history_size == 60
    assert config.command_timeout == 5.0


def test_logging_config_defaults():
    """LoggingConfig has correct defaults."""
    config = LoggingConfig()
    assert config.level == "INFO"
    assert config.max_bytes == 1024 * 1024
    assert config.backup_count == 2


def test_config_paths():
    """Config provides correct paths."""
    config = Config()
    assert "dashy" in str(config.config_dir)
    assert config.config_path.name == "config.toml"
    assert config.log_path.name == "dashy.log"
    assert config.log_path.parent == config.state_dir


def test_config_save_creates_file(tmp_path: Path):
    """Config.save() creates config file, including parent directories."""
    config_path = tmp_path / "nested" / "config.toml"
    assert Config().save(config_path) == config_path
    assert config_path.exists()


def test_config_save_preserves_values(tmp_path: Path):
    """Config.save() writes correct TOML values."""
    config_path = tmp_path / "config.toml"
    config = Config()
    config.sampling.interval = 2.5
    config.logging.level = "DEBUG"
    config.save(config_path)

    data = tomlkit.parse(config_path.read_text())
    assert data["sampling"]["interval"] == 2.5
    assert data["logging"]["level"] == "DEBUG"


def test_config_round_trip(tmp_path: Path):
    """Config.load() reads back what save() wrote."""
    config_path = tmp_path / "config.toml"
    config = Config()
    config.sampling.history_size = 120
    config.logging.backup_count = 5
    config.save(config_path)

    loaded = Config.load(config_path)
    assert loaded.sampling.history_size == 120
    assert loaded.logging.backup_count == 5
    assert loaded.sampling.interval == 1.0


def test_config_load_missing_file(tmp_path: Path):
    """Config.load() returns defaults when file is missing."""
    loaded = Config.load(tmp_path / "nope.toml")
    assert loaded == Config()


def test_config_load_partial(tmp_path: Path):
    """Missing keys fall back to dataclass defaults."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("[sampling]\ninterval = 0.5\n")

    loaded = Config.load(config_path)
    assert loaded.sampling.interval == 0.5
    assert loaded.sampling.history_size == 60
    assert loaded.logging == LoggingConfig()


def test_config_load_invalid_toml(tmp_path: Path):
    """Malformed TOML raises ValueError naming the file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("[sampling\ninterval = ")

    with pytest.raises(ValueError, match="Failed to parse config file"):
        Config.load(config_path)


def test_config_load_section_not_a_table(tmp_path: Path):
    """A section given as a scalar raises ValueError, not AttributeError."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("sampling = 3\n")

    with pytest.raises(ValueError, match=r"\[sampling\] must be a table"):
        Config.load(config_path)


def test_config_load_wrong_value_type(tmp_path: Path):
    """A value of the wrong type raises ValueError naming the file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text('[sampling]\ninterval = "fast"\nhistory_size = [1]\n')

    with pytest.raises(ValueError, match="Invalid value in config file"):
        Config.load(config_path)
