"""Configuration system for dashy."""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit


@dataclass
class SamplingConfig:
    """Metric sampling configuration."""

    interval: float = 1.0  # Seconds between ticks
    history_size: int = 60  # CPU samples kept for the sparkline (one minute at 1 Hz)
    command_timeout: float = 5.0  # Seconds before an external tool is abandoned


@dataclass
class LoggingConfig:
    """Log file configuration."""

    level: str = "INFO"
    max_bytes: int = 1024 * 1024  # Rotate at 1MB
    backup_count: int = 2


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


def _section(data: Mapping, name: str, path: Path) -> Mapping:
    """Return a top-level table, or an empty one when it is absent."""
    section = data.get(name, {})
    if not isinstance(section, Mapping):
        raise ValueError(f"Config file {path}: [{name}] must be a table")
    return section


@dataclass
class Config:
    """Main configuration container."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "dashy"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "dashy"

    @property
    def log_path(self) -> Path:
        """Log file path."""
        return self.state_dir / "dashy.log"

    def save(self, path: Path | None = None) -> Path:
        """Save config to TOML file and return the path written."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("sampling", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))
        return path

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        sampling_data = _section(data, "sampling", path)
        logging_data = _section(data, "logging", path)
        s = defaults.sampling
        lg = defaults.logging

        try:
            return cls(
                sampling=SamplingConfig(
                    interval=float(sampling_data.get("interval", s.interval)),
                    history_size=int(sampling_data.get("history_size", s.history_size)),
                    command_timeout=float(sampling_data.get("command_timeout", s.command_timeout)),
                ),
                logging=LoggingConfig(
                    level=str(logging_data.get("level", lg.level)),
                    max_bytes=int(logging_data.get("max_bytes", lg.max_bytes)),
                    backup_count=int(logging_data.get("backup_count", lg.backup_count)),
                ),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value in config file {path}: {e}") from e
