"""
Configuration Management for Raszagal

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables
- Command line arguments

Configuration precedence (highest to lowest):
1. Command line arguments
2. Environment variables (RASZAGAL_*)
3. Configuration file
4. Default values
"""

import json
import logging
import logging.handlers
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from raszagal.core.constants import REPLAY_EXTENSION

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class ParserConfig:
    """Configuration for replay decoding."""

    # Name or path of the screp executable
    screp_path: str = "screp"
    # Per-replay limit; a replay that takes longer is reported and skipped
    timeout_seconds: float = 60.0
    replay_extension: str = REPLAY_EXTENSION


@dataclass
class AnalysisConfig:
    """Configuration for analyzer runs."""

    # Player names identifying the -me player
    me: list[str] = field(default_factory=list)
    # Directory accepted replays are copied into
    copy_to: str | None = None


@dataclass
class ExportConfig:
    """Configuration for result output."""

    # csv, json, table or none
    default_format: str = "csv"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class RaszagalConfig:
    """Main configuration container."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "raszagal.yaml")
    paths.append(Path.cwd() / "raszagal.toml")
    paths.append(Path.cwd() / "raszagal.json")
    paths.append(Path.cwd() / ".raszagal.yaml")

    # User home directory
    home = Path.home()
    paths.append(home / ".config" / "raszagal" / "config.yaml")
    paths.append(home / ".config" / "raszagal" / "config.toml")
    paths.append(home / ".raszagal.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "raszagal" / "config.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


def _split_names(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        "RASZAGAL_SCREP_PATH": ("parser", "screp_path"),
        "RASZAGAL_TIMEOUT_SECONDS": ("parser", "timeout_seconds"),
        "RASZAGAL_REPLAY_EXTENSION": ("parser", "replay_extension"),
        "RASZAGAL_ME": ("analysis", "me"),
        "RASZAGAL_COPY_TO": ("analysis", "copy_to"),
        "RASZAGAL_EXPORT_FORMAT": ("export", "default_format"),
        "RASZAGAL_LOG_LEVEL": ("logging", "level"),
        "RASZAGAL_LOG_FILE": ("logging", "file"),
    }
    # Values kept as strings even when they look numeric
    string_keys = {("parser", "screp_path"), ("parser", "replay_extension"), ("analysis", "copy_to")}

    for env_var, (section, key) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        if section not in config:
            config[section] = {}

        if (section, key) == ("analysis", "me"):
            config[section][key] = _split_names(value)
            continue
        if (section, key) in string_keys:
            config[section][key] = value
            continue

        # Type conversion
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        else:
            try:
                value = float(value)
            except ValueError:
                pass

        config[section][key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> RaszagalConfig:
    """Convert a dictionary to RaszagalConfig. Unknown sections and keys are ignored."""
    config = RaszagalConfig()

    for section in ("parser", "analysis", "export", "logging"):
        target = getattr(config, section)
        for key, value in (data.get(section) or {}).items():
            if hasattr(target, key):
                setattr(target, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {section}.{key}")

    # A single name is accepted where a list is expected
    if isinstance(config.analysis.me, str):
        config.analysis.me = _split_names(config.analysis.me)

    if "config_version" in data:
        config.config_version = str(data["config_version"])

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> RaszagalConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged RaszagalConfig
    """
    config_data: dict[str, Any] = {}

    # Try to find and load a config file
    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    # Merge environment variables
    if include_env:
        env_config = load_env_config()
        config_data = merge_configs(config_data, env_config)

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def config_to_dict(config: RaszagalConfig) -> dict[str, Any]:
    """Convert RaszagalConfig to a dictionary."""
    return asdict(config)


def save_config(config: RaszagalConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (.yaml, .yml or .json)

    Raises:
        ValueError: Unsupported extension (TOML is read-only)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: RaszagalConfig | None = None


def get_config() -> RaszagalConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: RaszagalConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None


# ============================================================================
# Logging Setup
# ============================================================================


def configure_logging(config: LoggingConfig, level: str | None = None) -> None:
    """
    Configure the root logger from a LoggingConfig.

    Logs go to stderr, so they never mix with CSV/JSON results on stdout. A
    rotating file handler is added when config.file is set.

    Args:
        config: Logging settings
        level: Overrides config.level (e.g. DEBUG for --verbose)
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.file,
                maxBytes=config.file_max_bytes,
                backupCount=config.file_backup_count,
            )
        )

    logging.basicConfig(
        level=(level or config.level).upper(),
        format=config.format,
        handlers=handlers,
        force=True,
    )


# ============================================================================
# Configuration Templates
# ============================================================================

DEFAULT_CONFIG_YAML = """# Raszagal Configuration

# Replay decoding
parser:
  screp_path: screp  # https://github.com/icza/screp
  timeout_seconds: 60.0
  replay_extension: .rep

# Analyzer runs
analysis:
  # Names identifying you across replays (used by my-* analyzers)
  me: []
  # copy_to: /path/to/matching/replays

# Result output: csv, json, table or none
export:
  default_format: csv

# Logging settings
logging:
  level: WARNING
  # file: /path/to/raszagal.log
"""


def generate_default_config(path: Path) -> None:
    """Generate a default configuration file."""
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML)
    else:
        config = RaszagalConfig()
        save_config(config, path)

    logger.info(f"Generated default config at: {path}")
