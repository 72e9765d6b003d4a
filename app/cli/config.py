"""CLI configuration management."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

ENV_PREFIX = "LOAD_TESTER_"


class CLIConfig(BaseSettings):
    """CLI configuration loaded from environment or config file."""

    # API connection
    api_url: str = Field(
        default="http://localhost:8000",
        description="Load Test Service API URL",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token forwarded to the API",
    )
    api_timeout: int = Field(
        default=600,
        description="API request timeout in seconds (a full 500 request test can take minutes)",
    )

    # Output settings
    output_format: str = Field(
        default="table",
        description="Default output format (table, json)",
    )

    model_config = {
        "env_prefix": ENV_PREFIX,
        "env_file": ".env",
        "extra": "ignore",
    }


def get_config_dir() -> Path:
    """Get the CLI configuration directory."""
    config_dir = Path.home() / ".config" / "load-tester"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get the CLI configuration file path."""
    return get_config_dir() / "config.env"


def _read_config_file(config_file: Path) -> dict[str, str]:
    values = {}
    if config_file.exists():
        with open(config_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    values[key] = value.strip('"').strip("'")
    return values


def load_config() -> CLIConfig:
    """Load CLI configuration from environment and config file."""
    # Config file values never override existing env vars
    for key, value in _read_config_file(get_config_file()).items():
        if key not in os.environ:
            os.environ[key] = value

    return CLIConfig()


def save_config(key: str, value: str) -> None:
    """Save a configuration value to the config file."""
    config_file = get_config_file()
    config = _read_config_file(config_file)
    config[f"{ENV_PREFIX}{key.upper()}"] = value

    with open(config_file, "w") as f:
        for k, v in sorted(config.items()):
            f.write(f"{k}={v}\n")


# Global config instance
_config: CLIConfig | None = None


def get_config() -> CLIConfig:
    """Get the global CLI configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config_cache() -> None:
    """Drop the cached configuration so the next access reloads it."""
    global _config
    _config = None
