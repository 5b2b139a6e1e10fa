"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from ereminders.config.models import EmailConfig, EremindersConfig
from ereminders.config.paths import get_config_path

PASSWORD_ENV_VAR = "EREMINDERS_SMTP_PASSWORD"  # noqa: S105


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.config/ereminders/config.toml (or EREMINDERS_HOME)
        Path("/etc/ereminders/config.toml"),  # System-wide
    ]


def _resolve_env_secrets(config: dict[str, Any]) -> dict[str, Any]:
    """Fill the SMTP password from the environment when the file omits it."""
    smtp = config.setdefault("smtp", {})
    if smtp.get("password") is None:
        value = os.environ.get(PASSWORD_ENV_VAR)
        if value:
            smtp["password"] = SecretStr(value)
    return config


def load_config(path: Path | None = None) -> EremindersConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated EremindersConfig instance.

    Raises:
        FileNotFoundError: If no config file is found.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If the config does not match the schema.
    """
    config_path: Path | None = None

    default_paths = _get_default_config_paths()

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in default_paths:
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    if config_path is None:
        raise FileNotFoundError(
            f"No config file found. Searched: {', '.join(str(p) for p in default_paths)}"
        )

    with config_path.open("rb") as f:
        raw_config = tomllib.load(f)

    raw_config = _resolve_env_secrets(raw_config)

    return EremindersConfig.model_validate(raw_config)


def get_default_config() -> EremindersConfig:
    """Get a default configuration for development/testing."""
    return EremindersConfig(
        email=EmailConfig(to="me@localhost", sender="E-Reminders <ereminders@localhost>")
    )
