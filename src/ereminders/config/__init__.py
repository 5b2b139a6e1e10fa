"""Configuration module."""

from ereminders.config.loader import get_default_config, load_config
from ereminders.config.models import (
    EmailConfig,
    EremindersConfig,
    RetryConfig,
    SMTPConfig,
)
from ereminders.config.paths import (
    get_config_path,
    get_ereminders_home,
    get_logs_path,
    get_pid_path,
    get_socket_path,
)

__all__ = [
    "EmailConfig",
    "EremindersConfig",
    "RetryConfig",
    "SMTPConfig",
    "get_config_path",
    "get_default_config",
    "get_ereminders_home",
    "get_logs_path",
    "get_pid_path",
    "get_socket_path",
    "load_config",
]
