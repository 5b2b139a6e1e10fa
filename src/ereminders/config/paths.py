"""Centralized path management for ereminders.

Config, PID file and logs live under a single base directory which can be
overridden with the EREMINDERS_HOME environment variable.

Default locations:
- Base directory: ~/.config/ereminders
- Control socket: $XDG_RUNTIME_DIR/ereminders.sock, else /tmp/ereminders/control.sock
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "EREMINDERS_HOME"


def get_system_timezone() -> str:
    """Detect system timezone, falling back to UTC.

    Resolution order:
    1. TZ environment variable (if set)
    2. /etc/timezone file (Debian/Ubuntu)
    3. /etc/localtime symlink target (most Linux distros)
    4. Fallback to UTC

    Returns:
        IANA timezone name (e.g., "America/Los_Angeles", "Europe/London", "UTC").
    """
    if tz := os.environ.get("TZ"):
        return tz

    try:
        tz = Path("/etc/timezone").read_text().strip()
        if tz:
            return tz
    except (FileNotFoundError, PermissionError):
        pass

    try:
        link = Path("/etc/localtime").resolve()
        parts = str(link).split("zoneinfo/")
        if len(parts) > 1:
            return parts[1]
    except (FileNotFoundError, PermissionError):
        pass

    return "UTC"


@lru_cache(maxsize=1)
def get_ereminders_home() -> Path:
    """Get the base directory for ereminders state.

    Resolution order:
    1. EREMINDERS_HOME environment variable (if set)
    2. ~/.config/ereminders
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".config" / "ereminders"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_ereminders_home() / "config.toml"


def get_pid_path() -> Path:
    return get_ereminders_home() / "ereminders.pid"


def get_logs_path() -> Path:
    return get_ereminders_home() / "logs"


def get_socket_path() -> Path:
    """Get the default control socket path."""
    if runtime_dir := os.environ.get("XDG_RUNTIME_DIR"):
        return Path(runtime_dir) / "ereminders.sock"
    return Path("/tmp/ereminders/control.sock")  # noqa: S108
