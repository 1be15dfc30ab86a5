"""Application settings stored as JSON in the user's config directory."""

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

from protonvpn_status.constants import (
    DEFAULT_CONNECT_COMMAND,
    DEFAULT_DISCONNECT_COMMAND,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_STATUS_COMMAND,
    DEFAULT_STATUS_TIMEOUT,
    MAX_REFRESH_INTERVAL,
    MAX_STATUS_TIMEOUT,
    SETTINGS_FILE,
)
from protonvpn_status.process import split_command

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollConfiguration:
    """Polling interval and VPN client commands."""

    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    status_timeout: int = DEFAULT_STATUS_TIMEOUT
    status_command: str = DEFAULT_STATUS_COMMAND
    connect_command: str = DEFAULT_CONNECT_COMMAND
    disconnect_command: str = DEFAULT_DISCONNECT_COMMAND
    auto_start_on_login: bool = False
    notifications_enabled: bool = True

    @property
    def status_argv(self) -> list[str]:
        return split_command(self.status_command)

    @property
    def connect_argv(self) -> list[str]:
        return split_command(self.connect_command)

    @property
    def disconnect_argv(self) -> list[str]:
        return split_command(self.disconnect_command)

    @property
    def refresh_interval_ms(self) -> int:
        return self.refresh_interval * 1000

    @property
    def status_timeout_ms(self) -> int:
        return self.status_timeout * 1000

    def with_changes(self, **changes) -> "PollConfiguration":
        """Return a validated copy with some fields replaced."""
        return _validated(replace(self, **changes))


# Field name -> key in the settings file
_KEYS = {
    "refresh_interval": "status-refresh-rate",
    "status_timeout": "status-timeout",
    "status_command": "status-command",
    "connect_command": "connect-command",
    "disconnect_command": "disconnect-command",
    "auto_start_on_login": "auto-start-on-login",
    "notifications_enabled": "show-notifications",
}


# Upper bounds keep millisecond timer intervals within a C int
_LIMITS = {
    "refresh_interval": MAX_REFRESH_INTERVAL,
    "status_timeout": MAX_STATUS_TIMEOUT,
}


def _is_valid(name: str, value) -> bool:
    if name in _LIMITS:
        # bool is an int subclass
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        return 0 < value <= _LIMITS[name]
    if name.endswith("_command"):
        if not isinstance(value, str):
            return False
        try:
            split_command(value)
        except ValueError:
            return False
        return True
    return isinstance(value, bool)


def _validated(config: PollConfiguration) -> PollConfiguration:
    """Replace invalid values with their defaults."""
    defaults = PollConfiguration()
    fixed = {}
    for field in fields(PollConfiguration):
        value = getattr(config, field.name)
        if not _is_valid(field.name, value):
            default = getattr(defaults, field.name)
            log.warning(
                f"Invalid value {value!r} for '{_KEYS[field.name]}', using {default!r}"
            )
            fixed[field.name] = default
    return replace(config, **fixed) if fixed else config


def config_from_dict(data: dict) -> PollConfiguration:
    """Build a configuration from settings-file keys, ignoring unknown keys."""
    values = {
        name: data[key] for name, key in _KEYS.items() if key in data
    }
    return _validated(PollConfiguration(**values))


def config_to_dict(config: PollConfiguration) -> dict:
    return {key: getattr(config, name) for name, key in _KEYS.items()}


def load_settings(path: Optional[Path] = None) -> PollConfiguration:
    """Load settings, falling back to defaults.

    Args:
        path: Settings file (defaults to the user's config directory)

    Returns:
        PollConfiguration
    """
    path = Path(path) if path else SETTINGS_FILE
    if not path.exists():
        return PollConfiguration()

    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        log.warning(f"Cannot read settings from {path}: {e}")
        return PollConfiguration()

    if not isinstance(data, dict):
        log.warning(f"Ignoring malformed settings file {path}")
        return PollConfiguration()

    return config_from_dict(data)


def save_settings(config: PollConfiguration, path: Optional[Path] = None) -> bool:
    """Write settings to disk.

    Returns:
        True if saved successfully
    """
    path = Path(path) if path else SETTINGS_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config_to_dict(config), indent=2) + "\n")
        return True
    except OSError as e:
        log.error(f"Failed to save settings to {path}: {e}")
        return False


def reset_settings(path: Optional[Path] = None) -> PollConfiguration:
    """Restore default settings on disk and return them."""
    path = Path(path) if path else SETTINGS_FILE
    try:
        if path.exists():
            path.unlink()
    except OSError as e:
        log.error(f"Failed to remove settings file {path}: {e}")
    return PollConfiguration()
