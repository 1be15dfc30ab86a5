"""Constants and configuration for ProtonVPN Status."""

import os
import sys
from pathlib import Path

from PyQt6.QtGui import QIcon

# Application info
APP_NAME = "ProtonVPN Status"
APP_ID = "com.github.protonvpn-status"
VERSION = "1.0.0"

# Title used for connect/disconnect notifications
VPN_NAME = "ProtonVPN"

# Paths
RESOURCES_DIR = Path(__file__).parent / "resources"
ICONS_DIR = RESOURCES_DIR / "icons"

# Platform-specific paths
if sys.platform == "darwin":
    CONFIG_DIR = Path.home() / "Library" / "Application Support" / "protonvpn-status"
    LOGS_DIR = Path.home() / "Library" / "Logs" / "protonvpn-status"
else:
    # Linux paths (XDG)
    CONFIG_DIR = (
        Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        / "protonvpn-status"
    )
    LOGS_DIR = Path.home() / ".local" / "share" / "protonvpn-status" / "logs"

SETTINGS_FILE = CONFIG_DIR / "settings.json"
LOG_FILE = LOGS_DIR / "protonvpn-status.log"

# Default commands for the ProtonVPN linux-cli client. Connect and disconnect
# need sudo configured without a password prompt.
DEFAULT_STATUS_COMMAND = "protonvpn status"
DEFAULT_CONNECT_COMMAND = "sudo protonvpn connect -f"  # -f: fastest server
DEFAULT_DISCONNECT_COMMAND = "sudo protonvpn disconnect"
DEFAULT_REFRESH_INTERVAL = 20  # seconds
MAX_REFRESH_INTERVAL = 3600
DEFAULT_STATUS_TIMEOUT = 30  # seconds
MAX_STATUS_TIMEOUT = 600
# Connecting can wait on server selection, it gets a longer limit
ACTION_TIMEOUT = 120  # seconds

# Status output
STATUS_MARKER = "Status:"

# Indicator icons
ICON_VPN = "network-vpn-symbolic"
ICON_ACQUIRING = "network-vpn-acquiring-symbolic"
ICON_IDLE = "network-vpn-disconnected-symbolic"

# Menu action labels
LABEL_CONNECT = "Connect"
LABEL_DISCONNECT = "Disconnect"


def get_icon(name: str) -> QIcon:
    """Get an icon, trying bundled resources first, then system icons.

    Args:
        name: Icon name (without extension)

    Returns:
        QIcon instance
    """
    # Try bundled resource
    for ext in [".svg", ".png"]:
        resource_path = ICONS_DIR / f"{name}{ext}"
        if resource_path.exists():
            return QIcon(str(resource_path))

    # Try system theme icon
    icon = QIcon.fromTheme(name)
    if not icon.isNull():
        return icon

    # Non-symbolic variants for themes without symbolic icons
    if name.endswith("-symbolic"):
        icon = QIcon.fromTheme(name[: -len("-symbolic")])
        if not icon.isNull():
            return icon

    fallback = QIcon.fromTheme("network-vpn")
    if not fallback.isNull():
        return fallback

    # Last resort: return empty icon
    return QIcon()
