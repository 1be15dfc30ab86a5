"""Start-on-login management.

Linux uses an XDG autostart desktop entry, macOS a per-user LaunchAgent.
"""

import configparser
import logging
import os
import plistlib
import shutil
import sys
from pathlib import Path

from protonvpn_status.constants import APP_ID, APP_NAME

log = logging.getLogger(__name__)

EXECUTABLE_NAME = "protonvpn-status"
DESKTOP_SECTION = "Desktop Entry"

if sys.platform == "darwin":
    AUTOSTART_DIR = Path.home() / "Library/LaunchAgents"
    AUTOSTART_FILE = AUTOSTART_DIR / f"{APP_ID}.plist"
else:
    AUTOSTART_DIR = (
        Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "autostart"
    )
    AUTOSTART_FILE = AUTOSTART_DIR / f"{APP_ID}.desktop"


def _find_executable() -> str:
    """Find the installed entry point, falling back to the bare name."""
    found = shutil.which(EXECUTABLE_NAME)
    if found:
        return found

    local = Path.home() / ".local/bin" / EXECUTABLE_NAME
    if local.exists():
        return str(local)

    return EXECUTABLE_NAME


def _new_desktop_parser() -> configparser.ConfigParser:
    # Desktop entry keys are case-sensitive and may contain '%' field codes
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str
    return parser


def _desktop_entry(exec_path: str) -> configparser.ConfigParser:
    entry = _new_desktop_parser()
    entry[DESKTOP_SECTION] = {
        "Type": "Application",
        "Name": APP_NAME,
        "Comment": "Monitor and control your ProtonVPN connection",
        "Exec": exec_path,
        "Icon": "network-vpn",
        "Terminal": "false",
        "Categories": "Network;",
        "StartupNotify": "false",
        "X-GNOME-Autostart-enabled": "true",
        "X-GNOME-Autostart-Delay": "5",
    }
    return entry


def _desktop_entry_enabled(path: Path) -> bool:
    entry = _new_desktop_parser()
    entry.read(path, encoding="utf-8")
    if not entry.has_section(DESKTOP_SECTION):
        return False

    section = entry[DESKTOP_SECTION]
    if section.getboolean("Hidden", fallback=False):
        return False
    return section.getboolean("X-GNOME-Autostart-enabled", fallback=True)


def _launch_agent_enabled(path: Path) -> bool:
    with open(path, "rb") as f:
        agent = plistlib.load(f)
    return not agent.get("Disabled", False)


def _write_desktop_entry(path: Path, exec_path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        _desktop_entry(exec_path).write(f, space_around_delimiters=False)


def _write_launch_agent(path: Path, exec_path: str) -> None:
    agent = {
        "Label": APP_ID,
        "ProgramArguments": [exec_path],
        "RunAtLoad": True,
        "Disabled": False,
    }
    with open(path, "wb") as f:
        plistlib.dump(agent, f)


def is_autostart_enabled() -> bool:
    """Check if autostart is currently enabled.

    Unreadable entries count as disabled.
    """
    if not AUTOSTART_FILE.exists():
        return False

    try:
        if sys.platform == "darwin":
            return _launch_agent_enabled(AUTOSTART_FILE)
        return _desktop_entry_enabled(AUTOSTART_FILE)
    except (OSError, ValueError, configparser.Error, plistlib.InvalidFileException) as e:
        log.warning(f"Cannot read autostart file {AUTOSTART_FILE}: {e}")
        return False


def enable_autostart() -> bool:
    """Install the autostart entry for the current user."""
    write = _write_launch_agent if sys.platform == "darwin" else _write_desktop_entry
    try:
        AUTOSTART_DIR.mkdir(parents=True, exist_ok=True)
        write(AUTOSTART_FILE, _find_executable())
    except OSError as e:
        log.error(f"Failed to enable autostart: {e}")
        return False

    log.info(f"Autostart enabled ({AUTOSTART_FILE})")
    return True


def disable_autostart() -> bool:
    """Remove the autostart entry if there is one."""
    try:
        AUTOSTART_FILE.unlink()
    except FileNotFoundError:
        return True
    except OSError as e:
        log.error(f"Failed to disable autostart: {e}")
        return False

    log.info("Autostart disabled")
    return True


def set_autostart(enabled: bool) -> bool:
    """Set autostart state."""
    return enable_autostart() if enabled else disable_autostart()
