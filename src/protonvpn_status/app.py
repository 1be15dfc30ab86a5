"""Main application controller and command-line entry point."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QApplication

from protonvpn_status.autostart import is_autostart_enabled, set_autostart
from protonvpn_status.constants import (
    APP_ID,
    APP_NAME,
    LOG_FILE,
    MAX_REFRESH_INTERVAL,
    VERSION,
    get_icon,
)
from protonvpn_status.notifications import NotificationManager
from protonvpn_status.preferences import PreferencesDialog
from protonvpn_status.process import ProcessRunner
from protonvpn_status.reconciler import StatusReconciler
from protonvpn_status.settings import PollConfiguration, load_settings
from protonvpn_status.tray import VPNTrayIcon

log = logging.getLogger(__name__)


def setup_logging(debug: bool = False, log_file: Optional[Path] = LOG_FILE) -> None:
    """Log to stderr and, when possible, to the log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            print(f"Cannot write log file {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


class VPNApplication:
    """Main application controller."""

    def __init__(
        self,
        config: PollConfiguration,
        settings_path: Optional[Path] = None,
        argv: Optional[list] = None,
        interval_override: Optional[int] = None,
    ):
        """Initialize the application.

        Args:
            config: Settings as stored in the settings file
            settings_path: Settings file used by the preferences dialog
            argv: Arguments passed to QApplication
            interval_override: Refresh interval for this session only. It is
                never written to the settings file and is dropped once a new
                interval is picked in the preferences dialog.
        """
        self.app = QApplication.instance() or QApplication(argv or sys.argv)

        # Set application metadata
        self.app.setApplicationName(APP_NAME)
        self.app.setApplicationDisplayName(APP_NAME)
        self.app.setDesktopFileName(APP_ID)
        self.app.setQuitOnLastWindowClosed(False)  # Keep running in tray

        app_icon = get_icon("network-vpn")
        if not app_icon.isNull():
            self.app.setWindowIcon(app_icon)

        self._saved_config = config
        self._interval_override = interval_override
        self._config = self._effective(config)
        self._settings_path = settings_path
        self._preferences: Optional[PreferencesDialog] = None

        if not VPNTrayIcon.is_system_tray_available():
            log.warning(
                "System tray not available. On GNOME, install "
                "'gnome-shell-extension-appindicator'."
            )

        self.tray = VPNTrayIcon()

        self.notifications = NotificationManager(self.tray.tray)
        self.notifications.set_enabled(self._config.notifications_enabled)

        self.runner = ProcessRunner()
        self.reconciler = StatusReconciler(
            self._config, self.tray, self.notifications, runner=self.runner
        )

        # Connect signals
        self.tray.toggle_requested.connect(self.reconciler.toggle_connection)
        self.tray.refresh_requested.connect(self.reconciler.poll)
        self.tray.preferences_requested.connect(self._show_preferences)
        self.tray.quit_requested.connect(self.quit)

        self._sync_autostart()

    def _sync_autostart(self) -> None:
        """Make the login autostart entry match the settings."""
        if is_autostart_enabled() != self._config.auto_start_on_login:
            set_autostart(self._config.auto_start_on_login)

    def enable(self) -> None:
        """Show the indicator and start polling."""
        self.tray.show()
        self.reconciler.start()

    def disable(self) -> None:
        """Stop polling and remove the indicator."""
        self.reconciler.stop()
        self.tray.hide()

    def run(self) -> int:
        """Run the application.

        Returns:
            Exit code
        """
        self.enable()
        log.info(
            f"{APP_NAME} {VERSION} started, "
            f"refreshing every {self._config.refresh_interval}s"
        )
        return self.app.exec()

    @property
    def config(self) -> PollConfiguration:
        """Settings in effect, including a command-line interval."""
        return self._config

    def _effective(self, config: PollConfiguration) -> PollConfiguration:
        if self._interval_override is None:
            return config
        return config.with_changes(refresh_interval=self._interval_override)

    def apply_config(self, config: PollConfiguration) -> None:
        """Apply changed settings to the running application."""
        if config.refresh_interval != self._saved_config.refresh_interval:
            self._interval_override = None
        self._saved_config = config
        self._config = self._effective(config)
        self.reconciler.set_config(self._config)
        self.notifications.set_enabled(self._config.notifications_enabled)

    def _show_preferences(self) -> None:
        if self._preferences is None:
            self._preferences = PreferencesDialog(
                self._saved_config, self._settings_path
            )
            self._preferences.settings_changed.connect(self.apply_config)

        self._preferences.show()
        self._preferences.raise_()
        self._preferences.activateWindow()

    def quit(self) -> None:
        self.disable()
        self.app.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protonvpn-status",
        description="Tray indicator for monitoring and controlling ProtonVPN",
    )
    parser.add_argument(
        "--interval", "-i", type=int, metavar="SECONDS",
        help="Status refresh interval (overrides the settings file)",
    )
    parser.add_argument("--config", "-c", type=Path, metavar="PATH", help="Settings file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def main(argv: Optional[list] = None) -> int:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.interval is not None and not 0 < args.interval <= MAX_REFRESH_INTERVAL:
        parser.error(
            f"--interval must be between 1 and {MAX_REFRESH_INTERVAL} seconds"
        )

    setup_logging(args.debug)

    app = VPNApplication(
        load_settings(args.config),
        settings_path=args.config,
        argv=[sys.argv[0]],
        interval_override=args.interval,
    )
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
