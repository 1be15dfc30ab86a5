"""Desktop notifications via the system tray."""

from PyQt6.QtWidgets import QSystemTrayIcon

from protonvpn_status.constants import APP_NAME, VPN_NAME


class NotificationManager:
    """Manages transient desktop notifications."""

    def __init__(self, tray_icon: QSystemTrayIcon):
        """Initialize the notification manager.

        Args:
            tray_icon: System tray icon to use for notifications
        """
        self.tray = tray_icon
        self._enabled = True

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def is_enabled(self) -> bool:
        return self._enabled

    def show(
        self,
        title: str,
        message: str,
        critical: bool = False,
        duration_ms: int = 3000,
    ) -> None:
        """Show a desktop notification.

        Args:
            title: Notification title
            message: Notification body
            critical: If True, show as an error notification
            duration_ms: How long to show the notification (milliseconds)
        """
        if not self._enabled and not critical:
            return

        icon = (
            QSystemTrayIcon.MessageIcon.Critical if critical
            else QSystemTrayIcon.MessageIcon.Information
        )
        self.tray.showMessage(title, message, icon, duration_ms)

    def connecting(self) -> None:
        self.show(VPN_NAME, "Connecting...")

    def disconnecting(self) -> None:
        self.show(VPN_NAME, "Disconnecting...")

    def error(self, message: str, title: str = APP_NAME) -> None:
        """Show an error notification. Errors are shown even when disabled."""
        self.show(title, message, critical=True, duration_ms=8000)
