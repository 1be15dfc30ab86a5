"""System tray icon and menu for ProtonVPN Status."""

from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QMenu, QSystemTrayIcon

from protonvpn_status.constants import (
    APP_NAME,
    ICON_ACQUIRING,
    ICON_IDLE,
    ICON_VPN,
    LABEL_CONNECT,
    LABEL_DISCONNECT,
    VPN_NAME,
    get_icon,
)
from protonvpn_status.status import ConnectionState, IndicatorView, indicator_view


class VPNTrayIcon(QObject):
    """System tray indicator with the VPN status menu."""

    # Signals
    toggle_requested = pyqtSignal()
    refresh_requested = pyqtSignal()
    preferences_requested = pyqtSignal()
    quit_requested = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None):
        """Initialize the tray icon.

        Args:
            parent: Parent QObject
        """
        super().__init__(parent)

        self.tray = QSystemTrayIcon(parent)
        self.tray.setToolTip(APP_NAME)

        self._icons = {
            name: get_icon(name) for name in (ICON_VPN, ICON_ACQUIRING, ICON_IDLE)
        }
        self._indicator_visible = False
        self._icon_name = ICON_IDLE

        self._setup_menu()

        initial = ConnectionState.WAITING
        self.apply_view(initial, indicator_view(initial))

        self.tray.activated.connect(self._on_activated)

    def _setup_menu(self) -> None:
        """Set up the tray context menu."""
        self.menu = QMenu()

        # Header with the current state (non-clickable)
        self._status_action = self.menu.addAction(VPN_NAME)
        self._status_action.setEnabled(False)

        self.menu.addSeparator()

        self._connect_action = self.menu.addAction(LABEL_CONNECT)
        self._connect_action.triggered.connect(self.toggle_requested.emit)

        refresh_action = self.menu.addAction("Refresh Now")
        refresh_action.triggered.connect(self.refresh_requested.emit)

        self.menu.addSeparator()

        preferences_action = self.menu.addAction("Preferences...")
        preferences_action.triggered.connect(self.preferences_requested.emit)

        self.menu.addSeparator()

        quit_action = self.menu.addAction("Quit")
        quit_action.triggered.connect(self.quit_requested.emit)

        self.tray.setContextMenu(self.menu)

    def _on_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.DoubleClick:
            self.preferences_requested.emit()

    def apply_view(self, state: ConnectionState, view: IndicatorView) -> None:
        """Show a connection state.

        The tray entry also hosts the menu, so a hidden indicator is drawn
        with the idle icon rather than removed.

        Args:
            state: Current connection state
            view: Indicator visibility, icon and action label for the state
        """
        self._indicator_visible = view.visible
        self._icon_name = view.icon_name if view.visible else ICON_IDLE

        self._status_action.setText(f"{VPN_NAME} {state}")
        self._connect_action.setText(view.label)
        self._connect_action.setEnabled(
            view.label in (LABEL_CONNECT, LABEL_DISCONNECT)
        )
        self.tray.setToolTip(f"{APP_NAME} - {state}")
        self.tray.setIcon(self._icons[self._icon_name])

    @property
    def indicator_visible(self) -> bool:
        return self._indicator_visible

    @property
    def icon_name(self) -> str:
        return self._icon_name

    @property
    def status_text(self) -> str:
        return self._status_action.text()

    @property
    def action_label(self) -> str:
        return self._connect_action.text()

    def is_action_enabled(self) -> bool:
        return self._connect_action.isEnabled()

    def show(self) -> None:
        self.tray.show()

    def hide(self) -> None:
        self.tray.hide()

    @staticmethod
    def is_system_tray_available() -> bool:
        return QSystemTrayIcon.isSystemTrayAvailable()
