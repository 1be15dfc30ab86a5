"""Preferences dialog."""

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from protonvpn_status.autostart import set_autostart
from protonvpn_status.constants import APP_NAME, MAX_REFRESH_INTERVAL
from protonvpn_status.settings import PollConfiguration, reset_settings, save_settings


class PreferencesDialog(QDialog):
    """Dialog for the polling interval, autostart and notifications.

    Every change is saved right away and announced through
    ``settings_changed`` so the running application can apply it.
    """

    settings_changed = pyqtSignal(object)  # PollConfiguration

    def __init__(
        self,
        config: PollConfiguration,
        settings_path: Optional[Path] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self._config = config
        self._settings_path = settings_path

        self.setWindowTitle(f"{APP_NAME} - Preferences")
        self.setMinimumWidth(420)
        self._setup_ui()
        self._load(config)

    @property
    def config(self) -> PollConfiguration:
        return self._config

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        title = QLabel(f"<b>{APP_NAME} Preferences</b>")
        layout.addWidget(title)

        # Status group
        status_group = QGroupBox("Status")
        status_layout = QFormLayout(status_group)

        self.interval_spin = QSpinBox()
        self.interval_spin.setRange(1, MAX_REFRESH_INTERVAL)
        self.interval_spin.setSuffix(" s")
        self.interval_spin.valueChanged.connect(self._on_interval_changed)
        status_layout.addRow("Refresh every:", self.interval_spin)

        self.notifications_check = QCheckBox("Show notifications")
        self.notifications_check.stateChanged.connect(self._on_notifications_changed)
        status_layout.addRow(self.notifications_check)

        layout.addWidget(status_group)

        # Startup group
        startup_group = QGroupBox("Startup")
        startup_layout = QVBoxLayout(startup_group)

        self.autostart_check = QCheckBox("Start automatically when you log in")
        self.autostart_check.stateChanged.connect(self._on_autostart_changed)
        startup_layout.addWidget(self.autostart_check)

        note = QLabel("<i>Note: Only the tray icon starts. VPN connects manually.</i>")
        note.setStyleSheet("color: gray; font-size: 11px;")
        startup_layout.addWidget(note)

        layout.addWidget(startup_group)
        layout.addStretch()

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        self.reset_btn = QPushButton("Reset to Defaults")
        self.reset_btn.clicked.connect(self._on_reset)
        buttons.addButton(self.reset_btn, QDialogButtonBox.ButtonRole.ResetRole)
        buttons.rejected.connect(self.close)
        layout.addWidget(buttons)

    def _load(self, config: PollConfiguration) -> None:
        """Show a configuration without triggering change handlers."""
        widgets = (self.interval_spin, self.notifications_check, self.autostart_check)
        for widget in widgets:
            widget.blockSignals(True)
        self.interval_spin.setValue(config.refresh_interval)
        self.notifications_check.setChecked(config.notifications_enabled)
        self.autostart_check.setChecked(config.auto_start_on_login)
        for widget in widgets:
            widget.blockSignals(False)

    def _apply(self, config: PollConfiguration) -> None:
        self._config = config
        save_settings(config, self._settings_path)
        self.settings_changed.emit(config)

    def _on_interval_changed(self, value: int) -> None:
        self._apply(self._config.with_changes(refresh_interval=value))

    def _on_notifications_changed(self, state: int) -> None:
        enabled = state == Qt.CheckState.Checked.value
        self._apply(self._config.with_changes(notifications_enabled=enabled))

    def _on_autostart_changed(self, state: int) -> None:
        enabled = state == Qt.CheckState.Checked.value
        if not set_autostart(enabled):
            self.autostart_check.blockSignals(True)
            self.autostart_check.setChecked(not enabled)
            self.autostart_check.blockSignals(False)
            QMessageBox.warning(
                self, "Error",
                f"Failed to {'enable' if enabled else 'disable'} autostart."
            )
            return
        self._apply(self._config.with_changes(auto_start_on_login=enabled))

    def _on_reset(self) -> None:
        defaults = reset_settings(self._settings_path)
        if self._config.auto_start_on_login != defaults.auto_start_on_login:
            set_autostart(defaults.auto_start_on_login)
        self._config = defaults
        self._load(defaults)
        self.settings_changed.emit(defaults)
