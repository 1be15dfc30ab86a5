"""Tests for the preferences dialog and the application controller."""

import pytest

from protonvpn_status import app as app_module
from protonvpn_status import preferences as preferences_module
from protonvpn_status.constants import MAX_REFRESH_INTERVAL
from protonvpn_status.preferences import PreferencesDialog
from protonvpn_status.settings import PollConfiguration, load_settings, save_settings
from protonvpn_status.status import ConnectionState


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def autostart_calls(monkeypatch):
    calls = []

    def fake_set_autostart(enabled):
        calls.append(enabled)
        return True

    monkeypatch.setattr(preferences_module, "set_autostart", fake_set_autostart)
    monkeypatch.setattr(app_module, "set_autostart", fake_set_autostart)
    monkeypatch.setattr(app_module, "is_autostart_enabled", lambda: False)
    return calls


class TestPreferencesDialog:
    """Tests for PreferencesDialog."""

    def test_shows_config(self, settings_path):
        config = PollConfiguration(refresh_interval=42, notifications_enabled=False)
        dialog = PreferencesDialog(config, settings_path)

        assert dialog.interval_spin.value() == 42
        assert not dialog.notifications_check.isChecked()
        assert not dialog.autostart_check.isChecked()

    def test_interval_change_is_saved_and_emitted(self, settings_path):
        dialog = PreferencesDialog(PollConfiguration(), settings_path)
        seen = []
        dialog.settings_changed.connect(seen.append)

        dialog.interval_spin.setValue(45)

        assert seen[-1].refresh_interval == 45
        assert load_settings(settings_path).refresh_interval == 45

    def test_autostart_toggle(self, settings_path, autostart_calls):
        dialog = PreferencesDialog(PollConfiguration(), settings_path)

        dialog.autostart_check.setChecked(True)

        assert autostart_calls == [True]
        assert dialog.config.auto_start_on_login is True
        assert load_settings(settings_path).auto_start_on_login is True

    def test_notifications_toggle(self, settings_path):
        dialog = PreferencesDialog(PollConfiguration(), settings_path)

        dialog.notifications_check.setChecked(False)

        assert dialog.config.notifications_enabled is False

    def test_reset(self, settings_path, autostart_calls):
        config = PollConfiguration(refresh_interval=99, auto_start_on_login=True)
        save_settings(config, settings_path)
        dialog = PreferencesDialog(config, settings_path)
        seen = []
        dialog.settings_changed.connect(seen.append)

        dialog.reset_btn.click()

        assert seen == [PollConfiguration()]
        assert dialog.interval_spin.value() == 20
        assert not settings_path.exists()
        assert autostart_calls == [False]


class TestVPNApplication:
    """Tests for VPNApplication wiring."""

    @pytest.fixture
    def vpn_app(self, settings_path, autostart_calls):
        application = app_module.VPNApplication(PollConfiguration(), settings_path)
        yield application
        application.disable()

    def test_syncs_autostart_from_settings(self, settings_path, autostart_calls):
        app_module.VPNApplication(
            PollConfiguration(auto_start_on_login=True), settings_path
        ).disable()

        assert autostart_calls == [True]

    def test_apply_config(self, vpn_app):
        config = PollConfiguration(refresh_interval=5, notifications_enabled=False)
        vpn_app.apply_config(config)

        assert vpn_app.reconciler.config is config
        assert vpn_app.notifications.is_enabled() is False

    def test_interval_override_is_session_only(self, settings_path, autostart_calls):
        save_settings(PollConfiguration(refresh_interval=20), settings_path)
        application = app_module.VPNApplication(
            load_settings(settings_path), settings_path, interval_override=5
        )

        assert application.config.refresh_interval == 5
        assert application.reconciler.config.refresh_interval == 5

        application._show_preferences()
        dialog = application._preferences
        assert dialog.interval_spin.value() == 20

        dialog.notifications_check.setChecked(False)

        assert load_settings(settings_path).refresh_interval == 20
        assert load_settings(settings_path).notifications_enabled is False
        assert application.config.refresh_interval == 5
        assert application.config.notifications_enabled is False
        dialog.close()
        application.disable()

    def test_picked_interval_ends_override(self, settings_path, autostart_calls):
        application = app_module.VPNApplication(
            PollConfiguration(), settings_path, interval_override=5
        )
        application._show_preferences()

        application._preferences.interval_spin.setValue(45)

        assert application.config.refresh_interval == 45
        assert load_settings(settings_path).refresh_interval == 45
        application._preferences.close()
        application.disable()

    def test_disable_stops_reconciler(self, vpn_app):
        vpn_app.disable()

        assert not vpn_app.reconciler.is_enabled()
        assert vpn_app.reconciler.state == ConnectionState.WAITING


class TestMain:
    """Tests for the command-line interface."""

    def test_parser(self):
        args = app_module.build_parser().parse_args(["--interval", "30", "--debug"])

        assert args.interval == 30
        assert args.debug is True
        assert args.config is None

    def test_rejects_non_positive_interval(self):
        with pytest.raises(SystemExit):
            app_module.main(["--interval", "0"])

    @pytest.mark.parametrize("interval", ["3000000", str(MAX_REFRESH_INTERVAL + 1)])
    def test_rejects_interval_beyond_timer_range(self, interval, capsys):
        with pytest.raises(SystemExit) as exc:
            app_module.main(["--interval", interval])

        assert exc.value.code == 2
        assert "--interval must be between" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            app_module.main(["--version"])

        assert exc.value.code == 0
        assert "protonvpn-status" in capsys.readouterr().out
