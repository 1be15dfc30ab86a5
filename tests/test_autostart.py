"""Tests for login autostart."""

import sys

import pytest

from protonvpn_status import autostart

pytestmark = pytest.mark.skipif(
    sys.platform == "darwin", reason="desktop entries are Linux only"
)


@pytest.fixture(autouse=True)
def autostart_dir(tmp_path, monkeypatch):
    directory = tmp_path / "autostart"
    monkeypatch.setattr(autostart, "AUTOSTART_DIR", directory)
    monkeypatch.setattr(autostart, "AUTOSTART_FILE", directory / "protonvpn-status.desktop")
    monkeypatch.setattr(autostart, "_find_executable", lambda: "/usr/bin/protonvpn-status")
    return directory


class TestAutostart:
    """Tests for the XDG autostart entry."""

    def test_disabled_without_file(self):
        assert autostart.is_autostart_enabled() is False

    def test_enable_writes_desktop_entry(self):
        assert autostart.enable_autostart() is True

        content = autostart.AUTOSTART_FILE.read_text()
        assert "Exec=/usr/bin/protonvpn-status" in content
        assert "X-GNOME-Autostart-enabled=true" in content
        assert autostart.is_autostart_enabled() is True

    def test_disable_removes_entry(self):
        autostart.enable_autostart()

        assert autostart.disable_autostart() is True
        assert not autostart.AUTOSTART_FILE.exists()
        assert autostart.is_autostart_enabled() is False

    def test_disable_without_entry(self):
        assert autostart.disable_autostart() is True

    def test_hidden_entry_counts_as_disabled(self):
        autostart.AUTOSTART_DIR.mkdir(parents=True)
        autostart.AUTOSTART_FILE.write_text("[Desktop Entry]\nHidden=true\n")

        assert autostart.is_autostart_enabled() is False

    def test_set_autostart(self):
        assert autostart.set_autostart(True) is True
        assert autostart.is_autostart_enabled() is True
        assert autostart.set_autostart(False) is True
        assert autostart.is_autostart_enabled() is False

    def test_entry_is_a_valid_desktop_file(self):
        autostart.enable_autostart()

        lines = autostart.AUTOSTART_FILE.read_text().splitlines()
        assert lines[0] == "[Desktop Entry]"
        assert "Type=Application" in lines
        assert "Name=ProtonVPN Status" in lines

    def test_gnome_disabled_entry_counts_as_disabled(self):
        autostart.AUTOSTART_DIR.mkdir(parents=True)
        autostart.AUTOSTART_FILE.write_text(
            "[Desktop Entry]\nExec=protonvpn-status\nX-GNOME-Autostart-enabled=False\n"
        )

        assert autostart.is_autostart_enabled() is False

    def test_entry_with_field_codes_and_translations(self):
        autostart.AUTOSTART_DIR.mkdir(parents=True)
        autostart.AUTOSTART_FILE.write_text(
            "# edited by hand\n"
            "[Desktop Entry]\n"
            "Name=ProtonVPN Status\n"
            "Name[de]=ProtonVPN-Status\n"
            "Exec=protonvpn-status %u\n"
        )

        assert autostart.is_autostart_enabled() is True

    def test_malformed_entry_counts_as_disabled(self, caplog):
        autostart.AUTOSTART_DIR.mkdir(parents=True)
        autostart.AUTOSTART_FILE.write_text("Exec=protonvpn-status\n")

        assert autostart.is_autostart_enabled() is False
        assert "Cannot read autostart file" in caplog.text
