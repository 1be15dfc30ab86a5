"""Shared fixtures: an offscreen QApplication and fake collaborators."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from protonvpn_status.process import ProcessCancelled
from protonvpn_status.settings import PollConfiguration


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication(["protonvpn-status-tests"])
    yield app


class FakeJob:
    """A command that only resolves when the test says so."""

    def __init__(self, argv, on_success, on_failure, on_started, timeout_ms):
        self.argv = list(argv)
        self.timeout_ms = timeout_ms
        self.cancelled = False
        self.done = False
        self._on_success = on_success
        self._on_failure = on_failure
        self._on_started = on_started

    def start(self):
        if self._on_started is not None:
            self._on_started()

    def succeed(self, output=""):
        self.done = True
        self._on_success(output)

    def fail(self, error):
        self.done = True
        self._on_failure(error)

    def cancel(self):
        self.cancelled = True
        self.fail(ProcessCancelled(self.argv))

    def is_done(self):
        return self.done


class FakeRunner:
    def __init__(self):
        self.jobs = []

    def run(self, argv, on_success, on_failure, on_started=None, timeout_ms=None):
        job = FakeJob(argv, on_success, on_failure, on_started, timeout_ms)
        self.jobs.append(job)
        return job

    @property
    def last(self):
        return self.jobs[-1]


class FakeIndicator:
    def __init__(self):
        self.views = []

    def apply_view(self, state, view):
        self.views.append((state, view))

    @property
    def last_view(self):
        return self.views[-1][1]


class FakeNotifications:
    def __init__(self):
        self.events = []

    def connecting(self):
        self.events.append(("ProtonVPN", "Connecting..."))

    def disconnecting(self):
        self.events.append(("ProtonVPN", "Disconnecting..."))

    def error(self, message, title="ProtonVPN Status"):
        self.events.append(("error", title, message))


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def indicator():
    return FakeIndicator()


@pytest.fixture
def notifications():
    return FakeNotifications()


@pytest.fixture
def config():
    return PollConfiguration(refresh_interval=15)
