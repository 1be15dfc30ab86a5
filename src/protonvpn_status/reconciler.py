"""Connection state owner: polls the VPN client and drives the indicator."""

import logging
from functools import partial
from typing import Optional, Sequence

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from protonvpn_status.constants import (
    ACTION_TIMEOUT,
    LABEL_CONNECT,
    LABEL_DISCONNECT,
    VPN_NAME,
)
from protonvpn_status.process import ProcessError, ProcessRunner
from protonvpn_status.settings import PollConfiguration
from protonvpn_status.status import ConnectionState, indicator_view, parse_status

log = logging.getLogger(__name__)

ACTION_FAILED_MESSAGE = (
    f"Unknown {VPN_NAME} response.\n"
    f"Is {VPN_NAME} installed? Can this application issue commands to {VPN_NAME}?"
)


class StatusReconciler(QObject):
    """Keeps the displayed connection state in line with the VPN client.

    The status command is polled on a single-shot timer that is re-armed only
    after the previous poll has completed, so polls never overlap. A poll
    that outlives the status timeout is killed and counts as a failed poll.
    Callbacks carry the generation they were issued in; anything arriving
    after ``stop()`` is dropped.

    Only one connect or disconnect runs at a time. While it runs, poll
    results do not replace the transitional state.
    """

    state_changed = pyqtSignal(object)  # ConnectionState

    def __init__(
        self,
        config: PollConfiguration,
        indicator,
        notifications,
        runner: Optional[ProcessRunner] = None,
        parent: Optional[QObject] = None,
    ):
        """Initialize the reconciler.

        Args:
            config: Polling interval, status timeout and commands
            indicator: Object with ``apply_view(state, view)``
            notifications: Object with ``connecting()``, ``disconnecting()``
                and ``error(message, title)``
            runner: Process runner (a new one is created if omitted)
            parent: Parent QObject
        """
        super().__init__(parent)
        self._config = config
        self._indicator = indicator
        self._notifications = notifications
        self._runner = runner if runner is not None else ProcessRunner(self)

        self._state = ConnectionState.WAITING
        self._enabled = False
        self._generation = 0
        self._poll_in_flight = False
        self._poll_job = None
        self._action_in_flight = False
        self._action_job = None
        # Bumped when an action finishes, polls started before it are stale
        self._action_epoch = 0

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.poll)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def config(self) -> PollConfiguration:
        return self._config

    def is_enabled(self) -> bool:
        return self._enabled

    def is_polling(self) -> bool:
        """True while a status command is running."""
        return self._poll_in_flight

    def is_action_running(self) -> bool:
        """True while a connect or disconnect command is running."""
        return self._action_in_flight

    def is_poll_scheduled(self) -> bool:
        return self._timer.isActive()

    # Lifecycle

    def start(self) -> None:
        """Show the initial state and start polling."""
        if self._enabled:
            return
        self._enabled = True
        self._generation += 1
        self._set_state(ConnectionState.WAITING)
        self.poll()

    def stop(self) -> None:
        """Stop polling and kill commands that are still running."""
        self._enabled = False
        self._generation += 1
        self._timer.stop()

        for job in (self._poll_job, self._action_job):
            if job is not None and not job.is_done():
                log.debug(f"Cancelling '{' '.join(job.argv)}'")
                job.cancel()
        self._poll_job = None
        self._action_job = None
        self._poll_in_flight = False
        self._action_in_flight = False

    def set_config(self, config: PollConfiguration) -> None:
        """Apply new settings. A changed interval takes effect on the next poll."""
        self._config = config

    # Polling

    def poll(self) -> None:
        """Run the status command unless stopped or a poll is already running."""
        if not self._enabled or self._poll_in_flight:
            return

        self._timer.stop()
        self._poll_in_flight = True
        generation = self._generation
        job = self._runner.run(
            self._config.status_argv,
            on_success=partial(self._on_status, generation, self._action_epoch),
            on_failure=partial(self._on_status_failed, generation),
            timeout_ms=self._config.status_timeout_ms,
        )
        # A spawn failure can resolve the job before run() returns
        if self._poll_in_flight:
            self._poll_job = job

    def _on_status(self, generation: int, action_epoch: int, output: str) -> None:
        if generation != self._generation:
            return
        self._poll_in_flight = False
        self._poll_job = None

        if self._action_in_flight:
            log.debug(f"Keeping {self._state} until the {VPN_NAME} command finishes")
        elif action_epoch != self._action_epoch:
            # Output may predate the finished action
            self.poll()
            return
        else:
            self._set_state(parse_status(output))
        self._schedule_poll()

    def _on_status_failed(self, generation: int, error: ProcessError) -> None:
        if generation != self._generation:
            return
        self._poll_in_flight = False
        self._poll_job = None
        log.error(f"Unknown {VPN_NAME} status: {error}")
        self._schedule_poll()

    def _schedule_poll(self) -> None:
        self._timer.start(self._config.refresh_interval_ms)

    # User actions

    def toggle_connection(self) -> None:
        """Connect or disconnect depending on what the menu action reads."""
        label = indicator_view(self._state).label
        if label == LABEL_CONNECT:
            self.connect_vpn()
        elif label == LABEL_DISCONNECT:
            self.disconnect_vpn()

    def connect_vpn(self) -> bool:
        """Ask the VPN client to connect.

        Returns:
            False if the current state does not allow connecting or another
            command is still running
        """
        if not self._can_act("connect", LABEL_CONNECT):
            return False
        self._run_action(
            self._config.connect_argv,
            ConnectionState.CONNECTING,
            self._notifications.connecting,
            "connect",
        )
        return True

    def disconnect_vpn(self) -> bool:
        """Ask the VPN client to disconnect.

        Returns:
            False if the current state does not allow disconnecting or another
            command is still running
        """
        if not self._can_act("disconnect", LABEL_DISCONNECT):
            return False
        self._run_action(
            self._config.disconnect_argv,
            ConnectionState.DISCONNECTING,
            self._notifications.disconnecting,
            "disconnect",
        )
        return True

    def _can_act(self, action: str, label: str) -> bool:
        if not self._enabled:
            return False
        if self._action_in_flight:
            log.debug(f"Ignoring {action} request, a {VPN_NAME} command is running")
            return False
        if indicator_view(self._state).label != label:
            log.debug(f"Ignoring {action} request while {self._state}")
            return False
        return True

    def _run_action(
        self,
        argv: Sequence[str],
        transition: ConnectionState,
        notify,
        action: str,
    ) -> None:
        generation = self._generation

        def finish() -> None:
            self._action_in_flight = False
            self._action_job = None
            self._action_epoch += 1

        def on_started() -> None:
            if generation != self._generation:
                return
            self._set_state(transition)
            notify()

        def on_success(_output: str) -> None:
            if generation != self._generation:
                return
            finish()
            log.info(f"{VPN_NAME} {action} command finished")
            self.poll()

        def on_failure(error: ProcessError) -> None:
            if generation != self._generation:
                return
            finish()
            log.error(f"Invalid result of {VPN_NAME} {action}: {error}")
            self._notifications.error(f"{ACTION_FAILED_MESSAGE}\n\n{error}")
            self._set_state(ConnectionState.DISCONNECTED)

        log.info(f"Requesting {VPN_NAME} {action}")
        self._action_in_flight = True
        job = self._runner.run(
            argv,
            on_success=on_success,
            on_failure=on_failure,
            on_started=on_started,
            timeout_ms=ACTION_TIMEOUT * 1000,
        )
        if self._action_in_flight:
            self._action_job = job

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            log.info(f"{VPN_NAME} state: {self._state} -> {state}")
        self._state = state
        self._indicator.apply_view(state, indicator_view(state))
        self.state_changed.emit(state)
