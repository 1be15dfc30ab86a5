"""Non-blocking execution of external commands on the Qt event loop."""

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from PyQt6.QtCore import QObject, QProcess, QTimer, pyqtSignal

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one finished command."""

    argv: tuple
    exit_code: int
    stdout: str
    stderr: str


class ProcessError(Exception):
    """Error running an external command."""
    pass


class ProcessSpawnFailed(ProcessError):
    """The command could not be started."""

    def __init__(self, argv: Sequence[str], reason: str):
        self.argv = tuple(argv)
        self.reason = reason
        super().__init__(f"Cannot run '{argv[0]}': {reason}")


class ProcessExitedNonZero(ProcessError):
    """The command ran but reported failure."""

    def __init__(self, result: CommandResult):
        self.result = result
        self.message = result.stderr or os.strerror(result.exit_code)
        super().__init__(self.message)

    @property
    def exit_code(self) -> int:
        return self.result.exit_code


class ProcessTimedOut(ProcessError):
    """The command did not finish in time and was killed."""

    def __init__(self, argv: Sequence[str], timeout_ms: int):
        self.argv = tuple(argv)
        self.timeout_ms = timeout_ms
        super().__init__(f"'{argv[0]}' did not finish within {timeout_ms / 1000:g}s")


class ProcessCancelled(ProcessError):
    """The command was killed on request."""

    def __init__(self, argv: Sequence[str]):
        self.argv = tuple(argv)
        super().__init__(f"'{argv[0]}' was cancelled")


def split_command(command_line: str) -> list[str]:
    """Split a configured command line into an argument vector.

    Raises:
        ValueError: If the command line is empty or cannot be parsed
    """
    argv = shlex.split(command_line)
    if not argv:
        raise ValueError("Empty command line")
    return argv


def _decode(data) -> str:
    return data.data().decode("utf-8", errors="replace")


class CommandJob(QObject):
    """One running external command.

    Emits exactly one of ``succeeded`` (trimmed stdout) or ``failed``
    (a ProcessError). ``started`` is emitted once the process is running.
    With a timeout the process is killed and reported as ProcessTimedOut
    when it runs longer than ``timeout_ms``.
    """

    started = pyqtSignal()
    succeeded = pyqtSignal(str)
    failed = pyqtSignal(object)  # ProcessError

    def __init__(
        self,
        argv: Sequence[str],
        timeout_ms: Optional[int] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        if not argv:
            raise ValueError("Command argument vector must not be empty")

        self.argv = tuple(argv)
        self.result: Optional[CommandResult] = None
        self._done = False

        self._process = QProcess(self)
        self._process.setProgram(self.argv[0])
        self._process.setArguments(list(self.argv[1:]))
        self._process.started.connect(self.started.emit)
        self._process.errorOccurred.connect(self._on_error)
        self._process.finished.connect(self._on_finished)

        self._timeout_ms = timeout_ms
        self._watchdog = QTimer(self)
        self._watchdog.setSingleShot(True)
        self._watchdog.timeout.connect(self._on_timeout)

    def start(self) -> None:
        """Start the process and return immediately."""
        log.debug(f"Running: {' '.join(self.argv)}")
        if self._timeout_ms is not None:
            self._watchdog.start(self._timeout_ms)
        self._process.start()

    def cancel(self) -> None:
        """Kill the process and report ProcessCancelled."""
        if self._done:
            return
        self._kill(ProcessCancelled(self.argv))

    def is_done(self) -> bool:
        return self._done

    def _on_timeout(self) -> None:
        log.warning(f"Killing '{self.argv[0]}' after {self._timeout_ms} ms")
        self._kill(ProcessTimedOut(self.argv, self._timeout_ms))

    def _kill(self, error: ProcessError) -> None:
        # finished() arrives later and is ignored once resolved
        self._resolve_failure(error)
        if self._process.state() != QProcess.ProcessState.NotRunning:
            self._process.kill()

    def _on_error(self, error: QProcess.ProcessError) -> None:
        # Other errors (crash, read/write) are followed by finished()
        if error != QProcess.ProcessError.FailedToStart:
            return
        self._resolve_failure(
            ProcessSpawnFailed(self.argv, self._process.errorString())
        )

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        if self._done:
            return

        stdout = _decode(self._process.readAllStandardOutput()).strip()
        stderr = _decode(self._process.readAllStandardError()).strip()

        if exit_status == QProcess.ExitStatus.CrashExit and exit_code == 0:
            # Killed by a signal, Qt reports no usable exit code
            exit_code = -1
            stderr = stderr or f"'{self.argv[0]}' crashed"

        self.result = CommandResult(self.argv, exit_code, stdout, stderr)

        if exit_code != 0:
            self._resolve_failure(ProcessExitedNonZero(self.result))
            return

        self._done = True
        self._watchdog.stop()
        self.succeeded.emit(stdout)

    def _resolve_failure(self, error: ProcessError) -> None:
        if self._done:
            return
        self._done = True
        self._watchdog.stop()
        self.failed.emit(error)


class ProcessRunner(QObject):
    """Starts commands without blocking and reports back via callbacks."""

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        # Running jobs are referenced here until they resolve
        self._jobs: set[CommandJob] = set()

    def run(
        self,
        argv: Sequence[str],
        on_success: Callable[[str], None],
        on_failure: Callable[[ProcessError], None],
        on_started: Optional[Callable[[], None]] = None,
        timeout_ms: Optional[int] = None,
    ) -> CommandJob:
        """Run a command asynchronously.

        Args:
            argv: Executable plus arguments
            on_success: Called with the trimmed stdout on exit code zero
            on_failure: Called with ProcessSpawnFailed, ProcessExitedNonZero,
                ProcessTimedOut or ProcessCancelled
            on_started: Called once the process has been started
            timeout_ms: Kill the process if it runs longer than this

        Returns:
            The started CommandJob
        """
        job = CommandJob(argv, timeout_ms, self)
        if on_started is not None:
            job.started.connect(on_started)
        job.succeeded.connect(on_success)
        job.failed.connect(on_failure)
        job.succeeded.connect(lambda _output, j=job: self._release(j))
        job.failed.connect(lambda _error, j=job: self._release(j))

        self._jobs.add(job)
        job.start()
        return job

    def running_jobs(self) -> int:
        return len(self._jobs)

    def _release(self, job: CommandJob) -> None:
        self._jobs.discard(job)
        job.deleteLater()
