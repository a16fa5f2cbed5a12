"""Persistent interpreter session driven by remote commands.

A `Shell` lazily spawns one interpreter process on the first command and
reuses it for every following command until the process exits, at which
point the next command transparently starts a new one. Both output pipes are
drained by background relays that forward each line to the injected output
sink, so submitting a command never waits for its output.
"""

import logging
import os
import signal
import subprocess
import threading
import time
from typing import BinaryIO

from shellrelay.encoding import to_native
from shellrelay.models import OutputSink, RelayConfig, SessionState
from shellrelay.shell.detection import build_launch_config
from shellrelay.shell.relay import StreamRelay

log = logging.getLogger(__name__)

NEW_SESSION_MESSAGE = ">> New Session created\n"
CREATE_FAILED_MESSAGE = ">> Failed to create shell session: {reason}\n"
WRITE_FAILED_MESSAGE = ">> Failed to write to shell session: {reason}\n"

LINE_TERMINATOR = os.linesep.encode("ascii")

# Keep cmd.exe from opening a console window when spawned from a GUI host, and
# give it its own process group like the POSIX session below.
_CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0) | getattr(
    subprocess, "CREATE_NEW_PROCESS_GROUP", 0
)
# On POSIX the shell leads a new session, so its process group holds every
# background job that may still write to the output pipes.
_OWN_PROCESS_GROUP = os.name != "nt"


class Shell:
    """Own one interpreter process and relay its output to a sink."""

    def __init__(self, sink: OutputSink, config: RelayConfig | None = None) -> None:
        self._sink = sink
        self._config = config if config is not None else RelayConfig()
        self._lock = threading.Lock()
        self._process: subprocess.Popen | None = None
        self._input: BinaryIO | None = None
        self._encoding: str | None = None
        self._relays: list[StreamRelay] = []
        self._state = SessionState.UNINITIALIZED

    def __enter__(self) -> "Shell":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    @property
    def state(self) -> SessionState:
        if self._state is SessionState.ACTIVE and (
            self._process is None or self._process.poll() is not None
        ):
            return SessionState.TERMINATED
        return self._state

    @property
    def encoding(self) -> str | None:
        return self._encoding

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    def execute_command(self, command: str) -> bool:
        """Send one command line to the interpreter.

        Returns False when no session could be created or the command could
        not be written; the reason has already been emitted to the sink.
        """
        with self._lock:
            if not self._ensure_session():
                return False
            try:
                self._input.write(to_native(command, self._encoding) + LINE_TERMINATOR)
                self._input.flush()
            except (OSError, ValueError) as e:
                log.warning("write to shell session failed: %s", e)
                self._release()
                self._sink.emit(WRITE_FAILED_MESSAGE.format(reason=e), True)
                return False
        return True

    def close(self, timeout: float | None = None) -> None:
        """End the session gracefully, letting queued commands finish.

        Closing stdin makes the interpreter exit once it has run everything
        already written; the output produced meanwhile is still relayed.
        Anything left running after `timeout` seconds is killed.
        """
        with self._lock:
            process = self._process
            if process is None:
                return
            deadline = None if timeout is None else time.monotonic() + timeout
            self._close_input()
            try:
                process.wait(timeout=_remaining(deadline))
            except subprocess.TimeoutExpired:
                log.debug("shell pid=%s still running after %ss", process.pid, timeout)
            for relay in self._relays:
                relay.join(_remaining(deadline))
            self._release()

    def dispose(self) -> None:
        """Release the interpreter process and everything attached to it."""
        with self._lock:
            self._release()

    def _ensure_session(self) -> bool:
        if self._process is not None and self._process.poll() is None:
            return True
        if self._process is not None:
            log.debug("shell pid=%s exited with %s", self._process.pid, self._process.returncode)
            self._release()
        try:
            self._create_session()
        except Exception as e:
            log.warning("failed to create shell session: %s", e)
            if self._process is not None:
                self._release()
            self._sink.emit(CREATE_FAILED_MESSAGE.format(reason=e), True)
            return False
        return True

    def _create_session(self) -> None:
        launch = build_launch_config(self._config)
        process = subprocess.Popen(
            launch.argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=launch.cwd,
            env=launch.env,
            creationflags=_CREATION_FLAGS,
            start_new_session=_OWN_PROCESS_GROUP,
        )
        self._process = process
        self._encoding = launch.encoding
        self._input = process.stdin
        self._relays = [
            StreamRelay(
                process.stdout,
                launch.encoding,
                self._sink,
                is_error=False,
                name=f"shellrelay-stdout-{process.pid}",
            ),
            StreamRelay(
                process.stderr,
                launch.encoding,
                self._sink,
                is_error=True,
                name=f"shellrelay-stderr-{process.pid}",
            ),
        ]
        self._state = SessionState.ACTIVE
        # Announce before the relays run so the notice precedes any output.
        self._sink.emit(NEW_SESSION_MESSAGE, False)
        for relay in self._relays:
            relay.start()
        log.debug(
            "%s session started executable=%s pid=%s encoding=%s",
            launch.kind,
            launch.executable,
            process.pid,
            launch.encoding,
        )

    def _close_input(self) -> None:
        if self._input is None:
            return
        try:
            self._input.close()
        except OSError as e:
            log.debug("closing shell stdin failed: %s", e)
        self._input = None

    def _release(self) -> None:
        """Tear down the current process; safe to call repeatedly."""
        process = self._process
        if process is None:
            return

        for relay in self._relays:
            relay.stop()
        self._close_input()

        if _OWN_PROCESS_GROUP:
            # Background jobs outlive the shell and keep the pipes open.
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except OSError as e:
                log.debug("killpg pgid=%s failed: %s", process.pid, e)
        if process.poll() is None:
            try:
                process.kill()
            except OSError as e:
                # Exited in between, or not ours to kill. Teardown goes on.
                log.debug("kill pid=%s failed: %s", process.pid, e)
        try:
            process.wait(timeout=self._config.join_timeout)
        except subprocess.TimeoutExpired:
            log.debug("pid=%s did not exit after kill", process.pid)

        for relay in self._relays:
            relay.join(self._config.join_timeout)
        if not any(relay.is_alive() for relay in self._relays):
            for pipe in (process.stdout, process.stderr):
                if pipe is not None:
                    pipe.close()

        log.debug("shell session released pid=%s", process.pid)
        self._relays = []
        self._process = None
        self._encoding = None
        self._state = SessionState.TERMINATED


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(deadline - time.monotonic(), 0)
