"""Desktop notifications through the freedesktop ``notify-send`` command."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Literal, Optional

from .alerts import AlertError

PermissionState = Literal["default", "granted", "denied"]


class DesktopNotifier:
    """Sends OS notifications when ``notify-send`` is installed.

    Permission is resolved once: granted when the command is found on PATH,
    denied otherwise. Later requests are no-ops. Spawned commands are reaped
    on the next notification and waited for on :meth:`close`.
    """

    def __init__(
        self,
        *,
        command: str = "notify-send",
        close_timeout_seconds: float = 2.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._command = command
        self._close_timeout_seconds = close_timeout_seconds
        self._logger = logger or logging.getLogger(__name__)
        self._executable: Optional[str] = None
        self._permission: PermissionState = "default"
        self._pending: list[subprocess.Popen] = []

    @property
    def permission(self) -> PermissionState:
        return self._permission

    def request_permission(self) -> None:
        if self._permission != "default":
            return
        self._executable = shutil.which(self._command)
        self._permission = "granted" if self._executable else "denied"
        self._logger.debug("Desktop notification permission: %s", self._permission)

    def notify(self, title: str, body: str) -> None:
        if self._permission != "granted" or self._executable is None:
            return
        self._reap()
        try:
            process = subprocess.Popen(
                [self._executable, title, body],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as error:
            raise AlertError(f"notify-send failed: {error}") from error
        self._pending.append(process)

    def close(self) -> None:
        pending, self._pending = self._pending, []
        for process in pending:
            try:
                process.wait(timeout=self._close_timeout_seconds)
            except subprocess.TimeoutExpired:
                self._logger.warning("Killing stalled %s (pid %s)", self._command, process.pid)
                process.kill()
                process.wait()

    def _reap(self) -> None:
        still_running = []
        for process in self._pending:
            returncode = process.poll()
            if returncode is None:
                still_running.append(process)
            elif returncode != 0:
                self._logger.debug("%s exited with status %s", self._command, returncode)
        self._pending = still_running
