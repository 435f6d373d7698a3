"""Best-effort completion side effects: audible tone and notifications."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence


class AlertError(Exception):
    """Raised by tone or notification backends when an alert cannot be delivered."""


class ToneOutputLike(Protocol):
    def play_tone(self) -> None:
        ...


class NotifierLike(Protocol):
    def request_permission(self) -> None:
        ...

    def notify(self, title: str, body: str) -> None:
        ...

    def close(self) -> None:
        ...


class CompletionAlerts:
    """Fans completion alerts out to every backend.

    Failures never reach the caller; they are logged and the next backend is
    tried.
    """

    def __init__(
        self,
        *,
        tone: Optional[ToneOutputLike] = None,
        notifiers: Sequence[NotifierLike] = (),
        logger: Optional[logging.Logger] = None,
    ):
        self._tone = tone
        self._notifiers = tuple(notifiers)
        self._logger = logger or logging.getLogger("timer.alerts")

    def request_permission(self) -> None:
        for notifier in self._notifiers:
            try:
                notifier.request_permission()
            except Exception as error:
                self._logger.debug("Notification permission request failed: %s", error)

    def announce(self, title: str, body: str) -> None:
        for notifier in self._notifiers:
            try:
                notifier.notify(title, body)
            except Exception as error:
                self._logger.warning("Notification failed: %s", error)

        if self._tone is not None:
            try:
                self._tone.play_tone()
            except Exception as error:
                self._logger.warning("Completion tone failed: %s", error)

    def close(self) -> None:
        for notifier in self._notifiers:
            try:
                notifier.close()
            except Exception as error:
                self._logger.warning("Closing notifier failed: %s", error)
