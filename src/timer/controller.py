"""Timer controller bridging start/pause/resume/finish intents to a countdown engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Callable, Literal, Optional

from countdown import (
    CountdownCompleted,
    CountdownEngine,
    CountdownMessage,
    CountdownTick,
    MessagePublisher,
    QueueMessagePublisher,
)

from .alerts import CompletionAlerts
from .constants import (
    ACTION_FINISH,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    LABEL_WORK,
    PHASE_COMPLETED,
    PHASE_IDLE,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_ALREADY_COMPLETED,
    REASON_ALREADY_STARTED,
    REASON_FINISHED,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_UNSUPPORTED_ACTION,
)

TimerPhase = Literal["idle", "running", "paused", "completed"]
TimerAction = Literal["start", "pause", "resume", "finish"]

EngineFactory = Callable[[MessagePublisher], CountdownEngine]


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the timer exposed to the lifecycle and UI publishers."""
    phase: TimerPhase
    label: str
    duration_seconds: int
    remaining_seconds: int

    @property
    def running(self) -> bool:
        return self.phase == PHASE_RUNNING


@dataclass(frozen=True)
class TimerActionResult:
    """Result envelope returned after applying a timer action."""
    action: str
    accepted: bool
    reason: str
    snapshot: TimerSnapshot


class TimerController:
    """Owns one countdown engine and the remaining/running state derived from it.

    Engine messages arrive on an internal queue and are only applied when the
    owning thread calls :meth:`drain`, so all state changes and callbacks run
    on that thread.
    """

    def __init__(
        self,
        *,
        duration_seconds: int,
        label: str = LABEL_WORK,
        alerts: Optional[CompletionAlerts] = None,
        on_tick: Optional[Callable[[TimerSnapshot], None]] = None,
        on_complete: Optional[Callable[[TimerSnapshot], None]] = None,
        engine_factory: Optional[EngineFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be greater than zero")

        self._label = label
        self._alerts = alerts
        self._on_tick = on_tick
        self._on_complete = on_complete
        self._logger = logger or logging.getLogger("timer")

        self._inbox: Queue[CountdownMessage] = Queue()
        publisher = QueueMessagePublisher(self._inbox)
        if engine_factory is None:
            self._engine = CountdownEngine(publisher, logger=logging.getLogger("countdown"))
        else:
            self._engine = engine_factory(publisher)

        self._phase: TimerPhase = PHASE_IDLE
        self._duration_seconds = int(duration_seconds)
        self._remaining_seconds = self._duration_seconds
        self._run_id: Optional[int] = None
        self._permission_requested = False

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def running(self) -> bool:
        return self._phase == PHASE_RUNNING

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            label=self._label,
            duration_seconds=self._duration_seconds,
            remaining_seconds=self._remaining_seconds,
        )

    def apply(self, action: str) -> TimerActionResult:
        if action == ACTION_START:
            return self.start()
        if action == ACTION_PAUSE:
            return self.pause()
        if action == ACTION_RESUME:
            return self.resume()
        if action == ACTION_FINISH:
            return self.finish()
        return self._result(action, False, REASON_UNSUPPORTED_ACTION)

    def start(self) -> TimerActionResult:
        if self._phase != PHASE_IDLE:
            return self._result(ACTION_START, False, REASON_ALREADY_STARTED)

        self._request_permission_once()
        self._remaining_seconds = self._duration_seconds
        self._run_id = self._engine.start(self._duration_seconds)
        self._phase = PHASE_RUNNING
        self._logger.info(
            "%s started: duration=%ss",
            self._label,
            self._duration_seconds,
        )
        return self._result(ACTION_START, True, REASON_STARTED)

    def pause(self) -> TimerActionResult:
        if self._phase != PHASE_RUNNING:
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING)

        self._engine.stop()
        self._run_id = None
        self._phase = PHASE_PAUSED
        self._logger.info(
            "%s paused: remaining=%ss",
            self._label,
            self._remaining_seconds,
        )
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def resume(self) -> TimerActionResult:
        if self._phase != PHASE_PAUSED:
            return self._result(ACTION_RESUME, False, REASON_NOT_PAUSED)

        self._run_id = self._engine.start(
            self._duration_seconds,
            resume_from_remaining=self._remaining_seconds,
        )
        self._phase = PHASE_RUNNING
        self._logger.info(
            "%s resumed: remaining=%ss",
            self._label,
            self._remaining_seconds,
        )
        return self._result(ACTION_RESUME, True, REASON_RESUMED)

    def finish(self) -> TimerActionResult:
        """Complete the timer early through the same path as natural expiry."""
        if self._phase == PHASE_COMPLETED:
            return self._result(ACTION_FINISH, False, REASON_ALREADY_COMPLETED)

        self._engine.stop()
        self._mark_completed()
        self._logger.info("%s finished manually", self._label)
        result = self._result(ACTION_FINISH, True, REASON_FINISHED)
        self._notify_complete(result.snapshot)
        return result

    def reconfigure(self, duration_seconds: int) -> bool:
        """Replace the configured duration unless a countdown is in flight."""
        if self._phase == PHASE_RUNNING:
            self._logger.debug(
                "Ignoring duration change for %s while running",
                self._label,
            )
            return False
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be greater than zero")

        self._duration_seconds = int(duration_seconds)
        self._remaining_seconds = self._duration_seconds
        self._phase = PHASE_IDLE
        return True

    def drain(self) -> int:
        """Apply every queued engine message; return how many were read."""
        processed = 0
        while True:
            try:
                message = self._inbox.get_nowait()
            except Empty:
                return processed
            processed += 1
            self.handle_message(message)

    def handle_message(self, message: CountdownMessage) -> None:
        if self._phase != PHASE_RUNNING or message.run_id != self._run_id:
            self._logger.debug(
                "Discarding stale countdown message for run %s",
                message.run_id,
            )
            return

        if isinstance(message, CountdownTick):
            self._remaining_seconds = message.remaining_seconds
            if self._on_tick is not None:
                self._on_tick(self.snapshot())
            return

        if isinstance(message, CountdownCompleted):
            self._mark_completed()
            self._logger.info("%s completed", self._label)
            snapshot = self.snapshot()
            if self._alerts is not None:
                self._alerts.announce(
                    f"{self._label} Completed!",
                    "Time to move to the next step.",
                )
            self._notify_complete(snapshot)

    def close(self) -> None:
        self._engine.stop()
        self._run_id = None

    def _mark_completed(self) -> None:
        self._phase = PHASE_COMPLETED
        self._remaining_seconds = 0
        self._run_id = None

    def _notify_complete(self, snapshot: TimerSnapshot) -> None:
        if self._on_complete is not None:
            self._on_complete(snapshot)

    def _request_permission_once(self) -> None:
        if self._permission_requested or self._alerts is None:
            return
        self._permission_requested = True
        self._alerts.request_permission()

    def _result(self, action: str, accepted: bool, reason: str) -> TimerActionResult:
        return TimerActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
        )
