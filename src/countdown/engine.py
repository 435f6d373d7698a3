"""Wall-clock anchored countdown that polls on its own worker thread."""

from __future__ import annotations

import itertools
import logging
import math
import threading
import time
from typing import Callable, Optional

from .messages import CountdownCompleted, CountdownMessage, CountdownTick, MessagePublisher

DEFAULT_POLL_INTERVAL_SECONDS = 0.2

Clock = Callable[[], float]


class CountdownRun:
    """One scheduled countdown with an absolute end time.

    Remaining time is always re-derived from the clock, never decremented,
    so late or skipped polls cannot accumulate drift.
    """

    def __init__(self, run_id: int, *, target_end: float, start_remaining: int):
        self.run_id = run_id
        self.target_end = target_end
        self.start_remaining = start_remaining
        self.finished = False
        self._last_emitted: Optional[int] = None

    def remaining_at(self, now: float) -> int:
        remaining = int(math.ceil(self.target_end - now))
        return max(0, min(self.start_remaining, remaining))

    def step(self, now: float) -> list[CountdownMessage]:
        """Return the messages produced by a single poll at ``now``."""
        if self.finished:
            return []

        remaining = self.remaining_at(now)
        if remaining <= 0:
            self.finished = True
            self._last_emitted = 0
            return [
                CountdownTick(run_id=self.run_id, remaining_seconds=0),
                CountdownCompleted(run_id=self.run_id),
            ]

        if remaining == self._last_emitted:
            return []

        self._last_emitted = remaining
        return [CountdownTick(run_id=self.run_id, remaining_seconds=remaining)]


class CountdownEngine:
    """Runs at most one countdown at a time on a background thread.

    The worker only communicates through the publisher; the run's end time
    never leaves the worker's own ``CountdownRun``.
    """

    def __init__(
        self,
        publisher: MessagePublisher,
        *,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        clock: Clock = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be greater than zero")

        self._publisher = publisher
        self._poll_interval_seconds = float(poll_interval_seconds)
        self._clock = clock
        self._logger = logger or logging.getLogger("countdown")
        self._lock = threading.Lock()
        self._run_ids = itertools.count(1)
        self._cancel_event: Optional[threading.Event] = None
        self._active_run_id: Optional[int] = None

    def start(
        self,
        duration_seconds: int,
        resume_from_remaining: Optional[int] = None,
    ) -> int:
        """Schedule a new countdown, cancelling any run still in flight."""
        seconds = duration_seconds if resume_from_remaining is None else resume_from_remaining
        seconds = max(0, int(seconds))

        with self._lock:
            self._cancel_locked()
            run_id = next(self._run_ids)
            run = CountdownRun(
                run_id,
                target_end=self._clock() + seconds,
                start_remaining=seconds,
            )
            cancel_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(run, cancel_event),
                daemon=True,
                name=f"countdown-{run_id}",
            )
            self._cancel_event = cancel_event
            self._active_run_id = run_id

        self._logger.debug("Countdown run %d started: %ss", run_id, seconds)
        thread.start()
        return run_id

    def stop(self) -> None:
        with self._lock:
            run_id = self._active_run_id
            self._cancel_locked()
        if run_id is not None:
            self._logger.debug("Countdown run %d stopped", run_id)

    def _cancel_locked(self) -> None:
        if self._cancel_event is not None:
            self._cancel_event.set()
        self._cancel_event = None
        self._active_run_id = None

    def _run(self, run: CountdownRun, cancel_event: threading.Event) -> None:
        # First poll happens immediately so the owner sees the start value.
        while not cancel_event.is_set():
            for message in run.step(self._clock()):
                if cancel_event.is_set():
                    return
                self._publisher.publish(message)
            if run.finished:
                self._logger.debug("Countdown run %d completed", run.run_id)
                with self._lock:
                    if self._active_run_id == run.run_id:
                        self._cancel_event = None
                        self._active_run_id = None
                return
            cancel_event.wait(self._poll_interval_seconds)
