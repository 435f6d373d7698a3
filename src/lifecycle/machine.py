"""Per-cycle phase state machine driving plan, work, review, and break."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional

from sessions import SessionOrchestrator, SessionRecord
from timer import CompletionAlerts, TimerActionResult, TimerController, TimerSnapshot
from timer.constants import ACTION_COMPLETED, ACTION_TICK, LABEL_BREAK, LABEL_WORK

from .constants import (
    PHASE_BREAKING,
    PHASE_PLANNING,
    PHASE_REVIEWING,
    PHASE_WORKING,
    TRIGGER_BREAK_COMPLETED,
    TRIGGER_PLAN_SAVED,
    TRIGGER_RESTORED,
    TRIGGER_REVIEW_SAVED,
    TRIGGER_WORK_COMPLETED,
)
from .markers import MarkerStoreError, PhaseMarkerStore
from .transitions import (
    CyclePhase,
    Handoff,
    InvalidTransitionError,
    initial_phase,
    is_allowed,
    next_phase,
    resolve_handoff,
)

TimerFactory = Callable[..., TimerController]


@dataclass(frozen=True)
class PhaseChange:
    """Event emitted after a phase is entered and its marker is stored."""
    session_id: str
    cycle_number: int
    total_cycles: int
    phase: CyclePhase
    previous_phase: Optional[str]
    trigger: str
    cycle_id: Optional[str]
    timer: Optional[TimerSnapshot]


class CycleLifecycle:
    """Drives one cycle of a session through its phases.

    Calls are expected from a single thread. Timer progress is applied by
    :meth:`pump`, which runs phase-change and handoff callbacks on the
    calling thread.
    """

    def __init__(
        self,
        *,
        session: SessionRecord,
        cycle_number: int,
        orchestrator: SessionOrchestrator,
        markers: PhaseMarkerStore,
        alerts: Optional[CompletionAlerts] = None,
        timer_factory: Optional[TimerFactory] = None,
        on_phase_change: Optional[Callable[[PhaseChange], None]] = None,
        on_timer_update: Optional[Callable[[TimerSnapshot, str], None]] = None,
        on_handoff: Optional[Callable[[Handoff], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not 1 <= cycle_number <= session.total_cycles:
            raise ValueError(
                f"cycle_number must be between 1 and {session.total_cycles}, "
                f"got {cycle_number}"
            )

        self._session = session
        self._cycle_number = cycle_number
        self._orchestrator = orchestrator
        self._markers = markers
        self._alerts = alerts
        self._timer_factory = timer_factory or self._default_timer_factory
        self._on_phase_change = on_phase_change
        self._on_timer_update = on_timer_update
        self._on_handoff = on_handoff
        self._logger = logger or logging.getLogger("lifecycle")

        self._phase: Optional[CyclePhase] = None
        self._cycle_id: Optional[str] = None
        self._timer: Optional[TimerController] = None
        self._handoff: Optional[Handoff] = None
        self._last_change: Optional[PhaseChange] = None

    @property
    def session_id(self) -> str:
        return self._session.id

    @property
    def cycle_number(self) -> int:
        return self._cycle_number

    @property
    def phase(self) -> Optional[CyclePhase]:
        return self._phase

    @property
    def cycle_id(self) -> Optional[str]:
        return self._cycle_id

    @property
    def timer(self) -> Optional[TimerController]:
        return self._timer

    @property
    def handoff(self) -> Optional[Handoff]:
        return self._handoff

    def snapshot(self) -> PhaseChange:
        """Latest phase change with the current timer state."""
        if self._last_change is None:
            raise InvalidTransitionError("unentered", "snapshot")
        return replace(
            self._last_change,
            timer=self._timer.snapshot() if self._timer is not None else None,
        )

    def enter(self) -> PhaseChange:
        """Resolve the starting phase from the stored cycle and its marker."""
        cycle = self._orchestrator.get_cycle(self._session.id, self._cycle_number)
        marker_phase = self._markers.read_phase(self._session.id, self._cycle_number)
        phase = initial_phase(cycle, marker_phase)
        self._cycle_id = cycle.id if cycle is not None else None
        self._logger.info(
            "Entering cycle %d/%d of session %s in phase %s (marker=%s)",
            self._cycle_number,
            self._session.total_cycles,
            self._session.id,
            phase,
            marker_phase,
        )
        return self._enter_phase(phase, previous_phase=None, trigger=TRIGGER_RESTORED)

    def submit_plan(self, payload: Mapping[str, Any]) -> PhaseChange:
        self._require(TRIGGER_PLAN_SAVED)
        self._cycle_id = self._orchestrator.create_cycle_plan(
            self._session.id,
            self._cycle_number,
            payload,
        )
        return self._advance(TRIGGER_PLAN_SAVED)

    def submit_review(self, payload: Mapping[str, Any]) -> PhaseChange:
        self._require(TRIGGER_REVIEW_SAVED)
        if self._cycle_id is None:
            raise InvalidTransitionError(self._phase or PHASE_REVIEWING, TRIGGER_REVIEW_SAVED)
        self._orchestrator.create_cycle_review(self._cycle_id, payload)
        return self._advance(TRIGGER_REVIEW_SAVED)

    def timer_action(self, action: str) -> TimerActionResult:
        """Forward start/pause/resume/finish to the timer of the current phase."""
        timer = self._timer
        if timer is None or self._handoff is not None:
            raise InvalidTransitionError(self._phase or PHASE_PLANNING, f"timer:{action}")
        result = timer.apply(action)
        self._logger.debug(
            "Timer action %s in %s: accepted=%s reason=%s",
            action,
            self._phase,
            result.accepted,
            result.reason,
        )
        if result.accepted and self._timer is timer:
            self._emit_timer_update(result.snapshot, action)
        return result

    def pump(self) -> int:
        """Apply queued countdown progress; returns the number of messages read."""
        if self._timer is None:
            return 0
        return self._timer.drain()

    def close(self) -> None:
        self._close_timer()

    def _require(self, trigger: str) -> None:
        phase = self._phase
        if phase is None or self._handoff is not None or not is_allowed(phase, trigger):
            raise InvalidTransitionError(phase or "unentered", trigger)

    def _advance(self, trigger: str) -> PhaseChange:
        previous = self._phase
        if previous is None:
            raise InvalidTransitionError("unentered", trigger)
        target = next_phase(previous, trigger)
        if target is None:
            raise InvalidTransitionError(previous, trigger)
        return self._enter_phase(target, previous_phase=previous, trigger=trigger)

    def _enter_phase(
        self,
        phase: CyclePhase,
        *,
        previous_phase: Optional[str],
        trigger: str,
    ) -> PhaseChange:
        self._markers.write_phase(self._session.id, self._cycle_number, phase)
        self._close_timer()
        self._phase = phase
        if phase == PHASE_WORKING:
            self._timer = self._build_timer(
                self._session.cycle_duration_seconds,
                LABEL_WORK,
                TRIGGER_WORK_COMPLETED,
            )
        elif phase == PHASE_BREAKING:
            self._timer = self._build_timer(
                self._session.break_duration_seconds,
                LABEL_BREAK,
                TRIGGER_BREAK_COMPLETED,
            )
        if self._timer is not None:
            self._timer.start()

        change = self._phase_change(phase, previous_phase=previous_phase, trigger=trigger)
        self._last_change = change
        if previous_phase is not None:
            self._logger.info(
                "Cycle %d of session %s: %s -> %s (%s)",
                self._cycle_number,
                self._session.id,
                previous_phase,
                phase,
                trigger,
            )
        if self._on_phase_change is not None:
            self._on_phase_change(change)
        return change

    def _build_timer(self, duration_seconds: int, label: str, trigger: str) -> TimerController:
        def on_tick(snapshot: TimerSnapshot) -> None:
            self._emit_timer_update(snapshot, ACTION_TICK)

        def on_complete(snapshot: TimerSnapshot) -> None:
            self._emit_timer_update(snapshot, ACTION_COMPLETED)
            self._on_timer_complete(trigger)

        return self._timer_factory(
            duration_seconds=duration_seconds,
            label=label,
            on_tick=on_tick,
            on_complete=on_complete,
        )

    def _default_timer_factory(self, **kwargs: Any) -> TimerController:
        return TimerController(alerts=self._alerts, **kwargs)

    def _on_timer_complete(self, trigger: str) -> None:
        if self._handoff is not None:
            return
        if trigger == TRIGGER_WORK_COMPLETED and self._phase == PHASE_WORKING:
            self._advance(TRIGGER_WORK_COMPLETED)
        elif trigger == TRIGGER_BREAK_COMPLETED and self._phase == PHASE_BREAKING:
            self._complete_break()

    def _complete_break(self) -> None:
        next_phase(PHASE_BREAKING, TRIGGER_BREAK_COMPLETED)
        handoff = resolve_handoff(
            self._session.id,
            self._cycle_number,
            self._session.total_cycles,
        )
        self._handoff = handoff
        self._close_timer()
        # A completed cycle re-enters from its record, so its marker is spent.
        try:
            self._markers.clear(self._session.id, self._cycle_number)
        except MarkerStoreError as error:
            self._logger.warning(
                "Failed to clear phase marker for cycle %d: %s",
                self._cycle_number,
                error,
            )
        self._logger.info(
            "Cycle %d of session %s handed off to %s",
            self._cycle_number,
            self._session.id,
            handoff.route,
        )
        if self._on_handoff is not None:
            self._on_handoff(handoff)

    def _emit_timer_update(self, snapshot: TimerSnapshot, action: str) -> None:
        if self._on_timer_update is not None:
            self._on_timer_update(snapshot, action)

    def _close_timer(self) -> None:
        if self._timer is not None:
            self._timer.close()
            self._timer = None

    def _phase_change(
        self,
        phase: CyclePhase,
        *,
        previous_phase: Optional[str],
        trigger: str,
    ) -> PhaseChange:
        return PhaseChange(
            session_id=self._session.id,
            cycle_number=self._cycle_number,
            total_cycles=self._session.total_cycles,
            phase=phase,
            previous_phase=previous_phase,
            trigger=trigger,
            cycle_id=self._cycle_id,
            timer=self._timer.snapshot() if self._timer is not None else None,
        )
