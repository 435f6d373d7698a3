"""Explicit transition table and initialization rules for one cycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from sessions import STATUS_COMPLETED, STATUS_IN_PROGRESS, CycleRecord

from .constants import (
    HANDOFF_DEBRIEF,
    HANDOFF_NEXT_CYCLE,
    PHASE_BREAKING,
    PHASE_PLANNING,
    PHASE_REVIEWING,
    PHASE_WORKING,
    RESTORABLE_PHASES,
    TRIGGER_BREAK_COMPLETED,
    TRIGGER_PLAN_SAVED,
    TRIGGER_REVIEW_SAVED,
    TRIGGER_WORK_COMPLETED,
)

CyclePhase = Literal["planning", "working", "reviewing", "breaking"]


class InvalidTransitionError(Exception):
    """Raised when a trigger is not allowed in the current phase."""

    def __init__(self, phase: str, trigger: str):
        self.phase = phase
        self.trigger = trigger
        super().__init__(f"Trigger '{trigger}' is not allowed in phase '{phase}'")


@dataclass(frozen=True)
class Handoff:
    """Where the cycle page navigates once its break is over."""
    target: Literal["next_cycle", "debrief"]
    session_id: str
    cycle_number: Optional[int] = None

    @property
    def route(self) -> str:
        if self.target == HANDOFF_DEBRIEF:
            return f"/session/{self.session_id}/debrief"
        return f"/session/{self.session_id}/work/cycle/{self.cycle_number}"


# Breaking has no in-cycle successor; its trigger resolves to a Handoff.
TRANSITIONS: dict[tuple[str, str], Optional[str]] = {
    (PHASE_PLANNING, TRIGGER_PLAN_SAVED): PHASE_WORKING,
    (PHASE_WORKING, TRIGGER_WORK_COMPLETED): PHASE_REVIEWING,
    (PHASE_REVIEWING, TRIGGER_REVIEW_SAVED): PHASE_BREAKING,
    (PHASE_BREAKING, TRIGGER_BREAK_COMPLETED): None,
}


def is_allowed(phase: str, trigger: str) -> bool:
    return (phase, trigger) in TRANSITIONS


def next_phase(phase: str, trigger: str) -> Optional[str]:
    """Return the following phase, or ``None`` when the cycle hands off."""
    try:
        return TRANSITIONS[(phase, trigger)]
    except KeyError:
        raise InvalidTransitionError(phase, trigger) from None


def resolve_handoff(session_id: str, cycle_number: int, total_cycles: int) -> Handoff:
    if cycle_number < total_cycles:
        return Handoff(
            target=HANDOFF_NEXT_CYCLE,
            session_id=session_id,
            cycle_number=cycle_number + 1,
        )
    return Handoff(target=HANDOFF_DEBRIEF, session_id=session_id)


def initial_phase(cycle: Optional[CycleRecord], marker_phase: Optional[str]) -> CyclePhase:
    """Pick the phase a cycle page starts in.

    A missing cycle record means nothing was planned yet. An in-progress
    cycle resumes from its marker when the marker names a restorable phase.
    A completed cycle re-enters the break leading into the next one.
    """
    if cycle is None:
        return PHASE_PLANNING
    if cycle.status == STATUS_COMPLETED:
        return PHASE_BREAKING
    if cycle.status == STATUS_IN_PROGRESS and marker_phase in RESTORABLE_PHASES:
        return marker_phase  # type: ignore[return-value]
    return PHASE_WORKING
