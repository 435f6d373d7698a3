from .constants import (
    CYCLE_PHASES,
    HANDOFF_DEBRIEF,
    HANDOFF_NEXT_CYCLE,
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
from .machine import CycleLifecycle, PhaseChange, TimerFactory
from .markers import MarkerStoreError, PhaseMarkerStore, marker_key
from .transitions import (
    TRANSITIONS,
    CyclePhase,
    Handoff,
    InvalidTransitionError,
    initial_phase,
    is_allowed,
    next_phase,
    resolve_handoff,
)

__all__ = [
    "CYCLE_PHASES",
    "HANDOFF_DEBRIEF",
    "HANDOFF_NEXT_CYCLE",
    "PHASE_BREAKING",
    "PHASE_PLANNING",
    "PHASE_REVIEWING",
    "PHASE_WORKING",
    "TRANSITIONS",
    "TRIGGER_BREAK_COMPLETED",
    "TRIGGER_PLAN_SAVED",
    "TRIGGER_RESTORED",
    "TRIGGER_REVIEW_SAVED",
    "TRIGGER_WORK_COMPLETED",
    "CycleLifecycle",
    "CyclePhase",
    "Handoff",
    "InvalidTransitionError",
    "MarkerStoreError",
    "PhaseChange",
    "PhaseMarkerStore",
    "TimerFactory",
    "initial_phase",
    "is_allowed",
    "marker_key",
    "next_phase",
    "resolve_handoff",
]
