"""Phase, trigger, and handoff constants for the cycle lifecycle."""

from __future__ import annotations

PHASE_PLANNING = "planning"
PHASE_WORKING = "working"
PHASE_REVIEWING = "reviewing"
PHASE_BREAKING = "breaking"

CYCLE_PHASES: tuple[str, ...] = (
    PHASE_PLANNING,
    PHASE_WORKING,
    PHASE_REVIEWING,
    PHASE_BREAKING,
)

# Phases a persisted marker may restore into; planning is never restored.
RESTORABLE_PHASES: frozenset[str] = frozenset(
    {PHASE_WORKING, PHASE_REVIEWING, PHASE_BREAKING}
)

TRIGGER_PLAN_SAVED = "plan_saved"
TRIGGER_WORK_COMPLETED = "work_completed"
TRIGGER_REVIEW_SAVED = "review_saved"
TRIGGER_BREAK_COMPLETED = "break_completed"
TRIGGER_RESTORED = "restored"

HANDOFF_NEXT_CYCLE = "next_cycle"
HANDOFF_DEBRIEF = "debrief"
