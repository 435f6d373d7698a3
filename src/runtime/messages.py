"""Status and rejection text builders for cycle and timer updates."""

from __future__ import annotations

from lifecycle import (
    PHASE_BREAKING,
    PHASE_PLANNING,
    PHASE_REVIEWING,
    PHASE_WORKING,
    Handoff,
    PhaseChange,
)
from lifecycle.constants import HANDOFF_DEBRIEF
from timer import TimerSnapshot
from timer.constants import (
    ACTION_FINISH,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    PHASE_COMPLETED,
    PHASE_PAUSED,
    PHASE_RUNNING,
    REASON_ALREADY_COMPLETED,
    REASON_ALREADY_STARTED,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
)

_PHASE_TEXT = {
    PHASE_PLANNING: "Plan your cycle",
    PHASE_WORKING: "Work time",
    PHASE_REVIEWING: "Review your cycle",
    PHASE_BREAKING: "Break time",
}


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def timer_status_message(snapshot: TimerSnapshot) -> str:
    if snapshot.phase == PHASE_RUNNING:
        return f"{snapshot.label} running ({format_duration(snapshot.remaining_seconds)} left)"
    if snapshot.phase == PHASE_PAUSED:
        return f"{snapshot.label} paused ({format_duration(snapshot.remaining_seconds)} left)"
    if snapshot.phase == PHASE_COMPLETED:
        return f"{snapshot.label} completed"
    return f"{snapshot.label} ready ({format_duration(snapshot.duration_seconds)})"


def phase_status_message(change: PhaseChange) -> str:
    text = _PHASE_TEXT.get(change.phase, change.phase)
    return f"Cycle {change.cycle_number} of {change.total_cycles}: {text}"


def handoff_message(handoff: Handoff) -> str:
    if handoff.target == HANDOFF_DEBRIEF:
        return "All cycles done. Time for the session debrief."
    return f"Break over. On to cycle {handoff.cycle_number}."


def timer_rejection_text(action: str, reason: str) -> str:
    """Return text explaining why a timer action had no effect."""
    if reason == REASON_ALREADY_STARTED and action == ACTION_START:
        return "The timer has already been started."
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "The timer is not running."
    if reason == REASON_NOT_PAUSED and action == ACTION_RESUME:
        return "The timer is not paused."
    if reason == REASON_ALREADY_COMPLETED and action == ACTION_FINISH:
        return "The timer has already finished."
    return "That timer action is not possible right now."
