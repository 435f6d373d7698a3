"""State, action, and reason constants used by the timer controller."""

from __future__ import annotations

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_PAUSED = "paused"
PHASE_COMPLETED = "completed"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_FINISH = "finish"

ACTION_TICK = "tick"
ACTION_COMPLETED = "completed"
ACTION_SYNC = "sync"

TIMER_ACTIONS: frozenset[str] = frozenset(
    {ACTION_START, ACTION_PAUSE, ACTION_RESUME, ACTION_FINISH}
)

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_FINISHED = "finished"
REASON_ALREADY_STARTED = "already_started"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_ALREADY_COMPLETED = "already_completed"
REASON_UNSUPPORTED_ACTION = "unsupported_action"

LABEL_WORK = "Work Cycle"
LABEL_BREAK = "Break Time"
