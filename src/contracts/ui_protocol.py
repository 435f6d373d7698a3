"""Web UI websocket event, command, and state constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_SESSION = "session"
EVENT_PHASE = "phase"
EVENT_TIMER = "timer"
EVENT_HANDOFF = "handoff"
EVENT_NOTIFICATION = "notification"
EVENT_NOTIFICATION_PERMISSION = "notification_permission"
EVENT_ERROR = "error"

# Inbound command names (`{"command": ..., ...}` from the UI)
COMMAND_CREATE_SESSION = "create_session"
COMMAND_OPEN_CYCLE = "open_cycle"
COMMAND_SUBMIT_PLAN = "submit_plan"
COMMAND_SUBMIT_REVIEW = "submit_review"
COMMAND_TIMER = "timer"
COMMAND_SUBMIT_DEBRIEF = "submit_debrief"
COMMAND_SYNC = "sync"

COMMANDS: frozenset[str] = frozenset(
    {
        COMMAND_CREATE_SESSION,
        COMMAND_OPEN_CYCLE,
        COMMAND_SUBMIT_PLAN,
        COMMAND_SUBMIT_REVIEW,
        COMMAND_TIMER,
        COMMAND_SUBMIT_DEBRIEF,
        COMMAND_SYNC,
    }
)

# Error kinds carried by `error` events
ERROR_VALIDATION = "validation"
ERROR_PERSISTENCE = "persistence"
ERROR_NOT_FOUND = "not_found"
ERROR_INVALID_STATE = "invalid_state"
ERROR_COMMAND = "command"

# UI runtime states
STATE_IDLE = "idle"
STATE_PLANNING = "planning"
STATE_WORKING = "working"
STATE_REVIEWING = "reviewing"
STATE_BREAKING = "breaking"
STATE_DEBRIEF = "debrief"
STATE_ERROR = "error"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_SESSION,
        EVENT_PHASE,
        EVENT_TIMER,
        EVENT_HANDOFF,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_SESSION,
    EVENT_PHASE,
    EVENT_TIMER,
    EVENT_HANDOFF,
    EVENT_STATE_UPDATE,
)
