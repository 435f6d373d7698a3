from .alerts import AlertError, CompletionAlerts, NotifierLike, ToneOutputLike
from .controller import (
    TimerAction,
    TimerActionResult,
    TimerController,
    TimerPhase,
    TimerSnapshot,
)

__all__ = [
    "AlertError",
    "CompletionAlerts",
    "NotifierLike",
    "TimerAction",
    "TimerActionResult",
    "TimerController",
    "TimerPhase",
    "TimerSnapshot",
    "ToneOutputLike",
]
