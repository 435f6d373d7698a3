from .engine import DEFAULT_POLL_INTERVAL_SECONDS, CountdownEngine, CountdownRun
from .messages import (
    CountdownCompleted,
    CountdownMessage,
    CountdownTick,
    MessagePublisher,
    QueueMessagePublisher,
)

__all__ = [
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "CountdownCompleted",
    "CountdownEngine",
    "CountdownMessage",
    "CountdownRun",
    "CountdownTick",
    "MessagePublisher",
    "QueueMessagePublisher",
]
