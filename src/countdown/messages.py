"""Messages posted by countdown workers back to their owning controller."""

from __future__ import annotations

from dataclasses import dataclass
from queue import Queue
from typing import Protocol


@dataclass(frozen=True)
class CountdownTick:
    """Progress update carrying whole seconds left for one countdown run."""
    run_id: int
    remaining_seconds: int


@dataclass(frozen=True)
class CountdownCompleted:
    """Final message of a countdown run; published exactly once per run."""
    run_id: int


CountdownMessage = CountdownTick | CountdownCompleted


class MessagePublisher(Protocol):
    def publish(self, message: CountdownMessage) -> None: ...


class QueueMessagePublisher:
    """Publisher that pushes countdown messages to a queue."""

    def __init__(self, queue: Queue):
        self._queue = queue

    def publish(self, message: CountdownMessage) -> None:
        self._queue.put(message)
