"""Runtime engine exports."""

from .commands import CommandDispatcher, CommandError
from .loop import RuntimeBootstrap, RuntimeEngine
from .ui import BrowserNotifier, RuntimeUIPublisher

__all__ = [
    "BrowserNotifier",
    "CommandDispatcher",
    "CommandError",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeUIPublisher",
]
