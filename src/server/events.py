"""Utilities for serializing UI events, parsing UI commands, and sticky state."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from contracts.ui_protocol import COMMANDS, STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


class CommandParseError(ValueError):
    """Raised when an inbound websocket message is not a usable command."""


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_command(raw: str | bytes) -> dict[str, Any]:
    """Decode a ``{"command": ..., ...}`` message sent by the UI."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise CommandParseError("Command must be UTF-8 text") from error
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as error:
        raise CommandParseError(f"Command is not valid JSON: {error.msg}") from error
    except (ValueError, RecursionError) as error:
        raise CommandParseError(f"Command could not be decoded: {error}") from error

    if not isinstance(payload, dict):
        raise CommandParseError("Command must be a JSON object")
    command = payload.get("command")
    if not isinstance(command, str) or not command:
        raise CommandParseError("Command object requires a 'command' string")
    if command not in COMMANDS:
        raise CommandParseError(f"Unknown command: {command}")
    return payload


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def forget(self, event_type: str) -> None:
        with self._lock:
            self._events.pop(event_type, None)

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]
