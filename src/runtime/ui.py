from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import (
    EVENT_ERROR,
    EVENT_HANDOFF,
    EVENT_NOTIFICATION,
    EVENT_NOTIFICATION_PERMISSION,
    EVENT_PHASE,
    EVENT_SESSION,
    EVENT_TIMER,
)
from lifecycle import Handoff, PhaseChange
from sessions import SessionRecord
from timer import TimerSnapshot


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...

    def forget(self, event_type: str) -> None:
        ...


def timer_payload(snapshot: TimerSnapshot) -> dict[str, Any]:
    return {
        "phase": snapshot.phase,
        "label": snapshot.label,
        "duration_seconds": snapshot.duration_seconds,
        "remaining_seconds": snapshot.remaining_seconds,
        "running": snapshot.running,
    }


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def forget(self, event_type: str) -> None:
        if self._ui_server:
            self._ui_server.forget(event_type)

    def publish_session(self, session: SessionRecord) -> None:
        self.publish(
            EVENT_SESSION,
            session_id=session.id,
            status=session.status,
            total_cycles=session.total_cycles,
            cycle_duration_minutes=session.cycle_duration_minutes,
            break_duration_minutes=session.break_duration_minutes,
            started_at=session.started_at,
            completed_at=session.completed_at,
        )

    def publish_phase_update(
        self,
        change: PhaseChange,
        *,
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "session_id": change.session_id,
            "cycle_number": change.cycle_number,
            "total_cycles": change.total_cycles,
            "phase": change.phase,
            "trigger": change.trigger,
            "cycle_id": change.cycle_id,
        }
        if change.previous_phase:
            payload["previous_phase"] = change.previous_phase
        if message:
            payload["message"] = message
        self.publish(EVENT_PHASE, **payload)

        if change.timer is None:
            self.forget(EVENT_TIMER)

    def publish_timer_update(
        self,
        snapshot: TimerSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {"action": action, **timer_payload(snapshot)}
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if message:
            payload["message"] = message
        self.publish(EVENT_TIMER, **payload)

    def publish_handoff(self, handoff: Handoff) -> None:
        self.publish(
            EVENT_HANDOFF,
            target=handoff.target,
            session_id=handoff.session_id,
            cycle_number=handoff.cycle_number,
            route=handoff.route,
        )

    def publish_error(
        self,
        kind: str,
        message: str,
        *,
        command: Optional[str] = None,
        field_errors: Optional[dict[str, str]] = None,
    ) -> None:
        payload: dict[str, Any] = {"kind": kind, "message": message}
        if command:
            payload["command"] = command
        if field_errors:
            payload["field_errors"] = field_errors
        self.publish(EVENT_ERROR, **payload)


class BrowserNotifier:
    """Notification backend that asks connected UI clients to show the alert."""

    def __init__(self, ui: RuntimeUIPublisher):
        self._ui = ui

    def request_permission(self) -> None:
        self._ui.publish(EVENT_NOTIFICATION_PERMISSION)

    def notify(self, title: str, body: str) -> None:
        self._ui.publish(EVENT_NOTIFICATION, title=title, body=body)

    def close(self) -> None:
        pass
