"""Dispatcher that executes UI commands against sessions and the active cycle."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from app_config_schema import SessionSettings
from contracts.ui_protocol import (
    COMMAND_CREATE_SESSION,
    COMMAND_OPEN_CYCLE,
    COMMAND_SUBMIT_DEBRIEF,
    COMMAND_SUBMIT_PLAN,
    COMMAND_SUBMIT_REVIEW,
    COMMAND_SYNC,
    COMMAND_TIMER,
    ERROR_COMMAND,
    ERROR_INVALID_STATE,
    ERROR_NOT_FOUND,
    ERROR_PERSISTENCE,
    ERROR_VALIDATION,
    STATE_DEBRIEF,
    STATE_IDLE,
)
from lifecycle import (
    HANDOFF_DEBRIEF,
    CycleLifecycle,
    Handoff,
    InvalidTransitionError,
    MarkerStoreError,
    PhaseChange,
    PhaseMarkerStore,
    TimerFactory,
)
from sessions import (
    STATUS_COMPLETED,
    PersistenceError,
    SessionNotFoundError,
    SessionOrchestrator,
    SessionRecord,
    ValidationError,
)
from timer import TimerSnapshot
from timer.constants import ACTION_SYNC, TIMER_ACTIONS

from .messages import (
    handoff_message,
    phase_status_message,
    timer_rejection_text,
    timer_status_message,
)
from .ui import RuntimeUIPublisher

LifecycleFactory = Callable[..., CycleLifecycle]


class CommandError(Exception):
    """Raised for commands that are malformed or not applicable right now."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(message)


class CommandDispatcher:
    """Routes UI commands to the session orchestrator and cycle lifecycle.

    All methods run on the runtime thread. Handoffs raised while a command or
    a timer pump is running are applied once that call returns.
    """

    def __init__(
        self,
        *,
        orchestrator: SessionOrchestrator,
        markers: PhaseMarkerStore,
        ui: RuntimeUIPublisher,
        session_defaults: Optional[SessionSettings] = None,
        timer_factory: Optional[TimerFactory] = None,
        lifecycle_factory: Optional[LifecycleFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._orchestrator = orchestrator
        self._markers = markers
        self._ui = ui
        self._session_defaults = session_defaults or SessionSettings()
        self._timer_factory = timer_factory
        self._lifecycle_factory = lifecycle_factory or CycleLifecycle
        self._logger = logger or logging.getLogger("runtime")

        self._session: Optional[SessionRecord] = None
        self._lifecycle: Optional[CycleLifecycle] = None
        self._pending_handoff: Optional[Handoff] = None

    @property
    def session(self) -> Optional[SessionRecord]:
        return self._session

    @property
    def lifecycle(self) -> Optional[CycleLifecycle]:
        return self._lifecycle

    def handle(self, command: Mapping[str, Any]) -> bool:
        """Execute one command; failures are published as `error` events.

        Returns ``True`` when the command succeeded.
        """
        name = command.get("command")
        try:
            self._dispatch(str(name), command)
        except ValidationError as error:
            self._report(name, ERROR_VALIDATION, str(error), field_errors=error.field_errors)
            return False
        except SessionNotFoundError as error:
            self._report(name, ERROR_NOT_FOUND, str(error))
            return False
        except (PersistenceError, MarkerStoreError) as error:
            self._report(name, ERROR_PERSISTENCE, str(error))
            return False
        except InvalidTransitionError as error:
            self._report(name, ERROR_INVALID_STATE, str(error))
            return False
        except CommandError as error:
            self._report(name, error.kind, str(error))
            return False
        finally:
            self._apply_pending_handoff()
        return True

    def pump(self) -> int:
        """Deliver queued timer progress for the open cycle."""
        if self._lifecycle is None:
            return 0
        try:
            return self._lifecycle.pump()
        except (PersistenceError, MarkerStoreError) as error:
            self._report(None, ERROR_PERSISTENCE, str(error))
            return 0
        finally:
            self._apply_pending_handoff()

    def close(self) -> None:
        if self._lifecycle is not None:
            self._lifecycle.close()
            self._lifecycle = None

    def _dispatch(self, name: str, command: Mapping[str, Any]) -> None:
        if name == COMMAND_CREATE_SESSION:
            self._create_session(_payload(command))
        elif name == COMMAND_OPEN_CYCLE:
            self._open_cycle(
                _require_str(command, "session_id"),
                _require_int(command, "cycle_number"),
            )
        elif name == COMMAND_SUBMIT_PLAN:
            change = self._require_lifecycle().submit_plan(_payload(command))
            self._logger.info("Plan saved for cycle %d", change.cycle_number)
        elif name == COMMAND_SUBMIT_REVIEW:
            change = self._require_lifecycle().submit_review(_payload(command))
            self._logger.info("Review saved for cycle %d", change.cycle_number)
        elif name == COMMAND_TIMER:
            self._timer_action(_require_str(command, "action"))
        elif name == COMMAND_SUBMIT_DEBRIEF:
            self._submit_debrief(command)
        elif name == COMMAND_SYNC:
            self.sync()
        else:
            raise CommandError(ERROR_COMMAND, f"Unknown command: {name}")

    def sync(self) -> None:
        """Republish the current session, phase, and timer state."""
        if self._session is not None:
            self._ui.publish_session(self._session)
        if self._lifecycle is None:
            return
        change = self._lifecycle.snapshot()
        self._ui.publish_phase_update(change, message=phase_status_message(change))
        if change.timer is not None:
            self._ui.publish_timer_update(change.timer, action=ACTION_SYNC, accepted=True)

    def _create_session(self, payload: dict[str, Any]) -> None:
        defaults = self._session_defaults
        payload.setdefault("cycle_duration_minutes", defaults.cycle_duration_minutes)
        payload.setdefault("break_duration_minutes", defaults.break_duration_minutes)
        payload.setdefault("total_cycles", defaults.total_cycles)
        session = self._orchestrator.create_session(payload)
        self._ui.publish_session(session)
        self._open_cycle(session.id, 1)

    def _open_cycle(self, session_id: str, cycle_number: int) -> None:
        session = self._orchestrator.get_session(session_id)
        if session.status == STATUS_COMPLETED:
            raise CommandError(ERROR_INVALID_STATE, f"Session {session_id} is already completed")
        if not 1 <= cycle_number <= session.total_cycles:
            raise CommandError(
                ERROR_COMMAND,
                f"cycle_number must be between 1 and {session.total_cycles}",
            )

        self.close()
        self._session = session
        self._pending_handoff = None
        kwargs: dict[str, Any] = {}
        if self._timer_factory is not None:
            kwargs["timer_factory"] = self._timer_factory
        lifecycle = self._lifecycle_factory(
            session=session,
            cycle_number=cycle_number,
            orchestrator=self._orchestrator,
            markers=self._markers,
            on_phase_change=self._on_phase_change,
            on_timer_update=self._on_timer_update,
            on_handoff=self._on_handoff,
            logger=logging.getLogger("lifecycle"),
            **kwargs,
        )
        self._lifecycle = lifecycle
        try:
            lifecycle.enter()
        except Exception:
            lifecycle.close()
            self._lifecycle = None
            raise

    def _timer_action(self, action: str) -> None:
        if action not in TIMER_ACTIONS:
            raise CommandError(ERROR_COMMAND, f"Unsupported timer action: {action}")
        result = self._require_lifecycle().timer_action(action)
        if not result.accepted:
            self._ui.publish_timer_update(
                result.snapshot,
                action=action,
                accepted=False,
                reason=result.reason,
                message=timer_rejection_text(action, result.reason),
            )

    def _submit_debrief(self, command: Mapping[str, Any]) -> None:
        raw_session_id = command.get("session_id")
        if isinstance(raw_session_id, str) and raw_session_id.strip():
            session_id = raw_session_id.strip()
        elif self._session is not None:
            session_id = self._session.id
        else:
            raise CommandError(ERROR_INVALID_STATE, "No session is open")

        self._orchestrator.complete_session(session_id, _payload(command))
        session = self._orchestrator.get_session(session_id)
        self.close()
        self._session = session
        self._ui.publish_session(session)
        self._ui.publish_state(STATE_IDLE, message="Session complete. Well done!")

    def _require_lifecycle(self) -> CycleLifecycle:
        if self._lifecycle is None:
            raise CommandError(ERROR_INVALID_STATE, "No cycle is open")
        return self._lifecycle

    def _on_phase_change(self, change: PhaseChange) -> None:
        self._ui.publish_phase_update(change, message=phase_status_message(change))
        self._ui.publish_state(change.phase, message=phase_status_message(change))
        if change.timer is not None:
            self._ui.publish_timer_update(
                change.timer,
                action=ACTION_SYNC,
                accepted=True,
                message=timer_status_message(change.timer),
            )

    def _on_timer_update(self, snapshot: TimerSnapshot, action: str) -> None:
        self._ui.publish_timer_update(
            snapshot,
            action=action,
            accepted=True,
            message=timer_status_message(snapshot),
        )

    def _on_handoff(self, handoff: Handoff) -> None:
        self._pending_handoff = handoff

    def _apply_pending_handoff(self) -> None:
        handoff = self._pending_handoff
        if handoff is None:
            return
        self._pending_handoff = None
        self._ui.publish_handoff(handoff)

        if handoff.target == HANDOFF_DEBRIEF:
            self.close()
            self._ui.publish_state(STATE_DEBRIEF, message=handoff_message(handoff))
            return

        self._ui.publish_state(STATE_IDLE, message=handoff_message(handoff))
        self.handle(
            {
                "command": COMMAND_OPEN_CYCLE,
                "session_id": handoff.session_id,
                "cycle_number": handoff.cycle_number,
            }
        )

    def _report(
        self,
        command: Any,
        kind: str,
        message: str,
        *,
        field_errors: Optional[dict[str, str]] = None,
    ) -> None:
        self._logger.warning("Command %s failed (%s): %s", command, kind, message)
        self._ui.publish_error(
            kind,
            message,
            command=command if isinstance(command, str) else None,
            field_errors=field_errors,
        )


def _payload(command: Mapping[str, Any]) -> dict[str, Any]:
    raw = command.get("payload", {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise CommandError(ERROR_COMMAND, "'payload' must be an object")
    return dict(raw)


def _require_str(command: Mapping[str, Any], field: str) -> str:
    value = command.get(field)
    if not isinstance(value, str) or not value.strip():
        raise CommandError(ERROR_COMMAND, f"'{field}' must be a non-empty string")
    return value.strip()


def _require_int(command: Mapping[str, Any], field: str) -> int:
    value = command.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandError(ERROR_COMMAND, f"'{field}' must be an integer")
    return value
