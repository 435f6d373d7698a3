"""Runtime loop that applies UI commands and delivers timer progress."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Optional

from app_config import AppConfig
from contracts.ui_protocol import EVENT_ERROR, STATE_ERROR, STATE_IDLE
from countdown import CountdownEngine, MessagePublisher
from lifecycle import PhaseMarkerStore
from server import UIServer
from sessions import SessionOrchestrator, SessionStore
from timer import CompletionAlerts, NotifierLike, TimerController, ToneOutputLike

from .commands import CommandDispatcher
from .ui import BrowserNotifier, RuntimeUIPublisher

COMMAND_POLL_TIMEOUT_SECONDS = 0.1


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    store: SessionStore
    markers: PhaseMarkerStore
    command_queue: Queue[Any]
    ui_server: Optional[UIServer] = None
    tone: Optional[ToneOutputLike] = None
    notifiers: tuple[NotifierLike, ...] = field(default_factory=tuple)


class RuntimeEngine:
    """Main runtime loop: one thread owns the open cycle and its timer."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._stop_event = threading.Event()

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        alert_settings = bootstrap.app_config.alerts
        notifiers: list[NotifierLike] = list(bootstrap.notifiers)
        if alert_settings.browser_notifications:
            notifiers.append(BrowserNotifier(self._ui))
        self._alerts = CompletionAlerts(
            tone=bootstrap.tone,
            notifiers=notifiers,
            logger=logging.getLogger("timer.alerts"),
        )

        self._dispatcher = CommandDispatcher(
            orchestrator=SessionOrchestrator(
                bootstrap.store,
                logger=logging.getLogger("sessions"),
            ),
            markers=bootstrap.markers,
            ui=self._ui,
            session_defaults=bootstrap.app_config.session,
            timer_factory=self._build_timer,
            logger=self._logger,
        )

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    def request_stop(self) -> None:
        self._stop_event.set()

    def run(self) -> int:
        self._ui.publish_state(STATE_IDLE, message="Ready to prepare a session")
        self._logger.info("Runtime ready; waiting for UI commands.")

        try:
            while not self._stop_event.is_set():
                self._dispatcher.pump()

                command = self._poll_command()
                if command is None:
                    continue
                self._dispatcher.handle(command)

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            self._ui.publish(
                EVENT_ERROR,
                state=STATE_ERROR,
                message=f"Runtime failed: {error}",
            )
            return 1
        finally:
            self._shutdown()
        return 0

    def _build_timer(self, **kwargs: Any) -> TimerController:
        poll_interval = self._bootstrap.app_config.timer.poll_interval_seconds

        def engine_factory(publisher: MessagePublisher) -> CountdownEngine:
            return CountdownEngine(
                publisher,
                poll_interval_seconds=poll_interval,
                logger=logging.getLogger("countdown"),
            )

        return TimerController(
            alerts=self._alerts,
            engine_factory=engine_factory,
            logger=logging.getLogger("timer"),
            **kwargs,
        )

    def _poll_command(self) -> Optional[dict[str, Any]]:
        try:
            command = self._bootstrap.command_queue.get(
                timeout=COMMAND_POLL_TIMEOUT_SECONDS
            )
        except Empty:
            return None
        if not isinstance(command, dict):
            self._logger.warning("Ignoring non-command item: %s", type(command).__name__)
            return None
        return command

    def _shutdown(self) -> None:
        self._logger.info("Closing open cycle...")
        self._dispatcher.close()
        self._alerts.close()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)

        self._logger.info("Closing session database...")
        self._bootstrap.store.close()
