import logging
import signal
from pathlib import Path
from queue import Queue
from typing import Any, Optional

from app_config import (
    AlertSettings,
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)
from lifecycle import PhaseMarkerStore
from runtime import RuntimeBootstrap, RuntimeEngine
from server import ServerConfigurationError, UIServer, UIServerConfig
from sessions import PersistenceError, SessionStore, StoreConfig
from timer import NotifierLike, ToneOutputLike


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("runtime")


def setup_signal_handlers(engine: RuntimeEngine, logger: logging.Logger) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        engine.request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_tone_output(
    settings: AlertSettings,
    logger: logging.Logger,
) -> Optional[ToneOutputLike]:
    if not settings.tone_enabled:
        return None
    try:
        # PortAudio is loaded on import; a host without audio still runs.
        from timer.tone import SoundDeviceToneOutput
    except (ImportError, OSError) as error:
        logger.warning("Completion tone disabled: %s", error)
        return None
    return SoundDeviceToneOutput(
        frequency_hz=settings.tone_frequency_hz,
        duration_seconds=settings.tone_duration_seconds,
        volume=settings.tone_volume,
        output_device_index=settings.output_device,
        logger=logging.getLogger("timer.tone"),
    )


def build_notifiers(settings: AlertSettings) -> tuple[NotifierLike, ...]:
    if not settings.desktop_notifications:
        return ()
    from timer.notifications import DesktopNotifier

    return (
        DesktopNotifier(
            command=settings.notify_command,
            logger=logging.getLogger("timer.notifications"),
        ),
    )


def main() -> int:
    """Run the work cycle runtime with its UI server."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(app_config.logging.level)

    store = SessionStore(
        StoreConfig(path=Path(app_config.storage.database_file)),
        logger=logging.getLogger("sessions.store"),
    )
    try:
        store.init_db()
    except PersistenceError as error:
        logger.error("Session database error: %s", error)
        return 1

    markers = PhaseMarkerStore(
        Path(app_config.storage.marker_file) if app_config.storage.marker_file else None,
        logger=logging.getLogger("lifecycle.markers"),
    )

    command_queue: Queue[Any] = Queue()

    # Optional UI server for static page + websocket commands
    ui_server: Optional[UIServer] = None
    ui_server_config: Optional[UIServerConfig] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")

    if ui_server_config and ui_server_config.enabled:
        try:
            ui_server = UIServer(
                config=ui_server_config,
                on_command=command_queue.put,
                logger=logging.getLogger("ui_server"),
            )
            logger.info("Starting UI server...")
            ui_server.start(timeout_seconds=5.0)
            logger.info(
                "UI server ready at http://%s:%d",
                ui_server.host,
                ui_server.port,
            )
        except Exception as error:
            logger.error("UI server startup failed: %s", error)
            logger.warning("Continuing without UI server.")
            ui_server = None

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            store=store,
            markers=markers,
            command_queue=command_queue,
            ui_server=ui_server,
            tone=build_tone_output(app_config.alerts, logger),
            notifiers=build_notifiers(app_config.alerts),
        )
    )
    setup_signal_handlers(engine, logger)
    return engine.run()


if __name__ == "__main__":
    raise SystemExit(main())
