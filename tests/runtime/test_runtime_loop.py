import logging
import tempfile
import threading
import time
import unittest
from pathlib import Path
from queue import Queue

from app_config_schema import (
    AlertSettings,
    AppConfig,
    LoggingSettings,
    SessionSettings,
    StorageSettings,
    TimerSettings,
    UIServerSettings,
)
from lifecycle import PhaseMarkerStore
from runtime.loop import RuntimeBootstrap, RuntimeEngine
from sessions import SessionStore, StoreConfig


def _app_config(**alerts) -> AppConfig:
    return AppConfig(
        session=SessionSettings(total_cycles=1),
        timer=TimerSettings(poll_interval_seconds=0.01),
        alerts=AlertSettings(tone_enabled=False, desktop_notifications=False, **alerts),
        storage=StorageSettings(),
        ui_server=UIServerSettings(enabled=False),
        logging=LoggingSettings(),
        source_file="",
    )


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SessionStore(StoreConfig(path=Path(self._tmp.name) / "db.sqlite3"))
        self.queue: Queue = Queue()

    def tearDown(self) -> None:
        self.store.close()
        self._tmp.cleanup()

    def _engine(self) -> RuntimeEngine:
        return RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("runtime"),
                app_config=_app_config(),
                store=self.store,
                markers=PhaseMarkerStore(),
                command_queue=self.queue,
            )
        )

    def test_run_applies_queued_commands_until_stopped(self) -> None:
        results: list[int] = []
        engine: RuntimeEngine | None = None
        ready = threading.Event()

        def run() -> None:
            nonlocal engine
            # sqlite connections stay on the thread that opened them.
            self.store.init_db()
            engine = self._engine()
            ready.set()
            results.append(engine.run())

        self.queue.put("not a command")
        self.queue.put(
            {
                "command": "create_session",
                "payload": {
                    "accomplish": "a",
                    "importance": "b",
                    "completion": "c",
                    "concrete": "d",
                },
            }
        )
        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        self.assertTrue(ready.wait(timeout=2.0))

        deadline = time.monotonic() + 2.0
        while engine.dispatcher.lifecycle is None and time.monotonic() < deadline:
            time.sleep(0.01)
        lifecycle = engine.dispatcher.lifecycle
        engine.request_stop()
        thread.join(timeout=2.0)

        self.assertFalse(thread.is_alive())
        self.assertEqual([0], results)
        self.assertIsNotNone(lifecycle)
        self.assertEqual("planning", lifecycle.phase)
        self.assertEqual(1, engine.dispatcher.session.total_cycles)
        self.assertIsNone(engine.dispatcher.lifecycle)

    def test_run_returns_immediately_when_already_stopped(self) -> None:
        self.store.init_db()
        engine = self._engine()
        engine.request_stop()
        self.assertEqual(0, engine.run())


if __name__ == "__main__":
    unittest.main()
