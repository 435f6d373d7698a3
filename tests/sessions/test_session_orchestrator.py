import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock

from sessions import (
    PersistenceError,
    SessionNotFoundError,
    SessionOrchestrator,
    SessionStore,
    StoreConfig,
    ValidationError,
)

_SESSION_FORM = {
    "cycle_duration_minutes": 30,
    "break_duration_minutes": 10,
    "total_cycles": 3,
    "accomplish": "Finish chapter",
    "importance": "Deadline",
    "completion": "Chapter sent",
    "concrete": "Yes",
}
_PLAN_FORM = {
    "goal": "Outline",
    "how_to_start": "List headings",
    "energy_level": "medium",
    "morale_level": "high",
}


class SessionOrchestratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SessionStore(StoreConfig(path=Path(self._tmp.name) / "db.sqlite3"))
        self.store.init_db()
        self.orchestrator = SessionOrchestrator(self.store)

    def tearDown(self) -> None:
        self.store.close()
        self._tmp.cleanup()

    def test_full_session_flow(self) -> None:
        session = self.orchestrator.create_session(_SESSION_FORM)
        cycle_id = self.orchestrator.create_cycle_plan(session.id, 1, _PLAN_FORM)
        self.assertTrue(self.orchestrator.create_cycle_review(cycle_id, {"completed_target": True}))
        self.assertTrue(
            self.orchestrator.complete_session(
                session.id,
                {"done": "a", "compare": "b", "bogged": "c", "went_well": "d"},
            )
        )

        self.assertTrue(self.orchestrator.get_cycle(session.id, 1).is_completed)
        self.assertEqual("completed", self.orchestrator.get_session(session.id).status)

    def test_get_session_raises_for_unknown_id(self) -> None:
        with self.assertRaises(SessionNotFoundError):
            self.orchestrator.get_session("missing")

    def test_validation_failure_stores_nothing(self) -> None:
        session = self.orchestrator.create_session(_SESSION_FORM)
        with self.assertRaises(ValidationError):
            self.orchestrator.create_cycle_plan(session.id, 1, {"goal": "Outline"})
        self.assertIsNone(self.orchestrator.get_cycle(session.id, 1))

    def test_persistence_errors_are_logged_and_reraised(self) -> None:
        store = Mock()
        store.save_cycle_plan.side_effect = PersistenceError("disk full")
        orchestrator = SessionOrchestrator(store)

        with self.assertLogs("sessions", level="ERROR") as logs:
            with self.assertRaises(PersistenceError):
                orchestrator.create_cycle_plan("s1", 1, _PLAN_FORM)
        self.assertIn("disk full", logs.output[0])


if __name__ == "__main__":
    unittest.main()
