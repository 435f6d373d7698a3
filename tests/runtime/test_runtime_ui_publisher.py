import sys
import types
import unittest
from pathlib import Path

from lifecycle import Handoff, PhaseChange
from timer import TimerSnapshot

# Import runtime.ui without executing src/runtime/__init__.py.
_RUNTIME_DIR = Path(__file__).resolve().parents[2] / "src" / "runtime"
if "runtime" not in sys.modules:
    _pkg = types.ModuleType("runtime")
    _pkg.__path__ = [str(_RUNTIME_DIR)]  # type: ignore[attr-defined]
    sys.modules["runtime"] = _pkg

from runtime.ui import BrowserNotifier, RuntimeUIPublisher


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.states: list[tuple[str, str | None, dict[str, object]]] = []
        self.forgotten: list[str] = []

    def publish(self, event_type: str, **payload: object) -> None:
        self.events.append((event_type, payload))

    def publish_state(self, state: str, *, message: str | None = None, **payload: object) -> None:
        self.states.append((state, message, payload))

    def forget(self, event_type: str) -> None:
        self.forgotten.append(event_type)


def _change(phase: str, timer: TimerSnapshot | None) -> PhaseChange:
    return PhaseChange(
        session_id="s1",
        cycle_number=2,
        total_cycles=3,
        phase=phase,  # type: ignore[arg-type]
        previous_phase="working",
        trigger="work_completed",
        cycle_id="c2",
        timer=timer,
    )


class RuntimeUIPublisherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.server = _UIServerStub()
        self.ui = RuntimeUIPublisher(self.server)

    def test_phase_without_timer_forgets_sticky_timer(self) -> None:
        self.ui.publish_phase_update(_change("reviewing", None), message="Review")

        event_type, payload = self.server.events[0]
        self.assertEqual("phase", event_type)
        self.assertEqual("reviewing", payload["phase"])
        self.assertEqual("working", payload["previous_phase"])
        self.assertEqual("Review", payload["message"])
        self.assertEqual(["timer"], self.server.forgotten)

    def test_phase_with_timer_keeps_sticky_timer(self) -> None:
        snapshot = TimerSnapshot("idle", "Break Time", 600, 600)
        self.ui.publish_phase_update(_change("breaking", snapshot))
        self.assertEqual([], self.server.forgotten)

    def test_timer_update_flattens_snapshot(self) -> None:
        snapshot = TimerSnapshot("running", "Work Cycle", 1500, 900)
        self.ui.publish_timer_update(snapshot, action="tick", accepted=True)

        self.assertEqual(
            (
                "timer",
                {
                    "action": "tick",
                    "phase": "running",
                    "label": "Work Cycle",
                    "duration_seconds": 1500,
                    "remaining_seconds": 900,
                    "running": True,
                    "accepted": True,
                },
            ),
            self.server.events[0],
        )

    def test_handoff_carries_route(self) -> None:
        self.ui.publish_handoff(Handoff(target="next_cycle", session_id="s1", cycle_number=3))
        _, payload = self.server.events[0]
        self.assertEqual("/session/s1/work/cycle/3", payload["route"])

    def test_error_includes_field_errors_only_when_present(self) -> None:
        self.ui.publish_error("validation", "Invalid", command="submit_plan", field_errors={"goal": "Required"})
        self.ui.publish_error("persistence", "Disk full")

        self.assertEqual({"goal": "Required"}, self.server.events[0][1]["field_errors"])
        self.assertEqual({"kind": "persistence", "message": "Disk full"}, self.server.events[1][1])

    def test_publisher_without_server_is_noop(self) -> None:
        ui = RuntimeUIPublisher(None)
        ui.publish("phase", phase="planning")
        ui.publish_state("idle", message="Ready")
        ui.forget("timer")


class BrowserNotifierTests(unittest.TestCase):
    def test_permission_and_notification_events(self) -> None:
        server = _UIServerStub()
        notifier = BrowserNotifier(RuntimeUIPublisher(server))

        notifier.request_permission()
        notifier.notify("Work Cycle Completed!", "Time to move to the next step.")

        self.assertEqual(
            [
                ("notification_permission", {}),
                (
                    "notification",
                    {
                        "title": "Work Cycle Completed!",
                        "body": "Time to move to the next step.",
                    },
                ),
            ],
            server.events,
        )


if __name__ == "__main__":
    unittest.main()
