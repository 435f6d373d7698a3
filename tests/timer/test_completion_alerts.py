import unittest
from unittest.mock import Mock

from timer import AlertError, CompletionAlerts


class CompletionAlertsTests(unittest.TestCase):
    def test_announce_notifies_every_backend_then_plays_tone(self) -> None:
        calls = []
        first = Mock()
        first.notify.side_effect = lambda title, body: calls.append(("first", title, body))
        second = Mock()
        second.notify.side_effect = lambda title, body: calls.append(("second", title, body))
        tone = Mock()
        tone.play_tone.side_effect = lambda: calls.append(("tone",))

        CompletionAlerts(tone=tone, notifiers=[first, second]).announce("Done!", "Next.")

        self.assertEqual(
            [("first", "Done!", "Next."), ("second", "Done!", "Next."), ("tone",)],
            calls,
        )

    def test_failing_notifier_does_not_block_others(self) -> None:
        broken = Mock()
        broken.notify.side_effect = AlertError("no display")
        healthy = Mock()
        tone = Mock()

        with self.assertLogs("timer.alerts", level="WARNING") as logs:
            CompletionAlerts(tone=tone, notifiers=[broken, healthy]).announce("a", "b")

        healthy.notify.assert_called_once_with("a", "b")
        tone.play_tone.assert_called_once_with()
        self.assertIn("Notification failed", logs.output[0])

    def test_tone_failure_is_logged_not_raised(self) -> None:
        tone = Mock()
        tone.play_tone.side_effect = AlertError("device busy")

        with self.assertLogs("timer.alerts", level="WARNING") as logs:
            CompletionAlerts(tone=tone).announce("a", "b")

        self.assertIn("Completion tone failed", logs.output[0])

    def test_permission_request_failures_are_swallowed(self) -> None:
        broken = Mock()
        broken.request_permission.side_effect = RuntimeError("denied")
        healthy = Mock()

        CompletionAlerts(notifiers=[broken, healthy]).request_permission()

        healthy.request_permission.assert_called_once_with()

    def test_close_reaches_every_notifier(self) -> None:
        broken = Mock()
        broken.close.side_effect = RuntimeError("already closed")
        healthy = Mock()

        with self.assertLogs("timer.alerts", level="WARNING"):
            CompletionAlerts(notifiers=[broken, healthy]).close()

        healthy.close.assert_called_once_with()

    def test_announce_without_backends_is_noop(self) -> None:
        CompletionAlerts().announce("a", "b")


if __name__ == "__main__":
    unittest.main()
