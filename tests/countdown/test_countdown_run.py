import unittest

from countdown import CountdownCompleted, CountdownRun, CountdownTick


class CountdownRunTests(unittest.TestCase):
    def test_first_step_reports_full_duration(self) -> None:
        run = CountdownRun(1, target_end=110.0, start_remaining=10)
        self.assertEqual(
            [CountdownTick(run_id=1, remaining_seconds=10)],
            run.step(100.0),
        )

    def test_remaining_rounds_partial_seconds_up(self) -> None:
        run = CountdownRun(1, target_end=110.0, start_remaining=10)
        self.assertEqual(10, run.remaining_at(100.2))
        self.assertEqual(9, run.remaining_at(101.0))
        self.assertEqual(1, run.remaining_at(109.9))

    def test_step_only_emits_when_whole_seconds_change(self) -> None:
        run = CountdownRun(1, target_end=110.0, start_remaining=10)
        run.step(100.0)
        self.assertEqual([], run.step(100.2))
        self.assertEqual([], run.step(100.8))
        self.assertEqual(
            [CountdownTick(run_id=1, remaining_seconds=9)],
            run.step(101.0),
        )

    def test_completion_is_reported_exactly_once(self) -> None:
        run = CountdownRun(7, target_end=103.0, start_remaining=3)
        messages = run.step(103.0)

        self.assertEqual(
            [
                CountdownTick(run_id=7, remaining_seconds=0),
                CountdownCompleted(run_id=7),
            ],
            messages,
        )
        self.assertTrue(run.finished)
        self.assertEqual([], run.step(104.0))
        self.assertEqual([], run.step(200.0))

    def test_remaining_is_clamped_to_start_and_zero(self) -> None:
        run = CountdownRun(1, target_end=110.0, start_remaining=10)
        # A clock that steps backwards must not raise remaining above the start value.
        self.assertEqual(10, run.remaining_at(90.0))
        self.assertEqual(0, run.remaining_at(500.0))

    def test_late_poll_jumps_straight_to_current_value(self) -> None:
        run = CountdownRun(1, target_end=1600.0, start_remaining=1500)
        run.step(100.0)
        self.assertEqual(
            [CountdownTick(run_id=1, remaining_seconds=900)],
            run.step(700.0),
        )

    def test_zero_duration_completes_on_first_step(self) -> None:
        run = CountdownRun(3, target_end=100.0, start_remaining=0)
        messages = run.step(100.0)
        self.assertIsInstance(messages[-1], CountdownCompleted)
        self.assertTrue(run.finished)


if __name__ == "__main__":
    unittest.main()
