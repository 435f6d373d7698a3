import unittest

from sessions import CyclePlan, CycleReview, SessionDebrief, SessionPreparation, ValidationError


def _preparation(**overrides):
    payload = {
        "cycle_duration_minutes": 30,
        "break_duration_minutes": 10,
        "total_cycles": 3,
        "accomplish": "Ship the release notes",
        "importance": "Customers are waiting",
        "completion": "Notes published",
        "concrete": "Yes",
    }
    payload.update(overrides)
    return payload


class SessionPreparationTests(unittest.TestCase):
    def test_valid_payload_trims_text_and_drops_blank_optionals(self) -> None:
        preparation = SessionPreparation.from_payload(
            _preparation(accomplish="  Ship it  ", hazards="   ")
        )
        self.assertEqual("Ship it", preparation.accomplish)
        self.assertIsNone(preparation.hazards)
        self.assertEqual(3, preparation.total_cycles)

    def test_numeric_strings_are_accepted(self) -> None:
        preparation = SessionPreparation.from_payload(
            _preparation(cycle_duration_minutes="25", total_cycles=4.0)
        )
        self.assertEqual(25, preparation.cycle_duration_minutes)
        self.assertEqual(4, preparation.total_cycles)

    def test_every_invalid_field_is_reported_together(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            SessionPreparation.from_payload(
                _preparation(total_cycles=0, break_duration_minutes=True, accomplish="")
            )
        self.assertEqual(
            {
                "total_cycles": "Must be at least 1",
                "break_duration_minutes": "Must be a whole number",
                "accomplish": "Required",
            },
            ctx.exception.field_errors,
        )

    def test_values_above_the_limits_are_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            SessionPreparation.from_payload(
                _preparation(
                    total_cycles=2**63,
                    cycle_duration_minutes=str(10**20),
                    break_duration_minutes=1e300,
                )
            )
        self.assertEqual(
            {
                "total_cycles": "Must be at most 100",
                "cycle_duration_minutes": "Must be at most 1440",
                "break_duration_minutes": "Must be at most 1440",
            },
            ctx.exception.field_errors,
        )

    def test_limits_are_inclusive(self) -> None:
        preparation = SessionPreparation.from_payload(
            _preparation(total_cycles=100, cycle_duration_minutes=1440)
        )
        self.assertEqual(100, preparation.total_cycles)
        self.assertEqual(1440, preparation.cycle_duration_minutes)

    def test_non_mapping_payload_is_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            SessionPreparation.from_payload(["not", "a", "form"])  # type: ignore[arg-type]
        self.assertIn("__root__", ctx.exception.field_errors)

    def test_answers_exclude_settings(self) -> None:
        answers = SessionPreparation.from_payload(_preparation()).answers()
        self.assertNotIn("total_cycles", answers)
        self.assertEqual("Yes", answers["concrete"])


class CycleFormTests(unittest.TestCase):
    def test_plan_levels_are_normalized(self) -> None:
        plan = CyclePlan.from_payload(
            {
                "goal": "Draft intro",
                "how_to_start": "Open the doc",
                "energy_level": "HIGH",
                "morale_level": " low ",
            }
        )
        self.assertEqual("high", plan.energy_level)
        self.assertEqual("low", plan.morale_level)

    def test_plan_rejects_unknown_level(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            CyclePlan.from_payload(
                {
                    "goal": "Draft intro",
                    "how_to_start": "Open the doc",
                    "energy_level": "extreme",
                    "morale_level": "medium",
                }
            )
        self.assertEqual(["energy_level"], list(ctx.exception.field_errors))

    def test_review_requires_boolean_target(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            CycleReview.from_payload({"completed_target": "yes"})
        self.assertIn("completed_target", ctx.exception.field_errors)

    def test_review_optional_fields_must_be_text(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            CycleReview.from_payload({"completed_target": False, "noteworthy": 5})
        self.assertEqual({"noteworthy": "Must be text"}, ctx.exception.field_errors)

    def test_debrief_requires_four_answers(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            SessionDebrief.from_payload({"done": "All of it"})
        self.assertEqual(
            {"compare", "bogged", "went_well"},
            set(ctx.exception.field_errors),
        )


if __name__ == "__main__":
    unittest.main()
