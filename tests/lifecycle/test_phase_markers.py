import json
import tempfile
import unittest
from pathlib import Path

from lifecycle import MarkerStoreError, PhaseMarkerStore, marker_key


class PhaseMarkerStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "state" / "markers.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_key_format(self) -> None:
        self.assertEqual("cycle-abc-2", marker_key("abc", 2))

    def test_in_memory_store_round_trip(self) -> None:
        store = PhaseMarkerStore()
        self.assertIsNone(store.read_phase("s1", 1))
        store.write_phase("s1", 1, "reviewing")
        self.assertEqual("reviewing", store.read_phase("s1", 1))
        self.assertIsNone(store.read_phase("s1", 2))

    def test_file_store_survives_new_instance(self) -> None:
        PhaseMarkerStore(self.path).write_phase("s1", 3, "breaking")

        self.assertEqual("breaking", PhaseMarkerStore(self.path).read_phase("s1", 3))
        self.assertEqual(
            {"cycle-s1-3": {"phase": "breaking"}},
            json.loads(self.path.read_text(encoding="utf-8")),
        )

    def test_write_keeps_other_keys(self) -> None:
        store = PhaseMarkerStore(self.path)
        store.write_phase("s1", 1, "working")
        store.write_phase("s1", 2, "planning")
        store.write_phase("s1", 1, "reviewing")

        self.assertEqual("reviewing", store.read_phase("s1", 1))
        self.assertEqual("planning", store.read_phase("s1", 2))
        leftovers = [p.name for p in self.path.parent.iterdir() if p.name != self.path.name]
        self.assertEqual([], leftovers)

    def test_unknown_phase_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PhaseMarkerStore().write_phase("s1", 1, "napping")

    def test_corrupt_file_reads_as_missing(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        store = PhaseMarkerStore(self.path)

        with self.assertLogs("lifecycle.markers", level="WARNING"):
            self.assertIsNone(store.read_phase("s1", 1))

        store.write_phase("s1", 1, "working")
        self.assertEqual("working", store.read_phase("s1", 1))

    def test_invalid_entry_reads_as_missing(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text(
            json.dumps({"cycle-s1-1": {"phase": "lunch"}, "cycle-s1-2": "working"}),
            encoding="utf-8",
        )
        store = PhaseMarkerStore(self.path)

        with self.assertLogs("lifecycle.markers", level="WARNING"):
            self.assertIsNone(store.read_phase("s1", 1))
            self.assertIsNone(store.read_phase("s1", 2))

    def test_non_object_file_reads_as_missing(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2, 3]", encoding="utf-8")
        with self.assertLogs("lifecycle.markers", level="WARNING"):
            self.assertIsNone(PhaseMarkerStore(self.path).read_phase("s1", 1))

    def test_clear_removes_only_that_cycle(self) -> None:
        store = PhaseMarkerStore(self.path)
        store.write_phase("s1", 1, "working")
        store.write_phase("s1", 2, "working")
        store.clear("s1", 1)

        self.assertIsNone(store.read_phase("s1", 1))
        self.assertEqual("working", store.read_phase("s1", 2))

    def test_unwritable_location_raises_marker_store_error(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = PhaseMarkerStore(blocker / "markers.json")

        with self.assertRaises(MarkerStoreError):
            store.write_phase("s1", 1, "working")


if __name__ == "__main__":
    unittest.main()
