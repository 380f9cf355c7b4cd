"""
Tests for boundary/ — in-memory store, JSON persistence and the safety allow-list.
"""

import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from boundary.safety import build_safety_allow_list
from boundary.store import BoundaryManager, BoundaryStore


class TestBoundaryStore(unittest.TestCase):

    def test_starts_empty(self):
        store = BoundaryStore()
        self.assertEqual(len(store), 0)
        self.assertNotIn("social.app", store)

    def test_replace_is_wholesale(self):
        store = BoundaryStore(["a.app", "b.app"])
        store.replace(["c.app"])
        self.assertEqual(store.snapshot(), frozenset({"c.app"}))

    def test_duplicates_and_blanks_dropped(self):
        store = BoundaryStore(["a.app", "a.app", "", None])
        self.assertEqual(store.snapshot(), frozenset({"a.app"}))

    def test_single_string_rejected(self):
        """A bare string would otherwise become a set of characters."""
        with self.assertRaises(TypeError):
            BoundaryStore().replace("social.app")

    def test_snapshot_unaffected_by_replace(self):
        store = BoundaryStore(["a.app"])
        before = store.snapshot()
        store.replace(["b.app"])
        self.assertEqual(before, frozenset({"a.app"}))


class TestBoundaryManager(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self._tmpdir.name) / "bounded_apps.json"

    def tearDown(self):
        self._tmpdir.cleanup()

    def test_missing_file_loads_empty(self):
        self.assertEqual(BoundaryManager(self.path).load(), frozenset())

    def test_save_and_reload(self):
        manager = BoundaryManager(self.path)
        self.assertTrue(manager.save({"b.app", "a.app"}))

        with open(self.path) as f:
            self.assertEqual(json.load(f), {"bounded_apps": ["a.app", "b.app"]})

        self.assertEqual(BoundaryManager(self.path).load(), frozenset({"a.app", "b.app"}))

    def test_corrupt_file_loads_empty(self):
        self.path.write_text("{oops")
        self.assertEqual(BoundaryManager(self.path).load(), frozenset())

    def test_wrong_shape_loads_empty(self):
        self.path.write_text(json.dumps({"bounded_apps": "social.app"}))
        self.assertEqual(BoundaryManager(self.path).load(), frozenset())
        self.path.write_text(json.dumps({"something_else": []}))
        self.assertEqual(BoundaryManager(self.path).load(), frozenset())

    def test_add_and_remove(self):
        manager = BoundaryManager(self.path)
        self.assertEqual(manager.add("  social.app "), frozenset({"social.app"}))
        self.assertEqual(manager.add("video.app"), frozenset({"social.app", "video.app"}))
        self.assertEqual(manager.remove("social.app"), frozenset({"video.app"}))
        self.assertEqual(BoundaryManager(self.path).load(), frozenset({"video.app"}))

    def test_add_blank_rejected(self):
        self.assertIsNone(BoundaryManager(self.path).add("   "))
        self.assertFalse(self.path.exists())

    def test_failed_write_keeps_old_file(self):
        """Atomic write: a failure mid-save never truncates the existing file."""
        manager = BoundaryManager(self.path)
        manager.save({"a.app"})

        with patch("boundary.store.json.dump", side_effect=OSError("disk full")):
            self.assertFalse(manager.save({"b.app"}))

        self.assertEqual(BoundaryManager(self.path).load(), frozenset({"a.app"}))
        leftovers = [p for p in self.path.parent.iterdir() if p.suffix == ".tmp"]
        self.assertEqual(leftovers, [])


class TestSafetyAllowList(unittest.TestCase):

    def test_contains_host_and_catalogue(self):
        allow_list = build_safety_allow_list("com.idleman.app", extra=())
        self.assertIn("com.idleman.app", allow_list)
        for identifier in (
            "com.android.settings",
            "com.android.dialer",
            "com.google.android.dialer",
            "com.android.phone",
            "com.android.messaging",
            "com.android.contacts",
            "com.android.launcher3",
            "com.android.systemui",
        ):
            self.assertIn(identifier, allow_list)

    def test_is_immutable(self):
        allow_list = build_safety_allow_list("com.idleman.app", extra=())
        self.assertIsInstance(allow_list, frozenset)

    def test_extra_only_adds(self):
        allow_list = build_safety_allow_list("com.idleman.app", extra=("Finder", ""))
        self.assertIn("Finder", allow_list)
        self.assertNotIn("", allow_list)
        self.assertTrue(config.CRITICAL_APPS <= allow_list)

    def test_default_extra_from_config(self):
        with patch.object(config, "EXTRA_CRITICAL_APPS", frozenset({"explorer"})):
            self.assertIn("explorer", build_safety_allow_list("com.idleman.app"))


if __name__ == "__main__":
    unittest.main()
