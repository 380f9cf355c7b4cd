"""
Tests for tracking/ — grant ledger, cooldown tracker and preferences.
"""

import json
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from tracking.cooldown import CooldownTracker
from tracking.grants import GrantLedger
from tracking.preferences import Preferences


class TestGrantLedger(unittest.TestCase):

    def test_check_live_grant(self):
        ledger = GrantLedger()
        ledger.grant("social.app", 100)
        self.assertTrue(ledger.check("social.app", 99.9))
        self.assertIn("social.app", ledger)

    def test_check_expired_grant_deletes_it(self):
        """Expiry at exactly now counts as expired."""
        ledger = GrantLedger()
        ledger.grant("social.app", 100)
        self.assertFalse(ledger.check("social.app", 100))
        self.assertNotIn("social.app", ledger)

    def test_check_unknown(self):
        self.assertFalse(GrantLedger().check("social.app", 0))

    def test_active_does_not_delete(self):
        ledger = GrantLedger()
        ledger.grant("old.app", 10)
        ledger.grant("new.app", 50)
        self.assertEqual(list(ledger.active(20)), [("new.app", 50)])
        self.assertIn("old.app", ledger)

    def test_grant_overwrites(self):
        ledger = GrantLedger()
        ledger.grant("social.app", 500)
        ledger.grant("social.app", 200)
        self.assertFalse(ledger.check("social.app", 300))

    def test_revoke(self):
        ledger = GrantLedger()
        ledger.grant("social.app", 500)
        self.assertTrue(ledger.revoke("social.app"))
        self.assertFalse(ledger.revoke("social.app"))


class TestCooldownTracker(unittest.TestCase):

    def test_default_window_from_config(self):
        self.assertEqual(CooldownTracker().window_seconds, config.COOLDOWN_SECONDS)

    def test_zero_window_is_kept(self):
        """An explicit 0 disables cooldown rather than falling back to the default."""
        tracker = CooldownTracker(0)
        tracker.record("a", 10)
        self.assertFalse(tracker.is_cooling_down("a", 10))

    def test_cooling_down_same_identifier(self):
        tracker = CooldownTracker(3)
        tracker.record("a", 10)
        self.assertTrue(tracker.is_cooling_down("a", 12.9))
        self.assertFalse(tracker.is_cooling_down("a", 13))
        self.assertFalse(tracker.is_cooling_down("b", 11))

    def test_record_replaces_previous(self):
        tracker = CooldownTracker(3)
        tracker.record("a", 10)
        tracker.record("b", 11)
        self.assertTrue(tracker.is_cooling_down("b", 11))
        self.assertFalse(tracker.is_cooling_down("a", 11))


class TestPreferences(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self._tmpdir.name) / "prefs.json"
        self.prefs = Preferences(self.path)

    def tearDown(self):
        self._tmpdir.cleanup()

    def test_missing_file_has_no_duration(self):
        self.assertIsNone(self.prefs.get_access_duration_minutes())

    def test_set_and_get_duration(self):
        self.assertTrue(self.prefs.set_access_duration_minutes(12))
        self.assertEqual(self.prefs.get_access_duration_minutes(), 12)
        with open(self.path) as f:
            self.assertEqual(json.load(f)["access_duration_minutes"], 12)

    def test_set_invalid_duration_raises(self):
        for bad in (0, -1, 2.5, True, "5"):
            with self.assertRaises(ValueError):
                self.prefs.set_access_duration_minutes(bad)

    def test_invalid_stored_values_ignored(self):
        for bad in ("ten", 0, -5, 1.5, False, None, [5]):
            self.path.write_text(json.dumps({"access_duration_minutes": bad}))
            self.assertIsNone(self.prefs.get_access_duration_minutes(), bad)

    def test_corrupt_file_ignored(self):
        self.path.write_text("{not json")
        self.assertIsNone(self.prefs.get_access_duration_minutes())
        # Writing replaces the corrupt file
        self.assertTrue(self.prefs.set_last_bounded_package("social.app"))
        self.assertEqual(self.prefs.get_last_bounded_package(), "social.app")

    def test_non_object_file_ignored(self):
        self.path.write_text("[1, 2, 3]")
        self.assertIsNone(self.prefs.get("access_duration_minutes"))

    def test_external_edit_picked_up(self):
        """Each read goes back to disk."""
        self.prefs.set_access_duration_minutes(5)
        Preferences(self.path).set_access_duration_minutes(20)
        self.assertEqual(self.prefs.get_access_duration_minutes(), 20)

    def test_keys_preserved_across_writes(self):
        self.prefs.set_access_duration_minutes(8)
        self.prefs.set_last_bounded_package("social.app")
        self.assertEqual(self.prefs.get_access_duration_minutes(), 8)

    def test_no_temp_files_left(self):
        self.prefs.set_access_duration_minutes(8)
        leftovers = [p for p in self.path.parent.iterdir() if p.suffix == ".tmp"]
        self.assertEqual(leftovers, [])


if __name__ == "__main__":
    unittest.main()
