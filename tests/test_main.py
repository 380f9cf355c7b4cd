"""
Tests for main.py — CLI boundary editing and the IdleMan wiring.
"""

import io
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import MagicMock, patch

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
import main
from boundary.store import BoundaryManager
from core.events import EventKind, ForegroundEvent
from tracking.preferences import Preferences


class CLITestCase(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        tmp = Path(self._tmpdir.name)
        self.boundary_file = tmp / "bounded_apps.json"
        self.prefs_file = tmp / "prefs.json"
        patchers = [
            patch.object(config, "BOUNDARY_SETTINGS_FILE", self.boundary_file),
            patch.object(config, "PREFERENCES_FILE", self.prefs_file),
        ]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self):
        self._tmpdir.cleanup()

    def run_cli(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main.main(list(argv))
        return code, out.getvalue()


class TestCLIBoundaries(CLITestCase):

    def test_list_empty(self):
        code, out = self.run_cli("--list")
        self.assertEqual(code, 0)
        self.assertIn("No bounded apps", out)

    def test_add_list_remove(self):
        self.assertEqual(self.run_cli("--add", "social.app")[0], 0)
        self.assertEqual(self.run_cli("--add", "video.app")[0], 0)

        code, out = self.run_cli("--list")
        self.assertIn("social.app", out)
        self.assertIn("video.app", out)

        self.assertEqual(self.run_cli("--remove", "social.app")[0], 0)
        self.assertEqual(BoundaryManager(self.boundary_file).load(), frozenset({"video.app"}))

    def test_remove_unknown(self):
        code, out = self.run_cli("--remove", "nope.app")
        self.assertEqual(code, 0)
        self.assertIn("has no boundary", out)

    def test_add_blank_fails(self):
        self.assertEqual(self.run_cli("--add", " ")[0], 1)


class TestCLIDuration(CLITestCase):

    def test_set_duration(self):
        code, _ = self.run_cli("--set-duration", "12")
        self.assertEqual(code, 0)
        self.assertEqual(Preferences(self.prefs_file).get_access_duration_minutes(), 12)

    def test_set_invalid_duration(self):
        code, out = self.run_cli("--set-duration", "0")
        self.assertEqual(code, 1)
        self.assertIsNone(Preferences(self.prefs_file).get_access_duration_minutes())


class TestIdleManWiring(CLITestCase):

    def test_engine_uses_persisted_state(self):
        BoundaryManager(self.boundary_file).save({"social.app"})
        Preferences(self.prefs_file).set_access_duration_minutes(9)

        app = main.IdleMan(
            boundary_manager=BoundaryManager(self.boundary_file),
            preferences=Preferences(self.prefs_file),
            overlay_command="",
        )
        app.load_boundaries()
        self.assertEqual(app.engine.boundary_set(), frozenset({"social.app"}))

        # No overlay command: the bridge alone receives the intervention
        decision = app.engine.handle_event(ForegroundEvent("social.app", EventKind.WINDOW_CHANGED))
        self.assertTrue(decision.is_intervene)
        self.assertEqual(app.bridge.last_bounded_package, "social.app")

        expiry = app.bridge.close("social.app", success=True)
        grants = dict(app.engine.list_active_grants())
        self.assertEqual(grants, {"social.app": expiry})

    def test_overlay_command_wires_launcher(self):
        app = main.IdleMan(
            boundary_manager=BoundaryManager(self.boundary_file),
            preferences=Preferences(self.prefs_file),
            overlay_command="overlay {identifier}",
        )
        self.assertIsNotNone(app.launcher)
        self.assertEqual(app.launcher.on_closed, app.bridge.close)

    def test_run_without_permission(self):
        app = main.IdleMan(
            boundary_manager=BoundaryManager(self.boundary_file),
            preferences=Preferences(self.prefs_file),
            overlay_command="",
        )
        app.watcher.detector = MagicMock()
        app.watcher.detector.check_permission.return_value = False
        app.watcher.detector.get_permission_instructions.return_value = "grant it"

        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(app.run(), 1)
        self.assertIn("grant it", out.getvalue())


if __name__ == "__main__":
    unittest.main()
