#!/usr/bin/env python3
"""
IdleMan - Main Entry Point

Watches the foreground app and starts an "awareness moment" when an app
you have put a boundary on comes to the front.

Usage:
    python main.py                        # Run the monitor
    python main.py --list                 # Show bounded apps
    python main.py --add com.example.app  # Put a boundary on an app
    python main.py --remove com.example.app
    python main.py --set-duration 10      # Minutes of access per completed task
"""

import sys
import time
import logging
import argparse
from typing import Optional

import config
from boundary.store import BoundaryManager
from core.engine import BoundaryEngine
from monitor.watcher import ForegroundWatcher
from overlay.bridge import CommandOverlayLauncher, OverlayBridge
from overlay.dispatcher import InterventionDispatcher
from tracking.preferences import Preferences

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format=config.LOG_FORMAT
)
logger = logging.getLogger(__name__)


class IdleMan:
    """
    Wires one engine to its collaborators for the lifetime of the process.
    """

    def __init__(self, boundary_manager: Optional[BoundaryManager] = None,
                 preferences: Optional[Preferences] = None,
                 overlay_command: Optional[str] = None):
        """Build the engine, dispatcher, presentation bridge and watcher."""
        self.boundary_manager = boundary_manager or BoundaryManager(config.BOUNDARY_SETTINGS_FILE)
        self.preferences = preferences or Preferences()

        if overlay_command is None:
            overlay_command = config.OVERLAY_COMMAND
        self.launcher: Optional[CommandOverlayLauncher] = (
            CommandOverlayLauncher(overlay_command) if overlay_command else None
        )

        self.dispatcher = InterventionDispatcher(overlay_launcher=self.launcher)
        self.engine = BoundaryEngine(
            dispatcher=self.dispatcher,
            duration_provider=self.preferences.get_access_duration_minutes,
        )
        self.bridge = OverlayBridge(self.engine, self.dispatcher, self.preferences)
        self.bridge.attach()
        if self.launcher is not None:
            self.launcher.on_closed = self.bridge.close

        self.watcher = ForegroundWatcher(self.engine.handle_event)

    def load_boundaries(self) -> None:
        """Hand the persisted bounded apps to the engine."""
        self.engine.replace_boundary_set(self.boundary_manager.load())

    def run(self) -> int:
        """
        Run until interrupted.

        Returns:
            Process exit code.
        """
        self.dispatcher.reset()
        self.load_boundaries()

        if not self.watcher.detector.check_permission():
            print("\n❌ Cannot read the foreground app.")
            print(self.watcher.detector.get_permission_instructions())
            return 1

        if self.launcher is None:
            print("ℹ️  No overlay command configured (IDLEMAN_OVERLAY_COMMAND); interventions are only logged.")

        bounded = sorted(self.engine.boundary_set())
        print(f"\n👀 Watching {len(bounded)} bounded apps. Press Ctrl+C to stop.\n")

        self.watcher.start()
        try:
            while self.watcher.is_running:
                time.sleep(0.5)
        except KeyboardInterrupt:
            print("\n\n👋 Goodbye!")
        finally:
            self.watcher.stop()
        return 0


def list_boundaries(manager: BoundaryManager) -> None:
    bounded = sorted(manager.load())
    if not bounded:
        print("No bounded apps yet. Add one with --add <identifier>.")
        return
    print(f"Bounded apps ({len(bounded)}):")
    for identifier in bounded:
        print(f"  • {identifier}")


def main(argv=None) -> int:
    """
    Main entry point — parses arguments and runs the requested action.
    """
    parser = argparse.ArgumentParser(
        description="IdleMan - mindful boundaries for distracting apps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                              Run the monitor
  python main.py --add com.tinyspeck.slackmacgap
  python main.py --set-duration 10
        """
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--list", action="store_true", help="Show bounded apps")
    group.add_argument("--add", metavar="ID", help="Put a boundary on an app")
    group.add_argument("--remove", metavar="ID", help="Remove the boundary from an app")
    group.add_argument("--set-duration", metavar="MINUTES", type=int,
                       help="Minutes of access earned per completed task")
    parser.add_argument("--overlay-command", metavar="CMD",
                        help="Overlay program ({identifier} and {route} are substituted)")

    args = parser.parse_args(argv)

    manager = BoundaryManager(config.BOUNDARY_SETTINGS_FILE)

    if args.list:
        list_boundaries(manager)
        return 0

    if args.add is not None:
        if manager.add(args.add) is None:
            print(f"❌ Could not add boundary for {args.add!r}")
            return 1
        print(f"✓ Boundary set for {args.add.strip()}")
        return 0

    if args.remove is not None:
        if args.remove not in manager.load():
            print(f"{args.remove} has no boundary.")
            return 0
        if manager.remove(args.remove) is None:
            print(f"❌ Could not remove boundary for {args.remove!r}")
            return 1
        print(f"✓ Boundary removed for {args.remove}")
        return 0

    if args.set_duration is not None:
        try:
            saved = Preferences().set_access_duration_minutes(args.set_duration)
        except ValueError as e:
            print(f"❌ {e}")
            return 1
        if not saved:
            print("❌ Could not save the access duration")
            return 1
        print(f"✓ Completing a task now unlocks an app for {args.set_duration} minutes")
        return 0

    try:
        app = IdleMan(boundary_manager=manager, overlay_command=args.overlay_command)
        return app.run()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nFatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
