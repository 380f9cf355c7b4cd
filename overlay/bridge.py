"""
Glue between the engine and whatever renders the friction task.

OverlayBridge remembers which app was intervened on and turns a
successfully completed task into earned access. CommandOverlayLauncher
runs an external overlay program and reports back when it exits.
"""

import logging
import shlex
import subprocess
import threading
from typing import Callable, List, Optional

from overlay.dispatcher import Intervention, InterventionDispatcher
from tracking.preferences import Preferences

logger = logging.getLogger(__name__)


class OverlayBridge:
    """
    Presentation-side collaborator.

    The engine only tells us who was intervened on through the dispatch
    payload, so the identifier is captured here (and persisted, so a
    restarted overlay can still complete the grant).
    """

    def __init__(self, engine, dispatcher: InterventionDispatcher,
                 preferences: Optional[Preferences] = None) -> None:
        self.engine = engine
        self.dispatcher = dispatcher
        self.preferences = preferences
        self.last_bounded_package: Optional[str] = None
        self._persist_thread: Optional[threading.Thread] = None

    def attach(self) -> None:
        """Start receiving intervention notifications."""
        self.dispatcher.on_intervene = self.on_intervene

    def on_intervene(self, intervention: Intervention) -> None:
        self.last_bounded_package = intervention.identifier
        logger.info(f"Awareness moment for {intervention.identifier}")
        if self.preferences is not None:
            # Disk write stays off the watcher thread
            self._persist_thread = threading.Thread(
                target=self._persist_last,
                args=(intervention.identifier,),
                daemon=True,
            )
            self._persist_thread.start()

    def _persist_last(self, identifier: str) -> None:
        if not self.preferences.set_last_bounded_package(identifier):
            logger.warning(f"Could not remember {identifier} as the last bounded app")

    def close(self, identifier: Optional[str], success: bool) -> Optional[float]:
        """
        The overlay finished.

        Args:
            identifier: The app the task was shown for, if the overlay knows it.
                Falls back to the last intervened app (in memory, then persisted).
            success: True if the user completed the task.

        Returns:
            Expiry of the granted access, or None if nothing was granted.
        """
        if self._persist_thread is not None:
            self._persist_thread.join(timeout=2.0)

        self.dispatcher.overlay_closed()

        if not success:
            logger.info("Overlay closed without completing the task")
            return None

        if identifier is None:
            identifier = self.last_bounded_package
        if identifier is None and self.preferences is not None:
            identifier = self.preferences.get_last_bounded_package()

        if identifier is None:
            logger.warning("Task completed but no bounded app is known, nothing to grant")
            return None

        return self.engine.grant_temporary_access(identifier)


class CommandOverlayLauncher:
    """
    Runs an overlay program for each intervention.

    The command template may use {identifier} and {route}. Exit code 0
    means the task was completed; on_closed(identifier, success) is called
    from a watcher thread once the program exits.

    Only one overlay is shown at a time: a new intervention replaces a
    running overlay, and the replaced one never reports back.
    """

    def __init__(self, command: str,
                 on_closed: Optional[Callable[[str, bool], None]] = None) -> None:
        if not command.strip():
            raise ValueError("Overlay command must not be empty")
        self.command = command
        self.on_closed = on_closed
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()

    def build_args(self, intervention: Intervention) -> List[str]:
        return [
            part.format(identifier=intervention.identifier, route=intervention.route)
            for part in shlex.split(self.command)
        ]

    def __call__(self, intervention: Intervention) -> None:
        args = self.build_args(intervention)

        with self._lock:
            previous = self._process
            if previous is not None and previous.poll() is not None:
                previous = None
            # Raises OSError if the program cannot be started; the dispatcher logs it
            # and whatever overlay is already showing stays up
            process = subprocess.Popen(args)
            self._process = process

        if previous is not None:
            logger.info(f"Replacing the running overlay with one for {intervention.identifier}")
            previous.terminate()

        logger.debug(f"Overlay process started (PID {process.pid}): {args}")
        threading.Thread(
            target=self._wait,
            args=(process, intervention.identifier),
            daemon=True,
        ).start()

    def _wait(self, process: subprocess.Popen, identifier: str) -> None:
        returncode = process.wait()

        with self._lock:
            if self._process is not process:
                logger.debug(f"Replaced overlay for {identifier} exited")
                return
            self._process = None

        logger.debug(f"Overlay process for {identifier} exited with code {returncode}")
        if self.on_closed is None:
            return
        try:
            self.on_closed(identifier, returncode == 0)
        except Exception as e:
            logger.error(f"Error handling overlay close: {e}")
