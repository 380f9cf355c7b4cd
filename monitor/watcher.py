"""
Polling event source.

Watches the foreground app on a background thread and delivers a
window-changed event to the engine each time it changes. Events are
delivered one at a time from that single thread.
"""

import logging
import threading
from typing import Callable, Optional

import config
from core.events import EventKind, ForegroundEvent
from monitor.foreground import ForegroundDetector

logger = logging.getLogger(__name__)


class ForegroundWatcher:
    """
    Emits ForegroundEvent(identifier, WINDOW_CHANGED) on every foreground switch.

    Args:
        on_event: Receives each event (normally BoundaryEngine.handle_event).
        detector: Foreground detector (default: platform detector).
        interval: Seconds between polls (default: config.WATCH_INTERVAL).
    """

    def __init__(
        self,
        on_event: Callable[[ForegroundEvent], object],
        detector: Optional[ForegroundDetector] = None,
        interval: Optional[float] = None,
    ) -> None:
        self.on_event = on_event
        self.detector = detector or ForegroundDetector()
        self.interval: float = interval if interval is not None else config.WATCH_INTERVAL
        self.should_stop: threading.Event = threading.Event()
        self.thread: Optional[threading.Thread] = None
        self.last_identifier: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.debug("Watcher already running")
            return
        self.should_stop.clear()
        self.last_identifier = None
        self.thread = threading.Thread(target=self._watch_loop, daemon=True)
        self.thread.start()
        logger.info(f"Foreground watcher started (every {self.interval}s)")

    def stop(self, timeout: float = 2.0) -> None:
        self.should_stop.set()
        if self.thread is not None:
            self.thread.join(timeout=timeout)
            self.thread = None
        logger.info("Foreground watcher stopped")

    def poll_once(self) -> Optional[ForegroundEvent]:
        """
        Check the foreground app once.

        Returns:
            The event delivered, or None if nothing changed.
        """
        identifier = self.detector.get_foreground_identifier()
        if not identifier or identifier == self.last_identifier:
            return None

        self.last_identifier = identifier
        event = ForegroundEvent(identifier=identifier, kind=EventKind.WINDOW_CHANGED)
        logger.debug(f"Foreground changed to: {identifier}")
        try:
            self.on_event(event)
        except Exception as e:
            logger.error(f"Error handling foreground event for {identifier}: {e}")
        return event

    def _watch_loop(self) -> None:
        try:
            while not self.should_stop.is_set():
                self.poll_once()
                self.should_stop.wait(self.interval)
        except (KeyboardInterrupt, SystemExit):
            logger.info("Watcher interrupted by shutdown signal")
        except Exception as e:
            logger.error(f"Watcher loop error: {e}")
