"""Suppression of repeat interventions caused by bursts of window events."""

import logging
from typing import Optional, Tuple

import config

logger = logging.getLogger(__name__)


class CooldownTracker:
    """
    Remembers only the most recent intervention.

    A single app switch can produce several window-changed events in a row;
    while the window is open, the same identifier is not intervened on twice.
    """

    def __init__(self, window_seconds: Optional[float] = None) -> None:
        """
        Args:
            window_seconds: Cooldown length (default: config.COOLDOWN_SECONDS).
        """
        self.window_seconds: float = (
            window_seconds if window_seconds is not None else config.COOLDOWN_SECONDS
        )
        self._last: Optional[Tuple[str, float]] = None

    def is_cooling_down(self, identifier: str, now: float) -> bool:
        """True if identifier was the last one triggered and the window has not elapsed."""
        if self._last is None:
            return False
        last_identifier, triggered_at = self._last
        return last_identifier == identifier and (now - triggered_at) < self.window_seconds

    def record(self, identifier: str, now: float) -> None:
        """Remember an intervention, discarding whatever was remembered before."""
        self._last = (identifier, now)
