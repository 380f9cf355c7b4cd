"""
Intervention dispatch.

Turns an Intervene decision into an "awareness moment": notifies the
presentation layer and asks for an overlay surface. Failures are logged
and reported back to the engine, never raised into the event loop.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Intervention:
    """Payload handed to the presentation layer."""
    identifier: str
    timestamp: float
    route: str = field(default=config.OVERLAY_ROUTE)


class InterventionDispatcher:
    """
    Delivers interventions to the presentation layer.

    Two channels, both optional:
    - on_intervene(intervention): notification callback (set by the presentation bridge)
    - overlay_launcher(intervention): requests the overlay surface

    Both must return quickly; the caller is the event loop.
    """

    def __init__(
        self,
        overlay_launcher: Optional[Callable[[Intervention], None]] = None,
        route: str = config.OVERLAY_ROUTE,
    ) -> None:
        self.overlay_launcher = overlay_launcher
        self.route = route
        self.on_intervene: Optional[Callable[[Intervention], None]] = None

        self._lock = threading.Lock()
        self._overlay_active = False

    @property
    def is_overlay_active(self) -> bool:
        with self._lock:
            return self._overlay_active

    def reset(self) -> None:
        """Clear a stale overlay flag left over from a previous run."""
        with self._lock:
            if self._overlay_active:
                logger.info("Clearing stale overlay state")
            self._overlay_active = False

    def dispatch(self, identifier: str, timestamp: float) -> bool:
        """
        Deliver an intervention for identifier.

        Args:
            identifier: The bounded app that came to the foreground.
            timestamp: When the engine decided to intervene.

        Returns:
            True if at least one channel delivered it, False otherwise.
        """
        intervention = Intervention(identifier=identifier, timestamp=timestamp, route=self.route)

        if self.on_intervene is None and self.overlay_launcher is None:
            logger.warning(f"No presentation layer attached, cannot intervene on {identifier}")
            return False

        delivered = False

        if self.on_intervene is not None:
            try:
                self.on_intervene(intervention)
                delivered = True
                logger.debug(f"Presentation layer notified for {identifier}")
            except Exception as e:
                logger.error(f"Error notifying presentation layer for {identifier}: {e}")

        if self.overlay_launcher is not None:
            with self._lock:
                self._overlay_active = True
            try:
                self.overlay_launcher(intervention)
                delivered = True
                logger.debug(f"Overlay requested for {identifier} (route: {self.route})")
            except Exception as e:
                logger.error(f"Error launching overlay for {identifier}: {e}", exc_info=True)
                with self._lock:
                    self._overlay_active = False

        return delivered

    def overlay_closed(self) -> None:
        """Called by the presentation layer once the overlay is gone."""
        with self._lock:
            self._overlay_active = False
