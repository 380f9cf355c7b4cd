"""
BoundaryEngine: access control for bounded apps.

Decides, for every foreground change, whether to ignore it, let it
through (earned access, safety allow-list, cooldown) or start an
awareness moment. Also owns the temporary access grants.

This module has no UI or platform dependencies. One engine is built per
process and handed to every collaborator that needs it:
- the event source calls handle_event()
- the presentation bridge calls grant_temporary_access()
- boundary persistence calls replace_boundary_set()

Callbacks:
    on_decision(event: ForegroundEvent, decision: Decision)
"""

import logging
import threading
import time
from typing import Callable, FrozenSet, Iterable, Iterator, Optional, Tuple

import config
from boundary.safety import build_safety_allow_list
from boundary.store import BoundaryStore
from core.events import Decision, EventKind, ForegroundEvent, SuppressReason
from overlay.dispatcher import InterventionDispatcher
from tracking.cooldown import CooldownTracker
from tracking.grants import GrantLedger

logger = logging.getLogger(__name__)


class BoundaryEngine:
    """
    Bounded-app access control engine.

    All mutable state (boundaries, grants, cooldown) is guarded by one lock
    held for the whole of decide() and of each grant/revoke/replace call.
    Everything under the lock is in-memory; the dispatcher runs outside it.
    """

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def __init__(
        self,
        dispatcher: Optional[InterventionDispatcher] = None,
        host_identifier: Optional[str] = None,
        bounded: Optional[Iterable[str]] = None,
        cooldown_seconds: Optional[float] = None,
        duration_provider: Optional[Callable[[], Optional[int]]] = None,
        clock: Callable[[], float] = time.time,
        extra_critical_apps: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Args:
            dispatcher: Delivers interventions to the presentation layer.
            host_identifier: This app's own identifier (default: config.HOST_APP_ID).
            bounded: Initial bounded identifiers.
            cooldown_seconds: Burst suppression window (default: config.COOLDOWN_SECONDS).
            duration_provider: Returns the configured access duration in minutes, or None.
            clock: Source of "now" in epoch seconds.
            extra_critical_apps: Additional identifiers for the safety allow-list.
        """
        self.dispatcher = dispatcher
        self.host_identifier: str = host_identifier or config.HOST_APP_ID
        self.safety_allow_list: FrozenSet[str] = build_safety_allow_list(
            self.host_identifier, extra_critical_apps
        )
        self.duration_provider = duration_provider
        self._clock = clock

        self._boundaries = BoundaryStore(bounded)
        self._grants = GrantLedger()
        self._cooldown = CooldownTracker(cooldown_seconds)
        self._lock = threading.Lock()

        # ---- Callbacks ----
        self.on_decision: Optional[Callable[[ForegroundEvent, Decision], None]] = None

        logger.info(
            f"Boundary engine ready: {len(self._boundaries)} bounded apps, "
            f"cooldown {self._cooldown.window_seconds}s, host {self.host_identifier}"
        )

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown.window_seconds

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(self, event: ForegroundEvent) -> Decision:
        """
        Evaluate one event. Rules are checked in order; the first match wins.

        Side effects: an expired grant for the identifier is deleted, and an
        Intervene decision records the identifier in the cooldown tracker.

        Args:
            event: Event from the event source.

        Returns:
            Ignore, Suppress(reason) or Intervene.
        """
        if event.kind is not EventKind.WINDOW_CHANGED:
            return Decision.ignore()

        identifier = event.identifier
        if not identifier:
            return Decision.ignore()

        # Shell / system UI windows are not apps the user can bound
        if identifier in config.SYSTEM_CHROME_IDS:
            return Decision.ignore()

        with self._lock:
            if identifier not in self._boundaries:
                return Decision.ignore()

            now = self._clock()

            if self._grants.check(identifier, now):
                return Decision.suppress(SuppressReason.ACTIVE_GRANT)

            # Checked on every call so a bad boundary file can never lock the user out
            if identifier == self.host_identifier:
                logger.warning(f"Prevented boundary on own app {identifier}")
                return Decision.suppress(SuppressReason.SAFETY_OVERRIDE)
            if identifier in self.safety_allow_list:
                logger.warning(f"Critical app {identifier} is bounded, letting it through")
                return Decision.suppress(SuppressReason.SAFETY_OVERRIDE)

            if self._cooldown.is_cooling_down(identifier, now):
                return Decision.suppress(SuppressReason.COOLDOWN)

            self._cooldown.record(identifier, now)
            return Decision.intervene()

    def handle_event(self, event: ForegroundEvent) -> Decision:
        """
        Decide on an event and, on Intervene, dispatch the intervention.

        A dispatch failure is logged and reported as Suppress(DISPATCH_FAILED);
        the next foreground change re-evaluates naturally, so nothing is retried.

        Returns:
            The effective decision.
        """
        decision = self.decide(event)

        if decision.is_intervene:
            logger.info(f"Bounded app detected: {event.identifier}, starting awareness moment")
            if not self._dispatch(event.identifier):
                # The cooldown recorded by decide() stays, so a re-focus within the window reads COOLDOWN
                decision = Decision.suppress(SuppressReason.DISPATCH_FAILED)
        elif decision.reason is not None:
            logger.debug(f"Suppressed {event.identifier}: {decision.reason.value}")

        self._notify_decision(event, decision)
        return decision

    def _dispatch(self, identifier: str) -> bool:
        if self.dispatcher is None:
            logger.error(f"No dispatcher configured, cannot intervene on {identifier}")
            return False
        try:
            return self.dispatcher.dispatch(identifier, self._clock())
        except Exception as e:
            logger.error(f"Intervention dispatch failed for {identifier}: {e}")
            return False

    def _notify_decision(self, event: ForegroundEvent, decision: Decision) -> None:
        if self.on_decision:
            try:
                self.on_decision(event, decision)
            except Exception as e:
                logger.error(f"Decision callback error: {e}")

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------

    def grant_temporary_access(self, identifier: str,
                               duration_minutes: Optional[int] = None) -> float:
        """
        Grant earned access to identifier, replacing any existing grant.

        Args:
            identifier: App to unlock.
            duration_minutes: Explicit duration; otherwise the configured one.

        Returns:
            The expiry instant of the grant.
        """
        minutes = self._resolve_duration(duration_minutes)

        with self._lock:
            expiry = self._clock() + minutes * 60
            self._grants.grant(identifier, expiry)

        logger.info(f"Access granted: {identifier} for {minutes} minutes")
        return expiry

    def revoke_temporary_access(self, identifier: str) -> bool:
        """
        Remove earned access for identifier.

        Returns:
            True if a grant was removed, False if there was none.
        """
        with self._lock:
            removed = self._grants.revoke(identifier)

        if removed:
            logger.info(f"Access revoked: {identifier}")
        else:
            logger.debug(f"No active access to revoke for {identifier}")
        return removed

    def list_active_grants(self) -> Iterator[Tuple[str, float]]:
        """
        Grants that have not expired yet, as of this call.

        Returns a snapshot; the ledger is not modified and later grants
        or revocations do not show up in an iterator already handed out.
        """
        with self._lock:
            snapshot = list(self._grants.active(self._clock()))
        return iter(snapshot)

    def _resolve_duration(self, override: Optional[int]) -> int:
        """Pick the grant duration: valid override, then configuration, then the default."""
        if override is not None:
            if _is_valid_minutes(override):
                return override
            logger.warning(f"Invalid duration override {override!r}, using configured duration")

        if self.duration_provider is not None:
            try:
                configured = self.duration_provider()
            except Exception as e:
                logger.warning(f"Could not read access duration, using default: {e}")
                configured = None
            if _is_valid_minutes(configured):
                return configured

        return config.DEFAULT_ACCESS_DURATION_MINUTES

    # ------------------------------------------------------------------
    # Boundary configuration
    # ------------------------------------------------------------------

    def replace_boundary_set(self, identifiers: Iterable[str]) -> None:
        """Swap in a new full set of bounded apps. Grants and cooldown are untouched."""
        with self._lock:
            self._boundaries.replace(identifiers)
            count = len(self._boundaries)
        logger.info(f"Bounded apps updated: {count} apps")

    def boundary_set(self) -> FrozenSet[str]:
        with self._lock:
            return self._boundaries.snapshot()


def _is_valid_minutes(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
