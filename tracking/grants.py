"""Temporary access grants earned by completing a mindful task."""

import logging
from typing import Dict, Iterator, Tuple

logger = logging.getLogger(__name__)


class GrantLedger:
    """
    Maps identifiers to the instant their earned access runs out.

    Expired entries are not swept; they are treated as absent and only
    removed when `check` consults them. Not thread-safe on its own, the
    owning engine serialises access.
    """

    def __init__(self) -> None:
        self._expiries: Dict[str, float] = {}

    def grant(self, identifier: str, expiry: float) -> None:
        """Insert or overwrite the grant for identifier (last write wins)."""
        self._expiries[identifier] = expiry

    def revoke(self, identifier: str) -> bool:
        """
        Remove the grant for identifier.

        Returns:
            True if a grant was removed, False if there was nothing to revoke.
        """
        return self._expiries.pop(identifier, None) is not None

    def check(self, identifier: str, now: float) -> bool:
        """
        Check whether identifier holds live access at now.

        An expired grant found here is deleted.

        Returns:
            True if the grant expires strictly after now.
        """
        expiry = self._expiries.get(identifier)
        if expiry is None:
            return False

        if now < expiry:
            logger.debug(f"Temporary access active for {identifier}: {expiry - now:.0f}s remaining")
            return True

        del self._expiries[identifier]
        logger.debug(f"Temporary access expired for {identifier}")
        return False

    def active(self, now: float) -> Iterator[Tuple[str, float]]:
        """Yield (identifier, expiry) for grants still live at now, without deleting anything."""
        for identifier, expiry in list(self._expiries.items()):
            if now < expiry:
                yield identifier, expiry

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._expiries
