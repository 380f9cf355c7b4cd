"""Apps that must never be intercepted, whatever the boundary configuration says."""

import logging
from typing import FrozenSet, Iterable, Optional

import config

logger = logging.getLogger(__name__)


def build_safety_allow_list(
    host_identifier: str,
    extra: Optional[Iterable[str]] = None,
) -> FrozenSet[str]:
    """
    Build the safety allow-list for one engine.

    Contains the host app itself and the critical system catalogue
    (settings, dialer, messaging, contacts, system UI, launchers).
    Extra identifiers can only widen the list.

    Args:
        host_identifier: Identifier of the running app.
        extra: Additional identifiers to protect (default: config.EXTRA_CRITICAL_APPS).

    Returns:
        Immutable set of protected identifiers.
    """
    if extra is None:
        extra = config.EXTRA_CRITICAL_APPS

    allow_list = set(config.CRITICAL_APPS)
    allow_list.update(i for i in extra if i)
    if host_identifier:
        allow_list.add(host_identifier)

    logger.debug(f"Safety allow-list built with {len(allow_list)} identifiers")
    return frozenset(allow_list)
