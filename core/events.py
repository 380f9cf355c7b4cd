"""Foreground events and the decisions the boundary engine makes about them."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import config


class EventKind(Enum):
    """Kinds of events an event source can deliver."""
    WINDOW_CHANGED = config.EVENT_WINDOW_CHANGED
    CONTENT_CHANGED = config.EVENT_CONTENT_CHANGED
    NOTIFICATION = config.EVENT_NOTIFICATION


class DecisionKind(Enum):
    """What the engine wants done with an event."""
    IGNORE = "ignore"
    SUPPRESS = "suppress"
    INTERVENE = "intervene"


class SuppressReason(Enum):
    """Why a bounded app was let through without an intervention."""
    ACTIVE_GRANT = "active_grant"
    SAFETY_OVERRIDE = "safety_override"
    COOLDOWN = "cooldown"
    DISPATCH_FAILED = "dispatch_failed"


@dataclass(frozen=True)
class ForegroundEvent:
    """An application identifier reported by the event source."""
    identifier: Optional[str]
    kind: EventKind = EventKind.WINDOW_CHANGED


@dataclass(frozen=True)
class Decision:
    """
    Outcome of evaluating one event.

    reason is only set for SUPPRESS decisions.
    """
    kind: DecisionKind
    reason: Optional[SuppressReason] = None

    @classmethod
    def ignore(cls) -> 'Decision':
        return cls(DecisionKind.IGNORE)

    @classmethod
    def suppress(cls, reason: SuppressReason) -> 'Decision':
        return cls(DecisionKind.SUPPRESS, reason)

    @classmethod
    def intervene(cls) -> 'Decision':
        return cls(DecisionKind.INTERVENE)

    @property
    def is_intervene(self) -> bool:
        return self.kind is DecisionKind.INTERVENE

    def __str__(self) -> str:
        if self.reason is not None:
            return f"{self.kind.value}({self.reason.value})"
        return self.kind.value
