"""
Core business logic package for IdleMan.

Contains the headless BoundaryEngine and the event/decision types it
works with. Zero UI or platform dependencies.
"""

from core.engine import BoundaryEngine
from core.events import Decision, DecisionKind, EventKind, ForegroundEvent, SuppressReason

__all__ = [
    "BoundaryEngine",
    "Decision",
    "DecisionKind",
    "EventKind",
    "ForegroundEvent",
    "SuppressReason",
]
