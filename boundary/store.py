"""
Bounded app storage.

BoundaryStore holds the in-memory set the engine checks on every event.
BoundaryManager owns the JSON file the set is persisted to; the engine
never touches storage itself.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)


class BoundaryStore:
    """
    The set of identifiers the user has put a boundary on.

    Only ever replaced wholesale; there is no add/remove so a partial
    update can never be observed.
    """

    def __init__(self, identifiers: Optional[Iterable[str]] = None) -> None:
        self._identifiers: FrozenSet[str] = _normalise(identifiers or ())

    def replace(self, identifiers: Iterable[str]) -> None:
        """Swap in a new set of bounded identifiers."""
        self._identifiers = _normalise(identifiers)
        logger.debug(f"Boundary set replaced: {len(self._identifiers)} bounded apps")

    def snapshot(self) -> FrozenSet[str]:
        return self._identifiers

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._identifiers

    def __len__(self) -> int:
        return len(self._identifiers)


def _normalise(identifiers: Iterable[str]) -> FrozenSet[str]:
    """Drop empty and non-string entries; identifiers are otherwise kept exactly as given."""
    if isinstance(identifiers, str):
        raise TypeError("Expected a collection of identifiers, got a single string")
    return frozenset(i for i in identifiers if isinstance(i, str) and i)


class BoundaryManager:
    """
    Manages persistence and loading of bounded apps.
    """

    def __init__(self, settings_path: Path):
        """
        Initialize the boundary manager.

        Args:
            settings_path: Path to the JSON settings file
        """
        self.settings_path = settings_path
        self._bounded: Optional[FrozenSet[str]] = None

    def load(self) -> FrozenSet[str]:
        """
        Load bounded apps from file, or start empty if the file does not exist.

        Returns:
            The persisted set of bounded identifiers
        """
        if self._bounded is not None:
            return self._bounded

        if self.settings_path.exists():
            try:
                with open(self.settings_path, "r") as f:
                    data = json.load(f)
                self._bounded = self._from_dict(data)
                logger.info(f"Loaded {len(self._bounded)} bounded apps from {self.settings_path}")
            except (json.JSONDecodeError, KeyError, TypeError, IOError, OSError) as e:
                logger.warning(f"Invalid boundary file, starting with no boundaries: {e}")
                self._bounded = frozenset()
        else:
            self._bounded = frozenset()
            logger.info("No boundary file yet, starting with no boundaries")

        return self._bounded

    def save(self, identifiers: Iterable[str]) -> bool:
        """
        Save bounded apps to file atomically.

        Uses atomic write (write to temp file, then rename) so a crash
        mid-save never leaves a truncated file behind.

        Args:
            identifiers: Full set of bounded identifiers

        Returns:
            True if saved successfully, False otherwise
        """
        bounded = _normalise(identifiers)

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            temp_fd, temp_path = tempfile.mkstemp(
                suffix='.tmp',
                prefix='bounded_',
                dir=self.settings_path.parent
            )

            try:
                with os.fdopen(temp_fd, 'w') as f:
                    json.dump(self._to_dict(bounded), f, indent=2)
                os.replace(temp_path, self.settings_path)
            except Exception:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
                raise

        except (IOError, OSError) as e:
            logger.error(f"Failed to save bounded apps: {e}")
            return False

        self._bounded = bounded
        logger.info(f"Saved {len(bounded)} bounded apps to {self.settings_path}")
        return True

    def add(self, identifier: str) -> Optional[FrozenSet[str]]:
        """
        Persist the current set plus identifier.

        Returns:
            The new full set, or None if it could not be saved
        """
        identifier = identifier.strip()
        if not identifier:
            return None
        updated = self.load() | {identifier}
        return updated if self.save(updated) else None

    def remove(self, identifier: str) -> Optional[FrozenSet[str]]:
        """
        Persist the current set minus identifier.

        Returns:
            The new full set, or None if it could not be saved
        """
        updated = self.load() - {identifier}
        return updated if self.save(updated) else None

    @staticmethod
    def _to_dict(bounded: FrozenSet[str]) -> Dict[str, Any]:
        return {"bounded_apps": sorted(bounded)}

    @staticmethod
    def _from_dict(data: Dict[str, Any]) -> FrozenSet[str]:
        apps = data["bounded_apps"]
        if not isinstance(apps, list):
            raise TypeError("bounded_apps must be a list")
        return _normalise(apps)
