"""
User preferences for IdleMan.

Small JSON key/value file shared by the CLI and the running monitor:
- access_duration_minutes: how long a completed task unlocks a bounded app
- last_bounded_package: the app most recently intervened on
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import config

logger = logging.getLogger(__name__)

KEY_ACCESS_DURATION = "access_duration_minutes"
KEY_LAST_BOUNDED = "last_bounded_package"


class Preferences:
    """
    File-backed preferences.

    Every read goes back to disk so edits made by another process
    (e.g. `idleman --set-duration`) are picked up by a running monitor.
    """

    def __init__(self, prefs_path: Optional[Path] = None) -> None:
        """
        Args:
            prefs_path: Path to the JSON file (default: config.PREFERENCES_FILE).
        """
        self.prefs_path: Path = prefs_path or config.PREFERENCES_FILE
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        """
        Read the preferences file.

        Returns:
            Dict of stored preferences, empty if missing or unreadable.
        """
        if not self.prefs_path.exists():
            return {}
        try:
            with open(self.prefs_path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError, OSError) as e:
            logger.warning(f"Invalid preferences file, using defaults: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences file does not hold an object, using defaults")
            return {}
        return data

    def _save(self, data: Dict[str, Any]) -> bool:
        """
        Write preferences atomically (temp file, then rename).

        Returns:
            True if saved successfully, False otherwise.
        """
        try:
            self.prefs_path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                suffix='.tmp',
                prefix='prefs_',
                dir=self.prefs_path.parent
            )
            try:
                with os.fdopen(temp_fd, 'w') as f:
                    json.dump(data, f, indent=2)
                os.replace(temp_path, self.prefs_path)
            except Exception:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
                raise
            return True
        except (IOError, OSError) as e:
            logger.error(f"Failed to save preferences: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        with self._lock:
            data = self._load()
            data[key] = value
            return self._save(data)

    def get_access_duration_minutes(self) -> Optional[int]:
        """
        Configured access duration.

        Returns:
            Positive whole minutes, or None if absent or invalid.
        """
        value = self.get(KEY_ACCESS_DURATION)
        # bool is an int subclass; true/false in the file is not a duration
        if isinstance(value, bool) or not isinstance(value, int):
            if value is not None:
                logger.warning(f"Ignoring invalid {KEY_ACCESS_DURATION}: {value!r}")
            return None
        if value <= 0:
            logger.warning(f"Ignoring non-positive {KEY_ACCESS_DURATION}: {value}")
            return None
        return value

    def set_access_duration_minutes(self, minutes: int) -> bool:
        """
        Store the access duration.

        Raises:
            ValueError: If minutes is not a positive integer.
        """
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise ValueError(f"Access duration must be a positive number of minutes, got {minutes!r}")
        saved = self.set(KEY_ACCESS_DURATION, minutes)
        if saved:
            logger.info(f"Access duration set to {minutes} minutes")
        return saved

    def get_last_bounded_package(self) -> Optional[str]:
        value = self.get(KEY_LAST_BOUNDED)
        return value if isinstance(value, str) and value else None

    def set_last_bounded_package(self, identifier: str) -> bool:
        return self.set(KEY_LAST_BOUNDED, identifier)
