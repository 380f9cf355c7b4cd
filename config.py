"""Configuration settings for IdleMan."""

import os
import sys
from pathlib import Path
from dotenv import load_dotenv


def is_bundled() -> bool:
    """
    Check if the application is running from a PyInstaller bundle.

    Returns:
        True if running from a bundled executable, False otherwise.
    """
    return getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS')


def get_user_data_dir() -> Path:
    """
    Get the directory for user-writable data (boundaries, preferences).

    For development: Same as the project directory/data
    For bundled apps: Uses a dedicated folder in the user's home directory
                      to persist data across updates.

    Returns:
        Path to the user data directory.
    """
    if is_bundled():
        if sys.platform == 'darwin':
            # macOS: ~/Library/Application Support/IdleMan
            data_dir = Path.home() / "Library" / "Application Support" / "IdleMan"
        elif sys.platform == 'win32':
            appdata = os.environ.get('APPDATA')
            if appdata:
                data_dir = Path(appdata) / "IdleMan"
            else:
                data_dir = Path.home() / "AppData" / "Roaming" / "IdleMan"
        else:
            # Linux: ~/.local/share/IdleMan
            data_dir = Path.home() / ".local" / "share" / "IdleMan"

        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            data_dir = Path.home() / ".idleman"
            data_dir.mkdir(parents=True, exist_ok=True)

        return data_dir
    else:
        # Development mode
        return Path(__file__).parent / "data"


def _env_float(name: str, default: float) -> float:
    """
    Read a positive number from the environment.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset, unparsable or not positive.

    Returns:
        The parsed value or the default.
    """
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        import logging
        logging.getLogger(__name__).warning(
            f"{name}={raw!r} is not a number, using default {default}"
        )
        return default
    return value if value > 0 else default


# Load environment variables from .env file (only in development)
if not is_bundled():
    _env_path = Path(__file__).parent / ".env"
    load_dotenv(_env_path)

# User data directory (for writable data like boundaries and preferences)
USER_DATA_DIR = get_user_data_dir()

# Identifier of this application. Never intervened on, whatever the boundaries say.
HOST_APP_ID = os.getenv("IDLEMAN_HOST_APP_ID", "com.idleman.app")

# Boundary engine timing
COOLDOWN_SECONDS = _env_float("IDLEMAN_COOLDOWN_SECONDS", 3.0)  # Burst suppression window
DEFAULT_ACCESS_DURATION_MINUTES = 5  # Earned access after a completed task

# Foreground polling (desktop event source)
WATCH_INTERVAL = _env_float("IDLEMAN_WATCH_INTERVAL", 1.0)  # Seconds between foreground checks

# Overlay presentation
OVERLAY_ROUTE = "/overlay/intent_check"
# Optional command that renders the friction task, e.g. "idleman-overlay --route {route} --package {identifier}"
OVERLAY_COMMAND = os.getenv("IDLEMAN_OVERLAY_COMMAND", "")

# Persistence (owned by collaborators, never by the engine)
BOUNDARY_SETTINGS_FILE = USER_DATA_DIR / "bounded_apps.json"
PREFERENCES_FILE = USER_DATA_DIR / "idleman_prefs.json"

# OS chrome: shell and system UI windows that are not user apps at all
SYSTEM_CHROME_IDS = frozenset({
    "android",
    "com.android.systemui",
})

# Critical apps that must stay reachable no matter how boundaries are configured
CRITICAL_APPS = frozenset({
    # Device settings
    "com.android.settings",
    # Phone dialer (emergency calls)
    "com.android.phone",
    "com.android.dialer",
    "com.google.android.dialer",
    # Messaging
    "com.android.messaging",
    "com.google.android.apps.messaging",
    "com.android.mms",
    # Contacts
    "com.android.contacts",
    # System UI
    "android",
    "com.android.systemui",
    # Default launchers
    "com.google.android.apps.nexuslauncher",
    "com.android.launcher3",
    "com.android.launcher",
})

# Desktop shells and settings apps to protect as well (comma-separated)
EXTRA_CRITICAL_APPS = frozenset(
    app.strip()
    for app in os.getenv(
        "IDLEMAN_EXTRA_CRITICAL_APPS",
        "com.apple.finder,com.apple.systempreferences,com.apple.dock,explorer,SystemSettings",
    ).split(",")
    if app.strip()
)

# Event kinds understood by the engine
EVENT_WINDOW_CHANGED = "window_changed"
EVENT_CONTENT_CHANGED = "content_changed"
EVENT_NOTIFICATION = "notification"

# Ensure user data directory exists
try:
    USER_DATA_DIR.mkdir(parents=True, exist_ok=True)
except OSError as e:
    import logging
    logging.getLogger(__name__).error(f"Failed to create data directory {USER_DATA_DIR}: {e}")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # Can override in .env: DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
