"""
Foreground application detection for the desktop event source.

Reports the identifier of the frontmost application:
- macOS: bundle identifier via AppleScript (e.g. "com.tinyspeck.slackmacgap")
- Windows: process image name via ctypes (e.g. "Discord")
"""

import sys
import subprocess
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class ForegroundDetector:
    """
    Cross-platform detector for the frontmost application.
    """

    def __init__(self):
        """Initialize the detector for the current platform."""
        self.platform = sys.platform
        self._permission_checked = False
        self._has_permission = False

    def get_foreground_identifier(self) -> Optional[str]:
        """
        Get the identifier of the application currently in front.

        Returns:
            Identifier string, or None if detection fails.
        """
        try:
            if self.platform == "darwin":
                return self._get_foreground_macos()
            elif self.platform == "win32":
                return self._get_foreground_windows()
            else:
                logger.warning(f"Unsupported platform: {self.platform}")
                return None
        except PermissionError as e:
            logger.warning(f"Permission denied getting foreground app: {e}")
            self._has_permission = False
            return None
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Timeout getting foreground app: {e}")
            return None
        except OSError as e:
            logger.error(f"OS error getting foreground app: {e}")
            return None

    def _get_foreground_macos(self) -> Optional[str]:
        """
        Get the frontmost bundle identifier on macOS using AppleScript.

        Returns:
            Bundle identifier or None if detection fails.
        """
        script = '''
        tell application "System Events"
            set frontApp to first application process whose frontmost is true
            return bundle identifier of frontApp
        end tell
        '''

        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            timeout=2
        )

        if result.returncode != 0:
            logger.warning(f"AppleScript failed with code {result.returncode}: {result.stderr.strip()}")
            stderr_lower = result.stderr.lower()
            if "not allowed" in stderr_lower or "assistive" in stderr_lower or "-10827" in stderr_lower:
                logger.warning("Accessibility permission required for foreground monitoring")
            self._has_permission = False
            return None

        self._has_permission = True
        identifier = result.stdout.strip()
        # Apps without a bundle id report "missing value"
        if not identifier or identifier == "missing value":
            return None
        return identifier

    def _get_foreground_windows(self) -> Optional[str]:
        """
        Get the foreground process name on Windows using ctypes.

        Returns:
            Process name without ".exe", or None if detection fails.
        """
        import ctypes
        from ctypes import wintypes

        user32 = ctypes.windll.user32
        hwnd = user32.GetForegroundWindow()
        if not hwnd:
            return None

        pid = wintypes.DWORD()
        user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        self._has_permission = True
        return self._get_process_name_windows(pid.value)

    def _get_process_name_windows(self, pid: int) -> Optional[str]:
        """
        Get process name from PID on Windows.

        Args:
            pid: Process ID

        Returns:
            Process name or None
        """
        import ctypes
        from ctypes import wintypes

        PROCESS_QUERY_LIMITED_INFORMATION = 0x1000

        kernel32 = ctypes.windll.kernel32
        handle = kernel32.OpenProcess(PROCESS_QUERY_LIMITED_INFORMATION, False, pid)
        if not handle:
            return None

        try:
            buffer = ctypes.create_unicode_buffer(260)
            size = wintypes.DWORD(260)
            if kernel32.QueryFullProcessImageNameW(handle, 0, buffer, ctypes.byref(size)):
                name = buffer.value.split("\\")[-1]
                return name[:-4] if name.lower().endswith(".exe") else name
            return None
        finally:
            kernel32.CloseHandle(handle)

    def check_permission(self) -> bool:
        """
        Check if the app has the permissions needed to see the foreground app.

        Returns:
            True if permissions are granted, False otherwise.
        """
        if self._permission_checked:
            return self._has_permission

        self.get_foreground_identifier()
        self._permission_checked = True

        if not self._has_permission:
            logger.warning("Permission check failed - could not read the foreground app")
        return self._has_permission

    def get_permission_instructions(self) -> str:
        """
        Get instructions for enabling foreground monitoring.

        Returns:
            Platform-specific instructions string.
        """
        if self.platform == "darwin":
            return (
                "Foreground monitoring requires the ACCESSIBILITY permission:\n"
                "   • System Settings → Privacy & Security → Accessibility\n"
                "   • Add your terminal (or IdleMan) and enable the checkbox\n\n"
                "After enabling, restart IdleMan."
            )
        elif self.platform == "win32":
            return (
                "Foreground monitoring should work automatically on Windows.\n"
                "If you're having issues, try running as Administrator."
            )
        else:
            return f"Foreground monitoring is not supported on {self.platform}"
