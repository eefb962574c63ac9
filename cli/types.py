"""Shared type definitions for StudioLink.

Enums used by the daemon, the HTTP command surface and studiolink.py.
"""

from enum import Enum


class Capability(str, Enum):
    """OS-Berechtigungen, die vor Capture/Listen geprüft werden."""

    screen_capture = "screen_capture"
    speech = "speech"


class PermissionState(str, Enum):
    """Zustand einer Berechtigung; ändert sich nur durch das OS."""

    unknown = "unknown"
    denied = "denied"
    granted = "granted"


class ListeningState(str, Enum):
    """Speech-Recognition-Zustand (höchstens eine aktive Session)."""

    idle = "idle"
    listening = "listening"


class InstallResult(str, Enum):
    """Ergebnis von install_plugin()."""

    installed = "installed"
    already_current = "already_current"
