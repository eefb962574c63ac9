"""Platform-Abstraktion für StudioLink.

Dieses Modul stellt plattformunabhängige Interfaces bereit und
lädt automatisch die richtige Implementierung für das aktuelle OS.

Usage:
    from studio_platform import get_permission_gate, get_window_locator

    gate = get_permission_gate()
    gate.has_permission(Capability.screen_capture)

    locator = get_window_locator()
    bounds = locator.studio_bounds()
"""

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from utils.permissions import PermissionGate
    from .base import WindowLocator, WindowMover


def get_platform() -> str:
    """Ermittelt die aktuelle Plattform.

    Returns:
        'macos', 'windows' oder 'linux'

    Raises:
        RuntimeError: Bei nicht unterstützter Plattform
    """
    if sys.platform == "darwin":
        return "macos"
    elif sys.platform == "win32":
        return "windows"
    elif sys.platform.startswith("linux"):
        return "linux"
    raise RuntimeError(f"Nicht unterstützte Plattform: {sys.platform}")


def get_permission_gate() -> "PermissionGate":
    """Factory für das Permission-Gate der aktuellen Plattform.

    Außerhalb von macOS sind alle Capabilities verweigert.
    """
    from cli.types import Capability
    from utils.permissions import (
        DeniedPermission,
        MacOSScreenCapturePermission,
        MacOSSpeechPermission,
        PermissionGate,
    )

    if get_platform() == "macos":
        return PermissionGate(
            {
                Capability.screen_capture: MacOSScreenCapturePermission(),
                Capability.speech: MacOSSpeechPermission(),
            }
        )
    return PermissionGate(
        {
            Capability.screen_capture: DeniedPermission(),
            Capability.speech: DeniedPermission(),
        }
    )


def get_window_locator() -> "WindowLocator":
    """Factory für die Studio-Fensterabfrage."""
    if get_platform() == "macos":
        from .windows import MacOSWindowLocator

        return MacOSWindowLocator()
    from .windows import NullWindowLocator

    return NullWindowLocator()


def get_window_mover(window=None, guard=None) -> "WindowMover":
    """Factory für das Positionieren des Companion-Fensters.

    Args:
        window: NSWindow (nur macOS); ohne Fenster wird nichts bewegt
        guard: Optionaler Check vor dem Anwenden auf dem Main-Thread
    """
    if get_platform() == "macos" and window is not None:
        from .windows import MacOSWindowMover

        return MacOSWindowMover(window, guard=guard)
    from .windows import NullWindowMover

    return NullWindowMover()


__all__ = [
    "get_platform",
    "get_permission_gate",
    "get_window_locator",
    "get_window_mover",
]
