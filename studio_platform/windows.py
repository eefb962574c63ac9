"""Fenster-Erkennung und -Positionierung.

Findet das Roblox-Studio-Fenster über die CGWindowList und positioniert
das eigene Companion-Fenster.
macOS: Quartz CGWindowListCopyWindowInfo + AppKit NSWindow via PyObjC
Andere Plattformen: kein Fenster gefunden, Bewegen ist ein No-Op
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from config import CAPTURE_TARGET_TOKEN
from studio_platform.base import WindowBounds, WindowInfo

logger = logging.getLogger("studiolink.platform.windows")

# Schlüssel der CGWindowList-Dictionaries (Werte der Quartz-Konstanten)
KEY_OWNER_NAME = "kCGWindowOwnerName"
KEY_WINDOW_NUMBER = "kCGWindowNumber"
KEY_WINDOW_BOUNDS = "kCGWindowBounds"
KEY_WINDOW_NAME = "kCGWindowName"


def _parse_bounds(raw: Mapping[str, Any] | None, *, default_size: tuple[int, int] | None = None) -> WindowBounds | None:
    if raw is None:
        return None
    width_default, height_default = default_size or (0, 0)
    try:
        return WindowBounds(
            x=int(raw.get("X", 0)),
            y=int(raw.get("Y", 0)),
            width=int(raw.get("Width", width_default)),
            height=int(raw.get("Height", height_default)),
        )
    except (TypeError, ValueError):
        return None


def match_studio_window(
    window_list: Iterable[Mapping[str, Any]], token: str = CAPTURE_TARGET_TOKEN
) -> WindowInfo | None:
    """Erstes Fenster, dessen Owner-Name den Token enthält (case-insensitive).

    Fenster ohne Owner-Name, Nummer oder Bounds werden übersprungen.
    """
    token = token.lower()
    for window in window_list:
        owner = window.get(KEY_OWNER_NAME)
        if not isinstance(owner, str) or token not in owner.lower():
            continue
        window_id = window.get(KEY_WINDOW_NUMBER)
        bounds = _parse_bounds(window.get(KEY_WINDOW_BOUNDS), default_size=(800, 600))
        if not window_id or bounds is None:
            continue
        return WindowInfo(
            window_id=int(window_id),
            owner=owner,
            bounds=bounds,
            title=str(window.get(KEY_WINDOW_NAME) or ""),
        )
    return None


def copy_on_screen_windows() -> list:
    """On-Screen-Fenster ohne Desktop-Elemente (leere Liste ohne Quartz)."""
    try:
        from Quartz import (  # type: ignore[import-not-found]
            CGWindowListCopyWindowInfo,
            kCGNullWindowID,
            kCGWindowListExcludeDesktopElements,
            kCGWindowListOptionOnScreenOnly,
        )
    except ImportError:
        logger.debug("PyObjC/Quartz nicht verfügbar")
        return []

    options = kCGWindowListOptionOnScreenOnly | kCGWindowListExcludeDesktopElements
    return list(CGWindowListCopyWindowInfo(options, kCGNullWindowID) or [])


def find_studio_window(token: str = CAPTURE_TARGET_TOKEN) -> WindowInfo | None:
    return match_studio_window(copy_on_screen_windows(), token)


def snap_frame(bounds: WindowBounds, width: int) -> WindowBounds:
    """Rechteck direkt rechts neben dem Zielfenster, gleiche Höhe."""
    return WindowBounds(
        x=bounds.x + bounds.width,
        y=bounds.y,
        width=width,
        height=bounds.height,
    )


def to_appkit_origin(frame: WindowBounds, screen_height: float) -> tuple[float, float]:
    """CG-Koordinaten (oben links) → AppKit (unten links, Hauptbildschirm)."""
    return float(frame.x), float(screen_height - frame.y - frame.height)


class MacOSWindowLocator:
    """Studio-Fensterbounds via CGWindowList (~1ms pro Abfrage)."""

    def __init__(self, token: str = CAPTURE_TARGET_TOKEN) -> None:
        self._token = token

    def studio_bounds(self) -> WindowBounds | None:
        try:
            window = find_studio_window(self._token)
        except Exception as e:
            logger.debug(f"Fensterabfrage fehlgeschlagen: {e}")
            return None
        return window.bounds if window else None


class MacOSWindowMover:
    """Setzt den Frame eines NSWindow auf dem Main-Thread.

    Args:
        window: NSWindow des Companion-Fensters
        guard: Optionaler Check direkt vor dem Anwenden auf dem Main-Thread;
            liefert er False, bleibt das Fenster unverändert.
    """

    def __init__(self, window, guard: Callable[[], bool] | None = None) -> None:
        self._window = window
        self._guard = guard

    def move(self, x: int, y: int, width: int, height: int) -> None:
        from PyObjCTools import AppHelper  # type: ignore[import-not-found]

        frame = WindowBounds(x, y, width, height)
        AppHelper.callAfter(self._apply, frame)

    def _apply(self, frame: WindowBounds) -> None:
        if self._guard is not None and not self._guard():
            return
        from AppKit import NSMakeRect, NSScreen  # type: ignore[import-not-found]

        screens = NSScreen.screens()
        if not screens:
            return
        # CG-Koordinaten beziehen sich auf den Hauptbildschirm (Index 0)
        screen_height = screens[0].frame().size.height
        ax, ay = to_appkit_origin(frame, screen_height)
        self._window.setFrame_display_(NSMakeRect(ax, ay, frame.width, frame.height), True)


class NullWindowLocator:
    """Kein Studio-Fenster auffindbar (Nicht-macOS)."""

    def studio_bounds(self) -> WindowBounds | None:
        return None


class NullWindowMover:
    def move(self, x: int, y: int, width: int, height: int) -> None:
        logger.debug("Fensterbewegung auf dieser Plattform nicht unterstützt")


__all__ = [
    "match_studio_window",
    "copy_on_screen_windows",
    "find_studio_window",
    "snap_frame",
    "to_appkit_origin",
    "MacOSWindowLocator",
    "MacOSWindowMover",
    "NullWindowLocator",
    "NullWindowMover",
]
