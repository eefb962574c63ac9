"""Plattform-Interfaces für StudioLink.

Die Command-Surface kennt nur diese Protokolle; macOS- und
Stub-Implementierungen werden über die Factories in studio_platform geladen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class WindowBounds:
    """Fenster-Rechteck in CG-Koordinaten (Ursprung oben links, Pixel)."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class WindowInfo:
    """Ein gefundenes Roblox-Studio-Fenster."""

    window_id: int
    owner: str
    bounds: WindowBounds
    title: str = ""


class CaptureProvider(Protocol):
    """Fenster-Screenshots (macOS: CGWindowList / ScreenCaptureKit)."""

    def find_target_window(self) -> WindowInfo | None: ...

    def capture_window(self, window: WindowInfo) -> bytes | None:
        """PNG-Bytes des Fensters oder None."""
        ...


class SpeechProvider(Protocol):
    """Speech-to-Text und Text-to-Speech (macOS: Speech + AVFoundation)."""

    def start_listening(self) -> bool: ...

    def stop_listening(self) -> None: ...

    def is_listening(self) -> bool: ...

    def latest_transcript(self) -> str | None: ...

    def speak(self, text: str) -> bool: ...

    def stop_speaking(self) -> None: ...

    def is_speaking(self) -> bool: ...


class WindowLocator(Protocol):
    def studio_bounds(self) -> WindowBounds | None: ...


class WindowMover(Protocol):
    def move(self, x: int, y: int, width: int, height: int) -> None: ...


__all__ = [
    "WindowBounds",
    "WindowInfo",
    "CaptureProvider",
    "SpeechProvider",
    "WindowLocator",
    "WindowMover",
]
