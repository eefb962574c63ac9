"""Native Capture- und Speech-Provider für StudioLink.

Dieses Modul stellt ein einheitliches Interface für die OS-Frameworks bereit.

Usage:
    from providers import get_capture_provider, get_speech_provider

    capture = get_capture_provider()
    window = capture.find_target_window()

Unterstützte Provider:
    - macos: Quartz/ScreenCaptureKit, Speech, AVFoundation (PyObjC)
    - stub: alle anderen Plattformen (kein Fenster, keine Berechtigung)
"""

from typing import TYPE_CHECKING

from studio_platform import get_platform

if TYPE_CHECKING:
    from studio_platform.base import CaptureProvider, SpeechProvider


def get_capture_provider(mode: str | None = None) -> "CaptureProvider":
    """Factory für Capture-Provider.

    Args:
        mode: 'macos' oder 'stub' (default: aus der aktuellen Plattform)

    Raises:
        ValueError: Bei unbekanntem Provider
    """
    mode = mode or ("macos" if get_platform() == "macos" else "stub")
    if mode == "macos":
        from .capture import MacOSCaptureProvider

        return MacOSCaptureProvider()
    elif mode == "stub":
        from .capture import StubCaptureProvider

        return StubCaptureProvider()
    raise ValueError(f"Unbekannter Capture-Provider: {mode}")


def get_speech_provider(mode: str | None = None, *, locale: str | None = None) -> "SpeechProvider":
    """Factory für Speech-Provider.

    Args:
        mode: 'macos' oder 'stub' (default: aus der aktuellen Plattform)
        locale: Erkennungssprache (default: config.SPEECH_LOCALE)
    """
    mode = mode or ("macos" if get_platform() == "macos" else "stub")
    if mode == "macos":
        from .speech import MacOSSpeechProvider

        if locale:
            return MacOSSpeechProvider(locale=locale)
        return MacOSSpeechProvider()
    elif mode == "stub":
        from .speech import StubSpeechProvider

        return StubSpeechProvider()
    raise ValueError(f"Unbekannter Speech-Provider: {mode}")


__all__ = [
    "get_capture_provider",
    "get_speech_provider",
]
