"""
Berechtigungs-Checks für macOS (Bildschirmaufnahme, Spracherkennung).

Anfragen sind fire-and-forget: der OS-Dialog läuft asynchron, niemand
blockiert auf die Antwort des Users. Aufrufer prüfen has_permission()
einfach beim nächsten Versuch erneut.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import Callable, Protocol

from cli.types import Capability, PermissionState

logger = logging.getLogger("studiolink.permissions")

# System Settings → Privacy & Security Anker pro Capability
PRIVACY_ANCHORS = {
    Capability.screen_capture: "Privacy_ScreenCapture",
    Capability.speech: "Privacy_SpeechRecognition",
}

# SFSpeechRecognizerAuthorizationStatus (Speech.framework)
_SPEECH_NOT_DETERMINED = 0
_SPEECH_DENIED = 1
_SPEECH_RESTRICTED = 2
_SPEECH_AUTHORIZED = 3


class PermissionBackend(Protocol):
    """OS-spezifischer Zugriff auf eine einzelne Berechtigung."""

    def state(self) -> PermissionState: ...

    def request(self, on_resolved: Callable[[bool], None]) -> None: ...


class MacOSScreenCapturePermission:
    """Screen Recording via CGPreflightScreenCaptureAccess.

    Preflight kennt nur ja/nein. "denied" gilt erst, nachdem eine Anfrage
    beantwortet wurde; vorher ist der Zustand "unknown".
    """

    def __init__(self) -> None:
        self._answered = False

    def state(self) -> PermissionState:
        try:
            from Quartz import CGPreflightScreenCaptureAccess  # type: ignore[import-not-found]

            granted = bool(CGPreflightScreenCaptureAccess())
        except Exception as e:
            logger.debug(f"Screen-Capture-Preflight fehlgeschlagen: {e}")
            return PermissionState.unknown
        if granted:
            return PermissionState.granted
        return PermissionState.denied if self._answered else PermissionState.unknown

    def request(self, on_resolved: Callable[[bool], None]) -> None:
        from Quartz import CGRequestScreenCaptureAccess  # type: ignore[import-not-found]

        # CGRequestScreenCaptureAccess kann blockieren, solange der Dialog offen ist
        def _worker() -> None:
            try:
                granted = bool(CGRequestScreenCaptureAccess())
            except Exception as e:
                logger.warning(f"Screen-Capture-Anfrage fehlgeschlagen: {e}")
                granted = False
            self._answered = True
            on_resolved(granted)

        threading.Thread(target=_worker, daemon=True, name="ScreenCapturePermission").start()


class MacOSSpeechPermission:
    """Speech Recognition via SFSpeechRecognizer.authorizationStatus()."""

    def state(self) -> PermissionState:
        try:
            from Speech import SFSpeechRecognizer  # type: ignore[import-not-found]

            status = SFSpeechRecognizer.authorizationStatus()
        except Exception as e:
            logger.debug(f"Speech-Status nicht verfügbar: {e}")
            return PermissionState.unknown

        if status == _SPEECH_AUTHORIZED:
            return PermissionState.granted
        if status in (_SPEECH_DENIED, _SPEECH_RESTRICTED):
            return PermissionState.denied
        return PermissionState.unknown

    def request(self, on_resolved: Callable[[bool], None]) -> None:
        from Speech import SFSpeechRecognizer  # type: ignore[import-not-found]

        def _handler(status) -> None:
            logger.info(f"Speech-Berechtigung beantwortet: status={status}")
            on_resolved(status == _SPEECH_AUTHORIZED)

        SFSpeechRecognizer.requestAuthorization_(_handler)


class DeniedPermission:
    """Plattformen ohne native Frameworks: immer verweigert, Anfragen sind No-Ops."""

    def state(self) -> PermissionState:
        return PermissionState.denied

    def request(self, on_resolved: Callable[[bool], None]) -> None:
        on_resolved(False)


class PermissionGate:
    """Prüft und erfragt OS-Berechtigungen pro Capability.

    Pro Capability läuft höchstens eine offene Anfrage; weitere
    request_permission()-Aufrufe öffnen keinen zweiten Dialog, bis die
    erste beantwortet ist. Die Antwort wird als One-Shot-Event signalisiert.
    """

    def __init__(self, backends: dict[Capability, PermissionBackend]) -> None:
        self._backends = dict(backends)
        self._lock = threading.Lock()
        self._pending: dict[Capability, threading.Event] = {}

    def _backend(self, capability: Capability) -> PermissionBackend:
        try:
            return self._backends[Capability(capability)]
        except KeyError:
            raise ValueError(f"Unbekannte Capability: {capability}") from None

    def get_permission_state(self, capability: Capability) -> PermissionState:
        return self._backend(capability).state()

    def has_permission(self, capability: Capability) -> bool:
        return self.get_permission_state(capability) == PermissionState.granted

    def is_request_pending(self, capability: Capability) -> bool:
        with self._lock:
            event = self._pending.get(Capability(capability))
        return event is not None and not event.is_set()

    def request_permission(self, capability: Capability) -> threading.Event:
        """Startet die OS-Anfrage (nicht blockierend).

        Returns:
            Event, das gesetzt wird, sobald das OS geantwortet hat.
        """
        capability = Capability(capability)
        backend = self._backend(capability)

        with self._lock:
            event = self._pending.get(capability)
            if event is not None and not event.is_set():
                logger.debug(f"{capability.value}: Anfrage läuft bereits")
                return event
            event = threading.Event()
            self._pending[capability] = event

        def _resolved(granted: bool) -> None:
            logger.info(
                f"{capability.value}: Berechtigung {'erteilt' if granted else 'nicht erteilt'}"
            )
            event.set()

        logger.info(f"{capability.value}: Berechtigung wird angefragt")
        try:
            backend.request(_resolved)
        except Exception as e:
            logger.warning(f"{capability.value}: Anfrage fehlgeschlagen: {e}")
            event.set()
        return event

    def wait_for_resolution(self, capability: Capability, timeout: float | None = None) -> bool:
        """Wartet auf die offene Anfrage; True wenn keine (mehr) offen ist."""
        with self._lock:
            event = self._pending.get(Capability(capability))
        if event is None:
            return True
        return event.wait(timeout)


def open_privacy_settings(anchor: str) -> None:
    """Öffnet macOS System Settings → Privacy & Security.

    Args:
        anchor: Privacy section (z.B. "Privacy_ScreenCapture")
    """
    url = f"x-apple.systempreferences:com.apple.preference.security?{anchor}"
    try:
        subprocess.Popen(["open", url])
    except OSError as e:
        logger.warning(f"System Settings konnten nicht geöffnet werden: {e}")


__all__ = [
    "PRIVACY_ANCHORS",
    "PermissionBackend",
    "MacOSScreenCapturePermission",
    "MacOSSpeechPermission",
    "DeniedPermission",
    "PermissionGate",
    "open_privacy_settings",
]
