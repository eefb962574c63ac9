"""Capture-Command: Screenshot des Roblox-Studio-Viewports.

Ablauf: Berechtigung prüfen → Zielfenster suchen → Provider aufrufen.
Kein Retry; Fehler gehen direkt an den Aufrufer (HTTP-Schicht).
"""

import logging

from cli.types import Capability
from config import CAPTURE_SLOW_MS
from errors import CAPTURE_FAILED, PermissionDenied, ProviderFailure, TargetNotFound
from studio_platform.base import CaptureProvider
from utils.permissions import PermissionGate
from utils.timing import format_bytes, timed_operation

logger = logging.getLogger("studiolink.capture")


class CaptureService:
    def __init__(self, gate: PermissionGate, provider: CaptureProvider) -> None:
        self._gate = gate
        self._provider = provider

    def has_permission(self) -> bool:
        return self._gate.has_permission(Capability.screen_capture)

    def request_permission(self) -> None:
        self._gate.request_permission(Capability.screen_capture)

    def capture_viewport(self, width: int | None = None, format: str | None = None) -> bytes:
        """Nimmt das Studio-Fenster als PNG auf.

        Args:
            width: Gewünschte Breite (derzeit ignoriert)
            format: Gewünschtes Format (derzeit ignoriert, immer PNG)

        Returns:
            PNG-Bytes

        Raises:
            PermissionDenied: Screen-Recording-Berechtigung fehlt (Provider wird nicht aufgerufen)
            TargetNotFound: Roblox Studio hat kein sichtbares Fenster
            ProviderFailure: Provider lieferte keine/leere Daten
        """
        if not self.has_permission():
            logger.error("Screen-Capture-Berechtigung fehlt")
            self.request_permission()
            raise PermissionDenied(
                "Screen capture permission not granted. Visit /permission to request."
            )

        window = self._provider.find_target_window()
        if window is None:
            raise TargetNotFound("Roblox Studio window not found. Is it running?")

        with timed_operation("Capture", logger=logger, slow_ms=CAPTURE_SLOW_MS) as timing:
            png = self._provider.capture_window(window)
            timing.detail = f"{window.owner} #{window.window_id}, {format_bytes(len(png or b''))}"

        if not png:
            logger.error("Capture lieferte keine Daten")
            raise ProviderFailure(
                "Failed to capture Roblox Studio. Is it running?", code=CAPTURE_FAILED
            )
        return png
