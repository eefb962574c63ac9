"""Fehlertypen und Fehlercodes für StudioLink.

Jeder Fehler trägt eine menschenlesbare Nachricht und einen
maschinenlesbaren Code, den die HTTP-Schicht unverändert ausliefert.
Nichts davon wird automatisch wiederholt.
"""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
TARGET_NOT_FOUND = "TARGET_NOT_FOUND"
CAPTURE_FAILED = "CAPTURE_FAILED"
PROVIDER_FAILURE = "PROVIDER_FAILURE"
IO_FAILURE = "IO_FAILURE"


class StudioLinkError(Exception):
    """Basisklasse aller fachlichen Fehler."""

    default_code = PROVIDER_FAILURE

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class PermissionDenied(StudioLinkError):
    """OS-Berechtigung (Screen Recording / Speech Recognition) fehlt."""

    default_code = PERMISSION_DENIED


class TargetNotFound(StudioLinkError):
    """Roblox Studio läuft nicht oder hat kein sichtbares Fenster."""

    default_code = TARGET_NOT_FOUND


class ProviderFailure(StudioLinkError):
    """Native Framework-Aufruf lieferte nichts (null/leer/false)."""

    default_code = PROVIDER_FAILURE


class InstallError(StudioLinkError):
    """Dateifehler beim Installieren/Deinstallieren des Studio-Plugins."""

    default_code = IO_FAILURE


__all__ = [
    "PERMISSION_DENIED",
    "TARGET_NOT_FOUND",
    "CAPTURE_FAILED",
    "PROVIDER_FAILURE",
    "IO_FAILURE",
    "StudioLinkError",
    "PermissionDenied",
    "TargetNotFound",
    "ProviderFailure",
    "InstallError",
]
