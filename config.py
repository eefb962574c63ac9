"""Zentrale Konfiguration für StudioLink.

Gemeinsame Konstanten für HTTP-Server, Capture, Speech, Plugin-Installation
und Snap-Loop. Vermeidet Duplikation zwischen Modulen.
"""

import os
from dataclasses import dataclass
from pathlib import Path

APP_VERSION = "0.3.1"

# =============================================================================
# App-Profile
# =============================================================================


@dataclass(frozen=True)
class AppProfile:
    """Ein Produkt-Build (DetAI, Bakable) derselben Codebasis."""

    key: str
    display_name: str
    plugin_name: str
    port: int

    @property
    def plugin_filename(self) -> str:
        return f"{self.plugin_name}.rbxm"


APP_PROFILES = {
    "detai": AppProfile("detai", "DetAI", "DetAI", 4850),
    "bakable": AppProfile("bakable", "Bakable", "Bakable", 4850),
}
DEFAULT_APP_PROFILE = "detai"


def get_app_profile(name: str | None = None) -> AppProfile:
    """Gibt das aktive App-Profil zurück (Argument > STUDIOLINK_APP > Default).

    Raises:
        ValueError: Bei unbekanntem Profil
    """
    key = (name or os.getenv("STUDIOLINK_APP") or DEFAULT_APP_PROFILE).strip().lower()
    try:
        return APP_PROFILES[key]
    except KeyError:
        raise ValueError(
            f"Unbekanntes App-Profil: {key!r} (erlaubt: {', '.join(APP_PROFILES)})"
        ) from None


# =============================================================================
# HTTP-Server
# =============================================================================

# Nur Loopback: das Studio-Plugin läuft auf derselben Maschine
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = APP_PROFILES[DEFAULT_APP_PROFILE].port

# =============================================================================
# Capture
# =============================================================================

CAPTURE_TARGET_TOKEN = "roblox"  # Owner-Name / Bundle-ID enthält diesen Token
CAPTURE_SCK_TIMEOUT = 10.0  # Sekunden für den ScreenCaptureKit-Fallback
CAPTURE_MAX_WIDTH = 1920
CAPTURE_MAX_HEIGHT = 1080
CAPTURE_SLOW_MS = 1000  # Langsamere Captures als WARNING loggen

# =============================================================================
# Speech
# =============================================================================

SPEECH_LOCALE = "en-US"
TTS_VOICE_LANGUAGE = "en-US"
SPEECH_TAP_BUFFER_SIZE = 1024
TTS_LOG_PREVIEW = 50  # Zeichen des gesprochenen Texts im Log

# =============================================================================
# Snap-to-Studio
# =============================================================================

SNAP_POLL_INTERVAL = 0.008  # ~120 Hz
SNAP_WINDOW_WIDTH = 420
SNAP_WINDOW_MIN_HEIGHT = 300

# =============================================================================
# Lokale Pfade
# =============================================================================

# User-Verzeichnis für Konfiguration und Logs
USER_CONFIG_DIR = Path.home() / ".studiolink"
USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

LOG_DIR = USER_CONFIG_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "studiolink.log"

# Erst nach den Pfad-Konstanten importieren: utils.logging liest LOG_FILE aus config
from utils.paths import get_resource_path  # noqa: E402

# Gebündelte Plugin-Dateien (resources/<Name>.rbxm)
RESOURCES_DIR = get_resource_path("resources")


__all__ = [
    "APP_VERSION",
    # Profile
    "AppProfile",
    "APP_PROFILES",
    "DEFAULT_APP_PROFILE",
    "get_app_profile",
    # Server
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    # Capture
    "CAPTURE_TARGET_TOKEN",
    "CAPTURE_SCK_TIMEOUT",
    "CAPTURE_MAX_WIDTH",
    "CAPTURE_MAX_HEIGHT",
    "CAPTURE_SLOW_MS",
    # Speech
    "SPEECH_LOCALE",
    "TTS_VOICE_LANGUAGE",
    "SPEECH_TAP_BUFFER_SIZE",
    "TTS_LOG_PREVIEW",
    # Snap
    "SNAP_POLL_INTERVAL",
    "SNAP_WINDOW_WIDTH",
    "SNAP_WINDOW_MIN_HEIGHT",
    # Paths
    "USER_CONFIG_DIR",
    "LOG_DIR",
    "LOG_FILE",
    "RESOURCES_DIR",
]
