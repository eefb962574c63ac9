"""
Gemeinsame Test-Fixtures für StudioLink.

Diese Fixtures isolieren Tests von externen Abhängigkeiten:
- Native Frameworks (Quartz, Speech, AVFoundation) → Fake-Provider
- OS-Berechtigungen → Fake-Backends für das PermissionGate
- Dateisystem (Roblox-Plugins-Verzeichnis) → tmp_path
- Umgebungsvariablen (STUDIOLINK_*)
"""

import sys
from pathlib import Path

import pytest

# Projekt-Root zum Python-Path hinzufügen
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cli.types import Capability, PermissionState  # noqa: E402
from studio_platform.base import WindowBounds, WindowInfo  # noqa: E402
from utils.permissions import PermissionGate  # noqa: E402

FAKE_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# =============================================================================
# Fakes
# =============================================================================


class FakePermissionBackend:
    """Berechtigung, deren Anfrage erst auf resolve() beantwortet wird."""

    def __init__(self, state: PermissionState = PermissionState.unknown) -> None:
        self.current = state
        self.request_count = 0
        self._callbacks = []

    def state(self) -> PermissionState:
        return self.current

    def request(self, on_resolved) -> None:
        self.request_count += 1
        self._callbacks.append(on_resolved)

    def resolve(self, granted: bool) -> None:
        self.current = PermissionState.granted if granted else PermissionState.denied
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(granted)


class FakeCaptureProvider:
    def __init__(self, window: WindowInfo | None = None, png: bytes | None = FAKE_PNG) -> None:
        self.window = window
        self.png = png
        self.find_calls = 0
        self.capture_calls = 0

    def find_target_window(self) -> WindowInfo | None:
        self.find_calls += 1
        return self.window

    def capture_window(self, window: WindowInfo) -> bytes | None:
        self.capture_calls += 1
        return self.png


class FakeSpeechProvider:
    """Simuliert Listening-Session und Sprachausgabe."""

    def __init__(self, start_result: bool = True) -> None:
        self.start_result = start_result
        self.listening = False
        self.speaking = False
        self.transcript = ""
        self.start_calls = 0
        self.stop_calls = 0
        self.spoken: list[str] = []

    def start_listening(self) -> bool:
        self.start_calls += 1
        if not self.start_result:
            return False
        if not self.listening:
            self.transcript = ""
        self.listening = True
        return True

    def stop_listening(self) -> None:
        self.stop_calls += 1
        self.listening = False

    def is_listening(self) -> bool:
        return self.listening

    def latest_transcript(self) -> str | None:
        return self.transcript or None

    def hear(self, text: str) -> None:
        """Simuliert ein (partielles) Erkennungsergebnis."""
        self.transcript = text

    def speak(self, text: str) -> bool:
        self.spoken.append(text)
        self.speaking = True
        return True

    def stop_speaking(self) -> None:
        self.speaking = False

    def is_speaking(self) -> bool:
        return self.speaking


class FakeLocator:
    def __init__(self, bounds: WindowBounds | None = None) -> None:
        self.bounds = bounds
        self.calls = 0

    def studio_bounds(self) -> WindowBounds | None:
        self.calls += 1
        return self.bounds


class RecordingMover:
    def __init__(self) -> None:
        self.moves: list[tuple[int, int, int, int]] = []

    def move(self, x: int, y: int, width: int, height: int) -> None:
        self.moves.append((x, y, width, height))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def studio_window():
    return WindowInfo(
        window_id=4242,
        owner="RobloxStudio",
        bounds=WindowBounds(0, 25, 1280, 800),
        title="Baseplate - Roblox Studio",
    )


@pytest.fixture
def make_gate():
    """
    Factory für PermissionGates mit Fake-Backends.

    Usage:
        gate, backends = make_gate(screen=PermissionState.granted)
    """

    def _create(
        screen: PermissionState = PermissionState.granted,
        speech: PermissionState = PermissionState.granted,
    ):
        backends = {
            Capability.screen_capture: FakePermissionBackend(screen),
            Capability.speech: FakePermissionBackend(speech),
        }
        return PermissionGate(backends), backends

    return _create


@pytest.fixture
def capture_provider(studio_window):
    return FakeCaptureProvider(window=studio_window)


@pytest.fixture
def speech_provider():
    return FakeSpeechProvider()


@pytest.fixture
def clean_env(monkeypatch):
    """Entfernt alle STUDIOLINK_* Umgebungsvariablen für saubere Tests."""
    import os

    for key in list(os.environ.keys()):
        if key.startswith("STUDIOLINK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def plugin_env(tmp_path, monkeypatch, clean_env):
    """
    Isoliertes Plugin-Setup: gebündelte Datei + leeres Plugins-Verzeichnis.

    Returns:
        (bundled_path, plugins_dir)
    """
    bundled = tmp_path / "bundle" / "DetAI.rbxm"
    bundled.parent.mkdir()
    bundled.write_bytes(b"<roblox!plugin-v2")
    plugins_dir = tmp_path / "Roblox" / "Plugins"
    monkeypatch.setenv("STUDIOLINK_PLUGINS_DIR", str(plugins_dir))
    return bundled, plugins_dir
