"""Speech-Command-Surface.

Zwei unabhängige Achsen:
- Listening (idle ↔ listening), nur mit Speech-Berechtigung startbar
- Speaking (speak/stop_speaking), ohne Kopplung an Listening

Der eigentliche Zustand liegt im Provider; dieser Service setzt nur die
Regeln durch (Berechtigung, eine Session, leere Texte, NUL-Bytes).
"""

import logging
from dataclasses import dataclass

from cli.types import Capability, ListeningState
from config import TTS_LOG_PREVIEW
from studio_platform.base import SpeechProvider
from utils.permissions import PermissionGate
from utils.timing import log_preview

logger = logging.getLogger("studiolink.speech")


@dataclass
class CommandResult:
    success: bool
    message: str


class SpeechService:
    def __init__(self, gate: PermissionGate, provider: SpeechProvider) -> None:
        self._gate = gate
        self._provider = provider

    def has_permission(self) -> bool:
        return self._gate.has_permission(Capability.speech)

    @property
    def state(self) -> ListeningState:
        return ListeningState.listening if self._provider.is_listening() else ListeningState.idle

    def is_listening(self) -> bool:
        return self.state == ListeningState.listening

    def start_listening(self) -> CommandResult:
        """idle → listening. Schlägt ohne Berechtigung oder bei Provider-Ablehnung fehl."""
        if not self.has_permission():
            self._gate.request_permission(Capability.speech)
            return CommandResult(
                False,
                "Speech permission not granted. Please grant in System Settings > "
                "Privacy > Speech Recognition",
            )

        if self.is_listening():
            return CommandResult(True, "Already listening")

        try:
            started = self._provider.start_listening()
        except Exception as e:
            logger.error(f"Spracherkennung konnte nicht starten: {e}")
            started = False

        if not started:
            return CommandResult(False, "Failed to start speech recognition")
        return CommandResult(True, "Started listening")

    def stop_listening(self) -> CommandResult:
        """listening → idle. Immer erfolgreich, idempotent."""
        self._provider.stop_listening()
        return CommandResult(True, "Stopped listening")

    def get_transcription(self) -> str | None:
        """Letztes Transkript; leerer String zählt als 'kein Transkript'."""
        text = self._provider.latest_transcript()
        return text or None

    def speak(self, text: str) -> CommandResult:
        if not text:
            logger.warning("TTS: leerer Text abgelehnt")
            return CommandResult(False, "Failed to speak: text is empty")
        if "\x00" in text:
            logger.error("TTS: Text enthält NUL-Byte")
            return CommandResult(False, "Failed to speak: invalid text")

        logger.info(f"Speaking: {log_preview(text, TTS_LOG_PREVIEW)}")
        try:
            ok = self._provider.speak(text)
        except Exception as e:
            logger.error(f"TTS fehlgeschlagen: {e}")
            ok = False
        if not ok:
            return CommandResult(False, "Failed to speak")
        return CommandResult(True, "Speaking")

    def stop_speaking(self) -> CommandResult:
        self._provider.stop_speaking()
        return CommandResult(True, "Stopped speaking")

    def is_speaking(self) -> bool:
        return self._provider.is_speaking()
