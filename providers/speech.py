"""Speech-Provider: Spracherkennung und Sprachausgabe.

macOS:
- Speech-to-Text: SFSpeechRecognizer, gespeist über einen AVAudioEngine-Tap
- Text-to-Speech: AVSpeechSynthesizer

Der Provider hält den gesamten nativen Zustand (Engine, Request, Task,
letztes Transkript). Die Command-Surface beobachtet ihn nur.
"""

import logging
import threading

from config import SPEECH_LOCALE, SPEECH_TAP_BUFFER_SIZE, TTS_VOICE_LANGUAGE

logger = logging.getLogger("studiolink.providers.speech")

# AVSpeechBoundaryImmediate
_BOUNDARY_IMMEDIATE = 0


class MacOSSpeechProvider:
    """SFSpeechRecognizer + AVSpeechSynthesizer via PyObjC."""

    name = "macos"

    def __init__(self, locale: str = SPEECH_LOCALE, voice_language: str = TTS_VOICE_LANGUAGE) -> None:
        self._locale = locale
        self._voice_language = voice_language
        self._lock = threading.Lock()
        self._recognizer = None
        self._engine = None
        self._request = None
        self._task = None
        self._listening = False
        self._transcript = ""
        self._synthesizer = None

    # =========================================================================
    # Speech-to-Text
    # =========================================================================

    def start_listening(self) -> bool:
        from AVFoundation import AVAudioEngine  # type: ignore[import-not-found]
        from Foundation import NSLocale  # type: ignore[import-not-found]
        from Speech import (  # type: ignore[import-not-found]
            SFSpeechAudioBufferRecognitionRequest,
            SFSpeechRecognizer,
        )

        with self._lock:
            if self._listening:
                logger.debug("Spracherkennung läuft bereits")
                return True

            recognizer = SFSpeechRecognizer.alloc().initWithLocale_(
                NSLocale.localeWithLocaleIdentifier_(self._locale)
            )
            if recognizer is None or not recognizer.isAvailable():
                logger.warning(f"Speech Recognizer nicht verfügbar ({self._locale})")
                return False

            engine = AVAudioEngine.alloc().init()
            request = SFSpeechAudioBufferRecognitionRequest.alloc().init()
            request.setShouldReportPartialResults_(True)

            input_node = engine.inputNode()
            recording_format = input_node.outputFormatForBus_(0)

            def _on_buffer(buffer, _when) -> None:
                request.appendAudioPCMBuffer_(buffer)

            input_node.installTapOnBus_bufferSize_format_block_(
                0, SPEECH_TAP_BUFFER_SIZE, recording_format, _on_buffer
            )

            task = recognizer.recognitionTaskWithRequest_resultHandler_(
                request, self._on_result
            )

            engine.prepare()
            ok, err = engine.startAndReturnError_(None)
            if not ok:
                logger.error(f"Audio-Engine konnte nicht starten: {err}")
                input_node.removeTapOnBus_(0)
                task.cancel()
                return False

            # Erst nach erfolgreichem Start verwerfen; _on_result wartet auf den Lock
            self._transcript = ""
            self._recognizer = recognizer
            self._engine = engine
            self._request = request
            self._task = task
            self._listening = True

        logger.info("Spracherkennung gestartet")
        return True

    def _on_result(self, result, error) -> None:
        if result is not None:
            text = result.bestTranscription().formattedString() or ""
            with self._lock:
                self._transcript = str(text)
            logger.debug(f"Transkript: {text}")
        if error is not None:
            logger.debug(f"Recognition beendet: {error}")

    def stop_listening(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.stop()
                self._engine.inputNode().removeTapOnBus_(0)
            if self._request is not None:
                self._request.endAudio()
            if self._task is not None:
                self._task.cancel()

            self._engine = None
            self._request = None
            self._task = None
            self._recognizer = None
            was_listening = self._listening
            self._listening = False

        if was_listening:
            logger.info("Spracherkennung gestoppt")

    def is_listening(self) -> bool:
        with self._lock:
            return self._listening

    def latest_transcript(self) -> str | None:
        with self._lock:
            return self._transcript or None

    # =========================================================================
    # Text-to-Speech
    # =========================================================================

    def speak(self, text: str) -> bool:
        from AVFoundation import (  # type: ignore[import-not-found]
            AVSpeechSynthesisVoice,
            AVSpeechSynthesizer,
            AVSpeechUtterance,
            AVSpeechUtteranceDefaultSpeechRate,
        )

        if self._synthesizer is None:
            self._synthesizer = AVSpeechSynthesizer.alloc().init()
        synth = self._synthesizer
        if synth is None:
            return False

        # Laufende Ausgabe unterbrechen
        if synth.isSpeaking():
            synth.stopSpeakingAtBoundary_(_BOUNDARY_IMMEDIATE)

        utterance = AVSpeechUtterance.speechUtteranceWithString_(text)
        utterance.setVoice_(AVSpeechSynthesisVoice.voiceWithLanguage_(self._voice_language))
        utterance.setRate_(AVSpeechUtteranceDefaultSpeechRate)
        utterance.setPitchMultiplier_(1.0)
        utterance.setVolume_(1.0)

        synth.speakUtterance_(utterance)
        return True

    def stop_speaking(self) -> None:
        if self._synthesizer is not None:
            self._synthesizer.stopSpeakingAtBoundary_(_BOUNDARY_IMMEDIATE)

    def is_speaking(self) -> bool:
        if self._synthesizer is None:
            return False
        return bool(self._synthesizer.isSpeaking())


class StubSpeechProvider:
    """Nicht-macOS: Start und Sprachausgabe schlagen immer fehl."""

    name = "stub"

    def start_listening(self) -> bool:
        return False

    def stop_listening(self) -> None:
        pass

    def is_listening(self) -> bool:
        return False

    def latest_transcript(self) -> str | None:
        return None

    def speak(self, text: str) -> bool:
        return False

    def stop_speaking(self) -> None:
        pass

    def is_speaking(self) -> bool:
        return False


__all__ = ["MacOSSpeechProvider", "StubSpeechProvider"]
