"""Lokale HTTP-API für das Roblox-Studio-Plugin.

Endpoints:
  GET  /health                 Health-Check inkl. Berechtigungen
  GET  /permission             Screen-Capture-Berechtigung prüfen/anfragen
  GET  /capture                Studio-Viewport als PNG
  GET  /speech/status          Listening/Speaking/Berechtigung
  POST /speech/listen          Spracherkennung starten
  POST /speech/stop            Spracherkennung stoppen
  GET  /speech/transcription   Aktuelles Transkript
  POST /speech/speak           Text-to-Speech
  POST /speech/silence         Sprachausgabe stoppen
  GET  /snap                   Snap-to-Studio Status
  POST /snap                   Snap-to-Studio umschalten
  GET  /plugin                 Plugin-Installationsstatus
  POST /plugin/install         Plugin (neu) installieren
  POST /plugin/uninstall       Plugin entfernen

Alle Handler sind zustandslos; jeder Request ist unabhängig.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Body, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from config import APP_VERSION
from errors import CAPTURE_FAILED, PermissionDenied, StudioLinkError, TargetNotFound
from plugin.installer import PluginInstaller
from services.capture import CaptureService
from services.speech import SpeechService
from snap.loop import SnapLoop

from .models import (
    ErrorResponse,
    GenericResponse,
    HealthResponse,
    PermissionResponse,
    PluginInstallResponse,
    PluginStatus,
    SnapStatus,
    SpeakRequest,
    SpeechStatus,
    TranscriptionResponse,
)

logger = logging.getLogger("studiolink.server")


@dataclass
class CompanionContext:
    """Alles, was die Handler brauchen; wird einmal beim Start gebaut."""

    capture: CaptureService
    speech: SpeechService
    installer: PluginInstaller
    snap: SnapLoop | None = None
    version: str = APP_VERSION
    app_name: str = "StudioLink"


def _error(status_code: int, exc: StudioLinkError, code: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=exc.message, code=code or exc.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(context: CompanionContext) -> FastAPI:
    """Baut die FastAPI-App um einen CompanionContext."""
    app = FastAPI(title=f"{context.app_name} Companion", version=context.version)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StudioLinkError)
    async def _studiolink_error(_request: Request, exc: StudioLinkError):
        logger.error(f"{exc.code}: {exc.message}")
        return _error(500, exc)

    # =========================================================================
    # Capture
    # =========================================================================

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(
            version=context.version,
            has_capture_permission=context.capture.has_permission(),
            has_speech_permission=context.speech.has_permission(),
        )

    @app.get("/permission", response_model=PermissionResponse)
    def permission():
        if context.capture.has_permission():
            return PermissionResponse(granted=True, message="Screen capture permission granted")
        context.capture.request_permission()
        return PermissionResponse(
            granted=False,
            message="Permission requested. Please grant access in System Settings > "
            "Privacy > Screen Recording",
        )

    @app.get(
        "/capture",
        responses={
            200: {"content": {"image/png": {}}},
            403: {"model": ErrorResponse},
            503: {"model": ErrorResponse},
        },
    )
    def capture(
        width: int | None = Query(default=None, ge=1),
        format: str | None = Query(default=None),
    ):
        try:
            png = context.capture.capture_viewport(width=width, format=format)
        except PermissionDenied as e:
            return _error(403, e)
        except TargetNotFound as e:
            # Plugin erwartet für "Studio nicht gefunden" denselben Code wie für Capture-Fehler
            logger.error(e.message)
            return _error(503, e, code=CAPTURE_FAILED)
        except StudioLinkError as e:
            return _error(503, e, code=CAPTURE_FAILED)
        return Response(content=png, media_type="image/png")

    # =========================================================================
    # Speech
    # =========================================================================

    @app.get("/speech/status", response_model=SpeechStatus)
    def speech_status():
        return SpeechStatus(
            listening=context.speech.is_listening(),
            speaking=context.speech.is_speaking(),
            has_permission=context.speech.has_permission(),
        )

    @app.post("/speech/listen", response_model=GenericResponse)
    def speech_listen():
        result = context.speech.start_listening()
        return GenericResponse(success=result.success, message=result.message)

    @app.post("/speech/stop", response_model=GenericResponse)
    def speech_stop():
        result = context.speech.stop_listening()
        return GenericResponse(success=result.success, message=result.message)

    @app.get("/speech/transcription", response_model=TranscriptionResponse)
    def speech_transcription():
        return TranscriptionResponse(
            text=context.speech.get_transcription(),
            listening=context.speech.is_listening(),
        )

    @app.post("/speech/speak", response_model=GenericResponse)
    def speech_speak(payload: SpeakRequest = Body(...)):
        result = context.speech.speak(payload.text)
        return GenericResponse(success=result.success, message=result.message)

    @app.post("/speech/silence", response_model=GenericResponse)
    def speech_silence():
        result = context.speech.stop_speaking()
        return GenericResponse(success=result.success, message=result.message)

    # =========================================================================
    # Snap-to-Studio
    # =========================================================================

    @app.get("/snap", response_model=SnapStatus)
    def snap_status():
        enabled = context.snap.state.enabled if context.snap else False
        return SnapStatus(enabled=enabled)

    @app.post("/snap", response_model=SnapStatus)
    def snap_toggle():
        if context.snap is None:
            return SnapStatus(enabled=False, message="Snap not available")
        enabled = context.snap.toggle()
        message = "Snap enabled - window will follow Studio" if enabled else "Snap disabled"
        return SnapStatus(enabled=enabled, message=message)

    # =========================================================================
    # Plugin
    # =========================================================================

    @app.get("/plugin", response_model=PluginStatus)
    def plugin_status():
        path = context.installer.plugin_path
        return PluginStatus(
            installed=context.installer.is_installed(),
            path=str(path) if path else None,
        )

    @app.post("/plugin/install", response_model=PluginInstallResponse)
    def plugin_install():
        result = context.installer.install()
        path = context.installer.plugin_path
        return PluginInstallResponse(
            success=True, status=result.value, path=str(path) if path else None
        )

    @app.post("/plugin/uninstall", response_model=GenericResponse)
    def plugin_uninstall():
        removed = context.installer.uninstall()
        message = "Plugin uninstalled" if removed else "Plugin not installed"
        return GenericResponse(success=True, message=message)

    return app
