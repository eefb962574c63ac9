"""Request/Response-Modelle der lokalen HTTP-API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    has_capture_permission: bool
    has_speech_permission: bool


class PermissionResponse(BaseModel):
    granted: bool
    message: str


class ErrorResponse(BaseModel):
    error: str
    code: str


class SpeechStatus(BaseModel):
    listening: bool
    speaking: bool
    has_permission: bool


class TranscriptionResponse(BaseModel):
    text: str | None = None
    listening: bool


class SpeakRequest(BaseModel):
    text: str


class GenericResponse(BaseModel):
    success: bool
    message: str


class SnapStatus(BaseModel):
    enabled: bool
    message: str | None = None


class PluginStatus(BaseModel):
    installed: bool
    path: str | None = None


class PluginInstallResponse(BaseModel):
    success: bool
    status: str
    path: str | None = None
