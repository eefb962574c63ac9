"""Command-Services zwischen HTTP-Schicht und nativen Providern."""

from .capture import CaptureService
from .speech import CommandResult, SpeechService

__all__ = ["CaptureService", "CommandResult", "SpeechService"]
