"""CLI module for StudioLink."""

from .types import (
    Capability,
    PermissionState,
    ListeningState,
    InstallResult,
)

__all__ = [
    "Capability",
    "PermissionState",
    "ListeningState",
    "InstallResult",
]
