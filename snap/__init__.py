"""Snap-to-Studio Fensterführung."""

from .loop import SnapLoop, SnapState

__all__ = ["SnapLoop", "SnapState"]
