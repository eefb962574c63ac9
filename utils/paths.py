"""Pfade zu gebündelten Ressourcen (Plugin-Dateien)."""

import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_resource_path(relative_path: str) -> Path:
    """Quell-Checkout: relativ zum Projekt-Root. PyInstaller-Bundle: relativ zu sys._MEIPASS."""
    bundle_dir = getattr(sys, "_MEIPASS", None)
    root = Path(bundle_dir) if bundle_dir else _PROJECT_ROOT
    return root / relative_path
