"""Installer für das Roblox-Studio-Plugin.

Kopiert die gebündelte <Name>.rbxm in das Plugins-Verzeichnis von
Roblox Studio. Geschrieben wird nur, wenn die Datei fehlt oder sich die
Bytes unterscheiden; das Schreiben läuft über Temp-Datei + os.replace.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path

from cli.types import InstallResult
from config import RESOURCES_DIR, AppProfile, get_app_profile
from errors import InstallError
from utils.env import get_env_str
from utils.timing import format_bytes, timed_operation

logger = logging.getLogger("studiolink.plugin")


def get_plugins_dir() -> Path | None:
    """Plugins-Verzeichnis von Roblox Studio.

    macOS: ~/Documents/Roblox/Plugins
    Windows: %LOCALAPPDATA%/Roblox/Plugins
    STUDIOLINK_PLUGINS_DIR überschreibt beides.
    """
    override = get_env_str("STUDIOLINK_PLUGINS_DIR")
    if override:
        return Path(override).expanduser()

    if sys.platform == "darwin":
        return Path.home() / "Documents" / "Roblox" / "Plugins"
    if sys.platform == "win32":
        local_app_data = os.getenv("LOCALAPPDATA")
        if not local_app_data:
            return None
        return Path(local_app_data) / "Roblox" / "Plugins"
    return None


class PluginInstaller:
    """Synchronisiert eine gebündelte Plugin-Datei in das Plugins-Verzeichnis."""

    def __init__(self, bundled_path: Path, filename: str, plugins_dir: Path | None) -> None:
        self.bundled_path = Path(bundled_path)
        self.filename = filename
        self.plugins_dir = Path(plugins_dir) if plugins_dir is not None else None

    @classmethod
    def for_profile(cls, profile: AppProfile | None = None) -> "PluginInstaller":
        profile = profile or get_app_profile()
        return cls(
            bundled_path=RESOURCES_DIR / profile.plugin_filename,
            filename=profile.plugin_filename,
            plugins_dir=get_plugins_dir(),
        )

    @property
    def plugin_path(self) -> Path | None:
        if self.plugins_dir is None:
            return None
        return self.plugins_dir / self.filename

    def _require_plugin_path(self) -> Path:
        path = self.plugin_path
        if path is None:
            raise InstallError("Could not determine plugins directory")
        return path

    def _bundled_bytes(self) -> bytes:
        try:
            return self.bundled_path.read_bytes()
        except OSError as e:
            raise InstallError(f"Bundled plugin not readable: {e}") from e

    def is_installed(self) -> bool:
        path = self.plugin_path
        return path is not None and path.is_file()

    def install(self) -> InstallResult:
        """Installiert oder aktualisiert das Plugin.

        Returns:
            InstallResult.installed bei Neuinstallation/Update,
            InstallResult.already_current wenn die Bytes bereits stimmen

        Raises:
            InstallError: Verzeichnis unbekannt oder Dateifehler
        """
        target = self._require_plugin_path()
        bundled = self._bundled_bytes()

        try:
            if not target.parent.exists():
                logger.info(f"Erstelle Plugins-Verzeichnis: {target.parent}")
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(f"Failed to create plugins directory: {e}") from e

        if target.exists():
            try:
                existing = target.read_bytes()
            except OSError as e:
                raise InstallError(f"Failed to read existing plugin: {e}") from e
            if existing == bundled:
                logger.info("Plugin bereits installiert und aktuell")
                return InstallResult.already_current
            logger.info("Plugin veraltet, aktualisiere...")

        with timed_operation("Plugin-Install", logger=logger, include_session=False) as timing:
            self._atomic_write(target, bundled)
            timing.detail = format_bytes(len(bundled))

        logger.info(f"Plugin installiert: {target}")
        return InstallResult.installed

    @staticmethod
    def _atomic_write(target: Path, data: bytes) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        except OSError as e:
            raise InstallError(f"Failed to create temp file in {target.parent}: {e}") from e
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise InstallError(f"Failed to write plugin file: {e}") from e

    def uninstall(self) -> bool:
        """Entfernt das Plugin. True wenn gelöscht, False wenn nichts da war."""
        target = self._require_plugin_path()
        if not target.exists():
            logger.warning("Plugin nicht gefunden, nichts zu deinstallieren")
            return False
        try:
            target.unlink()
        except OSError as e:
            raise InstallError(f"Failed to remove plugin: {e}") from e
        logger.info("Plugin deinstalliert")
        return True

    def open_folder(self) -> None:
        """Öffnet das Plugins-Verzeichnis im Finder/Explorer."""
        if self.plugins_dir is None:
            raise InstallError("Could not determine plugins directory")
        self.plugins_dir.mkdir(parents=True, exist_ok=True)
        if sys.platform == "darwin":
            subprocess.Popen(["open", str(self.plugins_dir)])
        elif sys.platform == "win32":
            os.startfile(str(self.plugins_dir))  # type: ignore[attr-defined]
        else:
            subprocess.Popen(["xdg-open", str(self.plugins_dir)])


def install_plugin(profile: AppProfile | None = None) -> InstallResult:
    return PluginInstaller.for_profile(profile).install()


def uninstall_plugin(profile: AppProfile | None = None) -> bool:
    return PluginInstaller.for_profile(profile).uninstall()


def is_plugin_installed(profile: AppProfile | None = None) -> bool:
    return PluginInstaller.for_profile(profile).is_installed()


def get_plugin_path(profile: AppProfile | None = None) -> Path | None:
    return PluginInstaller.for_profile(profile).plugin_path


__all__ = [
    "PluginInstaller",
    "get_plugins_dir",
    "install_plugin",
    "uninstall_plugin",
    "is_plugin_installed",
    "get_plugin_path",
]
