"""STUDIOLINK_* Umgebungsvariablen und .env-Dateien.

Reihenfolge beim Laden (ohne override_existing):
  1. Prozess-Environment
  2. ~/.studiolink/.env
  3. .env im Arbeitsverzeichnis

Ungültige Werte werden mit Warnung ignoriert; es gilt dann der Default.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger("studiolink.env")

_BOOL_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def parse_bool(value: str | None) -> bool | None:
    """"true"/"1"/"on"/... → True, "false"/"0"/"off"/... → False, sonst None."""
    if value is None:
        return None
    return _BOOL_WORDS.get(value.strip().lower())


def get_env_str(name: str) -> str | None:
    """Getrimmter Wert; leere Werte zählen als nicht gesetzt."""
    value = (os.getenv(name) or "").strip()
    return value or None


def get_env_bool_default(name: str, default: bool) -> bool:
    raw = get_env_str(name)
    if raw is None:
        return default
    parsed = parse_bool(raw)
    if parsed is None:
        logger.warning(f"{name}={raw!r} ist kein Bool, nutze {default}")
        return default
    return parsed


def get_env_int(name: str) -> int | None:
    raw = get_env_str(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} ist keine Zahl, ignoriere")
        return None


def get_env_port(name: str, default: int) -> int:
    """TCP-Port aus dem Environment; Werte außerhalb 1-65535 → default."""
    port = get_env_int(name)
    if port is None:
        return default
    if not 0 < port < 65536:
        logger.warning(f"{name}={port} ist kein gültiger Port, nutze {default}")
        return default
    return port


@dataclass(frozen=True)
class EnvSettings:
    """Snapshot aller Daemon-relevanten STUDIOLINK_* Variablen.

    None bedeutet "nicht gesetzt"; der Daemon nimmt dann CLI-Flag oder Profil-Default.
    """

    app: str | None = None
    host: str | None = None
    port: int | None = None
    snap: bool = False
    debug: bool = False
    install_plugin: bool = True
    speech_locale: str | None = None
    plugins_dir: str | None = None

    @classmethod
    def from_env(cls) -> "EnvSettings":
        port = get_env_int("STUDIOLINK_PORT")
        if port is not None and not 0 < port < 65536:
            logger.warning(f"STUDIOLINK_PORT={port} ist kein gültiger Port, ignoriere")
            port = None
        return cls(
            app=get_env_str("STUDIOLINK_APP"),
            host=get_env_str("STUDIOLINK_HOST"),
            port=port,
            snap=get_env_bool_default("STUDIOLINK_SNAP", False),
            debug=get_env_bool_default("STUDIOLINK_DEBUG", False),
            install_plugin=get_env_bool_default("STUDIOLINK_INSTALL_PLUGIN", True),
            speech_locale=get_env_str("STUDIOLINK_SPEECH_LOCALE"),
            plugins_dir=get_env_str("STUDIOLINK_PLUGINS_DIR"),
        )


def load_environment(*, override_existing: bool = False) -> list[Path]:
    """Übernimmt .env-Werte nach os.environ.

    Args:
        override_existing: Auch bereits gesetzte Variablen überschreiben

    Returns:
        Die tatsächlich gelesenen .env-Dateien
    """
    from config import USER_CONFIG_DIR

    loaded: list[Path] = []
    values: dict[str, str] = {}
    # Projekt zuerst, dann User-Config (User gewinnt)
    for env_path in (Path(".env"), USER_CONFIG_DIR / ".env"):
        if not env_path.is_file():
            continue
        loaded.append(env_path)
        values.update(
            {str(key): str(value) for key, value in dotenv_values(env_path).items() if value is not None}
        )

    for key, value in values.items():
        if override_existing or key not in os.environ:
            os.environ[key] = value

    if loaded:
        logger.debug(f".env geladen: {', '.join(str(p) for p in loaded)}")
    return loaded


__all__ = [
    "EnvSettings",
    "get_env_bool_default",
    "get_env_int",
    "get_env_port",
    "get_env_str",
    "load_environment",
    "parse_bool",
]
