"""Logging für StudioLink.

Alle Module loggen unter "studiolink.*". setup_logging() hängt an diesen
Baum eine rotierende Logdatei (~/.studiolink/logs/studiolink.log, Fallback
/tmp) und im Debug-Modus zusätzlich stderr. Fremde Logger (uvicorn) lassen
sich mit share_handlers() auf dieselben Ziele umleiten.
"""

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

logger = logging.getLogger("studiolink")

_FILE_FORMAT = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%H:%M:%S")
_STDERR_FORMAT = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
_FALLBACK_LOG_FILE = Path("/tmp/studiolink.log")

# Korreliert Log-Zeilen eines Prozesses (8 Hex-Zeichen, einmal pro Prozess)
_session_id: str = ""


def get_session_id() -> str:
    global _session_id
    if not _session_id:
        _session_id = uuid.uuid4().hex[:8]
    return _session_id


def get_logger() -> logging.Logger:
    return logger


def _open_log_file(primary: Path) -> RotatingFileHandler | None:
    for path in (primary, _FALLBACK_LOG_FILE):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        except OSError:
            continue
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(_FILE_FORMAT)
        return handler
    return None


def setup_logging(debug: bool = False) -> None:
    """Richtet die Handler einmalig ein; weitere Aufrufe setzen nur das Level.

    Args:
        debug: DEBUG-Level und zusätzliche Ausgabe auf stderr
    """
    # Lazy import: config → utils.paths → utils → logging
    from config import LOG_FILE

    get_session_id()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if logger.handlers:
        return

    file_handler = _open_log_file(LOG_FILE)
    if file_handler is not None:
        logger.addHandler(file_handler)

    # Ohne Logdatei bleibt stderr die einzige Spur
    if file_handler is None or debug:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        stderr_handler.setFormatter(_STDERR_FORMAT)
        logger.addHandler(stderr_handler)


def share_handlers(name: str) -> logging.Logger:
    """Leitet einen fremden Logger auf die studiolink-Handler um."""
    other = logging.getLogger(name)
    other.handlers = list(logger.handlers)
    other.setLevel(logger.level)
    other.propagate = False
    return other


def log(message: str) -> None:
    """Status-Meldung auf stderr; stdout bleibt für Daten (`studiolink capture -`)."""
    print(message, file=sys.stderr)


def error(message: str) -> None:
    print(f"Fehler: {message}", file=sys.stderr)
