"""Querschnitts-Helfer: Logging, Zeitmessung, Environment, Berechtigungen.

Hier nur logging und timing re-exportieren: config.py importiert
utils.paths und damit dieses Paket; Module, die selbst config importieren,
würden beim Start einen Import-Zyklus auslösen.
"""

from .logging import error, get_logger, get_session_id, log, setup_logging, share_handlers
from .timing import Timing, format_bytes, format_duration, log_preview, timed_operation

__all__ = [
    "Timing",
    "error",
    "format_bytes",
    "format_duration",
    "get_logger",
    "get_session_id",
    "log",
    "log_preview",
    "setup_logging",
    "share_handlers",
    "timed_operation",
]
