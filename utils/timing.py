"""Zeitmessung und Formatierung für Log-Zeilen."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass

from .logging import get_logger, get_session_id


@dataclass
class Timing:
    """Ergebnis eines timed_operation-Blocks.

    detail wird vom Aufrufer gesetzt und hinter die Dauer geloggt
    (z.B. die PNG-Größe eines Captures).
    """

    name: str
    elapsed_ms: float = 0.0
    detail: str = ""


def format_duration(milliseconds: float) -> str:
    if milliseconds < 1000:
        return f"{milliseconds:.0f}ms"
    return f"{milliseconds / 1000:.2f}s"


def format_bytes(size: int) -> str:
    """PNG-/Plugin-Größen für Logs (B, KB, MB)."""
    if size >= 1_000_000:
        return f"{size / 1_000_000:.1f}MB"
    if size >= 1000:
        return f"{size / 1000:.0f}KB"
    return f"{size}B"


def log_preview(text: str, max_length: int = 100) -> str:
    """Einzeilige, gekürzte Fassung eines Texts für das Log."""
    single_line = " ".join(text.split())
    if len(single_line) <= max_length:
        return single_line
    return f"{single_line[:max_length]}..."


@contextmanager
def timed_operation(
    name: str,
    *,
    logger: logging.Logger | None = None,
    include_session: bool = True,
    slow_ms: float | None = None,
):
    """Misst einen Block und loggt "<name>: <dauer>[, detail]".

    Args:
        name: Log-Label
        logger: Ziel-Logger (default: studiolink)
        include_session: Session-ID voranstellen
        slow_ms: Ab dieser Dauer als WARNING statt INFO loggen

    Usage:
        with timed_operation("Capture", slow_ms=1000) as timing:
            png = provider.capture_window(window)
            timing.detail = format_bytes(len(png))
    """
    timing = Timing(name)
    failed = False
    start = time.perf_counter()
    try:
        yield timing
    except BaseException:
        failed = True
        raise
    finally:
        timing.elapsed_ms = (time.perf_counter() - start) * 1000
        parts = [f"{name}: {format_duration(timing.elapsed_ms)}"]
        if timing.detail:
            parts.append(timing.detail)
        if failed:
            parts.append("fehlgeschlagen")
        message = ", ".join(parts)
        if include_session:
            message = f"[{get_session_id()}] {message}"

        slow = slow_ms is not None and timing.elapsed_ms >= slow_ms
        (logger or get_logger()).log(logging.WARNING if slow else logging.INFO, message)
