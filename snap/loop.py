"""Snap-to-Studio: hält das Companion-Fenster rechts neben Roblox Studio.

Ein Hintergrund-Thread pollt die Studio-Fensterbounds (~120 Hz) und
positioniert das eigene Fenster nur, wenn sich die Bounds geändert haben.
Der einzige geteilte Zustand ist SnapState (an/aus).
"""

import logging
import threading

from config import SNAP_POLL_INTERVAL, SNAP_WINDOW_WIDTH
from studio_platform.base import WindowBounds, WindowLocator, WindowMover
from studio_platform.windows import snap_frame

logger = logging.getLogger("studiolink.snap")


class SnapState:
    """An/Aus-Flag für Snap-Mode.

    Der Lock umschließt Prüfen+Bewegen im Loop und jeden Schreibzugriff,
    damit nach disable() kein Move mehr abgesetzt wird.
    """

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = threading.Event()
        self.lock = threading.RLock()
        if enabled:
            self._enabled.set()

    @property
    def enabled(self) -> bool:
        return self._enabled.is_set()

    def is_enabled(self) -> bool:
        return self._enabled.is_set()

    def enable(self) -> None:
        with self.lock:
            self._enabled.set()

    def disable(self) -> None:
        with self.lock:
            self._enabled.clear()

    def toggle(self) -> bool:
        """Schaltet um und gibt den neuen Zustand zurück."""
        with self.lock:
            if self._enabled.is_set():
                self._enabled.clear()
            else:
                self._enabled.set()
            return self._enabled.is_set()


class SnapLoop:
    """Poll-and-Reposition-Loop.

    Args:
        state: Geteilter SnapState (wird auch von der HTTP-Schicht geschaltet)
        locator: Liefert die Studio-Bounds (None = nicht gefunden)
        mover: Bewegt das Companion-Fenster
        interval: Poll-Intervall in Sekunden
        width: Breite des Companion-Fensters
    """

    def __init__(
        self,
        state: SnapState,
        locator: WindowLocator,
        mover: WindowMover,
        *,
        interval: float = SNAP_POLL_INTERVAL,
        width: int = SNAP_WINDOW_WIDTH,
    ) -> None:
        self.state = state
        self._locator = locator
        self._mover = mover
        self._interval = interval
        self._width = width
        self._last_bounds: WindowBounds | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # =========================================================================
    # Ein Tick
    # =========================================================================

    def tick(self) -> bool:
        """Ein Poll-Durchlauf. True wenn das Fenster bewegt wurde."""
        if not self.state.enabled:
            self._last_bounds = None
            return False

        bounds = self._safe_bounds()
        if bounds is None or bounds == self._last_bounds:
            return False

        with self.state.lock:
            if not self.state.enabled:
                self._last_bounds = None
                return False
            self._move_next_to(bounds)
        self._last_bounds = bounds
        return True

    def _safe_bounds(self) -> WindowBounds | None:
        try:
            return self._locator.studio_bounds()
        except Exception as e:
            logger.debug(f"Bounds-Abfrage fehlgeschlagen: {e}")
            return None

    def _move_next_to(self, bounds: WindowBounds) -> None:
        frame = snap_frame(bounds, self._width)
        try:
            self._mover.move(frame.x, frame.y, frame.width, frame.height)
        except Exception as e:
            logger.warning(f"Fenster konnte nicht positioniert werden: {e}")

    # =========================================================================
    # Steuerung
    # =========================================================================

    def snap_now(self) -> bool:
        """Sofort neben Studio positionieren (unabhängig von den letzten Bounds).

        Returns:
            False wenn Snap aus ist oder Studio nicht gefunden wurde
        """
        bounds = self._safe_bounds()
        if bounds is None:
            return False
        with self.state.lock:
            if not self.state.enabled:
                return False
            self._move_next_to(bounds)
        self._last_bounds = bounds
        return True

    def toggle(self) -> bool:
        """Snap-Mode umschalten; beim Einschalten sofort andocken."""
        enabled = self.state.toggle()
        if enabled:
            logger.info("Snap to Studio aktiviert")
            if not self.snap_now():
                logger.info("Roblox Studio nicht gefunden, docke an sobald sichtbar")
        else:
            logger.info("Snap to Studio deaktiviert")
        return enabled

    def run(self) -> None:
        """Blockierende Loop bis stop()."""
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self._interval)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, daemon=True, name="SnapLoop")
        self._thread.start()
        logger.debug(f"SnapLoop gestartet ({self._interval * 1000:.0f}ms)")

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
