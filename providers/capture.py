"""Capture-Provider für das Roblox-Studio-Fenster.

macOS: CGWindowListCreateImage (alle macOS-Versionen mit Screen-Recording-
Berechtigung), Fallback auf ScreenCaptureKit (SCScreenshotManager, macOS 14+).
Ergebnis sind immer PNG-Bytes.
"""

import logging
import threading

from config import (
    CAPTURE_MAX_HEIGHT,
    CAPTURE_MAX_WIDTH,
    CAPTURE_SCK_TIMEOUT,
    CAPTURE_TARGET_TOKEN,
)
from studio_platform.base import WindowInfo
from studio_platform.windows import find_studio_window
from utils.timing import format_bytes

logger = logging.getLogger("studiolink.providers.capture")

# kCVPixelFormatType_32BGRA ('BGRA')
_PIXEL_FORMAT_32BGRA = 0x42475241


def encode_png(cg_image) -> bytes | None:
    """CGImage → PNG via NSBitmapImageRep."""
    from AppKit import NSBitmapImageRep, NSBitmapImageFileTypePNG  # type: ignore[import-not-found]

    rep = NSBitmapImageRep.alloc().initWithCGImage_(cg_image)
    if rep is None:
        return None
    data = rep.representationUsingType_properties_(NSBitmapImageFileTypePNG, {})
    if data is None:
        return None
    return bytes(data)


class MacOSCaptureProvider:
    """Fenster-Capture via Quartz, ScreenCaptureKit als Fallback."""

    name = "macos"

    def __init__(self, token: str = CAPTURE_TARGET_TOKEN, sck_timeout: float = CAPTURE_SCK_TIMEOUT) -> None:
        self._token = token
        self._sck_timeout = sck_timeout

    def find_target_window(self) -> WindowInfo | None:
        window = find_studio_window(self._token)
        if window is None:
            logger.info("Roblox Studio Fenster nicht gefunden")
        else:
            logger.debug(f"Studio-Fenster gefunden: id={window.window_id} ({window.owner})")
        return window

    def capture_window(self, window: WindowInfo) -> bytes | None:
        png = self._capture_with_window_list(window)
        if png:
            return png
        return self._capture_with_screencapturekit()

    def _capture_with_window_list(self, window: WindowInfo) -> bytes | None:
        try:
            from Quartz import (  # type: ignore[import-not-found]
                CGImageGetHeight,
                CGImageGetWidth,
                CGRectMake,
                CGWindowListCreateImage,
                kCGWindowImageBoundsIgnoreFraming,
                kCGWindowImageNominalResolution,
                kCGWindowListOptionIncludingWindow,
            )
        except ImportError:
            logger.debug("PyObjC/Quartz nicht verfügbar")
            return None

        b = window.bounds
        image = CGWindowListCreateImage(
            CGRectMake(b.x, b.y, b.width, b.height),
            kCGWindowListOptionIncludingWindow,
            window.window_id,
            kCGWindowImageBoundsIgnoreFraming | kCGWindowImageNominalResolution,
        )
        if image is None:
            logger.warning("CGWindowListCreateImage lieferte kein Bild")
            return None

        png = encode_png(image)
        if not png:
            logger.warning("PNG-Encoding fehlgeschlagen")
            return None
        logger.info(
            f"Captured {format_bytes(len(png))} "
            f"({CGImageGetWidth(image)}x{CGImageGetHeight(image)}) via CGWindowList"
        )
        return png

    def _capture_with_screencapturekit(self) -> bytes | None:
        try:
            from ScreenCaptureKit import (  # type: ignore[import-not-found]
                SCContentFilter,
                SCShareableContent,
                SCStreamConfiguration,
            )
            from ScreenCaptureKit import SCScreenshotManager  # type: ignore[import-not-found]
        except ImportError:
            # SCScreenshotManager gibt es erst ab macOS 14
            logger.debug("ScreenCaptureKit/SCScreenshotManager nicht verfügbar")
            return None

        done = threading.Event()
        result: dict[str, bytes | None] = {"png": None}
        token = self._token

        def _on_image(image, error) -> None:
            try:
                if error is not None or image is None:
                    logger.warning(f"SCK Capture fehlgeschlagen: {error}")
                    return
                result["png"] = encode_png(image)
            finally:
                done.set()

        def _on_content(content, error) -> None:
            if error is not None or content is None:
                logger.warning(f"SCShareableContent fehlgeschlagen: {error}")
                done.set()
                return

            target = None
            for candidate in content.windows():
                app = candidate.owningApplication()
                app_name = (app.applicationName() if app else "") or ""
                bundle_id = (app.bundleIdentifier() if app else "") or ""
                if token in app_name.lower() or token in bundle_id.lower():
                    target = candidate
                    break

            if target is None:
                logger.info("Roblox Studio Fenster via SCK nicht gefunden")
                done.set()
                return

            frame = target.frame()
            config = SCStreamConfiguration.alloc().init()
            config.setWidth_(min(int(frame.size.width), CAPTURE_MAX_WIDTH))
            config.setHeight_(min(int(frame.size.height), CAPTURE_MAX_HEIGHT))
            config.setShowsCursor_(False)
            config.setPixelFormat_(_PIXEL_FORMAT_32BGRA)

            content_filter = SCContentFilter.alloc().initWithDesktopIndependentWindow_(target)
            SCScreenshotManager.captureImageWithFilter_configuration_completionHandler_(
                content_filter, config, _on_image
            )

        SCShareableContent.getShareableContentExcludingDesktopWindows_onScreenWindowsOnly_completionHandler_(
            False, True, _on_content
        )

        if not done.wait(self._sck_timeout):
            logger.warning(f"SCK Capture Timeout nach {self._sck_timeout:.0f}s")
            return None

        png = result["png"]
        if png:
            logger.info(f"Captured {format_bytes(len(png))} via SCK")
        return png


class StubCaptureProvider:
    """Nicht-macOS: kein Zielfenster, keine Captures."""

    name = "stub"

    def find_target_window(self) -> WindowInfo | None:
        return None

    def capture_window(self, window: WindowInfo) -> bytes | None:
        return None


__all__ = ["MacOSCaptureProvider", "StubCaptureProvider", "encode_png"]
