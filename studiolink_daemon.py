#!/usr/bin/env python3
"""
studiolink_daemon.py – Companion-Daemon für Roblox Studio.

Startet beim Launch:
- Plugin-Installation (Fehler werden geloggt, kein Abbruch)
- Snap-to-Studio Loop (Hintergrund-Thread)
- Lokalen HTTP-Server (Bind-Fehler beenden die App)

Threads:
- Main Thread: NSApplication Event-Loop + Companion-Fenster (macOS)
- HTTPServer: uvicorn auf vorab gebundenem Socket
- SnapLoop: Fensterbounds pollen und andocken

Ohne AppKit (oder mit --headless) läuft uvicorn direkt auf dem Main-Thread.

Nutzung:
    python studiolink_daemon.py
    python studiolink_daemon.py --app bakable --snap
    python studiolink_daemon.py --headless --port 4851
"""

from __future__ import annotations

import atexit
import logging
import socket
import sys
import threading

import uvicorn

from config import (
    DEFAULT_HOST,
    SNAP_WINDOW_MIN_HEIGHT,
    SNAP_WINDOW_WIDTH,
    AppProfile,
    get_app_profile,
)
from errors import StudioLinkError
from plugin.installer import PluginInstaller
from providers import get_capture_provider, get_speech_provider
from server import CompanionContext, create_app
from services import CaptureService, SpeechService
from snap import SnapLoop, SnapState
from studio_platform import (
    get_permission_gate,
    get_platform,
    get_window_locator,
    get_window_mover,
)
from utils.env import EnvSettings, load_environment
from utils.logging import setup_logging, share_handlers

logger = logging.getLogger("studiolink")


class ServerBindError(StudioLinkError):
    """Port belegt oder Host nicht bindbar – nicht behebbar."""


def bind_socket(host: str, port: int) -> socket.socket:
    """Bindet den Server-Socket vorab, damit Bind-Fehler im Main-Thread landen.

    Raises:
        ServerBindError: Wenn der Port nicht gebunden werden kann
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise ServerBindError(f"Cannot bind {host}:{port}: {e}") from e
    return sock


class StudioLinkDaemon:
    """Verdrahtet Permission-Gate, Provider, Services, Snap-Loop und HTTP-Server."""

    def __init__(
        self,
        profile: AppProfile,
        host: str = DEFAULT_HOST,
        port: int | None = None,
        snap: bool = False,
        install_plugin: bool = True,
        headless: bool = False,
        speech_locale: str | None = None,
    ) -> None:
        self.profile = profile
        self.host = host
        self.port = port or profile.port
        self.install_plugin_on_start = install_plugin
        self.headless = headless

        gate = get_permission_gate()
        self.capture = CaptureService(gate, get_capture_provider())
        self.speech = SpeechService(gate, get_speech_provider(locale=speech_locale))
        self.installer = PluginInstaller.for_profile(profile)

        self.snap_state = SnapState(enabled=snap)
        self.snap_loop: SnapLoop | None = None
        self._window = None
        self._server: uvicorn.Server | None = None
        self._server_thread: threading.Thread | None = None
        self._cleaned_up = False

    # =========================================================================
    # Startup-Schritte
    # =========================================================================

    def install_plugin(self) -> None:
        """Plugin beim Start installieren; Fehler nur loggen."""
        try:
            result = self.installer.install()
        except StudioLinkError as e:
            logger.error(f"Plugin-Installation fehlgeschlagen: {e.message}")
            return
        logger.info(f"Plugin: {result.value} ({self.installer.plugin_path})")

    def build_context(self) -> CompanionContext:
        return CompanionContext(
            capture=self.capture,
            speech=self.speech,
            installer=self.installer,
            snap=self.snap_loop,
            app_name=self.profile.display_name,
        )

    def start_snap_loop(self, window=None) -> SnapLoop:
        mover = get_window_mover(window, guard=self.snap_state.is_enabled)
        self.snap_loop = SnapLoop(self.snap_state, get_window_locator(), mover)
        self.snap_loop.start()
        return self.snap_loop

    def _create_server(self) -> uvicorn.Server:
        app = create_app(self.build_context())
        config = uvicorn.Config(app, log_config=None, access_log=False)
        self._server = uvicorn.Server(config)
        return self._server

    def _create_companion_window(self):
        """Schlichtes Companion-Fenster, das der Snap-Loop neben Studio hält."""
        from AppKit import (  # type: ignore[import-not-found]
            NSBackingStoreBuffered,
            NSMakeRect,
            NSWindow,
            NSWindowStyleMaskClosable,
            NSWindowStyleMaskMiniaturizable,
            NSWindowStyleMaskResizable,
            NSWindowStyleMaskTitled,
        )

        style = (
            NSWindowStyleMaskTitled
            | NSWindowStyleMaskClosable
            | NSWindowStyleMaskMiniaturizable
            | NSWindowStyleMaskResizable
        )
        window = NSWindow.alloc().initWithContentRect_styleMask_backing_defer_(
            NSMakeRect(120, 120, SNAP_WINDOW_WIDTH, 640),
            style,
            NSBackingStoreBuffered,
            False,
        )
        window.setTitle_(self.profile.display_name)
        window.setMinSize_((SNAP_WINDOW_WIDTH, SNAP_WINDOW_MIN_HEIGHT))
        window.setReleasedWhenClosed_(False)
        window.makeKeyAndOrderFront_(None)
        return window

    # =========================================================================
    # Run
    # =========================================================================

    def cleanup(self) -> None:
        if self._cleaned_up:
            return
        self._cleaned_up = True
        logger.info("Beende StudioLink...")
        if self.snap_loop is not None:
            self.snap_loop.stop()
        if self._server is not None:
            self._server.should_exit = True
        try:
            self.speech.stop_listening()
            self.speech.stop_speaking()
        except Exception as e:
            logger.debug(f"Speech-Cleanup fehlgeschlagen: {e}")

    def _log_start_info(self) -> None:
        logger.info(f"{self.profile.display_name} Companion startet...")
        print(f"🔗 {self.profile.display_name} Companion läuft", file=sys.stderr)
        print(f"   API: http://{self.host}:{self.port}", file=sys.stderr)
        print(f"   Plugin: {self.installer.plugin_path or '(unbekannt)'}", file=sys.stderr)
        print("   Beenden: Ctrl+C", file=sys.stderr)

    def run(self) -> int:
        """Startet Daemon (blockiert). Gibt den Exit-Code zurück."""
        if self.install_plugin_on_start:
            self.install_plugin()

        try:
            sock = bind_socket(self.host, self.port)
        except ServerBindError as e:
            logger.critical(f"Capture-Server konnte nicht starten: {e.message}")
            return 1

        use_appkit = not self.headless and get_platform() == "macos"
        if use_appkit:
            try:
                import AppKit  # type: ignore[import-not-found]  # noqa: F401
            except ImportError:
                logger.warning("PyObjC/AppKit nicht verfügbar, starte headless")
                use_appkit = False

        self._log_start_info()
        if use_appkit:
            return self._run_with_appkit(sock)
        return self._run_headless(sock)

    def _run_headless(self, sock: socket.socket) -> int:
        self.start_snap_loop()
        server = self._create_server()
        atexit.register(self.cleanup)
        try:
            server.run(sockets=[sock])
        finally:
            self.cleanup()
        return 0

    def _run_with_appkit(self, sock: socket.socket) -> int:
        import signal

        from AppKit import NSApplication  # type: ignore[import-not-found]
        from Foundation import NSTimer  # type: ignore[import-not-found]

        app = NSApplication.sharedApplication()
        app.setActivationPolicy_(0)

        self._window = self._create_companion_window()
        self.start_snap_loop(self._window)

        server = self._create_server()
        self._server_thread = threading.Thread(
            target=server.run,
            kwargs={"sockets": [sock]},
            daemon=True,
            name="HTTPServer",
        )
        self._server_thread.start()

        # Ctrl+C: Timer lässt den Interpreter regelmäßig Signale prüfen
        NSTimer.scheduledTimerWithTimeInterval_repeats_block_(0.1, True, lambda _: None)

        def signal_handler(sig, frame):
            self.cleanup()
            app.terminate_(None)

        signal.signal(signal.SIGINT, signal_handler)
        atexit.register(self.cleanup)

        logger.info(f"{self.profile.display_name} bereit (Port {self.port})")
        app.run()
        return 0


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """CLI-Einstiegspunkt."""
    import argparse

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical(
            f"Uncaught exception: {exc_type.__name__}: {exc_value}",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = handle_exception

    # Environment laden bevor Argumente definiert werden (für Defaults)
    load_environment()

    parser = argparse.ArgumentParser(
        description="studiolink_daemon – Companion-App für Roblox Studio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Beispiele:
  %(prog)s                      # Mit Defaults aus .env
  %(prog)s --app bakable        # Bakable-Profil (Plugin Bakable.rbxm)
  %(prog)s --snap               # Fenster folgt Roblox Studio
  %(prog)s --headless           # Nur HTTP-Server, kein Fenster
        """,
    )
    parser.add_argument("--app", default=None, help="App-Profil (default: STUDIOLINK_APP oder 'detai')")
    parser.add_argument("--host", default=None, help=f"Bind-Adresse (default: STUDIOLINK_HOST oder {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=None, help="Port (default: STUDIOLINK_PORT oder Profil-Port)")
    parser.add_argument("--snap", action="store_true", default=None, help="Snap-to-Studio beim Start aktivieren")
    parser.add_argument("--no-install", action="store_true", help="Plugin beim Start nicht installieren")
    parser.add_argument("--headless", action="store_true", help="Ohne NSApplication/Fenster laufen")
    parser.add_argument("--debug", action="store_true", default=None, help="Debug-Logging auf stderr")

    args = parser.parse_args(argv)

    env = EnvSettings.from_env()
    setup_logging(debug=args.debug if args.debug is not None else env.debug)
    share_handlers("uvicorn")

    try:
        profile = get_app_profile(args.app or env.app)
    except ValueError as e:
        parser.error(str(e))

    daemon = StudioLinkDaemon(
        profile,
        host=args.host or env.host or DEFAULT_HOST,
        port=args.port or env.port or profile.port,
        snap=args.snap if args.snap is not None else env.snap,
        install_plugin=env.install_plugin and not args.no_install,
        headless=args.headless,
        speech_locale=env.speech_locale,
    )
    return daemon.run()


if __name__ == "__main__":
    sys.exit(main())
