#!/usr/bin/env python3
"""
CLI für StudioLink.

Kommandos für Plugin-Verwaltung, Berechtigungen und manuelle Tests der
nativen Provider ohne laufenden Server. Status auf stderr, Daten auf stdout.

Usage:
    python studiolink.py serve --app bakable
    python studiolink.py install-plugin
    python studiolink.py permissions --request
    python studiolink.py capture studio.png
    python studiolink.py say "Hello from Studio"
"""

import sys
import time
from pathlib import Path
from typing import Annotated

import typer

from cli.types import Capability, PermissionState
from config import get_app_profile
from errors import StudioLinkError
from plugin.installer import PluginInstaller
from utils.env import load_environment
from utils.logging import error, log, setup_logging
from utils.permissions import PRIVACY_ANCHORS, open_privacy_settings

app = typer.Typer(
    help="Companion-App für Roblox Studio: Capture, Speech und Plugin-Verwaltung",
    add_completion=False,
)

# Obergrenze fürs Warten auf das Ende der Sprachausgabe
SAY_TIMEOUT_BASE = 5.0
SAY_TIMEOUT_PER_CHAR = 0.15

AppOption = Annotated[
    str | None,
    typer.Option("--app", envvar="STUDIOLINK_APP", help="App-Profil (detai, bakable)"),
]


def _installer(app_name: str | None) -> PluginInstaller:
    try:
        return PluginInstaller.for_profile(get_app_profile(app_name))
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


@app.callback()
def _main(
    ctx: typer.Context,
    debug: Annotated[bool, typer.Option(help="Debug-Logging aktivieren")] = False,
) -> None:
    load_environment()
    setup_logging(debug=debug)
    ctx.obj = {"debug": debug}


@app.command()
def serve(
    ctx: typer.Context,
    app_name: AppOption = None,
    port: Annotated[int | None, typer.Option(help="Port (default: Profil-Port)")] = None,
    snap: Annotated[bool, typer.Option(help="Snap-to-Studio aktivieren")] = False,
    headless: Annotated[bool, typer.Option(help="Ohne Fenster laufen")] = False,
) -> None:
    """Startet den Companion-Daemon."""
    import studiolink_daemon

    argv: list[str] = []
    if app_name:
        argv += ["--app", app_name]
    if port:
        argv += ["--port", str(port)]
    if snap:
        argv.append("--snap")
    if headless:
        argv.append("--headless")
    if ctx.obj and ctx.obj.get("debug"):
        argv.append("--debug")
    raise typer.Exit(studiolink_daemon.main(argv))


@app.command("install-plugin")
def install_plugin(app_name: AppOption = None) -> None:
    """Installiert oder aktualisiert das Studio-Plugin."""
    installer = _installer(app_name)
    try:
        result = installer.install()
    except StudioLinkError as e:
        error(e.message)
        raise typer.Exit(1)
    log(f"Plugin {result.value}: {installer.plugin_path}")


@app.command("uninstall-plugin")
def uninstall_plugin(app_name: AppOption = None) -> None:
    """Entfernt das Studio-Plugin."""
    installer = _installer(app_name)
    try:
        removed = installer.uninstall()
    except StudioLinkError as e:
        error(e.message)
        raise typer.Exit(1)
    log("Plugin entfernt" if removed else "Plugin war nicht installiert")


@app.command("plugin-status")
def plugin_status(
    app_name: AppOption = None,
    open_folder: Annotated[bool, typer.Option("--open", help="Plugins-Ordner öffnen")] = False,
) -> None:
    """Zeigt, ob das Plugin installiert ist."""
    installer = _installer(app_name)
    state = "installiert" if installer.is_installed() else "nicht installiert"
    typer.echo(f"{state}: {installer.plugin_path or '(kein Plugins-Verzeichnis)'}")
    if open_folder:
        try:
            installer.open_folder()
        except StudioLinkError as e:
            error(e.message)
            raise typer.Exit(1)


@app.command()
def permissions(
    request: Annotated[bool, typer.Option(help="Fehlende Berechtigungen anfragen")] = False,
    open_settings: Annotated[bool, typer.Option("--open", help="System Settings öffnen")] = False,
) -> None:
    """Zeigt den Zustand der OS-Berechtigungen."""
    from studio_platform import get_permission_gate

    gate = get_permission_gate()
    for capability in Capability:
        state = gate.get_permission_state(capability)
        typer.echo(f"{capability.value}: {state.value}")
        if state == PermissionState.granted:
            continue
        if request:
            gate.request_permission(capability)
        if open_settings:
            open_privacy_settings(PRIVACY_ANCHORS[capability])


@app.command()
def capture(
    output: Annotated[Path, typer.Argument(help="Zieldatei (PNG), '-' für stdout")],
) -> None:
    """Nimmt das Roblox-Studio-Fenster auf."""
    from providers import get_capture_provider
    from services import CaptureService
    from studio_platform import get_permission_gate

    service = CaptureService(get_permission_gate(), get_capture_provider())
    try:
        png = service.capture_viewport()
    except StudioLinkError as e:
        error(f"{e.message} ({e.code})")
        raise typer.Exit(1)

    if str(output) == "-":
        sys.stdout.buffer.write(png)
        sys.stdout.buffer.flush()
        return
    output.write_bytes(png)
    log(f"Gespeichert: {output} ({len(png)} Bytes)")


@app.command()
def say(text: Annotated[str, typer.Argument(help="Zu sprechender Text")]) -> None:
    """Spricht Text über die System-Sprachausgabe."""
    from providers import get_speech_provider
    from services import SpeechService
    from studio_platform import get_permission_gate

    service = SpeechService(get_permission_gate(), get_speech_provider())
    result = service.speak(text)
    if not result.success:
        error(result.message)
        raise typer.Exit(1)
    log(result.message)

    # Ausgabe läuft asynchron; Prozess erst danach beenden
    deadline = time.monotonic() + SAY_TIMEOUT_BASE + len(text) * SAY_TIMEOUT_PER_CHAR
    time.sleep(0.2)
    while service.is_speaking() and time.monotonic() < deadline:
        time.sleep(0.1)


if __name__ == "__main__":
    app()
