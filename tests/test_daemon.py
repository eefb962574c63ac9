"""Tests für studiolink_daemon.py – Start-Sequenz ohne echten Server."""

import logging
import socket
import sys
from unittest.mock import patch

import pytest

from config import get_app_profile
from errors import InstallError
from studiolink_daemon import ServerBindError, StudioLinkDaemon, bind_socket, main

from conftest import FakeCaptureProvider, FakeSpeechProvider


@pytest.fixture
def occupied_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock.getsockname()[1]
    sock.close()


@pytest.fixture
def fake_platform(make_gate, plugin_env):
    """Ersetzt Gate und Provider, damit keine nativen Frameworks geladen werden."""
    gate, _ = make_gate()
    with patch("studiolink_daemon.get_permission_gate", return_value=gate), patch(
        "studiolink_daemon.get_capture_provider", return_value=FakeCaptureProvider()
    ), patch("studiolink_daemon.get_speech_provider", return_value=FakeSpeechProvider()):
        yield


class TestBindSocket:
    def test_port_in_use(self, occupied_port):
        with pytest.raises(ServerBindError) as exc_info:
            bind_socket("127.0.0.1", occupied_port)
        assert str(occupied_port) in exc_info.value.message

    def test_free_port(self):
        sock = bind_socket("127.0.0.1", 0)
        try:
            assert sock.getsockname()[1] > 0
        finally:
            sock.close()


class TestStudioLinkDaemon:
    def test_install_failure_is_logged(self, fake_platform, caplog):
        daemon = StudioLinkDaemon(get_app_profile("detai"), install_plugin=True)

        with patch.object(daemon.installer, "install", side_effect=InstallError("disk full")):
            with caplog.at_level(logging.ERROR, logger="studiolink"):
                daemon.install_plugin()

        assert any("disk full" in record.message for record in caplog.records)

    def test_unwritable_plugins_dir_does_not_crash(self, fake_platform, caplog):
        daemon = StudioLinkDaemon(get_app_profile("detai"), install_plugin=True)

        with patch(
            "plugin.installer.tempfile.mkstemp",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            with caplog.at_level(logging.ERROR, logger="studiolink"):
                daemon.install_plugin()

        assert any("Permission denied" in record.message for record in caplog.records)

    def test_bind_failure_returns_1(self, fake_platform, occupied_port):
        daemon = StudioLinkDaemon(
            get_app_profile("detai"), port=occupied_port, install_plugin=False, headless=True
        )
        with patch.object(StudioLinkDaemon, "_run_headless") as mock_run:
            assert daemon.run() == 1
        mock_run.assert_not_called()

    def test_install_runs_before_bind(self, fake_platform, plugin_env, occupied_port):
        """Plugin wird auch installiert, wenn der Server danach nicht starten kann."""
        _, plugins_dir = plugin_env
        daemon = StudioLinkDaemon(get_app_profile("bakable"), port=occupied_port, headless=True)

        assert daemon.run() == 1
        assert (plugins_dir / "Bakable.rbxm").is_file()

    def test_headless_run(self, fake_platform):
        daemon = StudioLinkDaemon(get_app_profile("detai"), install_plugin=False, headless=True)
        with patch("studiolink_daemon.bind_socket") as mock_bind, patch.object(
            StudioLinkDaemon, "_run_headless", return_value=0
        ) as mock_run:
            assert daemon.run() == 0

        mock_bind.assert_called_once_with("127.0.0.1", 4850)
        mock_run.assert_called_once_with(mock_bind.return_value)

    def test_snap_state_from_flag(self, fake_platform):
        daemon = StudioLinkDaemon(get_app_profile("detai"), snap=True)
        assert daemon.snap_state.enabled is True

    def test_context_wires_snap_loop(self, fake_platform):
        daemon = StudioLinkDaemon(get_app_profile("detai"))
        loop = daemon.start_snap_loop()
        try:
            context = daemon.build_context()
            assert context.snap is loop
            assert context.app_name == "DetAI"
        finally:
            daemon.cleanup()
        assert loop.running is False


class TestMain:
    @pytest.fixture(autouse=True)
    def no_side_effects(self, monkeypatch):
        monkeypatch.setattr(sys, "excepthook", sys.excepthook)
        with patch("studiolink_daemon.load_environment"), patch(
            "studiolink_daemon.setup_logging"
        ), patch("studiolink_daemon.share_handlers"):
            yield

    def test_port_in_use_exit_code(self, fake_platform, occupied_port):
        assert main(["--headless", "--no-install", "--port", str(occupied_port)]) == 1

    def test_env_defaults(self, fake_platform, monkeypatch):
        monkeypatch.setenv("STUDIOLINK_APP", "bakable")
        monkeypatch.setenv("STUDIOLINK_PORT", "4999")
        monkeypatch.setenv("STUDIOLINK_SNAP", "true")
        monkeypatch.setenv("STUDIOLINK_INSTALL_PLUGIN", "false")

        with patch.object(StudioLinkDaemon, "run", autospec=True, return_value=0) as mock_run:
            assert main(["--headless"]) == 0

        daemon = mock_run.call_args.args[0]
        assert daemon.profile.key == "bakable"
        assert daemon.port == 4999
        assert daemon.snap_state.enabled is True
        assert daemon.install_plugin_on_start is False

    def test_cli_beats_env(self, fake_platform, monkeypatch):
        monkeypatch.setenv("STUDIOLINK_PORT", "4999")

        with patch.object(StudioLinkDaemon, "run", autospec=True, return_value=0) as mock_run:
            main(["--port", "5001", "--host", "0.0.0.0"])

        daemon = mock_run.call_args.args[0]
        assert daemon.port == 5001
        assert daemon.host == "0.0.0.0"

    def test_invalid_app(self, fake_platform):
        with pytest.raises(SystemExit):
            main(["--app", "unknown"])
